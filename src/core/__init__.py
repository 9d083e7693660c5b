"""
===============================================================================
LOGSUM BENCH - Core Utilities
===============================================================================
Shared building blocks for the summation engine and the benchmark harness.

Modules:
    constants   -- Default sizes, tolerances and sampling intervals
    exceptions  -- LogSumError hierarchy (DomainError, EmptyInputError, ...)
    functional  -- Generic per-element map / replicate primitives
===============================================================================
"""
