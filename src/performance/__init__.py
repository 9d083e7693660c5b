"""
performance - Measuring and Diagnosing the Alternating Log-Sum Variants

This package times the summation variants against each other and explains the
results:

    benchmarks  - Benchmarking harness: repeated timed calls per variant over
                  one shared read-only input, comparison tables sorted by
                  elapsed time, peak-memory comparison, a scaling study over
                  several input sizes, and CSV / PNG / Markdown output.

    profiler    - Sampling profiler that periodically records the call stack
                  of a running variant and aggregates self time and total
                  time per frame, to attribute cost within a slow variant to
                  the step that causes it.

Together these show that two implementations with the same O(n) arithmetic
can differ by an order of magnitude depending on whether each element is
handled in C or through a Python-level function call.
"""
