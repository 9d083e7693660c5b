"""
===============================================================================
LOGSUM BENCH - Error Types
===============================================================================
Every error derives from LogSumError so callers (the harness in independent
mode, the command line) can catch the whole family at once.  The value errors
also subclass ValueError, which is what plain numeric code would have raised
for the same bad input.
===============================================================================
"""


class LogSumError(Exception):
    """Base class for all alternating log-sum errors."""


class DomainError(LogSumError, ValueError):
    """An input element is <= 0, NaN or infinite, so its log term is unusable."""

    def __init__(self, position: int, value: float):
        self.position = position
        self.value = value
        super().__init__(
            f"log undefined for element {value!r} at position {position} "
            f"(all elements must be finite and strictly positive)"
        )


class EmptyInputError(LogSumError, ValueError):
    """
    The input sequence is empty.

    The alternating sum over nothing is mathematically 0, but an empty input
    almost always means a benchmark was configured with the wrong size, so
    it is refused instead of silently returning 0.
    """

    def __init__(self, message: str = "input sequence is empty"):
        super().__init__(message)


class VariantMismatchError(LogSumError, ArithmeticError):
    """Two summation variants disagree beyond the configured tolerance."""

    def __init__(self, name: str, reference: str, diff: float, limit: float):
        self.name = name
        self.reference = reference
        self.diff = diff
        self.limit = limit
        super().__init__(
            f"variant '{name}' differs from '{reference}' by {diff:.3e} "
            f"(limit {limit:.3e})"
        )
