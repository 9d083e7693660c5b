"""
inputs.py - Input sequences and validation shared by every summation variant.

All variants accept any 1-D sequence of strictly positive numbers (list,
tuple, range, ndarray).  :func:`as_positive_array` is the single gate that
turns such a sequence into a float64 array and enforces the domain: the
logarithm of an element <= 0 (or NaN) is undefined, an infinite element makes
the alternating sum NaN, and the sum over an empty sequence is refused.
"""

from __future__ import annotations

import math
from typing import Optional, Sequence, Union

import numpy as np

from core.constants import FLOAT_DTYPE, INDEX_DTYPE
from core.exceptions import DomainError, EmptyInputError

ArrayLike = Union[Sequence[float], np.ndarray, range]


def make_input_sequence(n: int) -> np.ndarray:
    """
    Return the canonical benchmark input ``1..n`` as a read-only int64 array.

    The array is flagged non-writeable so a variant that tried to modify the
    shared input would fail loudly instead of corrupting later runs.
    """
    if n < 0:
        raise ValueError(f"sequence length must be non-negative, got {n}")
    if n == 0:
        raise EmptyInputError("requested an input sequence of length 0")
    seq = np.arange(1, n + 1, dtype=INDEX_DTYPE)
    seq.setflags(write=False)
    return seq


def as_positive_array(ind: ArrayLike) -> np.ndarray:
    """
    Validate *ind* and return it as a 1-D float64 array.

    Raises
    ------
    ValueError
        If *ind* is not one-dimensional.
    EmptyInputError
        If *ind* has no elements.
    DomainError
        If any element is <= 0, NaN or infinite.  The reported position is
        1-based.
    """
    values = np.asarray(ind, dtype=FLOAT_DTYPE)
    if values.ndim != 1:
        raise ValueError(f"expected a 1-D sequence, got shape {values.shape}")
    if values.shape[0] == 0:
        raise EmptyInputError()

    # NaN compares False; inf would make the sum inf - inf = NaN.
    bad = ~(np.isfinite(values) & (values > 0.0))
    if bad.any():
        idx = int(np.argmax(bad))
        raise DomainError(idx + 1, float(values[idx]))
    return values


def log_scale(values: np.ndarray) -> float:
    """Magnitude used to turn a relative tolerance into an absolute one."""
    return max(float(np.sum(np.abs(np.log(values)))), 1.0)


def rescale_for_base(total: float, base: Optional[float]) -> float:
    """
    Convert a sum of natural logarithms to logarithms in *base*.

    ``base=None`` keeps natural logarithms.
    """
    if base is None:
        return float(total)
    if not base > 0 or base == 1:
        raise ValueError(f"logarithm base must be positive and != 1, got {base!r}")
    return float(total) / math.log(base)
