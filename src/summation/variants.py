"""
variants.py - Five ways to compute the alternating-sign sum of logarithms

    S(ind) = log(ind[1]) - log(ind[2]) + log(ind[3]) - ...

i.e. the sign of each term is +1 at odd 1-based positions and -1 at even
ones.  All five functions return the same float for the same input (up to
floating-point rounding) and none of them modifies its argument.  They differ
only in how much work each element costs:

    1. loop       - One pass, scalar accumulator, compiled with numba.
                    O(n) time, O(1) extra space.
    2. map        - Per-element signed-log function dispatched through the
                    generic ``sapply`` primitive, then summed.  One Python
                    call per element plus a length-n intermediate.
    3. replicate  - Sign array built by ``replicate(n, lambda: 1.0)``, even
                    positions overwritten with -1, multiplied by log(values)
                    and summed.  Looks vectorized, but the construction step
                    still pays one Python call per element.
    4. recycle    - log(values) times the pattern [+1, -1] recycled to
                    length n by ``np.resize``.  Fully native.
    5. fill       - Same as (3) but the sign array comes from ``np.ones``.
                    Shows that the cost of (3) lies in how the array was
                    built, not in the sign-and-multiply approach itself.

Every variant takes an optional ``base`` (natural logarithms by default).

Expected ordering for large n: (1), (4), (5) within a small factor of one
another; (2) and (3) a multiple slower.  Run ``python main.py`` to measure it.
"""

from __future__ import annotations

import math
from typing import Optional

import numpy as np
from numba import njit

from core.constants import FLOAT_DTYPE, SIGN_PATTERN
from core.functional import replicate, sapply
from summation.inputs import ArrayLike, as_positive_array, rescale_for_base


# ---------------------------------------------------------------------------
# 1. Iterative accumulation
# ---------------------------------------------------------------------------

@njit
def _accumulate_signed_logs(values):
    total = 0.0
    for k in range(values.shape[0]):
        # k is 0-based: even k is an odd 1-based position
        if k % 2 == 0:
            total += math.log(values[k])
        else:
            total -= math.log(values[k])
    return total


def alt_log_sum_loop(ind: ArrayLike, base: Optional[float] = None) -> float:
    """Single compiled pass with a running accumulator."""
    values = as_positive_array(ind)
    return rescale_for_base(_accumulate_signed_logs(values), base)


# ---------------------------------------------------------------------------
# 2. Per-element functional mapping
# ---------------------------------------------------------------------------

def _signed_log(position: int, value: float) -> float:
    """Signed logarithm of one element; *position* is 0-based."""
    if position % 2 == 0:
        return math.log(value)
    return -math.log(value)


def alt_log_sum_map(ind: ArrayLike, base: Optional[float] = None) -> float:
    """Map :func:`_signed_log` over (position, value) pairs, then reduce."""
    values = as_positive_array(ind)
    terms = sapply(_signed_log, np.arange(values.shape[0]), values)
    return rescale_for_base(np.sum(terms), base)


# ---------------------------------------------------------------------------
# 3. Sign-array multiplication, sign array built by replicate()
# ---------------------------------------------------------------------------

def alt_log_sum_replicate(ind: ArrayLike, base: Optional[float] = None) -> float:
    values = as_positive_array(ind)
    signs = replicate(values.shape[0], lambda: 1.0)
    signs[1::2] = -1.0
    return rescale_for_base(np.sum(signs * np.log(values)), base)


# ---------------------------------------------------------------------------
# 4. Recycled [+1, -1] pattern
# ---------------------------------------------------------------------------

def alt_log_sum_recycle(ind: ArrayLike, base: Optional[float] = None) -> float:
    """
    Multiply by ``[+1, -1]`` recycled to the input length.

    ``np.resize`` repeats its argument cyclically to fill the requested
    shape in C, so no Python code runs per element.
    """
    values = as_positive_array(ind)
    signs = np.resize(np.asarray(SIGN_PATTERN, dtype=FLOAT_DTYPE), values.shape[0])
    return rescale_for_base(np.sum(signs * np.log(values)), base)


# ---------------------------------------------------------------------------
# 5. Sign-array multiplication, sign array built by a constant fill
# ---------------------------------------------------------------------------

def alt_log_sum_fill(ind: ArrayLike, base: Optional[float] = None) -> float:
    values = as_positive_array(ind)
    signs = np.ones(values.shape[0], dtype=FLOAT_DTYPE)
    signs[1::2] = -1.0
    return rescale_for_base(np.sum(signs * np.log(values)), base)
