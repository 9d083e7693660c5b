"""
functional.py - Generic per-element map and replicate primitives

These are the "apply a function to every element" utilities that general
purpose numeric code reaches for when it does not know a native array
operation for the job.  Both are built on :class:`numpy.vectorize`, which
(in numpy's own words) is provided for convenience, not performance: it is
essentially a Python ``for`` loop that calls the supplied function once per
element.

That per-call cost is the whole point here.  The ``map`` and ``replicate``
summation variants route their work through these helpers, and the benchmark
harness shows what that costs next to a compiled loop or a native broadcast.
"""

from __future__ import annotations

from typing import Callable

import numpy as np

from core.constants import FLOAT_DTYPE


def sapply(func: Callable, *seqs, otype=FLOAT_DTYPE) -> np.ndarray:
    """
    Apply *func* element-wise over one or more equal-length sequences.

    ``func`` receives one element from each sequence per call and must return
    a scalar.  The result is a 1-D array of dtype *otype*.

    Parameters
    ----------
    func : callable
        Per-element function; called exactly ``len(seqs[0])`` times.
    *seqs : array_like
        One or more 1-D sequences of the same length.
    otype : dtype
        Output dtype (declared up front so numpy does not make an extra
        probing call to infer it).
    """
    if not seqs:
        raise TypeError("sapply() needs at least one sequence")
    arrays = [np.asarray(s) for s in seqs]
    length = arrays[0].shape[0] if arrays[0].ndim else 1
    for arr in arrays[1:]:
        if arr.shape[:1] != arrays[0].shape[:1]:
            raise ValueError(
                f"sapply() sequences differ in length: {arrays[0].shape} vs {arr.shape}"
            )
    if length == 0:
        return np.empty(0, dtype=otype)
    vectorized = np.vectorize(func, otypes=[otype])
    return vectorized(*arrays)


def replicate(n: int, expr: Callable[[], float]) -> np.ndarray:
    """
    Evaluate the zero-argument callable *expr* ``n`` times and collect the
    results into a length-``n`` array.

    Every element costs one dispatch through :func:`sapply`, even when
    *expr* always returns the same constant.  A constant fill should use
    ``np.full`` / ``np.ones`` instead.
    """
    if n < 0:
        raise ValueError(f"replicate() count must be non-negative, got {n}")
    return sapply(lambda _: expr(), np.arange(n))
