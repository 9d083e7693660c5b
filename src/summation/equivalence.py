"""
equivalence.py - Check that every summation variant agrees on one input.
"""

from __future__ import annotations

import logging
from typing import Callable, Dict, Optional

import pandas as pd

from core.constants import RELATIVE_TOLERANCE
from core.exceptions import VariantMismatchError
from summation.inputs import ArrayLike, as_positive_array, log_scale

logger = logging.getLogger(__name__)


def check_equivalence(
    ind: ArrayLike,
    variants: Optional[Dict[str, Callable]] = None,
    rtol: float = RELATIVE_TOLERANCE,
) -> pd.DataFrame:
    """
    Run every variant on *ind* and compare each result with the first one.

    The allowed absolute deviation is ``rtol * max(sum(|log x|), 1)``, so the
    tolerance grows with the magnitude of the terms being summed rather than
    with the (possibly tiny) final sum.

    Returns
    -------
    pd.DataFrame
        Indexed by variant name, columns ``result`` and ``abs_diff``.

    Raises
    ------
    VariantMismatchError
        On the first variant outside the tolerance.
    """
    if variants is None:
        from summation import VARIANTS
        variants = VARIANTS
    if not variants:
        raise ValueError("no variants to compare")

    values = as_positive_array(ind)
    limit = rtol * log_scale(values)

    results = {name: func(values) for name, func in variants.items()}
    reference = next(iter(results))
    ref_value = results[reference]

    rows = []
    for name, value in results.items():
        diff = abs(value - ref_value)
        if diff > limit:
            raise VariantMismatchError(name, reference, diff, limit)
        rows.append({"variant": name, "result": value, "abs_diff": diff})

    logger.info(
        "%d variants agree on n=%d (max diff %.3e, limit %.3e)",
        len(rows), values.shape[0], max(r["abs_diff"] for r in rows), limit,
    )
    return pd.DataFrame(rows).set_index("variant")
