"""
===============================================================================
LOGSUM BENCH - Summation Engine
===============================================================================
Equivalent implementations of the alternating-sign sum of logarithms

    S(ind) = sum_k sign(k) * log(ind[k]),   sign(k) = +1 (k odd), -1 (k even)

with k the 1-based position.

Modules:
    inputs       -- Canonical 1..N input and domain validation
    variants     -- The five algorithm variants
    equivalence  -- Cross-variant agreement check
===============================================================================
"""

from typing import Callable, Dict, Iterable, Optional

from summation.inputs import as_positive_array, make_input_sequence
from summation.variants import (
    alt_log_sum_fill,
    alt_log_sum_loop,
    alt_log_sum_map,
    alt_log_sum_recycle,
    alt_log_sum_replicate,
)
from summation.equivalence import check_equivalence

# Registration order is the order of the comparison table before sorting.
VARIANTS: Dict[str, Callable] = {
    "loop": alt_log_sum_loop,
    "map": alt_log_sum_map,
    "replicate": alt_log_sum_replicate,
    "recycle": alt_log_sum_recycle,
    "fill": alt_log_sum_fill,
}


def get_variants(names: Optional[Iterable[str]] = None) -> Dict[str, Callable]:
    """Return the named subset of :data:`VARIANTS` (all of them for ``None``)."""
    if names is None:
        return dict(VARIANTS)
    selected = {}
    for name in names:
        if name not in VARIANTS:
            raise KeyError(
                f"unknown variant '{name}'; choose from {', '.join(VARIANTS)}"
            )
        selected[name] = VARIANTS[name]
    return selected


__all__ = [
    "VARIANTS",
    "get_variants",
    "as_positive_array",
    "make_input_sequence",
    "check_equivalence",
    "alt_log_sum_loop",
    "alt_log_sum_map",
    "alt_log_sum_replicate",
    "alt_log_sum_recycle",
    "alt_log_sum_fill",
]
