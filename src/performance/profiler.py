"""
profiler.py - Sampling Profiler for Diagnosing Slow Variants

A deterministic profiler (cProfile) instruments every call, which distorts
exactly the kind of code we want to look at: a variant whose cost is millions
of tiny per-element calls.  A *sampling* profiler instead looks at the call
stack every few milliseconds and counts where it finds the program:

    self time   - samples whose innermost Python frame is this function
                  (time spent in its own code, or in C code it called)
    total time  - samples in which this function appears anywhere on the
                  stack (its own time plus everything it called)

A function with small self time but large total time is a wrapper that
delegates the expensive work; following the total-time column down the
stack leads to the step that is actually slow.  For the ``replicate``
variant that trail ends at the sign-array construction, not at the
vectorized multiply-and-sum.

How it samples
--------------
The profiled function runs in the calling thread.  A daemon thread wakes
every ``interval`` seconds and reads that thread's current frame through
``sys._current_frames()``.  The sampler needs the GIL to do so, so in
practice samples land at the interpreter's switch interval (5 ms by default)
when the target is busy; time per sample is therefore taken as elapsed time
divided by the number of samples, not as the nominal interval.
"""

from __future__ import annotations

import logging
import os
import sys
import threading
import time
from collections import Counter
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

import pandas as pd

from core.constants import PROFILE_INTERVAL, PROFILE_REPLICATIONS, PROFILE_TOP
from summation.inputs import ArrayLike

logger = logging.getLogger(__name__)

_COLUMNS = ["self_time", "self_pct", "total_time", "total_pct"]


def _frame_label(frame) -> str:
    code = frame.f_code
    return f"{code.co_name} ({os.path.basename(code.co_filename)}:{code.co_firstlineno})"


@dataclass
class ProfileSummary:
    """
    Aggregated result of one profiling run.

    ``by_self`` lists only frames that were innermost in at least one sample,
    sorted by self time; ``by_total`` lists every frame seen, sorted by total
    time.  Both are indexed by a ``name (file:line)`` frame label.
    """
    by_self: pd.DataFrame
    by_total: pd.DataFrame
    samples: int
    interval: float
    elapsed: float

    def total_pct(self, func_name: str) -> float:
        """Largest total-time percentage of any frame whose function is *func_name*."""
        best = 0.0
        for label, pct in self.by_total["total_pct"].items():
            if label.split(" ", 1)[0] == func_name:
                best = max(best, float(pct))
        return best


class SamplingProfiler:
    """
    Statistical profiler for a function called repeatedly in this thread.

    Usage::

        profiler = SamplingProfiler(interval=0.001)
        profiler.run(alt_log_sum_replicate, seq, replications=50)
        print(format_summary(profiler.summary()))
    """

    def __init__(self, interval: float = PROFILE_INTERVAL):
        if interval <= 0:
            raise ValueError(f"sampling interval must be positive, got {interval}")
        self.interval = interval
        self._stacks: List[Tuple[str, ...]] = []
        self._elapsed: Optional[float] = None
        self._target_id: Optional[int] = None
        self._root = None
        self._stop = threading.Event()

    # ------------------------------------------------------------------
    # Sampling
    # ------------------------------------------------------------------

    def run(self, func: Callable, *args, replications: int = 1, **kwargs):
        """
        Call ``func(*args, **kwargs)`` *replications* times while sampling.

        Returns the result of the last call.  Exceptions from *func* stop the
        run and propagate; samples collected up to that point are kept.
        """
        if replications < 1:
            raise ValueError(f"replications must be >= 1, got {replications}")

        self._stacks = []
        self._target_id = threading.get_ident()
        # Frames at or above this one belong to the caller, not the profile.
        self._root = sys._getframe()
        self._stop.clear()

        sampler = threading.Thread(target=self._sample_loop, name="sampling-profiler", daemon=True)
        result = None
        t0 = time.perf_counter()
        sampler.start()
        try:
            for _ in range(replications):
                result = func(*args, **kwargs)
        finally:
            self._stop.set()
            sampler.join()
            self._elapsed = time.perf_counter() - t0
            self._root = None

        logger.info(
            "Profiled %s x%d: %d samples in %.3f s",
            getattr(func, "__name__", repr(func)), replications, len(self._stacks), self._elapsed,
        )
        return result

    def _sample_loop(self) -> None:
        while not self._stop.wait(self.interval):
            frame = sys._current_frames().get(self._target_id)
            if frame is None:
                continue
            stack = self._collect_stack(frame)
            if stack:
                self._stacks.append(stack)

    def _collect_stack(self, frame) -> Tuple[str, ...]:
        """Frame labels from the profiled function inwards, outermost first."""
        root = self._root
        labels = []
        while frame is not None and frame is not root:
            labels.append(_frame_label(frame))
            frame = frame.f_back
        if frame is None:
            # Sampled outside run(); not part of the profile.
            return ()
        labels.reverse()
        return tuple(labels)

    # ------------------------------------------------------------------
    # Aggregation
    # ------------------------------------------------------------------

    def summary(self) -> ProfileSummary:
        """Aggregate the samples of the last :meth:`run`."""
        if self._elapsed is None:
            raise RuntimeError("No profile recorded.  Call run() first.")

        n_samples = len(self._stacks)
        if n_samples == 0:
            empty = pd.DataFrame(columns=_COLUMNS)
            return ProfileSummary(empty, empty.copy(), 0, self.interval, self._elapsed)

        per_sample = self._elapsed / n_samples
        self_counts = Counter(stack[-1] for stack in self._stacks)
        # A recursive function counts once per sample towards its total;
        # dict.fromkeys keeps outermost-first order for tie-breaking.
        total_counts = Counter(
            label for stack in self._stacks for label in dict.fromkeys(stack)
        )

        rows = {
            label: {
                "self_time": self_counts.get(label, 0) * per_sample,
                "self_pct": 100.0 * self_counts.get(label, 0) / n_samples,
                "total_time": count * per_sample,
                "total_pct": 100.0 * count / n_samples,
            }
            for label, count in total_counts.items()
        }
        table = pd.DataFrame.from_dict(rows, orient="index", columns=_COLUMNS)
        table.index.name = "frame"

        by_self = table[table["self_time"] > 0].sort_values("self_time", ascending=False, kind="stable")
        by_total = table.sort_values("total_time", ascending=False, kind="stable")
        return ProfileSummary(by_self, by_total, n_samples, self.interval, self._elapsed)


def format_summary(summary: ProfileSummary, top: int = PROFILE_TOP) -> str:
    """Advisory text rendering of both tables, *top* rows each."""
    lines = [
        f"Samples: {summary.samples}   interval: {summary.interval * 1e3:.1f} ms   "
        f"elapsed: {summary.elapsed:.3f} s",
        "",
    ]
    if summary.samples == 0:
        lines.append("(no samples -- run longer or lower the interval)")
        return "\n".join(lines)

    fmt = {c: "{:.3f}".format if c.endswith("time") else "{:.1f}".format for c in _COLUMNS}
    lines += [
        "$by.self",
        summary.by_self.head(top).to_string(formatters=fmt),
        "",
        "$by.total",
        summary.by_total.head(top).to_string(formatters=fmt),
    ]
    return "\n".join(lines)


def profile_variant(
    func: Callable,
    ind: ArrayLike,
    replications: int = PROFILE_REPLICATIONS,
    interval: float = PROFILE_INTERVAL,
) -> ProfileSummary:
    """Profile *replications* calls of one summation variant on *ind*."""
    # One untimed call so JIT compilation does not dominate the samples.
    func(ind)
    profiler = SamplingProfiler(interval=interval)
    profiler.run(func, ind, replications=replications)
    return profiler.summary()
