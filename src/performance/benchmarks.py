"""
benchmarks.py - Benchmarking Harness for the Alternating Log-Sum Variants

Times every summation variant against the same shared input and reports how
they compare:

    1. Variant comparison  - R timed calls per variant, summary table sorted
                             by total elapsed time
    2. Memory comparison   - Peak traced allocation per variant
    3. Scaling study       - Mean time per variant over several input sizes

Every benchmark returns structured data (dataclasses or DataFrames) so results
are reproducible and can be aggregated into CSVs, plots and a Markdown report.

Why the variants differ
-----------------------
All five variants do O(n) arithmetic.  What separates them is how many times
the interpreter gets involved per element.  A compiled loop or a native numpy
broadcast touches each element in C; a per-element callable dispatched through
``numpy.vectorize`` pays a full Python function call for every element.  The
``replicate`` variant hides that cost inside an innocent-looking array
construction step, which is why it is slow despite doing its arithmetic
with vectorized numpy calls.
"""

from __future__ import annotations

import logging
import math
import os
import statistics
import time
import tracemalloc
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence

import numpy as np
import pandas as pd
import matplotlib

matplotlib.use("Agg")  # Non-interactive backend for server / CI environments
import matplotlib.pyplot as plt

from core.constants import (
    DEFAULT_N,
    DEFAULT_OUTPUT_DIR,
    DEFAULT_REPLICATIONS,
    DEFAULT_SCALING_REPLICATIONS,
    DEFAULT_SCALING_SIZES,
    DEFAULT_WARMUP,
)
from core.exceptions import LogSumError
from summation.inputs import ArrayLike, as_positive_array, make_input_sequence

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Timing record
# ---------------------------------------------------------------------------

@dataclass
class VariantTiming:
    """
    Timing samples for one variant.

    ``samples`` holds one wall-clock duration in seconds per timed call.
    ``error`` is set instead when the variant failed and the harness was
    running variants independently.
    """
    name: str
    samples: List[float] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def failed(self) -> bool:
        return self.error is not None

    @property
    def replications(self) -> int:
        return len(self.samples)

    @property
    def total(self) -> float:
        return math.fsum(self.samples) if self.samples else float("nan")

    @property
    def mean(self) -> float:
        return statistics.mean(self.samples) if self.samples else float("nan")

    @property
    def median(self) -> float:
        return statistics.median(self.samples) if self.samples else float("nan")

    @property
    def min(self) -> float:
        return min(self.samples) if self.samples else float("nan")

    @property
    def max(self) -> float:
        return max(self.samples) if self.samples else float("nan")

    @property
    def std(self) -> float:
        return statistics.stdev(self.samples) if len(self.samples) > 1 else 0.0

    def as_dict(self) -> Dict[str, Any]:
        return {
            "min": self.min,
            "max": self.max,
            "mean": self.mean,
            "median": self.median,
            "std": self.std,
            "total": self.total,
            "num_runs": self.replications,
        }


def format_table(df: pd.DataFrame) -> str:
    """Render a comparison table for the console."""
    formatters = {
        "elapsed": "{:.6f}".format,
        "mean": "{:.6f}".format,
        "relative": "{:.2f}".format,
    }
    return df.to_string(
        index=False,
        formatters={k: v for k, v in formatters.items() if k in df.columns},
        na_rep="-",
    )


# ---------------------------------------------------------------------------
# Benchmark utility class
# ---------------------------------------------------------------------------

class Benchmark:
    """
    Benchmarking harness for functions of one input sequence.

    Provides timing (wall-clock), memory profiling (via tracemalloc), and a
    side-by-side comparison of any number of named implementations.  All
    public methods return dataclasses or DataFrames so callers can serialise,
    plot, or aggregate results however they wish.
    """

    # ---- Core measurement helpers ----------------------------------------

    @staticmethod
    def time_function(
        func: Callable, *args, num_runs: int = DEFAULT_REPLICATIONS, name: Optional[str] = None, **kwargs
    ) -> VariantTiming:
        """
        Time *func* over *num_runs* invocations.

        Each sample brackets exactly one call with ``time.perf_counter``
        (monotonic, sub-microsecond resolution).  Exceptions raised by *func*
        propagate immediately; samples collected so far are discarded.
        """
        if num_runs < 1:
            raise ValueError(f"num_runs must be >= 1, got {num_runs}")

        timing = VariantTiming(name=name or getattr(func, "__name__", repr(func)))
        for _ in range(num_runs):
            t0 = time.perf_counter()
            func(*args, **kwargs)
            t1 = time.perf_counter()
            timing.samples.append(t1 - t0)
        return timing

    @staticmethod
    def memory_profile(func: Callable, *args, **kwargs) -> Dict[str, Any]:
        """
        Measure peak memory and number of allocation sites for *func*.

        Uses :mod:`tracemalloc`; numpy reports its buffers to tracemalloc, so
        intermediate arrays built by a variant show up in the peak.

        Returns
        -------
        dict with keys: peak_bytes, peak_kb, peak_mb, current_bytes,
                        num_allocations (line-level entries in the snapshot)
        """
        tracemalloc.start()
        tracemalloc.reset_peak()
        try:
            func(*args, **kwargs)
            current, peak = tracemalloc.get_traced_memory()
            snapshot = tracemalloc.take_snapshot()
        finally:
            tracemalloc.stop()

        stats = snapshot.statistics("lineno")

        return {
            "peak_bytes": peak,
            "peak_kb": peak / 1024,
            "peak_mb": peak / (1024 * 1024),
            "current_bytes": current,
            "num_allocations": len(stats),
        }

    # ---- Variant comparison ----------------------------------------------

    @staticmethod
    def run_variants(
        variants: Dict[str, Callable],
        ind: ArrayLike,
        replications: int = DEFAULT_REPLICATIONS,
        warmup: int = DEFAULT_WARMUP,
        stop_on_error: bool = True,
    ) -> List[VariantTiming]:
        """
        Call each variant *replications* times on the same input.

        The input is validated once before anything runs: an empty input is a
        configuration error (:class:`EmptyInputError`) and a non-positive
        element would make every variant fail (:class:`DomainError`); both
        propagate.  *ind* itself is handed to every call unchanged.

        ``warmup`` untimed calls precede each variant's samples so one-off
        costs such as JIT compilation are not measured.

        With ``stop_on_error=False`` a variant raising a :class:`LogSumError`
        is recorded as failed (no samples) and the remaining variants still
        run.  Otherwise the error propagates and the run stops.
        """
        if replications < 1:
            raise ValueError(f"replications must be >= 1, got {replications}")
        if warmup < 0:
            raise ValueError(f"warmup must be >= 0, got {warmup}")
        if not variants:
            raise ValueError("no variants to benchmark")

        n = as_positive_array(ind).shape[0]
        logger.info(
            "Benchmarking %d variants: n=%d, replications=%d, warmup=%d",
            len(variants), n, replications, warmup,
        )

        timings: List[VariantTiming] = []
        for name, func in variants.items():
            try:
                for _ in range(warmup):
                    func(ind)
                timing = Benchmark.time_function(func, ind, num_runs=replications, name=name)
            except LogSumError as exc:
                if stop_on_error:
                    raise
                logger.warning("Variant %s failed: %s", name, exc)
                timing = VariantTiming(name=name, error=str(exc))
            else:
                logger.info("  %-10s mean %.6f s over %d runs", name, timing.mean, timing.replications)
            timings.append(timing)
        return timings

    @staticmethod
    def timing_table(timings: Sequence[VariantTiming]) -> pd.DataFrame:
        """
        Build the comparison table from timing records.

        Columns: expression, replications, elapsed (total seconds), mean,
        relative (mean / fastest mean), rank (1 = fastest); plus ``error`` if
        any variant failed.  Rows are sorted by elapsed time ascending, failed
        entries last.
        """
        df = pd.DataFrame(
            {
                "expression": [t.name for t in timings],
                "replications": [t.replications for t in timings],
                "elapsed": [t.total for t in timings],
                "mean": [t.mean for t in timings],
            }
        )
        fastest = df["mean"].min()
        df["relative"] = df["mean"] / fastest if fastest > 0 else np.nan
        df["rank"] = df["mean"].rank(method="min").astype("Int64")
        if any(t.failed for t in timings):
            df["error"] = [t.error or "" for t in timings]
        return df.sort_values("elapsed", na_position="last", kind="stable").reset_index(drop=True)

    @staticmethod
    def compare_variants(
        variants: Dict[str, Callable],
        ind: ArrayLike,
        replications: int = DEFAULT_REPLICATIONS,
        warmup: int = DEFAULT_WARMUP,
        stop_on_error: bool = True,
    ) -> pd.DataFrame:
        """Run :meth:`run_variants` and return its :meth:`timing_table`."""
        timings = Benchmark.run_variants(
            variants, ind, replications=replications, warmup=warmup, stop_on_error=stop_on_error
        )
        return Benchmark.timing_table(timings)

    @staticmethod
    def compare_memory(variants: Dict[str, Callable], ind: ArrayLike) -> pd.DataFrame:
        """
        Peak traced memory per variant, smallest first.

        The ``map`` and ``replicate`` variants materialize length-n
        intermediates through ``numpy.vectorize``; the compiled loop needs
        none beyond the validated input copy.
        """
        as_positive_array(ind)
        rows = []
        for name, func in variants.items():
            func(ind)  # keep JIT compilation out of the trace
            mem = Benchmark.memory_profile(func, ind)
            rows.append(
                {
                    "expression": name,
                    "peak_kb": mem["peak_kb"],
                    "num_allocations": mem["num_allocations"],
                }
            )
        return pd.DataFrame(rows).sort_values("peak_kb", kind="stable").reset_index(drop=True)

    @staticmethod
    def scaling_study(
        variants: Dict[str, Callable],
        sizes: Sequence[int] = DEFAULT_SCALING_SIZES,
        replications: int = DEFAULT_SCALING_REPLICATIONS,
        warmup: int = DEFAULT_WARMUP,
    ) -> pd.DataFrame:
        """
        Compare the variants on inputs ``1..n`` for every n in *sizes*.

        Returns a tidy DataFrame with columns n, expression, mean, relative.
        """
        frames = []
        for n in sizes:
            seq = make_input_sequence(int(n))
            table = Benchmark.compare_variants(variants, seq, replications=replications, warmup=warmup)
            table.insert(0, "n", int(n))
            frames.append(table[["n", "expression", "mean", "relative"]])
        if not frames:
            return pd.DataFrame(columns=["n", "expression", "mean", "relative"])
        return pd.concat(frames, ignore_index=True)

    # ---- Orchestration ---------------------------------------------------

    @staticmethod
    def run_all_benchmarks(
        variants: Dict[str, Callable],
        output_dir: str = DEFAULT_OUTPUT_DIR,
        n: int = DEFAULT_N,
        replications: int = DEFAULT_REPLICATIONS,
        warmup: int = DEFAULT_WARMUP,
        sizes: Optional[Sequence[int]] = DEFAULT_SCALING_SIZES,
        scaling_replications: int = DEFAULT_SCALING_REPLICATIONS,
    ) -> pd.DataFrame:
        """
        Run the comparison, memory and (if *sizes* is non-empty) scaling
        benchmarks and save CSVs and plots under *output_dir*.

        Returns
        -------
        pd.DataFrame
            The variant comparison table for the size-*n* input.
        """
        os.makedirs(output_dir, exist_ok=True)
        seq = make_input_sequence(n)

        comparison = Benchmark.compare_variants(variants, seq, replications=replications, warmup=warmup)
        comparison.to_csv(os.path.join(output_dir, "comparison.csv"), index=False)
        print(f"\n=== Variant comparison (n = {n:,}) ===")
        print(format_table(comparison))

        memory = Benchmark.compare_memory(variants, seq)
        memory.to_csv(os.path.join(output_dir, "memory.csv"), index=False)
        print("\n=== Peak memory ===")
        print(memory.to_string(index=False))

        # --- Bar chart of relative mean time ------------------------------
        fig, ax = plt.subplots(figsize=(8, 4.5))
        ax.bar(comparison["expression"], comparison["relative"], color="steelblue", edgecolor="black")
        ax.set_ylabel("Mean time relative to fastest (x)")
        ax.set_title(f"Alternating log-sum variants, n = {n:,}")
        ax.axhline(1.0, color="red", linestyle="--", linewidth=0.8, label="fastest")
        ax.legend()
        plt.tight_layout()
        fig.savefig(os.path.join(output_dir, "relative_bar.png"), dpi=150)
        plt.close(fig)

        if sizes:
            scaling = Benchmark.scaling_study(
                variants, sizes=sizes, replications=scaling_replications, warmup=warmup
            )
            scaling.to_csv(os.path.join(output_dir, "scaling.csv"), index=False)

            # --- Log-log mean time vs n -----------------------------------
            fig, ax = plt.subplots(figsize=(8, 5))
            for name, grp in scaling.groupby("expression", sort=False):
                ax.loglog(grp["n"], grp["mean"], marker="o", label=name)
            ax.set_xlabel("Input length n")
            ax.set_ylabel("Mean time per call (s)")
            ax.set_title("Scaling of the alternating log-sum variants")
            ax.grid(True, which="both", alpha=0.3)
            ax.legend()
            plt.tight_layout()
            fig.savefig(os.path.join(output_dir, "scaling.png"), dpi=150)
            plt.close(fig)

        logger.info("Benchmark results written to %s", os.path.abspath(output_dir))
        return comparison

    # ---- Markdown report -------------------------------------------------

    @staticmethod
    def generate_report(output_dir: str = DEFAULT_OUTPUT_DIR) -> str:
        """
        Generate a Markdown report from the CSVs and plots created by
        :meth:`run_all_benchmarks`.

        Returns
        -------
        str
            The Markdown text (also written to ``output_dir/report.md``).
        """
        comparison_path = os.path.join(output_dir, "comparison.csv")
        if not os.path.exists(comparison_path):
            raise FileNotFoundError(
                f"{comparison_path} not found -- run run_all_benchmarks first."
            )

        comparison = pd.read_csv(comparison_path)

        lines = [
            "# Alternating Log-Sum Benchmark Report",
            "",
            "## Variant comparison",
            "",
            "| Expression | Replications | Elapsed (s) | Mean (s) | Relative |",
            "|------------|-------------:|------------:|---------:|---------:|",
        ]
        for _, row in comparison.iterrows():
            lines.append(
                f"| {row['expression']} | {int(row['replications'])} | "
                f"{row['elapsed']:.6f} | {row['mean']:.6f} | {row['relative']:.2f}x |"
            )
        lines += ["", "![Relative time](relative_bar.png)", ""]

        memory_path = os.path.join(output_dir, "memory.csv")
        if os.path.exists(memory_path):
            memory = pd.read_csv(memory_path)
            lines += [
                "## Peak memory",
                "",
                "| Expression | Peak (KiB) |",
                "|------------|-----------:|",
            ]
            for _, row in memory.iterrows():
                lines.append(f"| {row['expression']} | {row['peak_kb']:.1f} |")
            lines.append("")

        scaling_path = os.path.join(output_dir, "scaling.csv")
        if os.path.exists(scaling_path):
            lines += ["## Scaling", "", "![Scaling](scaling.png)", ""]

        lines += [
            "## Key Takeaways",
            "",
            "1. **Compiled loop and native broadcast** (`loop`, `recycle`, `fill`) "
            "touch each element in C and stay within a small factor of each other.",
            "2. **Per-element dispatch** (`map`) pays one Python function call per "
            "element through `numpy.vectorize`.",
            "3. **`replicate`** does its arithmetic with vectorized numpy calls, but "
            "builds its sign array one Python call at a time; swapping that step "
            "for `np.ones` (`fill`) removes the cost entirely.",
            "",
            "---",
            "*Report generated by benchmarks.py*",
        ]

        report = "\n".join(lines)
        report_path = os.path.join(output_dir, "report.md")
        with open(report_path, "w") as fh:
            fh.write(report)
        logger.info("Report written to %s", report_path)
        return report

