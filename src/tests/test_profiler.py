"""
===============================================================================
LOGSUM BENCH - Sampling Profiler Test Suite
===============================================================================
Tests for SamplingProfiler: sample collection, self/total aggregation, the
text rendering, and the diagnosis it exists for -- attributing the cost of
the 'replicate' variant to its sign-array construction step.
===============================================================================
"""

import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

import time

import pytest

from core.exceptions import DomainError
from performance.profiler import (
    ProfileSummary, SamplingProfiler, format_summary, profile_variant,
)
from summation import VARIANTS, make_input_sequence


def _spin(seconds):
    """Busy-wait in Python so the sampler sees this frame."""
    deadline = time.perf_counter() + seconds
    while time.perf_counter() < deadline:
        pass


def _outer(seconds):
    _spin(seconds)


# =============================================================================
# Test: sampling and aggregation
# =============================================================================

class TestSamplingProfiler:

    def test_summary_before_run(self):
        with pytest.raises(RuntimeError):
            SamplingProfiler().summary()

    def test_rejects_bad_interval(self):
        with pytest.raises(ValueError):
            SamplingProfiler(interval=0)

    def test_rejects_bad_replications(self):
        with pytest.raises(ValueError):
            SamplingProfiler().run(_spin, 0.0, replications=0)

    def test_returns_last_result(self):
        profiler = SamplingProfiler()
        assert profiler.run(sum, [1, 2, 3], replications=3) == 6

    def test_self_and_total_attribution(self):
        profiler = SamplingProfiler(interval=0.001)
        profiler.run(_outer, 0.05, replications=4)
        summary = profiler.summary()

        assert summary.samples > 0
        assert summary.elapsed >= 0.2
        # _outer only calls _spin: all total time, (almost) no self time.
        assert summary.total_pct("_outer") == pytest.approx(100.0)
        assert summary.total_pct("_spin") >= 90.0
        top_self = summary.by_self.index[0]
        assert top_self.startswith("_spin ")

    def test_caller_frames_excluded(self):
        profiler = SamplingProfiler(interval=0.001)
        profiler.run(_spin, 0.1)
        labels = profiler.summary().by_total.index
        assert not any(label.startswith("test_caller_frames_excluded ") for label in labels)
        assert not any(label.startswith("run ") for label in labels)

    def test_percentages_consistent(self):
        profiler = SamplingProfiler(interval=0.001)
        profiler.run(_outer, 0.1)
        summary = profiler.summary()
        assert summary.by_self["self_pct"].sum() == pytest.approx(100.0)
        assert summary.by_self["self_time"].sum() == pytest.approx(summary.elapsed)
        assert (summary.by_total["total_pct"] >= summary.by_total["self_pct"]).all()
        assert summary.by_total["total_time"].is_monotonic_decreasing

    def test_no_samples(self):
        profiler = SamplingProfiler(interval=10.0)
        profiler.run(sum, [1, 2])
        summary = profiler.summary()
        assert summary.samples == 0
        assert summary.by_total.empty
        assert summary.total_pct("sum") == 0.0
        assert "no samples" in format_summary(summary)

    def test_exception_propagates(self):
        profiler = SamplingProfiler()
        with pytest.raises(DomainError):
            profiler.run(VARIANTS["fill"], [1, -1])
        # The run was still recorded and can be summarised.
        assert isinstance(profiler.summary(), ProfileSummary)


# =============================================================================
# Test: diagnosing the replicate variant
# =============================================================================

class TestReplicateDiagnosis:

    @pytest.fixture(scope="class")
    def summary(self):
        return profile_variant(
            VARIANTS["replicate"], make_input_sequence(50_000), replications=20, interval=0.001
        )

    def test_samples_collected(self, summary):
        assert summary.samples > 0

    def test_variant_frame_on_every_sample(self, summary):
        assert summary.total_pct("alt_log_sum_replicate") == pytest.approx(100.0)

    def test_time_goes_to_sign_array_construction(self, summary):
        assert summary.total_pct("replicate") >= 50.0
        assert summary.total_pct("sapply") >= 50.0

    def test_format_summary(self, summary):
        text = format_summary(summary, top=20)
        assert "$by.self" in text
        assert "$by.total" in text
        assert "replicate (functional.py:" in text
