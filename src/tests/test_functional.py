"""
===============================================================================
LOGSUM BENCH - Functional Primitives Test Suite
===============================================================================
Tests for sapply / replicate: results, call counts and edge cases.
===============================================================================
"""

import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

import numpy as np
import pytest

from core.functional import replicate, sapply


class TestSapply:

    def test_single_sequence(self):
        result = sapply(lambda x: x * 2.0, [1, 2, 3])
        np.testing.assert_array_equal(result, [2.0, 4.0, 6.0])
        assert result.dtype == np.float64

    def test_two_sequences(self):
        result = sapply(lambda a, b: a - b, np.arange(4), [1.0, 1.0, 1.0, 1.0])
        np.testing.assert_array_equal(result, [-1.0, 0.0, 1.0, 2.0])

    def test_calls_once_per_element(self):
        calls = []

        def record(x):
            calls.append(x)
            return 0.0

        sapply(record, np.arange(25))
        assert len(calls) == 25

    def test_empty(self):
        result = sapply(lambda x: 1.0 / x, [])
        assert result.shape == (0,)

    def test_length_mismatch(self):
        with pytest.raises(ValueError):
            sapply(lambda a, b: a + b, [1, 2, 3], [1, 2])

    def test_needs_a_sequence(self):
        with pytest.raises(TypeError):
            sapply(lambda: 1.0)


class TestReplicate:

    def test_constant(self):
        result = replicate(5, lambda: 1.0)
        np.testing.assert_array_equal(result, np.ones(5))

    def test_result_is_writeable(self):
        result = replicate(4, lambda: 1.0)
        result[1::2] = -1.0
        np.testing.assert_array_equal(result, [1.0, -1.0, 1.0, -1.0])

    def test_evaluates_expression_every_time(self):
        counter = iter(range(100))
        result = replicate(4, lambda: float(next(counter)))
        np.testing.assert_array_equal(result, [0.0, 1.0, 2.0, 3.0])

    def test_zero(self):
        assert replicate(0, lambda: 1.0).shape == (0,)

    def test_negative(self):
        with pytest.raises(ValueError):
            replicate(-1, lambda: 1.0)
