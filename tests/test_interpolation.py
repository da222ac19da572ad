"""
Tests for interpolation functions.
"""

import numpy as np
import pytest
from pricelib.exceptions import InterpolationError
from pricelib.interpolation import NaturalCubicSpline, flat_forward_interp


class TestFlatForwardInterp:
    """Tests for flat forward interpolation."""

    def test_flat_forward_at_nodes(self):
        """Test interpolation returns exact values at nodes."""
        times = np.array([1.0, 2.0, 3.0])
        rates = np.array([0.02, 0.03, 0.04])

        assert flat_forward_interp(1.0, times, rates) == 0.02
        assert flat_forward_interp(2.0, times, rates) == 0.03
        assert flat_forward_interp(3.0, times, rates) == 0.04

    def test_flat_extrapolation(self):
        """Test zero rates are flat outside the nodes."""
        times = np.array([1.0, 2.0])
        rates = np.array([0.02, 0.04])

        assert flat_forward_interp(0.5, times, rates) == 0.02
        assert flat_forward_interp(3.0, times, rates) == 0.04

    def test_constant_forward_between_nodes(self):
        """Test the forward rate is constant inside a segment."""
        times = np.array([1.0, 2.0])
        rates = np.array([0.02, 0.04])

        def log_df(t):
            return -flat_forward_interp(t, times, rates) * t

        fwd1 = (log_df(1.2) - log_df(1.4)) / 0.2
        fwd2 = (log_df(1.6) - log_df(1.9)) / 0.3
        assert abs(fwd1 - 0.06) < 1e-12
        assert abs(fwd2 - 0.06) < 1e-12

    def test_empty_data(self):
        """Test empty curves raise."""
        with pytest.raises(InterpolationError):
            flat_forward_interp(1.0, np.array([]), np.array([]))


class TestNaturalCubicSpline:
    """Tests for the natural cubic spline."""

    def test_reproduces_nodes(self):
        """Test the spline passes through its nodes."""
        x = np.array([0.5, 1.0, 2.0, 5.0])
        y = np.array([0.20, 0.22, 0.21, 0.18])
        spline = NaturalCubicSpline(x, y)
        for xi, yi in zip(x, y):
            assert abs(spline(xi) - yi) < 1e-14

    def test_linear_data_is_exact(self):
        """Test linear data gives a straight line (zero curvature)."""
        x = np.array([1.0, 2.0, 4.0, 7.0])
        spline = NaturalCubicSpline(x, 0.1 + 0.01 * x)
        assert abs(spline(3.0) - 0.13) < 1e-14
        assert abs(spline(0.5, allow_extrapolation=True) - 0.105) < 1e-14

    def test_natural_boundary(self):
        """Test second derivative vanishes at both ends."""
        x = np.array([1.0, 2.0, 3.0, 5.0])
        y = np.array([0.2, 0.25, 0.22, 0.19])
        spline = NaturalCubicSpline(x, y)
        h = 1e-4
        for end in (1.0, 5.0):
            second = (spline(end + h, True) - 2 * spline(end, True) + spline(end - h, True)) / h**2
            assert abs(second) < 1e-4

    def test_single_node_is_flat(self):
        """Test a single node gives a constant."""
        spline = NaturalCubicSpline(np.array([1.0]), np.array([0.3]))
        assert spline(1.0) == 0.3
        assert spline(4.0, allow_extrapolation=True) == 0.3

    def test_extrapolation_not_allowed(self):
        """Test out-of-range evaluation raises unless allowed."""
        spline = NaturalCubicSpline(np.array([1.0, 2.0]), np.array([0.2, 0.3]))
        with pytest.raises(InterpolationError):
            spline(2.5)

    def test_unsorted_nodes(self):
        """Test unsorted nodes are rejected."""
        with pytest.raises(InterpolationError):
            NaturalCubicSpline(np.array([2.0, 1.0]), np.array([0.2, 0.3]))

    def test_update_after_data_change(self):
        """Test update rebuilds from changed values."""
        x = np.array([1.0, 2.0, 3.0])
        y = np.array([0.2, 0.2, 0.2])
        spline = NaturalCubicSpline(x, y)
        spline.y[1] = 0.3
        spline.update()
        assert abs(spline(2.0) - 0.3) < 1e-14
