"""
Tests for Black and Bachelier formulas.
"""

import math

import pytest
from pricelib.black import bachelier_formula, black_formula
from pricelib.enums import OptionType


class TestBlackFormula:
    """Tests for the shifted Black formula."""

    def test_atm_call(self):
        """Test the at-the-money approximation."""
        # ATM call = F * (2 N(s/2) - 1)
        value = black_formula(OptionType.CALL, 0.03, 0.03, 0.2)
        assert abs(value - 0.03 * 0.0796557) < 1e-7

    def test_put_call_parity(self):
        """Test C - P = D * (F - K)."""
        args = (0.025, 0.03, 0.25, 0.9)
        call = black_formula(OptionType.CALL, *args)
        put = black_formula(OptionType.PUT, *args)
        assert abs(call - put - 0.9 * 0.005) < 1e-14

    def test_displacement(self):
        """Test a shift prices the option on the shifted rate."""
        shifted = black_formula(OptionType.CALL, -0.002, 0.001, 0.3, displacement=0.01)
        plain = black_formula(OptionType.CALL, 0.008, 0.011, 0.3)
        assert abs(shifted - plain) < 1e-15

    def test_zero_std_dev_intrinsic(self):
        """Test zero volatility gives intrinsic value."""
        assert black_formula(OptionType.CALL, 0.02, 0.03, 0.0) == pytest.approx(0.01)
        assert black_formula(OptionType.PUT, 0.02, 0.03, 0.0) == 0.0

    def test_non_positive_strike(self):
        """Test a call struck at or below zero is a forward."""
        assert black_formula(OptionType.CALL, -0.01, 0.03, 0.2) == pytest.approx(0.04)
        assert black_formula(OptionType.PUT, -0.01, 0.03, 0.2) == 0.0

    def test_invalid_inputs(self):
        """Test inputs the formula cannot price."""
        with pytest.raises(ValueError):
            black_formula(OptionType.CALL, 0.02, -0.01, 0.2)
        with pytest.raises(ValueError):
            black_formula(OptionType.CALL, 0.02, 0.03, -0.2)


class TestBachelierFormula:
    """Tests for the normal option formula."""

    def test_atm(self):
        """Test ATM value is s / sqrt(2 pi)."""
        value = bachelier_formula(OptionType.CALL, 0.01, 0.01, 0.005)
        assert abs(value - 0.005 / math.sqrt(2 * math.pi)) < 1e-15

    def test_put_call_parity(self):
        """Test C - P = D * (F - K) with negative rates."""
        call = bachelier_formula(OptionType.CALL, -0.002, 0.004, 0.007, 0.95)
        put = bachelier_formula(OptionType.PUT, -0.002, 0.004, 0.007, 0.95)
        assert abs(call - put - 0.95 * 0.006) < 1e-15

    def test_zero_std_dev(self):
        """Test zero volatility gives intrinsic value."""
        assert bachelier_formula(OptionType.PUT, 0.03, 0.01, 0.0) == pytest.approx(0.02)
