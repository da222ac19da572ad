"""
Tests for curve classes.
"""

import math

import numpy as np
import pytest
from pricelib.curves import CreditCurve, FlatForward, FlatHazardRate, ZeroCurve
from pricelib.enums import Compounding, DayCountConvention, Frequency
from pricelib.quotes import SimpleQuote
from opendate import Date


class TestFlatForward:
    """Tests for FlatForward class."""

    def test_continuous_discount(self):
        """Test continuously compounded discounting."""
        curve = FlatForward(Date(2020, 1, 1), 0.05)
        assert abs(curve.discount(2.0) - math.exp(-0.10)) < 1e-14

    def test_discount_at_reference(self):
        """Test discount factor at time 0 is 1."""
        curve = FlatForward(Date(2020, 1, 1), 0.05)
        assert curve.discount(Date(2020, 1, 1)) == 1.0
        assert curve.discount(0.0) == 1.0

    def test_discount_from_date(self):
        """Test dates are converted with the curve day count."""
        curve = FlatForward(Date(2020, 1, 1), 0.05, DayCountConvention.ACT_360)
        df = curve.discount(Date(2020, 4, 1))
        assert abs(df - math.exp(-0.05 * 91 / 360)) < 1e-14

    def test_simple_and_annual_compounding(self):
        """Test other compounding conventions."""
        simple = FlatForward(Date(2020, 1, 1), 0.04, compounding=Compounding.SIMPLE)
        assert abs(simple.discount(2.0) - 1 / 1.08) < 1e-14
        annual = FlatForward(
            Date(2020, 1, 1), 0.04,
            compounding=Compounding.COMPOUNDED, frequency=Frequency.SEMI_ANNUAL,
        )
        assert abs(annual.discount(1.0) - 1.02**-2) < 1e-14

    def test_zero_rate(self):
        """Test zero rates of a flat curve."""
        curve = FlatForward(Date(2020, 1, 1), 0.03)
        assert abs(curve.zero_rate(5.0) - 0.03) < 1e-14

    def test_quote_driven(self):
        """Test the curve follows its quote."""
        quote = SimpleQuote(0.02)
        curve = FlatForward(Date(2020, 1, 1), quote)
        quote.set_value(0.04)
        assert curve.rate == 0.04
        assert abs(curve.discount(1.0) - math.exp(-0.04)) < 1e-14

    def test_forward_rate(self):
        """Test simple and continuous forward rates."""
        curve = FlatForward(Date(2020, 1, 1), 0.05)
        d1, d2 = Date(2021, 1, 1), Date(2022, 1, 1)
        tau = 365 / 365
        cont = curve.forward_rate(d1, d2, compounding=Compounding.CONTINUOUS)
        assert abs(cont - 0.05) < 1e-12
        simple = curve.forward_rate(d1, d2)
        assert abs(simple - (math.exp(0.05 * tau) - 1) / tau) < 1e-12

    def test_forward_rate_bad_dates(self):
        """Test reversed forward dates raise."""
        curve = FlatForward(Date(2020, 1, 1), 0.05)
        with pytest.raises(ValueError):
            curve.forward_rate(Date(2022, 1, 1), Date(2021, 1, 1))


class TestZeroCurve:
    """Tests for ZeroCurve class."""

    def test_create_zero_curve(self):
        """Test creating a zero curve."""
        curve = ZeroCurve(
            Date(2020, 1, 1),
            times=np.array([0.5, 1.0, 2.0, 5.0]),
            rates=np.array([0.01, 0.02, 0.025, 0.03]),
        )
        assert len(curve.times) == 4
        assert curve.reference_date == Date(2020, 1, 1)

    def test_discount_factor(self):
        """Test discount factor at a pillar."""
        curve = ZeroCurve(Date(2020, 1, 1), np.array([1.0, 2.0]), np.array([0.05, 0.05]))
        assert abs(curve.discount(1.0) - np.exp(-0.05)) < 1e-10

    def test_flat_forward_between_pillars(self):
        """Test the instantaneous forward is constant between pillars."""
        curve = ZeroCurve(Date(2020, 1, 1), np.array([1.0, 2.0]), np.array([0.02, 0.03]))
        df_1, df_15, df_2 = curve.discount(1.0), curve.discount(1.5), curve.discount(2.0)
        assert abs(df_15**2 - df_1 * df_2) < 1e-14

    def test_set_rate(self):
        """Test pillar rates can be overwritten."""
        curve = ZeroCurve(Date(2020, 1, 1), np.array([1.0, 2.0]), np.array([0.02, 0.03]))
        curve.set_rate(1, 0.04)
        assert abs(curve.zero_rate(2.0) - 0.04) < 1e-12

    def test_times_without_rates(self):
        """Test times and rates must come together."""
        with pytest.raises(ValueError):
            ZeroCurve(Date(2020, 1, 1), times=np.array([1.0]))


class TestCreditCurves:
    """Tests for default probability curves."""

    def test_flat_hazard_survival(self):
        """Test flat hazard survival probabilities."""
        curve = FlatHazardRate(Date(2020, 1, 1), 0.01)
        assert abs(curve.survival_probability(5.0) - math.exp(-0.05)) < 1e-14
        assert abs(curve.default_probability(5.0) - (1 - math.exp(-0.05))) < 1e-14

    def test_survival_before_reference(self):
        """Test survival is 1 at and before the reference date."""
        curve = FlatHazardRate(Date(2020, 1, 1), 0.01)
        assert curve.survival_probability(Date(2020, 1, 1)) == 1.0
        assert curve.survival_probability(Date(2019, 6, 1)) == 1.0

    def test_survival_at_date(self):
        """Test date-based survival uses the day count."""
        curve = FlatHazardRate(Date(2020, 1, 1), 0.02)
        q = curve.survival_probability_at_date(Date(2021, 1, 1))
        assert abs(q - math.exp(-0.02 * 366 / 365)) < 1e-14

    def test_credit_curve(self):
        """Test interpolated hazard rates."""
        curve = CreditCurve(Date(2020, 1, 1), np.array([1.0, 5.0]), np.array([0.01, 0.02]))
        assert abs(curve.survival_probability(1.0) - math.exp(-0.01)) < 1e-14
        assert abs(curve.survival_probability(5.0) - math.exp(-0.10)) < 1e-14
        assert curve.survival_probability(3.0) > curve.survival_probability(4.0)

    def test_credit_curve_length_mismatch(self):
        """Test mismatched arrays raise."""
        with pytest.raises(ValueError):
            CreditCurve(Date(2020, 1, 1), np.array([1.0, 5.0]), np.array([0.01]))
