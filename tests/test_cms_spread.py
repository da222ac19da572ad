"""
Tests for CMS spread coupons and the CMS spread pricer.
"""

import math

import numpy as np
import pytest
from scipy.stats import norm, qmc

from pricelib.calendar import TARGET
from pricelib.cms import CmsCoupon, LinearTsrPricer
from pricelib.cms_spread import CmsSpreadCoupon, LognormalCmsSpreadPricer
from pricelib.cms_spread import capped_floored_cms_spread_coupon
from pricelib.enums import BadDayConvention, DayCountConvention, VolatilityType
from pricelib.exceptions import FixingError
from pricelib.indexes import SwapSpreadIndex, euribor_swap_isda_fix_a
from pricelib.quotes import SimpleQuote
from pricelib.settings import settings
from pricelib.swaption_vol import ConstantSwaptionVolatility
from opendate import Date

VOL_CASES = {
    'lognormal': (0.20, VolatilityType.SHIFTED_LOGNORMAL, 0.0),
    'shifted_lognormal': (0.10, VolatilityType.SHIFTED_LOGNORMAL, 0.01),
    'normal': (0.0075, VolatilityType.NORMAL, 0.01),
}


@pytest.fixture(autouse=True)
def evaluation_date(cms_ref_date):
    settings.evaluation_date = cms_ref_date


@pytest.fixture
def cms10y(flat_curve_2pct):
    return euribor_swap_isda_fix_a('10Y', flat_curve_2pct, flat_curve_2pct)


@pytest.fixture
def cms2y(flat_curve_2pct):
    return euribor_swap_isda_fix_a('2Y', flat_curve_2pct, flat_curve_2pct)


@pytest.fixture
def cms10y2y(cms10y, cms2y):
    return SwapSpreadIndex('cms10y2y', cms10y, cms2y)


def _pricers(ref, curve, case, correlation=0.6):
    vol, vol_type, shift = VOL_CASES[case]
    swaption_vol = ConstantSwaptionVolatility(
        ref, TARGET, BadDayConvention.FOLLOWING, vol,
        DayCountConvention.ACT_365F, vol_type, shift,
    )
    cms_pricer = LinearTsrPricer(swaption_vol, SimpleQuote(0.01))
    spread_pricer = LognormalCmsSpreadPricer(cms_pricer, SimpleQuote(correlation), curve, 32)
    return cms_pricer, spread_pricer


def _spread_coupon(index, cap=None, floor=None):
    return capped_floored_cms_spread_coupon(
        Date(2029, 2, 23), 10000.0, Date(2028, 2, 23), Date(2029, 2, 23), 2,
        index, cap=cap, floor=floor, day_count=DayCountConvention.ACT_360,
    )


def _mc_reference(cms_pricer, spread_pricer, coupon, cap=None, floor=None):
    """Expected capped and floored spread by quasi Monte Carlo."""
    c1, c2 = coupon.leg_coupons()
    vol = cms_pricer.swaption_vol
    fixing_date = coupon.fixing_date
    rho = spread_pricer.correlation
    lognormal = vol.volatility_type == VolatilityType.SHIFTED_LOGNORMAL
    shift = vol.shift() if lognormal else 0.0

    u = qmc.Sobol(d=2, scramble=True, seed=42).random_base2(m=21)
    z = norm.ppf(u)
    e1 = z[:, 0]
    e2 = rho * z[:, 0] + math.sqrt(1.0 - rho * rho) * z[:, 1]

    rates = []
    for leg, eps in ((c1, e1), (c2, e2)):
        adjusted = cms_pricer.adjusted_rate(leg)
        variance = vol.black_variance(fixing_date, leg.index.tenor)
        if lognormal:
            rates.append(
                (adjusted + shift) * np.exp(-0.5 * variance + math.sqrt(variance) * eps) - shift
            )
        else:
            rates.append(adjusted + math.sqrt(variance) * eps)

    payoff = rates[0] - rates[1]
    if floor is not None:
        payoff = np.maximum(payoff, floor)
    if cap is not None:
        payoff = np.minimum(payoff, cap)
    return float(np.mean(payoff))


class TestFixings:
    """Tests for spread fixings on and before the evaluation date."""

    def test_past_fixing_missing(self, cms10y2y, cms_ref_date):
        """Test a past spread fixing needs stored leg fixings."""
        with pytest.raises(FixingError):
            cms10y2y.fixing(Date(2018, 2, 22))

    def test_todays_fixing_forecast(self, cms10y, cms2y, cms10y2y, cms_ref_date):
        """Test today's spread fixing is forecast from both legs."""
        expected = cms10y.fixing(cms_ref_date) - cms2y.fixing(cms_ref_date)
        assert abs(cms10y2y.fixing(cms_ref_date) - expected) < 1e-16

    def test_todays_fixing_enforced(self, cms10y, cms2y, cms10y2y, cms_ref_date):
        """Test both legs must be stored when today's fixings are enforced."""
        settings.enforces_todays_historic_fixings = True
        with pytest.raises(FixingError):
            cms10y2y.fixing(cms_ref_date)
        cms10y.add_fixing(cms_ref_date, 0.05)
        with pytest.raises(FixingError):
            cms10y2y.fixing(cms_ref_date)
        cms2y.add_fixing(cms_ref_date, 0.04)
        assert abs(cms10y2y.fixing(cms_ref_date) - 0.01) < 1e-12

    def test_past_fixing_stored(self, cms10y, cms2y, cms10y2y):
        """Test stored leg fixings give a past spread fixing."""
        d = Date(2018, 2, 22)
        cms10y.add_fixing(d, 0.05)
        cms2y.add_fixing(d, 0.03)
        assert abs(cms10y2y.fixing(d) - 0.02) < 1e-12


class TestCmsSpreadCoupon:
    """Tests for spread coupons fixing today."""

    def test_coupon_is_leg_difference(
        self, cms10y, cms2y, cms10y2y, cms_ref_date, flat_curve_2pct,
    ):
        """Test a coupon fixing today pays the difference of its legs."""
        value_date = cms10y2y.value_date(cms_ref_date)
        pay_date = TARGET.advance(value_date, 1, 'Y')
        cms_pricer, spread_pricer = _pricers(cms_ref_date, flat_curve_2pct, 'lognormal')

        cpn1a = CmsCoupon(pay_date, 10000.0, value_date, pay_date, 2, cms10y)
        cpn1b = CmsCoupon(pay_date, 10000.0, value_date, pay_date, 2, cms2y)
        cpn1 = CmsSpreadCoupon(pay_date, 10000.0, value_date, pay_date, 2, cms10y2y)
        assert cpn1.fixing_date == cms_ref_date

        cpn1a.set_pricer(cms_pricer)
        cpn1b.set_pricer(cms_pricer)
        cpn1.set_pricer(spread_pricer)
        assert abs(cpn1.rate() - (cpn1a.rate() - cpn1b.rate())) < 1e-14

        cms10y.add_fixing(cms_ref_date, 0.05)
        cms2y.add_fixing(cms_ref_date, 0.03)
        assert abs(cpn1.rate() - 0.02) < 1e-14
        assert abs(cpn1a.rate() - cpn1b.rate() - 0.02) < 1e-14

    def test_leg_coupons(self, cms10y2y):
        """Test the legs share the coupon dates."""
        coupon = _spread_coupon(cms10y2y).underlying
        c1, c2 = coupon.leg_coupons()
        assert c1.index is cms10y2y.index1
        assert c2.index is cms10y2y.index2
        assert c1.fixing_date == c2.fixing_date == coupon.fixing_date
        assert c1.gearing == c2.gearing == 1.0

    def test_fixed_capped_coupon(self, cms10y, cms2y, cms10y2y, cms_ref_date, flat_curve_2pct):
        """Test a fixed capped coupon pays the capped fixing."""
        value_date = cms10y2y.value_date(cms_ref_date)
        pay_date = TARGET.advance(value_date, 1, 'Y')
        coupon = capped_floored_cms_spread_coupon(
            pay_date, 10000.0, value_date, pay_date, 2, cms10y2y, cap=0.015,
        )
        coupon.set_pricer(_pricers(cms_ref_date, flat_curve_2pct, 'lognormal')[1])
        cms10y.add_fixing(cms_ref_date, 0.05)
        cms2y.add_fixing(cms_ref_date, 0.03)
        assert coupon.rate() == pytest.approx(0.015)


class TestSpreadPricer:
    """Tests for the copula pricer against quasi Monte Carlo."""

    @pytest.mark.parametrize('case', list(VOL_CASES))
    @pytest.mark.parametrize('cap,floor', [
        (None, None),
        (0.03, None),
        (None, 0.01),
        (0.03, 0.01),
    ])
    def test_against_monte_carlo(
        self, case, cap, floor, cms10y2y, cms_ref_date, flat_curve_2pct,
    ):
        """Test coupon rates against a simulated reference."""
        cms_pricer, spread_pricer = _pricers(cms_ref_date, flat_curve_2pct, case)
        coupon = _spread_coupon(cms10y2y, cap, floor)
        coupon.set_pricer(spread_pricer)
        reference = _mc_reference(cms_pricer, spread_pricer, coupon.underlying, cap, floor)
        assert abs(coupon.rate() - reference) < 1e-6

    @pytest.mark.parametrize('case', list(VOL_CASES))
    def test_put_call_parity(self, case, cms10y2y, cms_ref_date, flat_curve_2pct):
        """Test caplet minus floorlet is the adjusted spread less the strike."""
        _, spread_pricer = _pricers(cms_ref_date, flat_curve_2pct, case)
        coupon = _spread_coupon(cms10y2y).underlying
        strike = 0.005
        diff = spread_pricer.caplet_rate(coupon, strike) - spread_pricer.floorlet_rate(coupon, strike)
        assert abs(diff - (spread_pricer.adjusted_rate(coupon) - strike)) < 1e-10

    def test_correlation_lowers_option_value(self, cms10y2y, cms_ref_date, flat_curve_2pct):
        """Test higher correlation means a less volatile spread."""
        coupon = _spread_coupon(cms10y2y).underlying
        values = []
        for rho in (0.0, 0.3, 0.6, 0.9):
            _, spread_pricer = _pricers(cms_ref_date, flat_curve_2pct, 'normal', rho)
            atm = spread_pricer.adjusted_rate(coupon)
            values.append(spread_pricer.caplet_rate(coupon, atm))
        assert values == sorted(values, reverse=True)

    def test_correlation_quote(self, cms10y2y, cms_ref_date, flat_curve_2pct):
        """Test the pricer follows its correlation quote."""
        cms_pricer, _ = _pricers(cms_ref_date, flat_curve_2pct, 'normal')
        quote = SimpleQuote(0.6)
        spread_pricer = LognormalCmsSpreadPricer(cms_pricer, quote, flat_curve_2pct, 32)
        coupon = _spread_coupon(cms10y2y).underlying
        before = spread_pricer.caplet_rate(coupon, 0.01)
        quote.set_value(0.0)
        assert spread_pricer.caplet_rate(coupon, 0.01) > before
        quote.set_value(1.5)
        with pytest.raises(ValueError):
            spread_pricer.caplet_rate(coupon, 0.01)

    def test_swaplet_price(self, cms10y2y, cms_ref_date, flat_curve_2pct):
        """Test the swaplet price discounts the swaplet rate."""
        _, spread_pricer = _pricers(cms_ref_date, flat_curve_2pct, 'lognormal')
        coupon = _spread_coupon(cms10y2y).underlying
        expected = (
            spread_pricer.swaplet_rate(coupon) * coupon.accrual_period
            * flat_curve_2pct.discount(Date(2029, 2, 23))
        )
        assert abs(spread_pricer.swaplet_price(coupon) - expected) < 1e-15

    def test_integration_points(self, cms_ref_date, flat_curve_2pct):
        """Test the quadrature needs at least two nodes."""
        cms_pricer, _ = _pricers(cms_ref_date, flat_curve_2pct, 'normal')
        with pytest.raises(ValueError):
            LognormalCmsSpreadPricer(cms_pricer, 0.5, integration_points=1)
