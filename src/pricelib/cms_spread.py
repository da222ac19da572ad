"""
CMS spread coupons and their pricer.

Each swap rate of the spread is given its own convexity-adjusted mean by a
CMS pricer; the two rates are then joined with a Gaussian copula on their
drivers. Options on the spread are integrated over the first driver with
Gauss-Hermite quadrature, pricing the second rate in closed form.
"""

import logging
import math

import numpy as np
from numpy.polynomial.hermite_e import hermegauss

from .black import bachelier_formula, black_formula
from .cms import CappedFlooredCoupon, CmsCoupon, FloatingRateCoupon, LinearTsrPricer
from .curves import YieldTermStructure
from .dates import DateLike
from .enums import DayCountConvention, OptionType, VolatilityType
from .indexes import SwapSpreadIndex
from .quotes import SimpleQuote, as_quote
from .settings import settings

logger = logging.getLogger(__name__)


class CmsSpreadCoupon(FloatingRateCoupon):
    """Coupon on a swap spread index."""

    def __init__(
        self,
        payment_date: DateLike,
        nominal: float,
        start_date: DateLike,
        end_date: DateLike,
        fixing_days: int,
        index: SwapSpreadIndex,
        gearing: float = 1.0,
        spread: float = 0.0,
        ref_period_start: DateLike | None = None,
        ref_period_end: DateLike | None = None,
        day_count: DayCountConvention = DayCountConvention.ACT_360,
        is_in_arrears: bool = False,
    ):
        super().__init__(
            payment_date, nominal, start_date, end_date, fixing_days, index,
            gearing, spread, ref_period_start, ref_period_end, day_count,
            is_in_arrears,
        )

    @property
    def swap_spread_index(self) -> SwapSpreadIndex:
        return self.index

    def leg_coupons(self) -> tuple[CmsCoupon, CmsCoupon]:
        """Unit-gearing CMS coupons on each swap index, with this coupon's dates."""
        return tuple(
            CmsCoupon(
                self.payment_date, self.nominal, self.accrual_start,
                self.accrual_end, self.fixing_days, index, 1.0, 0.0,
                self.ref_period_start, self.ref_period_end, self.day_count,
                self.is_in_arrears,
            )
            for index in (self.index.index1, self.index.index2)
        )


def capped_floored_cms_spread_coupon(
    payment_date: DateLike,
    nominal: float,
    start_date: DateLike,
    end_date: DateLike,
    fixing_days: int,
    index: SwapSpreadIndex,
    gearing: float = 1.0,
    spread: float = 0.0,
    cap: float | None = None,
    floor: float | None = None,
    ref_period_start: DateLike | None = None,
    ref_period_end: DateLike | None = None,
    day_count: DayCountConvention = DayCountConvention.ACT_360,
    is_in_arrears: bool = False,
) -> CappedFlooredCoupon:
    """Capped and/or floored CMS spread coupon."""
    underlying = CmsSpreadCoupon(
        payment_date, nominal, start_date, end_date, fixing_days, index,
        gearing, spread, ref_period_start, ref_period_end, day_count,
        is_in_arrears,
    )
    return CappedFlooredCoupon(underlying, cap, floor)


CappedFlooredCmsSpreadCoupon = capped_floored_cms_spread_coupon


class _Marginal:
    """
    Distribution of one swap rate at its fixing.

    Shifted lognormal: S = (adj + shift) * exp(-v/2 + sqrt(v) z) - shift
    Normal: S = adj + sqrt(v) z
    with z standard normal and v the total Black variance.
    """

    def __init__(self, adjusted: float, variance: float, shift: float, lognormal: bool):
        self.adjusted = adjusted
        self.variance = variance
        self.std_dev = math.sqrt(variance)
        self.shift = shift if lognormal else 0.0
        self.lognormal = lognormal

    def rate(self, z: np.ndarray) -> np.ndarray:
        if self.lognormal:
            return (self.adjusted + self.shift) * np.exp(
                -0.5 * self.variance + self.std_dev * z
            ) - self.shift
        return self.adjusted + self.std_dev * z

    def conditional_option(
        self,
        option_type: OptionType,
        strike: float,
        z: float,
        correlation: float,
    ) -> float:
        """Option on the rate given the other driver z, with corr(z, own driver) = correlation."""
        residual = math.sqrt(max(1.0 - correlation * correlation, 0.0))
        std_dev = self.std_dev * residual
        if self.lognormal:
            forward = (self.adjusted + self.shift) * math.exp(
                -0.5 * self.variance + self.std_dev * correlation * z
                + 0.5 * std_dev * std_dev
            ) - self.shift
            return black_formula(option_type, strike, forward, std_dev, 1.0, self.shift)
        forward = self.adjusted + self.std_dev * correlation * z
        return bachelier_formula(option_type, strike, forward, std_dev)


class LognormalCmsSpreadPricer:
    """
    Pricer for coupons on gearing1 * S1 + gearing2 * S2.

    Attributes
        cms_pricer: Pricer giving each swap rate's adjusted mean
        correlation: Correlation of the two rate drivers
        discount_curve: Curve for coupon prices
        integration_points: Gauss-Hermite nodes over the first driver
    """

    def __init__(
        self,
        cms_pricer: LinearTsrPricer,
        correlation: 'float | SimpleQuote',
        discount_curve: YieldTermStructure | None = None,
        integration_points: int = 16,
    ):
        if integration_points < 2:
            raise ValueError(f'at least 2 integration points required ({integration_points} given)')
        self.cms_pricer = cms_pricer
        self._correlation = as_quote(correlation)
        self.discount_curve = discount_curve
        self.integration_points = integration_points
        nodes, weights = hermegauss(integration_points)
        self._nodes = nodes
        self._weights = weights / math.sqrt(2.0 * math.pi)

    @property
    def correlation(self) -> float:
        rho = self._correlation.value
        if not -1.0 <= rho <= 1.0:
            raise ValueError(f'correlation ({rho}) must be in [-1, 1]')
        return rho

    def _is_fixed(self, coupon: CmsSpreadCoupon) -> bool:
        return coupon.fixing_date <= settings.evaluation_date

    def _marginal(self, coupon: CmsCoupon) -> _Marginal:
        vol = self.cms_pricer.swaption_vol
        fixing_date = coupon.fixing_date
        tenor = coupon.index.tenor
        return _Marginal(
            self.cms_pricer.adjusted_rate(coupon),
            vol.black_variance(fixing_date, tenor, coupon.index_fixing()),
            vol.shift(fixing_date, tenor),
            vol.volatility_type == VolatilityType.SHIFTED_LOGNORMAL,
        )

    def adjusted_rate(self, coupon: CmsSpreadCoupon) -> float:
        index = coupon.index
        if self._is_fixed(coupon):
            return coupon.index_fixing()
        c1, c2 = coupon.leg_coupons()
        return (
            index.gearing1 * self.cms_pricer.adjusted_rate(c1)
            + index.gearing2 * self.cms_pricer.adjusted_rate(c2)
        )

    def swaplet_rate(self, coupon: CmsSpreadCoupon) -> float:
        return coupon.gearing * self.adjusted_rate(coupon) + coupon.spread

    def _option_rate(self, coupon: CmsSpreadCoupon, option_type: OptionType, strike: float) -> float:
        w = option_type.value
        if self._is_fixed(coupon):
            return max(w * (coupon.index_fixing() - strike), 0.0)

        index = coupon.index
        g1, g2 = index.gearing1, index.gearing2
        c1, c2 = coupon.leg_coupons()
        m1, m2 = self._marginal(c1), self._marginal(c2)
        rho = self.correlation

        rates1 = m1.rate(self._nodes)
        if g2 == 0.0:
            payoff = np.maximum(w * (g1 * rates1 - strike), 0.0)
            return float(np.dot(self._weights, payoff))

        # payoff w * (g1 S1 + g2 S2 - K) is an option on S2 at (K - g1 S1) / g2
        inner_type = OptionType.CALL if w * g2 > 0 else OptionType.PUT
        values = np.array([
            abs(g2) * m2.conditional_option(inner_type, (strike - g1 * s1) / g2, z, rho)
            for z, s1 in zip(self._nodes, rates1)
        ])
        value = float(np.dot(self._weights, values))
        logger.debug(
            '%s %s at %.6f: %.10f (%d nodes)', index.name, option_type.name,
            strike, value, self.integration_points,
        )
        return value

    def caplet_rate(self, coupon: CmsSpreadCoupon, strike: float) -> float:
        return self._option_rate(coupon, OptionType.CALL, strike)

    def floorlet_rate(self, coupon: CmsSpreadCoupon, strike: float) -> float:
        return self._option_rate(coupon, OptionType.PUT, strike)

    def swaplet_price(self, coupon: CmsSpreadCoupon) -> float:
        curve = self.discount_curve or self.cms_pricer.discount_curve_for(coupon.leg_coupons()[0])
        return (
            self.swaplet_rate(coupon) * coupon.accrual_period
            * curve.discount(coupon.payment_date)
        )
