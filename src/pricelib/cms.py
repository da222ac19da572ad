"""
CMS coupons and Linear TSR pricing.

A CMS coupon pays gearing * S + spread on a swap rate S fixed before the
accrual period. Paying S at a date other than the swap's natural dates
needs a convexity adjustment; the Linear TSR pricer gets it by writing the
ratio of the payment discount factor to the swap annuity as an affine
function of S.
"""

import logging
import math

import numpy as np
from opendate import Date
from scipy.stats import norm

from .black import bachelier_formula, black_formula
from .curves import YieldTermStructure
from .dates import DateLike, to_date, year_fraction
from .enums import DayCountConvention, OptionType, VolatilityType
from .exceptions import PricingError
from .indexes import InterestRateIndex, SwapIndex
from .quotes import SimpleQuote, as_quote
from .settings import settings
from .swaption_vol import ConstantSwaptionVolatility

logger = logging.getLogger(__name__)


class FloatingRateCoupon:
    """
    Coupon paying gearing * index fixing + spread over an accrual period.

    Rates, caplets and floorlets come from a pricer set with ``set_pricer``.
    """

    def __init__(
        self,
        payment_date: DateLike,
        nominal: float,
        start_date: DateLike,
        end_date: DateLike,
        fixing_days: int,
        index: InterestRateIndex,
        gearing: float = 1.0,
        spread: float = 0.0,
        ref_period_start: DateLike | None = None,
        ref_period_end: DateLike | None = None,
        day_count: DayCountConvention = DayCountConvention.ACT_360,
        is_in_arrears: bool = False,
    ):
        if gearing == 0.0:
            raise ValueError('Null gearing not allowed')
        self.payment_date = to_date(payment_date)
        self.nominal = nominal
        self.accrual_start = to_date(start_date)
        self.accrual_end = to_date(end_date)
        self.fixing_days = fixing_days
        self.index = index
        self.gearing = gearing
        self.spread = spread
        self.ref_period_start = to_date(ref_period_start or start_date)
        self.ref_period_end = to_date(ref_period_end or end_date)
        self.day_count = day_count
        self.is_in_arrears = is_in_arrears
        self._pricer = None

    @property
    def date(self) -> Date:
        return self.payment_date

    @property
    def fixing_date(self) -> Date:
        anchor = self.accrual_end if self.is_in_arrears else self.accrual_start
        return self.index.fixing_calendar.advance(anchor, -self.fixing_days, 'D')

    @property
    def accrual_period(self) -> float:
        return year_fraction(self.accrual_start, self.accrual_end, self.day_count)

    def index_fixing(self) -> float:
        return self.index.fixing(self.fixing_date)

    def set_pricer(self, pricer) -> None:
        self._pricer = pricer

    @property
    def pricer(self):
        if self._pricer is None:
            raise PricingError(f'pricer not set for coupon on {self.index.name}')
        return self._pricer

    def rate(self) -> float:
        return self.pricer.swaplet_rate(self)

    def amount(self) -> float:
        return self.rate() * self.accrual_period * self.nominal

    @property
    def adjusted_fixing(self) -> float:
        """Convexity-adjusted index rate implied by the coupon rate."""
        return (self.rate() - self.spread) / self.gearing

    def price(self, curve: YieldTermStructure) -> float:
        return self.amount() * curve.discount(self.payment_date)

    def __repr__(self) -> str:
        return (
            f'{type(self).__name__}({self.index.name}, '
            f'{self.accrual_start} - {self.accrual_end})'
        )


class CmsCoupon(FloatingRateCoupon):
    """Coupon on a swap rate index."""

    def __init__(
        self,
        payment_date: DateLike,
        nominal: float,
        start_date: DateLike,
        end_date: DateLike,
        fixing_days: int,
        index: SwapIndex,
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
    def swap_index(self) -> SwapIndex:
        return self.index


class CappedFlooredCoupon:
    """
    Floating coupon with an optional cap and floor on its rate.

    rate = swaplet + floorlet(floor) - caplet(cap), where the cap and floor
    apply to gearing * fixing + spread. For negative gearing the roles of
    cap and floor on the index are swapped.
    """

    def __init__(
        self,
        underlying: FloatingRateCoupon,
        cap: float | None = None,
        floor: float | None = None,
    ):
        if cap is not None and floor is not None and cap < floor:
            raise ValueError(f'cap level ({cap}) less than floor level ({floor})')
        self.underlying = underlying
        self.cap = cap
        self.floor = floor

    def __getattr__(self, name):
        # dates, nominal, index and the rest come from the underlying coupon
        if name == 'underlying':
            raise AttributeError(name)
        return getattr(self.underlying, name)

    @property
    def is_capped(self) -> bool:
        return self.cap is not None

    @property
    def is_floored(self) -> bool:
        return self.floor is not None

    def _effective(self, level: float) -> float:
        return (level - self.underlying.spread) / self.underlying.gearing

    def rate(self) -> float:
        coupon = self.underlying
        pricer = coupon.pricer
        g = coupon.gearing
        rate = pricer.swaplet_rate(coupon)

        # an index cap is a coupon cap when gearing is positive, a coupon floor otherwise
        index_cap = self.cap if g > 0 else self.floor
        index_floor = self.floor if g > 0 else self.cap
        if index_cap is not None:
            rate -= g * pricer.caplet_rate(coupon, self._effective(index_cap))
        if index_floor is not None:
            rate += g * pricer.floorlet_rate(coupon, self._effective(index_floor))
        return rate

    def amount(self) -> float:
        return self.rate() * self.underlying.accrual_period * self.underlying.nominal

    def price(self, curve: YieldTermStructure) -> float:
        return self.amount() * curve.discount(self.underlying.payment_date)

    def __repr__(self) -> str:
        return f'CappedFlooredCoupon({self.underlying!r}, cap={self.cap}, floor={self.floor})'


def capped_floored_cms_coupon(
    payment_date: DateLike,
    nominal: float,
    start_date: DateLike,
    end_date: DateLike,
    fixing_days: int,
    index: SwapIndex,
    gearing: float = 1.0,
    spread: float = 0.0,
    cap: float | None = None,
    floor: float | None = None,
    ref_period_start: DateLike | None = None,
    ref_period_end: DateLike | None = None,
    day_count: DayCountConvention = DayCountConvention.ACT_360,
    is_in_arrears: bool = False,
) -> CappedFlooredCoupon:
    underlying = CmsCoupon(
        payment_date, nominal, start_date, end_date, fixing_days, index,
        gearing, spread, ref_period_start, ref_period_end, day_count,
        is_in_arrears,
    )
    return CappedFlooredCoupon(underlying, cap, floor)


class LinearTsrPricer:
    """
    Linear terminal swap rate model for CMS coupons.

    P(T, Tp) / A(T) ~ a * S(T) + b' under the annuity measure, with b'
    fixed by matching today's ratio. The slope a is the sensitivity of the
    ratio to the swap rate under a parallel shift of a one-factor Gaussian
    short rate model with the given mean reversion.

    All rates are undiscounted and per unit of accrual: expectations under
    the payment-date forward measure.
    """

    def __init__(
        self,
        swaption_vol: ConstantSwaptionVolatility,
        mean_reversion: 'float | SimpleQuote',
        coupon_discount_curve: YieldTermStructure | None = None,
    ):
        """
        Initialize the pricer.

        Args:
            swaption_vol: Swaption volatility for the swap index
            mean_reversion: Mean reversion of the Gaussian model (number or quote)
            coupon_discount_curve: Curve discounting the coupon payments
                (default: the swap index discounting curve)
        """
        self.swaption_vol = swaption_vol
        self._mean_reversion = as_quote(mean_reversion)
        self.coupon_discount_curve = coupon_discount_curve

    @property
    def mean_reversion(self) -> float:
        return self._mean_reversion.value

    def discount_curve_for(self, coupon: FloatingRateCoupon) -> YieldTermStructure:
        curve = self.coupon_discount_curve or coupon.index.discounting_curve
        if curve is None:
            raise PricingError(f'no discount curve for {coupon.index.name}')
        return curve

    def _is_fixed(self, coupon: FloatingRateCoupon) -> bool:
        return coupon.fixing_date <= settings.evaluation_date

    def _g(self, fixing_date: Date, d: DateLike) -> float:
        tau = year_fraction(fixing_date, d, DayCountConvention.ACT_365F)
        kappa = self.mean_reversion
        if abs(kappa) < 1e-4:
            return tau
        return (1.0 - math.exp(-kappa * tau)) / kappa

    def _state(self, coupon: FloatingRateCoupon) -> dict:
        """Forward, variance and affine mapping for an unfixed coupon."""
        index = coupon.index
        fixing_date = coupon.fixing_date
        curve = self.discount_curve_for(coupon)

        forward = index.fixing(fixing_date)
        fixed_leg = index.fixed_leg(fixing_date)
        start = index.value_date(fixing_date)
        end = fixed_leg[-1][0]

        pay_dfs = np.array([curve.discount(d) for d, _ in fixed_leg])
        taus = np.array([tau for _, tau in fixed_leg])
        gs = np.array([self._g(fixing_date, d) for d, _ in fixed_leg])
        annuity = float(np.sum(taus * pay_dfs))
        d_annuity = -float(np.sum(taus * gs * pay_dfs))

        p_pay = curve.discount(coupon.payment_date)
        g_pay = self._g(fixing_date, coupon.payment_date)
        p_start, g_start = curve.discount(start), self._g(fixing_date, start)
        p_end, g_end = curve.discount(end), self._g(fixing_date, end)

        d_alpha = -p_pay * (g_pay * annuity + d_annuity) / annuity**2
        d_swap = (
            (-g_start * p_start + g_end * p_end) * annuity
            - (p_start - p_end) * d_annuity
        ) / annuity**2
        slope = d_alpha / d_swap
        ratio = p_pay / annuity

        variance = self.swaption_vol.black_variance(fixing_date, index.tenor, forward)
        shift = self.swaption_vol.shift(fixing_date, index.tenor)
        lognormal = self.swaption_vol.volatility_type == VolatilityType.SHIFTED_LOGNORMAL
        if lognormal:
            rate_variance = (forward + shift) ** 2 * math.expm1(variance)
        else:
            rate_variance = variance

        return {
            'forward': forward,
            'variance': variance,
            'shift': shift,
            'lognormal': lognormal,
            'slope': slope,
            'ratio': ratio,
            'rate_variance': rate_variance,
        }

    def adjusted_rate(self, coupon: FloatingRateCoupon) -> float:
        """Expected index fixing under the payment forward measure."""
        if self._is_fixed(coupon):
            return coupon.index_fixing()
        s = self._state(coupon)
        adjusted = s['forward'] + s['slope'] * s['rate_variance'] / s['ratio']
        logger.debug(
            '%s fixing %s: forward=%.8f convexity adjustment=%.8f',
            coupon.index.name, coupon.fixing_date, s['forward'],
            adjusted - s['forward'],
        )
        return adjusted

    def swaplet_rate(self, coupon: FloatingRateCoupon) -> float:
        return coupon.gearing * self.adjusted_rate(coupon) + coupon.spread

    def caplet_rate(self, coupon: FloatingRateCoupon, strike: float) -> float:
        """E[(S - K)+] on the index fixing under the payment measure."""
        if self._is_fixed(coupon):
            return max(coupon.index_fixing() - strike, 0.0)
        s = self._state(coupon)
        forward, variance = s['forward'], s['variance']
        std_dev = math.sqrt(variance)

        if s['lognormal']:
            shift = s['shift']
            call = black_formula(OptionType.CALL, strike, forward, std_dev, 1.0, shift)
            f, k = forward + shift, strike + shift
            if k <= 0.0:
                second = f * f * math.exp(variance) - k * f
            elif std_dev == 0.0:
                second = f * max(f - k, 0.0)
            else:
                d1 = math.log(f / k) / std_dev + 0.5 * std_dev
                second = f * f * math.exp(variance) * norm.cdf(d1 + std_dev) - k * f * norm.cdf(d1)
            # E[S (S - K)+] with S = X - shift
            second -= shift * call
        else:
            call = bachelier_formula(OptionType.CALL, strike, forward, std_dev)
            m = forward - strike
            if std_dev == 0.0:
                squared = max(m, 0.0) ** 2
            else:
                h = m / std_dev
                squared = (m * m + variance) * norm.cdf(h) + m * std_dev * norm.pdf(h)
            second = squared + strike * call

        slope, ratio = s['slope'], s['ratio']
        return ((ratio - slope * forward) * call + slope * second) / ratio

    def floorlet_rate(self, coupon: FloatingRateCoupon, strike: float) -> float:
        """E[(K - S)+] by parity with the caplet."""
        if self._is_fixed(coupon):
            return max(strike - coupon.index_fixing(), 0.0)
        return self.caplet_rate(coupon, strike) - (self.adjusted_rate(coupon) - strike)

    def swaplet_price(self, coupon: FloatingRateCoupon) -> float:
        curve = self.discount_curve_for(coupon)
        return (
            self.swaplet_rate(coupon) * coupon.accrual_period
            * curve.discount(coupon.payment_date)
        )
