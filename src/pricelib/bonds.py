"""
Fixed-rate bond cashflows and discounting.

Prices are quoted per 100 of face amount and discounted to the bond's
settlement date.
"""

import logging
import math
from dataclasses import dataclass

from opendate import Date

from .calendar import Calendar
from .curves import YieldTermStructure
from .dates import DateLike, to_date, year_fraction
from .enums import BadDayConvention, Compounding, DayCountConvention, Frequency
from .exceptions import ConvergenceError
from .root_finding import brent
from .schedule import Schedule
from .settings import settings

logger = logging.getLogger(__name__)


@dataclass
class FixedRateCoupon:
    """
    A fixed-rate coupon.

    Attributes
        payment_date: Date the amount is paid
        nominal: Notional the rate accrues on
        rate: Annual coupon rate
        accrual_start: Start of the accrual period
        accrual_end: End of the accrual period
        day_count: Day count for the accrual fraction
    """

    payment_date: Date
    nominal: float
    rate: float
    accrual_start: Date
    accrual_end: Date
    day_count: DayCountConvention

    @property
    def date(self) -> Date:
        return self.payment_date

    @property
    def accrual_period(self) -> float:
        return year_fraction(self.accrual_start, self.accrual_end, self.day_count)

    @property
    def amount(self) -> float:
        return self.nominal * self.rate * self.accrual_period

    def accrued_amount(self, d: DateLike) -> float:
        """Amount accrued from the start of the period to d."""
        d = to_date(d)
        if d <= self.accrual_start or d > self.payment_date:
            return 0.0
        end = min(d, self.accrual_end)
        return self.nominal * self.rate * year_fraction(self.accrual_start, end, self.day_count)


@dataclass
class Redemption:
    """Principal repaid at maturity."""

    payment_date: Date
    amount: float

    @property
    def date(self) -> Date:
        return self.payment_date


def fixed_rate_leg(
    schedule: Schedule,
    nominal: float,
    rates: list[float],
    day_count: DayCountConvention,
    payment_convention: BadDayConvention = BadDayConvention.FOLLOWING,
    calendar: Calendar | None = None,
) -> list[FixedRateCoupon]:
    """
    Build fixed-rate coupons over a schedule.

    If fewer rates than periods are given, the last rate is repeated.
    """
    if not rates:
        raise ValueError('no coupon rates given')
    calendar = calendar or schedule.calendar
    coupons = []
    for i, period in enumerate(schedule.periods):
        rate = rates[i] if i < len(rates) else rates[-1]
        coupons.append(FixedRateCoupon(
            payment_date=calendar.adjust(period.end, payment_convention),
            nominal=nominal,
            rate=rate,
            accrual_start=period.start,
            accrual_end=period.end,
            day_count=day_count,
        ))
    return coupons


class FixedRateBond:
    """
    A bullet bond paying fixed coupons.

    The bond is priced by discounting every cashflow after the settlement
    date on a yield curve.
    """

    def __init__(
        self,
        settlement_days: int,
        face_amount: float,
        schedule: Schedule,
        coupons: list[float],
        day_count: DayCountConvention,
        payment_convention: BadDayConvention = BadDayConvention.FOLLOWING,
        redemption: float = 100.0,
        issue_date: DateLike | None = None,
        calendar: Calendar | None = None,
    ):
        """
        Initialize a fixed-rate bond.

        Args:
            settlement_days: Business days from trade to settlement
            face_amount: Face value
            schedule: Coupon schedule
            coupons: Coupon rates (last one repeated if shorter than the schedule)
            day_count: Accrual day count
            payment_convention: Adjustment of payment dates
            redemption: Redemption per 100 of face
            issue_date: Issue date; no settlement before it
            calendar: Settlement and payment calendar (defaults to the schedule's)
        """
        self.settlement_days = settlement_days
        self.face_amount = face_amount
        self.schedule = schedule
        self.day_count = day_count
        self.payment_convention = payment_convention
        self.redemption_rate = redemption
        self.issue_date = to_date(issue_date) if issue_date is not None else None
        self.calendar = calendar or schedule.calendar

        self.coupons = fixed_rate_leg(
            schedule, face_amount, list(coupons), day_count,
            payment_convention, self.calendar,
        )
        self.redemption = Redemption(
            payment_date=self.calendar.adjust(schedule.end_date, payment_convention),
            amount=face_amount * redemption / 100.0,
        )

    @property
    def cashflows(self) -> list:
        return [*self.coupons, self.redemption]

    @property
    def maturity_date(self) -> Date:
        return self.redemption.payment_date

    @property
    def frequency(self) -> Frequency:
        return self.schedule.tenor.frequency

    def settlement_date(self, d: DateLike | None = None) -> Date:
        """Settlement date for a trade on d (default: evaluation date)."""
        trade = to_date(d) if d is not None else settings.evaluation_date
        settlement = self.calendar.advance(trade, self.settlement_days, 'D')
        if self.issue_date is not None and settlement < self.issue_date:
            return self.issue_date
        return settlement

    def is_expired(self, settlement: DateLike | None = None) -> bool:
        settlement = to_date(settlement) if settlement is not None else self.settlement_date()
        return self.maturity_date <= settlement

    def accrued_amount(self, settlement: DateLike | None = None) -> float:
        """Accrued interest per 100 of face at settlement."""
        settlement = to_date(settlement) if settlement is not None else self.settlement_date()
        # a coupon paid on the settlement date has already gone
        accrued = sum(
            c.accrued_amount(settlement) for c in self.coupons if c.date > settlement
        )
        return accrued / self.face_amount * 100.0

    def npv(self, curve: YieldTermStructure, settlement: DateLike | None = None) -> float:
        """Value of the cashflows paid after settlement, discounted to settlement."""
        settlement = to_date(settlement) if settlement is not None else self.settlement_date()
        df_settle = curve.discount(settlement)
        return sum(
            cf.amount * curve.discount(cf.date) / df_settle
            for cf in self.cashflows
            if cf.date > settlement
        )

    def dirty_price(self, curve: YieldTermStructure, settlement: DateLike | None = None) -> float:
        """Dirty price per 100 of face."""
        return self.npv(curve, settlement) / self.face_amount * 100.0

    def clean_price(self, curve: YieldTermStructure, settlement: DateLike | None = None) -> float:
        """Clean price per 100 of face: dirty price less accrued interest."""
        settlement = to_date(settlement) if settlement is not None else self.settlement_date()
        return self.dirty_price(curve, settlement) - self.accrued_amount(settlement)

    def dirty_price_from_yield(
        self,
        ytm: float,
        settlement: DateLike | None = None,
        compounding: Compounding = Compounding.COMPOUNDED,
    ) -> float:
        """Dirty price per 100 of face discounting at a flat yield."""
        settlement = to_date(settlement) if settlement is not None else self.settlement_date()
        f = self.frequency.periods_per_year
        pv = 0.0
        for cf in self.cashflows:
            if cf.date <= settlement:
                continue
            t = year_fraction(settlement, cf.date, self.day_count)
            if compounding == Compounding.COMPOUNDED:
                df = (1.0 + ytm / f) ** (-f * t)
            elif compounding == Compounding.SIMPLE:
                df = 1.0 / (1.0 + ytm * t)
            else:
                df = math.exp(-ytm * t)
            pv += cf.amount * df
        return pv / self.face_amount * 100.0

    def yield_to_maturity(
        self,
        clean_price: float,
        settlement: DateLike | None = None,
        compounding: Compounding = Compounding.COMPOUNDED,
    ) -> float:
        """Flat yield reproducing a clean price."""
        settlement = to_date(settlement) if settlement is not None else self.settlement_date()
        target = clean_price + self.accrued_amount(settlement)

        def objective(y: float) -> float:
            return self.dirty_price_from_yield(y, settlement, compounding) - target

        try:
            return brent(objective, -0.5, 1.0, tol=1e-12)
        except ConvergenceError:
            logger.warning('Yield search failed for clean price %s', clean_price)
            raise
