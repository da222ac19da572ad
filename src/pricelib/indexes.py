"""
Interest rate indexes and fixing histories.

An index fixing on a past date must come from the stored history; a fixing
on a future date is forecast from curves. On the evaluation date itself a
stored fixing wins, and otherwise the fixing is forecast unless
``settings.enforces_todays_historic_fixings`` is set.
"""

import logging
from abc import ABC, abstractmethod
from datetime import date

from opendate import Date

from .calendar import TARGET, Calendar
from .curves import YieldTermStructure
from .dates import DateLike, date_key, to_date, year_fraction
from .enums import BadDayConvention, DayCountConvention, DateGeneration
from .exceptions import FixingError
from .schedule import Schedule
from .settings import settings
from .tenor import Tenor, parse_tenor

logger = logging.getLogger(__name__)


class IndexManager:
    """Fixing histories of all indexes, keyed by index name."""

    def __init__(self):
        self._histories: dict[str, dict[date, float]] = {}

    def history(self, name: str) -> dict[date, float]:
        return self._histories.setdefault(name, {})

    def has_history(self, name: str) -> bool:
        return bool(self._histories.get(name))

    def clear_history(self, name: str) -> None:
        self._histories.pop(name, None)

    def clear_histories(self) -> None:
        self._histories.clear()


index_manager = IndexManager()


class InterestRateIndex(ABC):
    """
    Base class for rate indexes with fixing days on a calendar.

    Histories are shared between instances with the same name.
    """

    def __init__(
        self,
        family_name: str,
        tenor: Tenor | str,
        fixing_days: int,
        fixing_calendar: Calendar,
        day_count: DayCountConvention,
    ):
        self.family_name = family_name
        self.tenor = parse_tenor(tenor)
        self.fixing_days = fixing_days
        self.fixing_calendar = fixing_calendar
        self.day_count = day_count

    @property
    def name(self) -> str:
        return f'{self.family_name}{self.tenor}'

    def is_valid_fixing_date(self, d: DateLike) -> bool:
        return self.fixing_calendar.is_business_day(d)

    def fixing_date(self, value_date: DateLike) -> Date:
        return self.fixing_calendar.advance(value_date, -self.fixing_days, 'D')

    def value_date(self, fixing_date: DateLike) -> Date:
        if not self.is_valid_fixing_date(fixing_date):
            raise FixingError(f'{fixing_date} is not a valid fixing date for {self.name}')
        return self.fixing_calendar.advance(fixing_date, self.fixing_days, 'D')

    def time_series(self) -> dict[date, float]:
        return dict(index_manager.history(self.name))

    def add_fixing(self, d: DateLike, value: float, force_overwrite: bool = False) -> None:
        """
        Store a historical fixing.

        Raises FixingError for an invalid fixing date, or if a different
        value is already stored and force_overwrite is not set.
        """
        if not self.is_valid_fixing_date(d):
            raise FixingError(f'{to_date(d)} is not a valid fixing date for {self.name}')
        history = index_manager.history(self.name)
        key = date_key(d)
        if key in history and history[key] != value and not force_overwrite:
            raise FixingError(
                f'duplicated fixing for {self.name} on {key}: '
                f'{history[key]} while {value} given'
            )
        history[key] = value

    def clear_fixings(self) -> None:
        index_manager.clear_history(self.name)

    def past_fixing(self, d: DateLike) -> float | None:
        return index_manager.history(self.name).get(date_key(d))

    def fixing(self, fixing_date: DateLike, forecast_todays_fixing: bool = False) -> float:
        """
        Fixing for a date, from history or forecast.

        Args:
            fixing_date: Date of the fixing
            forecast_todays_fixing: Forecast today's fixing even if one is stored

        Returns
            Index fixing
        """
        fixing_date = to_date(fixing_date)
        if not self.is_valid_fixing_date(fixing_date):
            raise FixingError(f'{fixing_date} is not a valid fixing date for {self.name}')

        today = settings.evaluation_date
        if fixing_date > today or (fixing_date == today and forecast_todays_fixing):
            return self.forecast_fixing(fixing_date)

        stored = self.past_fixing(fixing_date)
        if stored is not None:
            return stored

        if fixing_date < today or settings.enforces_todays_historic_fixings:
            raise FixingError(f'Missing {self.name} fixing for {fixing_date}')

        logger.debug('No %s fixing stored for today (%s), forecasting', self.name, fixing_date)
        return self.forecast_fixing(fixing_date)

    @abstractmethod
    def forecast_fixing(self, fixing_date: DateLike) -> float:
        """Fixing forecast from market curves."""

    def __repr__(self) -> str:
        return f'{type(self).__name__}({self.name})'


class IborIndex(InterestRateIndex):
    """Interbank deposit rate index, forecast as a simple forward rate."""

    def __init__(
        self,
        family_name: str,
        tenor: Tenor | str,
        fixing_days: int,
        fixing_calendar: Calendar,
        business_day_convention: BadDayConvention,
        end_of_month: bool,
        day_count: DayCountConvention,
        forwarding_curve: YieldTermStructure | None = None,
    ):
        super().__init__(family_name, tenor, fixing_days, fixing_calendar, day_count)
        self.business_day_convention = business_day_convention
        self.end_of_month = end_of_month
        self.forwarding_curve = forwarding_curve

    def maturity_date(self, value_date: DateLike) -> Date:
        return self.tenor.advance(
            value_date, self.fixing_calendar, self.business_day_convention,
            self.end_of_month,
        )

    def forecast_fixing(self, fixing_date: DateLike) -> float:
        value_date = self.value_date(fixing_date)
        return self.forward_rate(value_date, self.maturity_date(value_date))

    def forward_rate(self, start: DateLike, end: DateLike) -> float:
        """Simple forward over [start, end] on the forwarding curve."""
        if self.forwarding_curve is None:
            raise FixingError(f'null term structure set to {self.name}')
        tau = year_fraction(start, end, self.day_count)
        curve = self.forwarding_curve
        return (curve.discount(start) / curve.discount(end) - 1.0) / tau


def euribor(tenor: Tenor | str, forwarding_curve: YieldTermStructure | None = None) -> IborIndex:
    """Euribor index: T+2 on TARGET, modified following, end of month, ACT/360."""
    return IborIndex(
        'Euribor', tenor, 2, TARGET, BadDayConvention.MODIFIED_FOLLOWING,
        True, DayCountConvention.ACT_360, forwarding_curve,
    )


class SwapIndex(InterestRateIndex):
    """
    Swap rate index.

    The fixing is the par rate of a spot-starting swap of the index tenor,
    paying a fixed leg against the IBOR index. Forwards come from the IBOR
    index's curve; both legs are discounted on the discounting curve
    (the forwarding curve if none is given).
    """

    def __init__(
        self,
        family_name: str,
        tenor: Tenor | str,
        fixing_days: int,
        fixing_calendar: Calendar,
        fixed_leg_tenor: Tenor | str,
        fixed_leg_convention: BadDayConvention,
        fixed_leg_day_count: DayCountConvention,
        ibor_index: IborIndex,
        discounting_curve: YieldTermStructure | None = None,
    ):
        super().__init__(family_name, tenor, fixing_days, fixing_calendar, fixed_leg_day_count)
        self.fixed_leg_tenor = parse_tenor(fixed_leg_tenor)
        self.fixed_leg_convention = fixed_leg_convention
        self.fixed_leg_day_count = fixed_leg_day_count
        self.ibor_index = ibor_index
        self._discounting_curve = discounting_curve

    @property
    def forwarding_curve(self) -> YieldTermStructure | None:
        return self.ibor_index.forwarding_curve

    @property
    def discounting_curve(self) -> YieldTermStructure | None:
        return self._discounting_curve or self.ibor_index.forwarding_curve

    def maturity_date(self, value_date: DateLike) -> Date:
        return self.tenor.advance(
            value_date, self.fixing_calendar, self.fixed_leg_convention,
            self.ibor_index.end_of_month,
        )

    def fixed_leg_schedule(self, fixing_date: DateLike) -> Schedule:
        start = self.value_date(fixing_date)
        return Schedule(
            start, self.maturity_date(start), self.fixed_leg_tenor,
            self.fixing_calendar, self.fixed_leg_convention,
            self.fixed_leg_convention, DateGeneration.BACKWARD,
            self.ibor_index.end_of_month,
        )

    def floating_leg_schedule(self, fixing_date: DateLike) -> Schedule:
        start = self.value_date(fixing_date)
        return Schedule(
            start, self.maturity_date(start), self.ibor_index.tenor,
            self.fixing_calendar, self.ibor_index.business_day_convention,
            self.ibor_index.business_day_convention, DateGeneration.BACKWARD,
            self.ibor_index.end_of_month,
        )

    def fixed_leg(self, fixing_date: DateLike) -> list[tuple[Date, float]]:
        """(payment date, accrual fraction) of each fixed coupon."""
        return [
            (p.end, year_fraction(p.start, p.end, self.fixed_leg_day_count))
            for p in self.fixed_leg_schedule(fixing_date).periods
        ]

    def annuity(self, fixing_date: DateLike, curve: YieldTermStructure | None = None) -> float:
        """Fixed leg PV of a unit rate on unit notional."""
        curve = curve or self.discounting_curve
        return sum(tau * curve.discount(d) for d, tau in self.fixed_leg(fixing_date))

    def floating_leg_npv(self, fixing_date: DateLike) -> float:
        curve = self.discounting_curve
        npv = 0.0
        for period in self.floating_leg_schedule(fixing_date).periods:
            tau = year_fraction(period.start, period.end, self.ibor_index.day_count)
            fwd = self.ibor_index.forward_rate(period.start, period.end)
            npv += fwd * tau * curve.discount(period.end)
        return npv

    def forecast_fixing(self, fixing_date: DateLike) -> float:
        if self.discounting_curve is None:
            raise FixingError(f'null term structure set to {self.name}')
        return self.floating_leg_npv(fixing_date) / self.annuity(fixing_date)


def euribor_swap_isda_fix_a(
    tenor: Tenor | str,
    forwarding_curve: YieldTermStructure | None = None,
    discounting_curve: YieldTermStructure | None = None,
) -> SwapIndex:
    """
    EUR swap rate (ISDA fix A): annual 30/360 fixed leg against Euribor 6M
    (3M for tenors of one year or less), T+2 on TARGET.
    """
    tenor = parse_tenor(tenor)
    ibor_tenor = '6M' if tenor.years > 1.0 else '3M'
    return SwapIndex(
        'EuriborSwapIsdaFixA', tenor, 2, TARGET, '1Y',
        BadDayConvention.MODIFIED_FOLLOWING, DayCountConvention.THIRTY_360,
        euribor(ibor_tenor, forwarding_curve), discounting_curve,
    )


class SwapSpreadIndex(InterestRateIndex):
    """
    Spread between two swap rates: gearing1 * index1 + gearing2 * index2.

    Fixings are never stored for the spread itself; each leg applies its
    own fixing rules.
    """

    def __init__(
        self,
        family_name: str,
        index1: SwapIndex,
        index2: SwapIndex,
        gearing1: float = 1.0,
        gearing2: float = -1.0,
    ):
        if index1.fixing_days != index2.fixing_days:
            raise ValueError(
                f'index1 fixing days ({index1.fixing_days}) must be equal to '
                f'index2 fixing days ({index2.fixing_days})'
            )
        super().__init__(
            family_name, index1.tenor, index1.fixing_days,
            index1.fixing_calendar, index1.day_count,
        )
        self.index1 = index1
        self.index2 = index2
        self.gearing1 = gearing1
        self.gearing2 = gearing2

    @property
    def name(self) -> str:
        return self.family_name

    def is_valid_fixing_date(self, d: DateLike) -> bool:
        return self.index1.is_valid_fixing_date(d) and self.index2.is_valid_fixing_date(d)

    def add_fixing(self, d: DateLike, value: float, force_overwrite: bool = False) -> None:
        raise FixingError(f'{self.name} fixings come from {self.index1.name} and {self.index2.name}')

    def past_fixing(self, d: DateLike) -> float | None:
        f1 = self.index1.past_fixing(d)
        f2 = self.index2.past_fixing(d)
        if f1 is None or f2 is None:
            return None
        return self.gearing1 * f1 + self.gearing2 * f2

    def fixing(self, fixing_date: DateLike, forecast_todays_fixing: bool = False) -> float:
        return (
            self.gearing1 * self.index1.fixing(fixing_date, forecast_todays_fixing)
            + self.gearing2 * self.index2.fixing(fixing_date, forecast_todays_fixing)
        )

    def forecast_fixing(self, fixing_date: DateLike) -> float:
        return (
            self.gearing1 * self.index1.forecast_fixing(fixing_date)
            + self.gearing2 * self.index2.forecast_fixing(fixing_date)
        )
