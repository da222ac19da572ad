"""
Swaption volatility structures.
"""

from opendate import Date

from .calendar import Calendar
from .dates import DateLike, to_date, year_fraction
from .enums import BadDayConvention, DayCountConvention, VolatilityType
from .quotes import SimpleQuote, as_quote
from .tenor import Tenor


class ConstantSwaptionVolatility:
    """
    Swaption volatility flat in option date, swap tenor and strike.

    For SHIFTED_LOGNORMAL the volatility applies to the rate plus ``shift``;
    for NORMAL it is an absolute (Bachelier) volatility.
    """

    def __init__(
        self,
        reference_date: DateLike,
        calendar: Calendar,
        business_day_convention: BadDayConvention,
        volatility: 'float | SimpleQuote',
        day_count: DayCountConvention,
        volatility_type: VolatilityType = VolatilityType.SHIFTED_LOGNORMAL,
        shift: float = 0.0,
    ):
        self._reference_date = to_date(reference_date)
        self.calendar = calendar
        self.business_day_convention = business_day_convention
        self._volatility = as_quote(volatility)
        self.day_count = day_count
        self.volatility_type = volatility_type
        self._shift = shift

    @property
    def reference_date(self) -> Date:
        return self._reference_date

    def time_from_reference(self, d: DateLike) -> float:
        return year_fraction(self._reference_date, d, self.day_count)

    def volatility(
        self,
        option_date: DateLike,
        swap_tenor: Tenor | None = None,
        strike: float | None = None,
    ) -> float:
        return self._volatility.value

    def shift(self, option_date: DateLike | None = None, swap_tenor: Tenor | None = None) -> float:
        return self._shift

    def black_variance(
        self,
        option_date: DateLike,
        swap_tenor: Tenor | None = None,
        strike: float | None = None,
    ) -> float:
        """Total variance sigma^2 * T to the option date."""
        t = self.time_from_reference(option_date)
        vol = self.volatility(option_date, swap_tenor, strike)
        return vol * vol * max(t, 0.0)
