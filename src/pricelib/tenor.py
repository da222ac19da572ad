"""
Tenor parsing and manipulation.

A tenor represents a time period like "3M" (3 months), "10Y" (10 years), etc.
"""

import re
from dataclasses import dataclass

from opendate import Date

from .calendar import WEEKENDS_ONLY, Calendar
from .dates import DateLike, add_days, add_months, add_years, to_date
from .enums import BadDayConvention, Frequency


@dataclass(frozen=True)
class Tenor:
    """
    Represents a time period.

    Attributes
        value: Numeric value (e.g., 3 for "3M")
        unit: Time unit ('D', 'W', 'M', 'Y')
    """

    value: int
    unit: str

    def __post_init__(self):
        object.__setattr__(self, 'unit', self.unit.upper())
        if self.unit not in {'D', 'W', 'M', 'Y'}:
            raise ValueError(f'Invalid tenor unit: {self.unit}')

    def __str__(self) -> str:
        return f'{self.value}{self.unit}'

    def __repr__(self) -> str:
        return f"Tenor({self.value}, '{self.unit}')"

    def __mul__(self, n: int) -> 'Tenor':
        return Tenor(self.value * n, self.unit)

    __rmul__ = __mul__

    def __neg__(self) -> 'Tenor':
        return Tenor(-self.value, self.unit)

    @property
    def months(self) -> int:
        """Convert tenor to number of months (0 for day and week tenors)."""
        if self.unit == 'M':
            return self.value
        if self.unit == 'Y':
            return self.value * 12
        return 0

    @property
    def years(self) -> float:
        """Convert tenor to approximate number of years."""
        if self.unit == 'D':
            return self.value / 365.0
        elif self.unit == 'W':
            return self.value * 7 / 365.0
        elif self.unit == 'M':
            return self.value / 12.0
        else:
            return float(self.value)

    @property
    def frequency(self) -> Frequency:
        """Payment frequency of a schedule stepping by this tenor."""
        if self.unit == 'W':
            return Frequency.from_weeks(self.value)
        if self.unit == 'D':
            return {0: Frequency.NO_FREQUENCY, 1: Frequency.DAILY}.get(
                self.value, Frequency.OTHER_FREQUENCY
            )
        return Frequency.from_months(self.months)

    def add_to_date(
        self,
        d: DateLike,
        convention: BadDayConvention = BadDayConvention.NONE,
        calendar: Calendar = WEEKENDS_ONLY,
    ) -> Date:
        """
        Add this tenor to a date using calendar-day arithmetic.

        Args:
            d: Starting date
            convention: Bad day convention to apply to result
            calendar: Calendar used for the adjustment

        Returns
            Resulting date
        """
        dt = to_date(d)

        if self.unit == 'D':
            result = add_days(dt, self.value)
        elif self.unit == 'W':
            result = add_days(dt, self.value * 7)
        elif self.unit == 'M':
            result = add_months(dt, self.value)
        else:
            result = add_years(dt, self.value)

        return calendar.adjust(result, convention)

    def advance(
        self,
        d: DateLike,
        calendar: Calendar,
        convention: BadDayConvention = BadDayConvention.FOLLOWING,
        end_of_month: bool = False,
    ) -> Date:
        """Advance a date by this tenor on a calendar (day tenors count business days)."""
        return calendar.advance(d, self.value, self.unit, convention, end_of_month)


def parse_tenor(s: 'str | Tenor') -> Tenor:
    """
    Parse a tenor string.

    Supported formats:
        - "1D", "7D" (days)
        - "1W", "2W" (weeks)
        - "1M", "3M", "6M" (months)
        - "1Y", "5Y", "10Y" (years)

    Also supports:
        - "ON" (overnight) = 1D
        - "TN" (tomorrow-next) = 2D

    Args:
        s: Tenor string (a Tenor is returned unchanged)

    Returns
        Tenor object
    """
    if isinstance(s, Tenor):
        return s

    s = s.strip().upper()

    if s == 'ON':
        return Tenor(1, 'D')
    if s == 'TN':
        return Tenor(2, 'D')

    match = re.match(r'^(\d+)([DWMY])$', s)
    if match:
        return Tenor(int(match.group(1)), match.group(2))

    raise ValueError(f'Cannot parse tenor: {s}')
