"""
Business day calendars and date adjustment.

Calendars are opendate ``CustomCalendar``s registered by name; dates are
rolled with opendate's business-day arithmetic (``is_business_day``,
``.b.add``, ``.b.subtract``).
"""

from datetime import date, timedelta

from dateutil.easter import easter
from opendate import CustomCalendar, Date, register_calendar
from opendate import set_default_calendar

from .dates import DateLike, add_days, add_months, add_years, end_of_month, to_date
from .enums import BadDayConvention

WEEKMASK = 'Mon Tue Wed Thu Fri'


def easter_monday(year: int) -> date:
    """Easter Monday in the Gregorian calendar."""
    return easter(year) + timedelta(days=1)


def target_holidays(begdate: date, enddate: date) -> set[date]:
    """
    TARGET closing days from begdate through enddate.

    New Year's Day; from 2000 also Good Friday, Easter Monday, Labour Day
    and December 26th; Christmas; December 31st in 1998, 1999 and 2001.
    """
    holidays = set()
    for year in range(begdate.year, enddate.year + 1):
        days = {date(year, 1, 1), date(year, 12, 25)}
        if year >= 2000:
            em = easter_monday(year)
            days |= {em - timedelta(days=3), em, date(year, 5, 1), date(year, 12, 26)}
        if year in {1998, 1999, 2001}:
            days.add(date(year, 12, 31))
        holidays |= {d for d in days if begdate <= d <= enddate}
    return holidays


class Calendar:
    """
    A business day calendar.

    Wraps an opendate ``CustomCalendar`` (Monday to Friday, less the given
    holidays) and registers it under ``name``.
    """

    def __init__(self, name: str, holidays=None):
        """
        Initialize and register the calendar.

        Args:
            name: Registration name
            holidays: Set of closing dates, or a callable (begdate, enddate) -> set
        """
        self.name = name
        self._calendar = CustomCalendar(name=name, holidays=holidays, weekmask=WEEKMASK)
        register_calendar(name, self._calendar)

    def on(self, d: DateLike) -> Date:
        """A copy of d that does business-day arithmetic on this calendar."""
        od = to_date(d)
        return Date(od.year, od.month, od.day).calendar(self._calendar)

    def is_business_day(self, d: DateLike) -> bool:
        return self.on(d).is_business_day()

    def is_end_of_month(self, d: DateLike) -> bool:
        """True if d is the last business day of its month."""
        od = to_date(d)
        return od.month != self.adjust(add_days(od, 1)).month

    def end_of_month(self, d: DateLike) -> Date:
        """Last business day of the month containing d."""
        return self.on(end_of_month(d)).b.subtract(days=0)

    def adjust(
        self,
        d: DateLike,
        convention: BadDayConvention = BadDayConvention.FOLLOWING,
    ) -> Date:
        """
        Adjust a date according to a bad day convention.

        Uses opendate's business day snapping:
        - .b.add(days=0) snaps forward to next business day
        - .b.subtract(days=0) snaps backward to previous business day

        MODIFIED_* variants check month boundary and reverse if crossed.

        Args:
            d: Date to adjust
            convention: Bad day convention to apply

        Returns
            Adjusted Date
        """
        od = self.on(d)
        if convention == BadDayConvention.NONE or od.is_business_day():
            return od

        if convention == BadDayConvention.FOLLOWING:
            return od.b.add(days=0)

        if convention == BadDayConvention.PRECEDING:
            return od.b.subtract(days=0)

        if convention == BadDayConvention.MODIFIED_FOLLOWING:
            adjusted = od.b.add(days=0)
            return od.b.subtract(days=0) if adjusted.month != od.month else adjusted

        if convention == BadDayConvention.MODIFIED_PRECEDING:
            adjusted = od.b.subtract(days=0)
            return od.b.add(days=0) if adjusted.month != od.month else adjusted

        raise ValueError(f'Unknown bad day convention: {convention}')

    def advance(
        self,
        d: DateLike,
        n: int,
        unit: str = 'D',
        convention: BadDayConvention = BadDayConvention.FOLLOWING,
        end_of_month: bool = False,
    ) -> Date:
        """
        Move a date by n units.

        Day units count business days; weeks, months and years add a
        calendar period and then adjust with ``convention``.

        Args:
            d: Starting date
            n: Number of units (may be negative)
            unit: 'D', 'W', 'M' or 'Y'
            convention: Bad day convention for non-day units
            end_of_month: Keep end-of-month dates at month end for M/Y units

        Returns
            Advanced Date
        """
        od = self.on(d)
        unit = unit.upper()

        if unit == 'D':
            if n == 0:
                return self.adjust(od, convention)
            return od.b.add(days=n) if n > 0 else od.b.subtract(days=-n)

        if unit == 'W':
            return self.adjust(add_days(od, 7 * n), convention)

        if unit in {'M', 'Y'}:
            result = add_months(od, n) if unit == 'M' else add_years(od, n)
            if end_of_month and self.is_end_of_month(od):
                return self.end_of_month(result)
            return self.adjust(result, convention)

        raise ValueError(f'Invalid time unit: {unit}')

    def __repr__(self) -> str:
        return f'Calendar({self.name!r})'


WEEKENDS_ONLY = Calendar('WEEKENDS_ONLY')
TARGET = Calendar('TARGET', target_holidays)
set_default_calendar('WEEKENDS_ONLY')


def adjust_date(
    d: DateLike,
    convention: BadDayConvention = BadDayConvention.MODIFIED_FOLLOWING,
    calendar: Calendar = WEEKENDS_ONLY,
) -> Date:
    """Adjust a date on the given calendar (weekends-only by default)."""
    return calendar.adjust(d, convention)


def is_business_day(d: DateLike, calendar: Calendar = WEEKENDS_ONLY) -> bool:
    """Check if a date is a business day."""
    return calendar.is_business_day(d)
