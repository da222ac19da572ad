"""
Date utilities.

Uses opendate.Date as the primary date type.
"""

from datetime import date, datetime
from typing import Union

from opendate import Date

from .enums import DayCountConvention


# Accept various date-like inputs
DateLike = Union[Date, date, datetime, str]


def to_date(d: DateLike) -> Date:
    """Convert any date-like input to opendate.Date."""
    if isinstance(d, Date):
        return d
    if isinstance(d, datetime):
        return Date.instance(d.date())
    if isinstance(d, date):
        return Date.instance(d)
    if isinstance(d, str):
        result = Date.parse(d)
        if result is None:
            raise ValueError(f'Cannot parse date: {d}')
        return result
    raise TypeError(f'Expected Date, date, datetime, or string, got {type(d)}')


parse_date = to_date


def date_key(d: DateLike) -> date:
    """Plain ``datetime.date`` for use as a dictionary key."""
    od = to_date(d)
    return date(od.year, od.month, od.day)


def days_between(start: DateLike, end: DateLike) -> int:
    """Signed number of calendar days from start to end."""
    return to_date(end).toordinal() - to_date(start).toordinal()


def year_fraction(
    start: DateLike,
    end: DateLike,
    convention: DayCountConvention = DayCountConvention.ACT_360,
) -> float:
    """
    Calculate the year fraction between two dates.

    The result is negative when end precedes start.

    Args:
        start: Start date
        end: End date
        convention: Day count convention to use

    Returns
        Year fraction as a float
    """
    d1 = to_date(start)
    d2 = to_date(end)

    if convention == DayCountConvention.ACT_360:
        return days_between(d1, d2) / 360.0

    elif convention == DayCountConvention.ACT_365F:
        return days_between(d1, d2) / 365.0

    elif convention == DayCountConvention.THIRTY_360:
        if d2 < d1:
            return -year_fraction(d2, d1, convention)
        y1, m1, d1_day = d1.year, d1.month, d1.day
        y2, m2, d2_day = d2.year, d2.month, d2.day
        if d1_day == 31:
            d1_day = 30
        if d2_day == 31 and d1_day >= 30:
            d2_day = 30
        return (360 * (y2 - y1) + 30 * (m2 - m1) + (d2_day - d1_day)) / 360.0

    else:
        raise ValueError(f'Unknown day count convention: {convention}')


def add_days(d: DateLike, days: int) -> Date:
    """Add calendar days to a date."""
    od = to_date(d)
    return od.add(days=days) if days >= 0 else od.subtract(days=-days)


def add_months(d: DateLike, months: int) -> Date:
    """Add months to a date, clamping to the end of the month."""
    od = to_date(d)
    return od.add(months=months) if months >= 0 else od.subtract(months=-months)


def add_years(d: DateLike, years: int) -> Date:
    """Add years to a date."""
    od = to_date(d)
    return od.add(years=years) if years >= 0 else od.subtract(years=-years)


def is_end_of_month(d: DateLike) -> bool:
    """True if d is the last calendar day of its month."""
    return add_days(d, 1).month != to_date(d).month


def end_of_month(d: DateLike) -> Date:
    """Last calendar day of the month containing d."""
    od = to_date(d)
    return add_days(add_months(Date(od.year, od.month, 1), 1), -1)
