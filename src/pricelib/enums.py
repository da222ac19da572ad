"""
Enumeration types for pricelib.

These enums define the market conventions shared by curves, coupons
and instruments.
"""

from enum import Enum, auto


class DayCountConvention(Enum):
    """Day count conventions for calculating year fractions."""

    ACT_360 = 'Actual/360'
    ACT_365F = 'Actual/365 (Fixed)'
    THIRTY_360 = '30/360 (Bond Basis)'


class BadDayConvention(Enum):
    """Business day adjustment conventions."""

    NONE = auto()           # No adjustment
    FOLLOWING = auto()      # Move to next business day
    MODIFIED_FOLLOWING = auto()  # Move to next business day, unless it crosses month boundary
    PRECEDING = auto()      # Move to previous business day
    MODIFIED_PRECEDING = auto()  # Move to previous business day, unless it crosses month boundary


class Frequency(Enum):
    """Payment frequency as number of periods per year."""

    NO_FREQUENCY = -1
    ONCE = 0
    ANNUAL = 1
    SEMI_ANNUAL = 2
    EVERY_FOUR_MONTHS = 3
    QUARTERLY = 4
    BIMONTHLY = 6
    MONTHLY = 12
    EVERY_FOUR_WEEKS = 13
    BIWEEKLY = 26
    WEEKLY = 52
    DAILY = 365
    OTHER_FREQUENCY = 999   # regular, but not a whole number of periods per year

    @property
    def periods_per_year(self) -> int:
        """Number of payments per year; only defined for regular frequencies."""
        if self in {Frequency.NO_FREQUENCY, Frequency.ONCE, Frequency.OTHER_FREQUENCY}:
            raise ValueError(f'{self.name} has no whole number of periods per year')
        return self.value

    @property
    def months(self) -> int:
        """Return the number of months between payments."""
        if self.value <= 0 or 12 % self.value:
            raise ValueError(f'{self.name} is not a whole number of months')
        return 12 // self.value

    @classmethod
    def from_months(cls, months: int) -> 'Frequency':
        """
        Frequency of a schedule stepping by the given number of months.

        Zero months is a single payment; periods that do not divide a year
        evenly, or are longer than one, are OTHER_FREQUENCY.
        """
        if months < 0:
            raise ValueError(f'Negative period of {months} months has no frequency')
        if months == 0:
            return cls.ONCE
        if months <= 12 and 12 % months == 0:
            return cls(12 // months)
        return cls.OTHER_FREQUENCY

    @classmethod
    def from_weeks(cls, weeks: int) -> 'Frequency':
        """Frequency of a schedule stepping by the given number of weeks."""
        if weeks < 0:
            raise ValueError(f'Negative period of {weeks} weeks has no frequency')
        if weeks == 0:
            return cls.NO_FREQUENCY
        return {1: cls.WEEKLY, 2: cls.BIWEEKLY, 4: cls.EVERY_FOUR_WEEKS}.get(
            weeks, cls.OTHER_FREQUENCY
        )


class Compounding(Enum):
    """Interest rate compounding rules."""

    SIMPLE = auto()         # 1 + r * t
    COMPOUNDED = auto()     # (1 + r / f) ** (f * t)
    CONTINUOUS = auto()     # exp(r * t)


class DateGeneration(Enum):
    """Direction in which schedule dates are generated."""

    BACKWARD = auto()
    FORWARD = auto()


class VolatilityType(Enum):
    """Distribution assumed by a volatility quote."""

    SHIFTED_LOGNORMAL = auto()
    NORMAL = auto()


class OptionType(Enum):
    """Call or put payoff."""

    CALL = 1
    PUT = -1


class ProtectionSide(Enum):
    """Side of a credit protection trade."""

    BUYER = 1
    SELLER = -1
