"""
Cap/floor flat volatility term structure.

Flat cap volatilities are quoted by option tenor; in between, a natural
cubic spline through (option time, volatility) is used. The structure is
flat in strike.
"""

import logging
from numbers import Real

import numpy as np
from opendate import Date

from .calendar import Calendar
from .dates import DateLike, to_date, year_fraction
from .enums import BadDayConvention, DayCountConvention
from .exceptions import VolatilityError
from .interpolation import NaturalCubicSpline
from .quotes import LazyObject, SimpleQuote, as_quote
from .settings import settings
from .tenor import Tenor, parse_tenor

logger = logging.getLogger(__name__)


class CapVolatilityVector(LazyObject):
    """
    Cap/floor volatilities by option tenor.

    The reference date is either fixed, or floating at ``settlement_days``
    business days after the evaluation date. Volatilities are either
    numbers (wrapped in quotes internally) or quotes that are observed, so
    setting a new quote value rebuilds the spline on next use.
    """

    def __init__(
        self,
        option_tenors: list[Tenor | str],
        volatilities: list['float | SimpleQuote'],
        calendar: Calendar,
        business_day_convention: BadDayConvention = BadDayConvention.FOLLOWING,
        day_count: DayCountConvention = DayCountConvention.ACT_365F,
        reference_date: DateLike | None = None,
        settlement_days: int | None = None,
        allow_extrapolation: bool = False,
    ):
        """
        Initialize the term structure.

        Exactly one of reference_date (fixed reference) and settlement_days
        (floating reference) must be given.

        Args:
            option_tenors: Cap option tenors, increasing
            volatilities: Flat cap volatility per tenor (numbers or quotes)
            calendar: Calendar for option dates and settlement
            business_day_convention: Adjustment of option dates
            day_count: Day count for option times
            reference_date: Fixed reference date
            settlement_days: Business days from evaluation date to reference date
            allow_extrapolation: Allow volatilities past the last option time
        """
        if (reference_date is None) == (settlement_days is None):
            raise ValueError('give exactly one of reference_date and settlement_days')

        self.calendar = calendar
        self.business_day_convention = business_day_convention
        self.day_count = day_count
        self.settlement_days = settlement_days
        self.allow_extrapolation = allow_extrapolation
        self._fixed_reference = to_date(reference_date) if reference_date is not None else None

        self._option_tenors = [parse_tenor(t) for t in option_tenors]
        self._check_inputs(len(volatilities))

        self._vol_quotes = [as_quote(v) for v in volatilities]
        for quote in self._vol_quotes:
            self.register_with(quote)

        self._option_dates: list[Date] = []
        self._option_times = np.zeros(len(self._option_tenors))
        self._volatilities = np.array([q.value for q in self._vol_quotes], dtype=float)
        self._interpolation: NaturalCubicSpline | None = None
        self._calculated_for: Date | None = None

    def _check_inputs(self, vol_rows: int) -> None:
        if len(self._option_tenors) != vol_rows:
            raise VolatilityError(
                f'mismatch between number of option tenors '
                f'({len(self._option_tenors)}) and number of cap volatilities '
                f'({vol_rows})'
            )
        if vol_rows == 0:
            raise VolatilityError('no cap volatilities given')

    @property
    def reference_date(self) -> Date:
        if self._fixed_reference is not None:
            return self._fixed_reference
        return self.calendar.advance(settings.evaluation_date, self.settlement_days, 'D')

    def option_date_from_tenor(self, tenor: Tenor | str) -> Date:
        return parse_tenor(tenor).advance(
            self.reference_date, self.calendar, self.business_day_convention,
        )

    def time_from_reference(self, d: DateLike) -> float:
        return year_fraction(self.reference_date, d, self.day_count)

    def _calculate(self) -> None:
        # a floating reference date moves with the evaluation date
        if self._calculated_for != self.reference_date:
            self._calculated = False
        super()._calculate()

    def _perform_calculations(self) -> None:
        reference = self.reference_date
        self._option_dates = [self.option_date_from_tenor(t) for t in self._option_tenors]
        self._option_times = np.array([
            year_fraction(reference, d, self.day_count) for d in self._option_dates
        ])
        self._volatilities = np.array([q.value for q in self._vol_quotes], dtype=float)
        self._interpolation = NaturalCubicSpline(self._option_times, self._volatilities)
        self._calculated_for = reference
        logger.debug(
            'Cap volatility spline rebuilt at %s on %d pillars', reference,
            len(self._option_times),
        )

    @property
    def option_tenors(self) -> list[Tenor]:
        return list(self._option_tenors)

    @property
    def option_dates(self) -> list[Date]:
        self._calculate()
        return list(self._option_dates)

    @property
    def option_times(self) -> np.ndarray:
        self._calculate()
        return self._option_times.copy()

    @property
    def volatilities(self) -> np.ndarray:
        self._calculate()
        return self._volatilities.copy()

    @property
    def max_date(self) -> Date:
        self._calculate()
        return self._option_dates[-1]

    @property
    def max_time(self) -> float:
        self._calculate()
        return float(self._option_times[-1])

    def _length_to_time(self, length: 'float | DateLike | Tenor') -> float:
        if isinstance(length, Real):
            return float(length)
        if isinstance(length, Tenor) or (
            isinstance(length, str) and length.strip()[-1:].upper() in {'D', 'W', 'M', 'Y'}
        ):
            return self.time_from_reference(self.option_date_from_tenor(length))
        return self.time_from_reference(length)

    def volatility(
        self,
        length: 'float | DateLike | Tenor',
        strike: float | None = None,
        extrapolate: bool = False,
    ) -> float:
        """
        Flat cap volatility for a cap of the given length.

        Args:
            length: Time in years, cap end date, or tenor
            strike: Ignored (the structure is flat in strike)
            extrapolate: Allow lengths past the last option time

        Returns
            Interpolated volatility
        """
        self._calculate()
        t = self._length_to_time(length)
        if t < 0.0:
            raise ValueError(f'negative time ({t}) given')
        if t > self.max_time and not (extrapolate or self.allow_extrapolation):
            raise VolatilityError(
                f'time ({t}) is past max curve time ({self.max_time})'
            )
        return self._interpolation(t, allow_extrapolation=True)

    def black_variance(
        self,
        length: 'float | DateLike | Tenor',
        strike: float | None = None,
        extrapolate: bool = False,
    ) -> float:
        """Total Black variance sigma^2 * t."""
        self._calculate()
        t = self._length_to_time(length)
        vol = self.volatility(t, strike, extrapolate)
        return vol * vol * t
