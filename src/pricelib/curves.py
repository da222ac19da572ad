"""
Curve classes for interest rates and credit.

Provides:
- Yield term structures (discount factors): flat forward and interpolated zero curves
- Default probability term structures (survival probabilities): flat hazard
  rate and interpolated hazard curves
"""

import math
from abc import ABC, abstractmethod
from numbers import Real

import numpy as np
from opendate import Date

from .dates import DateLike, to_date, year_fraction
from .enums import Compounding, DayCountConvention, Frequency
from .interpolation import flat_forward_interp
from .quotes import SimpleQuote, as_quote


class Curve(ABC):
    """Abstract base class for all curves."""

    def __init__(
        self,
        reference_date: DateLike,
        day_count: DayCountConvention = DayCountConvention.ACT_365F,
    ):
        """
        Initialize a curve.

        Args:
            reference_date: The date at which time is zero
            day_count: Day count convention for time calculations
        """
        self._reference_date = to_date(reference_date)
        self._day_count = day_count

    @property
    def reference_date(self) -> Date:
        """The reference date for the curve."""
        return self._reference_date

    @property
    def day_count(self) -> DayCountConvention:
        """Day count convention used for time calculations."""
        return self._day_count

    def time_from_reference(self, d: DateLike) -> float:
        """Convert a date to time (years from the reference date)."""
        return year_fraction(self.reference_date, d, self._day_count)

    def _to_time(self, x: 'DateLike | float') -> float:
        if isinstance(x, Real):
            return float(x)
        return self.time_from_reference(x)


class YieldTermStructure(Curve):
    """Base class for discount curves."""

    @abstractmethod
    def discount_impl(self, t: float) -> float:
        """Discount factor at time t > 0."""

    def discount(self, x: 'DateLike | float') -> float:
        """Discount factor at a date or a time in years."""
        t = self._to_time(x)
        if t == 0.0:
            return 1.0
        return float(self.discount_impl(t))

    def zero_rate(self, x: 'DateLike | float') -> float:
        """Continuously compounded zero rate to a date or time."""
        t = self._to_time(x)
        if t <= 0.0:
            t = 1e-4
        return -math.log(self.discount(t)) / t

    def forward_rate(
        self,
        d1: DateLike,
        d2: DateLike,
        day_count: DayCountConvention | None = None,
        compounding: Compounding = Compounding.SIMPLE,
    ) -> float:
        """
        Forward rate between two dates.

        Simple: (P(d1) / P(d2) - 1) / tau; continuous: ln(P(d1) / P(d2)) / tau
        """
        tau = year_fraction(d1, d2, day_count or self._day_count)
        if tau <= 0:
            raise ValueError(f'd2 ({d2}) must be later than d1 ({d1})')
        growth = self.discount(d1) / self.discount(d2)
        if compounding == Compounding.SIMPLE:
            return (growth - 1.0) / tau
        if compounding == Compounding.CONTINUOUS:
            return math.log(growth) / tau
        raise ValueError(f'Unsupported compounding for forward rate: {compounding}')


class FlatForward(YieldTermStructure):
    """
    Flat yield curve.

    The rate is quoted with the given compounding, so that
    DF(t) = exp(-r t), 1 / (1 + r t) or (1 + r / f) ** (-f t).
    """

    def __init__(
        self,
        reference_date: DateLike,
        rate: 'float | SimpleQuote',
        day_count: DayCountConvention = DayCountConvention.ACT_365F,
        compounding: Compounding = Compounding.CONTINUOUS,
        frequency: Frequency = Frequency.ANNUAL,
    ):
        super().__init__(reference_date, day_count)
        self._rate = as_quote(rate)
        self.compounding = compounding
        self.frequency = frequency

    @property
    def rate(self) -> float:
        return self._rate.value

    def discount_impl(self, t: float) -> float:
        r = self._rate.value
        if self.compounding == Compounding.CONTINUOUS:
            return math.exp(-r * t)
        if self.compounding == Compounding.SIMPLE:
            return 1.0 / (1.0 + r * t)
        f = self.frequency.periods_per_year
        return (1.0 + r / f) ** (-f * t)


class ZeroCurve(YieldTermStructure):
    """
    Zero rate curve for discounting.

    Stores continuously compounded zero rates at pillar times, interpolated
    flat forward: DF(t) = exp(-r(t) * t)
    """

    def __init__(
        self,
        reference_date: DateLike,
        times: np.ndarray | None = None,
        rates: np.ndarray | None = None,
        day_count: DayCountConvention = DayCountConvention.ACT_365F,
    ):
        """
        Initialize a zero curve.

        Args:
            reference_date: The curve reference date
            times: Array of times (in years)
            rates: Array of zero rates at each time
            day_count: Day count convention
        """
        super().__init__(reference_date, day_count)
        self._times: np.ndarray = np.array([])
        self._values: np.ndarray = np.array([])

        if times is not None and rates is not None:
            self._times = np.asarray(times, dtype=float)
            self._values = np.asarray(rates, dtype=float)
        elif times is not None or rates is not None:
            raise ValueError('Both times and rates must be provided, or neither')

    @property
    def times(self) -> np.ndarray:
        return self._times

    @property
    def rates(self) -> np.ndarray:
        return self._values

    def rate(self, t: float) -> float:
        """Interpolated zero rate at time t."""
        if len(self._times) == 0:
            return 0.0
        return flat_forward_interp(t, self._times, self._values)

    def discount_impl(self, t: float) -> float:
        return math.exp(-self.rate(t) * t)

    def set_rate(self, idx: int, rate: float) -> None:
        """Overwrite the zero rate at one pillar."""
        self._values[idx] = rate


class DefaultProbabilityTermStructure(Curve):
    """Base class for credit curves."""

    @abstractmethod
    def survival_impl(self, t: float) -> float:
        """Survival probability at time t > 0."""

    def survival_probability(self, x: 'DateLike | float') -> float:
        """
        Probability of no default up to a date or time.

        Q(0) = 1
        """
        t = self._to_time(x)
        if t <= 0:
            return 1.0
        return float(self.survival_impl(t))

    def default_probability(self, x: 'DateLike | float') -> float:
        """
        Cumulative default probability.

        PD(t) = 1 - Q(t)
        """
        return 1.0 - self.survival_probability(x)

    def survival_probability_at_date(self, d: DateLike) -> float:
        return self.survival_probability(self.time_from_reference(d))

    def default_probability_at_date(self, d: DateLike) -> float:
        return self.default_probability(self.time_from_reference(d))


class FlatHazardRate(DefaultProbabilityTermStructure):
    """
    Constant hazard rate credit curve.

    Q(t) = exp(-lambda * t)
    """

    def __init__(
        self,
        reference_date: DateLike,
        hazard_rate: 'float | SimpleQuote',
        day_count: DayCountConvention = DayCountConvention.ACT_365F,
    ):
        super().__init__(reference_date, day_count)
        self._hazard = as_quote(hazard_rate)

    @property
    def hazard_rate(self) -> float:
        return self._hazard.value

    def survival_impl(self, t: float) -> float:
        return math.exp(-self._hazard.value * t)


class CreditCurve(DefaultProbabilityTermStructure):
    """
    Credit curve from average hazard rates at pillar times.

    Survival probability: Q(t) = exp(-h(t) * t), where h(t) is the
    flat-forward interpolated average hazard rate from 0 to t.
    """

    def __init__(
        self,
        reference_date: DateLike,
        times: np.ndarray,
        hazard_rates: np.ndarray,
        day_count: DayCountConvention = DayCountConvention.ACT_365F,
    ):
        super().__init__(reference_date, day_count)
        self._times = np.asarray(times, dtype=float)
        self._values = np.asarray(hazard_rates, dtype=float)
        if len(self._times) != len(self._values):
            raise ValueError('times and hazard_rates must have the same length')

    @property
    def times(self) -> np.ndarray:
        return self._times

    @property
    def hazard_rates(self) -> np.ndarray:
        return self._values

    def survival_impl(self, t: float) -> float:
        h = flat_forward_interp(t, self._times, self._values)
        return math.exp(-h * t)
