"""
Piecewise zero curve bootstrapping from market instruments.

Each helper fixes one zero-rate pillar at its latest date; pillars are
solved in maturity order with Brent's method, interpolating flat forward
between them.
"""

import logging

import numpy as np

from .curves import ZeroCurve
from .dates import DateLike
from .enums import DayCountConvention
from .exceptions import BootstrapError, ConvergenceError
from .quotes import LazyObject
from .root_finding import find_root
from .settings import settings

logger = logging.getLogger(__name__)


class PiecewiseYieldCurve(LazyObject, ZeroCurve):
    """
    Zero curve bootstrapped from rate helpers.

    Helpers must provide ``latest_date``, ``quote``, ``set_term_structure``
    and ``quote_error``; they are linked to the curve on construction. The
    curve observes the helper quotes and the evaluation date and
    re-bootstraps on next use after any of them changes.
    """

    def __init__(
        self,
        reference_date: DateLike,
        helpers: list,
        day_count: DayCountConvention = DayCountConvention.ACT_365F,
        accuracy: float = 1e-12,
    ):
        """
        Initialize the curve.

        Args:
            reference_date: Curve reference date
            helpers: Instruments to fit, one pillar each
            day_count: Day count for curve times
            accuracy: Tolerance on each bootstrapped zero rate
        """
        if not helpers:
            raise BootstrapError('no bootstrap helpers given')

        ZeroCurve.__init__(self, reference_date, day_count=day_count)
        self.accuracy = accuracy
        self.helpers = sorted(helpers, key=lambda h: h.latest_date)

        dates = [h.latest_date for h in self.helpers]
        for d1, d2 in zip(dates[:-1], dates[1:]):
            if d1 == d2:
                raise BootstrapError(f'more than one instrument with pillar {d1}')
        if dates[0] <= self.reference_date:
            raise BootstrapError(
                f'first pillar ({dates[0]}) not after reference date ({self.reference_date})'
            )

        self.pillar_dates = dates
        self._times = np.array([self.time_from_reference(d) for d in dates])
        self._values = np.zeros(len(dates))

        for helper in self.helpers:
            helper.set_term_structure(self)
            self.register_with(helper.quote)
        # bond settlement dates follow the evaluation date
        self.register_with(settings)

    def _perform_calculations(self) -> None:
        guess = 0.02
        for i, helper in enumerate(self.helpers):
            def objective(z: float, i=i, helper=helper) -> float:
                self.set_rate(i, z)
                return helper.quote_error()

            try:
                zero_rate = find_root(objective, guess - 0.05, guess + 0.05, tol=self.accuracy)
            except ConvergenceError as e:
                raise BootstrapError(
                    f'Failed to bootstrap pillar {self.pillar_dates[i]}: {e}'
                ) from e

            self.set_rate(i, zero_rate)
            # later pillars start from a flat extension of this one
            self._values[i + 1:] = zero_rate
            guess = zero_rate
            logger.debug(
                'Pillar %s: t=%.6f zero rate=%.10f', self.pillar_dates[i],
                self._times[i], zero_rate,
            )

    @property
    def times(self) -> np.ndarray:
        self._calculate()
        return self._times

    @property
    def rates(self) -> np.ndarray:
        self._calculate()
        return self._values

    def discount_impl(self, t: float) -> float:
        self._calculate()
        return ZeroCurve.discount_impl(self, t)
