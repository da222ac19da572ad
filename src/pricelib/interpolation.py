"""
Interpolation methods for curve construction.

Flat forward interpolation is used for zero and hazard rate curves;
a natural cubic spline is used for volatility term structures.
"""

import numpy as np
from scipy.interpolate import CubicSpline

from .exceptions import InterpolationError


def flat_forward_interp(
    target_time: float,
    times: np.ndarray,
    rates: np.ndarray,
) -> float:
    """
    Interpolate a rate using flat forward interpolation.

    This method assumes that forward rates are constant (flat) between
    curve points. Between times t[i] and t[i+1]:
        DF(t) = DF(t[i]) * exp(-f[i] * (t - t[i]))
    where f[i] is the flat forward rate in that segment.

    Args:
        target_time: Time point to interpolate (in years)
        times: Array of curve times (in years)
        rates: Array of zero rates at each time

    Returns
        Interpolated zero rate at target_time
    """
    if len(times) == 0 or len(rates) == 0:
        raise InterpolationError('Empty curve data')

    if len(times) != len(rates):
        raise InterpolationError('Times and rates arrays must have same length')

    n = len(times)

    # flat extrapolation of the zero rate on both sides
    if target_time <= times[0]:
        return rates[0]
    if target_time >= times[-1]:
        return rates[-1]

    idx = np.searchsorted(times, target_time) - 1
    idx = max(0, min(idx, n - 2))

    t0, t1 = times[idx], times[idx + 1]
    r0, r1 = rates[idx], rates[idx + 1]

    dt = t1 - t0
    if abs(dt) < 1e-14:
        return r0

    # r1 * t1 = r0 * t0 + f * (t1 - t0)
    fwd_rate = (r1 * t1 - r0 * t0) / dt

    return (r0 * t0 + fwd_rate * (target_time - t0)) / target_time


class NaturalCubicSpline:
    """
    Cubic spline with zero second derivative at both ends.

    No monotonicity constraint is applied. With a single node the
    interpolant is flat; with two it is the straight line through them.
    """

    def __init__(self, x: np.ndarray, y: np.ndarray):
        self.x = np.asarray(x, dtype=float)
        self.y = np.asarray(y, dtype=float)
        if len(self.x) == 0:
            raise InterpolationError('Empty interpolation data')
        if len(self.x) != len(self.y):
            raise InterpolationError(
                f'x ({len(self.x)}) and y ({len(self.y)}) sizes differ'
            )
        if np.any(np.diff(self.x) <= 0):
            raise InterpolationError(f'Unsorted or duplicated x values: {self.x}')
        self._spline = None
        self.update()

    def update(self) -> None:
        """Rebuild the spline from the current contents of x and y."""
        if len(self.x) > 1:
            self._spline = CubicSpline(self.x, self.y, bc_type='natural', extrapolate=True)
        else:
            self._spline = None

    @property
    def x_min(self) -> float:
        return float(self.x[0])

    @property
    def x_max(self) -> float:
        return float(self.x[-1])

    def is_in_range(self, t: float) -> bool:
        return self.x_min <= t <= self.x_max

    def __call__(self, t: float, allow_extrapolation: bool = False) -> float:
        if not allow_extrapolation and not self.is_in_range(t):
            raise InterpolationError(
                f'interpolation range is [{self.x_min}, {self.x_max}]: '
                f'extrapolation at {t} not allowed'
            )
        if self._spline is None:
            return float(self.y[0])
        return float(self._spline(t))

    def derivative(self, t: float) -> float:
        if self._spline is None:
            return 0.0
        return float(self._spline(t, 1))
