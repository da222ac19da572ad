"""
Root finding for curve bootstrapping and latent-variable inversion.

Brent-Dekker root finding plus a bracketing search for when no sign change
is known in advance.
"""

import logging
import math
import sys
from collections.abc import Callable

from .exceptions import ConvergenceError

logger = logging.getLogger(__name__)

_EPS = sys.float_info.epsilon


def brent(
    f: Callable[[float], float],
    a: float,
    b: float,
    tol: float = 1e-12,
    max_iter: int = 100,
) -> float:
    """
    Find a root of f in [a, b] with the Brent-Dekker method.

    The root is kept bracketed by b and c; each step tries inverse quadratic
    (or secant) interpolation and falls back to bisection when the step
    would leave the bracket or shrink it too slowly.

    Args:
        f: Function to solve
        a: One end of the interval
        b: Other end; f(a) and f(b) must differ in sign
        tol: Absolute tolerance on the root
        max_iter: Maximum number of function evaluations after the bounds

    Returns
        Root of f, within tol

    Raises
        ConvergenceError: If the bounds do not bracket a root, or max_iter is reached
    """
    fa, fb = f(a), f(b)
    if fa == 0.0:
        return a
    if fb == 0.0:
        return b
    if fa * fb > 0:
        raise ConvergenceError(
            f'root not bracketed: f({a})={fa}, f({b})={fb}'
        )

    c, fc = b, fb
    d = e = b - a
    for _ in range(max_iter):
        if fb * fc > 0:
            c, fc = a, fa
            d = e = b - a
        if abs(fc) < abs(fb):
            a, b, c = b, c, b
            fa, fb, fc = fb, fc, fb

        tol1 = 2.0 * _EPS * abs(b) + 0.5 * tol
        half = 0.5 * (c - b)
        if abs(half) <= tol1 or fb == 0.0:
            return b

        if abs(e) >= tol1 and abs(fa) > abs(fb):
            s = fb / fa
            if a == c:
                p = 2.0 * half * s
                q = 1.0 - s
            else:
                q = fa / fc
                r = fb / fc
                p = s * (2.0 * half * q * (q - r) - (b - a) * (r - 1.0))
                q = (q - 1.0) * (r - 1.0) * (s - 1.0)
            if p > 0:
                q = -q
            p = abs(p)
            if 2.0 * p < min(3.0 * half * q - abs(tol1 * q), abs(e * q)):
                e, d = d, p / q
            else:
                d = e = half
        else:
            d = e = half

        a, fa = b, fb
        b += d if abs(d) > tol1 else math.copysign(tol1, half)
        fb = f(b)

    raise ConvergenceError(f'Brent solver did not converge in {max_iter} iterations (last x={b})')


def bracket(
    f: Callable[[float], float],
    guess: float,
    step: float,
    lower: float | None = None,
    upper: float | None = None,
    max_expansions: int = 50,
) -> tuple[float, float]:
    """
    Expand an interval around a guess until f changes sign.

    Args:
        f: Function to bracket
        guess: Centre of the initial interval
        step: Initial half-width
        lower: Hard lower limit for the interval
        upper: Hard upper limit for the interval
        max_expansions: Number of times the interval may be widened

    Returns
        (a, b) with f(a) and f(b) of opposite sign
    """
    def clip(x: float) -> float:
        if lower is not None:
            x = max(x, lower)
        if upper is not None:
            x = min(x, upper)
        return x

    a, b = clip(guess - step), clip(guess + step)
    fa, fb = f(a), f(b)
    for _ in range(max_expansions):
        if fa * fb <= 0:
            return a, b
        step *= 1.6
        if abs(fa) < abs(fb):
            a = clip(a - step)
            fa = f(a)
        else:
            b = clip(b + step)
            fb = f(b)

    logger.debug('Bracketing failed around %s: f(%s)=%s, f(%s)=%s', guess, a, fa, b, fb)
    raise ConvergenceError(f'Unable to bracket a root around {guess}')


def find_root(
    f: Callable[[float], float],
    a: float,
    b: float,
    tol: float = 1e-12,
    max_iter: int = 100,
) -> float:
    """
    Find a root of f, widening [a, b] first if it does not bracket one.

    Args:
        f: Function to find root of
        a: Lower bound
        b: Upper bound
        tol: Tolerance
        max_iter: Maximum iterations

    Returns
        x such that f(x) ≈ 0
    """
    if f(a) * f(b) > 0:
        a, b = bracket(f, (a + b) / 2, (b - a) / 2)
    return brent(f, a, b, tol, max_iter)
