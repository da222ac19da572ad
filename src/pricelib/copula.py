"""
One-factor latent variable models for correlated defaults.

Each name has a latent variable Y = beta * M + sqrt(1 - beta^2) * e with a
systemic factor M and an idiosyncratic e, both of unit variance. A name
defaults by time t when Y falls below the threshold F_Y^-1(p(t)), so given
M = m its default probability is

    F_e((F_Y^-1(p) - beta * m) / sqrt(1 - beta^2))
"""

import logging
import math

import numpy as np
from numpy.polynomial.hermite_e import hermegauss
from numpy.polynomial.legendre import leggauss
from scipy.stats import norm, t as student_t

from .exceptions import ConvergenceError
from .root_finding import find_root

logger = logging.getLogger(__name__)


class GaussianCopula:
    """Gaussian factor and idiosyncratic variables."""

    def factor_nodes(self, n: int) -> tuple[np.ndarray, np.ndarray]:
        """Gauss-Hermite nodes and weights for E[f(M)], M standard normal."""
        nodes, weights = hermegauss(n)
        return nodes, weights / math.sqrt(2.0 * math.pi)

    def inverse_cumulative_y(self, p: float, beta: float) -> float:
        # Y is standard normal for any loading
        return float(norm.ppf(p))

    def conditional_probability(
        self, threshold: float, m: np.ndarray, beta: float
    ) -> np.ndarray:
        return norm.cdf((threshold - beta * m) / math.sqrt(1.0 - beta * beta))

    def __repr__(self) -> str:
        return 'GaussianCopula()'


class StudentTCopula:
    """
    Student-t factor and idiosyncratic variables, scaled to unit variance.

    Y is not Student-t itself, so its inverse CDF is found numerically
    from a quadrature of the conditional CDF over the factor.
    """

    def __init__(self, factor_order: int = 5, idiosyncratic_order: int = 5, quadrature_points: int = 96):
        """
        Initialize the copula.

        Args:
            factor_order: Degrees of freedom of the systemic factor (> 2)
            idiosyncratic_order: Degrees of freedom of the idiosyncratic variable (> 2)
            quadrature_points: Nodes used to compute the latent variable CDF
        """
        if factor_order <= 2 or idiosyncratic_order <= 2:
            raise ValueError(
                f'Student-t orders must be greater than 2 '
                f'({factor_order}, {idiosyncratic_order} given)'
            )
        self.factor_order = factor_order
        self.idiosyncratic_order = idiosyncratic_order
        self.quadrature_points = quadrature_points
        self._factor_scale = math.sqrt((factor_order - 2.0) / factor_order)
        self._idio_scale = math.sqrt((idiosyncratic_order - 2.0) / idiosyncratic_order)
        self._inverse_cache: dict[tuple[float, float], float] = {}
        self._quadrature = self.factor_nodes(quadrature_points)

    def _idio_cdf(self, x):
        return student_t.cdf(np.asarray(x) / self._idio_scale, self.idiosyncratic_order)

    def factor_nodes(self, n: int) -> tuple[np.ndarray, np.ndarray]:
        """Factor quantiles at Gauss-Legendre nodes on (0, 1)."""
        u, weights = leggauss(n)
        u = 0.5 * (u + 1.0)
        m = self._factor_scale * student_t.ppf(u, self.factor_order)
        return m, 0.5 * weights

    def cumulative_y(self, y: float, beta: float) -> float:
        if beta == 0.0:
            return float(self._idio_cdf(y))
        m, w = self._quadrature
        z = (y - beta * m) / math.sqrt(1.0 - beta * beta)
        return float(np.dot(w, self._idio_cdf(z)))

    def inverse_cumulative_y(self, p: float, beta: float) -> float:
        key = (p, beta)
        if key in self._inverse_cache:
            return self._inverse_cache[key]

        if beta == 0.0:
            y = float(self._idio_scale * student_t.ppf(p, self.idiosyncratic_order))
        else:
            guess = float(norm.ppf(p))
            try:
                y = find_root(
                    lambda x: self.cumulative_y(x, beta) - p,
                    guess - 1.0, guess + 1.0, tol=1e-12,
                )
            except ConvergenceError:
                logger.warning('Latent inverse CDF failed for p=%g, beta=%g', p, beta)
                raise
        self._inverse_cache[key] = y
        return y

    def conditional_probability(
        self, threshold: float, m: np.ndarray, beta: float
    ) -> np.ndarray:
        return self._idio_cdf((threshold - beta * m) / math.sqrt(1.0 - beta * beta))

    def __repr__(self) -> str:
        return f'StudentTCopula({self.factor_order}, {self.idiosyncratic_order})'
