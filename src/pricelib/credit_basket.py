"""
Credit baskets and nth-to-default swaps.

A basket holds names from a pool of default curves. Its loss model turns
the single-name default probabilities into the distribution of the number
of defaults; the nth-to-default engine integrates that distribution over
the life of the trade.
"""

import logging
import math
from dataclasses import dataclass

import numpy as np
from opendate import Date

from .bonds import fixed_rate_leg
from .copula import GaussianCopula, StudentTCopula
from .curves import DefaultProbabilityTermStructure, YieldTermStructure
from .dates import DateLike, add_days, to_date
from .enums import BadDayConvention, DayCountConvention, ProtectionSide
from .exceptions import PricingError
from .quotes import LazyObject, SimpleQuote, as_quote
from .schedule import Schedule
from .settings import settings
from .tenor import Tenor, parse_tenor

logger = logging.getLogger(__name__)


class Pool:
    """Named default probability curves."""

    def __init__(self):
        self._curves: dict[str, DefaultProbabilityTermStructure] = {}

    def add(self, name: str, curve: DefaultProbabilityTermStructure) -> None:
        if name in self._curves:
            raise ValueError(f'{name} already in pool')
        self._curves[name] = curve

    def has(self, name: str) -> bool:
        return name in self._curves

    def get(self, name: str) -> DefaultProbabilityTermStructure:
        try:
            return self._curves[name]
        except KeyError:
            raise KeyError(f'{name} not in pool') from None

    @property
    def names(self) -> list[str]:
        return list(self._curves)

    def __len__(self) -> int:
        return len(self._curves)


class ConstantLossModel(LazyObject):
    """
    Default count model with a flat latent correlation and fixed recoveries.

    Given the systemic factor, names default independently with their
    conditional probabilities; the number of defaults then follows a
    Poisson-binomial law, integrated over the factor.
    """

    def __init__(
        self,
        correlation: 'float | SimpleQuote',
        recoveries: list[float],
        copula: GaussianCopula | StudentTCopula | None = None,
        integration_points: int = 64,
    ):
        """
        Initialize the model.

        Args:
            correlation: Pairwise latent correlation in [0, 1) (number or quote)
            recoveries: Recovery rate per name
            copula: Latent variable model (default: Gaussian)
            integration_points: Quadrature nodes over the systemic factor
        """
        self._correlation = as_quote(correlation)
        self.register_with(self._correlation)
        self.recoveries = list(recoveries)
        self.copula = copula or GaussianCopula()
        self.integration_points = integration_points
        self._beta = 0.0
        self._nodes, self._weights = self.copula.factor_nodes(integration_points)

    @property
    def correlation(self) -> float:
        return self._correlation.value

    def _perform_calculations(self) -> None:
        rho = self._correlation.value
        if not 0.0 <= rho < 1.0:
            raise ValueError(f'correlation ({rho}) must be in [0, 1)')
        self._beta = math.sqrt(rho)
        logger.debug('Loss model factor loading %.6f for correlation %.4f', self._beta, rho)

    @property
    def factor_loading(self) -> float:
        self._calculate()
        return self._beta

    def conditional_probabilities(self, probabilities: list[float]) -> np.ndarray:
        """Default probability of each name (columns) at each factor node (rows)."""
        beta = self.factor_loading
        cond = np.empty((len(self._nodes), len(probabilities)))
        for j, p in enumerate(probabilities):
            if p <= 0.0:
                cond[:, j] = 0.0
            elif p >= 1.0:
                cond[:, j] = 1.0
            else:
                threshold = self.copula.inverse_cumulative_y(p, beta)
                cond[:, j] = self.copula.conditional_probability(threshold, self._nodes, beta)
        return cond

    def default_count_distribution(self, probabilities: list[float]) -> np.ndarray:
        """P(exactly k defaults) for k = 0..len(probabilities)."""
        cond = self.conditional_probabilities(probabilities)
        n_names = cond.shape[1]
        dist = np.zeros((cond.shape[0], n_names + 1))
        dist[:, 0] = 1.0
        for j in range(n_names):
            p = cond[:, j:j + 1]
            shifted = np.zeros_like(dist)
            shifted[:, 1:] = dist[:, :-1]
            dist = dist * (1.0 - p) + shifted * p
        return self._weights @ dist

    def prob_at_least_n_events(self, n: int, probabilities: list[float]) -> float:
        if n <= 0:
            return 1.0
        if n > len(probabilities):
            return 0.0
        return float(self.default_count_distribution(probabilities)[n:].sum())

    def expected_recovery(self) -> float:
        return float(np.mean(self.recoveries))


class Basket:
    """
    A basket of names with notionals, taken from a pool.

    The tranche bounds only scale ``tranche_notional``; default counts and
    nth-to-default pricing use every name in the basket whatever the bounds.

    Attributes
        reference_date: Date the basket is observed from
        names: Names in the basket
        notionals: Notional per name
        attachment: Tranche attachment as a fraction of basket notional
        detachment: Tranche detachment as a fraction of basket notional
    """

    def __init__(
        self,
        reference_date: DateLike,
        names: list[str],
        notionals: list[float],
        pool: Pool,
        attachment: float = 0.0,
        detachment: float = 1.0,
    ):
        if len(names) != len(notionals):
            raise ValueError(
                f'number of names ({len(names)}) and notionals ({len(notionals)}) differ'
            )
        if not names:
            raise ValueError('empty basket')
        if not 0.0 <= attachment < detachment <= 1.0:
            raise ValueError(
                f'invalid tranche: attachment {attachment}, detachment {detachment}'
            )
        for name in names:
            if not pool.has(name):
                raise KeyError(f'{name} not in pool')
        self.reference_date = to_date(reference_date)
        self.names = list(names)
        self.notionals = list(notionals)
        self.pool = pool
        self.attachment = attachment
        self.detachment = detachment
        self._loss_model: ConstantLossModel | None = None

    def set_loss_model(self, model: ConstantLossModel) -> None:
        if len(model.recoveries) != self.size:
            raise ValueError(
                f'loss model has {len(model.recoveries)} recoveries for {self.size} names'
            )
        self._loss_model = model

    @property
    def loss_model(self) -> ConstantLossModel:
        if self._loss_model is None:
            raise PricingError('basket loss model not set')
        return self._loss_model

    @property
    def size(self) -> int:
        return len(self.names)

    @property
    def basket_notional(self) -> float:
        return float(sum(self.notionals))

    @property
    def tranche_notional(self) -> float:
        return (self.detachment - self.attachment) * self.basket_notional

    def default_probabilities(self, d: DateLike) -> list[float]:
        d = to_date(d)
        if d <= self.reference_date:
            return [0.0] * self.size
        return [self.pool.get(name).default_probability_at_date(d) for name in self.names]

    def prob_at_least_n_events(self, n: int, d: DateLike) -> float:
        return self.loss_model.prob_at_least_n_events(n, self.default_probabilities(d))


@dataclass
class NtdResults:
    """Values of an nth-to-default swap."""

    premium_value: float
    protection_value: float
    upfront_premium_value: float
    npv: float
    fair_premium: float


class NthToDefault:
    """
    Nth-to-default swap on a basket.

    The protection buyer pays a running premium (and an optional upfront)
    until the nth default in the basket or maturity; on the nth default the
    seller pays nominal * (1 - recovery).
    """

    def __init__(
        self,
        basket: Basket,
        n: int,
        side: ProtectionSide,
        premium_schedule: Schedule,
        upfront_rate: float,
        premium_rate: float,
        day_count: DayCountConvention,
        nominal: float,
        settle_premium_accrual: bool = True,
    ):
        """
        Initialize the swap.

        Args:
            basket: Reference basket
            n: Rank of the triggering default, 1..basket.size
            side: Protection buyer or seller
            premium_schedule: Premium accrual schedule
            upfront_rate: Upfront as a fraction of nominal
            premium_rate: Running premium rate
            day_count: Premium accrual day count
            nominal: Swap notional
            settle_premium_accrual: Pay accrued premium on default
        """
        if not 1 <= n <= basket.size:
            raise ValueError(f'n ({n}) must be between 1 and basket size ({basket.size})')
        self.basket = basket
        self.n = n
        self.side = side
        self.premium_schedule = premium_schedule
        self.upfront_rate = upfront_rate
        self.premium_rate = premium_rate
        self.day_count = day_count
        self.nominal = nominal
        self.settle_premium_accrual = settle_premium_accrual
        self.premium_leg = fixed_rate_leg(
            premium_schedule, nominal, [premium_rate], day_count,
            BadDayConvention.NONE,
        )
        self._engine = None

    @property
    def rank(self) -> int:
        return self.n

    @property
    def maturity(self) -> Date:
        return self.premium_leg[-1].payment_date

    def is_expired(self) -> bool:
        return self.maturity <= settings.evaluation_date

    def set_pricing_engine(self, engine: 'IntegralNtdEngine') -> None:
        self._engine = engine

    def results(self) -> NtdResults:
        if self._engine is None:
            raise PricingError('null pricing engine')
        return self._engine.calculate(self)

    @property
    def npv(self) -> float:
        return self.results().npv

    @property
    def fair_premium(self) -> float:
        return self.results().fair_premium

    @property
    def premium_leg_npv(self) -> float:
        return self.results().premium_value

    @property
    def protection_leg_npv(self) -> float:
        return self.results().protection_value


class IntegralNtdEngine:
    """
    Nth-to-default engine integrating the nth default time on a grid.

    Premiums are weighted by the probability of fewer than n defaults at
    each payment date. Protection is summed over steps of the integration
    tenor, paying at the step end; accrued premium on default is added
    over the same steps when the swap settles it.
    """

    def __init__(self, integration_step: Tenor | str, discount_curve: YieldTermStructure):
        self.integration_step = parse_tenor(integration_step)
        if self.integration_step.unit not in {'D', 'W'}:
            raise ValueError(f'integration step must be in days or weeks ({self.integration_step} given)')
        self.discount_curve = discount_curve

    def _step_days(self) -> int:
        step = self.integration_step
        return step.value * (7 if step.unit == 'W' else 1)

    def calculate(self, ntd: NthToDefault) -> NtdResults:
        today = settings.evaluation_date
        curve = self.discount_curve
        basket = ntd.basket
        n = ntd.n

        def prob_nth(d):
            return basket.prob_at_least_n_events(n, d)

        premium_value = 0.0
        for coupon in ntd.premium_leg:
            if coupon.payment_date > today:
                premium_value += (
                    coupon.amount * curve.discount(coupon.payment_date)
                    * (1.0 - prob_nth(coupon.payment_date))
                )

        upfront_value = 0.0
        start = ntd.premium_schedule.start_date
        if start >= today:
            upfront_value = ntd.upfront_rate * ntd.nominal * curve.discount(start)

        lgd = 1.0 - basket.loss_model.expected_recovery()
        protection_value = 0.0
        accrual_value = 0.0
        step = self._step_days()
        d0 = max(start, today)
        p0 = prob_nth(d0)
        coupons = iter(ntd.premium_leg)
        coupon = next(coupons)
        while d0 < ntd.maturity:
            d1 = add_days(d0, step)
            if d1 > ntd.maturity:
                d1 = ntd.maturity
            p1 = prob_nth(d1)
            df = curve.discount(d1)
            protection_value += (p1 - p0) * df * lgd * ntd.nominal

            if ntd.settle_premium_accrual:
                while coupon.accrual_end < d1:
                    coupon = next(coupons)
                accrual_value += coupon.accrued_amount(d1) * (p1 - p0) * df

            d0, p0 = d1, p1

        premium_value += accrual_value
        fair_premium = ntd.premium_rate * protection_value / premium_value if premium_value else 0.0
        npv = ntd.side.value * (protection_value - premium_value - upfront_value)
        logger.debug(
            '%s-to-default: premium=%.6f protection=%.6f fair=%.6f',
            n, premium_value, protection_value, fair_premium,
        )
        return NtdResults(
            premium_value=premium_value,
            protection_value=protection_value,
            upfront_premium_value=upfront_value,
            npv=npv,
            fair_premium=fair_premium,
        )
