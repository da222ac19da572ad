"""
Black and Bachelier option formulas.
"""

import math

from scipy.stats import norm

from .enums import OptionType


def black_formula(
    option_type: OptionType,
    strike: float,
    forward: float,
    std_dev: float,
    discount: float = 1.0,
    displacement: float = 0.0,
) -> float:
    """
    Shifted Black formula.

    Prices an option on F + displacement struck at K + displacement, where
    the shifted forward is lognormal with total standard deviation std_dev.

    Args:
        option_type: Call or put
        strike: Option strike
        forward: Forward of the underlying
        std_dev: sigma * sqrt(T)
        discount: Discount factor applied to the payoff
        displacement: Shift added to forward and strike

    Returns
        Option value
    """
    if std_dev < 0:
        raise ValueError(f'negative standard deviation ({std_dev}) given')
    if discount <= 0:
        raise ValueError(f'non-positive discount ({discount}) given')

    f = forward + displacement
    k = strike + displacement
    if f <= 0:
        raise ValueError(f'non-positive shifted forward ({f}) given')

    w = option_type.value
    if k <= 0:
        # call is a forward, put is worthless
        return discount * max(w * (f - k), 0.0)
    if std_dev == 0.0:
        return discount * max(w * (f - k), 0.0)

    d1 = math.log(f / k) / std_dev + 0.5 * std_dev
    d2 = d1 - std_dev
    return discount * w * (f * norm.cdf(w * d1) - k * norm.cdf(w * d2))


def bachelier_formula(
    option_type: OptionType,
    strike: float,
    forward: float,
    std_dev: float,
    discount: float = 1.0,
) -> float:
    """
    Bachelier (normal) option formula.

    Args:
        option_type: Call or put
        strike: Option strike
        forward: Forward of the underlying
        std_dev: Normal volatility * sqrt(T)
        discount: Discount factor applied to the payoff

    Returns
        Option value
    """
    if std_dev < 0:
        raise ValueError(f'negative standard deviation ({std_dev}) given')
    w = option_type.value
    d = (forward - strike) * w
    if std_dev == 0.0:
        return discount * max(d, 0.0)
    h = d / std_dev
    return discount * (d * norm.cdf(h) + std_dev * norm.pdf(h))
