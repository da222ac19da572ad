#!/usr/bin/env python3
"""
Nth-to-Default Basket Spreads
=============================

This example demonstrates:
1. Building a pool of flat hazard rate curves
2. Pricing every rank of a ten-name basket with a Gaussian copula
3. Comparing correlations and a Student-t copula

Ten names with 1% hazard rate and 40% recovery, five years of quarterly
premium, flat 5% rates.
"""

from opendate import Date

from pricelib import TARGET, Basket, ConstantLossModel, DayCountConvention
from pricelib import FlatForward, FlatHazardRate, IntegralNtdEngine, NthToDefault
from pricelib import Pool, ProtectionSide, Schedule, SimpleQuote, StudentTCopula
from pricelib import settings

print('=' * 70)
print('Nth-to-Default Fair Spreads')
print('=' * 70)
print()

asof = Date(2006, 8, 31)
settings.evaluation_date = asof

names = [f'Name{i}' for i in range(10)]
pool = Pool()
for name in names:
    pool.add(name, FlatHazardRate(asof, 0.01, DayCountConvention.ACT_365F))

schedule = Schedule(Date(2006, 9, 1), Date(2011, 9, 1), '3M', TARGET)
engine = IntegralNtdEngine('1W', FlatForward(asof, 0.05))


def fair_spreads(correlation, copula=None):
    basket = Basket(asof, names, [10.0] * len(names), pool)
    basket.set_loss_model(ConstantLossModel(correlation, [0.4] * len(names), copula))
    spreads = []
    for n in range(1, len(names) + 1):
        ntd = NthToDefault(
            basket, n, ProtectionSide.SELLER, schedule, 0.0, 0.02,
            DayCountConvention.ACT_360, 1000.0, settle_premium_accrual=True,
        )
        ntd.set_pricing_engine(engine)
        spreads.append(ntd.fair_premium * 1e4)
    return spreads


correlation = SimpleQuote(0.0)
columns = {}
for rho in (0.0, 0.3, 0.6):
    correlation.set_value(rho)
    columns[f'rho={rho:.1f}'] = fair_spreads(correlation)
columns['t5/5 0.3'] = fair_spreads(0.3, StudentTCopula(5, 5))

print(f"{'Rank':<6}" + ''.join(f'{c:>12}' for c in columns))
print('-' * (6 + 12 * len(columns)))
for i in range(len(names)):
    print(f'{i + 1:<6}' + ''.join(f'{v[i]:>12.2f}' for v in columns.values()))
print()
print('Spreads in basis points.')
