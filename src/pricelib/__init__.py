"""
pricelib - Fixed income and credit pricing components

Bond bootstrapping, cap and swaption volatility, CMS and CMS spread coupon
pricing, and nth-to-default baskets, built on opendate, numpy and scipy.

Basic Usage:
    >>> from pricelib import FlatForward, euribor_swap_isda_fix_a, settings
    >>>
    >>> settings.evaluation_date = '2018-02-23'
    >>> curve = FlatForward('2018-02-23', 0.02)
    >>> cms10y = euribor_swap_isda_fix_a('10Y', curve, curve)
    >>>
    >>> print(f"10Y swap rate: {cms10y.fixing('2019-02-25'):.6f}")
"""

__version__ = '1.0.0'

# Black formulas
from .black import bachelier_formula, black_formula
# Bonds and bootstrapping
from .bond_helpers import FixedRateBondHelper
from .bonds import FixedRateBond, FixedRateCoupon, Redemption, fixed_rate_leg
from .bootstrap import PiecewiseYieldCurve
# Calendar
from .calendar import TARGET, WEEKENDS_ONLY, Calendar
from .calendar import adjust_date, is_business_day
# Cap volatility
from .capvol import CapVolatilityVector
# CMS coupons
from .cms import CappedFlooredCoupon, CmsCoupon, FloatingRateCoupon
from .cms import LinearTsrPricer, capped_floored_cms_coupon
from .cms_spread import CappedFlooredCmsSpreadCoupon, CmsSpreadCoupon
from .cms_spread import LognormalCmsSpreadPricer, capped_floored_cms_spread_coupon
# Credit baskets
from .copula import GaussianCopula, StudentTCopula
from .credit_basket import Basket, ConstantLossModel, IntegralNtdEngine
from .credit_basket import NtdResults, NthToDefault, Pool
# Curves
from .curves import CreditCurve, Curve, DefaultProbabilityTermStructure
from .curves import FlatForward, FlatHazardRate, YieldTermStructure, ZeroCurve
# Date utilities
from .dates import add_days, add_months, add_years, parse_date, year_fraction
# Enumerations
from .enums import BadDayConvention, Compounding, DateGeneration
from .enums import DayCountConvention, Frequency, OptionType, ProtectionSide
from .enums import VolatilityType
# Errors
from .exceptions import BootstrapError, ConvergenceError, CurveError
from .exceptions import FixingError, InterpolationError, PricingError
from .exceptions import VolatilityError
# Indexes
from .indexes import IborIndex, IndexManager, InterestRateIndex, SwapIndex
from .indexes import SwapSpreadIndex, euribor, euribor_swap_isda_fix_a
from .indexes import index_manager
# Quotes
from .quotes import SimpleQuote
# Schedule
from .schedule import Schedule, SchedulePeriod, make_schedule
# Settings
from .settings import Settings, saved_settings, settings
# Swaption volatility
from .swaption_vol import ConstantSwaptionVolatility
# Tenor parsing
from .tenor import Tenor, parse_tenor

__all__ = [
    # Version
    '__version__',
    # Settings
    'Settings',
    'settings',
    'saved_settings',
    # Quotes
    'SimpleQuote',
    # Curves
    'Curve',
    'YieldTermStructure',
    'FlatForward',
    'ZeroCurve',
    'PiecewiseYieldCurve',
    'DefaultProbabilityTermStructure',
    'FlatHazardRate',
    'CreditCurve',
    # Bonds
    'FixedRateCoupon',
    'Redemption',
    'FixedRateBond',
    'FixedRateBondHelper',
    'fixed_rate_leg',
    # Volatility
    'CapVolatilityVector',
    'ConstantSwaptionVolatility',
    'black_formula',
    'bachelier_formula',
    # Indexes
    'IndexManager',
    'index_manager',
    'InterestRateIndex',
    'IborIndex',
    'SwapIndex',
    'SwapSpreadIndex',
    'euribor',
    'euribor_swap_isda_fix_a',
    # Coupons
    'FloatingRateCoupon',
    'CmsCoupon',
    'CmsSpreadCoupon',
    'CappedFlooredCoupon',
    'CappedFlooredCmsSpreadCoupon',
    'capped_floored_cms_coupon',
    'capped_floored_cms_spread_coupon',
    'LinearTsrPricer',
    'LognormalCmsSpreadPricer',
    # Credit baskets
    'Pool',
    'Basket',
    'GaussianCopula',
    'StudentTCopula',
    'ConstantLossModel',
    'NthToDefault',
    'NtdResults',
    'IntegralNtdEngine',
    # Enums
    'DayCountConvention',
    'BadDayConvention',
    'Compounding',
    'DateGeneration',
    'Frequency',
    'OptionType',
    'ProtectionSide',
    'VolatilityType',
    # Errors
    'PricingError',
    'CurveError',
    'BootstrapError',
    'InterpolationError',
    'VolatilityError',
    'ConvergenceError',
    'FixingError',
    # Dates
    'parse_date',
    'year_fraction',
    'add_months',
    'add_days',
    'add_years',
    # Calendar
    'Calendar',
    'TARGET',
    'WEEKENDS_ONLY',
    'is_business_day',
    'adjust_date',
    # Schedule
    'Schedule',
    'SchedulePeriod',
    'make_schedule',
    # Tenor
    'Tenor',
    'parse_tenor',
]
