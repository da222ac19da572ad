"""
Custom exceptions for pricelib.
"""


class PricingError(Exception):
    """Base exception for all pricelib errors."""


class CurveError(PricingError):
    """Error related to curve construction or interpolation."""


class BootstrapError(CurveError):
    """Error during curve bootstrapping."""


class InterpolationError(CurveError):
    """Error during curve interpolation."""


class VolatilityError(CurveError):
    """Error in a volatility term structure."""


class ConvergenceError(PricingError):
    """Root finding failed to converge."""


class FixingError(PricingError):
    """Missing or invalid index fixing."""
