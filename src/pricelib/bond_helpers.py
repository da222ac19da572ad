"""
Bootstrap helpers for fitting yield curves to bond prices.
"""

import logging

from opendate import Date

from .bonds import FixedRateBond
from .curves import YieldTermStructure
from .enums import BadDayConvention, DayCountConvention, Frequency
from .dates import DateLike
from .exceptions import BootstrapError
from .quotes import SimpleQuote, as_quote
from .schedule import Schedule

logger = logging.getLogger(__name__)


class FixedRateBondHelper:
    """
    Fixed-rate bond helper for curve bootstrap.

    The helper's quote is the market clean price of a bond with face
    amount 100. The curve being bootstrapped is linked without being
    observed: every call to ``implied_quote`` reprices the bond on the
    curve's current state.
    """

    def __init__(
        self,
        clean_price: 'float | SimpleQuote',
        settlement_days: int,
        schedule: Schedule,
        coupons: list[float],
        day_count: DayCountConvention,
        payment_convention: BadDayConvention = BadDayConvention.FOLLOWING,
        redemption: float = 100.0,
        issue_date: DateLike | None = None,
    ):
        """
        Initialize the helper.

        Args:
            clean_price: Market clean price per 100 of face (number or quote)
            settlement_days: Business days from trade to settlement
            schedule: Coupon schedule of the bond
            coupons: Coupon rates
            day_count: Payment day counter
            payment_convention: Adjustment of payment dates
            redemption: Redemption per 100 of face
            issue_date: Bond issue date
        """
        self._quote = as_quote(clean_price)
        self.settlement_days = settlement_days
        self.schedule = schedule
        self.coupons = list(coupons)
        self.payment_day_count = day_count
        self.payment_convention = payment_convention
        self.redemption = redemption
        self.issue_date = issue_date

        self.latest_date: Date = schedule.end_date
        self._term_structure: YieldTermStructure | None = None
        self._bond: FixedRateBond | None = None

    @property
    def quote(self) -> SimpleQuote:
        return self._quote

    def set_term_structure(self, term_structure: YieldTermStructure) -> None:
        """Link the curve to price against and rebuild the bond."""
        self._term_structure = term_structure
        self._bond = FixedRateBond(
            self.settlement_days, 100.0, self.schedule, self.coupons,
            self.payment_day_count, self.payment_convention,
            self.redemption, self.issue_date,
        )

    @property
    def bond(self) -> FixedRateBond | None:
        """The bond built by the last call to set_term_structure."""
        return self._bond

    @property
    def day_count(self) -> DayCountConvention:
        return self.payment_day_count

    @property
    def frequency(self) -> Frequency:
        return self.schedule.tenor.frequency

    def implied_quote(self) -> float:
        """Clean price of the bond on the linked curve."""
        if self._term_structure is None:
            raise BootstrapError('term structure not set')
        return self._bond.clean_price(self._term_structure)

    def quote_error(self) -> float:
        """Market quote minus implied quote."""
        return self._quote.value - self.implied_quote()

    def __repr__(self) -> str:
        return (
            f'FixedRateBondHelper(price={self._quote.value}, '
            f'maturity={self.latest_date}, coupons={self.coupons})'
        )
