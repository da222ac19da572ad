"""
Global pricing settings.

Holds the evaluation date every curve, index and engine prices against,
and the rule for today's fixings. Objects that depend on the evaluation
date register as observers and are notified when it moves.
"""

import logging
from contextlib import contextmanager
from datetime import date

from opendate import Date

from .dates import DateLike, to_date
from .quotes import Observable

logger = logging.getLogger(__name__)


class Settings(Observable):
    """
    Process-wide pricing settings.

    Attributes
        evaluation_date: Date as of which everything is priced (default: today)
        enforces_todays_historic_fixings: If True, fixings on the evaluation
            date must come from stored history rather than a forecast
    """

    def __init__(self):
        super().__init__()
        self._evaluation_date: Date | None = None
        self.enforces_todays_historic_fixings = False

    @property
    def evaluation_date(self) -> Date:
        if self._evaluation_date is None:
            return to_date(date.today())
        return self._evaluation_date

    @evaluation_date.setter
    def evaluation_date(self, d: DateLike | None) -> None:
        self._set_evaluation_date(to_date(d) if d is not None else None)

    def _set_evaluation_date(self, d: Date | None) -> None:
        if d == self._evaluation_date:
            return
        self._evaluation_date = d
        logger.debug('Evaluation date set to %s', d)
        self.notify_observers()

    def reset(self) -> None:
        """Return to the defaults: today, fixings forecast on the day."""
        self._set_evaluation_date(None)
        self.enforces_todays_historic_fixings = False


settings = Settings()


@contextmanager
def saved_settings():
    """Restore the global settings on exit from the block."""
    evaluation_date = settings._evaluation_date
    enforces = settings.enforces_todays_historic_fixings
    try:
        yield settings
    finally:
        settings._set_evaluation_date(evaluation_date)
        settings.enforces_todays_historic_fixings = enforces
