"""
Coupon schedule generation.

Generates the accrual dates of a regular coupon leg, stepping whole
tenors from one end and adjusting each date on a business calendar.
"""

from dataclasses import dataclass

from opendate import Date

from .calendar import WEEKENDS_ONLY, Calendar
from .dates import DateLike, to_date
from .enums import BadDayConvention, DateGeneration
from .tenor import Tenor, parse_tenor


@dataclass
class SchedulePeriod:
    """
    A single accrual period of a schedule.

    Attributes
        start: Adjusted start of the period
        end: Adjusted end of the period
    """

    start: Date
    end: Date

    def __repr__(self) -> str:
        return f'SchedulePeriod({self.start}, {self.end})'


class Schedule:
    """
    A schedule of adjusted coupon dates.

    Unadjusted dates are ``anchor + k * tenor`` so month-end clamping never
    drifts; each one is then adjusted on the calendar.
    """

    def __init__(
        self,
        effective_date: DateLike,
        termination_date: DateLike,
        tenor: Tenor | str,
        calendar: Calendar = WEEKENDS_ONLY,
        convention: BadDayConvention = BadDayConvention.FOLLOWING,
        termination_convention: BadDayConvention | None = None,
        rule: DateGeneration = DateGeneration.BACKWARD,
        end_of_month: bool = False,
    ):
        """
        Create a schedule.

        Args:
            effective_date: First accrual start date
            termination_date: Last accrual end date
            tenor: Period between coupon dates (e.g. '3M')
            calendar: Business day calendar
            convention: Adjustment for all dates but the last
            termination_convention: Adjustment for the last date (defaults to convention)
            rule: Generate dates backward from termination or forward from effective
            end_of_month: Keep month-end anchors at month end
        """
        self.effective_date = to_date(effective_date)
        self.termination_date = to_date(termination_date)
        if self.termination_date <= self.effective_date:
            raise ValueError(
                f'termination date ({self.termination_date}) must be later '
                f'than effective date ({self.effective_date})'
            )
        self.tenor = parse_tenor(tenor)
        if self.tenor.value <= 0:
            raise ValueError(f'Non-positive schedule tenor: {self.tenor}')
        self.calendar = calendar
        self.convention = convention
        self.termination_convention = (
            convention if termination_convention is None else termination_convention
        )
        self.rule = rule
        self.end_of_month = end_of_month

        self._dates: list[Date] = []
        self._generate_schedule()

    def _generate_schedule(self) -> None:
        if self.rule == DateGeneration.BACKWARD:
            anchor = self.termination_date
            unadj_dates = self._generate_dates_backward()
        else:
            anchor = self.effective_date
            unadj_dates = self._generate_dates_forward()
        # the rule only applies when the anchor itself sits at month end
        self._eom = (
            self.end_of_month
            and self.tenor.unit in ('M', 'Y')
            and self.calendar.is_end_of_month(anchor)
        )

        last = len(unadj_dates) - 1
        dates = []
        for i, d in enumerate(unadj_dates):
            convention = self.termination_convention if i == last else self.convention
            # the stub end opposite the anchor keeps its own date
            stub_end = (i == 0) if self.rule == DateGeneration.BACKWARD else (i == last)
            dates.append(self._adjust(d, convention, eom=self._eom and not stub_end))

        # adjustment can collapse a short stub onto its neighbour
        self._dates = [dates[0]]
        for d in dates[1:]:
            if d > self._dates[-1]:
                self._dates.append(d)

    def _adjust(self, d: Date, convention: BadDayConvention, eom: bool = False) -> Date:
        if eom:
            return self.calendar.end_of_month(d)
        return self.calendar.adjust(d, convention)

    def _generate_dates_backward(self) -> list[Date]:
        """Generate dates backward from termination to effective."""
        dates = [self.termination_date]
        k = 1
        while True:
            prev = (-self.tenor * k).add_to_date(self.termination_date)
            if prev <= self.effective_date:
                dates.append(self.effective_date)
                break
            dates.append(prev)
            k += 1

        dates.reverse()
        return dates

    def _generate_dates_forward(self) -> list[Date]:
        """Generate dates forward from effective to termination."""
        dates = [self.effective_date]
        k = 1
        while True:
            next_date = (self.tenor * k).add_to_date(self.effective_date)
            if next_date >= self.termination_date:
                dates.append(self.termination_date)
                break
            dates.append(next_date)
            k += 1

        return dates

    @property
    def dates(self) -> list[Date]:
        """Adjusted schedule dates, start and end included."""
        return list(self._dates)

    @property
    def start_date(self) -> Date:
        return self._dates[0]

    @property
    def end_date(self) -> Date:
        return self._dates[-1]

    @property
    def periods(self) -> list[SchedulePeriod]:
        """Accrual periods between consecutive schedule dates."""
        return [
            SchedulePeriod(start, end)
            for start, end in zip(self._dates[:-1], self._dates[1:])
        ]

    def __len__(self) -> int:
        return len(self._dates)

    def __iter__(self):
        return iter(self._dates)

    def __getitem__(self, idx: int) -> Date:
        return self._dates[idx]


def make_schedule(
    start: DateLike,
    end: DateLike,
    tenor: Tenor | str,
    calendar: Calendar = WEEKENDS_ONLY,
    convention: BadDayConvention = BadDayConvention.FOLLOWING,
    termination_convention: BadDayConvention | None = None,
    rule: DateGeneration = DateGeneration.BACKWARD,
    end_of_month: bool = False,
) -> Schedule:
    """
    Build a schedule from keyword arguments.

    Args:
        start: Effective date (Date or string)
        end: Termination date (Date or string)
        tenor: Coupon period, e.g. '3M'
        calendar: Business day calendar (default: weekends only)
        convention: Business day convention (default: Following)
        termination_convention: Convention for the last date
        rule: Date generation rule (default: backward)
        end_of_month: End-of-month rule

    Returns
        Schedule with all coupon dates
    """
    return Schedule(
        effective_date=start,
        termination_date=end,
        tenor=tenor,
        calendar=calendar,
        convention=convention,
        termination_convention=termination_convention,
        rule=rule,
        end_of_month=end_of_month,
    )
