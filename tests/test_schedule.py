"""
Tests for coupon schedule generation.
"""

import pytest
from pricelib.calendar import TARGET
from pricelib.enums import BadDayConvention, DateGeneration
from pricelib.schedule import Schedule, SchedulePeriod, make_schedule
from opendate import Date


class TestSchedule:
    """Tests for Schedule class."""

    def test_quarterly_target_schedule(self):
        """Test five years of quarterly dates on TARGET."""
        schedule = Schedule(
            Date(2006, 9, 1), Date(2011, 9, 1), '3M', TARGET,
            BadDayConvention.FOLLOWING,
        )
        # 20 periods plus the start date
        assert len(schedule) == 21
        assert schedule.start_date == Date(2006, 9, 1)
        assert schedule.end_date == Date(2011, 9, 1)
        assert schedule[1] == Date(2006, 12, 1)

    def test_weekend_dates_adjusted(self):
        """Test dates falling on weekends roll forward."""
        schedule = Schedule(Date(2006, 9, 1), Date(2011, 9, 1), '3M', TARGET)
        # 2007-09-01 is a Saturday
        assert Date(2007, 9, 3) in schedule.dates
        assert all(TARGET.is_business_day(d) for d in schedule)

    def test_periods_are_contiguous(self):
        """Test each period starts where the previous one ends."""
        schedule = Schedule(Date(2020, 3, 20), Date(2021, 3, 20), '3M')
        periods = schedule.periods
        assert len(periods) == 4
        assert isinstance(periods[0], SchedulePeriod)
        for prev, nxt in zip(periods[:-1], periods[1:]):
            assert prev.end == nxt.start

    def test_backward_short_front_stub(self):
        """Test backward generation leaves the stub at the front."""
        schedule = Schedule(
            Date(2020, 2, 17), Date(2020, 12, 21), '3M',
            rule=DateGeneration.BACKWARD,
        )
        first, last = schedule.periods[0], schedule.periods[-1]
        assert first.end.toordinal() - first.start.toordinal() < 80
        assert last.end.toordinal() - last.start.toordinal() > 85

    def test_forward_short_back_stub(self):
        """Test forward generation leaves the stub at the back."""
        schedule = Schedule(
            Date(2020, 2, 17), Date(2020, 12, 21), '3M',
            rule=DateGeneration.FORWARD,
        )
        assert schedule[1] == Date(2020, 5, 18)
        last = schedule.periods[-1]
        assert last.end.toordinal() - last.start.toordinal() < 80

    def test_termination_convention(self):
        """Test the last date uses its own convention."""
        # 2020-02-29 is a Saturday
        schedule = Schedule(
            Date(2019, 11, 29), Date(2020, 2, 29), '3M',
            convention=BadDayConvention.FOLLOWING,
            termination_convention=BadDayConvention.NONE,
        )
        assert schedule.end_date == Date(2020, 2, 29)

    def test_end_of_month_rule(self):
        """Test month-end anchors stay at month end."""
        schedule = Schedule(
            Date(2018, 4, 30), Date(2018, 10, 31), '1M', TARGET,
            BadDayConvention.MODIFIED_FOLLOWING, rule=DateGeneration.FORWARD,
            end_of_month=True,
        )
        assert Date(2018, 5, 31) in schedule.dates
        assert Date(2018, 8, 31) in schedule.dates

    def test_iteration_and_indexing(self):
        """Test iterating over and indexing the schedule."""
        schedule = Schedule(Date(2020, 3, 20), Date(2020, 9, 20), '3M')
        dates = list(schedule)
        assert dates == schedule.dates
        assert schedule[-1] == Date(2020, 9, 21)

    def test_invalid_dates(self):
        """Test termination must follow the effective date."""
        with pytest.raises(ValueError):
            Schedule(Date(2020, 3, 20), Date(2020, 3, 20), '3M')

    def test_invalid_tenor(self):
        """Test a non-positive tenor is rejected."""
        with pytest.raises(ValueError):
            Schedule(Date(2020, 3, 20), Date(2021, 3, 20), '0M')


class TestMakeSchedule:
    """Tests for make_schedule function."""

    def test_from_strings(self):
        """Test string dates and tenors."""
        schedule = make_schedule('2020-01-15', '2021-01-15', '6M')
        assert len(schedule) == 3
        assert schedule.start_date == Date(2020, 1, 15)

    def test_matches_schedule(self):
        """Test the keyword builder matches the class."""
        a = make_schedule(Date(2006, 9, 1), Date(2011, 9, 1), '3M', TARGET)
        b = Schedule(Date(2006, 9, 1), Date(2011, 9, 1), '3M', TARGET)
        assert a.dates == b.dates
