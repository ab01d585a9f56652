"""
Unit tests for the date generators.

Tests cover:
- Whole-month, slice and range generators
- Weekday-set and exception generators
- Ordinal and anchor generators
- Explicit date resolution relative to "today"
- Week-number and ordinal helpers

Unless noted otherwise "today" is Sunday 2026-03-01. March 2026 starts on
a Sunday, has 31 days and 22 weekdays.
"""
import pytest
from datetime import date

from attendance.services import date_tools
from attendance.services.date_tools import nth_weekday_of_month, week_block_bounds

TODAY = date(2026, 3, 1)
THIS_MONTH = {'period': 'this_month'}


def run(tool, **params):
    """Call a generator directly with this_month as the default period"""
    merged = dict(THIS_MONTH)
    merged.update(params)
    return getattr(date_tools, tool)(TODAY, merged)


def days_of(result):
    return [int(d[8:10]) for d in result.dates]


class TestHelpers:
    """Tests for the calendar helpers shared by the generators."""

    @pytest.mark.unit
    @pytest.mark.parametrize('week, total, expected', [
        (1, 31, (1, 7)),
        (5, 31, (29, 31)),
        (5, 28, None),
        (-1, 31, (25, 31)),
        (-2, 31, (18, 24)),
        (-5, 31, (1, 3)),
        (-6, 31, None),
        (0, 31, None),
    ])
    def test_week_block_bounds(self, week, total, expected):
        """Positive weeks count from day 1, negative weeks back from month end."""
        assert week_block_bounds(week, total) == expected

    @pytest.mark.unit
    def test_nth_weekday_of_month(self):
        assert nth_weekday_of_month(2026, 3, 'monday', 1) == 2
        assert nth_weekday_of_month(2026, 3, 'Monday', -1) == 30
        assert nth_weekday_of_month(2026, 3, 'friday', -2) == 20

    @pytest.mark.unit
    @pytest.mark.parametrize('day_name, ordinal', [
        ('wednesday', 5),
        ('wednesday', -5),
        ('monday', 0),
        ('monday', 1.5),
        ('funday', 1),
    ])
    def test_nth_weekday_of_month_not_found(self, day_name, ordinal):
        """Missing occurrences, ordinal 0, fractions and bad names give None."""
        assert nth_weekday_of_month(2026, 3, day_name, ordinal) is None

    @pytest.mark.unit
    def test_parse_period_next_month_wraps_year(self):
        assert date_tools.parse_period(date(2026, 12, 15), 'next_month') == (2027, 1)
        assert date_tools.parse_period(date(2026, 12, 15), 'this_month') == (2026, 12)

    @pytest.mark.unit
    def test_parse_iso_date_rejects_impossible_dates(self):
        assert date_tools.parse_iso_date('2026-03-02') == date(2026, 3, 2)
        assert date_tools.parse_iso_date('2025-02-30') is None
        assert date_tools.parse_iso_date('2026-3-2') is None
        assert date_tools.parse_iso_date(None) is None


class TestWholePeriodGenerators:
    """Tests for expand_month, expand_all_days and expand_weekends."""

    @pytest.mark.unit
    def test_expand_month(self):
        """Every weekday of March 2026."""
        result = run('expand_month')

        assert result.success is True
        assert len(result.dates) == 22
        assert result.dates[0] == '2026-03-02'
        assert result.dates[-1] == '2026-03-31'
        assert 'March 2026' in result.description

    @pytest.mark.unit
    def test_expand_month_next_month_across_year_end(self):
        result = date_tools.expand_month(date(2026, 12, 15), {'period': 'next_month'})

        assert result.dates[0] == '2027-01-01'
        assert all(d.startswith('2027-01') for d in result.dates)

    @pytest.mark.unit
    def test_weekends_and_weekdays_partition_the_month(self):
        """expand_weekends and expand_month are disjoint and cover expand_all_days."""
        weekdays = set(run('expand_month').dates)
        weekends = set(run('expand_weekends').dates)
        all_days = run('expand_all_days').dates

        assert len(all_days) == 31
        assert len(weekends) == 9
        assert weekdays.isdisjoint(weekends)
        assert weekdays | weekends == set(all_days)


class TestSliceGenerators:
    """Tests for week, working-day, half-month and numbered-week slices."""

    @pytest.mark.unit
    def test_expand_weeks_first_and_last(self):
        assert days_of(run('expand_weeks', count=1, position='first')) == [2, 3, 4, 5, 6]
        assert days_of(run('expand_weeks', count=1, position='last')) == [25, 26, 27, 30, 31]

    @pytest.mark.unit
    def test_expand_weeks_zero_count_is_empty(self):
        result = run('expand_weeks', count=0, position='last')
        assert result.success is True
        assert result.dates == []

    @pytest.mark.unit
    def test_expand_working_days(self):
        assert days_of(run('expand_working_days', count=3, position='first')) == [2, 3, 4]
        assert days_of(run('expand_working_days', count=2, position='last')) == [30, 31]
        assert run('expand_working_days', count=-1, position='first').dates == []

    @pytest.mark.unit
    def test_expand_half_month(self):
        first = run('expand_half_month', half='first')
        second = run('expand_half_month', half='second')

        assert len(first.dates) == 10
        assert len(second.dates) == 12
        assert max(days_of(first)) <= 15
        assert min(days_of(second)) >= 16

    @pytest.mark.unit
    def test_expand_specific_weeks(self):
        assert days_of(run('expand_specific_weeks', weeks=[2])) == [9, 10, 11, 12, 13]
        assert days_of(run('expand_specific_weeks', weeks=[5])) == [30, 31]
        assert days_of(run('expand_specific_weeks', weeks=[1, 1])) == [2, 3, 4, 5, 6]

    @pytest.mark.unit
    def test_expand_specific_weeks_negative_counts_from_month_end(self):
        """Week -1 is the last seven days of the month."""
        assert days_of(run('expand_specific_weeks', weeks=[-1])) == [25, 26, 27, 30, 31]

    @pytest.mark.unit
    def test_expand_specific_weeks_outside_month_is_empty(self):
        assert run('expand_specific_weeks', weeks=[6, 0]).dates == []


class TestWeekdaySetGenerators:
    """Tests for generators driven by weekday names."""

    @pytest.mark.unit
    def test_expand_day_of_week(self):
        result = run('expand_day_of_week', day='monday')
        assert days_of(result) == [2, 9, 16, 23, 30]

    @pytest.mark.unit
    def test_expand_day_of_week_allows_weekends(self):
        assert days_of(run('expand_day_of_week', day='Saturday')) == [7, 14, 21, 28]

    @pytest.mark.unit
    def test_expand_day_of_week_unknown_name(self):
        """An unknown day name fails and the error names it."""
        result = run('expand_day_of_week', day='funday')

        assert result.success is False
        assert result.dates == []
        assert 'funday' in result.error

    @pytest.mark.unit
    def test_expand_multiple_days_of_week_drops_invalid_names(self):
        result = run('expand_multiple_days_of_week', days=['monday', 'funday', 'wednesday'])

        assert result.success is True
        assert len(result.dates) == 9
        assert 'funday' in result.error

    @pytest.mark.unit
    def test_expand_multiple_days_of_week_all_invalid(self):
        result = run('expand_multiple_days_of_week', days=['funday', 'someday'])
        assert result.success is False

    @pytest.mark.unit
    def test_expand_range_days_of_week_includes_weekends(self):
        result = run('expand_range_days_of_week', start_day=1, end_day=14, days=['saturday', 'sunday'])
        assert days_of(result) == [1, 7, 8, 14]


class TestRangeGenerators:
    """Tests for day-of-month range generators."""

    @pytest.mark.unit
    def test_expand_range(self):
        assert days_of(run('expand_range', start_day=5, end_day=10)) == [5, 6, 9, 10]

    @pytest.mark.unit
    def test_expand_range_clamps_to_month(self):
        assert days_of(run('expand_range', start_day=28, end_day=40)) == [30, 31]

    @pytest.mark.unit
    def test_expand_range_except_days(self):
        """Days 1-21 except Mondays."""
        result = run('expand_range_except_days', start_day=1, end_day=21, exclude_days=['monday'])

        assert days_of(result) == [3, 4, 5, 6, 10, 11, 12, 13, 17, 18, 19, 20]
        assert all(date.fromisoformat(d).weekday() != 0 for d in result.dates)

    @pytest.mark.unit
    def test_expand_range_except_days_needs_a_valid_day(self):
        """Unknown names alone must not silently return the whole range."""
        result = run('expand_range_except_days', start_day=1, end_day=21, exclude_days=['funday', 'someday'])

        assert result.success is False
        assert result.dates == []
        assert result.error == 'No valid day names in: funday, someday'

    @pytest.mark.unit
    def test_expand_month_except_range(self):
        result = run('expand_month_except_range', exclude_start=10, exclude_end=20)

        assert len(result.dates) == 13
        assert not any(10 <= day <= 20 for day in days_of(result))

    @pytest.mark.unit
    def test_expand_alternate_calendar(self):
        """Every other calendar date from the 1st, kept only when a weekday."""
        result = run('expand_alternate', type='calendar')
        assert days_of(result) == [3, 5, 9, 11, 13, 17, 19, 23, 25, 27, 31]

    @pytest.mark.unit
    def test_expand_alternate_working(self):
        """Every other weekday, starting with the first."""
        result = run('expand_alternate', type='working')
        assert days_of(result) == [2, 4, 6, 10, 12, 16, 18, 20, 24, 26, 30]

    @pytest.mark.unit
    def test_expand_range_alternate(self):
        result = run('expand_range_alternate', start_day=9, end_day=13, type='working')
        assert days_of(result) == [9, 11, 13]


class TestExceptionGenerators:
    """Tests for month-minus-something generators."""

    @pytest.mark.unit
    def test_expand_except(self):
        result = run('expand_except', exclude_day='friday')

        assert len(result.dates) == 18
        assert all(date.fromisoformat(d).weekday() != 4 for d in result.dates)

    @pytest.mark.unit
    def test_expand_half_except_day(self):
        result = run('expand_half_except_day', half='first', exclude_day='friday')
        assert days_of(result) == [2, 3, 4, 5, 9, 10, 11, 12]

    @pytest.mark.unit
    def test_expand_month_except_weeks_negative(self):
        """Excluding week -1 drops the same days week -1 selects."""
        excluded = run('expand_month_except_weeks', exclude_weeks=[-1])
        selected = run('expand_specific_weeks', weeks=[-1])

        assert len(excluded.dates) == 17
        assert set(excluded.dates).isdisjoint(selected.dates)
        assert set(excluded.dates) | set(selected.dates) == set(run('expand_month').dates)

    @pytest.mark.unit
    def test_expand_n_working_days_except(self):
        result = run('expand_n_working_days_except', count=5, position='first', exclude_days=['monday'])
        assert days_of(result) == [3, 4, 5, 6]

    @pytest.mark.unit
    def test_expand_n_working_days_except_needs_a_valid_day(self):
        result = run('expand_n_working_days_except', count=5, position='first', exclude_days=['funday'])

        assert result.success is False
        assert result.dates == []
        assert result.error == 'No valid day names in: funday'


class TestPerWeekGenerators:
    """Tests for first/last weekday of each week."""

    @pytest.mark.unit
    def test_first_weekday_per_week(self):
        assert days_of(run('expand_first_weekday_per_week')) == [2, 9, 16, 23, 30]

    @pytest.mark.unit
    def test_last_weekday_per_week(self):
        """The partial final week ends on Tuesday the 31st."""
        assert days_of(run('expand_last_weekday_per_week')) == [6, 13, 20, 27, 31]


class TestOrdinalGenerators:
    """Tests for ordinal weekday and anchor generators."""

    @pytest.mark.unit
    def test_expand_ordinal_day_of_week(self):
        result = run('expand_ordinal_day_of_week', ordinals=[
            {'ordinal': 1, 'day': 'monday'},
            {'ordinal': -1, 'day': 'friday'},
        ])

        assert result.success is True
        assert days_of(result) == [2, 27]
        assert result.error is None

    @pytest.mark.unit
    def test_expand_ordinal_day_of_week_reports_misses(self):
        result = run('expand_ordinal_day_of_week', ordinals=[
            {'ordinal': 1, 'day': 'monday'},
            {'ordinal': 5, 'day': 'wednesday'},
            {'ordinal': 0, 'day': 'friday'},
        ])

        assert result.success is True
        assert days_of(result) == [2]
        assert 'ordinal 5 of wednesday' in result.error
        assert 'ordinal 0 of friday' in result.error

    @pytest.mark.unit
    def test_expand_ordinal_day_of_week_nothing_found(self):
        result = run('expand_ordinal_day_of_week', ordinals=[{'ordinal': 5, 'day': 'thursday'}])
        assert result.success is False

    @pytest.mark.unit
    def test_expand_anchor_range_between(self):
        """First Monday through last Friday, in either argument order."""
        forward = run('expand_anchor_range', anchor_day='monday', anchor_occurrence=1,
                      direction='between', end_day='friday', end_occurrence=-1)
        backward = run('expand_anchor_range', anchor_day='friday', anchor_occurrence=-1,
                       direction='between', end_day='monday', end_occurrence=1)

        assert forward.success is True
        assert forward.dates == backward.dates
        assert forward.dates[0] == '2026-03-02'
        assert forward.dates[-1] == '2026-03-27'
        assert len(forward.dates) == 20

    @pytest.mark.unit
    @pytest.mark.parametrize('direction, expected', [
        ('on_and_after', [27, 30, 31]),
        ('after', [30, 31]),
        ('before', [23, 24, 25, 26]),
    ])
    def test_expand_anchor_range_directions(self, direction, expected):
        result = run('expand_anchor_range', anchor_day='friday', anchor_occurrence=-1, direction=direction)
        assert days_of(result)[-len(expected):] == expected

    @pytest.mark.unit
    def test_expand_anchor_range_on_and_before(self):
        result = run('expand_anchor_range', anchor_day='monday', anchor_occurrence=2, direction='on_and_before')
        assert days_of(result) == [2, 3, 4, 5, 6, 9]

    @pytest.mark.unit
    def test_expand_anchor_range_between_requires_end_anchor(self):
        result = run('expand_anchor_range', anchor_day='monday', anchor_occurrence=1, direction='between')

        assert result.success is False
        assert 'end_day' in result.error

    @pytest.mark.unit
    def test_expand_anchor_range_missing_anchor(self):
        result = run('expand_anchor_range', anchor_day='wednesday', anchor_occurrence=5, direction='after')
        assert result.success is False

    @pytest.mark.unit
    def test_expand_n_days_from_ordinal(self):
        assert days_of(run('expand_n_days_from_ordinal', ordinal=2, day='monday', count=5)) == [9, 10, 11, 12, 13]

    @pytest.mark.unit
    def test_expand_n_days_from_ordinal_stops_at_month_end(self):
        assert days_of(run('expand_n_days_from_ordinal', ordinal=-1, day='monday', count=10)) == [30, 31]


class TestStrideAndConvenienceGenerators:
    """Tests for every-nth, week period and rest-of-month."""

    @pytest.mark.unit
    def test_expand_every_nth(self):
        result = run('expand_every_nth', n=2)
        assert result.dates == run('expand_alternate', type='calendar').dates

    @pytest.mark.unit
    def test_expand_every_nth_start_day(self):
        assert days_of(run('expand_every_nth', n=7, start_day=2)) == [2, 9, 16, 23, 30]

    @pytest.mark.unit
    @pytest.mark.parametrize('n', [0, -3, 1.5])
    def test_expand_every_nth_rejects_bad_stride(self, n):
        result = run('expand_every_nth', n=n)

        assert result.success is False
        assert 'positive whole number' in result.error

    @pytest.mark.unit
    def test_expand_week_period(self):
        wednesday = date(2026, 3, 4)

        this_week = date_tools.expand_week_period(wednesday, {'week': 'this_week'})
        next_week = date_tools.expand_week_period(wednesday, {'week': 'next_week'})

        assert this_week.dates == ['2026-03-02', '2026-03-03', '2026-03-04', '2026-03-05', '2026-03-06']
        assert next_week.dates[0] == '2026-03-09'
        assert next_week.dates[-1] == '2026-03-13'

    @pytest.mark.unit
    def test_expand_rest_of_month(self):
        """Starts tomorrow; empty on the last day of the month."""
        assert date_tools.expand_rest_of_month(date(2026, 3, 27), {}).dates == ['2026-03-30', '2026-03-31']
        assert date_tools.expand_rest_of_month(date(2026, 3, 31), {}).dates == []


class TestResolveDates:
    """Tests for explicit date token resolution (today = Wednesday 2026-03-04)."""

    WEDNESDAY = date(2026, 3, 4)

    @pytest.mark.unit
    @pytest.mark.parametrize('token, expected', [
        ('today', '2026-03-04'),
        ('Tomorrow', '2026-03-05'),
        ('2026-03-20', '2026-03-20'),
        ('next monday', '2026-03-09'),
        ('next wednesday', '2026-03-11'),
        ('this wednesday', '2026-03-04'),
        ('this friday', '2026-03-06'),
        ('friday', '2026-03-06'),
        ('wednesday', '2026-03-11'),
    ])
    def test_tokens(self, token, expected):
        result = date_tools.resolve_dates(self.WEDNESDAY, {'dates': [token]})

        assert result.success is True
        assert result.dates == [expected]

    @pytest.mark.unit
    def test_duplicates_collapse_and_sort(self):
        result = date_tools.resolve_dates(self.WEDNESDAY, {'dates': ['tomorrow', '2026-03-05', 'today']})
        assert result.dates == ['2026-03-04', '2026-03-05']

    @pytest.mark.unit
    def test_unrecognized_tokens_fail(self):
        """Unknown tokens fail the call but resolved dates are still returned."""
        result = date_tools.resolve_dates(self.WEDNESDAY, {'dates': ['today', 'someday', '2025-02-30']})

        assert result.success is False
        assert result.dates == ['2026-03-04']
        assert 'someday' in result.error
        assert '2025-02-30' in result.error

    @pytest.mark.unit
    def test_empty_list_fails(self):
        assert date_tools.resolve_dates(self.WEDNESDAY, {'dates': []}).success is False
