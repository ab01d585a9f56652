"""
Unit tests for the modifier pipeline.

Every test starts from the 22 weekdays of March 2026.
"""
import pytest
from datetime import date

from attendance.services.date_modifiers import MODIFIER_HANDLERS, apply_modifiers, apply_single_modifier
from attendance.services.date_tools import expand_month
from attendance.services.date_types import DateModifier, ModifierType

MARCH = expand_month(date(2026, 3, 1), {'period': 'this_month'}).dates


def mod(mod_type, **params):
    return {'type': mod_type, 'params': params}


def days_of(dates):
    return [int(d[8:10]) for d in dates]


class TestExclusions:
    """Tests for the exclude_* modifiers."""

    @pytest.mark.unit
    def test_exclude_dates(self):
        dates, errors = apply_modifiers(MARCH, [mod('exclude_dates', dates=['2026-03-02', '2026-04-01'])])

        assert errors == []
        assert len(dates) == 21
        assert '2026-03-02' not in dates

    @pytest.mark.unit
    def test_exclude_days_of_week(self):
        dates, _ = apply_modifiers(MARCH, [mod('exclude_days_of_week', days=['Wednesday', 'friday'])])

        assert len(dates) == 14
        assert all(date.fromisoformat(d).weekday() not in (2, 4) for d in dates)

    @pytest.mark.unit
    def test_exclude_range(self):
        dates, _ = apply_modifiers(MARCH, [mod('exclude_range', start_day=1, end_day=10)])
        assert days_of(dates)[0] == 11
        assert len(dates) == 15

    @pytest.mark.unit
    def test_exclude_weeks_uses_calendar_weeks(self):
        """Week 1 is days 1-7 and week 5 is days 29-31."""
        dates, _ = apply_modifiers(MARCH, [mod('exclude_weeks', weeks=[1, 5])])

        assert days_of(dates)[0] == 9
        assert days_of(dates)[-1] == 27
        assert len(dates) == 15

    @pytest.mark.unit
    def test_exclude_working_days_count(self):
        first, _ = apply_modifiers(MARCH, [mod('exclude_working_days_count', count=2, position='first')])
        last, _ = apply_modifiers(MARCH, [mod('exclude_working_days_count', count=1, position='last')])

        assert days_of(first)[:2] == [4, 5]
        assert days_of(last)[-1] == 30

    @pytest.mark.unit
    def test_exclude_holidays_from_params(self):
        dates, _ = apply_modifiers(MARCH, [mod('exclude_holidays', dates=['2026-03-04'])])
        assert '2026-03-04' not in dates

    @pytest.mark.unit
    def test_exclude_holidays_from_context(self):
        """Without params.dates the holidays supplied in context are used."""
        dates, errors = apply_modifiers(
            MARCH, [mod('exclude_holidays')], context={'holidays': ['2026-03-04', '2026-03-05']}
        )

        assert errors == []
        assert len(dates) == 20

    @pytest.mark.unit
    def test_exclude_holidays_without_any_source_is_noop(self):
        dates, errors = apply_modifiers(MARCH, [mod('exclude_holidays')])

        assert dates == MARCH
        assert errors == []


class TestFilters:
    """Tests for the filter_* modifiers."""

    @pytest.mark.unit
    def test_filter_days_of_week(self):
        dates, _ = apply_modifiers(MARCH, [mod('filter_days_of_week', days=['tuesday', 'thursday'])])
        assert len(dates) == 9

    @pytest.mark.unit
    def test_filter_days_of_week_without_valid_names(self):
        dates, errors = apply_modifiers(MARCH, [mod('filter_days_of_week', days=['funday'])])

        assert dates == MARCH
        assert errors == ['filter_days_of_week: no valid day names provided']

    @pytest.mark.unit
    def test_filter_range(self):
        dates, _ = apply_modifiers(MARCH, [mod('filter_range', start_day=10, end_day=12)])
        assert dates == ['2026-03-10', '2026-03-11', '2026-03-12']

    @pytest.mark.unit
    def test_filter_weekday_slice(self):
        first, _ = apply_modifiers(MARCH, [mod('filter_weekday_slice', count=1, position='first')])
        last, _ = apply_modifiers(MARCH, [mod('filter_weekday_slice', count=1, position='last')])

        assert days_of(first) == [2, 9, 16, 23, 30]
        assert days_of(last) == [6, 13, 20, 27, 31]


class TestPipelineBehaviour:
    """Tests for ordering, error tolerance and input forms."""

    @pytest.mark.unit
    def test_modifiers_apply_in_order(self):
        """Slicing per week then dropping the first two differs from the reverse."""
        slice_first = mod('filter_weekday_slice', count=1, position='first')
        drop_two = mod('exclude_working_days_count', count=2, position='first')

        forward, _ = apply_modifiers(MARCH, [slice_first, drop_two])
        reverse, _ = apply_modifiers(MARCH, [drop_two, slice_first])

        assert days_of(forward) == [16, 23, 30]
        assert days_of(reverse) == [4, 9, 16, 23, 30]

    @pytest.mark.unit
    def test_bad_modifier_is_skipped_not_fatal(self):
        dates, errors = apply_modifiers(MARCH, [
            mod('exclude_fridays'),
            mod('exclude_range', start_day='1', end_day=5),
            mod('exclude_days_of_week', days=['monday']),
        ])

        assert len(dates) == 17
        assert errors[0] == 'Unknown modifier type: exclude_fridays'
        assert errors[1].startswith('exclude_range:')

    @pytest.mark.unit
    def test_handler_fault_is_reported(self):
        dates, errors = apply_modifiers(['not-a-date'], [mod('exclude_days_of_week', days=['monday'])])

        assert dates == ['not-a-date']
        assert errors[0].startswith('Modifier error (exclude_days_of_week)')

    @pytest.mark.unit
    def test_accepts_dataclass_modifiers(self):
        modifier = DateModifier(type=ModifierType.FILTER_RANGE, params={'start_day': 30, 'end_day': 31})
        dates, error = apply_single_modifier(MARCH, modifier)

        assert error is None
        assert dates == ['2026-03-30', '2026-03-31']

    @pytest.mark.unit
    def test_no_modifiers_sorts_and_deduplicates(self):
        dates, errors = apply_modifiers(['2026-03-03', '2026-03-02', '2026-03-03'], None)

        assert dates == ['2026-03-02', '2026-03-03']
        assert errors == []

    @pytest.mark.unit
    def test_every_modifier_type_has_a_handler(self):
        assert set(MODIFIER_HANDLERS) == set(ModifierType)
        assert all(callable(handler) for handler in MODIFIER_HANDLERS.values())
