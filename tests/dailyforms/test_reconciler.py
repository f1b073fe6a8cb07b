from datetime import date, datetime

from src.performance_tracker.performance_tracker.dailyforms.model import CustomTaskEntry, DailyForm, StandardTaskEntry
from src.performance_tracker.performance_tracker.dailyforms.reconciler import derived_hours, normalize_form, reconcile


def test_is_completed_requires_both_checkmarks():
    entries = (
        StandardTaskEntry(item_id="a", label="A", employee_checked=True, admin_checked=True),
        StandardTaskEntry(item_id="b", label="B", employee_checked=True, admin_checked=False),
        StandardTaskEntry(item_id="c", label="C", employee_checked=False, admin_checked=True),
        StandardTaskEntry(item_id="d", label="D"),
    )

    out = reconcile(entries)

    assert [e.is_completed for e in out] == [True, False, False, False]


def test_stored_completion_flag_is_not_trusted():
    stale = (CustomTaskEntry(item_id="x", label="X", employee_checked=False, admin_checked=True, is_completed=True),)

    assert reconcile(stale)[0].is_completed is False


def test_reconcile_is_idempotent():
    entries = (
        StandardTaskEntry(item_id="a", label="A", employee_checked=True, admin_checked=True),
        StandardTaskEntry(item_id="b", label="B", employee_checked=True),
    )

    once = reconcile(entries)
    assert reconcile(once) == once


def test_reconcile_keeps_unchanged_entries():
    entry = StandardTaskEntry(item_id="a", label="A")
    assert reconcile((entry,))[0] is entry


def test_hours_derived_from_entry_and_exit():
    form = DailyForm(
        form_id=1,
        employee_id=2,
        form_date=date(2025, 3, 10),
        entry_time=datetime(2025, 3, 10, 9, 0),
        exit_time=datetime(2025, 3, 10, 17, 30),
        hours_attended=2,
    )

    assert derived_hours(form) == 8.5
    assert normalize_form(form).hours_attended == 8.5


def test_hours_clamped_when_exit_before_entry():
    form = DailyForm(
        form_id=1,
        employee_id=2,
        form_date=date(2025, 3, 10),
        entry_time=datetime(2025, 3, 10, 18, 0),
        exit_time=datetime(2025, 3, 10, 9, 0),
    )

    assert derived_hours(form) == 0.0


def test_manual_hours_kept_without_times():
    form = DailyForm(form_id=1, employee_id=2, form_date=date(2025, 3, 10), hours_attended=6.5)
    assert derived_hours(form) == 6.5
