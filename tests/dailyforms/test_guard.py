from dataclasses import replace
from datetime import date, datetime, timedelta

import pytest

from src.performance_tracker.performance_tracker.core.enums import FormState
from src.performance_tracker.performance_tracker.core.exceptions import AlreadySubmittedError, ForbiddenError, StateError
from src.performance_tracker.performance_tracker.dailyforms.guard import EditWindowGuard
from src.performance_tracker.performance_tracker.dailyforms.model import DailyForm

TODAY = date(2025, 3, 10)


@pytest.fixture
def form() -> DailyForm:
    return DailyForm(form_id=7, employee_id=2, form_date=TODAY)


def test_state_machine(form):
    guard = EditWindowGuard()

    assert guard.state_of(form, TODAY) == FormState.EDITABLE
    assert guard.state_of(replace(form, submitted=True), TODAY) == FormState.SUBMITTED_PENDING_REVIEW
    assert guard.state_of(form, TODAY + timedelta(days=1)) == FormState.LOCKED
    assert guard.state_of(replace(form, submitted=True, admin_confirmed=True), TODAY) == FormState.CONFIRMED


def test_future_form_reports_locked(form):
    assert EditWindowGuard.state_of(form, TODAY - timedelta(days=1)) == FormState.LOCKED


def test_yesterdays_form_refuses_employee_edit(form):
    guard = EditWindowGuard()

    decision = guard.employee_decision(form, TODAY + timedelta(days=1))
    assert decision.allowed is False
    assert decision.state == FormState.LOCKED

    with pytest.raises(ForbiddenError):
        guard.require_employee_edit(form, TODAY + timedelta(days=1))


def test_submitted_form_refuses_employee_edit(form):
    decision = EditWindowGuard().employee_decision(replace(form, submitted=True), TODAY)
    assert decision.allowed is False
    assert decision.state == FormState.SUBMITTED_PENDING_REVIEW


def test_double_submit_reports_original_time(form):
    submitted_at = datetime(2025, 3, 10, 17, 0)
    with pytest.raises(AlreadySubmittedError) as exc:
        EditWindowGuard().check_submit(replace(form, submitted=True, submitted_at=submitted_at), TODAY)
    assert exc.value.context["submitted_at"] == "2025-03-10T17:00:00"


def test_confirm_requires_submission(form):
    with pytest.raises(StateError):
        EditWindowGuard.check_confirm(form)


def test_time_remaining_until_midnight():
    window = EditWindowGuard.time_remaining(datetime(2025, 3, 10, 21, 15))

    assert window.expired is False
    assert window.hours == 2
    assert window.minutes == 44
    assert "2h 44m" in window.message
