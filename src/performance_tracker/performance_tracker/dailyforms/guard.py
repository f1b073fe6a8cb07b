from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..common.datetime_utils import end_of_day, format_timestamp
from ..core.enums import FormState
from ..core.exceptions import AlreadySubmittedError, ForbiddenError, StateError
from .model import DailyForm


@dataclass(frozen=True)
class GuardDecision:
    allowed: bool
    state: FormState
    reason: Optional[str] = None


@dataclass(frozen=True)
class EditWindow:
    expired: bool
    hours: int = 0
    minutes: int = 0
    seconds_remaining: int = 0
    message: str = ""

    def to_dict(self) -> dict:
        return {
            "expired": self.expired,
            "hours": self.hours,
            "minutes": self.minutes,
            "seconds_remaining": self.seconds_remaining,
            "message": self.message,
        }


class EditWindowGuard:
    """Decides who may change a form, from its date and submission state.

    LOCKED is never stored: it follows from the form date falling behind
    ``today``, so forms lock at midnight without any write.
    """

    @staticmethod
    def state_of(form: DailyForm, today: date) -> FormState:
        if form.admin_confirmed:
            return FormState.CONFIRMED
        if form.form_date != today:
            return FormState.LOCKED
        if form.submitted:
            return FormState.SUBMITTED_PENDING_REVIEW
        return FormState.EDITABLE

    def employee_decision(self, form: DailyForm, today: date) -> GuardDecision:
        state = self.state_of(form, today)
        if form.form_date < today:
            return GuardDecision(False, state, "Previous days' forms are locked after midnight")
        if form.form_date > today:
            return GuardDecision(False, state, "Only today's form can be edited")
        if form.submitted:
            return GuardDecision(False, state, "Form already submitted for today")
        return GuardDecision(True, state)

    def require_employee_edit(self, form: DailyForm, today: date) -> GuardDecision:
        decision = self.employee_decision(form, today)
        if not decision.allowed:
            raise ForbiddenError(
                decision.reason or "Form is read-only",
                context={"form_id": form.form_id, "state": decision.state.value},
            )
        return decision

    def check_submit(self, form: DailyForm, today: date) -> None:
        if form.submitted:
            raise AlreadySubmittedError(
                "Form already submitted for today",
                context={
                    "form_id": form.form_id,
                    "submitted_at": format_timestamp(form.submitted_at),
                },
            )
        self.require_employee_edit(form, today)

    @staticmethod
    def check_confirm(form: DailyForm) -> None:
        if not form.submitted:
            raise StateError(
                "Form has not been submitted by the employee",
                context={"form_id": form.form_id},
            )

    @staticmethod
    def time_remaining(now: datetime) -> EditWindow:
        remaining = end_of_day(now.date()) - now
        seconds = int(remaining.total_seconds())
        if seconds <= 0:
            return EditWindow(expired=True, message="Today's editing period has expired")

        hours, rest = divmod(seconds, 3600)
        minutes = rest // 60
        return EditWindow(
            expired=False,
            hours=hours,
            minutes=minutes,
            seconds_remaining=seconds,
            message=f"{hours}h {minutes}m remaining to edit today's form",
        )
