from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, replace
from datetime import date, datetime, tzinfo
from typing import Mapping, Optional, Sequence, Tuple, TypeVar

from ..common.datetime_utils import now_local
from ..common.validators import require_non_empty
from ..core.constants import DEFAULT_TAG_COLOR
from ..core.exceptions import ConflictError, DuplicateFormError, ForbiddenError, NotFoundError, ValidationError
from ..employees.model import Caller
from ..employees.repository import EmployeeRepository
from ..scoring.calculator.base import ScoreCalculator
from ..scoring.calculator.standard_calculator import StandardScoreCalculator
from .catalog import default_template, seed_tasks
from .guard import EditWindow, EditWindowGuard, GuardDecision
from .model import (
    AdminEdits,
    ChecklistItem,
    CustomTagEntry,
    CustomTaskEntry,
    DailyForm,
    EmployeeEdits,
    NewCustomTag,
    NewCustomTask,
)
from .reconciler import normalize_form
from .repository import DailyFormRepository

LOGGER = logging.getLogger(__name__)

T = TypeVar("T", bound=ChecklistItem)


@dataclass(frozen=True)
class TodayView:
    form: DailyForm
    decision: GuardDecision
    window: EditWindow


@dataclass(frozen=True)
class DraftOutcome:
    """Result of an employee draft save.

    ``accepted`` is False when the guard refused the write; this is a
    read-only signal for the UI, not an error.
    """

    form: DailyForm
    accepted: bool
    decision: GuardDecision


def _new_item_id() -> str:
    return uuid.uuid4().hex[:12]


def _apply_checks(entries: Tuple[T, ...], checks: Mapping[str, bool], *, attr: str, kind: str) -> Tuple[T, ...]:
    if not checks:
        return entries

    known = {e.item_id for e in entries}
    unknown = sorted(set(checks) - known)
    if unknown:
        raise ValidationError(f"Unknown {kind} id(s): {', '.join(unknown)}", context={"ids": unknown})

    return tuple(replace(e, **{attr: bool(checks[e.item_id])}) if e.item_id in checks else e for e in entries)


def _known_only(form: DailyForm, edits: EmployeeEdits) -> EmployeeEdits:
    def keep(checks: Mapping[str, bool], entries: Sequence[ChecklistItem], kind: str) -> dict:
        known = {e.item_id for e in entries}
        stale = sorted(set(checks) - known)
        if stale:
            LOGGER.warning("skipping %s id(s) no longer on form %s: %s", kind, form.form_id, ", ".join(stale))
        return {k: v for k, v in checks.items() if k in known}

    return replace(
        edits,
        task_checks=keep(edits.task_checks, form.tasks, "task"),
        custom_task_checks=keep(edits.custom_task_checks, form.custom_tasks, "custom task"),
        tag_checks=keep(edits.tag_checks, form.custom_tags, "tag"),
    )


class DailyFormService:
    """Use cases of the daily checklist: create, edit, submit, review, confirm."""

    def __init__(
        self,
        forms: DailyFormRepository,
        employees: EmployeeRepository,
        *,
        tz: tzinfo,
        calculator: Optional[ScoreCalculator] = None,
        guard: Optional[EditWindowGuard] = None,
    ):
        self._forms = forms
        self._employees = employees
        self._tz = tz
        self._calculator = calculator or StandardScoreCalculator()
        self._guard = guard or EditWindowGuard()

    # ------------------------------------------------------------------
    # helpers
    # ------------------------------------------------------------------
    def _now(self, now: Optional[datetime]) -> datetime:
        return now or now_local(self._tz)

    def _load(self, form_id: int) -> DailyForm:
        form = self._forms.get_by_id(int(form_id))
        if not form:
            raise NotFoundError("Daily form not found", context={"form_id": form_id})
        return normalize_form(form)

    def _persist(self, form: DailyForm) -> DailyForm:
        form = normalize_form(form)
        if not self._forms.save(form):
            raise NotFoundError("Daily form not found", context={"form_id": form.form_id})
        return form

    def _require_employee(self, employee_id: int):
        employee = self._employees.get_by_id(int(employee_id))
        if not employee or not employee.is_employee:
            raise NotFoundError("Employee not found", context={"employee_id": employee_id})
        return employee

    @staticmethod
    def _blank_form(employee_id: int, form_date: date) -> DailyForm:
        return DailyForm(form_id=0, employee_id=int(employee_id), form_date=form_date, tasks=seed_tasks())

    def _insert_or_fetch(self, form: DailyForm) -> DailyForm:
        try:
            form_id = self._forms.create(form)
        except DuplicateFormError:
            # Concurrent first access of the day: somebody else created it.
            LOGGER.info(
                "daily form for employee=%s date=%s created concurrently, re-fetching",
                form.employee_id,
                form.form_date,
            )
            existing = self._forms.get_for_employee_and_date(form.employee_id, form.form_date)
            if not existing:
                raise
            return normalize_form(existing)

        LOGGER.info("created daily form %s for employee=%s date=%s", form_id, form.employee_id, form.form_date)
        return normalize_form(replace(form, form_id=form_id))

    def _with_confirmation(self, form: DailyForm, *, admin_id: int, now: datetime, restamp: bool = True) -> DailyForm:
        """The confirm transition: reconcile, score and timestamp together."""

        form = normalize_form(form)
        result = self._calculator.calculate(form)
        return replace(
            form,
            admin_confirmed=True,
            admin_confirmed_at=now if restamp or not form.admin_confirmed_at else form.admin_confirmed_at,
            score=result.score,
            daily_bonus=result.daily_bonus,
            score_calculated_at=now,
            last_edited_by=int(admin_id),
            last_edited_at=now,
        )

    def _after_admin_change(self, form: DailyForm, *, admin_id: int, now: datetime) -> DailyForm:
        if form.admin_confirmed:
            return self._with_confirmation(form, admin_id=admin_id, now=now, restamp=False)
        return replace(form, score=0, daily_bonus=0, last_edited_by=int(admin_id), last_edited_at=now)

    def _check_owner_or_admin(self, form: DailyForm, caller: Caller, now: datetime) -> None:
        if caller.is_admin:
            return
        if caller.is_employee and caller.user_id == form.employee_id:
            self._guard.require_employee_edit(form, now.date())
            return
        raise ForbiddenError("Not allowed to change this form", context={"form_id": form.form_id})

    @staticmethod
    def _apply_employee_edits(form: DailyForm, edits: EmployeeEdits) -> DailyForm:
        form = replace(
            form,
            tasks=_apply_checks(form.tasks, edits.task_checks, attr="employee_checked", kind="task"),
            custom_tasks=_apply_checks(
                form.custom_tasks, edits.custom_task_checks, attr="employee_checked", kind="custom task"
            ),
            custom_tags=_apply_checks(form.custom_tags, edits.tag_checks, attr="employee_checked", kind="tag"),
        )
        if edits.hours_attended is not None:
            form = replace(form, hours_attended=float(edits.hours_attended))
        if edits.screensharing is not None:
            form = replace(form, screensharing=bool(edits.screensharing))
        return form

    @staticmethod
    def _apply_admin_edits(form: DailyForm, edits: AdminEdits) -> DailyForm:
        form = replace(
            form,
            tasks=_apply_checks(form.tasks, edits.task_checks, attr="admin_checked", kind="task"),
            custom_tasks=_apply_checks(
                form.custom_tasks, edits.custom_task_checks, attr="admin_checked", kind="custom task"
            ),
            custom_tags=_apply_checks(form.custom_tags, edits.tag_checks, attr="admin_checked", kind="tag"),
        )
        if edits.entry_time is not None:
            form = replace(form, entry_time=edits.entry_time)
        if edits.exit_time is not None:
            form = replace(form, exit_time=edits.exit_time)
        if edits.hours_attended is not None:
            form = replace(form, hours_attended=float(edits.hours_attended))
        if edits.screensharing is not None:
            form = replace(form, screensharing=bool(edits.screensharing))
        if edits.admin_notes is not None:
            form = replace(form, admin_notes=edits.admin_notes.strip())
        return form

    @staticmethod
    def _custom_task_entries(items: Sequence[NewCustomTask]) -> Tuple[CustomTaskEntry, ...]:
        return tuple(
            CustomTaskEntry(item_id=_new_item_id(), label=require_non_empty(i.label, "Custom task"))
            for i in items
        )

    @staticmethod
    def _custom_tag_entries(items: Sequence[NewCustomTag], *, created_by: int, now: datetime) -> Tuple[CustomTagEntry, ...]:
        return tuple(
            CustomTagEntry(
                item_id=_new_item_id(),
                label=require_non_empty(i.name, "Tag name"),
                color=(i.color or DEFAULT_TAG_COLOR).strip(),
                created_by=int(created_by),
                created_at=now,
            )
            for i in items
        )

    # ------------------------------------------------------------------
    # employee
    # ------------------------------------------------------------------
    def get_or_create_today_form(self, employee_id: int, *, now: Optional[datetime] = None) -> DailyForm:
        today = self._now(now).date()
        existing = self._forms.get_for_employee_and_date(int(employee_id), today)
        if existing:
            return normalize_form(existing)

        self._require_employee(employee_id)
        return self._insert_or_fetch(self._blank_form(employee_id, today))

    def today_view(self, employee_id: int, *, now: Optional[datetime] = None) -> TodayView:
        now = self._now(now)
        form = self.get_or_create_today_form(employee_id, now=now)
        return TodayView(
            form=form,
            decision=self._guard.employee_decision(form, now.date()),
            window=self._guard.time_remaining(now),
        )

    def can_submit_today(self, employee_id: int, *, now: Optional[datetime] = None) -> bool:
        today = self._now(now).date()
        form = self._forms.get_for_employee_and_date(int(employee_id), today)
        return not (form and form.submitted)

    @staticmethod
    def check_employee_edits(form: DailyForm, edits: EmployeeEdits) -> None:
        """Raise ValidationError when ``edits`` names items ``form`` does not have."""

        _apply_checks(form.tasks, edits.task_checks, attr="employee_checked", kind="task")
        _apply_checks(form.custom_tasks, edits.custom_task_checks, attr="employee_checked", kind="custom task")
        _apply_checks(form.custom_tags, edits.tag_checks, attr="employee_checked", kind="tag")

    def _draft_into(self, form: DailyForm, employee_id: int, edits: EmployeeEdits, now: datetime) -> DraftOutcome:
        decision = self._guard.employee_decision(form, now.date())
        if not decision.allowed:
            LOGGER.info("draft for form %s of employee=%s refused: %s", form.form_id, employee_id, decision.reason)
            return DraftOutcome(form=form, accepted=False, decision=decision)
        if edits.is_empty:
            return DraftOutcome(form=form, accepted=True, decision=decision)

        form = self._apply_employee_edits(form, edits)
        form = replace(form, last_edited_by=int(employee_id), last_edited_at=now)
        return DraftOutcome(form=self._persist(form), accepted=True, decision=decision)

    def save_today_draft(self, employee_id: int, edits: EmployeeEdits, *, now: Optional[datetime] = None) -> DraftOutcome:
        now = self._now(now)
        form = self.get_or_create_today_form(employee_id, now=now)
        return self._draft_into(form, employee_id, edits, now)

    def save_draft(
        self,
        employee_id: int,
        form_id: int,
        edits: EmployeeEdits,
        *,
        now: Optional[datetime] = None,
    ) -> DraftOutcome:
        """Write debounced edits into the form they were staged for.

        The guard runs against that form at write time, so a draft that
        crosses midnight is refused instead of landing on the next day's form.
        Items removed from the form since staging are skipped.
        """

        now = self._now(now)
        form = self._load(form_id)
        if form.employee_id != int(employee_id):
            raise ForbiddenError("Not allowed to change this form", context={"form_id": form.form_id})
        return self._draft_into(form, employee_id, _known_only(form, edits), now)

    def submit_today_form(
        self,
        employee_id: int,
        edits: Optional[EmployeeEdits] = None,
        *,
        now: Optional[datetime] = None,
    ) -> DailyForm:
        now = self._now(now)
        today = now.date()

        form = self._forms.get_for_employee_and_date(int(employee_id), today)
        if not form:
            raise NotFoundError("No form found for today", context={"employee_id": employee_id})
        form = normalize_form(form)

        self._guard.check_submit(form, today)

        if edits is not None:
            form = self._apply_employee_edits(form, edits)

        form = replace(
            form,
            submitted=True,
            submitted_at=now,
            # Scoring waits for admin confirmation.
            admin_confirmed=False,
            admin_confirmed_at=None,
            score=0,
            daily_bonus=0,
            score_calculated_at=None,
            last_edited_by=int(employee_id),
            last_edited_at=now,
        )
        form = self._persist(form)
        LOGGER.info("employee=%s submitted daily form %s", employee_id, form.form_id)
        return form

    # ------------------------------------------------------------------
    # owner or admin
    # ------------------------------------------------------------------
    def update_time_tracking(
        self,
        form_id: int,
        caller: Caller,
        *,
        entry_time: Optional[datetime] = None,
        exit_time: Optional[datetime] = None,
        now: Optional[datetime] = None,
    ) -> DailyForm:
        now = self._now(now)
        form = self._load(form_id)
        self._check_owner_or_admin(form, caller, now)

        if entry_time is None and exit_time is None:
            raise ValidationError("entry_time or exit_time is required")
        if entry_time is not None:
            form = replace(form, entry_time=entry_time)
        if exit_time is not None:
            form = replace(form, exit_time=exit_time)

        if caller.is_admin:
            form = self._after_admin_change(form, admin_id=caller.user_id, now=now)
        else:
            form = replace(form, last_edited_by=caller.user_id, last_edited_at=now)
        return self._persist(form)

    def add_custom_tag(
        self,
        form_id: int,
        caller: Caller,
        *,
        name: str,
        color: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> Tuple[DailyForm, CustomTagEntry]:
        now = self._now(now)
        form = self._load(form_id)
        self._check_owner_or_admin(form, caller, now)

        (tag,) = self._custom_tag_entries(
            [NewCustomTag(name=name, color=color or DEFAULT_TAG_COLOR)],
            created_by=caller.user_id,
            now=now,
        )
        form = replace(form, custom_tags=form.custom_tags + (tag,), last_edited_by=caller.user_id, last_edited_at=now)
        return self._persist(form), tag

    def delete_custom_tag(
        self,
        form_id: int,
        caller: Caller,
        tag_id: str,
        *,
        now: Optional[datetime] = None,
    ) -> DailyForm:
        now = self._now(now)
        form = self._load(form_id)
        self._check_owner_or_admin(form, caller, now)

        remaining = tuple(t for t in form.custom_tags if t.item_id != tag_id)
        if len(remaining) == len(form.custom_tags):
            raise NotFoundError("Custom tag not found", context={"form_id": form.form_id, "tag_id": tag_id})

        form = replace(form, custom_tags=remaining, last_edited_by=caller.user_id, last_edited_at=now)
        return self._persist(form)

    # ------------------------------------------------------------------
    # admin
    # ------------------------------------------------------------------
    def list_forms_for_employee(self, employee_id: int) -> list[DailyForm]:
        return [normalize_form(f) for f in self._forms.list_for_employee(int(employee_id))]

    def get_form(self, form_id: int) -> DailyForm:
        return self._load(form_id)

    def update_form(self, form_id: int, admin_id: int, edits: AdminEdits, *, now: Optional[datetime] = None) -> DailyForm:
        now = self._now(now)
        form = self._load(form_id)
        form = self._apply_admin_edits(form, edits)
        form = self._after_admin_change(form, admin_id=admin_id, now=now)
        form = self._persist(form)
        if form.admin_confirmed:
            LOGGER.info("rescored confirmed form %s: score=%s bonus=%s", form.form_id, form.score, form.daily_bonus)
        return form

    def confirm_form(
        self,
        form_id: int,
        admin_id: int,
        edits: Optional[AdminEdits] = None,
        *,
        now: Optional[datetime] = None,
    ) -> DailyForm:
        now = self._now(now)
        form = self._load(form_id)
        self._guard.check_confirm(form)

        if edits is not None:
            form = self._apply_admin_edits(form, edits)
        form = self._persist(self._with_confirmation(form, admin_id=admin_id, now=now))
        LOGGER.info(
            "admin=%s confirmed form %s: score=%s bonus=%s", admin_id, form.form_id, form.score, form.daily_bonus
        )
        return form

    def auto_select(self, form_id: int, admin_id: int, *, now: Optional[datetime] = None) -> DailyForm:
        """Approve every item the employee checked."""

        now = self._now(now)
        form = self._load(form_id)

        def approve(entries):
            return tuple(replace(e, admin_checked=True) if e.employee_checked else e for e in entries)

        form = replace(
            form,
            tasks=approve(form.tasks),
            custom_tasks=approve(form.custom_tasks),
            custom_tags=approve(form.custom_tags),
            admin_auto_selected=True,
            admin_auto_selected_at=now,
        )
        form = self._after_admin_change(form, admin_id=admin_id, now=now)
        return self._persist(form)

    def create_or_merge_custom_for_employee(
        self,
        employee_id: int,
        form_date: date,
        *,
        admin_id: int,
        custom_tasks: Sequence[NewCustomTask] = (),
        custom_tags: Sequence[NewCustomTag] = (),
        now: Optional[datetime] = None,
    ) -> DailyForm:
        now = self._now(now)
        new_tasks = self._custom_task_entries(custom_tasks)
        new_tags = self._custom_tag_entries(custom_tags, created_by=admin_id, now=now)

        form = self._forms.get_for_employee_and_date(int(employee_id), form_date)
        if not form:
            self._require_employee(employee_id)
            form = self._insert_or_fetch(self._blank_form(employee_id, form_date))

        form = replace(
            normalize_form(form),
            custom_tasks=form.custom_tasks + new_tasks,
            custom_tags=form.custom_tags + new_tags,
        )
        form = self._after_admin_change(form, admin_id=admin_id, now=now)
        return self._persist(form)

    def create_form_for_employee(
        self,
        *,
        admin_id: int,
        employee_id: int,
        form_date: date,
        entry_time: Optional[datetime] = None,
        exit_time: Optional[datetime] = None,
        admin_notes: str = "",
        custom_tasks: Sequence[NewCustomTask] = (),
        custom_tags: Sequence[NewCustomTag] = (),
        now: Optional[datetime] = None,
    ) -> DailyForm:
        now = self._now(now)
        self._require_employee(employee_id)

        if self._forms.get_for_employee_and_date(int(employee_id), form_date):
            raise ConflictError(
                "Daily form already exists for this date",
                context={"employee_id": employee_id, "date": form_date.isoformat()},
            )

        form = replace(
            self._blank_form(employee_id, form_date),
            entry_time=entry_time,
            exit_time=exit_time,
            custom_tasks=self._custom_task_entries(custom_tasks),
            custom_tags=self._custom_tag_entries(custom_tags, created_by=admin_id, now=now),
            admin_notes=(admin_notes or "").strip(),
            last_edited_by=int(admin_id),
            last_edited_at=now,
        )
        form_id = self._forms.create(normalize_form(form))
        LOGGER.info("admin=%s created form %s for employee=%s date=%s", admin_id, form_id, employee_id, form_date)
        return normalize_form(replace(form, form_id=form_id))

    @staticmethod
    def default_template() -> dict:
        return default_template()
