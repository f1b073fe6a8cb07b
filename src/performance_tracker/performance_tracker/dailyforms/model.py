from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Mapping, Optional, Tuple

from ..common.datetime_utils import format_timestamp
from ..core.constants import DEFAULT_TAG_COLOR
from ..core.enums import TaskFrequency


@dataclass(frozen=True)
class ChecklistItem:
    """One line of the daily checklist with its two independent checkmarks.

    ``is_completed`` is derived (employee AND admin) and is recomputed by the
    reconciler on every read and write; a stored value is never trusted.
    """

    item_id: str
    label: str
    employee_checked: bool = False
    admin_checked: bool = False
    is_completed: bool = False


@dataclass(frozen=True)
class StandardTaskEntry(ChecklistItem):
    category: Optional[str] = None
    frequency: TaskFrequency = TaskFrequency.DAILY


@dataclass(frozen=True)
class CustomTaskEntry(ChecklistItem):
    pass


@dataclass(frozen=True)
class CustomTagEntry(ChecklistItem):
    color: str = DEFAULT_TAG_COLOR
    created_by: Optional[int] = None
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class DailyForm:
    """Domain entity: one employee's checklist for one calendar day."""

    form_id: int
    employee_id: int
    form_date: date
    tasks: Tuple[StandardTaskEntry, ...] = ()
    custom_tasks: Tuple[CustomTaskEntry, ...] = ()
    custom_tags: Tuple[CustomTagEntry, ...] = ()
    entry_time: Optional[datetime] = None
    exit_time: Optional[datetime] = None
    hours_attended: float = 0.0
    screensharing: bool = False
    submitted: bool = False
    submitted_at: Optional[datetime] = None
    admin_confirmed: bool = False
    admin_confirmed_at: Optional[datetime] = None
    admin_auto_selected: bool = False
    admin_auto_selected_at: Optional[datetime] = None
    score: int = 0
    daily_bonus: int = 0
    score_calculated_at: Optional[datetime] = None
    admin_notes: str = ""
    last_edited_by: Optional[int] = None
    last_edited_at: Optional[datetime] = None


@dataclass(frozen=True)
class EmployeeEdits:
    """Self-report changes an employee may make while the form is editable.

    Check maps are keyed by item id and only ever touch ``employee_checked``.
    """

    task_checks: Mapping[str, bool] = field(default_factory=dict)
    custom_task_checks: Mapping[str, bool] = field(default_factory=dict)
    tag_checks: Mapping[str, bool] = field(default_factory=dict)
    hours_attended: Optional[float] = None
    screensharing: Optional[bool] = None

    def merge(self, newer: "EmployeeEdits") -> "EmployeeEdits":
        """Coalesce two edits; values from ``newer`` win."""

        return EmployeeEdits(
            task_checks={**self.task_checks, **newer.task_checks},
            custom_task_checks={**self.custom_task_checks, **newer.custom_task_checks},
            tag_checks={**self.tag_checks, **newer.tag_checks},
            hours_attended=newer.hours_attended if newer.hours_attended is not None else self.hours_attended,
            screensharing=newer.screensharing if newer.screensharing is not None else self.screensharing,
        )

    @property
    def is_empty(self) -> bool:
        return (
            not self.task_checks
            and not self.custom_task_checks
            and not self.tag_checks
            and self.hours_attended is None
            and self.screensharing is None
        )


@dataclass(frozen=True)
class AdminEdits:
    """Review changes by an admin. Check maps only touch ``admin_checked``."""

    task_checks: Mapping[str, bool] = field(default_factory=dict)
    custom_task_checks: Mapping[str, bool] = field(default_factory=dict)
    tag_checks: Mapping[str, bool] = field(default_factory=dict)
    hours_attended: Optional[float] = None
    screensharing: Optional[bool] = None
    admin_notes: Optional[str] = None
    entry_time: Optional[datetime] = None
    exit_time: Optional[datetime] = None


@dataclass(frozen=True)
class NewCustomTask:
    label: str


@dataclass(frozen=True)
class NewCustomTag:
    name: str
    color: str = DEFAULT_TAG_COLOR


def item_to_dict(item: ChecklistItem) -> dict[str, Any]:
    out: dict[str, Any] = {
        "id": item.item_id,
        "label": item.label,
        "employee_checked": item.employee_checked,
        "admin_checked": item.admin_checked,
        "is_completed": item.is_completed,
    }
    if isinstance(item, StandardTaskEntry):
        out["category"] = item.category
        out["frequency"] = item.frequency.value
    if isinstance(item, CustomTagEntry):
        out["color"] = item.color
        out["created_by"] = item.created_by
        out["created_at"] = format_timestamp(item.created_at)
    return out


def form_to_dict(form: DailyForm) -> dict[str, Any]:
    return {
        "form_id": form.form_id,
        "employee_id": form.employee_id,
        "date": form.form_date.strftime("%Y-%m-%d"),
        "entry_time": format_timestamp(form.entry_time),
        "exit_time": format_timestamp(form.exit_time),
        "tasks": [item_to_dict(t) for t in form.tasks],
        "custom_tasks": [item_to_dict(t) for t in form.custom_tasks],
        "custom_tags": [item_to_dict(t) for t in form.custom_tags],
        "hours_attended": round(form.hours_attended, 2),
        "screensharing": form.screensharing,
        "submitted": form.submitted,
        "submitted_at": format_timestamp(form.submitted_at),
        "admin_confirmed": form.admin_confirmed,
        "admin_confirmed_at": format_timestamp(form.admin_confirmed_at),
        "admin_auto_selected": form.admin_auto_selected,
        "admin_auto_selected_at": format_timestamp(form.admin_auto_selected_at),
        "score": form.score,
        "daily_bonus": form.daily_bonus,
        "score_calculated_at": format_timestamp(form.score_calculated_at),
        "admin_notes": form.admin_notes,
        "last_edited_by": form.last_edited_by,
        "last_edited_at": format_timestamp(form.last_edited_at),
    }
