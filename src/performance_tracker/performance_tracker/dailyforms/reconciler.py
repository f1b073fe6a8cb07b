"""Derived state of a daily form.

Both functions are pure: they return new objects and never touch storage.
Every path that serves or persists a form goes through ``normalize_form``.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Sequence, Tuple, TypeVar

from .model import ChecklistItem, DailyForm

T = TypeVar("T", bound=ChecklistItem)


def reconcile(entries: Sequence[T]) -> Tuple[T, ...]:
    """Recompute ``is_completed = employee_checked and admin_checked``."""

    out = []
    for entry in entries:
        completed = bool(entry.employee_checked and entry.admin_checked)
        out.append(entry if entry.is_completed == completed else replace(entry, is_completed=completed))
    return tuple(out)


def derived_hours(form: DailyForm) -> float:
    """Hours between entry and exit, clamped at zero; manual value otherwise."""

    if form.entry_time and form.exit_time:
        return max(0.0, (form.exit_time - form.entry_time).total_seconds() / 3600)
    return max(0.0, float(form.hours_attended or 0))


def normalize_form(form: DailyForm) -> DailyForm:
    return replace(
        form,
        tasks=reconcile(form.tasks),
        custom_tasks=reconcile(form.custom_tasks),
        custom_tags=reconcile(form.custom_tags),
        hours_attended=derived_hours(form),
    )
