from __future__ import annotations

import json
import logging
from datetime import date, datetime
from typing import Any, Optional, Sequence

import mysql.connector

from ..common.datetime_utils import format_timestamp
from ..core.constants import DEFAULT_TAG_COLOR
from ..core.enums import TaskFrequency
from ..core.exceptions import DuplicateFormError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, is_duplicate_key, load_json_list
from .model import CustomTagEntry, CustomTaskEntry, DailyForm, StandardTaskEntry
from .reconciler import normalize_form
from .repository import DailyFormRepository

LOGGER = logging.getLogger(__name__)

_COLUMNS = """
    form_id, employee_id, form_date, entry_time, exit_time,
    tasks, custom_tasks, custom_tags,
    hours_attended, screensharing,
    submitted, submitted_at, admin_confirmed, admin_confirmed_at,
    admin_auto_selected, admin_auto_selected_at,
    score, daily_bonus, score_calculated_at,
    admin_notes, last_edited_by, last_edited_at
"""


def _parse_ts(value: Any) -> Optional[datetime]:
    return datetime.fromisoformat(value) if value else None


def _tasks_json(form: DailyForm) -> str:
    return json.dumps(
        [
            {
                "id": t.item_id,
                "label": t.label,
                "category": t.category,
                "frequency": t.frequency.value,
                "employee_checked": t.employee_checked,
                "admin_checked": t.admin_checked,
            }
            for t in form.tasks
        ]
    )


def _custom_tasks_json(form: DailyForm) -> str:
    return json.dumps(
        [
            {
                "id": t.item_id,
                "label": t.label,
                "employee_checked": t.employee_checked,
                "admin_checked": t.admin_checked,
            }
            for t in form.custom_tasks
        ]
    )


def _custom_tags_json(form: DailyForm) -> str:
    return json.dumps(
        [
            {
                "id": t.item_id,
                "label": t.label,
                "color": t.color,
                "created_by": t.created_by,
                "created_at": format_timestamp(t.created_at),
                "employee_checked": t.employee_checked,
                "admin_checked": t.admin_checked,
            }
            for t in form.custom_tags
        ]
    )


def _row_to_form(r: dict) -> DailyForm:
    # is_completed is not persisted; normalize_form derives it.
    tasks = tuple(
        StandardTaskEntry(
            item_id=str(t["id"]),
            label=t.get("label") or "",
            category=t.get("category"),
            frequency=TaskFrequency(t.get("frequency") or TaskFrequency.DAILY.value),
            employee_checked=bool(t.get("employee_checked")),
            admin_checked=bool(t.get("admin_checked")),
        )
        for t in load_json_list(r.get("tasks"))
    )
    custom_tasks = tuple(
        CustomTaskEntry(
            item_id=str(t["id"]),
            label=t.get("label") or "",
            employee_checked=bool(t.get("employee_checked")),
            admin_checked=bool(t.get("admin_checked")),
        )
        for t in load_json_list(r.get("custom_tasks"))
    )
    custom_tags = tuple(
        CustomTagEntry(
            item_id=str(t["id"]),
            label=t.get("label") or "",
            color=t.get("color") or DEFAULT_TAG_COLOR,
            created_by=t.get("created_by"),
            created_at=_parse_ts(t.get("created_at")),
            employee_checked=bool(t.get("employee_checked")),
            admin_checked=bool(t.get("admin_checked")),
        )
        for t in load_json_list(r.get("custom_tags"))
    )

    return normalize_form(
        DailyForm(
            form_id=int(r["form_id"]),
            employee_id=int(r["employee_id"]),
            form_date=r["form_date"],
            tasks=tasks,
            custom_tasks=custom_tasks,
            custom_tags=custom_tags,
            entry_time=r.get("entry_time"),
            exit_time=r.get("exit_time"),
            hours_attended=float(r.get("hours_attended") or 0),
            screensharing=bool(r.get("screensharing")),
            submitted=bool(r.get("submitted")),
            submitted_at=r.get("submitted_at"),
            admin_confirmed=bool(r.get("admin_confirmed")),
            admin_confirmed_at=r.get("admin_confirmed_at"),
            admin_auto_selected=bool(r.get("admin_auto_selected")),
            admin_auto_selected_at=r.get("admin_auto_selected_at"),
            score=int(r.get("score") or 0),
            daily_bonus=int(r.get("daily_bonus") or 0),
            score_calculated_at=r.get("score_calculated_at"),
            admin_notes=r.get("admin_notes") or "",
            last_edited_by=r.get("last_edited_by"),
            last_edited_at=r.get("last_edited_at"),
        )
    )


def _mutable_values(form: DailyForm) -> tuple:
    return (
        form.entry_time,
        form.exit_time,
        _tasks_json(form),
        _custom_tasks_json(form),
        _custom_tags_json(form),
        float(form.hours_attended),
        int(form.screensharing),
        int(form.submitted),
        form.submitted_at,
        int(form.admin_confirmed),
        form.admin_confirmed_at,
        int(form.admin_auto_selected),
        form.admin_auto_selected_at,
        int(form.score),
        int(form.daily_bonus),
        form.score_calculated_at,
        form.admin_notes,
        form.last_edited_by,
        form.last_edited_at,
    )


class MySQLDailyFormRepository(DailyFormRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, form_id: int) -> Optional[DailyForm]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM daily_forms WHERE form_id=%s", (int(form_id),))
            r = fetchone(cur)
            return _row_to_form(r) if r else None

    def get_for_employee_and_date(self, employee_id: int, form_date: date) -> Optional[DailyForm]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM daily_forms WHERE employee_id=%s AND form_date=%s",
                (int(employee_id), form_date),
            )
            r = fetchone(cur)
            return _row_to_form(r) if r else None

    def create(self, form: DailyForm) -> int:
        form = normalize_form(form)
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO daily_forms(
                        employee_id, form_date, entry_time, exit_time,
                        tasks, custom_tasks, custom_tags,
                        hours_attended, screensharing,
                        submitted, submitted_at, admin_confirmed, admin_confirmed_at,
                        admin_auto_selected, admin_auto_selected_at,
                        score, daily_bonus, score_calculated_at,
                        admin_notes, last_edited_by, last_edited_at
                    )
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (int(form.employee_id), form.form_date, *_mutable_values(form)),
                )
                return int(cur.lastrowid)
        except mysql.connector.IntegrityError as e:
            if is_duplicate_key(e):
                raise DuplicateFormError(
                    "A daily form already exists for this date",
                    context={"employee_id": form.employee_id, "date": form.form_date.isoformat()},
                ) from e
            raise

    def save(self, form: DailyForm) -> bool:
        form = normalize_form(form)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE daily_forms
                SET entry_time=%s, exit_time=%s,
                    tasks=%s, custom_tasks=%s, custom_tags=%s,
                    hours_attended=%s, screensharing=%s,
                    submitted=%s, submitted_at=%s, admin_confirmed=%s, admin_confirmed_at=%s,
                    admin_auto_selected=%s, admin_auto_selected_at=%s,
                    score=%s, daily_bonus=%s, score_calculated_at=%s,
                    admin_notes=%s, last_edited_by=%s, last_edited_at=%s
                WHERE form_id=%s
                """,
                (*_mutable_values(form), int(form.form_id)),
            )
            # MySQL reports 0 affected rows when nothing changed; fall back to existence.
            if cur.rowcount > 0:
                return True
            cur.execute("SELECT 1 AS found FROM daily_forms WHERE form_id=%s", (int(form.form_id),))
            return fetchone(cur) is not None

    def list_for_employee(self, employee_id: int, *, limit: Optional[int] = None) -> Sequence[DailyForm]:
        sql = f"SELECT {_COLUMNS} FROM daily_forms WHERE employee_id=%s ORDER BY form_date DESC"
        params: list[object] = [int(employee_id)]
        if limit is not None:
            sql += " LIMIT %s"
            params.append(int(limit))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            return [_row_to_form(r) for r in fetchall(cur)]

    def list_in_range(
        self,
        *,
        start_date: date,
        end_date: date,
        submitted: Optional[bool] = None,
        admin_confirmed: Optional[bool] = None,
        employee_id: Optional[int] = None,
    ) -> Sequence[DailyForm]:
        clauses = ["form_date BETWEEN %s AND %s"]
        params: list[object] = [start_date, end_date]

        if submitted is not None:
            clauses.append("submitted=%s")
            params.append(int(submitted))
        if admin_confirmed is not None:
            clauses.append("admin_confirmed=%s")
            params.append(int(admin_confirmed))
        if employee_id is not None:
            clauses.append("employee_id=%s")
            params.append(int(employee_id))

        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM daily_forms WHERE {where} ORDER BY form_date ASC, form_id ASC",
                tuple(params),
            )
            rows = fetchall(cur)
            LOGGER.debug("daily_forms range %s..%s matched %d rows", start_date, end_date, len(rows))
            return [_row_to_form(r) for r in rows]

    def latest_form_date_before(self, before: date) -> Optional[date]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT MAX(form_date) AS latest FROM daily_forms WHERE form_date < %s", (before,))
            r = fetchone(cur)
            return r["latest"] if r and r.get("latest") else None
