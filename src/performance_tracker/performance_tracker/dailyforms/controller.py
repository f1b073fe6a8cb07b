from __future__ import annotations

import logging
from datetime import date
from typing import Any, Dict, List, Optional

from flask import Flask, jsonify

from ..common.datetime_utils import parse_iso_date, parse_iso_datetime
from ..common.validators import require_bool, require_non_negative_number, require_positive_int
from ..common.web import admin_required, employee_required, fail, json_body, login_required
from ..core.constants import DEFAULT_TAG_COLOR
from ..core.exceptions import ValidationError
from ..container import Container
from .model import AdminEdits, EmployeeEdits, NewCustomTag, NewCustomTask, form_to_dict, item_to_dict

LOGGER = logging.getLogger(__name__)

PREFIX = "/api/daily-forms"


def _parse_checks(data: dict, key: str) -> Dict[str, bool]:
    """``[{"id": "...", "checked": true}, ...]`` -> ``{"...": True}``."""

    items = data.get(key)
    if items is None:
        return {}
    if not isinstance(items, list):
        raise ValidationError(f"{key} must be a list", context={"field": key})

    checks: Dict[str, bool] = {}
    for item in items:
        if not isinstance(item, dict) or not item.get("id"):
            raise ValidationError(f"Each entry of {key} needs an id", context={"field": key})
        checks[str(item["id"])] = require_bool(item.get("checked"), f"{key}.checked")
    return checks


def _optional_hours(data: dict) -> Optional[float]:
    if data.get("hours_attended") is None:
        return None
    return require_non_negative_number(data["hours_attended"], "hours_attended")


def _optional_bool(data: dict, key: str) -> Optional[bool]:
    if data.get(key) is None:
        return None
    return require_bool(data[key], key)


def _optional_time(data: dict, key: str, on_date: date):
    if not data.get(key):
        return None
    return parse_iso_datetime(str(data[key]), on_date=on_date)


def _employee_edits(data: dict) -> EmployeeEdits:
    return EmployeeEdits(
        task_checks=_parse_checks(data, "tasks"),
        custom_task_checks=_parse_checks(data, "custom_tasks"),
        tag_checks=_parse_checks(data, "custom_tags"),
        hours_attended=_optional_hours(data),
        screensharing=_optional_bool(data, "screensharing"),
    )


def _admin_edits(data: dict, form_date: date) -> AdminEdits:
    notes = data.get("admin_notes")
    return AdminEdits(
        task_checks=_parse_checks(data, "tasks"),
        custom_task_checks=_parse_checks(data, "custom_tasks"),
        tag_checks=_parse_checks(data, "custom_tags"),
        hours_attended=_optional_hours(data),
        screensharing=_optional_bool(data, "screensharing"),
        admin_notes=str(notes) if notes is not None else None,
        entry_time=_optional_time(data, "entry_time", form_date),
        exit_time=_optional_time(data, "exit_time", form_date),
    )


def _new_custom_tasks(data: dict) -> List[NewCustomTask]:
    out = []
    for item in data.get("custom_tasks") or []:
        label = item.get("label") if isinstance(item, dict) else item
        out.append(NewCustomTask(label=str(label or "")))
    return out


def _new_custom_tags(data: dict) -> List[NewCustomTag]:
    out = []
    for item in data.get("custom_tags") or []:
        if not isinstance(item, dict):
            raise ValidationError("Each custom tag must be an object with a name", context={"field": "custom_tags"})
        out.append(NewCustomTag(name=str(item.get("name") or ""), color=str(item.get("color") or DEFAULT_TAG_COLOR)))
    return out


def _ok(payload: Optional[Dict[str, Any]] = None, status: int = 200):
    body: Dict[str, Any] = {"success": True}
    body.update(payload or {})
    return jsonify(body), status


def register(app: Flask, container: Container) -> None:
    service = container.daily_form_service
    drafts = container.draft_coalescer

    @app.before_request
    def flush_due_drafts():
        try:
            flushed = drafts.flush_due()
        except Exception:
            # Edits stay staged and are retried on the next request.
            LOGGER.exception("flushing due drafts failed")
            return None
        if flushed:
            LOGGER.debug("flushed drafts of employees %s", flushed)
        return None

    # ------------------------------------------------------------------
    # employee
    # ------------------------------------------------------------------
    @app.route(f"{PREFIX}/today", methods=["GET"], endpoint="daily_form_today")
    @employee_required
    def today(caller):
        try:
            drafts.flush(caller.user_id)
            view = service.today_view(caller.user_id)
            return _ok(
                {
                    "form": form_to_dict(view.form),
                    "state": view.decision.state.value,
                    "editable": view.decision.allowed,
                    "reason": view.decision.reason,
                    "time_remaining": view.window.to_dict(),
                }
            )
        except Exception as e:
            return fail(e)

    @app.route(f"{PREFIX}/today", methods=["PATCH"], endpoint="daily_form_save_draft")
    @employee_required
    def save_draft(caller):
        try:
            edits = _employee_edits(json_body())
            view = service.today_view(caller.user_id)
            if not view.decision.allowed:
                return _ok(
                    {
                        "accepted": False,
                        "state": view.decision.state.value,
                        "reason": view.decision.reason,
                    }
                )
            # Staged edits may only name items on this form.
            service.check_employee_edits(view.form, edits)
            drafts.stage(caller.user_id, view.form.form_id, edits)
            return _ok({"accepted": True, "state": view.decision.state.value}, 202)
        except Exception as e:
            return fail(e)

    @app.route(f"{PREFIX}/can-submit", methods=["GET"], endpoint="daily_form_can_submit")
    @employee_required
    def can_submit(caller):
        try:
            return _ok({"can_submit": service.can_submit_today(caller.user_id)})
        except Exception as e:
            return fail(e)

    @app.route(f"{PREFIX}/submit", methods=["POST"], endpoint="daily_form_submit")
    @employee_required
    def submit(caller):
        try:
            data = json_body()
            edits = _employee_edits(data) if data else None
            drafts.flush(caller.user_id)
            form = service.submit_today_form(caller.user_id, edits)
            return _ok({"message": "Daily form submitted", "form": form_to_dict(form)})
        except Exception as e:
            return fail(e)

    # ------------------------------------------------------------------
    # owner or admin
    # ------------------------------------------------------------------
    @app.route(f"{PREFIX}/time-tracking/<int:form_id>", methods=["PUT"], endpoint="daily_form_time_tracking")
    @login_required
    def time_tracking(caller, form_id: int):
        try:
            data = json_body()
            # Bare HH:MM values are taken on the form's own date.
            form_date = service.get_form(form_id).form_date
            form = service.update_time_tracking(
                form_id,
                caller,
                entry_time=_optional_time(data, "entry_time", form_date),
                exit_time=_optional_time(data, "exit_time", form_date),
            )
            return _ok({"form": form_to_dict(form)})
        except Exception as e:
            return fail(e)

    @app.route(f"{PREFIX}/custom-tag/<int:form_id>", methods=["POST"], endpoint="daily_form_add_tag")
    @login_required
    def add_tag(caller, form_id: int):
        try:
            data = json_body()
            form, tag = service.add_custom_tag(
                form_id,
                caller,
                name=str(data.get("name") or ""),
                color=data.get("color"),
            )
            return _ok({"tag": item_to_dict(tag), "form": form_to_dict(form)}, 201)
        except Exception as e:
            return fail(e)

    @app.route(f"{PREFIX}/custom-tag/<int:form_id>/<tag_id>", methods=["DELETE"], endpoint="daily_form_delete_tag")
    @login_required
    def delete_tag(caller, form_id: int, tag_id: str):
        try:
            form = service.delete_custom_tag(form_id, caller, tag_id)
            return _ok({"form": form_to_dict(form)})
        except Exception as e:
            return fail(e)

    # ------------------------------------------------------------------
    # admin
    # ------------------------------------------------------------------
    @app.route(f"{PREFIX}/employee/<int:employee_id>", methods=["GET"], endpoint="daily_forms_of_employee")
    @admin_required
    def forms_of_employee(caller, employee_id: int):
        try:
            forms = service.list_forms_for_employee(employee_id)
            return _ok({"forms": [form_to_dict(f) for f in forms]})
        except Exception as e:
            return fail(e)

    @app.route(f"{PREFIX}/<int:form_id>", methods=["GET"], endpoint="daily_form_get")
    @admin_required
    def get_form(caller, form_id: int):
        try:
            return _ok({"form": form_to_dict(service.get_form(form_id))})
        except Exception as e:
            return fail(e)

    @app.route(f"{PREFIX}/<int:form_id>", methods=["PUT"], endpoint="daily_form_update")
    @admin_required
    def update_form(caller, form_id: int):
        try:
            data = json_body()
            edits = _admin_edits(data, service.get_form(form_id).form_date)
            form = service.update_form(form_id, caller.user_id, edits)
            return _ok({"form": form_to_dict(form)})
        except Exception as e:
            return fail(e)

    @app.route(f"{PREFIX}/<int:form_id>/confirm", methods=["POST"], endpoint="daily_form_confirm")
    @admin_required
    def confirm_form(caller, form_id: int):
        try:
            data = json_body()
            edits = _admin_edits(data, service.get_form(form_id).form_date) if data else None
            form = service.confirm_form(form_id, caller.user_id, edits)
            return _ok(
                {
                    "message": "Daily form confirmed",
                    "form": form_to_dict(form),
                    "score": form.score,
                    "daily_bonus": form.daily_bonus,
                }
            )
        except Exception as e:
            return fail(e)

    @app.route(f"{PREFIX}/admin/auto-select/<int:form_id>", methods=["POST"], endpoint="daily_form_auto_select")
    @admin_required
    def auto_select(caller, form_id: int):
        try:
            form = service.auto_select(form_id, caller.user_id)
            return _ok({"form": form_to_dict(form)})
        except Exception as e:
            return fail(e)

    @app.route(f"{PREFIX}/custom/<int:employee_id>", methods=["POST"], endpoint="daily_form_custom_items")
    @admin_required
    def custom_items(caller, employee_id: int):
        try:
            data = json_body()
            form = service.create_or_merge_custom_for_employee(
                employee_id,
                parse_iso_date(str(data.get("date") or "")),
                admin_id=caller.user_id,
                custom_tasks=_new_custom_tasks(data),
                custom_tags=_new_custom_tags(data),
            )
            return _ok({"form": form_to_dict(form)})
        except Exception as e:
            return fail(e)

    @app.route(f"{PREFIX}/admin/create-for-employee", methods=["POST"], endpoint="daily_form_create_for_employee")
    @admin_required
    def create_for_employee(caller):
        try:
            data = json_body()
            form_date = parse_iso_date(str(data.get("date") or ""))
            form = service.create_form_for_employee(
                admin_id=caller.user_id,
                employee_id=require_positive_int(data.get("employee_id"), "employee_id"),
                form_date=form_date,
                entry_time=_optional_time(data, "entry_time", form_date),
                exit_time=_optional_time(data, "exit_time", form_date),
                admin_notes=str(data.get("admin_notes") or ""),
                custom_tasks=_new_custom_tasks(data),
                custom_tags=_new_custom_tags(data),
            )
            return _ok({"message": "Daily form created", "form": form_to_dict(form)}, 201)
        except Exception as e:
            return fail(e)

    @app.route(f"{PREFIX}/admin/default-template", methods=["GET"], endpoint="daily_form_default_template")
    @admin_required
    def default_template(caller):
        return _ok({"template": service.default_template()})
