from __future__ import annotations

from typing import Optional

from flask import Flask, jsonify, request

from ..common.datetime_utils import parse_iso_date
from ..common.web import employee_required, fail, login_required
from ..core.enums import SourceMode
from ..core.exceptions import ValidationError
from ..container import Container


def _days_arg(name: str = "days") -> Optional[int]:
    raw = request.args.get(name)
    if raw is None or raw == "":
        return None
    try:
        return int(raw)
    except ValueError:
        raise ValidationError(f"{name} must be an integer", context={"value": raw})


def _mode_arg() -> SourceMode:
    raw = (request.args.get("view") or SourceMode.AUTO.value).strip().lower()
    try:
        return SourceMode(raw)
    except ValueError:
        raise ValidationError(
            "view must be one of: approved, submitted, auto",
            context={"value": raw},
        )


def register(app: Flask, container: Container) -> None:
    service = container.leaderboard_service

    @app.route("/api/daily-forms/leaderboard", methods=["GET"], endpoint="daily_forms_leaderboard")
    @login_required
    def leaderboard(caller):
        try:
            raw_date = request.args.get("date")
            result = service.get_leaderboard(
                on_date=parse_iso_date(raw_date) if raw_date else None,
                days=_days_arg(),
                mode=_mode_arg(),
            )
            return jsonify({"success": True, **result.to_dict()})
        except Exception as e:
            return fail(e)

    @app.route("/api/daily-forms/my-stats", methods=["GET"], endpoint="daily_forms_my_stats")
    @employee_required
    def my_stats(caller):
        try:
            period = (request.args.get("period") or "").strip().lower()
            stats = service.get_self_stats(
                caller.user_id,
                days=_days_arg(),
                all_time=period == "all",
            )
            return jsonify({"success": True, **stats.to_dict()})
        except Exception as e:
            return fail(e)
