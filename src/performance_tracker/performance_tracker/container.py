from __future__ import annotations

from dataclasses import dataclass
from types import ModuleType

from .common.datetime_utils import load_timezone
from .core.constants import (
    DEFAULT_DRAFT_DEBOUNCE_SECONDS,
    DEFAULT_LEADERBOARD_DAYS,
    DEFAULT_RECENT_FORMS,
    MAX_LEADERBOARD_DAYS,
)
from .dailyforms.debounce import DraftCoalescer
from .dailyforms.mysql_daily_form_repository import MySQLDailyFormRepository
from .dailyforms.repository import DailyFormRepository
from .dailyforms.service import DailyFormService
from .database.connection import DBConfig, DatabaseConnection
from .employees.mysql_employee_repository import MySQLEmployeeRepository
from .employees.repository import EmployeeRepository
from .leaderboard.factory import LeaderboardSourceFactory
from .leaderboard.service import LeaderboardService


@dataclass(frozen=True)
class Container:
    forms_repo: DailyFormRepository
    employees_repo: EmployeeRepository

    daily_form_service: DailyFormService
    leaderboard_service: LeaderboardService
    draft_coalescer: DraftCoalescer


def build_services(
    *,
    forms_repo: DailyFormRepository,
    employees_repo: EmployeeRepository,
    settings: ModuleType,
) -> Container:
    """Wire services over the given repositories (MySQL in the app, fakes in tests)."""

    tz = load_timezone(getattr(settings, "ORG_TIMEZONE", "UTC"))

    daily_form_service = DailyFormService(forms_repo, employees_repo, tz=tz)
    leaderboard_service = LeaderboardService(
        forms_repo,
        employees_repo,
        tz=tz,
        factory=LeaderboardSourceFactory(),
        default_days=int(getattr(settings, "LEADERBOARD_DEFAULT_DAYS", DEFAULT_LEADERBOARD_DAYS)),
        max_days=int(getattr(settings, "LEADERBOARD_MAX_DAYS", MAX_LEADERBOARD_DAYS)),
        recent_limit=int(getattr(settings, "SELF_STATS_RECENT_LIMIT", DEFAULT_RECENT_FORMS)),
    )
    draft_coalescer = DraftCoalescer(
        daily_form_service.save_draft,
        quiet_seconds=float(getattr(settings, "DRAFT_DEBOUNCE_SECONDS", DEFAULT_DRAFT_DEBOUNCE_SECONDS)),
    )

    return Container(
        forms_repo=forms_repo,
        employees_repo=employees_repo,
        daily_form_service=daily_form_service,
        leaderboard_service=leaderboard_service,
        draft_coalescer=draft_coalescer,
    )


def build_container(*, db_config: dict, settings: ModuleType) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_mapping(db_config))
    return build_services(
        forms_repo=MySQLDailyFormRepository(conn),
        employees_repo=MySQLEmployeeRepository(conn),
        settings=settings,
    )
