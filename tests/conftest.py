from __future__ import annotations

import threading
from dataclasses import replace
from datetime import date, datetime
from typing import Optional
from zoneinfo import ZoneInfo

import pytest

from src.performance_tracker.performance_tracker.core.enums import Role
from src.performance_tracker.performance_tracker.core.exceptions import DuplicateFormError
from src.performance_tracker.performance_tracker.dailyforms.model import DailyForm
from src.performance_tracker.performance_tracker.dailyforms.service import DailyFormService
from src.performance_tracker.performance_tracker.employees.model import Caller, Employee
from src.performance_tracker.performance_tracker.leaderboard.service import LeaderboardService

UTC = ZoneInfo("UTC")


class InMemoryDailyForms:
    """Mimics the unique (employee_id, form_date) key of the MySQL table."""

    def __init__(self):
        self._by_id: dict[int, DailyForm] = {}
        self._id = 0
        self._lock = threading.Lock()
        self.create_calls = 0

    def get_by_id(self, form_id: int) -> Optional[DailyForm]:
        return self._by_id.get(form_id)

    def get_for_employee_and_date(self, employee_id: int, form_date: date) -> Optional[DailyForm]:
        for f in self._by_id.values():
            if f.employee_id == employee_id and f.form_date == form_date:
                return f
        return None

    def create(self, form: DailyForm) -> int:
        with self._lock:
            self.create_calls += 1
            if self.get_for_employee_and_date(form.employee_id, form.form_date):
                raise DuplicateFormError("duplicate", context={"employee_id": form.employee_id})
            self._id += 1
            self._by_id[self._id] = replace(form, form_id=self._id)
            return self._id

    def save(self, form: DailyForm) -> bool:
        if form.form_id not in self._by_id:
            return False
        self._by_id[form.form_id] = form
        return True

    def list_for_employee(self, employee_id: int, *, limit: Optional[int] = None):
        items = sorted(
            (f for f in self._by_id.values() if f.employee_id == employee_id),
            key=lambda f: f.form_date,
            reverse=True,
        )
        return items[:limit] if limit is not None else items

    def list_in_range(self, *, start_date, end_date, submitted=None, admin_confirmed=None, employee_id=None):
        items = [
            f
            for f in self._by_id.values()
            if start_date <= f.form_date <= end_date
            and (submitted is None or f.submitted == submitted)
            and (admin_confirmed is None or f.admin_confirmed == admin_confirmed)
            and (employee_id is None or f.employee_id == employee_id)
        ]
        items.sort(key=lambda f: (f.form_date, f.form_id))
        return items

    def latest_form_date_before(self, before: date) -> Optional[date]:
        dates = [f.form_date for f in self._by_id.values() if f.form_date < before]
        return max(dates) if dates else None

    # test helper
    def put(self, form: DailyForm) -> DailyForm:
        self._id += 1
        stored = replace(form, form_id=self._id)
        self._by_id[self._id] = stored
        return stored


class InMemoryEmployees:
    def __init__(self, employees: list[Employee]):
        self._employees = list(employees)

    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        return next((e for e in self._employees if e.employee_id == employee_id), None)

    def list_active_employees(self):
        return [e for e in self._employees if e.is_active and e.is_employee]


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2025, 3, 10, 10, 30)


@pytest.fixture
def roster() -> list[Employee]:
    return [
        Employee(employee_id=1, name="Admin", email="admin@example.com", roles=frozenset({Role.ADMIN})),
        Employee(employee_id=2, name="Asha", email="asha@example.com"),
        Employee(employee_id=3, name="Ben", email="ben@example.com"),
        Employee(employee_id=4, name="Chen", email="chen@example.com"),
        Employee(employee_id=5, name="Dana", email="dana@example.com", is_active=False),
    ]


@pytest.fixture
def forms_repo() -> InMemoryDailyForms:
    return InMemoryDailyForms()


@pytest.fixture
def employees_repo(roster) -> InMemoryEmployees:
    return InMemoryEmployees(roster)


@pytest.fixture
def form_service(forms_repo, employees_repo) -> DailyFormService:
    return DailyFormService(forms_repo, employees_repo, tz=UTC)


@pytest.fixture
def leaderboard_service(forms_repo, employees_repo) -> LeaderboardService:
    return LeaderboardService(forms_repo, employees_repo, tz=UTC)


@pytest.fixture
def admin() -> Caller:
    return Caller(user_id=1, roles=frozenset({Role.ADMIN}))


@pytest.fixture
def employee() -> Caller:
    return Caller(user_id=2, roles=frozenset({Role.EMPLOYEE}))
