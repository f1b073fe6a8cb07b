from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Employee
from .repository import EmployeeRepository


def _parse_roles(value) -> frozenset[Role]:
    # SET columns come back as a python set or as a comma separated string
    # depending on the connector implementation.
    if isinstance(value, (set, frozenset, list, tuple)):
        value = ",".join(str(v) for v in value)

    roles = set()
    for raw in str(value or "").split(","):
        raw = raw.strip().lower()
        if raw in {r.value for r in Role}:
            roles.add(Role(raw))
    return frozenset(roles)


def _row_to_employee(row: dict) -> Employee:
    return Employee(
        employee_id=int(row["employee_id"]),
        name=row.get("name") or "Unnamed Employee",
        email=row.get("email") or "",
        is_active=bool(row.get("is_active", True)),
        roles=_parse_roles(row.get("roles")),
    )


class MySQLEmployeeRepository(EmployeeRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT employee_id, name, email, is_active, roles
                FROM employees
                WHERE employee_id=%s
                """,
                (int(employee_id),),
            )
            row = fetchone(cur)
            return _row_to_employee(row) if row else None

    def list_active_employees(self) -> Sequence[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT employee_id, name, email, is_active, roles
                FROM employees
                WHERE is_active=1 AND FIND_IN_SET('employee', roles) > 0
                ORDER BY employee_id ASC
                """
            )
            return [_row_to_employee(r) for r in fetchall(cur)]
