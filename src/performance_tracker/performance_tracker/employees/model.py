from __future__ import annotations

from dataclasses import dataclass, field
from typing import FrozenSet

from ..core.enums import Role


@dataclass(frozen=True)
class Employee:
    """Roster entry owned by the external roster service.

    Note: Plain data object (no DB access code).
    """

    employee_id: int
    name: str
    email: str
    is_active: bool = True
    roles: FrozenSet[Role] = field(default_factory=lambda: frozenset({Role.EMPLOYEE}))

    @property
    def is_employee(self) -> bool:
        return Role.EMPLOYEE in self.roles


@dataclass(frozen=True)
class Caller:
    """Who is making the request, as claimed by the identity service."""

    user_id: int
    roles: FrozenSet[Role]

    @property
    def is_admin(self) -> bool:
        return Role.ADMIN in self.roles

    @property
    def is_employee(self) -> bool:
        return Role.EMPLOYEE in self.roles
