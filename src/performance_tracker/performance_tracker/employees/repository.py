from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Employee


class EmployeeRepository(Protocol):
    """Read-only view of the employee roster.

    Note (DIP): services depend on this interface, never on a concrete DB.
    """

    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        raise NotImplementedError

    def list_active_employees(self) -> Sequence[Employee]:
        """Active roster members holding the employee role, in roster order."""

        raise NotImplementedError
