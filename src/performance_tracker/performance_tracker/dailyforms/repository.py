from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import DailyForm


class DailyFormRepository(Protocol):
    def get_by_id(self, form_id: int) -> Optional[DailyForm]:
        raise NotImplementedError

    def get_for_employee_and_date(self, employee_id: int, form_date: date) -> Optional[DailyForm]:
        raise NotImplementedError

    def create(self, form: DailyForm) -> int:
        """Insert a new form and return its id.

        Raises DuplicateFormError when (employee_id, form_date) already exists.
        """

        raise NotImplementedError

    def save(self, form: DailyForm) -> bool:
        """Overwrite every mutable field of an existing form (last write wins)."""

        raise NotImplementedError

    def list_for_employee(self, employee_id: int, *, limit: Optional[int] = None) -> Sequence[DailyForm]:
        """Newest first."""

        raise NotImplementedError

    def list_in_range(
        self,
        *,
        start_date: date,
        end_date: date,
        submitted: Optional[bool] = None,
        admin_confirmed: Optional[bool] = None,
        employee_id: Optional[int] = None,
    ) -> Sequence[DailyForm]:
        """Forms dated within [start_date, end_date], oldest first."""

        raise NotImplementedError

    def latest_form_date_before(self, before: date) -> Optional[date]:
        raise NotImplementedError
