from __future__ import annotations

from ...core.enums import SourceTier
from ...dailyforms.repository import DailyFormRepository
from ..model import DateRange
from .base import FormSource, SourceResult


class ApprovedSource(FormSource):
    """Admin-confirmed forms only."""

    tier = SourceTier.APPROVED

    def fetch(self, forms: DailyFormRepository, window: DateRange) -> SourceResult:
        rows = forms.list_in_range(start_date=window.start, end_date=window.end, submitted=True, admin_confirmed=True)
        return SourceResult(tier=self.tier, forms=rows, window=window)
