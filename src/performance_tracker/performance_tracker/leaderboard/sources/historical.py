from __future__ import annotations

from datetime import timedelta

from ...core.enums import SourceTier
from ...dailyforms.repository import DailyFormRepository
from ..model import DateRange
from .base import FormSource, SourceResult


class HistoricalSource(FormSource):
    """The most recent earlier window of the same length that has any forms.

    The window ends on the latest form date before the requested start.
    """

    tier = SourceTier.HISTORICAL

    def fetch(self, forms: DailyFormRepository, window: DateRange) -> SourceResult:
        latest = forms.latest_form_date_before(window.start)
        if latest is None:
            return SourceResult(tier=self.tier, forms=[], window=window)

        prior = DateRange(start=latest - timedelta(days=window.days - 1), end=latest)
        rows = forms.list_in_range(start_date=prior.start, end_date=prior.end)
        return SourceResult(tier=self.tier, forms=rows, window=prior)
