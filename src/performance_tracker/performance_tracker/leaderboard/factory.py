from __future__ import annotations

from dataclasses import dataclass
from typing import List

from ..core.enums import SourceMode
from .sources.approved import ApprovedSource
from .sources.base import FormSource
from .sources.historical import HistoricalSource
from .sources.submitted import SubmittedSource


@dataclass
class LeaderboardSourceFactory:
    """Factory Pattern: the ordered fallback chain for a requested mode."""

    def for_mode(self, mode: SourceMode) -> List[FormSource]:
        if mode == SourceMode.APPROVED:
            return [ApprovedSource()]
        if mode == SourceMode.SUBMITTED:
            return [SubmittedSource()]
        return [ApprovedSource(), SubmittedSource(), HistoricalSource()]
