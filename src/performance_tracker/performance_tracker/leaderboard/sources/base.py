from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Sequence

from ...core.enums import SourceTier
from ...dailyforms.model import DailyForm
from ...dailyforms.repository import DailyFormRepository
from ..model import DateRange


@dataclass(frozen=True)
class SourceResult:
    tier: SourceTier
    forms: Sequence[DailyForm]
    window: DateRange

    @property
    def is_empty(self) -> bool:
        return not self.forms


class FormSource(ABC):
    """Strategy Pattern: one way of picking the forms a leaderboard ranks."""

    tier: SourceTier

    @abstractmethod
    def fetch(self, forms: DailyFormRepository, window: DateRange) -> SourceResult:
        raise NotImplementedError
