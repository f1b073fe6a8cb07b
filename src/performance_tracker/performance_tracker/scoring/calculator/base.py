from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

from ...core.constants import BONUS_PER_POINT, HOURS_BONUS_TIERS, MAX_DAILY_BONUS, SCREENSHARING_POINTS
from ...dailyforms.model import ChecklistItem, DailyForm


@dataclass(frozen=True)
class ScoreResult:
    score: int
    daily_bonus: int


def hours_points(hours_attended: float) -> int:
    """Tiered hours bonus; the highest threshold reached wins."""

    for min_hours, points in HOURS_BONUS_TIERS:
        if hours_attended >= min_hours:
            return points
    return 0


def bonus_for(score: int) -> int:
    return min(int(score) * BONUS_PER_POINT, MAX_DAILY_BONUS)


class ScoreCalculator(ABC):
    """Calculator interface (Strategy Pattern for scoring).

    Subclasses only decide what counts as a completed item; the point rules
    are shared.
    """

    @abstractmethod
    def counts(self, item: ChecklistItem) -> bool:
        raise NotImplementedError

    def calculate(self, form: DailyForm) -> ScoreResult:
        # Custom tags are labels, not work items: they never score.
        score = sum(1 for t in form.tasks if self.counts(t))
        score += sum(1 for t in form.custom_tasks if self.counts(t))
        if form.screensharing:
            score += SCREENSHARING_POINTS
        score += hours_points(form.hours_attended)
        return ScoreResult(score=score, daily_bonus=bonus_for(score))
