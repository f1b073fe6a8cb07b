from __future__ import annotations

from .base import ScoreCalculator
from ...dailyforms.model import ChecklistItem


class StandardScoreCalculator(ScoreCalculator):
    """Confirmed rule: an item counts only when both checkmarks agree.

    Expects a reconciled form.
    """

    def counts(self, item: ChecklistItem) -> bool:
        return item.is_completed


class ProvisionalScoreCalculator(ScoreCalculator):
    """Preview rule for unreviewed forms: either checkmark counts.

    Used for provisional leaderboards only; never persisted.
    """

    def counts(self, item: ChecklistItem) -> bool:
        return bool(item.employee_checked or item.admin_checked)
