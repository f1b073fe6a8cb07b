from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Optional

from ..core.enums import SourceMode, SourceTier


@dataclass(frozen=True)
class DateRange:
    """Inclusive calendar range."""

    start: date
    end: date

    @property
    def days(self) -> int:
        return (self.end - self.start).days + 1

    def to_dict(self) -> dict:
        return {"start": self.start.isoformat(), "end": self.end.isoformat(), "days": self.days}


@dataclass(frozen=True)
class LeaderboardEntry:
    employee_id: int
    name: str
    email: str
    total_score: int = 0
    total_bonus: int = 0
    days_worked: int = 0
    average_score: float = 0.0
    approved_days: int = 0
    provisional_days: int = 0

    @property
    def has_provisional_data(self) -> bool:
        return self.provisional_days > 0

    def to_dict(self) -> dict:
        return {
            "employee": {"id": self.employee_id, "name": self.name, "email": self.email},
            "total_score": self.total_score,
            "total_bonus": self.total_bonus,
            "days_worked": self.days_worked,
            "average_score": self.average_score,
            "approved_days": self.approved_days,
            "provisional_days": self.provisional_days,
            "has_provisional_data": self.has_provisional_data,
        }


@dataclass(frozen=True)
class LeaderboardMeta:
    source_tier: SourceTier
    requested_mode: SourceMode
    requested_range: DateRange
    resolved_range: DateRange
    forms_evaluated: int
    approved_count: int
    pending_count: int

    @property
    def is_fallback(self) -> bool:
        return self.source_tier not in (SourceTier.APPROVED, SourceTier.NONE) and self.requested_mode == SourceMode.AUTO

    def to_dict(self) -> dict:
        return {
            "source_tier": self.source_tier.value,
            "requested_mode": self.requested_mode.value,
            "requested_range": self.requested_range.to_dict(),
            "resolved_range": self.resolved_range.to_dict(),
            "forms_evaluated": self.forms_evaluated,
            "approved_count": self.approved_count,
            "pending_count": self.pending_count,
            "is_fallback": self.is_fallback,
        }


@dataclass(frozen=True)
class LeaderboardResult:
    entries: list[LeaderboardEntry]
    meta: LeaderboardMeta

    def to_dict(self) -> dict:
        return {"leaderboard": [e.to_dict() for e in self.entries], "meta": self.meta.to_dict()}


@dataclass(frozen=True)
class RecentForm:
    form_date: date
    score: int
    bonus: int


@dataclass(frozen=True)
class SelfStats:
    total_score: int
    total_bonus: int
    days_worked: int
    average_score: float
    pending_approval_count: int
    recent_forms: list[RecentForm] = field(default_factory=list)
    date_range: Optional[DateRange] = None

    def to_dict(self) -> dict:
        return {
            "stats": {
                "total_score": self.total_score,
                "total_bonus": self.total_bonus,
                "days_worked": self.days_worked,
                "average_score": self.average_score,
                "pending_approval_count": self.pending_approval_count,
                "recent_forms": [
                    {"date": f.form_date.isoformat(), "score": f.score, "bonus": f.bonus} for f in self.recent_forms
                ],
            },
            "meta": {
                "type": "all" if self.date_range is None else "rolling",
                "date_range": self.date_range.to_dict() if self.date_range else None,
            },
        }
