from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, tzinfo
from typing import Dict, Optional

from ..common.datetime_utils import now_local, window_ending
from ..core.constants import DEFAULT_LEADERBOARD_DAYS, DEFAULT_RECENT_FORMS, MAX_LEADERBOARD_DAYS
from ..core.enums import SourceMode, SourceTier
from ..core.exceptions import ValidationError
from ..dailyforms.model import DailyForm
from ..dailyforms.reconciler import normalize_form
from ..dailyforms.repository import DailyFormRepository
from ..employees.repository import EmployeeRepository
from ..scoring.calculator.base import ScoreCalculator, ScoreResult
from ..scoring.calculator.standard_calculator import ProvisionalScoreCalculator
from .factory import LeaderboardSourceFactory
from .model import DateRange, LeaderboardEntry, LeaderboardMeta, LeaderboardResult, RecentForm, SelfStats
from .sources.base import SourceResult

LOGGER = logging.getLogger(__name__)


@dataclass
class _Totals:
    employee_id: int
    name: str
    email: str
    total_score: int = 0
    total_bonus: int = 0
    days_worked: int = 0
    approved_days: int = 0
    provisional_days: int = 0

    def to_entry(self) -> LeaderboardEntry:
        return LeaderboardEntry(
            employee_id=self.employee_id,
            name=self.name,
            email=self.email,
            total_score=self.total_score,
            total_bonus=self.total_bonus,
            days_worked=self.days_worked,
            average_score=_average(self.total_score, self.days_worked),
            approved_days=self.approved_days,
            provisional_days=self.provisional_days,
        )


def _average(total: int, days: int) -> float:
    return round(total / days, 2) if days > 0 else 0.0


class LeaderboardService:
    def __init__(
        self,
        forms: DailyFormRepository,
        employees: EmployeeRepository,
        *,
        tz: tzinfo,
        factory: Optional[LeaderboardSourceFactory] = None,
        provisional_calculator: Optional[ScoreCalculator] = None,
        default_days: int = DEFAULT_LEADERBOARD_DAYS,
        max_days: int = MAX_LEADERBOARD_DAYS,
        recent_limit: int = DEFAULT_RECENT_FORMS,
    ):
        self._forms = forms
        self._employees = employees
        self._tz = tz
        self._factory = factory or LeaderboardSourceFactory()
        self._provisional = provisional_calculator or ProvisionalScoreCalculator()
        self._default_days = int(default_days)
        self._max_days = int(max_days)
        self._recent_limit = int(recent_limit)

    def _today(self, now: Optional[datetime]) -> date:
        return (now or now_local(self._tz)).date()

    def _check_days(self, days: int) -> int:
        if isinstance(days, bool) or not isinstance(days, int):
            raise ValidationError("days must be an integer", context={"days": days})
        if days < 1 or days > self._max_days:
            raise ValidationError(
                f"days must be between 1 and {self._max_days}",
                context={"days": days},
            )
        return days

    def resolve_range(self, *, on_date: Optional[date] = None, days: Optional[int] = None, today: date) -> DateRange:
        if on_date is not None and days is not None:
            raise ValidationError("Pass either date or days, not both")
        if on_date is not None:
            return DateRange(start=on_date, end=on_date)

        start, end = window_ending(today, self._check_days(self._default_days if days is None else days))
        return DateRange(start=start, end=end)

    def _form_score(self, form: DailyForm) -> ScoreResult:
        if form.admin_confirmed:
            return ScoreResult(score=int(form.score), daily_bonus=int(form.daily_bonus))
        return self._provisional.calculate(normalize_form(form))

    def get_leaderboard(
        self,
        *,
        on_date: Optional[date] = None,
        days: Optional[int] = None,
        mode: SourceMode = SourceMode.AUTO,
        now: Optional[datetime] = None,
    ) -> LeaderboardResult:
        requested = self.resolve_range(on_date=on_date, days=days, today=self._today(now))

        result: Optional[SourceResult] = None
        for source in self._factory.for_mode(mode):
            result = source.fetch(self._forms, requested)
            if not result.is_empty:
                break
            LOGGER.debug("leaderboard source %s empty for %s..%s", source.tier.value, requested.start, requested.end)

        if result is None or result.is_empty:
            tier = SourceTier.NONE if mode == SourceMode.AUTO else (result.tier if result else SourceTier.NONE)
            result = SourceResult(tier=tier, forms=[], window=requested)
        elif mode == SourceMode.AUTO and result.tier != SourceTier.APPROVED:
            LOGGER.info(
                "leaderboard fell back to %s data (%d forms, %s..%s)",
                result.tier.value,
                len(result.forms),
                result.window.start,
                result.window.end,
            )

        # Zero-filled from the roster so inactive days still rank.
        totals: Dict[int, _Totals] = {
            e.employee_id: _Totals(employee_id=e.employee_id, name=e.name, email=e.email)
            for e in self._employees.list_active_employees()
        }

        approved_count = 0
        pending_count = 0
        for form in result.forms:
            if form.admin_confirmed:
                approved_count += 1
            else:
                pending_count += 1

            acc = totals.get(form.employee_id)
            if acc is None:
                LOGGER.debug("form %s belongs to employee=%s outside the active roster", form.form_id, form.employee_id)
                continue

            scored = self._form_score(form)
            acc.total_score += scored.score
            acc.total_bonus += scored.daily_bonus
            acc.days_worked += 1
            if form.admin_confirmed:
                acc.approved_days += 1
            else:
                acc.provisional_days += 1

        # sorted() is stable, so equal bonuses keep roster order.
        entries = sorted((t.to_entry() for t in totals.values()), key=lambda e: e.total_bonus, reverse=True)

        return LeaderboardResult(
            entries=entries,
            meta=LeaderboardMeta(
                source_tier=result.tier,
                requested_mode=mode,
                requested_range=requested,
                resolved_range=result.window,
                forms_evaluated=len(result.forms),
                approved_count=approved_count,
                pending_count=pending_count,
            ),
        )

    def get_self_stats(
        self,
        employee_id: int,
        *,
        days: Optional[int] = None,
        all_time: bool = False,
        now: Optional[datetime] = None,
    ) -> SelfStats:
        date_range: Optional[DateRange] = None
        if all_time:
            forms = list(self._forms.list_for_employee(int(employee_id)))
        else:
            date_range = self.resolve_range(days=days, today=self._today(now))
            forms = list(
                self._forms.list_in_range(
                    start_date=date_range.start,
                    end_date=date_range.end,
                    employee_id=int(employee_id),
                )
            )

        confirmed = sorted(
            (f for f in forms if f.submitted and f.admin_confirmed),
            key=lambda f: f.form_date,
            reverse=True,
        )
        pending = sum(1 for f in forms if f.submitted and not f.admin_confirmed)

        total_score = sum(int(f.score) for f in confirmed)
        total_bonus = sum(int(f.daily_bonus) for f in confirmed)

        return SelfStats(
            total_score=total_score,
            total_bonus=total_bonus,
            days_worked=len(confirmed),
            average_score=_average(total_score, len(confirmed)),
            pending_approval_count=pending,
            recent_forms=[
                RecentForm(form_date=f.form_date, score=int(f.score), bonus=int(f.daily_bonus))
                for f in confirmed[: self._recent_limit]
            ],
            date_range=date_range,
        )
