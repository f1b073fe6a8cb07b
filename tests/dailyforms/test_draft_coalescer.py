from datetime import datetime

import pytest

from src.performance_tracker.performance_tracker.core.exceptions import ForbiddenError, PersistenceError
from src.performance_tracker.performance_tracker.dailyforms.catalog import STANDARD_TASKS
from src.performance_tracker.performance_tracker.dailyforms.debounce import DraftCoalescer
from src.performance_tracker.performance_tracker.dailyforms.model import EmployeeEdits


class FakeClock:
    def __init__(self):
        self.value = 100.0

    def __call__(self):
        return self.value


@pytest.fixture
def clock():
    return FakeClock()


def test_rapid_edits_are_merged_into_one_write(clock):
    writes = []
    drafts = DraftCoalescer(lambda eid, fid, edits: writes.append((eid, fid, edits)), quiet_seconds=2, clock=clock)

    drafts.stage(2, 10, EmployeeEdits(task_checks={"a": True}))
    clock.value += 0.5
    drafts.stage(2, 10, EmployeeEdits(task_checks={"a": False, "b": True}, hours_attended=3))

    assert drafts.flush_due() == []
    clock.value += 2
    assert drafts.flush_due() == [(2, 10)]

    assert len(writes) == 1
    eid, fid, edits = writes[0]
    assert (eid, fid) == (2, 10)
    assert edits.task_checks == {"a": False, "b": True}
    assert edits.hours_attended == 3
    assert drafts.pending(2, 10) is None


def test_drafts_of_different_forms_are_kept_apart(clock):
    writes = []
    drafts = DraftCoalescer(lambda eid, fid, edits: writes.append((fid, dict(edits.task_checks))), quiet_seconds=60, clock=clock)

    drafts.stage(2, 10, EmployeeEdits(task_checks={"a": True}))
    drafts.stage(2, 11, EmployeeEdits(task_checks={"b": True}))

    assert drafts.flush(2) is True
    assert writes == [(10, {"a": True}), (11, {"b": True})]


def test_flush_writes_immediately(clock):
    writes = []
    drafts = DraftCoalescer(lambda eid, fid, edits: writes.append(eid), quiet_seconds=60, clock=clock)

    drafts.stage(3, 12, EmployeeEdits(screensharing=True))

    assert drafts.flush(3) is True
    assert drafts.flush(3) is False
    assert writes == [3]


def test_refused_edits_are_dropped(clock):
    def apply(eid, fid, edits):
        raise ForbiddenError("locked")

    drafts = DraftCoalescer(apply, quiet_seconds=0, clock=clock)
    drafts.stage(2, 10, EmployeeEdits(screensharing=True))

    assert drafts.flush(2) is False
    assert drafts.pending(2, 10) is None


def test_storage_failure_keeps_edits_for_retry(clock):
    def apply(eid, fid, edits):
        raise PersistenceError("db down")

    drafts = DraftCoalescer(apply, quiet_seconds=0, clock=clock)
    drafts.stage(2, 10, EmployeeEdits(task_checks={"a": True}))

    with pytest.raises(PersistenceError):
        drafts.flush(2)

    assert drafts.pending(2, 10).task_checks == {"a": True}


def test_draft_flushed_after_midnight_stays_off_the_next_day(form_service, forms_repo, clock):
    late = datetime(2025, 3, 10, 23, 59, 58)
    after_midnight = datetime(2025, 3, 11, 0, 0, 5)
    task_id = STANDARD_TASKS[0].task_id

    day_one = form_service.get_or_create_today_form(2, now=late)
    drafts = DraftCoalescer(
        lambda eid, fid, edits: form_service.save_draft(eid, fid, edits, now=after_midnight),
        quiet_seconds=2,
        clock=clock,
    )
    drafts.stage(2, day_one.form_id, EmployeeEdits(task_checks={task_id: True}, hours_attended=7))

    drafts.flush(2)

    stored = forms_repo.get_by_id(day_one.form_id)
    assert not any(t.employee_checked for t in stored.tasks)
    assert stored.hours_attended == 0.0
    assert forms_repo.get_for_employee_and_date(2, after_midnight.date()) is None


def test_item_removed_before_flush_keeps_the_other_edits(form_service, forms_repo, fixed_now, clock):
    form = form_service.get_or_create_today_form(2, now=fixed_now)
    drafts = DraftCoalescer(
        lambda eid, fid, edits: form_service.save_draft(eid, fid, edits, now=fixed_now),
        quiet_seconds=2,
        clock=clock,
    )

    for task in STANDARD_TASKS[:5]:
        drafts.stage(2, form.form_id, EmployeeEdits(task_checks={task.task_id: True}))
    drafts.stage(2, form.form_id, EmployeeEdits(custom_task_checks={"removed_item": True}))

    assert drafts.flush(2) is True

    stored = forms_repo.get_by_id(form.form_id)
    assert sum(t.employee_checked for t in stored.tasks) == 5
