from datetime import date, datetime

import pytest

from src.performance_tracker.performance_tracker.common.datetime_utils import (
    format_timestamp,
    parse_iso_datetime,
)
from src.performance_tracker.performance_tracker.core.exceptions import ValidationError
from src.performance_tracker.performance_tracker.dailyforms.model import DailyForm, form_to_dict


def test_format_timestamp_drops_microseconds():
    assert format_timestamp(datetime(2025, 3, 10, 9, 5, 7, 123456)) == "2025-03-10T09:05:07"
    assert format_timestamp(None) is None


def test_form_payload_uses_shared_timestamp_format():
    form = DailyForm(
        form_id=1,
        employee_id=2,
        form_date=date(2025, 3, 10),
        entry_time=datetime(2025, 3, 10, 9, 0, 0, 500),
    )

    body = form_to_dict(form)

    assert body["entry_time"] == "2025-03-10T09:00:00"
    assert body["submitted_at"] is None


def test_bare_clock_time_is_placed_on_the_given_day():
    assert parse_iso_datetime("17:30", on_date=date(2025, 3, 10)) == datetime(2025, 3, 10, 17, 30)


def test_offset_timestamps_are_rejected():
    with pytest.raises(ValidationError):
        parse_iso_datetime("2025-03-10T09:00:00+02:00")
