"""
Tests for data models (campwatch/common/models.py)
"""
import pytest
from datetime import datetime, date, timedelta, timezone
from unittest.mock import MagicMock

from pydantic import ValidationError

from campwatch.common.models import (
    CampsiteAvailability,
    RecordOutcome,
    WatchCreate,
    WatchRecord,
    AvailabilityResult,
    CycleReport,
    NotificationPayload,
    is_range_reservable,
)
from tests.conftest import make_watch

AVAILABLE = ["Available", "Open"]


def _record(**overrides) -> WatchRecord:
    fields = make_watch().model_dump()
    fields.update(overrides)
    return WatchRecord(id=1, **fields)


class TestCampsiteAvailability:
    def test_availability_values(self):
        assert CampsiteAvailability.AVAILABLE.value == "Available"
        assert CampsiteAvailability.RESERVED.value == "Reserved"
        assert CampsiteAvailability.NOT_AVAILABLE.value == "Not Available"
        assert CampsiteAvailability.WALK_UP.value == "Walk Up"
        assert CampsiteAvailability.NOT_RESERVABLE.value == "Not Reservable"
        assert CampsiteAvailability.OPEN.value == "Open"


class TestIsRangeReservable:
    def test_all_available(self):
        statuses = {
            date(2025, 6, 1): "Available",
            date(2025, 6, 2): "Open",
        }
        assert is_range_reservable(statuses, date(2025, 6, 1), date(2025, 6, 3), AVAILABLE) is True

    def test_end_date_is_departure(self):
        # The departure day itself is never checked
        statuses = {
            date(2025, 6, 1): "Available",
            date(2025, 6, 2): "Available",
            date(2025, 6, 3): "Reserved",
        }
        assert is_range_reservable(statuses, date(2025, 6, 1), date(2025, 6, 3), AVAILABLE) is True

    def test_one_reserved_night(self):
        statuses = {
            date(2025, 6, 1): "Available",
            date(2025, 6, 2): "Reserved",
        }
        assert is_range_reservable(statuses, date(2025, 6, 1), date(2025, 6, 3), AVAILABLE) is False

    def test_missing_date_is_not_reservable(self):
        statuses = {date(2025, 6, 1): "Available"}
        assert is_range_reservable(statuses, date(2025, 6, 1), date(2025, 6, 3), AVAILABLE) is False

    def test_empty_range_is_reservable(self):
        assert is_range_reservable({}, date(2025, 6, 1), date(2025, 6, 1), AVAILABLE) is True

    def test_custom_status_set(self):
        statuses = {date(2025, 6, 1): "Walk Up"}
        assert is_range_reservable(statuses, date(2025, 6, 1), date(2025, 6, 2), ["Walk Up"]) is True
        assert is_range_reservable(statuses, date(2025, 6, 1), date(2025, 6, 2), AVAILABLE) is False

    def test_stops_at_first_unavailable_date(self):
        source = MagicMock()
        source.get.side_effect = ["Available", "Reserved", "Available", "Available"]

        result = is_range_reservable(source, date(2025, 6, 1), date(2025, 6, 5), AVAILABLE)

        assert result is False
        assert source.get.call_count == 2
        source.get.assert_called_with(date(2025, 6, 2))

    def test_spans_month_boundary(self):
        statuses = {
            date(2025, 6, 30): "Available",
            date(2025, 7, 1): "Available",
        }
        assert is_range_reservable(statuses, date(2025, 6, 30), date(2025, 7, 2), AVAILABLE) is True


class TestWatchRecord:
    def test_end_before_start_rejected(self):
        with pytest.raises(ValidationError):
            make_watch(start_date=date(2025, 6, 3), end_date=date(2025, 6, 1))

    def test_same_day_allowed(self):
        watch = make_watch(start_date=date(2025, 6, 1), end_date=date(2025, 6, 1))
        assert watch.num_nights == 0

    def test_negative_counters_rejected(self):
        with pytest.raises(ValidationError):
            _record(attempts_made=-1)

    def test_dates_parsed_from_strings(self):
        record = _record(start_date="2025-06-01", end_date="2025-06-03")
        assert record.start_date == date(2025, 6, 1)
        assert record.num_nights == 2

    def test_naive_timestamps_read_as_utc(self):
        record = _record(last_success_sent_at=datetime(2025, 5, 20, 16, 0))
        assert record.last_success_sent_at.tzinfo == timezone.utc

    def test_from_attributes(self):
        row = MagicMock()
        for key, value in _record().model_dump().items():
            setattr(row, key, value)
        record = WatchRecord.model_validate(row)
        assert record.campsite_id == "5"

    def test_is_expired(self):
        record = _record()
        assert record.is_expired(date(2025, 6, 3)) is False
        assert record.is_expired(date(2025, 6, 4)) is True

    def test_notified_within(self):
        now = datetime(2025, 5, 20, 16, 0, tzinfo=timezone.utc)
        window = timedelta(minutes=10)
        assert _record().notified_within(now, window) is False
        assert _record(last_success_sent_at=now - timedelta(minutes=9)).notified_within(now, window) is True
        assert _record(last_success_sent_at=now - timedelta(minutes=10)).notified_within(now, window) is False

    def test_booking_url(self):
        assert _record().booking_url == "https://www.recreation.gov/camping/campsites/5"

    def test_create_defaults_to_active(self):
        assert make_watch().monitoring_active is True


class TestAvailabilityResult:
    def test_from_statuses(self):
        result = AvailabilityResult.from_statuses(
            "5",
            {date(2025, 6, 1): "Available"},
            date(2025, 6, 1),
            date(2025, 6, 2),
            AVAILABLE,
        )
        assert result.is_reservable is True
        assert result.statuses[date(2025, 6, 1)] == "Available"


class TestCycleReport:
    def test_record_outcomes(self):
        report = CycleReport(started_at=datetime.now(timezone.utc))
        report.record(RecordOutcome.NOTIFIED)
        report.record(RecordOutcome.NO_CHANGE)
        report.record(RecordOutcome.NO_CHANGE)
        report.record(RecordOutcome.SKIPPED)
        assert report.notified == 1
        assert report.no_change == 2
        assert report.skipped == 1
        assert report.checked == 3


class TestNotificationPayload:
    def test_html_optional(self):
        payload = NotificationPayload(recipient="a@b.c", subject="Hi", text="Body")
        assert payload.html is None
