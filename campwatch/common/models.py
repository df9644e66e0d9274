"""
Data models for the campsite availability monitor
"""
from datetime import datetime, date, timedelta, timezone
from typing import Optional, Dict, Mapping, Iterable
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from enum import Enum


class CampsiteAvailability(str, Enum):
    AVAILABLE = "Available"
    RESERVED = "Reserved"
    NOT_AVAILABLE = "Not Available"
    WALK_UP = "Walk Up"
    NOT_RESERVABLE = "Not Reservable"
    OPEN = "Open"


class RecordOutcome(str, Enum):
    """What happened to a watch record during one monitoring cycle"""
    SKIPPED = "skipped"
    EXPIRED = "expired"
    NOTIFIED = "notified"
    NOTIFY_FAILED = "notify_failed"
    NO_CHANGE = "no_change"
    FAILED = "failed"


class _DateRange(BaseModel):
    start_date: date
    end_date: date
    
    @model_validator(mode="after")
    def check_date_order(self):
        if self.end_date < self.start_date:
            raise ValueError(
                f"end_date {self.end_date} is before start_date {self.start_date}"
            )
        return self
    
    @property
    def num_nights(self) -> int:
        return (self.end_date - self.start_date).days


class WatchCreate(_DateRange):
    """Input for a new watch record"""
    name: Optional[str] = None
    email_address: str
    campsite_id: str
    campsite_name: str
    campsite_number: str
    facility_id: str
    monitoring_active: bool = True


class WatchRecord(_DateRange):
    """A stored request to be alerted when a campsite opens up for a date range"""
    model_config = ConfigDict(from_attributes=True)
    
    id: int
    name: Optional[str] = None
    email_address: str
    campsite_id: str
    campsite_name: str
    campsite_number: str
    facility_id: str
    monitoring_active: bool = True
    attempts_made: int = Field(default=0, ge=0)
    success_sent: int = Field(default=0, ge=0)
    last_success_sent_at: Optional[datetime] = None
    user_deleted: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    
    @field_validator("last_success_sent_at", "created_at", "updated_at")
    @classmethod
    def assume_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        # SQLite hands back naive timestamps; they are always written as UTC
        if value is not None and value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value
    
    @property
    def booking_url(self) -> str:
        return f"https://www.recreation.gov/camping/campsites/{self.campsite_id}"
    
    def is_expired(self, today: date) -> bool:
        return self.end_date < today
    
    def notified_within(self, now: datetime, window: timedelta) -> bool:
        """True if the last successful alert went out less than `window` ago"""
        if self.last_success_sent_at is None:
            return False
        return now - self.last_success_sent_at < window


def is_range_reservable(
    status_source: Mapping[date, str],
    start: date,
    end: date,
    available_statuses: Iterable[str]
) -> bool:
    """
    Check every night in [start, end) against the available status set.
    
    Stops at the first date whose status is missing or not available.
    An empty range is reservable.
    """
    allowed = set(available_statuses)
    current = start
    while current < end:
        if status_source.get(current) not in allowed:
            return False
        current += timedelta(days=1)
    return True


class AvailabilityResult(BaseModel):
    """Availability of one campsite for a requested range"""
    campsite_id: str
    statuses: Dict[date, str] = Field(default_factory=dict)
    is_reservable: bool = False
    
    @classmethod
    def from_statuses(
        cls,
        campsite_id: str,
        statuses: Dict[date, str],
        start: date,
        end: date,
        available_statuses: Iterable[str]
    ) -> "AvailabilityResult":
        return cls(
            campsite_id=campsite_id,
            statuses=statuses,
            is_reservable=is_range_reservable(statuses, start, end, available_statuses)
        )


class CycleReport(BaseModel):
    """Tally of one monitoring cycle"""
    started_at: datetime
    finished_at: Optional[datetime] = None
    candidates: int = 0
    skipped: int = 0
    expired: int = 0
    notified: int = 0
    notify_failed: int = 0
    no_change: int = 0
    failed: int = 0
    groups: int = 0
    singletons: int = 0
    upstream_calls: int = 0
    
    def record(self, outcome: RecordOutcome):
        field = outcome.value
        setattr(self, field, getattr(self, field) + 1)
    
    @property
    def checked(self) -> int:
        return self.notified + self.notify_failed + self.no_change + self.failed


class NotificationPayload(BaseModel):
    """Notification content"""
    recipient: str
    subject: str
    text: str
    html: Optional[str] = None
