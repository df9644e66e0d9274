"""
Common utilities for the campsite availability monitor
"""
from .config import Config, load_config
from .models import (
    CampsiteAvailability,
    RecordOutcome,
    WatchCreate,
    WatchRecord,
    AvailabilityResult,
    CycleReport,
    NotificationPayload,
    is_range_reservable,
)
from .notifications import WatchNotifier, build_notifier, render_template
from .scheduler import CooldownGate, RetryStrategy, chunked

__all__ = [
    "Config",
    "load_config",
    "CampsiteAvailability",
    "RecordOutcome",
    "WatchCreate",
    "WatchRecord",
    "AvailabilityResult",
    "CycleReport",
    "NotificationPayload",
    "is_range_reservable",
    "WatchNotifier",
    "build_notifier",
    "render_template",
    "CooldownGate",
    "RetryStrategy",
    "chunked",
]
