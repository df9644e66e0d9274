"""
Recreation.gov Campsite Availability Monitor

Watches campsites for date ranges and emails the requester as soon as
a range becomes reservable.

- campwatch.api      availability client (single campsite / campground month)
- campwatch.monitor  polling loop and campground-month grouping
- campwatch.store    SQLite watch records
"""
from .common.config import Config, load_config

__version__ = "1.0.0"

__all__ = [
    "Config",
    "load_config",
]
