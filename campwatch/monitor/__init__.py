"""
Availability monitoring loop
"""
from .grouping import WatchGroup, group_key, partition_watches
from .monitor import ReservationMonitor

__all__ = [
    "WatchGroup",
    "group_key",
    "partition_watches",
    "ReservationMonitor",
]
