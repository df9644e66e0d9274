"""
Persistent watch records
"""
from .database import WatchStore
from .models import Base, WatchRow

__all__ = [
    "WatchStore",
    "Base",
    "WatchRow",
]
