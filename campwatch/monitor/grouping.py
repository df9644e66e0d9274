"""
Grouping of watch records by campground month

Watches on the same campground whose dates sit inside one calendar month
can all be answered by a single campground-month availability request.
"""
from collections import OrderedDict
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, List, Optional, Sequence, Tuple

from ..common.models import WatchRecord

GroupKey = Tuple[str, int, int]


@dataclass
class WatchGroup:
    """Watches served by one campground-month fetch"""
    facility_id: str
    month_start: date
    records: List[WatchRecord] = field(default_factory=list)
    
    @property
    def key(self) -> GroupKey:
        return (self.facility_id, self.month_start.year, self.month_start.month)
    
    def __len__(self) -> int:
        return len(self.records)


def group_key(record: WatchRecord) -> Optional[GroupKey]:
    """
    (facility_id, year, month) of the start date, or None when the range
    crosses into another month and a month fetch can't cover it.
    """
    start, end = record.start_date, record.end_date
    if (start.year, start.month) != (end.year, end.month):
        return None
    return (record.facility_id, start.year, start.month)


def partition_watches(records: Sequence[WatchRecord]) -> Tuple[List[WatchGroup], List[WatchRecord]]:
    """
    Split records into multi-record groups and singletons.
    
    Only keys shared by two or more records form a group. Input order is
    kept within groups, and singletons keep their relative order.
    """
    buckets: Dict[GroupKey, List[WatchRecord]] = OrderedDict()
    for record in records:
        key = group_key(record)
        if key is not None:
            buckets.setdefault(key, []).append(record)
    
    groups = []
    grouped_ids = set()
    for (facility_id, year, month), members in buckets.items():
        if len(members) < 2:
            continue
        groups.append(WatchGroup(facility_id=facility_id, month_start=date(year, month, 1), records=members))
        grouped_ids.update(r.id for r in members)
    
    singletons = [r for r in records if r.id not in grouped_ids]
    return groups, singletons
