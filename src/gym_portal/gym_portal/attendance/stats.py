from __future__ import annotations

from datetime import datetime, tzinfo
from typing import Iterable, Optional

from ..common.datetime_utils import local_date
from ..core.constants import EMPTY_DURATION
from .model import AttendanceRecord, AttendanceStats


def visit_seconds(record: AttendanceRecord) -> Optional[float]:
    """Length of a closed visit; None while the member is still inside."""

    if record.check_out_time is None:
        return None
    return max((record.check_out_time - record.check_in_time).total_seconds(), 0.0)


def format_duration(seconds: float) -> str:
    minutes = int(seconds // 60)
    return f"{minutes // 60}h {minutes % 60}m"


def compute_stats(records: Iterable[AttendanceRecord], as_of: datetime, tz: tzinfo) -> AttendanceStats:
    """Dashboard counters over a snapshot of attendance records.

    "Today" is the calendar day of `as_of` in the facility timezone `tz`.
    """

    today = local_date(as_of, tz)

    total = 0
    open_count = 0
    todays = 0
    durations: list[float] = []
    for r in records:
        total += 1
        if r.is_open:
            open_count += 1
        else:
            durations.append(visit_seconds(r))
        if local_date(r.check_in_time, tz) == today:
            todays += 1

    avg = format_duration(sum(durations) / len(durations)) if durations else EMPTY_DURATION
    return AttendanceStats(
        total_check_ins=total,
        currently_checked_in=open_count,
        todays_check_ins=todays,
        avg_duration=avg,
    )
