from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from ..common.datetime_utils import ensure_aware
from ..core.enums import AttendanceStatus
from .model import BookingRef
from .strategies.base import CheckInStrategy
from .strategies.excused_strategy import ExcusedStrategy
from .strategies.late_strategy import LateStrategy
from .strategies.present_strategy import PresentStrategy


@dataclass
class CheckInStrategyFactory:
    """Factory Pattern: choose the check-in strategy.

    An explicit status from staff always wins; otherwise lateness is judged
    against the booked session start.
    """

    def for_checkin(
        self,
        *,
        now: datetime,
        requested_status: Optional[AttendanceStatus],
        booking: Optional[BookingRef],
        grace_minutes: int,
    ) -> CheckInStrategy:
        if requested_status == AttendanceStatus.EXCUSED:
            return ExcusedStrategy()
        if requested_status == AttendanceStatus.LATE:
            return LateStrategy()
        if requested_status == AttendanceStatus.PRESENT:
            return PresentStrategy()

        if booking is None or booking.starts_at is None:
            return PresentStrategy()

        if ensure_aware(now) <= booking.starts_at + timedelta(minutes=grace_minutes):
            return PresentStrategy()
        return LateStrategy()
