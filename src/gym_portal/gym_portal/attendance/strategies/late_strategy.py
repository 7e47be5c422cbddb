from __future__ import annotations

from datetime import datetime
from typing import Optional

from ...common.datetime_utils import ensure_aware
from ...core.enums import AttendanceStatus
from ..model import BookingRef
from .base import CheckInStrategy, StatusDecision


class LateStrategy(CheckInStrategy):
    """Check-in after the booked session start plus grace."""

    def decide_checkin(self, *, now: datetime, booking: Optional[BookingRef], grace_minutes: int) -> StatusDecision:
        if booking is None or booking.starts_at is None:
            return StatusDecision(status=AttendanceStatus.LATE)

        late_minutes = max(int((ensure_aware(now) - booking.starts_at).total_seconds() // 60), 0)
        return StatusDecision(status=AttendanceStatus.LATE, note=f"Late by {late_minutes} min")
