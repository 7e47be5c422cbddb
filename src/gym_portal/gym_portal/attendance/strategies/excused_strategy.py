from __future__ import annotations

from datetime import datetime
from typing import Optional

from ...core.enums import AttendanceStatus
from ..model import BookingRef
from .base import CheckInStrategy, StatusDecision


class ExcusedStrategy(CheckInStrategy):
    """Staff marked the visit as excused."""

    def decide_checkin(self, *, now: datetime, booking: Optional[BookingRef], grace_minutes: int) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.EXCUSED)
