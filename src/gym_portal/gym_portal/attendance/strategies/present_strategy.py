from __future__ import annotations

from datetime import datetime
from typing import Optional

from ...core.enums import AttendanceStatus
from ..model import BookingRef
from .base import CheckInStrategy, StatusDecision


class PresentStrategy(CheckInStrategy):
    """Default: on time, or no booking to be late for."""

    def decide_checkin(self, *, now: datetime, booking: Optional[BookingRef], grace_minutes: int) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.PRESENT)
