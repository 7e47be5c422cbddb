from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ...core.enums import AttendanceStatus
from ..model import BookingRef


@dataclass(frozen=True)
class StatusDecision:
    status: AttendanceStatus
    note: Optional[str] = None


class CheckInStrategy(ABC):
    """Strategy Pattern: decide the status a new attendance record opens with."""

    @abstractmethod
    def decide_checkin(self, *, now: datetime, booking: Optional[BookingRef], grace_minutes: int) -> StatusDecision:
        raise NotImplementedError
