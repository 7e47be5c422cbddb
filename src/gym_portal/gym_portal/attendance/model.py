from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..common.datetime_utils import isoformat
from ..core.enums import AttendanceState, AttendanceStatus, VerificationMethod

_OPEN_STATES = {
    AttendanceStatus.PRESENT: AttendanceState.OPEN_PRESENT,
    AttendanceStatus.LATE: AttendanceState.OPEN_LATE,
    AttendanceStatus.EXCUSED: AttendanceState.OPEN_EXCUSED,
}


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one gym visit, open until check-out is recorded."""

    attendance_id: int
    user_id: int
    check_in_time: datetime
    check_out_time: Optional[datetime]
    status: AttendanceStatus
    booking_id: Optional[int] = None
    verification_method: Optional[VerificationMethod] = None
    location: Optional[str] = None
    notes: Optional[str] = None

    # read-only display fields joined in by the repository
    user_name: Optional[str] = None
    user_email: Optional[str] = None
    booking_title: Optional[str] = None

    @property
    def is_open(self) -> bool:
        return self.check_out_time is None

    @property
    def state(self) -> AttendanceState:
        if self.check_out_time is not None:
            return AttendanceState.CLOSED
        return _OPEN_STATES[self.status]

    def to_dict(self) -> dict:
        return {
            "id": self.attendance_id,
            "user_id": self.user_id,
            "booking_id": self.booking_id,
            "check_in_time": isoformat(self.check_in_time),
            "check_out_time": isoformat(self.check_out_time),
            "status": self.status.value,
            "state": self.state.value,
            "verification_method": self.verification_method.value if self.verification_method else None,
            "location": self.location,
            "notes": self.notes,
            "user": {"id": self.user_id, "name": self.user_name, "email": self.user_email},
            "booking": {"id": self.booking_id, "title": self.booking_title} if self.booking_id else None,
        }


@dataclass(frozen=True)
class BookingRef:
    """Just enough of a class booking to judge lateness."""

    booking_id: int
    title: str
    starts_at: Optional[datetime] = None


@dataclass(frozen=True)
class AttendanceStats:
    total_check_ins: int
    currently_checked_in: int
    todays_check_ins: int
    avg_duration: str

    def to_dict(self) -> dict:
        return {
            "total_check_ins": self.total_check_ins,
            "currently_checked_in": self.currently_checked_in,
            "todays_check_ins": self.todays_check_ins,
            "avg_duration": self.avg_duration,
        }
