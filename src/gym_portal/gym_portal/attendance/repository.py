from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import AttendanceStatus, VerificationMethod
from .model import AttendanceRecord, BookingRef


class AttendanceRepository(Protocol):
    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def get_open_for_user(self, user_id: int) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def list_all(self) -> Sequence[AttendanceRecord]:
        """Newest check-in first."""

        raise NotImplementedError

    def get_booking(self, booking_id: int) -> Optional[BookingRef]:
        raise NotImplementedError

    def create_checkin(
        self,
        *,
        user_id: int,
        check_in_time: datetime,
        status: AttendanceStatus,
        booking_id: Optional[int] = None,
        verification_method: Optional[VerificationMethod] = None,
        location: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> int:
        raise NotImplementedError

    def update_checkout(self, *, attendance_id: int, check_out_time: datetime) -> bool:
        """Set check_out_time only if the record is still open.

        Returns False when no open record matched.
        """

        raise NotImplementedError
