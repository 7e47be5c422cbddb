from __future__ import annotations

import logging
from datetime import datetime, timezone, tzinfo
from typing import Optional, Union

from ..common.datetime_utils import ensure_aware, now_utc
from ..common.pagination import Page, matches_search, paginate
from ..core.constants import ATTENDANCES_PER_PAGE, DEFAULT_LATE_GRACE_MINUTES
from ..core.enums import AttendanceStatus, VerificationMethod
from ..core.exceptions import DuplicateOpenSession, InvalidTransition, ValidationError
from ..users.repository import UserRepository
from .factory import CheckInStrategyFactory
from .model import AttendanceRecord, AttendanceStats
from .repository import AttendanceRepository
from .stats import compute_stats

logger = logging.getLogger(__name__)

CHECKED_OUT_LABEL = "Checked Out"

_STATUS_LABELS = {
    AttendanceStatus.PRESENT: "Present",
    AttendanceStatus.LATE: "Late",
    AttendanceStatus.EXCUSED: "Excused",
}

_STATUS_CSS = {
    AttendanceStatus.PRESENT: "bg-green-100 text-green-800",
    AttendanceStatus.LATE: "bg-red-100 text-red-800",
    AttendanceStatus.EXCUSED: "bg-yellow-100 text-yellow-800",
}

_METHOD_ICONS = {
    VerificationMethod.QR_CODE: "qr",
    VerificationMethod.NFC: "tag",
    VerificationMethod.MANUAL: "lock",
}


def status_badge(record: AttendanceRecord) -> str:
    """Checked-out records show "Checked Out" whatever status they opened with."""

    if record.check_out_time is not None:
        return CHECKED_OUT_LABEL
    return _STATUS_LABELS.get(record.status, _STATUS_LABELS[AttendanceStatus.PRESENT])


def status_css(record: AttendanceRecord) -> str:
    if record.check_out_time is not None:
        return "bg-gray-100 text-gray-800"
    return _STATUS_CSS.get(record.status, _STATUS_CSS[AttendanceStatus.PRESENT])


def verification_badge(method: Optional[VerificationMethod]) -> dict:
    if method is None or method == VerificationMethod.UNKNOWN:
        return {"label": "Unknown", "icon": "unknown"}
    return {"label": method.value, "icon": _METHOD_ICONS.get(method, "unknown")}


def parse_status(value: Union[str, AttendanceStatus, None]) -> Optional[AttendanceStatus]:
    if value is None or value == "":
        return None
    try:
        return AttendanceStatus(value)
    except ValueError:
        raise ValidationError(f"Unknown attendance status: {value}") from None


def parse_verification_method(value: Union[str, VerificationMethod, None]) -> Optional[VerificationMethod]:
    if value is None or value == "":
        return None
    try:
        return VerificationMethod(value)
    except ValueError:
        raise ValidationError(f"Unknown verification method: {value}") from None


class AttendanceService:
    """Attendance state machine: check-in opens a record, check-out closes it."""

    def __init__(
        self,
        attendance: AttendanceRepository,
        users: UserRepository,
        *,
        strategy_factory: CheckInStrategyFactory | None = None,
        grace_minutes: int = DEFAULT_LATE_GRACE_MINUTES,
        tz: tzinfo = timezone.utc,
    ):
        self._attendance = attendance
        self._users = users
        self._factory = strategy_factory or CheckInStrategyFactory()
        self._grace_minutes = int(grace_minutes)
        self._tz = tz

    def check_in(
        self,
        user_id: int,
        *,
        booking_id: Optional[int] = None,
        verification_method: Union[str, VerificationMethod, None] = None,
        location: Optional[str] = None,
        notes: Optional[str] = None,
        status: Union[str, AttendanceStatus, None] = None,
        now: datetime | None = None,
    ) -> AttendanceRecord:
        now = ensure_aware(now or now_utc())
        requested_status = parse_status(status)
        method = parse_verification_method(verification_method)

        if not self._users.get_by_id(user_id):
            raise ValidationError("Member not found")

        existing = self._attendance.get_open_for_user(user_id)
        if existing:
            raise DuplicateOpenSession(
                "Member is already checked in",
                user_id=user_id,
                attendance_id=existing.attendance_id,
            )

        booking = None
        if booking_id is not None:
            booking = self._attendance.get_booking(booking_id)
            if not booking:
                raise ValidationError("Booking not found")

        strategy = self._factory.for_checkin(
            now=now,
            requested_status=requested_status,
            booking=booking,
            grace_minutes=self._grace_minutes,
        )
        decision = strategy.decide_checkin(now=now, booking=booking, grace_minutes=self._grace_minutes)

        attendance_id = self._attendance.create_checkin(
            user_id=user_id,
            check_in_time=now,
            status=decision.status,
            booking_id=booking_id,
            verification_method=method,
            location=(location or "").strip() or None,
            notes=(notes or "").strip() or decision.note,
        )
        logger.info("user %s checked in (attendance %s, %s)", user_id, attendance_id, decision.status.value)
        return self._require(attendance_id)

    def check_out(self, attendance_id: int, *, now: datetime | None = None) -> AttendanceRecord:
        now = ensure_aware(now or now_utc())

        record = self._attendance.get_by_id(attendance_id)
        if not record:
            raise InvalidTransition(
                "Attendance record not found",
                attendance_id=attendance_id,
                reason=InvalidTransition.NOT_FOUND,
            )
        if not record.is_open:
            raise InvalidTransition(
                "Member has already checked out",
                attendance_id=attendance_id,
                reason=InvalidTransition.ALREADY_CHECKED_OUT,
            )
        if now < record.check_in_time:
            raise ValidationError("Check-out time cannot be earlier than check-in time")

        if not self._attendance.update_checkout(attendance_id=attendance_id, check_out_time=now):
            # closed by someone else between read and write
            raise InvalidTransition(
                "Member has already checked out",
                attendance_id=attendance_id,
                reason=InvalidTransition.ALREADY_CHECKED_OUT,
            )

        logger.info("user %s checked out (attendance %s)", record.user_id, attendance_id)
        return self._require(attendance_id)

    def toggle_by_qr(self, user_id: int, *, location: Optional[str] = None, now: datetime | None = None) -> tuple[str, AttendanceRecord]:
        """A QR scan checks the member out if inside, otherwise checks them in."""

        open_record = self._attendance.get_open_for_user(user_id)
        if open_record:
            return "check_out", self.check_out(open_record.attendance_id, now=now)
        record = self.check_in(user_id, verification_method=VerificationMethod.QR_CODE, location=location, now=now)
        return "check_in", record

    def get_open_record(self, user_id: int) -> Optional[AttendanceRecord]:
        return self._attendance.get_open_for_user(user_id)

    def list_attendances(
        self,
        *,
        status: Union[str, AttendanceStatus, None] = None,
        search: str = "",
        page: int = 1,
        per_page: int = ATTENDANCES_PER_PAGE,
    ) -> Page[AttendanceRecord]:
        wanted = parse_status(None if status == "all" else status)
        rows = [
            r
            for r in self._attendance.list_all()
            if (wanted is None or r.status == wanted)
            and matches_search(search, r.user_name, r.user_email, r.booking_title)
        ]
        return paginate(rows, page, per_page)

    def stats(self, *, as_of: datetime | None = None) -> AttendanceStats:
        return compute_stats(self._attendance.list_all(), ensure_aware(as_of or now_utc()), self._tz)

    def _require(self, attendance_id: int) -> AttendanceRecord:
        record = self._attendance.get_by_id(attendance_id)
        if not record:
            raise InvalidTransition(
                "Attendance record not found",
                attendance_id=attendance_id,
                reason=InvalidTransition.NOT_FOUND,
            )
        return record

    @staticmethod
    def to_ui(record: AttendanceRecord) -> dict:
        data = record.to_dict()
        data["status_label"] = status_badge(record)
        data["css_class"] = status_css(record)
        data["verification"] = verification_badge(record.verification_method)
        return data
