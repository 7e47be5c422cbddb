from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..common.datetime_utils import parse_datetime
from ..core.enums import AttendanceStatus, VerificationMethod
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, optional_int, to_db_datetime
from .model import AttendanceRecord, BookingRef
from .repository import AttendanceRepository

_SELECT = """
    SELECT
        a.id, a.user_id, a.booking_id, a.check_in_time, a.check_out_time, a.status,
        a.verification_method, a.location, a.notes,
        u.name AS user_name, u.email AS user_email,
        b.title AS booking_title
    FROM attendances a
    LEFT JOIN users u ON u.id = a.user_id
    LEFT JOIN bookings b ON b.id = a.booking_id
"""


def _to_method(value) -> Optional[VerificationMethod]:
    if not value:
        return None
    try:
        return VerificationMethod(value)
    except ValueError:
        return VerificationMethod.UNKNOWN


def _to_record(r: dict) -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=int(r["id"]),
        user_id=int(r["user_id"]),
        check_in_time=parse_datetime(r["check_in_time"]),
        check_out_time=parse_datetime(r.get("check_out_time")),
        status=AttendanceStatus(r.get("status") or AttendanceStatus.PRESENT.value),
        booking_id=optional_int(r.get("booking_id")),
        verification_method=_to_method(r.get("verification_method")),
        location=r.get("location"),
        notes=r.get("notes"),
        user_name=r.get("user_name"),
        user_email=r.get("user_email"),
        booking_title=r.get("booking_title"),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE a.id=%s", (int(attendance_id),))
            r = fetchone(cur)
            return _to_record(r) if r else None

    def get_open_for_user(self, user_id: int) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _SELECT + " WHERE a.user_id=%s AND a.check_out_time IS NULL ORDER BY a.check_in_time DESC LIMIT 1",
                (int(user_id),),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def list_all(self) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " ORDER BY a.check_in_time DESC, a.id DESC")
            return [_to_record(r) for r in fetchall(cur)]

    def get_booking(self, booking_id: int) -> Optional[BookingRef]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT b.id, b.title, b.start_time
                FROM bookings b
                WHERE b.id=%s
                """,
                (int(booking_id),),
            )
            r = fetchone(cur)
            if not r:
                return None
            return BookingRef(
                booking_id=int(r["id"]),
                title=r.get("title") or "",
                starts_at=parse_datetime(r.get("start_time")),
            )

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
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendances(user_id, booking_id, check_in_time, status, verification_method, location, notes)
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(user_id),
                    booking_id,
                    to_db_datetime(check_in_time),
                    status.value,
                    verification_method.value if verification_method else None,
                    location,
                    notes,
                ),
            )
            return int(cur.lastrowid)

    def update_checkout(self, *, attendance_id: int, check_out_time: datetime) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendances
                SET check_out_time=%s
                WHERE id=%s AND check_out_time IS NULL
                """,
                (to_db_datetime(check_out_time), int(attendance_id)),
            )
            return cur.rowcount > 0
