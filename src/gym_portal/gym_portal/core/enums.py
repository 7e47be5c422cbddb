from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """User roles used for route guards."""

    ADMIN = "admin"
    TRAINER = "trainer"
    MEMBER = "member"


class AttendanceStatus(str, Enum):
    """Status stored on an attendance record at check-in time."""

    PRESENT = "present"
    LATE = "late"
    EXCUSED = "excused"


class AttendanceState(str, Enum):
    """Lifecycle state of an attendance record.

    OPEN_* states carry the check-in status; CLOSED is terminal.
    """

    OPEN_PRESENT = "OPEN_PRESENT"
    OPEN_LATE = "OPEN_LATE"
    OPEN_EXCUSED = "OPEN_EXCUSED"
    CLOSED = "CLOSED"


class VerificationMethod(str, Enum):
    QR_CODE = "qr_code"
    NFC = "nfc"
    MANUAL = "manual"
    UNKNOWN = "unknown"


class PaymentMethod(str, Enum):
    CREDIT = "credit"
    DEBIT = "debit"


class PaymentStatus(str, Enum):
    COMPLETED = "completed"
    FAILED = "failed"
