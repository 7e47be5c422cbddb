from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .attendance.factory import CheckInStrategyFactory
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .common.datetime_utils import get_timezone
from .core.constants import DEFAULT_LATE_GRACE_MINUTES, DEFAULT_TIMEZONE
from .database.connection import DatabaseConnection, DBConfig
from .memberships.mysql_membership_repository import MySQLMembershipRepository
from .memberships.repository import MembershipRepository
from .memberships.service import MembershipService
from .payments.gateway import PaymentGateway
from .payments.mysql_payment_repository import MySQLPaymentRepository
from .payments.repository import PaymentRepository
from .payments.service import PaymentService
from .users.mysql_user_repository import MySQLUserRepository
from .users.repository import UserRepository
from .users.service import AuthService, MemberDirectoryService


@dataclass(frozen=True)
class Container:
    users_repo: UserRepository
    memberships_repo: MembershipRepository
    attendance_repo: AttendanceRepository
    payments_repo: PaymentRepository

    auth_service: AuthService
    member_directory: MemberDirectoryService
    membership_service: MembershipService
    attendance_service: AttendanceService
    payment_service: PaymentService

    conn: Optional[DatabaseConnection] = None


def wire(
    *,
    users_repo: UserRepository,
    memberships_repo: MembershipRepository,
    attendance_repo: AttendanceRepository,
    payments_repo: PaymentRepository,
    timezone_name: str = DEFAULT_TIMEZONE,
    grace_minutes: int = DEFAULT_LATE_GRACE_MINUTES,
    gateway: Optional[PaymentGateway] = None,
    conn: Optional[DatabaseConnection] = None,
) -> Container:
    """Build services on top of any repository implementations."""

    membership_service = MembershipService(memberships_repo, users_repo)
    attendance_service = AttendanceService(
        attendance_repo,
        users_repo,
        strategy_factory=CheckInStrategyFactory(),
        grace_minutes=grace_minutes,
        tz=get_timezone(timezone_name),
    )

    return Container(
        users_repo=users_repo,
        memberships_repo=memberships_repo,
        attendance_repo=attendance_repo,
        payments_repo=payments_repo,
        auth_service=AuthService(users_repo),
        member_directory=MemberDirectoryService(users_repo, memberships_repo),
        membership_service=membership_service,
        attendance_service=attendance_service,
        payment_service=PaymentService(payments_repo, membership_service, gateway=gateway),
        conn=conn,
    )


def build_container(
    *,
    db_config: dict,
    timezone_name: str = DEFAULT_TIMEZONE,
    grace_minutes: int = DEFAULT_LATE_GRACE_MINUTES,
) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    return wire(
        users_repo=MySQLUserRepository(conn),
        memberships_repo=MySQLMembershipRepository(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
        payments_repo=MySQLPaymentRepository(conn),
        timezone_name=timezone_name,
        grace_minutes=grace_minutes,
        conn=conn,
    )
