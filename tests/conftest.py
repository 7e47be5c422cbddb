from __future__ import annotations

import dataclasses
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional

import pytest
from werkzeug.security import generate_password_hash

from src.gym_portal.gym_portal.attendance.model import AttendanceRecord, BookingRef
from src.gym_portal.gym_portal.container import wire
from src.gym_portal.gym_portal.core.enums import Role
from src.gym_portal.gym_portal.memberships.model import MembershipPlan
from src.gym_portal.gym_portal.payments.model import Payment
from src.gym_portal.gym_portal.users.model import User

UTC = timezone.utc
PASSWORD = "secret-pw"


class InMemoryUsers:
    def __init__(self, users: list[User]):
        self.users_by_id = {u.user_id: u for u in users}

    def get_by_id(self, user_id: int) -> Optional[User]:
        return self.users_by_id.get(user_id)

    def get_by_email(self, email: str) -> Optional[User]:
        for u in self.users_by_id.values():
            if u.email.lower() == email.lower():
                return u
        return None

    def list_members(self):
        return [u for u in self.users_by_id.values() if u.role == Role.MEMBER]


class InMemoryMemberships:
    def __init__(self, plans: Optional[list[MembershipPlan]] = None):
        self.plans = {p.plan_id: p for p in plans or []}
        self.subscriptions: list[dict] = []
        self.referenced_plan_ids: set[int] = set()
        self._next_plan_id = max(self.plans, default=0) + 1
        self._next_sub_id = 1

    def list_plans(self):
        return sorted(self.plans.values(), key=lambda p: (p.price, p.plan_id))

    def get_plan(self, plan_id: int):
        return self.plans.get(plan_id)

    def create_plan(self, **fields) -> int:
        plan_id = self._next_plan_id
        self._next_plan_id += 1
        self.plans[plan_id] = MembershipPlan(plan_id=plan_id, **fields)
        return plan_id

    def update_plan(self, *, plan_id: int, **fields) -> bool:
        if plan_id not in self.plans:
            return False
        self.plans[plan_id] = MembershipPlan(plan_id=plan_id, **fields)
        return True

    def delete_plan(self, plan_id: int) -> bool:
        if plan_id in self.referenced_plan_ids or plan_id not in self.plans:
            return False
        del self.plans[plan_id]
        return True

    def add_raw(self, raw: dict) -> None:
        self.subscriptions.append(raw)
        self._next_sub_id = max(self._next_sub_id, int(raw["id"]) + 1)

    def list_raw_for_user(self, user_id: int):
        return [s for s in self.subscriptions if s["user_id"] == user_id]

    def list_raw_for_users(self, user_ids):
        return {i: self.list_raw_for_user(i) for i in user_ids}

    def create_subscription(self, *, user_id, plan_id, start_date, end_date, is_active=True) -> int:
        plan = self.plans[plan_id]
        sub_id = self._next_sub_id
        self._next_sub_id += 1
        self.subscriptions.append(
            {
                "id": sub_id,
                "user_id": user_id,
                "membership_plan_id": plan_id,
                "start_date": start_date,
                "end_date": end_date,
                "is_active": is_active,
                "membership_plan": {
                    "id": plan_id,
                    "name": plan.name,
                    "price": plan.price,
                    "duration_days": plan.duration_days,
                    "features": list(plan.features),
                },
            }
        )
        return sub_id


class InMemoryAttendance:
    def __init__(self, users: Optional[InMemoryUsers] = None):
        self.records: dict[int, AttendanceRecord] = {}
        self.bookings: dict[int, BookingRef] = {}
        self._users = users
        self._id = 0

    def add(self, record: AttendanceRecord) -> AttendanceRecord:
        self.records[record.attendance_id] = record
        self._id = max(self._id, record.attendance_id)
        return record

    def get_by_id(self, attendance_id: int):
        return self.records.get(attendance_id)

    def get_open_for_user(self, user_id: int):
        for r in sorted(self.records.values(), key=lambda r: r.check_in_time, reverse=True):
            if r.user_id == user_id and r.check_out_time is None:
                return r
        return None

    def list_all(self):
        return sorted(self.records.values(), key=lambda r: (r.check_in_time, r.attendance_id), reverse=True)

    def get_booking(self, booking_id: int):
        return self.bookings.get(booking_id)

    def create_checkin(self, *, user_id, check_in_time, status, booking_id=None, verification_method=None, location=None, notes=None) -> int:
        self._id += 1
        user = self._users.get_by_id(user_id) if self._users else None
        booking = self.bookings.get(booking_id) if booking_id else None
        self.records[self._id] = AttendanceRecord(
            attendance_id=self._id,
            user_id=user_id,
            check_in_time=check_in_time,
            check_out_time=None,
            status=status,
            booking_id=booking_id,
            verification_method=verification_method,
            location=location,
            notes=notes,
            user_name=user.name if user else None,
            user_email=user.email if user else None,
            booking_title=booking.title if booking else None,
        )
        return self._id

    def update_checkout(self, *, attendance_id: int, check_out_time: datetime) -> bool:
        rec = self.records.get(attendance_id)
        if not rec or rec.check_out_time is not None:
            return False
        self.records[attendance_id] = dataclasses.replace(rec, check_out_time=check_out_time)
        return True


class InMemoryPayments:
    def __init__(self):
        self.payments: list[Payment] = []

    def create_payment(self, *, user_id, plan_id, amount, payment_method, payment_date, transaction_id, status) -> int:
        payment_id = len(self.payments) + 1
        self.payments.append(
            Payment(
                payment_id=payment_id,
                user_id=user_id,
                plan_id=plan_id,
                amount=amount,
                payment_method=payment_method,
                payment_date=payment_date,
                transaction_id=transaction_id,
                status=status,
            )
        )
        return payment_id

    def list_for_user(self, user_id: int):
        return [p for p in self.payments if p.user_id == user_id]


def make_user(user_id: int, name: str, role: Role, email: Optional[str] = None) -> User:
    return User(
        user_id=user_id,
        name=name,
        email=email or f"{name.lower()}@gym.test",
        password_hash=generate_password_hash(PASSWORD, method="pbkdf2:sha256:1000"),
        role=role,
    )


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2025, 1, 5, 10, 0, 0, tzinfo=UTC)


@pytest.fixture
def users_repo() -> InMemoryUsers:
    return InMemoryUsers(
        [
            make_user(1, "Admin", Role.ADMIN),
            make_user(2, "Trainer", Role.TRAINER),
            make_user(3, "Alice", Role.MEMBER),
            make_user(4, "Bob", Role.MEMBER),
        ]
    )


@pytest.fixture
def plans() -> list[MembershipPlan]:
    return [
        MembershipPlan(
            plan_id=1,
            name="Basic",
            price=Decimal("29.99"),
            duration_days=30,
            features=["Gym floor"],
            description="Gym floor access",
            category="standard",
        ),
        MembershipPlan(
            plan_id=2,
            name="Premium",
            price=Decimal("79.00"),
            duration_days=90,
            features=["Pool access", "24/7 access"],
            description="Everything included",
            category="premium",
        ),
        MembershipPlan(
            plan_id=3,
            name="Legacy",
            price=Decimal("10.00"),
            duration_days=30,
            features=["Old perks"],
            is_active=False,
        ),
    ]


@pytest.fixture
def memberships_repo(plans) -> InMemoryMemberships:
    return InMemoryMemberships(plans)


@pytest.fixture
def attendance_repo(users_repo) -> InMemoryAttendance:
    return InMemoryAttendance(users_repo)


@pytest.fixture
def payments_repo() -> InMemoryPayments:
    return InMemoryPayments()


@pytest.fixture
def container(users_repo, memberships_repo, attendance_repo, payments_repo):
    return wire(
        users_repo=users_repo,
        memberships_repo=memberships_repo,
        attendance_repo=attendance_repo,
        payments_repo=payments_repo,
    )


@pytest.fixture
def app(container):
    from src.gym_portal.gym_portal.main import create_app

    return create_app(container, settings_module="config.testing")


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def login_as(client, users_repo):
    def _login(user_id: int):
        user = users_repo.get_by_id(user_id)
        with client.session_transaction() as sess:
            sess["user_id"] = user.user_id
            sess["name"] = user.name
            sess["email"] = user.email
            sess["role"] = user.role.value
        return client

    return _login


@pytest.fixture
def password() -> str:
    return PASSWORD
