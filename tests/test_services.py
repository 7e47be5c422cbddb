from __future__ import annotations

from datetime import timedelta

import pytest

from src.gym_portal.gym_portal.core.enums import Role
from src.gym_portal.gym_portal.core.exceptions import AuthenticationError, ValidationError
from src.gym_portal.gym_portal.users.model import User
from src.gym_portal.gym_portal.users.service import AuthService, MemberDirectoryService


def test_auth_service_success(users_repo, password):
    svc = AuthService(users_repo)
    su = svc.authenticate("ALICE@gym.test", password)
    assert su.user_id == 3
    assert su.role == Role.MEMBER


def test_auth_service_wrong_password(users_repo):
    svc = AuthService(users_repo)
    with pytest.raises(AuthenticationError):
        svc.authenticate("alice@gym.test", "wrong")


def test_auth_service_unknown_email(users_repo, password):
    with pytest.raises(AuthenticationError):
        AuthService(users_repo).authenticate("nobody@gym.test", password)


def test_auth_service_corrupted_hash(users_repo):
    users_repo.users_by_id[9] = User(user_id=9, name="Eve", email="eve@gym.test", password_hash="not-a-hash", role=Role.MEMBER)
    with pytest.raises(AuthenticationError):
        AuthService(users_repo).authenticate("eve@gym.test", "anything")


def test_auth_service_inactive_user(users_repo, password):
    users_repo.users_by_id[9] = User(
        user_id=9,
        name="Gone",
        email="gone@gym.test",
        password_hash=users_repo.get_by_id(3).password_hash,
        role=Role.MEMBER,
        is_active=False,
    )
    with pytest.raises(AuthenticationError):
        AuthService(users_repo).authenticate("gone@gym.test", password)


def test_auth_service_requires_email(users_repo, password):
    with pytest.raises(ValidationError):
        AuthService(users_repo).authenticate("", password)


@pytest.fixture
def directory(users_repo, memberships_repo, fixed_now):
    memberships_repo.create_subscription(
        user_id=3,
        plan_id=2,
        start_date=fixed_now - timedelta(days=10),
        end_date=fixed_now + timedelta(days=80),
    )
    memberships_repo.create_subscription(
        user_id=4,
        plan_id=1,
        start_date=fixed_now - timedelta(days=60),
        end_date=fixed_now - timedelta(days=30),
        is_active=False,
    )
    return MemberDirectoryService(users_repo, memberships_repo)


def test_member_directory_lists_only_members(directory, fixed_now):
    page = directory.list_members(now=fixed_now)
    rows = [m.to_dict() for m in page.data]

    assert [r["name"] for r in rows] == ["Alice", "Bob"]
    alice, bob = rows
    assert alice["membership_status"] == "active"
    assert alice["membership_name"] == "Premium"
    assert alice["membership_end_date"] == (fixed_now + timedelta(days=80)).date().isoformat()
    assert alice["entitlement"]["expires_in_days"] == 80
    assert bob["membership_status"] == "inactive"
    assert bob["membership_name"] == "Basic"


def test_member_directory_status_and_search(directory, fixed_now):
    assert [m.user.name for m in directory.list_members(status="active", now=fixed_now).data] == ["Alice"]
    assert [m.user.name for m in directory.list_members(status="inactive", now=fixed_now).data] == ["Bob"]
    assert [m.user.name for m in directory.list_members(search="bob", now=fixed_now).data] == ["Bob"]
    with pytest.raises(ValidationError):
        directory.list_members(status="expired", now=fixed_now)


def test_member_without_any_membership(users_repo, memberships_repo, fixed_now):
    page = MemberDirectoryService(users_repo, memberships_repo).list_members(now=fixed_now)
    row = page.data[0].to_dict()

    assert row["membership_status"] == "inactive"
    assert row["membership_name"] == "No membership"
    assert row["membership_end_date"] == "-"
