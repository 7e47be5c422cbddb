from datetime import timedelta
from decimal import Decimal

import pytest

from src.gym_portal.gym_portal.core.exceptions import ValidationError
from src.gym_portal.gym_portal.memberships.service import MembershipService


@pytest.fixture
def service(memberships_repo, users_repo):
    return MembershipService(memberships_repo, users_repo)


def test_list_plans_filters_and_paginates(service):
    page = service.list_plans(is_active=True)
    assert [p.name for p in page.data] == ["Basic", "Premium"]
    assert page.total == 2

    assert [p.name for p in service.list_plans(category="premium").data] == ["Premium"]
    assert [p.name for p in service.list_plans(search="pool").data] == []
    assert [p.name for p in service.list_plans(search="everything").data] == ["Premium"]

    page = service.list_plans(per_page=2, page=2)
    assert page.current_page == 2
    assert page.last_page == 2
    assert len(page.data) == 1


def test_create_plan_accepts_comma_separated_features(service):
    plan = service.create_plan({"name": "Student", "price": "15.50", "duration_days": 30, "features": "Gym floor, Lockers"})

    assert plan.features == ["Gym floor", "Lockers"]
    assert plan.price == Decimal("15.50")
    assert plan.is_active is True


def test_create_plan_accepts_json_features(service):
    plan = service.create_plan({"name": "Swim", "price": 20, "duration_days": 30, "features": '["Pool access"]'})
    assert plan.features == ["Pool access"]


@pytest.mark.parametrize(
    "data",
    [
        {"name": "", "price": 10, "duration_days": 30, "features": ["x"]},
        {"name": "X", "price": -1, "duration_days": 30, "features": ["x"]},
        {"name": "X", "price": 10, "duration_days": 0, "features": ["x"]},
        {"name": "X", "price": 10, "duration_days": 30, "features": ""},
    ],
)
def test_create_plan_validation(service, data):
    with pytest.raises(ValidationError):
        service.create_plan(data)


def test_update_plan_merges_over_existing(service):
    plan = service.update_plan(1, {"price": "35.00", "is_active": False})

    assert plan.name == "Basic"
    assert plan.price == Decimal("35.00")
    assert plan.is_active is False
    assert plan.features == ["Gym floor"]


def test_delete_plan_refused_when_referenced(service, memberships_repo):
    memberships_repo.referenced_plan_ids.add(1)
    with pytest.raises(ValidationError):
        service.delete_plan(1)

    service.delete_plan(2)
    assert memberships_repo.get_plan(2) is None


def test_get_missing_plan(service):
    with pytest.raises(ValidationError):
        service.get_plan(99)


def test_subscribe_creates_subscription_for_plan_duration(service, fixed_now):
    sub = service.subscribe(3, 2, now=fixed_now)

    assert sub.plan_id == 2
    assert sub.plan_name == "Premium"
    assert sub.is_active is True
    assert sub.end_date == fixed_now + timedelta(days=90)

    ent = service.entitlement_for(3, now=fixed_now)
    assert ent.is_active is True
    assert ent.display_name == "Premium"
    assert ent.expires_in_days == 90


def test_cannot_subscribe_twice_or_to_inactive_plan(service, fixed_now):
    service.subscribe(3, 1, now=fixed_now)
    with pytest.raises(ValidationError):
        service.subscribe(3, 1, now=fixed_now)
    with pytest.raises(ValidationError):
        service.subscribe(3, 3, now=fixed_now)
    with pytest.raises(ValidationError):
        service.subscribe(42, 1, now=fixed_now)


def test_plan_action_labels(service, plans, fixed_now):
    service.subscribe(3, 1, now=fixed_now)
    subs = service.subscriptions_for(3)
    basic, premium, legacy = plans

    assert service.plan_action_label(basic, subs) == "Current Plan"
    assert service.plan_action_label(premium, subs) == "Subscribe Now"
    assert service.plan_action_label(legacy, subs) == "Currently Unavailable"


def test_my_membership_without_subscriptions(service, fixed_now):
    out = service.my_membership(4, now=fixed_now)
    assert out == {
        "current_active_membership": None,
        "all_active_memberships": [],
        "has_current_active": False,
        "expires_in_days": 0,
    }


@pytest.mark.parametrize("flag, expected", [("false", False), ("0", False), ("true", True), ("1", True), (False, False)])
def test_is_active_flag_from_form_strings(service, flag, expected):
    plan = service.create_plan({"name": "Flex", "price": 12, "duration_days": 30, "features": ["Gym floor"], "is_active": flag})
    assert plan.is_active is expected
