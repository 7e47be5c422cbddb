from datetime import datetime, timedelta, timezone

from src.gym_portal.gym_portal.memberships import resolver
from src.gym_portal.gym_portal.memberships.model import Subscription

UTC = timezone.utc
NOW = datetime(2025, 1, 5, 10, 0, tzinfo=UTC)


def _sub(subscription_id, end, *, plan_id=1, is_active=True, plan_name="Basic"):
    return Subscription(
        subscription_id=subscription_id,
        user_id=3,
        plan_id=plan_id,
        start_date=NOW - timedelta(days=10),
        end_date=end,
        is_active=is_active,
        plan_name=plan_name,
    )


def test_latest_end_date_wins():
    older = _sub(1, NOW + timedelta(days=3))
    newer = _sub(2, NOW + timedelta(days=30), plan_name="Premium")
    assert resolver.pick_current([newer, older]) is newer
    assert resolver.pick_current([older, newer]) is newer


def test_equal_end_dates_tie_break_on_higher_id():
    end = NOW + timedelta(days=10)
    a = _sub(5, end)
    b = _sub(9, end)
    assert resolver.pick_current([a, b]).subscription_id == 9
    assert resolver.pick_current([b, a]).subscription_id == 9


def test_inactive_subscriptions_are_never_current():
    sub = _sub(1, NOW + timedelta(days=10), is_active=False)
    ent = resolver.resolve([sub], NOW)

    assert ent.is_active is False
    assert ent.current is None
    assert ent.expiry_phrase is None
    assert ent.expires_in_days == 0
    # name still shows the latest plan the member had
    assert ent.display_name == "Basic"


def test_no_subscriptions():
    ent = resolver.resolve([], NOW)
    assert ent.display_name == "No membership"
    assert ent.end_date is None


def test_expires_in_days_rounds_up():
    ent = resolver.resolve([_sub(1, NOW + timedelta(hours=36))], NOW)
    assert ent.expires_in_days == 2


def test_expiring_now_is_today():
    ent = resolver.resolve([_sub(1, NOW)], NOW)
    assert ent.expires_in_days == 0
    assert ent.expiry_phrase == "Expires today"


def test_expired_but_flagged_active_floors_at_zero():
    ent = resolver.resolve([_sub(1, NOW - timedelta(days=3))], NOW)
    assert ent.is_active is True
    assert ent.expires_in_days == 0
    assert ent.expiry_phrase == "Expires today"


def test_expiry_phrases():
    assert resolver.resolve([_sub(1, NOW + timedelta(hours=25))], NOW).expiry_phrase == "Expires tomorrow"
    assert resolver.resolve([_sub(1, NOW + timedelta(days=12))], NOW).expiry_phrase == "Expires in 12 days"


def test_naive_end_date_is_treated_as_utc():
    naive_end = (NOW + timedelta(days=2)).replace(tzinfo=None)
    assert resolver.days_until(naive_end, NOW) == 2


def test_display_name_falls_back_to_plan_id():
    sub = _sub(4, NOW + timedelta(days=1), plan_id=12, plan_name=None)
    assert resolver.display_name(sub) == "Plan #12"


def test_is_subscribed_matches_plan_not_subscription_id():
    sub = _sub(2, NOW + timedelta(days=5), plan_id=7)
    assert resolver.is_subscribed([sub], 7) is True
    assert resolver.is_subscribed([sub], 2) is False


def test_summary_lists_active_newest_first():
    a = _sub(1, NOW + timedelta(days=3))
    b = _sub(2, NOW + timedelta(days=30), plan_name="Premium")
    c = _sub(3, NOW + timedelta(days=60), is_active=False)
    out = resolver.summary([a, b, c], NOW)

    assert out["has_current_active"] is True
    assert out["current_active_membership"]["id"] == 2
    assert [m["id"] for m in out["all_active_memberships"]] == [2, 1]
    assert out["expires_in_days"] == 30


def test_same_day_end_dates_pick_higher_id_every_time():
    end = datetime(2025, 1, 10, tzinfo=UTC)
    a = _sub(5, end)
    b = _sub(9, end)
    for subs in ([a, b], [b, a], [a, b]):
        assert resolver.resolve(subs, NOW).current.subscription_id == 9


def test_active_iff_any_subscription_flagged_active():
    inactive = _sub(1, NOW + timedelta(days=5), is_active=False)
    active = _sub(2, NOW - timedelta(days=5))
    assert resolver.resolve([inactive], NOW).is_active is False
    assert resolver.resolve([inactive, active], NOW).is_active is True
    assert resolver.resolve([], NOW).is_active is False


def test_mixed_naive_and_aware_end_dates():
    naive = _sub(1, datetime(2025, 2, 1))
    aware = _sub(2, datetime(2025, 3, 1, tzinfo=UTC), plan_name="Premium")
    open_ended = _sub(3, None)

    ent = resolver.resolve([naive, aware, open_ended], NOW)
    assert ent.current.subscription_id == 2

    later_naive = _sub(4, datetime(2025, 4, 1))
    assert resolver.pick_current([aware, later_naive]).subscription_id == 4
    assert resolver.pick_current([open_ended, naive]).subscription_id == 1
