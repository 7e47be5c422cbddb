from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterable, Optional, Sequence

from ..common.datetime_utils import ensure_aware, isoformat
from ..core.constants import NO_MEMBERSHIP_LABEL
from .model import Subscription

_SECONDS_PER_DAY = 86400
_NO_END = datetime.min.replace(tzinfo=timezone.utc)


@dataclass(frozen=True)
class Entitlement:
    """Current access state of one subject, derived from its subscriptions."""

    is_active: bool
    current: Optional[Subscription]
    display_name: str
    expires_in_days: int
    expiry_phrase: Optional[str]
    end_date: Optional[datetime]

    def to_dict(self) -> dict:
        return {
            "is_active": self.is_active,
            "current": self.current.to_dict() if self.current else None,
            "display_name": self.display_name,
            "expires_in_days": self.expires_in_days,
            "expiry_phrase": self.expiry_phrase,
            "end_date": isoformat(self.end_date),
        }


def _rank(sub: Subscription) -> tuple[datetime, int]:
    # latest end_date first, then most recently created
    return (ensure_aware(sub.end_date) if sub.end_date else _NO_END, sub.subscription_id)


def pick_current(subscriptions: Iterable[Subscription]) -> Optional[Subscription]:
    active = [s for s in subscriptions if s.is_active]
    if not active:
        return None
    return max(active, key=_rank)


def display_name(sub: Optional[Subscription]) -> str:
    if sub is None:
        return NO_MEMBERSHIP_LABEL
    if sub.plan_name:
        return sub.plan_name
    if sub.plan_id is not None:
        return f"Plan #{sub.plan_id}"
    return f"Plan #{sub.subscription_id}"


def _remaining_days(end_date: Optional[datetime], now: datetime) -> float:
    if end_date is None:
        return 0.0
    return (ensure_aware(end_date) - ensure_aware(now)).total_seconds() / _SECONDS_PER_DAY


def days_until(end_date: Optional[datetime], now: datetime) -> int:
    """Whole days left, rounded up; expired-but-flagged-active gives 0."""
    return max(math.ceil(_remaining_days(end_date, now)), 0)


def expiry_phrase(days: int) -> str:
    if days > 1:
        return f"Expires in {days} days"
    if days == 1:
        return "Expires tomorrow"
    return "Expires today"


def resolve(subscriptions: Sequence[Subscription], now: datetime) -> Entitlement:
    """Entitlement of one subject at `now`.

    `expires_in_days` rounds partial days up while the phrase counts whole
    days left, so 36h reads "Expires tomorrow" with `expires_in_days == 2`.
    """

    current = pick_current(subscriptions)
    shown = current or (max(subscriptions, key=_rank) if subscriptions else None)

    phrase = None
    expires = 0
    if current is not None:
        expires = days_until(current.end_date, now)
        phrase = expiry_phrase(max(math.floor(_remaining_days(current.end_date, now)), 0))

    return Entitlement(
        is_active=current is not None,
        current=current,
        display_name=display_name(shown),
        expires_in_days=expires,
        expiry_phrase=phrase,
        end_date=shown.end_date if shown else None,
    )


def is_subscribed(subscriptions: Iterable[Subscription], plan_id: int) -> bool:
    return any(s.is_active and s.plan_id == plan_id for s in subscriptions)


def summary(subscriptions: Sequence[Subscription], now: datetime) -> dict:
    """Rebuild the `/my-membership` summary payload from canonical records."""

    entitlement = resolve(subscriptions, now)
    active = sorted((s for s in subscriptions if s.is_active), key=_rank, reverse=True)
    return {
        "current_active_membership": entitlement.current.to_dict() if entitlement.current else None,
        "all_active_memberships": [s.to_dict() for s in active],
        "has_current_active": entitlement.is_active,
        "expires_in_days": entitlement.expires_in_days,
    }
