from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Any, Optional

from ..common.datetime_utils import ensure_aware, now_utc
from ..common.pagination import Page, matches_search, paginate
from ..common.validators import parse_bool, require_decimal, require_non_empty, require_positive_int
from ..core.constants import PLANS_PER_PAGE
from ..core.exceptions import ValidationError
from ..users.repository import UserRepository
from . import resolver
from .model import MembershipPlan, Subscription
from .normalizer import normalize, parse_features, split_feature_input
from .repository import MembershipRepository
from .resolver import Entitlement

logger = logging.getLogger(__name__)

_PLAN_FIELDS = ("name", "description", "price", "duration_days", "features", "is_active", "category")


class MembershipService:
    """Use cases around plans, subscriptions and entitlements."""

    def __init__(self, memberships: MembershipRepository, users: UserRepository):
        self._memberships = memberships
        self._users = users

    # ----- plans -----

    def list_plans(
        self,
        *,
        is_active: Optional[bool] = None,
        search: str = "",
        category: Optional[str] = None,
        page: int = 1,
        per_page: int = PLANS_PER_PAGE,
    ) -> Page[MembershipPlan]:
        plans = [
            p
            for p in self._memberships.list_plans()
            if (is_active is None or p.is_active == is_active)
            and (not category or (p.category or "").lower() == category.lower())
            and matches_search(search, p.name, p.description, p.category)
        ]
        return paginate(plans, page, per_page)

    def get_plan(self, plan_id: int) -> MembershipPlan:
        plan = self._memberships.get_plan(plan_id)
        if not plan:
            raise ValidationError("Membership plan not found")
        return plan

    def create_plan(self, data: dict) -> MembershipPlan:
        fields = self._validate_plan(data)
        plan_id = self._memberships.create_plan(**fields)
        logger.info("membership plan %s created: %s", plan_id, fields["name"])
        return self.get_plan(plan_id)

    def update_plan(self, plan_id: int, data: dict) -> MembershipPlan:
        existing = self.get_plan(plan_id)
        merged = existing.to_dict()
        merged.update({k: v for k, v in data.items() if k in _PLAN_FIELDS})

        fields = self._validate_plan(merged)
        if not self._memberships.update_plan(plan_id=plan_id, **fields):
            raise ValidationError("Failed to update membership plan")
        return self.get_plan(plan_id)

    def delete_plan(self, plan_id: int) -> None:
        self.get_plan(plan_id)
        if not self._memberships.delete_plan(plan_id):
            raise ValidationError("Membership plan is referenced by payment history and cannot be deleted")
        logger.info("membership plan %s deleted", plan_id)

    def _validate_plan(self, data: dict) -> dict[str, Any]:
        features = data.get("features")
        if isinstance(features, str):
            features = parse_features(features) if features.strip().startswith("[") else split_feature_input(features)
        else:
            features = parse_features(features)
        if not features:
            raise ValidationError("Features must be provided")

        category = (data.get("category") or "").strip() or None
        return {
            "name": require_non_empty(data.get("name", ""), "Name"),
            "description": (data.get("description") or "").strip(),
            "price": require_decimal(data.get("price", 0), "Price"),
            "duration_days": require_positive_int(data.get("duration_days"), "Duration"),
            "features": features,
            "is_active": parse_bool(data.get("is_active", True)),
            "category": category,
        }

    # ----- subscriptions / entitlement -----

    def subscriptions_for(self, user_id: int) -> list[Subscription]:
        return normalize(list(self._memberships.list_raw_for_user(user_id)))

    def entitlement_for(self, user_id: int, *, now: Optional[datetime] = None) -> Entitlement:
        return resolver.resolve(self.subscriptions_for(user_id), now or now_utc())

    def my_membership(self, user_id: int, *, now: Optional[datetime] = None) -> dict:
        return resolver.summary(self.subscriptions_for(user_id), now or now_utc())

    def plan_action_label(self, plan: MembershipPlan, subscriptions: list[Subscription]) -> str:
        if resolver.is_subscribed(subscriptions, plan.plan_id):
            return "Current Plan"
        return "Subscribe Now" if plan.is_active else "Currently Unavailable"

    def check_can_subscribe(self, user_id: int, plan_id: int) -> MembershipPlan:
        if not self._users.get_by_id(user_id):
            raise ValidationError("Member not found")

        plan = self.get_plan(plan_id)
        if not plan.is_active:
            raise ValidationError("This membership plan is currently unavailable")

        if resolver.is_subscribed(self.subscriptions_for(user_id), plan.plan_id):
            raise ValidationError("You are already subscribed to this plan")
        return plan

    def subscribe(self, user_id: int, plan_id: int, *, now: Optional[datetime] = None) -> Subscription:
        now = ensure_aware(now or now_utc())
        plan = self.check_can_subscribe(user_id, plan_id)

        end = now + timedelta(days=plan.duration_days)
        subscription_id = self._memberships.create_subscription(
            user_id=user_id,
            plan_id=plan.plan_id,
            start_date=now,
            end_date=end,
        )
        logger.info("user %s subscribed to plan %s (membership %s)", user_id, plan.plan_id, subscription_id)

        for sub in self.subscriptions_for(user_id):
            if sub.subscription_id == subscription_id:
                return sub
        return Subscription(
            subscription_id=subscription_id,
            user_id=user_id,
            plan_id=plan.plan_id,
            start_date=now,
            end_date=end,
            is_active=True,
            plan_name=plan.name,
            price=plan.price,
            features=list(plan.features),
        )
