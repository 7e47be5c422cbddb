from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Iterable, Optional, Protocol, Sequence

from .model import MembershipPlan


class MembershipRepository(Protocol):
    """Plans plus the subscriptions members hold on them.

    Subscriptions are returned as raw API-shaped dicts (``membership_plan``
    nested) so every reader goes through the normalizer.
    """

    def list_plans(self) -> Sequence[MembershipPlan]:
        raise NotImplementedError

    def get_plan(self, plan_id: int) -> Optional[MembershipPlan]:
        raise NotImplementedError

    def create_plan(
        self,
        *,
        name: str,
        description: str,
        price: Decimal,
        duration_days: int,
        features: list[str],
        is_active: bool,
        category: Optional[str],
    ) -> int:
        raise NotImplementedError

    def update_plan(
        self,
        *,
        plan_id: int,
        name: str,
        description: str,
        price: Decimal,
        duration_days: int,
        features: list[str],
        is_active: bool,
        category: Optional[str],
    ) -> bool:
        raise NotImplementedError

    def delete_plan(self, plan_id: int) -> bool:
        """False when the plan is missing or still referenced by payments."""

        raise NotImplementedError

    def list_raw_for_user(self, user_id: int) -> Sequence[dict]:
        raise NotImplementedError

    def list_raw_for_users(self, user_ids: Iterable[int]) -> dict[int, list[dict]]:
        raise NotImplementedError

    def create_subscription(
        self,
        *,
        user_id: int,
        plan_id: int,
        start_date: datetime,
        end_date: datetime,
        is_active: bool = True,
    ) -> int:
        raise NotImplementedError
