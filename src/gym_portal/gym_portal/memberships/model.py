from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Optional


@dataclass(frozen=True)
class MembershipPlan:
    """Domain entity: a purchasable membership plan."""

    plan_id: int
    name: str
    price: Decimal
    duration_days: int
    features: list[str] = field(default_factory=list)
    is_active: bool = True
    description: str = ""
    category: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "id": self.plan_id,
            "name": self.name,
            "description": self.description,
            "price": float(self.price),
            "duration_days": self.duration_days,
            "duration_months": self.duration_days // 30,
            "features": list(self.features),
            "is_active": self.is_active,
            "category": self.category,
        }


@dataclass(frozen=True)
class Subscription:
    """A subject's instance of a plan, with plan fields inlined.

    `plan_name`, `price` and `features` are denormalized from the plan so
    readers never dereference the plan separately.
    """

    subscription_id: int
    user_id: Optional[int]
    plan_id: Optional[int]
    start_date: Optional[datetime]
    end_date: Optional[datetime]
    is_active: bool
    plan_name: Optional[str] = None
    price: Optional[Decimal] = None
    features: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "id": self.subscription_id,
            "user_id": self.user_id,
            "membership_plan_id": self.plan_id,
            "start_date": self.start_date.isoformat() if self.start_date else None,
            "end_date": self.end_date.isoformat() if self.end_date else None,
            "is_active": self.is_active,
            "membership_plan": {
                "id": self.plan_id,
                "name": self.plan_name,
                "price": float(self.price) if self.price is not None else None,
                "features": list(self.features),
            },
        }
