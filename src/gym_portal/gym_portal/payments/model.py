from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional

from ..common.datetime_utils import isoformat
from ..core.enums import PaymentMethod, PaymentStatus
from ..memberships.model import Subscription


@dataclass(frozen=True)
class PaymentForm:
    """Card details as submitted by the member; never persisted."""

    card_number: str
    expiry_date: str
    cvv: str
    payment_method: str
    amount: str
    name_on_card: str

    @classmethod
    def from_dict(cls, data: dict) -> "PaymentForm":
        return cls(
            card_number=str(data.get("card_number") or ""),
            expiry_date=str(data.get("expiry_date") or ""),
            cvv=str(data.get("cvv") or ""),
            payment_method=str(data.get("payment_method") or PaymentMethod.CREDIT.value),
            amount=str(data.get("amount") or ""),
            name_on_card=str(data.get("name_on_card") or ""),
        )


@dataclass(frozen=True)
class Payment:
    payment_id: int
    user_id: int
    plan_id: Optional[int]
    amount: Decimal
    payment_method: PaymentMethod
    payment_date: datetime
    transaction_id: str
    status: PaymentStatus

    def to_dict(self) -> dict:
        return {
            "id": self.payment_id,
            "user_id": self.user_id,
            "membership_plan_id": self.plan_id,
            "amount": float(self.amount),
            "payment_method": self.payment_method.value,
            "payment_date": isoformat(self.payment_date),
            "transaction_id": self.transaction_id,
            "status": self.status.value,
        }


@dataclass(frozen=True)
class PaymentReceipt:
    payment: Payment
    subscription: Optional[Subscription]

    def to_dict(self) -> dict:
        return {
            "payment": self.payment.to_dict(),
            "subscription": self.subscription.to_dict() if self.subscription else None,
        }
