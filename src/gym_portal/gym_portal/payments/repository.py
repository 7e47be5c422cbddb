from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional, Protocol, Sequence

from ..core.enums import PaymentMethod, PaymentStatus
from .model import Payment


class PaymentRepository(Protocol):
    def create_payment(
        self,
        *,
        user_id: int,
        plan_id: Optional[int],
        amount: Decimal,
        payment_method: PaymentMethod,
        payment_date: datetime,
        transaction_id: str,
        status: PaymentStatus,
    ) -> int:
        raise NotImplementedError

    def list_for_user(self, user_id: int) -> Sequence[Payment]:
        raise NotImplementedError
