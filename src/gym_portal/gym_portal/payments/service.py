from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional

from ..common.datetime_utils import ensure_aware, now_utc
from ..common.validators import require_decimal, require_min_length
from ..core.enums import PaymentMethod, PaymentStatus
from ..core.exceptions import PaymentDeclined, ValidationError
from ..memberships.service import MembershipService
from .gateway import OfflinePaymentGateway, PaymentGateway
from .model import Payment, PaymentForm, PaymentReceipt
from .repository import PaymentRepository

logger = logging.getLogger(__name__)

_EXPIRY_RE = re.compile(r"^(0[1-9]|1[0-2])/([0-9]{2})$")


@dataclass(frozen=True)
class ValidatedPayment:
    amount: Decimal
    method: PaymentMethod
    card_digits: str


def validate_payment_form(form: PaymentForm) -> ValidatedPayment:
    digits = re.sub(r"[\s-]", "", form.card_number)
    if not digits.isdigit() or len(digits) < 16:
        raise ValidationError("Card number must be at least 16 digits")
    if not _EXPIRY_RE.match(form.expiry_date.strip()):
        raise ValidationError("Expiry date must be in MM/YY format")
    cvv = form.cvv.strip()
    if not cvv.isdigit() or len(cvv) < 3:
        raise ValidationError("CVV must be at least 3 digits")
    try:
        method = PaymentMethod(form.payment_method)
    except ValueError:
        raise ValidationError("Payment method must be credit or debit") from None
    require_min_length(form.name_on_card.strip(), "Name on card", 3)
    amount = require_decimal(form.amount, "Amount", strict=True)

    return ValidatedPayment(amount=amount, method=method, card_digits=digits)


class PaymentService:
    """Use case: member pays for a plan, then gets subscribed to it."""

    def __init__(
        self,
        payments: PaymentRepository,
        memberships: MembershipService,
        *,
        gateway: PaymentGateway | None = None,
    ):
        self._payments = payments
        self._memberships = memberships
        self._gateway = gateway or OfflinePaymentGateway()

    def pay(
        self,
        user_id: int,
        form: PaymentForm,
        *,
        plan_id: Optional[int] = None,
        now: datetime | None = None,
    ) -> PaymentReceipt:
        now = ensure_aware(now or now_utc())
        checked = validate_payment_form(form)

        if plan_id is not None:
            plan = self._memberships.check_can_subscribe(user_id, plan_id)
            if checked.amount != plan.price:
                raise ValidationError(f"Amount must match the plan price of {plan.price}")

        transaction_id = f"TXN-{int(now.timestamp() * 1000)}"
        approved = self._gateway.charge(
            amount=checked.amount,
            method=checked.method,
            card_last4=checked.card_digits[-4:],
            reference=transaction_id,
        )
        status = PaymentStatus.COMPLETED if approved else PaymentStatus.FAILED

        payment_id = self._payments.create_payment(
            user_id=user_id,
            plan_id=plan_id,
            amount=checked.amount,
            payment_method=checked.method,
            payment_date=now,
            transaction_id=transaction_id,
            status=status,
        )
        payment = Payment(
            payment_id=payment_id,
            user_id=user_id,
            plan_id=plan_id,
            amount=checked.amount,
            payment_method=checked.method,
            payment_date=now,
            transaction_id=transaction_id,
            status=status,
        )

        if not approved:
            logger.warning("payment %s declined for user %s", transaction_id, user_id)
            raise PaymentDeclined("Payment failed. Please try again.")

        logger.info("payment %s completed for user %s (%s)", transaction_id, user_id, checked.amount)
        subscription = None
        if plan_id is not None:
            subscription = self._memberships.subscribe(user_id, plan_id, now=now)
        return PaymentReceipt(payment=payment, subscription=subscription)

    def list_payments(self, user_id: int) -> list[Payment]:
        return list(self._payments.list_for_user(user_id))
