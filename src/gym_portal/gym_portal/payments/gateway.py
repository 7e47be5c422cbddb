from __future__ import annotations

import logging
from decimal import Decimal
from typing import Protocol

from ..core.enums import PaymentMethod

logger = logging.getLogger(__name__)


class PaymentGateway(Protocol):
    """Black box: charge the card, report success or failure."""

    def charge(self, *, amount: Decimal, method: PaymentMethod, card_last4: str, reference: str) -> bool:
        raise NotImplementedError


class OfflinePaymentGateway:
    """Front-desk gateway: the payment was taken at the counter, accept it."""

    def charge(self, *, amount: Decimal, method: PaymentMethod, card_last4: str, reference: str) -> bool:
        logger.info("offline charge %s: %s via %s card ****%s", reference, amount, method.value, card_last4)
        return True
