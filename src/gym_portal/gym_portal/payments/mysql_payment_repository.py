from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional, Sequence

from ..common.datetime_utils import parse_datetime
from ..core.enums import PaymentMethod, PaymentStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, optional_int, to_db_datetime
from .model import Payment
from .repository import PaymentRepository


class MySQLPaymentRepository(PaymentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

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
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO payments(user_id, membership_plan_id, amount, payment_method, payment_date, transaction_id, status)
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(user_id),
                    plan_id,
                    amount,
                    payment_method.value,
                    to_db_datetime(payment_date),
                    transaction_id,
                    status.value,
                ),
            )
            return int(cur.lastrowid)

    def list_for_user(self, user_id: int) -> Sequence[Payment]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT id, user_id, membership_plan_id, amount, payment_method, payment_date, transaction_id, status
                FROM payments
                WHERE user_id=%s
                ORDER BY payment_date DESC, id DESC
                """,
                (int(user_id),),
            )
            return [
                Payment(
                    payment_id=int(r["id"]),
                    user_id=int(r["user_id"]),
                    plan_id=optional_int(r.get("membership_plan_id")),
                    amount=Decimal(str(r["amount"])),
                    payment_method=PaymentMethod(r["payment_method"]),
                    payment_date=parse_datetime(r["payment_date"]),
                    transaction_id=r["transaction_id"],
                    status=PaymentStatus(r["status"]),
                )
                for r in fetchall(cur)
            ]
