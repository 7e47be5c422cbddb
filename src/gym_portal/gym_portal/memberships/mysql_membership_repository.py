from __future__ import annotations

import json
from datetime import datetime
from decimal import Decimal
from typing import Iterable, Optional, Sequence

from mysql.connector import errors as mysql_errors

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, normalize_mysql_bool, optional_int, to_db_datetime
from .model import MembershipPlan
from .normalizer import parse_features
from .repository import MembershipRepository

_PLAN_COLUMNS = "id, name, description, price, duration_days, features, is_active, category"

_SUBSCRIPTION_SELECT = """
    SELECT
        m.id, m.user_id, m.membership_plan_id, m.start_date, m.end_date, m.is_active,
        p.name AS plan_name, p.price AS plan_price, p.duration_days AS plan_duration_days,
        p.features AS plan_features
    FROM memberships m
    LEFT JOIN membership_plans p ON p.id = m.membership_plan_id
"""


def _to_plan(r: dict) -> MembershipPlan:
    return MembershipPlan(
        plan_id=int(r["id"]),
        name=r["name"],
        description=r.get("description") or "",
        price=Decimal(str(r.get("price") or 0)),
        duration_days=int(r["duration_days"]),
        features=parse_features(r.get("features")),
        is_active=normalize_mysql_bool(r.get("is_active")),
        category=r.get("category"),
    )


def _to_raw_subscription(r: dict) -> dict:
    """Shape a joined row like the API's membership object."""

    return {
        "id": int(r["id"]),
        "user_id": optional_int(r.get("user_id")),
        "membership_plan_id": optional_int(r.get("membership_plan_id")),
        "start_date": r.get("start_date"),
        "end_date": r.get("end_date"),
        "is_active": normalize_mysql_bool(r.get("is_active")),
        "membership_plan": {
            "id": optional_int(r.get("membership_plan_id")),
            "name": r.get("plan_name"),
            "price": r.get("plan_price"),
            "duration_days": r.get("plan_duration_days"),
            "features": r.get("plan_features"),
        },
    }


class MySQLMembershipRepository(MembershipRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_plans(self) -> Sequence[MembershipPlan]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_PLAN_COLUMNS} FROM membership_plans ORDER BY price ASC, id ASC")
            return [_to_plan(r) for r in fetchall(cur)]

    def get_plan(self, plan_id: int) -> Optional[MembershipPlan]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_PLAN_COLUMNS} FROM membership_plans WHERE id=%s", (int(plan_id),))
            r = fetchone(cur)
            return _to_plan(r) if r else None

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
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO membership_plans(name, description, price, duration_days, features, is_active, category)
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                """,
                (name, description, price, int(duration_days), json.dumps(features), int(is_active), category),
            )
            return int(cur.lastrowid)

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
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE membership_plans
                SET name=%s, description=%s, price=%s, duration_days=%s, features=%s, is_active=%s, category=%s
                WHERE id=%s
                """,
                (name, description, price, int(duration_days), json.dumps(features), int(is_active), category, int(plan_id)),
            )
            return cur.rowcount > 0

    def delete_plan(self, plan_id: int) -> bool:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute("DELETE FROM membership_plans WHERE id=%s", (int(plan_id),))
                return cur.rowcount > 0
        except mysql_errors.IntegrityError:
            # still referenced by subscriptions/payments
            return False

    def list_raw_for_user(self, user_id: int) -> Sequence[dict]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SUBSCRIPTION_SELECT + " WHERE m.user_id=%s ORDER BY m.end_date DESC, m.id DESC", (int(user_id),))
            return [_to_raw_subscription(r) for r in fetchall(cur)]

    def list_raw_for_users(self, user_ids: Iterable[int]) -> dict[int, list[dict]]:
        ids = [int(i) for i in user_ids]
        grouped: dict[int, list[dict]] = {i: [] for i in ids}
        if not ids:
            return grouped

        placeholders = ",".join(["%s"] * len(ids))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SUBSCRIPTION_SELECT + f" WHERE m.user_id IN ({placeholders})", tuple(ids))
            for r in fetchall(cur):
                grouped.setdefault(int(r["user_id"]), []).append(_to_raw_subscription(r))
        return grouped

    def create_subscription(
        self,
        *,
        user_id: int,
        plan_id: int,
        start_date: datetime,
        end_date: datetime,
        is_active: bool = True,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO memberships(user_id, membership_plan_id, start_date, end_date, is_active)
                VALUES(%s,%s,%s,%s,%s)
                """,
                (int(user_id), int(plan_id), to_db_datetime(start_date), to_db_datetime(end_date), int(is_active)),
            )
            return int(cur.lastrowid)
