from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, normalize_mysql_bool
from .model import User
from .repository import UserRepository


def _to_user(r: dict) -> User:
    return User(
        user_id=int(r["id"]),
        name=r["name"],
        email=r["email"],
        password_hash=r["password"],
        role=Role(r["role"]),
        is_active=normalize_mysql_bool(r.get("is_active", 1)),
    )


class MySQLUserRepository(UserRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, user_id: int) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT id, name, email, password, role, is_active
                FROM users
                WHERE id=%s
                """,
                (int(user_id),),
            )
            r = fetchone(cur)
            return _to_user(r) if r else None

    def get_by_email(self, email: str) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT id, name, email, password, role, is_active
                FROM users
                WHERE email=%s
                """,
                (email,),
            )
            r = fetchone(cur)
            return _to_user(r) if r else None

    def list_members(self) -> Sequence[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT id, name, email, password, role, is_active
                FROM users
                WHERE role=%s
                ORDER BY name ASC, id ASC
                """,
                (Role.MEMBER.value,),
            )
            return [_to_user(r) for r in fetchall(cur)]
