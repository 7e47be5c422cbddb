from __future__ import annotations

from dataclasses import dataclass

from ..core.enums import Role


@dataclass(frozen=True)
class User:
    """Domain entity: a gym user (member, trainer or admin).

    Plain data object, no database access.
    """

    user_id: int
    name: str
    email: str
    password_hash: str
    role: Role
    is_active: bool = True
