from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from werkzeug.security import check_password_hash

from ..common.datetime_utils import now_utc
from ..common.pagination import Page, matches_search, paginate
from ..common.validators import require_non_empty
from ..core.constants import MEMBERS_PER_PAGE
from ..core.enums import Role
from ..core.exceptions import AuthenticationError, ValidationError
from ..memberships import resolver
from ..memberships.normalizer import normalize
from ..memberships.repository import MembershipRepository
from ..memberships.resolver import Entitlement
from .model import User
from .repository import UserRepository

MEMBER_STATUS_FILTERS = ("all", "active", "inactive")


@dataclass(frozen=True)
class SessionUser:
    """What we store into the Flask session after login."""

    user_id: int
    name: str
    email: str
    role: Role


@dataclass(frozen=True)
class MemberView:
    user: User
    entitlement: Entitlement

    def to_dict(self) -> dict:
        return {
            "id": self.user.user_id,
            "name": self.user.name,
            "email": self.user.email,
            "membership_status": "active" if self.entitlement.is_active else "inactive",
            "membership_name": self.entitlement.display_name,
            "membership_end_date": self.entitlement.end_date.date().isoformat() if self.entitlement.end_date else "-",
            "entitlement": self.entitlement.to_dict(),
        }


class AuthService:
    """Use case: authenticate user (login)."""

    def __init__(self, users: UserRepository):
        self._users = users

    def authenticate(self, email: str, password: str) -> SessionUser:
        email = require_non_empty(email, "Email").lower()
        user = self._users.get_by_email(email)
        if not user or not user.is_active:
            raise AuthenticationError("Invalid email or password")

        try:
            ok = check_password_hash(user.password_hash, password or "")
        except ValueError:
            # placeholder or corrupted hash in the user table
            ok = False

        if not ok:
            raise AuthenticationError("Invalid email or password")

        return SessionUser(user_id=user.user_id, name=user.name, email=user.email, role=user.role)


class MemberDirectoryService:
    """Use case: member list with membership status (admin/trainer screens)."""

    def __init__(self, users: UserRepository, memberships: MembershipRepository):
        self._users = users
        self._memberships = memberships

    def list_members(
        self,
        *,
        status: str = "all",
        search: str = "",
        page: int = 1,
        per_page: int = MEMBERS_PER_PAGE,
        now: Optional[datetime] = None,
    ) -> Page[MemberView]:
        status = (status or "all").lower()
        if status not in MEMBER_STATUS_FILTERS:
            raise ValidationError(f"Unknown status filter: {status}")

        now = now or now_utc()
        members = [m for m in self._users.list_members() if matches_search(search, m.name, m.email)]
        raw_by_user = self._memberships.list_raw_for_users(m.user_id for m in members)

        views = []
        for m in members:
            entitlement = resolver.resolve(normalize(raw_by_user.get(m.user_id, [])), now)
            if status == "active" and not entitlement.is_active:
                continue
            if status == "inactive" and entitlement.is_active:
                continue
            views.append(MemberView(user=m, entitlement=entitlement))

        return paginate(views, page, per_page)
