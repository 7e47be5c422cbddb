"""Reduce the membership payload shapes the API returns to one list.

Three shapes reach us:

* ``{"membership": {...} | None}`` on a member object,
* ``{"memberships": [...]}`` (or a bare list),
* the ``/my-membership`` summary with ``current_active_membership``,
  ``all_active_memberships``, ``has_current_active`` and ``expires_in_days``.

Each is modelled as its own type; :func:`normalize` turns any of them into
``list[Subscription]`` and never raises.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import timedelta
from decimal import Decimal, InvalidOperation
from typing import Any, Optional, Union

from ..common.datetime_utils import parse_datetime
from ..common.validators import parse_bool
from ..core.exceptions import MalformedInput
from .model import Subscription

logger = logging.getLogger(__name__)

SINGLE_KEYS = ("membership",)
ARRAY_KEYS = ("memberships",)
SUMMARY_KEYS = (
    "current_active_membership",
    "all_active_memberships",
    "has_current_active",
    "expires_in_days",
)


@dataclass(frozen=True)
class SingleMembership:
    record: Optional[Mapping]


@dataclass(frozen=True)
class MembershipArray:
    records: list


@dataclass(frozen=True)
class SummaryWrapper:
    current: Optional[Mapping]
    all_active: list
    has_current_active: bool
    expires_in_days: int


MembershipPayload = Union[SingleMembership, MembershipArray, SummaryWrapper]


def parse_features(value: Any) -> list[str]:
    """Features arrive as a list or as a JSON-encoded string.

    A string that is not a JSON list is kept whole as one feature.
    """

    if value is None:
        return []

    if isinstance(value, (list, tuple)):
        return [str(v) for v in value if v is not None]

    if isinstance(value, str):
        raw = value.strip()
        if not raw:
            return []
        try:
            decoded = json.loads(raw)
        except ValueError:
            logger.debug("features are not JSON, keeping raw string: %r", raw)
            return [value]
        if isinstance(decoded, list):
            return [str(v) for v in decoded if v is not None]
        if isinstance(decoded, str):
            return [decoded] if decoded else []
        return [value]

    return [str(value)]


def split_feature_input(value: str) -> list[str]:
    """Admin form field: comma separated features."""
    return [part.strip() for part in (value or "").split(",") if part.strip()]


def _present(payload: Mapping, keys: tuple[str, ...]) -> bool:
    return any(payload.get(k) is not None for k in keys)


def classify(payload: Any) -> MembershipPayload:
    if isinstance(payload, (list, tuple)):
        return MembershipArray(records=list(payload))

    if not isinstance(payload, Mapping):
        raise MalformedInput(f"unsupported membership payload type: {type(payload).__name__}")

    shapes = [
        name
        for name, keys in (("single", SINGLE_KEYS), ("array", ARRAY_KEYS), ("summary", SUMMARY_KEYS))
        if _present(payload, keys)
    ]
    if len(shapes) != 1:
        raise MalformedInput(f"expected exactly one membership shape, found {shapes or 'none'}")

    shape = shapes[0]
    if shape == "single":
        record = payload["membership"]
        if not isinstance(record, Mapping):
            raise MalformedInput("membership must be an object")
        return SingleMembership(record=record)

    if shape == "array":
        records = payload["memberships"]
        if not isinstance(records, (list, tuple)):
            raise MalformedInput("memberships must be an array")
        return MembershipArray(records=list(records))

    current = payload.get("current_active_membership")
    all_active = payload.get("all_active_memberships") or []
    if current is not None and not isinstance(current, Mapping):
        raise MalformedInput("current_active_membership must be an object")
    if not isinstance(all_active, (list, tuple)):
        raise MalformedInput("all_active_memberships must be an array")
    return SummaryWrapper(
        current=current,
        all_active=list(all_active),
        has_current_active=bool(payload.get("has_current_active")),
        expires_in_days=_as_int(payload.get("expires_in_days")) or 0,
    )


def normalize(payload: Any) -> list[Subscription]:
    try:
        shaped = classify(payload)
    except MalformedInput as e:
        logger.debug("unrecognized membership payload: %s", e)
        return []

    if isinstance(shaped, SingleMembership):
        raws, default_active = [shaped.record], False
    elif isinstance(shaped, MembershipArray):
        raws, default_active = shaped.records, False
    else:
        raws = ([shaped.current] if shaped.current is not None else []) + shaped.all_active
        default_active = True

    out: list[Subscription] = []
    seen: set[int] = set()
    for raw in raws:
        sub = to_subscription(raw, default_active=default_active)
        if sub is None or sub.subscription_id in seen:
            continue
        seen.add(sub.subscription_id)
        out.append(sub)
    return out


def to_subscription(raw: Any, *, default_active: bool = False) -> Optional[Subscription]:
    if not isinstance(raw, Mapping):
        logger.warning("skipping membership record that is not an object: %r", raw)
        return None

    subscription_id = _as_int(raw.get("id"))
    if subscription_id is None:
        logger.warning("skipping membership record without id: %r", raw)
        return None

    plan = raw.get("membership_plan")
    if not isinstance(plan, Mapping):
        plan = {}

    plan_id = _as_int(raw.get("membership_plan_id"))
    if plan_id is None:
        plan_id = _as_int(plan.get("id"))

    features = plan.get("features")
    if features is None:
        features = raw.get("features")

    start = parse_datetime(raw.get("start_date"))
    end = parse_datetime(raw.get("end_date"))
    duration = _as_int(plan.get("duration_days", raw.get("duration_days")))
    if end is None and start is not None and duration:
        end = start + timedelta(days=duration)
    if start is not None and end is not None and end < start:
        logger.warning("membership %s ends before it starts, clamping end_date", subscription_id)
        end = start

    is_active = raw.get("is_active")

    return Subscription(
        subscription_id=subscription_id,
        user_id=_as_int(raw.get("user_id")),
        plan_id=plan_id,
        start_date=start,
        end_date=end,
        is_active=default_active if is_active is None else parse_bool(is_active),
        plan_name=plan.get("name") or raw.get("plan_name") or raw.get("name") or None,
        price=_as_decimal(plan.get("price", raw.get("price"))),
        features=parse_features(features),
    )


def _as_int(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _as_decimal(value: Any) -> Optional[Decimal]:
    if value is None or value == "":
        return None
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError):
        return None
