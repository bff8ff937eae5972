# Overview: Persistent cart reads and wholesale replacement.

"""
Cart Service

The storefront posts the whole cart on every change. Each submitted line
is resolved to a catalog watch; lines whose reference is malformed or
unknown, or whose quantity is not a positive integer, are dropped without
failing the request. Whatever survives replaces the stored cart.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterable

from ..errors import NotFoundError, ValidationError
from ..extensions import db
from ..models import CartLine, User, Watch
from .concurrency import run_with_retry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CartLineInput:
    watch_id: int
    quantity: int


def resolve_watch_ref(ref: Any) -> int | None:
    """
    Turn a client watch reference into an id.

    Accepts a raw id (int or digit string) or an embedded object carrying
    "id" or "_id". Returns None for anything else.
    """
    if isinstance(ref, dict):
        ref = ref.get("id", ref.get("_id"))
    if isinstance(ref, bool):
        return None
    if isinstance(ref, int):
        return ref if ref > 0 else None
    if isinstance(ref, str) and ref.strip().isdigit():
        value = int(ref.strip())
        return value if value > 0 else None
    return None


def _resolve_quantity(raw: Any) -> int | None:
    if raw is None:
        return 1
    if isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return raw if raw >= 1 else None
    if isinstance(raw, str) and raw.strip().isdigit():
        value = int(raw.strip())
        return value if value >= 1 else None
    return None


def sanitize_cart_lines(raw_lines: Iterable[Any], known_watch_ids: set[int]) -> tuple[list[CartLineInput], int]:
    """
    Filter submitted cart lines.

    Returns (valid_lines, dropped_count). Input order is preserved; nothing
    is merged or persisted here.
    """
    valid: list[CartLineInput] = []
    dropped = 0
    for raw in raw_lines:
        if not isinstance(raw, dict):
            dropped += 1
            continue
        watch_id = resolve_watch_ref(raw.get("watch"))
        quantity = _resolve_quantity(raw.get("quantity"))
        if watch_id is None or watch_id not in known_watch_ids or quantity is None:
            dropped += 1
            continue
        valid.append(CartLineInput(watch_id=watch_id, quantity=quantity))
    return valid, dropped


def _get_user(user_id: int) -> User:
    user = db.session.get(User, user_id)
    if not user:
        raise NotFoundError("User not found")
    return user


def get_cart(user_id: int) -> list[CartLine]:
    return list(_get_user(user_id).cart_lines)


def replace_cart(user_id: int, raw_lines: Any) -> tuple[list[CartLine], int]:
    """
    Replace the user's cart with the valid subset of raw_lines.

    Returns (stored_lines, dropped_count).
    """
    if not isinstance(raw_lines, list):
        raise ValidationError("Cart must be an array of {watch, quantity} items")

    candidate_ids = {
        watch_id
        for watch_id in (resolve_watch_ref(line.get("watch")) for line in raw_lines if isinstance(line, dict))
        if watch_id is not None
    }

    def _op():
        user = _get_user(user_id)
        known = set()
        if candidate_ids:
            known = {
                row.id for row in db.session.query(Watch.id).filter(Watch.id.in_(candidate_ids)).all()
            }
        valid, dropped = sanitize_cart_lines(raw_lines, known)

        user.cart_lines = [CartLine(watch_id=v.watch_id, quantity=v.quantity) for v in valid]
        db.session.commit()
        return list(user.cart_lines), dropped

    lines, dropped = run_with_retry(_op)
    if dropped:
        logger.info("Dropped %s invalid cart line(s) for user %s", dropped, user_id)
    return lines, dropped
