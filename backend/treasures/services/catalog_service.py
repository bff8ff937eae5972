# backend/treasures/services/catalog_service.py
"""
Watch catalog: browsing, search, special offers and admin maintenance.

Deleting a watch also strips the purchase records and cart lines that
reference it; that is the only path that removes purchase history.
"""
from __future__ import annotations

import logging

from flask import current_app
from sqlalchemy import func

from ..errors import NotFoundError
from ..extensions import db
from ..models import Watch, PurchaseRecord, CartLine, WATCH_CATEGORIES
from ..time_utils import utcnow
from ..validation import ModelValidationPolicy, validate_payload, enforce_rules_watch

logger = logging.getLogger(__name__)

WATCH_POLICY = ModelValidationPolicy(
    writable_fields={
        "name", "price_cents", "image", "category", "description", "inventory",
        "discount_percentage", "offer_start", "offer_end",
    },
    required_on_create={"name", "price_cents", "image", "category", "description", "inventory"},
    aliases={
        "priceCents": "price_cents",
        "discountPercentage": "discount_percentage",
        "offerStart": "offer_start",
        "offerEnd": "offer_end",
    },
)

SORT_OPTIONS = {
    "name": Watch.name.asc(),
    "-name": Watch.name.desc(),
    "price": Watch.price_cents.asc(),
    "-price": Watch.price_cents.desc(),
}


def _flatten_special_offer(payload: dict) -> dict:
    """Accept the storefront's nested specialOffer object alongside flat keys."""
    if not isinstance(payload, dict) or "specialOffer" not in payload:
        return payload
    flat = {k: v for k, v in payload.items() if k != "specialOffer"}
    offer = payload.get("specialOffer") or {}
    if isinstance(offer, dict):
        for key in ("discountPercentage", "offerStart", "offerEnd"):
            if key in offer:
                flat[key] = offer[key]
    return flat


def get_watch_or_404(watch_id: int) -> Watch:
    watch = db.session.get(Watch, watch_id)
    if not watch:
        raise NotFoundError("Watch not found")
    return watch


def list_watches(
    *,
    page: int | None = None,
    limit: int | None = None,
    category: str | None = None,
    sort: str | None = None,
) -> dict:
    """
    Paginated listing with optional category filter.

    sort accepts name, -name, price, -price; anything else falls back to
    newest first.
    """
    default_size = current_app.config.get("WATCHES_PAGE_SIZE", 20)
    max_size = current_app.config.get("WATCHES_MAX_PAGE_SIZE", 100)

    page = page if page and page >= 1 else 1
    limit = limit if limit and limit >= 1 else default_size
    limit = min(limit, max_size)

    query = db.session.query(Watch)
    if category:
        query = query.filter(Watch.category == category)

    order = SORT_OPTIONS.get((sort or "").lower())
    if order is None:
        query = query.order_by(Watch.created_at.desc(), Watch.id.desc())
    else:
        query = query.order_by(order, Watch.id.asc())

    total = query.count()
    watches = query.offset((page - 1) * limit).limit(limit).all()
    total_pages = (total + limit - 1) // limit if total > 0 else 1

    return {
        "items": [w.to_dict() for w in watches],
        "count": len(watches),
        "total": total,
        "pagination": {
            "page": page,
            "limit": limit,
            "total_pages": total_pages,
            "has_next": page < total_pages,
            "has_prev": page > 1,
        },
    }


def search_watches(query_text: str) -> list[Watch]:
    """Case-insensitive substring match on name or description."""
    term = (query_text or "").strip()
    if not term:
        return []
    pattern = f"%{term.lower()}%"
    return (
        db.session.query(Watch)
        .filter(db.or_(
            func.lower(Watch.name).like(pattern),
            func.lower(Watch.description).like(pattern),
        ))
        .order_by(Watch.name.asc(), Watch.id.asc())
        .all()
    )


def list_discounted_watches(now=None) -> list[Watch]:
    """Watches whose special offer is active right now."""
    now = now or utcnow()
    candidates = (
        db.session.query(Watch)
        .filter(
            Watch.discount_percentage > 0,
            Watch.offer_start.isnot(None),
            Watch.offer_end.isnot(None),
            Watch.offer_start <= now,
            Watch.offer_end > now,
        )
        .order_by(Watch.offer_end.asc(), Watch.id.asc())
        .all()
    )
    return [w for w in candidates if w.offer_is_active(now)]


def category_counts() -> list[dict]:
    rows = (
        db.session.query(Watch.category, func.count(Watch.id))
        .group_by(Watch.category)
        .all()
    )
    counts = {category: int(count) for category, count in rows}
    return [{"category": c, "count": counts.get(c, 0)} for c in WATCH_CATEGORIES]


def create_watch(payload: dict) -> Watch:
    patch = validate_payload(
        model=Watch, payload=_flatten_special_offer(payload), policy=WATCH_POLICY, partial=False
    )
    enforce_rules_watch(patch)

    watch = Watch(**patch)
    db.session.add(watch)
    db.session.commit()
    logger.info("Created watch %s (%s)", watch.id, watch.name)
    return watch


def update_watch(watch_id: int, payload: dict) -> Watch:
    watch = get_watch_or_404(watch_id)
    patch = validate_payload(
        model=Watch, payload=_flatten_special_offer(payload), policy=WATCH_POLICY, partial=True
    )
    enforce_rules_watch(patch, current=watch)

    for key, value in patch.items():
        setattr(watch, key, value)
    db.session.commit()
    return watch


def delete_watch(watch_id: int) -> dict:
    """
    Delete a watch and strip every purchase record and cart line that
    references it. Returns the number of rows removed from each.
    """
    watch = get_watch_or_404(watch_id)

    purchases_removed = db.session.query(PurchaseRecord).filter_by(
        watch_id=watch.id
    ).delete(synchronize_session=False)
    cart_lines_removed = db.session.query(CartLine).filter_by(
        watch_id=watch.id
    ).delete(synchronize_session=False)

    db.session.delete(watch)
    db.session.commit()

    logger.info(
        "Deleted watch %s; cleaned up %s purchase records and %s cart lines",
        watch_id, purchases_removed, cart_lines_removed,
    )
    return {"purchases_removed": purchases_removed, "cart_lines_removed": cart_lines_removed}
