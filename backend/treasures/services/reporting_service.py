# Overview: Read-only sales aggregates for the admin dashboard.

from __future__ import annotations

from sqlalchemy import func

from ..extensions import db
from ..models import PurchaseRecord, User, Watch

TOP_SELLING_LIMIT = 10


def top_selling_watches(limit: int = TOP_SELLING_LIMIT) -> list[dict]:
    """
    Watches ranked by total quantity sold.

    Inner join: records whose watch no longer exists drop out.
    """
    quantity = func.sum(PurchaseRecord.quantity).label("quantity_sold")
    rows = (
        db.session.query(Watch.id, Watch.name, quantity)
        .join(PurchaseRecord, PurchaseRecord.watch_id == Watch.id)
        .group_by(Watch.id, Watch.name)
        .order_by(quantity.desc(), Watch.id.asc())
        .limit(limit)
        .all()
    )
    return [
        {"watch_id": r.id, "name": r.name, "quantity_sold": int(r.quantity_sold or 0)}
        for r in rows
    ]


def sales_by_category() -> list[dict]:
    quantity = func.sum(PurchaseRecord.quantity).label("quantity_sold")
    rows = (
        db.session.query(Watch.category, quantity)
        .join(PurchaseRecord, PurchaseRecord.watch_id == Watch.id)
        .group_by(Watch.category)
        .order_by(quantity.desc(), Watch.category.asc())
        .all()
    )
    return [
        {"category": r.category, "quantity_sold": int(r.quantity_sold or 0)}
        for r in rows
    ]


def sales_by_sex() -> list[dict]:
    """Quantity sold grouped by purchaser sex; unset sex reports as "unknown"."""
    sex = func.coalesce(User.sex, "unknown").label("sex")
    quantity = func.sum(PurchaseRecord.quantity).label("quantity_sold")
    rows = (
        db.session.query(sex, quantity)
        .select_from(PurchaseRecord)
        .join(User, User.id == PurchaseRecord.user_id)
        .join(Watch, Watch.id == PurchaseRecord.watch_id)
        .group_by(sex)
        .order_by(quantity.desc(), sex.asc())
        .all()
    )
    return [
        {"sex": r.sex, "quantity_sold": int(r.quantity_sold or 0)}
        for r in rows
    ]


def sales_stats() -> dict:
    return {
        "top_selling_watches": top_selling_watches(),
        "sales_by_category": sales_by_category(),
        "sales_by_sex": sales_by_sex(),
    }
