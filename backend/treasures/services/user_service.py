"""
User Service

Profile maintenance, saved addresses, purchase history and order
tracking for shoppers, plus the user lookups the admin dashboard needs.
"""

from __future__ import annotations

from datetime import timedelta

from flask import current_app
from sqlalchemy import func

from ..errors import NotFoundError, ValidationError
from ..extensions import db
from ..models import PurchaseRecord, SavedAddress, User
from ..validation import ModelValidationPolicy, validate_payload, enforce_rules_profile

PROFILE_POLICY = ModelValidationPolicy(
    writable_fields={"name", "family_name", "birth_date", "sex"},
    aliases={"familyName": "family_name", "birthDate": "birth_date"},
)

ADDRESS_FIELDS = {
    "country": "country",
    "city": "city",
    "homeAddress": "home_address",
    "zipcode": "zipcode",
    "phoneNumber": "phone_number",
}


def get_user_or_404(user_id: int) -> User:
    user = db.session.get(User, user_id)
    if not user:
        raise NotFoundError("User not found")
    return user


def update_profile(user_id: int, payload: dict) -> User:
    user = get_user_or_404(user_id)
    patch = validate_payload(model=User, payload=payload, policy=PROFILE_POLICY, partial=True)
    enforce_rules_profile(patch)

    for key, value in patch.items():
        setattr(user, key, value)
    db.session.commit()
    return user


def replace_addresses(user_id: int, addresses) -> User:
    """Replace the saved address list wholesale, keeping submitted order."""
    if not isinstance(addresses, list):
        raise ValidationError("addresses must be an array")

    user = get_user_or_404(user_id)
    rows = []
    for position, raw in enumerate(addresses):
        if not isinstance(raw, dict):
            raise ValidationError(f"addresses[{position}] must be an object")
        values = {}
        for client_key, column in ADDRESS_FIELDS.items():
            value = raw.get(client_key)
            values[column] = str(value).strip() if value not in (None, "") else None
        rows.append(SavedAddress(position=position, **values))

    user.addresses = rows
    db.session.commit()
    return user


def purchase_history(user_id: int) -> list[PurchaseRecord]:
    user = get_user_or_404(user_id)
    return (
        db.session.query(PurchaseRecord)
        .filter(PurchaseRecord.user_id == user.id)
        .order_by(PurchaseRecord.purchase_date.asc(), PurchaseRecord.id.asc())
        .all()
    )


def track_order(user_id: int, order_number: str) -> dict:
    """Look up one of the user's own orders and estimate its delivery date."""
    record = (
        db.session.query(PurchaseRecord)
        .filter(
            PurchaseRecord.user_id == user_id,
            PurchaseRecord.order_number == (order_number or "").strip().upper(),
        )
        .first()
    )
    if not record:
        raise NotFoundError("Order not found")

    days = current_app.config.get("ORDER_DELIVERY_DAYS", 21)
    estimated = record.purchase_date + timedelta(days=days)
    return {
        "order": record.to_dict(),
        "estimated_delivery": estimated.date().isoformat(),
    }


def list_users() -> list[User]:
    return db.session.query(User).order_by(User.id.asc()).all()


def search_users_by_name(name: str) -> list[User]:
    term = (name or "").strip().lower()
    if not term:
        raise ValidationError("name query parameter is required")
    pattern = f"%{term}%"
    return (
        db.session.query(User)
        .filter(db.or_(
            func.lower(User.name).like(pattern),
            func.lower(User.family_name).like(pattern),
        ))
        .order_by(User.name.asc(), User.id.asc())
        .all()
    )
