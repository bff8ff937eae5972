from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z, utcnow, within_window

WATCH_CATEGORIES = ("men-watches", "women-watches", "luxury-watches", "smartwatches")


class Watch(db.Model):
    """
    Catalog entry for a watch.

    Price is stored in cents. Inventory is the on-hand count and must never
    go below zero; checkout decrements it with a conditional UPDATE so two
    concurrent purchases cannot both take the last unit.

    A special offer is an optional percentage discount bounded by
    offer_start/offer_end. It is active only when the percentage is > 0 and
    "now" falls inside [offer_start, offer_end).
    """
    __tablename__ = "watches"
    __table_args__ = (
        db.CheckConstraint("inventory >= 0", name="ck_watches_inventory_non_negative"),
        db.CheckConstraint("price_cents >= 0", name="ck_watches_price_non_negative"),
        db.Index("ix_watches_category_created", "category", "created_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False, index=True)
    price_cents = db.Column(db.Integer, nullable=False)
    image = db.Column(db.String(512), nullable=False)
    category = db.Column(db.String(32), nullable=False, index=True)
    description = db.Column(db.String(1000), nullable=False)
    inventory = db.Column(db.Integer, nullable=False, default=0)

    # Special offer (all optional)
    discount_percentage = db.Column(db.Integer, nullable=True)
    offer_start = db.Column(db.DateTime(timezone=True), nullable=True)
    offer_end = db.Column(db.DateTime(timezone=True), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    def __repr__(self) -> str:
        return f"<Watch id={self.id} name={self.name!r} inventory={self.inventory}>"

    def offer_is_active(self, now=None) -> bool:
        if not self.discount_percentage or self.discount_percentage <= 0:
            return False
        if self.offer_start is None or self.offer_end is None:
            return False
        return within_window(now or utcnow(), self.offer_start, self.offer_end)

    def final_price_cents(self, now=None) -> int:
        if not self.offer_is_active(now):
            return self.price_cents
        return round(self.price_cents * (100 - self.discount_percentage) / 100)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "price_cents": self.price_cents,
            "final_price_cents": self.final_price_cents(),
            "image": self.image,
            "category": self.category,
            "description": self.description,
            "inventory": self.inventory,
            "special_offer": {
                "discount_percentage": self.discount_percentage or 0,
                "offer_start": to_utc_z(self.offer_start),
                "offer_end": to_utc_z(self.offer_end),
                "is_active": self.offer_is_active(),
            },
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
