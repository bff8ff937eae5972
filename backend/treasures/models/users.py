from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z, utcnow

USER_ROLES = ("user", "admin")
USER_SEXES = ("male", "female")


class User(db.Model):
    """
    Shopper or administrator account.

    Owns a persistent cart (replaced wholesale by the cart endpoint), an
    append-only purchase history written only by checkout, and a list of
    saved delivery addresses.
    """
    __tablename__ = "users"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(50), nullable=False)
    family_name = db.Column(db.String(50), nullable=True)
    birth_date = db.Column(db.Date, nullable=True)
    sex = db.Column(db.String(8), nullable=True)

    email = db.Column(db.String(255), nullable=False, unique=True, index=True)

    # Bcrypt hashed password
    password_hash = db.Column(db.String(255), nullable=False)

    role = db.Column(db.String(16), nullable=False, default="user")
    is_active = db.Column(db.Boolean, nullable=False, default=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)
    last_login_at = db.Column(db.DateTime(timezone=True), nullable=True)

    cart_lines = db.relationship(
        "CartLine",
        backref="user",
        lazy=True,
        order_by="CartLine.id",
        cascade="all, delete-orphan",
    )
    purchases = db.relationship(
        "PurchaseRecord",
        backref="user",
        lazy=True,
        order_by="PurchaseRecord.id",
    )
    addresses = db.relationship(
        "SavedAddress",
        backref="user",
        lazy=True,
        order_by="SavedAddress.position",
        cascade="all, delete-orphan",
    )

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "family_name": self.family_name,
            "birth_date": self.birth_date.isoformat() if self.birth_date else None,
            "sex": self.sex,
            "email": self.email,
            "role": self.role,
            "is_active": self.is_active,
            "addresses": [a.to_dict() for a in self.addresses],
            "created_at": to_utc_z(self.created_at),
            "last_login_at": to_utc_z(self.last_login_at) if self.last_login_at else None,
        }


class CartLine(db.Model):
    """One (watch, quantity) entry in a user's persistent cart."""
    __tablename__ = "cart_lines"
    __table_args__ = (
        db.CheckConstraint("quantity >= 1", name="ck_cart_lines_quantity_positive"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    watch_id = db.Column(db.Integer, db.ForeignKey("watches.id", ondelete="CASCADE"), nullable=False, index=True)
    quantity = db.Column(db.Integer, nullable=False, default=1)

    watch = db.relationship("Watch")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "watch": self.watch.to_dict() if self.watch else None,
            "quantity": self.quantity,
        }


class PurchaseRecord(db.Model):
    """
    Immutable receipt line created by checkout.

    total_price_cents is fixed at purchase time and never re-derived from the
    current catalog price. shipping_address is a by-value JSON snapshot, so
    later edits to the user's saved addresses do not alter past orders.
    """
    __tablename__ = "purchase_records"
    __table_args__ = (
        db.Index("ix_purchase_records_user_date", "user_id", "purchase_date"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    watch_id = db.Column(db.Integer, db.ForeignKey("watches.id"), nullable=False, index=True)

    quantity = db.Column(db.Integer, nullable=False)
    total_price_cents = db.Column(db.Integer, nullable=False)
    purchase_date = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)
    order_number = db.Column(db.String(32), nullable=False, unique=True, index=True)
    shipping_address = db.Column(db.JSON, nullable=True)

    watch = db.relationship("Watch")

    def to_dict(self, include_watch: bool = True) -> dict:
        data = {
            "id": self.id,
            "user_id": self.user_id,
            "watch_id": self.watch_id,
            "quantity": self.quantity,
            "total_price_cents": self.total_price_cents,
            "purchase_date": to_utc_z(self.purchase_date),
            "order_number": self.order_number,
            "shipping_address": self.shipping_address,
        }
        if include_watch:
            data["watch"] = self.watch.to_dict() if self.watch else None
        return data


class SavedAddress(db.Model):
    """Delivery address kept on the user profile, offered at checkout."""
    __tablename__ = "saved_addresses"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    position = db.Column(db.Integer, nullable=False, default=0)

    country = db.Column(db.String(80), nullable=True)
    city = db.Column(db.String(80), nullable=True)
    home_address = db.Column(db.String(255), nullable=True)
    zipcode = db.Column(db.String(20), nullable=True)
    phone_number = db.Column(db.String(32), nullable=True)

    def to_dict(self) -> dict:
        return {
            "country": self.country,
            "city": self.city,
            "homeAddress": self.home_address,
            "zipcode": self.zipcode,
            "phoneNumber": self.phone_number,
        }
