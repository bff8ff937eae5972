from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z, utcnow


class Branch(db.Model):
    """Physical store location, also usable as a pickup point at checkout."""
    __tablename__ = "branches"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), nullable=False)
    lat = db.Column(db.Float, nullable=False)
    lng = db.Column(db.Float, nullable=False)
    phone_number = db.Column(db.String(32), nullable=False)
    opening_hour = db.Column(db.String(5), nullable=False)
    closing_hour = db.Column(db.String(5), nullable=False)
    address = db.Column(db.String(255), nullable=False, default="")

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "position": {"lat": self.lat, "lng": self.lng},
            "phoneNumber": self.phone_number,
            "openingHour": self.opening_hour,
            "closingHour": self.closing_hour,
            "address": self.address,
            "created_at": to_utc_z(self.created_at),
        }
