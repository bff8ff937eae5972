# Overview: Store branch listing and admin creation.

from __future__ import annotations

import re

from ..errors import ValidationError
from ..extensions import db
from ..models import Branch
from ..validation import ModelValidationPolicy, validate_payload

_HOUR_RE = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")

BRANCH_POLICY = ModelValidationPolicy(
    writable_fields={"name", "lat", "lng", "phone_number", "opening_hour", "closing_hour", "address"},
    required_on_create={"name", "lat", "lng", "phone_number", "opening_hour", "closing_hour"},
    aliases={
        "phoneNumber": "phone_number",
        "openingHour": "opening_hour",
        "closingHour": "closing_hour",
    },
)


def _flatten_position(payload: dict) -> dict:
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")
    flat = {k: v for k, v in payload.items() if k != "position"}
    position = payload.get("position")
    if isinstance(position, dict):
        for key in ("lat", "lng"):
            if key in position:
                flat[key] = position[key]
    elif position is not None:
        raise ValidationError("position must be an object with lat and lng")
    return flat


def list_branches() -> list[Branch]:
    return db.session.query(Branch).order_by(Branch.name.asc(), Branch.id.asc()).all()


def create_branch(payload: dict) -> Branch:
    patch = validate_payload(
        model=Branch, payload=_flatten_position(payload), policy=BRANCH_POLICY, partial=False
    )

    if not -90 <= patch["lat"] <= 90 or not -180 <= patch["lng"] <= 180:
        raise ValidationError("position is out of range")
    for key in ("opening_hour", "closing_hour"):
        if not _HOUR_RE.match(patch[key]):
            raise ValidationError(f"{key} must be HH:MM")

    branch = Branch(**patch)
    db.session.add(branch)
    db.session.commit()
    return branch
