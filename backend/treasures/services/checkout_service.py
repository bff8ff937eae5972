"""
Checkout Service

Turns a user's persistent cart into purchase records.

Each cart line is settled on its own: if stock covers the quantity, the
inventory decrement and the purchase record are committed together before
the next line is looked at; otherwise the watch name goes into the
warnings list and the line is skipped. There is no transaction spanning
the whole cart, so a failure partway through leaves the lines already
settled in place.

The stock check and the decrement are one conditional UPDATE, so two
concurrent checkouts can never drive inventory below zero.
"""

from __future__ import annotations

import copy
import logging
import uuid
from dataclasses import dataclass, field

from ..errors import EmptyCartError, NotFoundError
from ..extensions import db
from ..models import PurchaseRecord, User, Watch
from ..time_utils import utcnow
from .concurrency import run_with_retry
from .notification_service import dispatch_receipt

logger = logging.getLogger(__name__)

SUCCESS_MESSAGE = "Purchase completed successfully."


@dataclass
class CheckoutResult:
    purchases: list[PurchaseRecord] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    receipt_lines: list[dict] = field(default_factory=list)
    total_price_cents: int = 0
    message: str = SUCCESS_MESSAGE


def new_order_number() -> str:
    return f"ORD-{uuid.uuid4().hex[:12].upper()}"


def checkout_message(warnings: list[str]) -> str:
    if not warnings:
        return SUCCESS_MESSAGE
    return (
        "The following items were out of stock and were not purchased: "
        + ", ".join(warnings)
    )


def _reserve_stock(watch_id: int, quantity: int) -> bool:
    """Decrement inventory only if it covers quantity. True when a row changed."""
    updated = (
        db.session.query(Watch)
        .filter(Watch.id == watch_id, Watch.inventory >= quantity)
        .update({Watch.inventory: Watch.inventory - quantity}, synchronize_session=False)
    )
    return updated == 1


def checkout(user_id: int, shipping_address) -> CheckoutResult:
    """
    Settle the user's cart.

    shipping_address is any JSON value and is copied onto every purchase
    record as given; its fields are not checked here.

    Raises NotFoundError for an unknown user and EmptyCartError for an empty
    cart; neither has side effects. Out-of-stock lines are reported through
    CheckoutResult.warnings, never raised. The cart is always emptied once
    settlement starts, including lines that were skipped.
    """
    user = db.session.get(User, user_id)
    if not user:
        raise NotFoundError("User not found")

    cart = list(user.cart_lines)
    if not cart:
        raise EmptyCartError("Cart is empty")

    # Snapshot before the loop; commits below expire the ORM objects.
    pending = [(line.watch_id, line.quantity) for line in cart]

    result = CheckoutResult()
    for watch_id, quantity in pending:
        watch = db.session.get(Watch, watch_id)
        if watch is None:
            logger.warning("Cart line for user %s references missing watch %s", user_id, watch_id)
            continue

        name = watch.name
        line_total = quantity * watch.price_cents

        def _settle(watch_id=watch_id, quantity=quantity, line_total=line_total):
            if not _reserve_stock(watch_id, quantity):
                db.session.rollback()
                return None
            record = PurchaseRecord(
                user_id=user_id,
                watch_id=watch_id,
                quantity=quantity,
                total_price_cents=line_total,
                purchase_date=utcnow(),
                order_number=new_order_number(),
                shipping_address=copy.deepcopy(shipping_address),
            )
            db.session.add(record)
            db.session.commit()
            return record

        try:
            record = run_with_retry(_settle)
        except Exception:
            # Lines already committed stay settled; only this line is undone.
            db.session.rollback()
            logger.exception("Checkout aborted at watch %s for user %s", watch_id, user_id)
            raise

        if record is None:
            logger.warning(
                "Out of stock: user=%s watch=%s requested=%s", user_id, watch_id, quantity
            )
            result.warnings.append(name)
            continue

        result.purchases.append(record)
        result.total_price_cents += line_total
        result.receipt_lines.append({"name": name, "quantity": quantity, "price": line_total})

    def _clear_cart():
        db.session.get(User, user_id).cart_lines = []
        db.session.commit()

    run_with_retry(_clear_cart)

    result.message = checkout_message(result.warnings)
    logger.info(
        "Checkout complete: user=%s purchases=%s out_of_stock=%s total_cents=%s",
        user_id, len(result.purchases), len(result.warnings), result.total_price_cents,
    )

    dispatch_receipt(
        user,
        result.receipt_lines,
        result.total_price_cents,
        result.purchases,
        shipping_address,
    )
    return result
