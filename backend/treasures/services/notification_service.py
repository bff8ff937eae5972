"""
Receipt notifications.

Checkout hands the receipt off to a background thread and returns
immediately; delivery success or failure is only ever logged.
"""
from __future__ import annotations

import logging
import threading

from flask import current_app
from flask_mail import Message
from markupsafe import escape

from ..extensions import mail

logger = logging.getLogger(__name__)


def format_cents(cents: int) -> str:
    return f"${cents / 100:,.2f}"


def _format_address(address) -> str:
    if not address:
        return "-"
    if not isinstance(address, dict):
        return str(address)
    if address.get("branchPickup"):
        branch = address.get("branchName") or address.get("branchId") or "selected branch"
        return f"Pickup at {branch}"
    parts = [
        address.get("homeAddress"),
        address.get("city"),
        address.get("zipcode"),
        address.get("country"),
    ]
    return ", ".join(str(p) for p in parts if p) or "-"


def build_receipt(
    name: str,
    receipt_lines: list[dict],
    total_price_cents: int,
    order_numbers: list[str],
    address,
) -> tuple[str, str]:
    """Return (text_body, html_body) for a purchase receipt."""
    text_lines = [f"Hi {name},", "", "Thank you for your purchase at Times Treasures.", ""]
    for line in receipt_lines:
        text_lines.append(f"- {line['name']} x{line['quantity']}: {format_cents(line['price'])}")
    text_lines += [
        "",
        f"Total: {format_cents(total_price_cents)}",
        f"Order numbers: {', '.join(order_numbers) or '-'}",
        f"Shipping to: {_format_address(address)}",
    ]

    rows = "".join(
        f"<tr><td>{escape(line['name'])}</td><td>{line['quantity']}</td>"
        f"<td>{format_cents(line['price'])}</td></tr>"
        for line in receipt_lines
    )
    html = (
        f"<p>Hi {escape(name)},</p>"
        "<p>Thank you for your purchase at Times Treasures.</p>"
        "<table><tr><th>Watch</th><th>Qty</th><th>Price</th></tr>"
        f"{rows}</table>"
        f"<p><strong>Total: {format_cents(total_price_cents)}</strong></p>"
        f"<p>Order numbers: {', '.join(order_numbers) or '-'}</p>"
        f"<p>Shipping to: {escape(_format_address(address))}</p>"
    )
    return "\n".join(text_lines), html


def _send(app, recipient: str, subject: str, body: str, html: str) -> None:
    with app.app_context():
        try:
            mail.send(Message(subject=subject, recipients=[recipient], body=body, html=html))
            logger.info("Receipt sent to %s", recipient)
        except Exception:
            logger.exception("Failed to send receipt to %s", recipient)


def dispatch_receipt(user, receipt_lines, total_price_cents, purchases, address) -> threading.Thread | None:
    """
    Send the purchase receipt on a daemon thread.

    Everything the email needs is read here, in the request thread, so the
    worker never touches the caller's database session. Returns the started
    thread, or None when receipts are disabled or there is nothing to send.
    """
    if not current_app.config.get("RECEIPTS_ENABLED", True):
        logger.info("Receipts disabled; skipping receipt for user %s", user.id)
        return None
    if not user.email:
        logger.warning("User %s has no email; receipt not sent", user.id)
        return None
    if not receipt_lines:
        return None

    body, html = build_receipt(
        user.name,
        receipt_lines,
        total_price_cents,
        [p.order_number for p in purchases],
        address,
    )
    thread = threading.Thread(
        target=_send,
        args=(current_app._get_current_object(), user.email, "Your Times Treasures receipt", body, html),
        daemon=True,
    )
    thread.start()
    return thread
