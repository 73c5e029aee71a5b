"""Placed order receipt.

The order itself lives on the server; this is what the storefront keeps
after the server accepted it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone

from storefront.domain.exceptions import ValidationError
from storefront.domain.model.cart import CartLine
from storefront.domain.model.checkout import CheckoutTotals

DELIVERY_WINDOW_DAYS = (3, 7)


@dataclass(frozen=True)
class PlacedOrder:
    """Immutable record of a successful placement.

    ``order_number`` is server-issued and is never regenerated.
    """

    order_number: str
    lines: tuple[CartLine, ...]
    totals: CheckoutTotals
    placed_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __post_init__(self) -> None:
        if not self.order_number or not self.order_number.strip():
            raise ValidationError("Order number is required")

    @property
    def estimated_delivery(self) -> tuple[date, date]:
        start, end = DELIVERY_WINDOW_DAYS
        placed = self.placed_at.date()
        return placed + timedelta(days=start), placed + timedelta(days=end)
