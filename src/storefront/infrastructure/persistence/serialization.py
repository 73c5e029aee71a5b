"""Raw (JSON-ready) representations of cart lines and wishlists."""

from __future__ import annotations

from decimal import Decimal, InvalidOperation

from storefront.domain.exceptions import DomainException
from storefront.domain.model.cart import Cart, CartLine
from storefront.domain.model.value_objects import Money, Quantity

# Anything a corrupt row can raise while being decoded.
MALFORMED = (ValueError, TypeError, KeyError, AttributeError, InvalidOperation, DomainException)


def line_to_raw(line: CartLine) -> dict:
    return {
        "product_id": line.product_id,
        "variant_key": line.variant_key,
        "quantity": line.quantity.value,
        "unit_price": str(line.unit_price.amount),
        "currency": line.unit_price.currency,
        "name": line.name,
        "image_ref": line.image_ref,
    }


def line_from_raw(raw: dict) -> CartLine:
    return CartLine(
        product_id=str(raw["product_id"]),
        variant_key=str(raw.get("variant_key", "")),
        quantity=Quantity(raw["quantity"]),
        unit_price=Money(Decimal(str(raw["unit_price"])), raw.get("currency", "INR")),
        name=raw.get("name", ""),
        image_ref=raw.get("image_ref"),
    )


def cart_to_raw(cart: Cart) -> list[dict]:
    return [line_to_raw(line) for line in cart.lines]


def cart_from_raw(raw: list[dict]) -> Cart:
    """Rebuild a cart; rows sharing a key are folded by summing quantities."""
    return Cart.of([line_from_raw(item) for item in raw])
