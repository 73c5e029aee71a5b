"""Cart snapshot: the set of lines a shopper intends to buy.

A Cart is a plain value-level snapshot: the reconciler reads one from a
store, derives a new one through ``with_added`` / ``with_quantity`` /
``without`` and writes it back. Lines are keyed by ``(product_id,
variant_key)``; a key appears at most once.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace

from storefront.domain.model.value_objects import Money, Quantity

LineKey = tuple[str, str]


@dataclass(frozen=True)
class CartLine:
    """A product variant in the cart, with the price seen when it was added."""

    product_id: str
    variant_key: str  # e.g. colour or size
    quantity: Quantity
    unit_price: Money
    name: str = ""
    image_ref: str | None = None

    @property
    def key(self) -> LineKey:
        return (self.product_id, self.variant_key)

    @property
    def line_total(self) -> Money:
        return self.unit_price * self.quantity.value


@dataclass(frozen=True)
class Cart:
    """Ordered, key-unique collection of cart lines."""

    lines: tuple[CartLine, ...] = field(default_factory=tuple)

    @staticmethod
    def of(lines: list[CartLine]) -> Cart:
        """Build a cart, folding lines that share a key by summing quantities."""
        cart = Cart()
        for line in lines:
            cart = cart.with_added(line)
        return cart

    # --- Queries --------------------------------------------------------------

    def get(self, key: LineKey) -> CartLine | None:
        for line in self.lines:
            if line.key == key:
                return line
        return None

    def keys(self) -> set[LineKey]:
        return {line.key for line in self.lines}

    @property
    def is_empty(self) -> bool:
        return not self.lines

    @property
    def item_count(self) -> int:
        return sum(line.quantity.value for line in self.lines)

    @property
    def subtotal(self) -> Money:
        result = Money.zero()
        for line in self.lines:
            result = result + line.line_total
        return result

    # --- Derivations ----------------------------------------------------------

    def with_added(self, line: CartLine) -> Cart:
        """Add a line; an existing line with the same key gets the quantities summed.

        Price, name and image are refreshed from the incoming line.
        """
        existing = self.get(line.key)
        if existing is None:
            return Cart(self.lines + (line,))
        merged = replace(line, quantity=existing.quantity + line.quantity)
        return self._replacing(merged)

    def with_quantity(self, key: LineKey, quantity: Quantity) -> Cart:
        existing = self.get(key)
        if existing is None:
            return self
        return self._replacing(replace(existing, quantity=quantity))

    def without(self, key: LineKey) -> Cart:
        return Cart(tuple(line for line in self.lines if line.key != key))

    def without_keys(self, keys: set[LineKey]) -> Cart:
        return Cart(tuple(line for line in self.lines if line.key not in keys))

    def _replacing(self, updated: CartLine) -> Cart:
        return Cart(
            tuple(updated if line.key == updated.key else line for line in self.lines)
        )


def merge_carts(local: Cart, remote: Cart) -> Cart:
    """Union of two carts where the remote copy wins on a shared key.

    Lines only present locally are appended after the remote lines, so
    ``merge_carts(merge_carts(l, r), r)`` equals ``merge_carts(l, r)``.
    """
    remote_keys = remote.keys()
    local_only = tuple(line for line in local.lines if line.key not in remote_keys)
    return Cart(remote.lines + local_only)
