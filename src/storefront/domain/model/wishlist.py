"""Wishlist snapshot: a set of product identifiers."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class Wishlist:
    """Set of wishlisted product ids.

    Insertion order is kept only so that persisted snapshots are stable;
    callers must not rely on it.
    """

    product_ids: tuple[str, ...] = field(default_factory=tuple)

    @staticmethod
    def of(product_ids: list[str]) -> Wishlist:
        unique: dict[str, None] = {}
        for product_id in product_ids:
            unique[str(product_id)] = None
        return Wishlist(tuple(unique))

    def __contains__(self, product_id: str) -> bool:
        return product_id in self.product_ids

    def __len__(self) -> int:
        return len(self.product_ids)

    def as_set(self) -> set[str]:
        return set(self.product_ids)

    def with_added(self, product_id: str) -> Wishlist:
        if product_id in self.product_ids:
            return self
        return Wishlist(self.product_ids + (product_id,))

    def without(self, product_id: str) -> Wishlist:
        return Wishlist(tuple(p for p in self.product_ids if p != product_id))


def merge_wishlists(local: Wishlist, remote: Wishlist) -> Wishlist:
    """Set union, remote entries first."""
    return Wishlist.of(list(remote.product_ids) + list(local.product_ids))
