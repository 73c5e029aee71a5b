"""Abstract browser-local store for cart and wishlist snapshots."""

from __future__ import annotations

from abc import ABC, abstractmethod

from storefront.domain.model.cart import Cart
from storefront.domain.model.wishlist import Wishlist


class LocalStore(ABC):
    """Always-available, synchronous key-value storage.

    Implementations must treat an absent or unreadable record as empty
    and never raise on read.
    """

    @abstractmethod
    def load_cart(self) -> Cart:
        """Return the stored cart snapshot (empty if none)."""

    @abstractmethod
    def save_cart(self, cart: Cart) -> None:
        """Overwrite the stored cart snapshot."""

    @abstractmethod
    def load_wishlist(self) -> Wishlist:
        """Return the stored wishlist snapshot (empty if none)."""

    @abstractmethod
    def save_wishlist(self, wishlist: Wishlist) -> None:
        """Overwrite the stored wishlist snapshot."""
