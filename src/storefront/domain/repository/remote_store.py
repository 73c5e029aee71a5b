"""Abstract server-side cart and wishlist persistence.

Every call is a server action scoped to the signed-in user. Adapters
raise ``GatewayError`` for transport or server failures.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from storefront.domain.model.cart import Cart, CartLine
from storefront.domain.model.wishlist import Wishlist


class RemoteCartGateway(ABC):

    @abstractmethod
    async def list_items(self) -> Cart:
        """Return the user's server cart, one line per key."""

    @abstractmethod
    async def add_item(self, line: CartLine) -> CartLine:
        """Upsert a line; an existing key gets the quantity added."""

    @abstractmethod
    async def update_quantity(self, product_id: str, variant_key: str, quantity: int) -> None:
        """Set the absolute quantity of an existing line."""

    @abstractmethod
    async def remove_item(self, product_id: str, variant_key: str) -> None:
        """Delete a line; deleting a missing line is not an error."""


class RemoteWishlistGateway(ABC):

    @abstractmethod
    async def get_items(self) -> Wishlist:
        """Return the user's server wishlist."""

    @abstractmethod
    async def add(self, product_id: str) -> None:
        """Add a product; adding an existing one is not an error."""

    @abstractmethod
    async def remove(self, product_id: str) -> None:
        """Remove a product; removing a missing one is not an error."""

    @abstractmethod
    async def sync_from_local(self, product_ids: list[str]) -> None:
        """Bulk upsert of locally wishlisted products."""
