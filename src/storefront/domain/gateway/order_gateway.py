"""Abstract order placement server action."""

from __future__ import annotations

from abc import ABC, abstractmethod

from storefront.domain.model.cart import Cart
from storefront.domain.model.checkout import CheckoutState, CheckoutTotals


class OrderGateway(ABC):

    @abstractmethod
    async def place_order(
        self, state: CheckoutState, cart: Cart, totals: CheckoutTotals
    ) -> str:
        """Create the order server-side and return its order number."""
