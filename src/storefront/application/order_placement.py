"""Application service: places the order at most once per checkout.

The guard latches synchronously, in the same tick as the shopper's action
and before any awaiting, so a double click cannot slip a second request
past the check. The latch is released when the request settles plus a
short cooldown. Calls made while latched are ignored.
"""

from __future__ import annotations

import asyncio

import structlog

from storefront.application.cart_reconciler import CartReconciler
from storefront.application.remote_mirror import TRANSIENT_ERRORS
from storefront.domain.exceptions import OrderPlacementError
from storefront.domain.gateway.order_gateway import OrderGateway
from storefront.domain.model.cart import Cart
from storefront.domain.model.checkout import CheckoutState, CheckoutTotals
from storefront.domain.model.order import PlacedOrder

logger = structlog.get_logger(__name__)

DEFAULT_COOLDOWN_SECONDS = 1.0


class OrderPlacementGuard:

    def __init__(
        self,
        gateway: OrderGateway,
        cart: CartReconciler,
        cooldown: float = DEFAULT_COOLDOWN_SECONDS,
    ) -> None:
        self._gateway = gateway
        self._cart = cart
        self._cooldown = cooldown
        self._latched = False
        self._release_handle: asyncio.TimerHandle | None = None
        self._placed: PlacedOrder | None = None

    @property
    def is_submitting(self) -> bool:
        return self._latched

    @property
    def placed_order(self) -> PlacedOrder | None:
        return self._placed

    def place(
        self, state: CheckoutState, cart: Cart, totals: CheckoutTotals
    ) -> asyncio.Future[PlacedOrder] | None:
        """Start placing the order; returns None if a placement is in progress.

        Once an order was placed, further calls resolve to that same order
        without contacting the server again.
        """
        if self._latched:
            logger.info("Order placement already in progress, ignoring")
            return None
        self._latched = True

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self._latched = False
            raise

        if self._placed is not None:
            self._latched = False
            done: asyncio.Future[PlacedOrder] = loop.create_future()
            done.set_result(self._placed)
            return done

        return loop.create_task(self._commit(state, cart, totals))

    def close(self) -> None:
        """Release the latch and drop the pending cooldown timer."""
        if self._release_handle is not None:
            self._release_handle.cancel()
            self._release_handle = None
        self._latched = False

    # --- Internal helpers -----------------------------------------------------

    async def _commit(
        self, state: CheckoutState, cart: Cart, totals: CheckoutTotals
    ) -> PlacedOrder:
        try:
            if cart.is_empty:
                raise OrderPlacementError("Your cart is empty")
            try:
                order_number = await self._gateway.place_order(state, cart, totals)
            except TRANSIENT_ERRORS as exc:
                logger.warning("Order placement failed", error=str(exc))
                raise OrderPlacementError(
                    "We couldn't place your order. Please try again."
                ) from exc

            placed = PlacedOrder(order_number=order_number, lines=cart.lines, totals=totals)
            self._placed = placed
            self._cart.remove_ordered(cart.lines)
            logger.info(
                "Order placed",
                order_number=order_number,
                line_count=len(cart.lines),
                total=str(totals.total.amount),
            )
            return placed
        finally:
            self._schedule_release()

    def _schedule_release(self) -> None:
        if self._cooldown <= 0:
            self._latched = False
            return
        loop = asyncio.get_running_loop()
        self._release_handle = loop.call_later(self._cooldown, self._release)

    def _release(self) -> None:
        self._release_handle = None
        self._latched = False
