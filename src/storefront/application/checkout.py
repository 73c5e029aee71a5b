"""Application service: the Shipping -> Payment -> Confirmation state machine.

Steps only move forward once the current step's form validates; going
back from Payment to Shipping is always allowed. Totals are derived from
the live cart on every read and are never stored.
"""

from __future__ import annotations

import asyncio
from dataclasses import replace

import structlog

from storefront.application.cart_reconciler import CartReconciler
from storefront.application.order_placement import OrderPlacementGuard
from storefront.application.shipping_rates import ShippingRateTracker
from storefront.domain.exceptions import ValidationError
from storefront.domain.model.checkout import (
    CheckoutState,
    CheckoutStep,
    CheckoutTotals,
    ShippingMethod,
    ShippingSelection,
    compute_totals,
)
from storefront.domain.model.order import PlacedOrder
from storefront.domain.model.validation import (
    validate_billing_info,
    validate_payment_info,
    validate_shipping_info,
)

logger = structlog.get_logger(__name__)


class CheckoutStateMachine:

    def __init__(
        self,
        cart: CartReconciler,
        rates: ShippingRateTracker,
        guard: OrderPlacementGuard,
        state: CheckoutState | None = None,
    ) -> None:
        self._cart = cart
        self._rates = rates
        self._guard = guard
        self._state = state or CheckoutState()

    # --- Queries --------------------------------------------------------------

    @property
    def state(self) -> CheckoutState:
        return self._state

    @property
    def step(self) -> CheckoutStep:
        return self._state.step

    @property
    def rates(self) -> ShippingRateTracker:
        return self._rates

    @property
    def is_processing(self) -> bool:
        return self._guard.is_submitting

    @property
    def shipping_selection(self) -> ShippingSelection | None:
        """The chosen method among the rates offered for the current code.

        Falls back to the first offered method when the chosen one is not
        available there.
        """
        options = self._rates.options
        if not options:
            return None
        wanted = self._state.shipping_info.shipping_method
        option = next((o for o in options if o.method is wanted), options[0])
        return ShippingSelection(
            method=option.method, cost=option.cost, estimate=option.estimated_delivery
        )

    @property
    def totals(self) -> CheckoutTotals:
        return compute_totals(self._cart.cart, self.shipping_selection)

    # --- Form updates ---------------------------------------------------------

    def update_shipping_info(self, **changes: object) -> None:
        """Apply field changes; a changed postal code triggers a rate lookup."""
        method = changes.get("shipping_method")
        if isinstance(method, str):
            changes["shipping_method"] = ShippingMethod(method)
        previous = self._state.shipping_info
        self._state.shipping_info = replace(previous, **changes)  # type: ignore[arg-type]
        if "postal_code" in changes:
            self._rates.request(self._state.shipping_info.postal_code)

    def select_shipping_method(self, method: ShippingMethod) -> None:
        self._state.shipping_info = replace(self._state.shipping_info, shipping_method=method)

    def update_billing_info(self, **changes: object) -> None:
        self._state.billing_info = replace(self._state.billing_info, **changes)  # type: ignore[arg-type]

    def update_payment_info(self, **changes: object) -> None:
        self._state.payment_info = replace(self._state.payment_info, **changes)  # type: ignore[arg-type]

    # --- Transitions ----------------------------------------------------------

    def submit_shipping(self) -> None:
        """Shipping -> Payment, if every shipping field validates.

        Raises ValidationError carrying per-field messages otherwise.
        """
        self._require_step(CheckoutStep.SHIPPING)
        errors = validate_shipping_info(self._state.shipping_info)
        if errors:
            raise ValidationError("Please correct the shipping details", errors)
        self._state.step = CheckoutStep.PAYMENT

    def go_back(self) -> None:
        """Payment -> Shipping, without re-validating the shipping form."""
        self._require_step(CheckoutStep.PAYMENT)
        self._state.step = CheckoutStep.SHIPPING

    async def submit_payment(self) -> PlacedOrder | None:
        """Payment -> Confirmation through the order placement guard.

        Returns None when a placement is already in progress. Once an order
        number exists, returns the same placed order instead of placing a
        new one.
        """
        if self._state.order_number is not None:
            return self._guard.placed_order

        self._require_step(CheckoutStep.PAYMENT)
        errors = {
            **validate_payment_info(self._state.payment_info),
            **validate_billing_info(self._state.billing_info),
        }
        if errors:
            raise ValidationError("Please correct the payment details", errors)

        cart = self._cart.cart
        pending = self._guard.place(self._state, cart, compute_totals(cart, self.shipping_selection))
        if pending is None:
            return None

        # An in-flight placement always runs to completion.
        placed = await asyncio.shield(pending)
        self._state.order_number = placed.order_number
        self._state.step = CheckoutStep.CONFIRMATION
        logger.info("Checkout confirmed", order_number=placed.order_number)
        return placed

    # --- Internal helpers -----------------------------------------------------

    def _require_step(self, expected: CheckoutStep) -> None:
        if self._state.step is not expected:
            raise ValidationError(
                f"Cannot do that at the {self._state.step.name.lower()} step"
            )
