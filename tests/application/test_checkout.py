"""Tests for the checkout state machine."""

import asyncio
from decimal import Decimal

import pytest

from storefront.application.cart_reconciler import CartReconciler
from storefront.application.checkout import CheckoutStateMachine
from storefront.application.order_placement import OrderPlacementGuard
from storefront.application.shipping_rates import ShippingRateTracker
from storefront.domain.exceptions import OrderPlacementError, ValidationError
from storefront.domain.model.cart import Cart
from storefront.domain.model.checkout import (
    CheckoutStep,
    PaymentMethod,
    ShippingMethod,
    ShippingOption,
)
from storefront.domain.model.value_objects import Money
from tests.fakes import (
    FakeLocalStore,
    FakeOrderGateway,
    FakeRemoteCartGateway,
    FakeShippingRateResolver,
    make_line,
)

RATES = {
    "110001": [
        ShippingOption(ShippingMethod.STANDARD, Money.of("120"), "3-5 business days"),
        ShippingOption(ShippingMethod.EXPRESS, Money.of("350"), "1-2 business days"),
    ],
}

SHIPPING = dict(
    first_name="Asha",
    last_name="Rao",
    email="asha@example.com",
    phone="9876543210",
    address="12 Janpath",
    city="New Delhi",
    state="DL",
)


def _setup(fail=False):
    local = FakeLocalStore(cart=Cart.of([make_line("P1", "M", 2, "500.00")]))
    cart = CartReconciler(local, FakeRemoteCartGateway())
    gateway = FakeOrderGateway(fail=fail)
    rates = ShippingRateTracker(FakeShippingRateResolver(RATES))
    machine = CheckoutStateMachine(cart, rates, OrderPlacementGuard(gateway, cart, cooldown=0))
    return machine, gateway, cart


async def _to_payment(machine):
    machine.update_shipping_info(postal_code="110001", **SHIPPING)
    await machine.rates.refresh()
    machine.submit_shipping()
    machine.update_payment_info(
        card_number="4111 1111 1111 1111",
        card_name="Asha Rao",
        expiry_date="12/29",
        cvv="123",
    )


class TestShippingStep:

    def test_missing_fields_block_progress(self):
        machine, _, _ = _setup()
        with pytest.raises(ValidationError) as exc_info:
            machine.submit_shipping()
        assert exc_info.value.field_errors["first_name"] == "First name is required"
        assert machine.step is CheckoutStep.SHIPPING

    def test_invalid_phone_reported(self):
        machine, _, _ = _setup()
        machine.update_shipping_info(postal_code="11000", **{**SHIPPING, "phone": "12345"})
        with pytest.raises(ValidationError) as exc_info:
            machine.submit_shipping()
        assert set(exc_info.value.field_errors) == {"phone", "postal_code"}

    def test_totals_before_rates_have_no_shipping(self):
        machine, _, _ = _setup()
        totals = machine.totals
        assert totals.shipping_cost == Money.zero()
        assert totals.total.amount == Decimal("1180")

    def test_totals_with_standard_shipping(self):
        async def scenario():
            machine, _, _ = _setup()
            machine.update_shipping_info(postal_code="110001")
            await machine.rates.refresh()
            return machine.totals

        totals = asyncio.run(scenario())
        assert totals.subtotal.amount == Decimal("1000")
        assert totals.shipping_cost.amount == Decimal("120")
        assert totals.tax.amount == Decimal("180")
        assert totals.total.amount == Decimal("1300")

    def test_express_selection_from_string(self):
        async def scenario():
            machine, _, _ = _setup()
            machine.update_shipping_info(postal_code="110001", shipping_method="express")
            await machine.rates.refresh()
            return machine.shipping_selection

        selection = asyncio.run(scenario())
        assert selection.method is ShippingMethod.EXPRESS
        assert selection.cost.amount == Decimal("350")

    def test_select_shipping_method_changes_totals(self):
        async def scenario():
            machine, _, _ = _setup()
            machine.update_shipping_info(postal_code="110001")
            await machine.rates.refresh()
            standard = machine.totals.total.amount
            machine.select_shipping_method(ShippingMethod.EXPRESS)
            return standard, machine.totals.total.amount

        standard, express = asyncio.run(scenario())
        assert standard == Decimal("1300")
        assert express == Decimal("1530")

    def test_totals_follow_cart_changes(self):
        async def scenario():
            machine, _, cart = _setup()
            machine.update_shipping_info(postal_code="110001")
            await machine.rates.refresh()
            cart.update_quantity("P1", "M", 1)
            return machine.totals

        totals = asyncio.run(scenario())
        assert totals.total.amount == Decimal("710")


class TestPaymentStep:

    def test_back_keeps_entered_details(self):
        async def scenario():
            machine, _, _ = _setup()
            await _to_payment(machine)
            machine.go_back()
            return machine

        machine = asyncio.run(scenario())
        assert machine.step is CheckoutStep.SHIPPING
        assert machine.state.shipping_info.first_name == "Asha"

    def test_invalid_card_blocks_placement(self):
        async def scenario():
            machine, gateway, _ = _setup()
            await _to_payment(machine)
            machine.update_payment_info(cvv="12")
            with pytest.raises(ValidationError) as exc_info:
                await machine.submit_payment()
            return exc_info.value, gateway

        error, gateway = asyncio.run(scenario())
        assert "cvv" in error.field_errors
        assert gateway.placed == []

    def test_upi_needs_handle(self):
        async def scenario():
            machine, _, _ = _setup()
            await _to_payment(machine)
            machine.update_payment_info(method=PaymentMethod.UPI, upi_id="asha")
            with pytest.raises(ValidationError) as exc_info:
                await machine.submit_payment()
            return exc_info.value

        error = asyncio.run(scenario())
        assert error.field_errors == {"upi_id": "Valid UPI ID is required"}

    def test_payment_requires_payment_step(self):
        machine, _, _ = _setup()
        with pytest.raises(ValidationError):
            asyncio.run(machine.submit_payment())


class TestConfirmation:

    def test_double_submit_places_one_order(self):
        async def scenario():
            machine, gateway, cart = _setup()
            await _to_payment(machine)
            results = await asyncio.gather(machine.submit_payment(), machine.submit_payment())
            return machine, gateway, cart, results

        machine, gateway, cart, results = asyncio.run(scenario())
        assert len(gateway.placed) == 1
        assert results[1] is None
        assert machine.step is CheckoutStep.CONFIRMATION
        assert machine.state.order_number == results[0].order_number
        assert cart.cart.is_empty

    def test_redisplay_returns_same_order(self):
        async def scenario():
            machine, gateway, _ = _setup()
            await _to_payment(machine)
            first = await machine.submit_payment()
            again = await machine.submit_payment()
            return first, again, gateway

        first, again, gateway = asyncio.run(scenario())
        assert again is first
        assert len(gateway.placed) == 1

    def test_failed_placement_stays_on_payment(self):
        async def scenario():
            machine, _, cart = _setup(fail=True)
            await _to_payment(machine)
            with pytest.raises(OrderPlacementError):
                await machine.submit_payment()
            return machine, cart

        machine, cart = asyncio.run(scenario())
        assert machine.step is CheckoutStep.PAYMENT
        assert machine.state.order_number is None
        assert not cart.cart.is_empty

    def test_is_processing_while_order_in_flight(self):
        async def scenario():
            machine, gateway, _ = _setup()
            await _to_payment(machine)
            gateway.gate = asyncio.Event()
            submitting = asyncio.create_task(machine.submit_payment())
            await asyncio.sleep(0)
            during = machine.is_processing
            gateway.gate.set()
            await submitting
            return during, machine.is_processing

        during, after = asyncio.run(scenario())
        assert during
        assert not after


class TestBilling:

    def test_same_as_shipping_copies_shipping_address(self):
        async def scenario():
            machine, _, _ = _setup()
            await _to_payment(machine)
            return machine.state.resolved_billing

        billing = asyncio.run(scenario())
        assert billing.same_as_shipping
        assert billing.address == "12 Janpath"
        assert billing.postal_code == "110001"

    def test_separate_billing_address_is_validated(self):
        async def scenario():
            machine, gateway, _ = _setup()
            await _to_payment(machine)
            machine.update_billing_info(same_as_shipping=False, first_name="Asha")
            with pytest.raises(ValidationError) as exc_info:
                await machine.submit_payment()
            return exc_info.value, gateway

        error, gateway = asyncio.run(scenario())
        assert error.field_errors["billing_address"] == "Address is required"
        assert "billing_first_name" not in error.field_errors
        assert gateway.placed == []

    def test_separate_billing_address_is_used(self):
        async def scenario():
            machine, _, _ = _setup()
            await _to_payment(machine)
            machine.update_billing_info(
                same_as_shipping=False,
                first_name="Asha",
                last_name="Rao",
                address="7 Park Street",
                city="Kolkata",
                state="WB",
                postal_code="700016",
            )
            await machine.submit_payment()
            return machine

        machine = asyncio.run(scenario())
        assert machine.step is CheckoutStep.CONFIRMATION
        assert machine.state.resolved_billing.city == "Kolkata"
