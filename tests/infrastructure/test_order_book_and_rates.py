"""Tests for the JSON order book and the static shipping rate table."""

import asyncio
import json

import pytest

from storefront.domain.exceptions import ShippingRateError
from storefront.domain.model.cart import Cart
from storefront.domain.model.checkout import (
    BillingInfo,
    CheckoutState,
    ShippingInfo,
    ShippingMethod,
    compute_totals,
)
from storefront.infrastructure.persistence.json_order_book import JsonOrderBook
from storefront.infrastructure.static_shipping_rates import StaticShippingRateResolver
from tests.fakes import make_line


class TestJsonOrderBook:

    def test_order_numbers_are_sequential(self, tmp_path):
        book = JsonOrderBook(tmp_path / "orders.json")
        cart = Cart.of([make_line()])
        totals = compute_totals(cart, None)

        async def scenario():
            first = await book.place_order(CheckoutState(), cart, totals)
            second = await book.place_order(CheckoutState(), cart, totals)
            return first, second

        first, second = asyncio.run(scenario())
        assert first.startswith("ORD-") and first.endswith("-00001")
        assert second.endswith("-00002")
        assert book.list_order_numbers() == [first, second]

    def test_order_records_totals(self, tmp_path):
        path = tmp_path / "orders.json"
        cart = Cart.of([make_line(qty=2, price="500.00")])
        asyncio.run(JsonOrderBook(path).place_order(CheckoutState(), cart, compute_totals(cart, None)))
        raw = json.loads(path.read_text(encoding="utf-8"))
        assert raw[0]["subtotal"] == "1000.00"
        assert raw[0]["tax"] == "180"
        assert raw[0]["items"][0]["quantity"] == 2


class TestStaticShippingRateResolver:

    def test_two_tier_table(self):
        options = asyncio.run(StaticShippingRateResolver().resolve("110001"))
        assert [o.method for o in options] == [ShippingMethod.STANDARD, ShippingMethod.EXPRESS]
        assert [str(o.cost) for o in options] == ["₹120.00", "₹350.00"]

    def test_unserviceable_prefix(self):
        resolver = StaticShippingRateResolver(unserviceable_prefixes=("79",))
        assert asyncio.run(resolver.resolve("799001")) == []

    def test_invalid_code_rejected(self):
        with pytest.raises(ShippingRateError):
            asyncio.run(StaticShippingRateResolver().resolve("1100"))


class TestBillingRecord:

    def _place(self, tmp_path, state):
        path = tmp_path / "orders.json"
        cart = Cart.of([make_line()])
        asyncio.run(JsonOrderBook(path).place_order(state, cart, compute_totals(cart, None)))
        return json.loads(path.read_text(encoding="utf-8"))[0]["bill_to"]

    def test_billing_defaults_to_shipping_address(self, tmp_path):
        state = CheckoutState(shipping_info=ShippingInfo(address="12 Janpath", city="New Delhi"))
        bill_to = self._place(tmp_path, state)
        assert bill_to["same_as_shipping"] is True
        assert bill_to["address"] == "12 Janpath"
        assert bill_to["city"] == "New Delhi"

    def test_separate_billing_address_recorded(self, tmp_path):
        state = CheckoutState(
            shipping_info=ShippingInfo(address="12 Janpath"),
            billing_info=BillingInfo(same_as_shipping=False, address="7 Park Street", city="Kolkata"),
        )
        bill_to = self._place(tmp_path, state)
        assert bill_to["same_as_shipping"] is False
        assert bill_to["address"] == "7 Park Street"
