"""Checkout model: form data, shipping choice and derived totals.

The three forms (shipping, billing, payment) are immutable snapshots;
``CheckoutState`` is the mutable holder the state machine advances.
Totals are never stored: ``compute_totals`` derives them from the cart
and the current shipping selection every time they are read.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum

from storefront.domain.model.cart import Cart
from storefront.domain.model.value_objects import Money

# ---------------------------------------------------------------------------
# Business rules
# ---------------------------------------------------------------------------
TAX_RATE = Decimal("0.18")  # flat GST, no jurisdiction logic


class CheckoutStep(Enum):
    SHIPPING = 1
    PAYMENT = 2
    CONFIRMATION = 3


class ShippingMethod(Enum):
    STANDARD = "standard"
    EXPRESS = "express"


class PaymentMethod(Enum):
    CARD = "creditCard"
    UPI = "upi"
    PAYPAL = "paypal"


@dataclass(frozen=True)
class ShippingOption:
    """One rate offered by the resolver for a postal code."""

    method: ShippingMethod
    cost: Money
    estimated_delivery: str


@dataclass(frozen=True)
class ShippingSelection:
    method: ShippingMethod
    cost: Money
    estimate: str


@dataclass(frozen=True)
class ShippingInfo:
    first_name: str = ""
    last_name: str = ""
    email: str = ""
    phone: str = ""
    address: str = ""
    apartment: str = ""
    city: str = ""
    state: str = ""
    postal_code: str = ""
    country: str = "India"
    shipping_method: ShippingMethod = ShippingMethod.STANDARD


@dataclass(frozen=True)
class BillingInfo:
    same_as_shipping: bool = True
    first_name: str = ""
    last_name: str = ""
    address: str = ""
    apartment: str = ""
    city: str = ""
    state: str = ""
    postal_code: str = ""
    country: str = "India"


@dataclass(frozen=True)
class PaymentInfo:
    method: PaymentMethod = PaymentMethod.CARD
    card_number: str = ""
    card_name: str = ""
    expiry_date: str = ""
    cvv: str = ""
    upi_id: str = ""
    paypal_email: str = ""


@dataclass(frozen=True)
class CheckoutTotals:
    subtotal: Money
    shipping_cost: Money
    tax: Money
    total: Money


@dataclass
class CheckoutState:
    """Where the shopper is in checkout and what they have entered so far.

    ``order_number`` is set exactly once, when placement succeeds, and is
    never overwritten afterwards.
    """

    step: CheckoutStep = CheckoutStep.SHIPPING
    shipping_info: ShippingInfo = field(default_factory=ShippingInfo)
    billing_info: BillingInfo = field(default_factory=BillingInfo)
    payment_info: PaymentInfo = field(default_factory=PaymentInfo)
    order_number: str | None = None

    @property
    def resolved_billing(self) -> BillingInfo:
        """Billing details to record, copying the shipping address when asked to."""
        if not self.billing_info.same_as_shipping:
            return self.billing_info
        info = self.shipping_info
        return BillingInfo(
            same_as_shipping=True,
            first_name=info.first_name,
            last_name=info.last_name,
            address=info.address,
            apartment=info.apartment,
            city=info.city,
            state=info.state,
            postal_code=info.postal_code,
            country=info.country,
        )


def compute_totals(cart: Cart, selection: ShippingSelection | None) -> CheckoutTotals:
    """Derive subtotal, tax and total from the cart's current contents.

    Shipping is zero until a rate has been selected.
    """
    subtotal = cart.subtotal
    shipping_cost = selection.cost if selection is not None else Money.zero()
    tax = subtotal.portion(TAX_RATE)
    return CheckoutTotals(
        subtotal=subtotal,
        shipping_cost=shipping_cost,
        tax=tax,
        total=subtotal + shipping_cost + tax,
    )
