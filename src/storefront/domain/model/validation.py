"""Field-level validation for the checkout forms.

Each validator returns a mapping of field name -> message; an empty
mapping means the form is valid.
"""

from __future__ import annotations

import re

from storefront.domain.model.checkout import BillingInfo, PaymentInfo, PaymentMethod, ShippingInfo
from storefront.domain.model.value_objects import is_valid_postal_code

_EMAIL_RE = re.compile(r"\S+@\S+\.\S+")
_PHONE_RE = re.compile(r"(\+91)?[6-9][0-9]{9}")
_CARD_NUMBER_RE = re.compile(r"[0-9]{16}")
_EXPIRY_RE = re.compile(r"[0-9]{2}/[0-9]{2}")
_CVV_RE = re.compile(r"[0-9]{3,4}")

REQUIRED_SHIPPING_FIELDS = {
    "first_name": "First name",
    "last_name": "Last name",
    "email": "Email",
    "phone": "Phone",
    "address": "Address",
    "city": "City",
    "state": "State",
    "postal_code": "Postal code",
}

REQUIRED_BILLING_FIELDS = {
    name: label
    for name, label in REQUIRED_SHIPPING_FIELDS.items()
    if name not in ("email", "phone")
}


def validate_shipping_info(info: ShippingInfo) -> dict[str, str]:
    errors: dict[str, str] = {}

    for name, label in REQUIRED_SHIPPING_FIELDS.items():
        if not getattr(info, name).strip():
            errors[name] = f"{label} is required"

    if info.email.strip() and not _EMAIL_RE.fullmatch(info.email.strip()):
        errors["email"] = "Valid email is required"

    phone = re.sub(r"\s", "", info.phone)
    if phone and not _PHONE_RE.fullmatch(phone):
        errors["phone"] = "Valid 10-digit mobile number required"

    if info.postal_code.strip() and not is_valid_postal_code(info.postal_code.strip()):
        errors["postal_code"] = "Valid 6-digit PIN code required"

    return errors


def validate_payment_info(info: PaymentInfo) -> dict[str, str]:
    errors: dict[str, str] = {}

    if info.method is PaymentMethod.CARD:
        if not _CARD_NUMBER_RE.fullmatch(re.sub(r"\s", "", info.card_number)):
            errors["card_number"] = "Valid card number is required"
        if not info.card_name.strip():
            errors["card_name"] = "Name on card is required"
        if not _EXPIRY_RE.fullmatch(info.expiry_date):
            errors["expiry_date"] = "Valid expiry date (MM/YY) is required"
        if not _CVV_RE.fullmatch(info.cvv):
            errors["cvv"] = "Valid CVV is required"
    elif info.method is PaymentMethod.UPI:
        if "@" not in info.upi_id:
            errors["upi_id"] = "Valid UPI ID is required"
    elif info.method is PaymentMethod.PAYPAL:
        if "@" not in info.paypal_email:
            errors["paypal_email"] = "Valid PayPal email is required"

    return errors


def validate_billing_info(info: BillingInfo) -> dict[str, str]:
    """Only a separate billing address is checked; keys are prefixed ``billing_``."""
    if info.same_as_shipping:
        return {}

    errors: dict[str, str] = {}
    for name, label in REQUIRED_BILLING_FIELDS.items():
        if not getattr(info, name).strip():
            errors[f"billing_{name}"] = f"{label} is required"
    if info.postal_code.strip() and not is_valid_postal_code(info.postal_code.strip()):
        errors["billing_postal_code"] = "Valid 6-digit PIN code required"
    return errors
