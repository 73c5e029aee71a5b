"""Money, quantities and the PIN code check shared by the cart and checkout."""

from __future__ import annotations

import re
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from storefront.domain.exceptions import ValidationError

_POSTAL_CODE_RE = re.compile(r"[0-9]{6}")


@dataclass(frozen=True)
class Money:
    """Non-negative Decimal amount in rupees unless stated otherwise."""

    amount: Decimal
    currency: str = "INR"

    def __post_init__(self) -> None:
        if not isinstance(self.amount, Decimal):
            raise ValidationError(
                f"Money amount must be a Decimal, got {type(self.amount).__name__}"
            )
        if self.amount < Decimal("0"):
            raise ValidationError(
                f"Money amount cannot be negative, got {self.amount}"
            )

    # --- Arithmetic helpers ---------------------------------------------------

    def __add__(self, other: Money) -> Money:
        self._assert_same_currency(other)
        return Money(self.amount + other.amount, self.currency)

    def __mul__(self, factor: int) -> Money:
        if not isinstance(factor, int):
            raise TypeError(f"Can only multiply Money by int, got {type(factor).__name__}")
        return Money(self.amount * factor, self.currency)

    def portion(self, rate: Decimal) -> Money:
        """Return ``rate`` of this amount, rounded half-up to a whole unit."""
        value = (self.amount * rate).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
        return Money(value, self.currency)

    # --- Display --------------------------------------------------------------

    def __str__(self) -> str:
        return f"₹{self.amount:,.2f}"

    # --- Internal helpers -----------------------------------------------------

    def _assert_same_currency(self, other: Money) -> None:
        if self.currency != other.currency:
            raise ValidationError(
                f"Cannot combine {self.currency} with {other.currency}"
            )

    # --- Factory --------------------------------------------------------------

    @staticmethod
    def of(amount: str | float | int | Decimal) -> Money:
        """Build from a str, int, float or Decimal (floats go through str)."""
        try:
            return Money(Decimal(str(amount)))
        except (InvalidOperation, ValueError) as exc:
            raise ValidationError(f"Invalid money amount: {amount!r}") from exc

    @staticmethod
    def zero() -> Money:
        return Money(Decimal("0"))


@dataclass(frozen=True)
class Quantity:
    """A positive integer quantity.

    Enforces the invariant that a cart line can never hold zero or
    negative units.
    """

    value: int

    def __post_init__(self) -> None:
        if not isinstance(self.value, int) or isinstance(self.value, bool):
            raise ValidationError(
                f"Quantity must be an integer, got {type(self.value).__name__}"
            )
        if self.value < 1:
            raise ValidationError("Quantity must be at least 1")

    def __add__(self, other: Quantity) -> Quantity:
        return Quantity(self.value + other.value)

    def __str__(self) -> str:
        return str(self.value)


def is_valid_postal_code(value: str | None) -> bool:
    """True for an Indian PIN code: exactly six digits."""
    return bool(value) and _POSTAL_CODE_RE.fullmatch(value) is not None
