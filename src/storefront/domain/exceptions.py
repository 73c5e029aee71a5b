"""Domain-level exceptions.

Every failure the storefront reports derives from DomainException; the
CLI turns any of them into a one-line error for the shopper.
"""

from __future__ import annotations


class DomainException(Exception):
    """Base class for all domain errors."""


class ValidationError(DomainException):
    """A business rule or invariant was violated.

    Form validation attaches ``field_errors`` (field name -> message) so the
    caller can surface each message next to the field that failed.
    """

    def __init__(self, message: str, field_errors: dict[str, str] | None = None) -> None:
        super().__init__(message)
        self.field_errors: dict[str, str] = dict(field_errors or {})


class GatewayError(DomainException):
    """A remote collaborator (server action, auth provider) failed transiently."""


class ShippingRateError(DomainException):
    """The shipping rate resolver could not produce rates."""


class OrderPlacementError(DomainException):
    """Placing the order failed; the shopper may retry."""
