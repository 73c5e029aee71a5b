"""Static two-tier shipping rate table."""

from __future__ import annotations

from storefront.domain.exceptions import ShippingRateError
from storefront.domain.gateway.shipping_rate_resolver import ShippingRateResolver
from storefront.domain.model.checkout import ShippingMethod, ShippingOption
from storefront.domain.model.value_objects import Money, is_valid_postal_code

DEFAULT_RATES = (
    ShippingOption(ShippingMethod.STANDARD, Money.of(120), "3-5 business days"),
    ShippingOption(ShippingMethod.EXPRESS, Money.of(350), "1-2 business days"),
)


class StaticShippingRateResolver(ShippingRateResolver):
    """Offers the same table for every serviceable PIN code.

    ``unserviceable_prefixes`` lists PIN code prefixes with no delivery.
    """

    def __init__(
        self,
        rates: tuple[ShippingOption, ...] = DEFAULT_RATES,
        unserviceable_prefixes: tuple[str, ...] = (),
    ) -> None:
        self._rates = rates
        self._unserviceable = unserviceable_prefixes

    async def resolve(self, postal_code: str) -> list[ShippingOption]:
        if not is_valid_postal_code(postal_code):
            raise ShippingRateError(f"Invalid PIN code: {postal_code!r}")
        if self._unserviceable and postal_code.startswith(self._unserviceable):
            return []
        return list(self._rates)
