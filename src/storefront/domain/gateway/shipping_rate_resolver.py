"""Abstract shipping rate lookup."""

from __future__ import annotations

from abc import ABC, abstractmethod

from storefront.domain.model.checkout import ShippingOption


class ShippingRateResolver(ABC):

    @abstractmethod
    async def resolve(self, postal_code: str) -> list[ShippingOption]:
        """Return the methods available for ``postal_code``.

        An empty list means the code is not serviceable. Raises
        ShippingRateError when the lookup itself failed.
        """
