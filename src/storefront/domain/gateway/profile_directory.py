"""Abstract lookup of a signed-in customer's profile and addresses."""

from __future__ import annotations

from abc import ABC, abstractmethod

from storefront.domain.model.profile import CustomerProfile


class ProfileDirectory(ABC):

    @abstractmethod
    async def get_profile(self, user_id: str) -> CustomerProfile | None:
        """Return the profile, or None if the customer has not created one."""
