"""Abstract auth provider (the session oracle)."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable

from storefront.domain.model.identity import AuthEvent, Session

AuthStateHandler = Callable[[AuthEvent, "Session | None"], None]


class Subscription(ABC):

    @abstractmethod
    def unsubscribe(self) -> None:
        """Stop delivering events to the handler."""


class SessionService(ABC):

    @abstractmethod
    async def get_session(self) -> Session | None:
        """Return the current session, or None when nobody is signed in.

        Raises GatewayError when the provider cannot be reached.
        """

    @abstractmethod
    def on_auth_state_change(self, handler: AuthStateHandler) -> Subscription:
        """Register ``handler`` for sign-in, sign-out and refresh events."""
