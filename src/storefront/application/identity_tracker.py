"""Application service: follows auth events and drives store reconciliation.

Each Anonymous -> Authenticated transition triggers exactly one ``sync``
of the cart and the wishlist. Signing out only switches the reconcilers
back to local-only operation.
"""

from __future__ import annotations

import asyncio

import structlog

from storefront.application.cart_reconciler import CartReconciler
from storefront.application.wishlist_reconciler import WishlistReconciler
from storefront.domain.gateway.session_service import SessionService, Subscription
from storefront.domain.model.identity import AuthEvent, Identity, Session

logger = structlog.get_logger(__name__)


class IdentityTracker:

    def __init__(
        self,
        sessions: SessionService,
        cart: CartReconciler,
        wishlist: WishlistReconciler,
    ) -> None:
        self._sessions = sessions
        self._cart = cart
        self._wishlist = wishlist
        self._identity = Identity.anonymous()
        self._subscription: Subscription | None = None
        self._syncs: set[asyncio.Task[None]] = set()

    @property
    def identity(self) -> Identity:
        return self._identity

    def start(self) -> None:
        if self._subscription is None:
            self._subscription = self._sessions.on_auth_state_change(self._on_auth_event)

    def close(self) -> None:
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None

    def apply(self, identity: Identity) -> asyncio.Task[None] | None:
        """Move to ``identity``; returns the sync task when one was started."""
        previous = self._identity
        self._identity = identity
        self._cart.set_identity(identity)
        self._wishlist.set_identity(identity)

        if not identity.is_authenticated:
            if previous.is_authenticated:
                logger.info("Signed out, using local stores only", user_id=previous.user_id)
            return None
        if previous.is_authenticated:
            if identity != previous:
                logger.warning(
                    "Switched accounts without signing out, not merging",
                    previous=previous.user_id,
                    user_id=identity.user_id,
                )
            return None

        logger.info("Signed in, reconciling stores", user_id=identity.user_id)
        task = asyncio.get_running_loop().create_task(self._sync_all())
        self._syncs.add(task)
        task.add_done_callback(self._syncs.discard)
        return task

    async def wait_idle(self) -> None:
        while self._syncs:
            await asyncio.gather(*self._syncs)

    # --- Internal helpers -----------------------------------------------------

    def _on_auth_event(self, event: AuthEvent, session: Session | None) -> None:
        if event is AuthEvent.SIGNED_OUT:
            self.apply(Identity.anonymous())
        elif session is not None:
            self.apply(Identity.from_session(session))
        elif event is AuthEvent.INITIAL_SESSION:
            self.apply(Identity.anonymous())

    async def _sync_all(self) -> None:
        await self._cart.sync()
        await self._wishlist.sync()
