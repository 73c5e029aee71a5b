"""Application service: keeps the wishlist consistent across local and remote stores.

Same dual-store lifecycle as the cart, with set semantics and no
quantities.
"""

from __future__ import annotations

import structlog

from storefront.application.remote_mirror import TRANSIENT_ERRORS, RemoteMirror, RemoteWrite
from storefront.domain.exceptions import DomainException
from storefront.domain.model.identity import Identity
from storefront.domain.model.wishlist import Wishlist, merge_wishlists
from storefront.domain.repository.local_store import LocalStore
from storefront.domain.repository.remote_store import RemoteWishlistGateway

logger = structlog.get_logger(__name__)


class WishlistReconciler:

    def __init__(self, local_store: LocalStore, remote: RemoteWishlistGateway) -> None:
        self._local = local_store
        self._remote = remote
        self._identity = Identity.anonymous()
        self._mirror = RemoteMirror("wishlist", self._replay)
        # Products changed while a sync runs; their local membership wins.
        self._touched: set[str] | None = None

    @property
    def identity(self) -> Identity:
        return self._identity

    @property
    def wishlist(self) -> Wishlist:
        return self._local.load_wishlist()

    @property
    def mirror(self) -> RemoteMirror:
        return self._mirror

    def set_identity(self, identity: Identity) -> None:
        self._identity = identity

    def contains(self, product_id: str) -> bool:
        return product_id in self._local.load_wishlist()

    def add(self, product_id: str) -> bool:
        """Add a product. Returns False if it was already wishlisted."""
        wishlist = self._local.load_wishlist()
        if product_id in wishlist:
            return False
        self._local.save_wishlist(wishlist.with_added(product_id))
        self._push(product_id, lambda: self._remote.add(product_id))
        return True

    def remove(self, product_id: str) -> bool:
        """Remove a product. Removing one that is not there is a no-op."""
        wishlist = self._local.load_wishlist()
        if product_id not in wishlist:
            return False
        self._local.save_wishlist(wishlist.without(product_id))
        self._push(product_id, lambda: self._remote.remove(product_id))
        return True

    def toggle(self, product_id: str) -> bool:
        """Flip membership; returns True if the product is now wishlisted."""
        if self.remove(product_id):
            return False
        return self.add(product_id)

    async def sync(self) -> Wishlist:
        """Push locally wishlisted products to the server and adopt the union.

        Products added or removed while the sync runs keep their local
        membership; their queued writes bring the server in line afterwards.
        Idempotent; a failure leaves the local wishlist untouched.
        """
        self._touched = set()
        try:
            async with self._mirror.exclusive():
                return await self._sync()
        finally:
            self._touched = None

    def _push(self, product_id: str, write: RemoteWrite) -> None:
        if not self._identity.is_authenticated:
            return
        if self._touched is not None:
            self._touched.add(product_id)
        self._mirror.submit(product_id, write)

    async def _sync(self) -> Wishlist:
        before = self._local.load_wishlist()
        try:
            remote = await self._remote.get_items()
            missing = [p for p in before.product_ids if p not in remote]
            if missing:
                await self._remote.sync_from_local(missing)
            converged = await self._remote.get_items()
        except (*TRANSIENT_ERRORS, DomainException) as exc:
            logger.warning(
                "Wishlist sync failed, keeping local wishlist",
                user_id=self._identity.user_id,
                error=str(exc),
            )
            return self._local.load_wishlist()

        for product_id in self._touched or ():
            converged = converged.without(product_id)
        result = merge_wishlists(self._local.load_wishlist(), converged)
        self._local.save_wishlist(result)
        self._mirror.reset()

        logger.info(
            "Wishlist synced",
            user_id=self._identity.user_id,
            pushed=len(missing),
            size=len(result),
        )
        return result

    async def _replay(self, product_ids: set[str]) -> None:
        wishlist = self._local.load_wishlist()
        remote = await self._remote.get_items()
        for product_id in sorted(product_ids):
            if product_id in wishlist and product_id not in remote:
                await self._remote.add(product_id)
            elif product_id not in wishlist and product_id in remote:
                await self._remote.remove(product_id)
