"""Application service: keeps the cart consistent across local and remote stores.

The local store is the fast path and the contract of record for the
current tab; every mutation lands there synchronously. While the shopper
is signed in, each mutation is also mirrored to the remote store in the
background. On sign-in ``sync`` folds the anonymous cart into the
server cart and converges both stores on the union.
"""

from __future__ import annotations

import structlog

from storefront.application.remote_mirror import TRANSIENT_ERRORS, RemoteMirror, RemoteWrite
from storefront.domain.exceptions import DomainException, ValidationError
from storefront.domain.model.cart import Cart, CartLine, LineKey, merge_carts
from storefront.domain.model.identity import Identity
from storefront.domain.model.value_objects import Quantity
from storefront.domain.repository.local_store import LocalStore
from storefront.domain.repository.remote_store import RemoteCartGateway

logger = structlog.get_logger(__name__)


class CartReconciler:

    def __init__(self, local_store: LocalStore, remote: RemoteCartGateway) -> None:
        self._local = local_store
        self._remote = remote
        self._identity = Identity.anonymous()
        self._mirror = RemoteMirror("cart", self._replay)
        self._syncing = False
        self._touched: set[LineKey] = set()

    # --- Queries --------------------------------------------------------------

    @property
    def identity(self) -> Identity:
        return self._identity

    @property
    def cart(self) -> Cart:
        return self._local.load_cart()

    @property
    def mirror(self) -> RemoteMirror:
        return self._mirror

    def set_identity(self, identity: Identity) -> None:
        """Switch between local-only and mirrored operation.

        Signing out is not destructive: the local snapshot stays the active
        view and the server cart is left for the next sign-in.
        """
        self._identity = identity

    # --- Mutations ------------------------------------------------------------

    def add(self, line: CartLine) -> CartLine:
        """Add a line, summing quantities with an existing line of the same key.

        Returns the merged line as now stored locally.
        """
        cart = self._local.load_cart().with_added(line)
        self._local.save_cart(cart)
        self._push(line.key, lambda: self._remote.add_item(line))
        return cart.get(line.key)  # type: ignore[return-value]

    def update_quantity(
        self, product_id: str, variant_key: str, new_quantity: int
    ) -> CartLine | None:
        """Replace a line's quantity in place.

        Quantities below 1 are rejected; callers remove the line instead.
        Returns None when the line is not in the cart.
        """
        if new_quantity < 1:
            raise ValidationError("Quantity must be at least 1; remove the item instead")
        key = (product_id, variant_key)
        cart = self._local.load_cart()
        if cart.get(key) is None:
            return None
        cart = cart.with_quantity(key, Quantity(new_quantity))
        self._local.save_cart(cart)
        self._push(key, lambda: self._remote.update_quantity(product_id, variant_key, new_quantity))
        return cart.get(key)

    def remove(self, product_id: str, variant_key: str) -> bool:
        """Remove a line. Removing a line that is not there is a no-op."""
        key = (product_id, variant_key)
        cart = self._local.load_cart()
        if cart.get(key) is None:
            return False
        self._local.save_cart(cart.without(key))
        self._push(key, lambda: self._remote.remove_item(product_id, variant_key))
        return True

    def remove_lines(self, keys: set[LineKey]) -> None:
        """Drop the given lines from both stores."""
        cart = self._local.load_cart()
        present = keys & cart.keys()
        if not present:
            return
        self._local.save_cart(cart.without_keys(present))
        for product_id, variant_key in sorted(present):
            self._push(
                (product_id, variant_key),
                lambda p=product_id, v=variant_key: self._remote.remove_item(p, v),
            )

    def remove_ordered(self, lines: tuple[CartLine, ...]) -> None:
        """Take the ordered quantities out of the cart.

        Units added to a line after the order was snapshotted stay in the cart.
        """
        cart = self._local.load_cart()
        remaining: dict[LineKey, int] = {}
        for ordered in lines:
            current = cart.get(ordered.key)
            if current is None:
                continue
            left = current.quantity.value - ordered.quantity.value
            if left >= 1:
                cart = cart.with_quantity(ordered.key, Quantity(left))
            else:
                cart = cart.without(ordered.key)
            remaining[ordered.key] = left
        if not remaining:
            return

        self._local.save_cart(cart)
        for (product_id, variant_key), left in sorted(remaining.items()):
            if left >= 1:
                self._push(
                    (product_id, variant_key),
                    lambda p=product_id, v=variant_key, q=left: self._remote.update_quantity(p, v, q),
                )
            else:
                self._push(
                    (product_id, variant_key),
                    lambda p=product_id, v=variant_key: self._remote.remove_item(p, v),
                )

    def clear(self) -> None:
        self.remove_lines(self._local.load_cart().keys())

    # --- Reconciliation -------------------------------------------------------

    async def sync(self) -> Cart:
        """Merge the local cart into the server cart and converge both stores.

        Steps:
        1. Read the local snapshot and fetch the server cart.
        2. Push every local line whose key the server does not have yet.
           Keys the server already holds count as merged.
        3. Re-fetch the server cart and write it locally. The server copy
           wins for keys present in both.

        Lines the shopper changes while the sync is running keep their
        local state, which is then pushed to the server as-is.

        Running it again without intervening changes pushes nothing and
        leaves both stores as they are. On any failure the local snapshot
        is kept untouched.
        """
        self._syncing = True
        try:
            return await self._sync()
        finally:
            # Changes not yet pushed are repaired on the next mutation.
            self._mirror.mark_dirty(self._finish_sync())

    # --- Internal helpers -----------------------------------------------------

    def _push(self, key: LineKey, write: RemoteWrite) -> None:
        if not self._identity.is_authenticated:
            return
        if self._syncing:
            self._touched.add(key)
            return
        self._mirror.submit(key, write)

    def _finish_sync(self) -> set[LineKey]:
        touched, self._touched = self._touched, set()
        self._syncing = False
        return touched

    async def _sync(self) -> Cart:
        async with self._mirror.exclusive():
            before = self._local.load_cart()
            try:
                remote = await self._remote.list_items()
                remote_keys = remote.keys()
                pushed = 0
                for line in before.lines:
                    if line.key not in remote_keys:
                        await self._remote.add_item(line)
                        pushed += 1
                converged = await self._remote.list_items()
            except (*TRANSIENT_ERRORS, DomainException) as exc:
                logger.warning(
                    "Cart sync failed, keeping local cart",
                    user_id=self._identity.user_id,
                    item_count=before.item_count,
                    error=str(exc),
                )
                return self._local.load_cart()

            touched = self._finish_sync()
            result = merge_carts(self._local.load_cart(), converged.without_keys(touched))
            self._local.save_cart(result)
            self._mirror.reset()
            if touched:
                await self._push_touched(touched)

        logger.info(
            "Cart synced",
            user_id=self._identity.user_id,
            pushed=pushed,
            line_count=len(result.lines),
        )
        return result

    async def _push_touched(self, keys: set[LineKey]) -> None:
        try:
            await self._replay(keys)
        except (*TRANSIENT_ERRORS, DomainException) as exc:
            logger.warning(
                "Could not push changes made during sync",
                user_id=self._identity.user_id,
                error=str(exc),
            )
            self._mirror.mark_dirty(keys)

    async def _replay(self, keys: set[LineKey]) -> None:
        cart = self._local.load_cart()
        remote = await self._remote.list_items()
        for key in sorted(keys):
            local_line = cart.get(key)
            remote_line = remote.get(key)
            if local_line is None:
                if remote_line is not None:
                    await self._remote.remove_item(*key)
            elif remote_line is None:
                await self._remote.add_item(local_line)
            elif remote_line.quantity != local_line.quantity:
                await self._remote.update_quantity(*key, local_line.quantity.value)
