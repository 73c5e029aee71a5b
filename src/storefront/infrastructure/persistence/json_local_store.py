"""JSON-file-backed implementation of LocalStore.

Each snapshot lives in its own namespaced file, the way the browser keeps
one local-storage record per key. A missing file reads as empty; a file
that cannot be parsed is logged and also reads as empty.
"""

from __future__ import annotations

import json
from pathlib import Path

import structlog

from storefront.domain.model.cart import Cart
from storefront.domain.model.wishlist import Wishlist
from storefront.domain.repository.local_store import LocalStore
from storefront.infrastructure.persistence.serialization import (
    MALFORMED,
    cart_from_raw,
    cart_to_raw,
)

logger = structlog.get_logger(__name__)

CART_NAMESPACE = "storefront-cart"
WISHLIST_NAMESPACE = "storefront-wishlist"


class JsonLocalStore(LocalStore):

    def __init__(
        self,
        directory: Path,
        cart_namespace: str = CART_NAMESPACE,
        wishlist_namespace: str = WISHLIST_NAMESPACE,
    ) -> None:
        self._cart_path = directory / f"{cart_namespace}.json"
        self._wishlist_path = directory / f"{wishlist_namespace}.json"
        directory.mkdir(parents=True, exist_ok=True)

    # --- LocalStore interface -------------------------------------------------

    def load_cart(self) -> Cart:
        raw = self._read(self._cart_path)
        if raw is None:
            return Cart()
        try:
            return cart_from_raw(raw)
        except MALFORMED as exc:
            logger.warning("Malformed cart snapshot, treating as empty", path=str(self._cart_path), error=str(exc))
            return Cart()

    def save_cart(self, cart: Cart) -> None:
        self._write(self._cart_path, cart_to_raw(cart))

    def load_wishlist(self) -> Wishlist:
        raw = self._read(self._wishlist_path)
        if raw is None:
            return Wishlist()
        if not isinstance(raw, list):
            logger.warning("Malformed wishlist snapshot, treating as empty", path=str(self._wishlist_path))
            return Wishlist()
        return Wishlist.of([str(product_id) for product_id in raw])

    def save_wishlist(self, wishlist: Wishlist) -> None:
        self._write(self._wishlist_path, list(wishlist.product_ids))

    # --- File helpers ---------------------------------------------------------

    @staticmethod
    def _read(path: Path) -> list | None:
        if not path.exists():
            return None
        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.warning("Unreadable local snapshot, treating as empty", path=str(path), error=str(exc))
            return None

    @staticmethod
    def _write(path: Path, raw: list) -> None:
        path.write_text(json.dumps(raw, indent=2) + "\n", encoding="utf-8")
