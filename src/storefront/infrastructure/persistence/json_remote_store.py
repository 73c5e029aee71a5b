"""JSON-file-backed server store for carts and wishlists.

Used for local development in place of the hosted backend. All rows are
kept in one file keyed by user id; every call acts on behalf of the user
of the current session, like the server actions it stands in for.
"""

from __future__ import annotations

import json
from pathlib import Path

from storefront.domain.exceptions import GatewayError
from storefront.domain.model.cart import Cart, CartLine
from storefront.domain.model.value_objects import Quantity
from storefront.domain.model.wishlist import Wishlist
from storefront.domain.repository.remote_store import RemoteCartGateway, RemoteWishlistGateway
from storefront.infrastructure.persistence.json_session_service import JsonSessionService
from storefront.infrastructure.persistence.serialization import (
    MALFORMED,
    cart_from_raw,
    cart_to_raw,
)


class _JsonRemoteFile:

    def __init__(self, file_path: Path, sessions: JsonSessionService) -> None:
        self._file_path = file_path
        self._sessions = sessions
        self._ensure_file()

    def _user_id(self) -> str:
        session = self._sessions.current()
        if session is None:
            raise GatewayError("Not authenticated")
        return session.user_id

    def _load(self) -> dict:
        try:
            data = json.loads(self._file_path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            raise GatewayError(f"Remote store unavailable: {exc}") from exc
        if not isinstance(data, dict):
            raise GatewayError("Remote store unavailable: unexpected layout")
        return data

    def _persist(self, data: dict) -> None:
        try:
            self._file_path.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
        except OSError as exc:
            raise GatewayError(f"Remote store unavailable: {exc}") from exc

    def _ensure_file(self) -> None:
        if not self._file_path.exists():
            self._file_path.parent.mkdir(parents=True, exist_ok=True)
            self._file_path.write_text('{"carts": {}, "wishlists": {}}', encoding="utf-8")


class JsonRemoteCartGateway(_JsonRemoteFile, RemoteCartGateway):

    # --- RemoteCartGateway interface ------------------------------------------

    async def list_items(self) -> Cart:
        return self._cart(self._load(), self._user_id())

    async def add_item(self, line: CartLine) -> CartLine:
        user_id = self._user_id()
        data = self._load()
        cart = self._cart(data, user_id).with_added(line)
        self._store(data, user_id, cart)
        return cart.get(line.key)  # type: ignore[return-value]

    async def update_quantity(self, product_id: str, variant_key: str, quantity: int) -> None:
        user_id = self._user_id()
        data = self._load()
        cart = self._cart(data, user_id).with_quantity((product_id, variant_key), Quantity(quantity))
        self._store(data, user_id, cart)

    async def remove_item(self, product_id: str, variant_key: str) -> None:
        user_id = self._user_id()
        data = self._load()
        cart = self._cart(data, user_id).without((product_id, variant_key))
        self._store(data, user_id, cart)

    # --- Internal helpers -----------------------------------------------------

    @staticmethod
    def _cart(data: dict, user_id: str) -> Cart:
        raw = data.setdefault("carts", {}).get(user_id, [])
        try:
            return cart_from_raw(raw)
        except MALFORMED as exc:
            raise GatewayError(f"Malformed server cart: {exc}") from exc

    def _store(self, data: dict, user_id: str, cart: Cart) -> None:
        data.setdefault("carts", {})[user_id] = cart_to_raw(cart)
        self._persist(data)


class JsonRemoteWishlistGateway(_JsonRemoteFile, RemoteWishlistGateway):

    # --- RemoteWishlistGateway interface --------------------------------------

    async def get_items(self) -> Wishlist:
        return self._wishlist(self._load(), self._user_id())

    async def add(self, product_id: str) -> None:
        await self.sync_from_local([product_id])

    async def remove(self, product_id: str) -> None:
        user_id = self._user_id()
        data = self._load()
        self._store(data, user_id, self._wishlist(data, user_id).without(product_id))

    async def sync_from_local(self, product_ids: list[str]) -> None:
        if not product_ids:
            return
        user_id = self._user_id()
        data = self._load()
        wishlist = self._wishlist(data, user_id)
        for product_id in product_ids:
            wishlist = wishlist.with_added(str(product_id))
        self._store(data, user_id, wishlist)

    # --- Internal helpers -----------------------------------------------------

    @staticmethod
    def _wishlist(data: dict, user_id: str) -> Wishlist:
        raw = data.setdefault("wishlists", {}).get(user_id, [])
        if not isinstance(raw, list):
            raise GatewayError("Malformed server wishlist")
        return Wishlist.of([str(product_id) for product_id in raw])

    def _store(self, data: dict, user_id: str, wishlist: Wishlist) -> None:
        data.setdefault("wishlists", {})[user_id] = list(wishlist.product_ids)
        self._persist(data)
