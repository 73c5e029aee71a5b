"""Composition root: builds the JSON-backed adapters and the services using them.

Everything the CLI runs against lives under the data directory, which
STOREFRONT_DATA_DIR overrides.
"""

from __future__ import annotations

import os
from pathlib import Path

from storefront.application.cart_reconciler import CartReconciler
from storefront.application.checkout import CheckoutStateMachine
from storefront.application.order_placement import OrderPlacementGuard
from storefront.application.shipping_rates import ShippingRateTracker
from storefront.application.wishlist_reconciler import WishlistReconciler
from storefront.domain.model.identity import Identity
from storefront.infrastructure.persistence.json_local_store import JsonLocalStore
from storefront.infrastructure.persistence.json_order_book import JsonOrderBook
from storefront.infrastructure.persistence.json_profile_directory import JsonProfileDirectory
from storefront.infrastructure.persistence.json_remote_store import (
    JsonRemoteCartGateway,
    JsonRemoteWishlistGateway,
)
from storefront.infrastructure.persistence.json_session_service import JsonSessionService
from storefront.infrastructure.static_shipping_rates import StaticShippingRateResolver

# Resolve the data directory relative to the project root unless overridden.
# When installed in editable mode the project root is the repo root.
_DEFAULT_DATA_DIR = Path(__file__).resolve().parents[3] / "data"


def data_dir() -> Path:
    return Path(os.environ.get("STOREFRONT_DATA_DIR", _DEFAULT_DATA_DIR))


def local_store() -> JsonLocalStore:
    return JsonLocalStore(data_dir() / "local")


def session_service() -> JsonSessionService:
    return JsonSessionService(data_dir() / "session.json")


def order_book() -> JsonOrderBook:
    return JsonOrderBook(data_dir() / "orders.json")


def profile_directory() -> JsonProfileDirectory:
    return JsonProfileDirectory(data_dir() / "profiles.json")


def cart_reconciler(sessions: JsonSessionService) -> CartReconciler:
    reconciler = CartReconciler(
        local_store(), JsonRemoteCartGateway(data_dir() / "remote.json", sessions)
    )
    reconciler.set_identity(Identity.from_session(sessions.current()))
    return reconciler


def wishlist_reconciler(sessions: JsonSessionService) -> WishlistReconciler:
    reconciler = WishlistReconciler(
        local_store(), JsonRemoteWishlistGateway(data_dir() / "remote.json", sessions)
    )
    reconciler.set_identity(Identity.from_session(sessions.current()))
    return reconciler


def checkout(cart: CartReconciler) -> CheckoutStateMachine:
    return CheckoutStateMachine(
        cart=cart,
        rates=ShippingRateTracker(StaticShippingRateResolver()),
        guard=OrderPlacementGuard(order_book(), cart),
    )
