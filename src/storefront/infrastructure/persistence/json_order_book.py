"""JSON-file-backed order placement for local development."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path

from storefront.domain.exceptions import GatewayError
from storefront.domain.gateway.order_gateway import OrderGateway
from storefront.domain.model.cart import Cart
from storefront.domain.model.checkout import CheckoutState, CheckoutTotals
from storefront.infrastructure.persistence.serialization import cart_to_raw


class JsonOrderBook(OrderGateway):

    def __init__(self, file_path: Path) -> None:
        self._file_path = file_path
        self._ensure_file()

    # --- OrderGateway interface -----------------------------------------------

    async def place_order(
        self, state: CheckoutState, cart: Cart, totals: CheckoutTotals
    ) -> str:
        orders = self._load_raw()
        now = datetime.now(timezone.utc)
        order_number = f"ORD-{now:%Y%m%d}-{len(orders) + 1:05d}"
        info = state.shipping_info
        billing = state.resolved_billing
        orders.append(
            {
                "order_number": order_number,
                "placed_at": now.isoformat(),
                "customer": {
                    "name": f"{info.first_name} {info.last_name}".strip(),
                    "email": info.email,
                    "phone": info.phone,
                },
                "ship_to": {
                    "address": info.address,
                    "apartment": info.apartment,
                    "city": info.city,
                    "state": info.state,
                    "postal_code": info.postal_code,
                    "country": info.country,
                },
                "bill_to": {
                    "same_as_shipping": billing.same_as_shipping,
                    "name": f"{billing.first_name} {billing.last_name}".strip(),
                    "address": billing.address,
                    "apartment": billing.apartment,
                    "city": billing.city,
                    "state": billing.state,
                    "postal_code": billing.postal_code,
                    "country": billing.country,
                },
                "shipping_method": info.shipping_method.value,
                "payment_method": state.payment_info.method.value,
                "items": cart_to_raw(cart),
                "subtotal": str(totals.subtotal.amount),
                "shipping_cost": str(totals.shipping_cost.amount),
                "tax": str(totals.tax.amount),
                "total": str(totals.total.amount),
            }
        )
        self._persist_raw(orders)
        return order_number

    def list_order_numbers(self) -> list[str]:
        return [raw["order_number"] for raw in self._load_raw()]

    # --- File helpers ---------------------------------------------------------

    def _load_raw(self) -> list[dict]:
        try:
            return json.loads(self._file_path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            raise GatewayError(f"Order book unavailable: {exc}") from exc

    def _persist_raw(self, orders: list[dict]) -> None:
        try:
            self._file_path.write_text(json.dumps(orders, indent=2) + "\n", encoding="utf-8")
        except OSError as exc:
            raise GatewayError(f"Order book unavailable: {exc}") from exc

    def _ensure_file(self) -> None:
        if not self._file_path.exists():
            self._file_path.parent.mkdir(parents=True, exist_ok=True)
            self._file_path.write_text("[]", encoding="utf-8")
