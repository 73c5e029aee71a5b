"""JSON-file-backed session service for local development.

Stands in for the hosted auth provider: the signed-in user is kept in a
small JSON file and sign-in / sign-out notify subscribed handlers.
"""

from __future__ import annotations

import json
from pathlib import Path

from storefront.domain.exceptions import GatewayError
from storefront.domain.gateway.session_service import (
    AuthStateHandler,
    SessionService,
    Subscription,
)
from storefront.domain.model.identity import AuthEvent, Session


class _HandlerSubscription(Subscription):

    def __init__(self, handlers: list[AuthStateHandler], handler: AuthStateHandler) -> None:
        self._handlers = handlers
        self._handler = handler

    def unsubscribe(self) -> None:
        if self._handler in self._handlers:
            self._handlers.remove(self._handler)


class JsonSessionService(SessionService):

    def __init__(self, file_path: Path) -> None:
        self._file_path = file_path
        self._handlers: list[AuthStateHandler] = []

    # --- SessionService interface ---------------------------------------------

    async def get_session(self) -> Session | None:
        return self.current()

    def on_auth_state_change(self, handler: AuthStateHandler) -> Subscription:
        self._handlers.append(handler)
        return _HandlerSubscription(self._handlers, handler)

    # --- Provider actions -----------------------------------------------------

    def current(self) -> Session | None:
        if not self._file_path.exists():
            return None
        try:
            raw = json.loads(self._file_path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            raise GatewayError(f"Session file unreadable: {exc}") from exc
        if not raw or not raw.get("user_id"):
            return None
        return Session(user_id=raw["user_id"], email=raw.get("email"))

    def sign_in(self, user_id: str, email: str | None = None) -> Session:
        session = Session(user_id=user_id, email=email)
        self._file_path.parent.mkdir(parents=True, exist_ok=True)
        self._file_path.write_text(
            json.dumps({"user_id": user_id, "email": email}, indent=2) + "\n",
            encoding="utf-8",
        )
        self._emit(AuthEvent.SIGNED_IN, session)
        return session

    def sign_out(self) -> None:
        if self._file_path.exists():
            self._file_path.unlink()
        self._emit(AuthEvent.SIGNED_OUT, None)

    def _emit(self, event: AuthEvent, session: Session | None) -> None:
        for handler in list(self._handlers):
            handler(event, session)
