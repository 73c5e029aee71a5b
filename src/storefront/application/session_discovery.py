"""Application service: discovers an existing session when checkout opens.

The auth provider may be briefly unavailable during page load, so the
lookup is retried a fixed number of times with a fixed delay. When the
attempts run out the shopper is treated as anonymous. Any auth event
restarts discovery with a fresh attempt counter; ``close`` cancels
whatever is still pending.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable

import structlog

from storefront.application.remote_mirror import TRANSIENT_ERRORS
from storefront.domain.gateway.session_service import SessionService, Subscription
from storefront.domain.model.identity import AuthEvent, Identity, Session

logger = structlog.get_logger(__name__)

DEFAULT_MAX_ATTEMPTS = 5
DEFAULT_RETRY_DELAY_SECONDS = 0.5

SessionCallback = Callable[[Session], Awaitable[object]]


class SessionDiscovery:

    def __init__(
        self,
        sessions: SessionService,
        on_session: SessionCallback,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        retry_delay: float = DEFAULT_RETRY_DELAY_SECONDS,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self._sessions = sessions
        self._on_session = on_session
        self._max_attempts = max_attempts
        self._retry_delay = retry_delay
        self._attempts = 0
        self._identity = Identity.anonymous()
        self._task: asyncio.Task[Session | None] | None = None
        self._subscription: Subscription | None = None

    @property
    def identity(self) -> Identity:
        return self._identity

    @property
    def attempts(self) -> int:
        return self._attempts

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Subscribe to auth events and begin discovery."""
        if self._subscription is None:
            self._subscription = self._sessions.on_auth_state_change(self._on_auth_event)
        self._restart()

    def close(self) -> None:
        """Cancel pending retries and stop listening for auth events."""
        self._cancel()
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None

    async def wait(self) -> Session | None:
        """Wait for discovery to settle, following restarts."""
        while self._task is not None:
            task = self._task
            try:
                return await asyncio.shield(task)
            except asyncio.CancelledError:
                if task is self._task:
                    raise
        return None

    # --- Internal helpers -----------------------------------------------------

    def _restart(self) -> None:
        self._cancel()
        self._attempts = 0
        self._task = asyncio.get_running_loop().create_task(self._discover())

    def _cancel(self) -> None:
        if self._task is not None:
            self._task.cancel()
            self._task = None

    def _on_auth_event(self, event: AuthEvent, session: Session | None) -> None:
        logger.info("Auth state changed", auth_event=event.value)
        if event is AuthEvent.SIGNED_OUT:
            self._cancel()
            self._attempts = 0
            self._identity = Identity.anonymous()
            return
        self._restart()

    async def _discover(self) -> Session | None:
        while True:
            self._attempts += 1
            try:
                session = await self._sessions.get_session()
            except TRANSIENT_ERRORS as exc:
                logger.warning(
                    "Session lookup failed",
                    attempt=self._attempts,
                    max_attempts=self._max_attempts,
                    error=str(exc),
                )
                session = None

            if session is not None:
                self._identity = Identity.from_session(session)
                logger.info("Session found", user_id=session.user_id, attempt=self._attempts)
                await self._on_session(session)
                return session

            if self._attempts >= self._max_attempts:
                logger.info("No session found, continuing as guest", attempts=self._attempts)
                self._identity = Identity.anonymous()
                return None

            await asyncio.sleep(self._retry_delay)
