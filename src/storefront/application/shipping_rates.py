"""Application service: tracks shipping rates for the destination postal code.

Lookups are last-request-wins: a response for a postal code other than the
one most recently requested is discarded. The last successful result is
cached against its postal code so re-entering the same code does not hit
the resolver again.
"""

from __future__ import annotations

import asyncio
from enum import Enum

import structlog

from storefront.application.remote_mirror import TRANSIENT_ERRORS
from storefront.domain.exceptions import ShippingRateError
from storefront.domain.gateway.shipping_rate_resolver import ShippingRateResolver
from storefront.domain.model.checkout import ShippingOption
from storefront.domain.model.value_objects import is_valid_postal_code

logger = structlog.get_logger(__name__)


class RateStatus(Enum):
    PROMPT = "prompt"  # no valid postal code yet
    LOADING = "loading"
    READY = "ready"
    UNAVAILABLE = "unavailable"  # resolver answered, nothing ships there
    FAILED = "failed"


STATUS_MESSAGES = {
    RateStatus.PROMPT: "Enter a valid PIN code to see shipping rates.",
    RateStatus.LOADING: "Checking shipping options...",
    RateStatus.UNAVAILABLE: "No shipping methods available for this PIN code.",
    RateStatus.FAILED: "We couldn't load shipping rates. Please try again.",
}


class ShippingRateTracker:

    def __init__(self, resolver: ShippingRateResolver) -> None:
        self._resolver = resolver
        self._status = RateStatus.PROMPT
        self._options: tuple[ShippingOption, ...] = ()
        self._requested: str | None = None
        self._cached_for: str | None = None
        self._cached: tuple[ShippingOption, ...] = ()
        self._task: asyncio.Task[None] | None = None
        self._closed = False

    # --- Queries --------------------------------------------------------------

    @property
    def status(self) -> RateStatus:
        return self._status

    @property
    def is_loading(self) -> bool:
        return self._status is RateStatus.LOADING

    @property
    def message(self) -> str | None:
        return STATUS_MESSAGES.get(self._status)

    @property
    def options(self) -> tuple[ShippingOption, ...]:
        return self._options

    @property
    def postal_code(self) -> str | None:
        return self._requested

    # --- Commands -------------------------------------------------------------

    def request(self, postal_code: str) -> asyncio.Task[None] | None:
        """Start a lookup for ``postal_code`` if it is a complete, new code.

        Anything other than exactly six digits shows the prompt instead of
        calling the resolver. Returns the lookup task, if one was started.
        """
        code = postal_code.strip()
        if not is_valid_postal_code(code):
            self._requested = None
            self._options = ()
            self._status = RateStatus.PROMPT
            return None

        if code == self._cached_for:
            self._requested = code
            self._options = self._cached
            self._status = RateStatus.READY if self._cached else RateStatus.UNAVAILABLE
            return None
        if code == self._requested and self._status is RateStatus.LOADING:
            return self._task

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.warning("No event loop for shipping rate lookup", postal_code=code)
            return None

        self._requested = code
        self._options = ()
        self._status = RateStatus.LOADING
        self._task = loop.create_task(self._lookup(code))
        return self._task

    async def refresh(self) -> None:
        """Wait for the lookup in flight, if any."""
        if self._task is not None and not self._task.done():
            await asyncio.shield(self._task)

    def close(self) -> None:
        """Stop tracking; any response still in flight is ignored."""
        self._closed = True
        if self._task is not None:
            self._task.cancel()

    # --- Internal helpers -----------------------------------------------------

    async def _lookup(self, code: str) -> None:
        try:
            options = await self._resolver.resolve(code)
        except (ShippingRateError, *TRANSIENT_ERRORS) as exc:
            if self._is_stale(code):
                return
            logger.warning("Shipping rate lookup failed", postal_code=code, error=str(exc))
            self._status = RateStatus.FAILED
            return

        if self._is_stale(code):
            logger.info(
                "Discarding stale shipping rates",
                postal_code=code,
                current=self._requested,
            )
            return

        self._options = tuple(options)
        self._cached_for = code
        self._cached = self._options
        self._status = RateStatus.READY if options else RateStatus.UNAVAILABLE

    def _is_stale(self, code: str) -> bool:
        return self._closed or code != self._requested
