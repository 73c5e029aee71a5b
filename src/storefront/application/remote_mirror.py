"""Background mirroring of local mutations to a remote store.

The local store is updated synchronously by the reconcilers; the matching
remote write is handed to a ``RemoteMirror`` which runs it as a task so
the caller never waits on the network. Writes for one store run one at
a time, in the order they were submitted.

A write that fails marks its key dirty. The next submitted write first
replays every dirty key by pushing the key's *current* local state, so a
transient failure is repaired on the following mutation rather than by
an immediate retry.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Hashable
from typing import Any

import structlog

from storefront.domain.exceptions import GatewayError

logger = structlog.get_logger(__name__)

# Failures a remote call may raise that are treated as transient.
TRANSIENT_ERRORS: tuple[type[BaseException], ...] = (
    GatewayError,
    OSError,
    asyncio.TimeoutError,
)

RemoteWrite = Callable[[], Awaitable[Any]]
Replay = Callable[[set[Any]], Awaitable[None]]


class RemoteMirror:
    """Serialises remote writes for one store and repairs failed ones.

    ``replay`` receives the dirty keys and must push the local state of
    each one. It must read the local snapshot before its first
    suspension point: writes submitted up to that moment are considered
    covered by the replay and are skipped.
    """

    def __init__(self, name: str, replay: Replay) -> None:
        self._name = name
        self._replay = replay
        self._lock = asyncio.Lock()
        self._pending: set[asyncio.Task[None]] = set()
        self._dirty: set[Hashable] = set()
        self._covered: dict[Hashable, int] = {}
        self._issued = 0

    @property
    def dirty_keys(self) -> frozenset[Hashable]:
        return frozenset(self._dirty)

    def submit(self, key: Hashable, write: RemoteWrite) -> None:
        """Schedule ``write`` for ``key`` without waiting for it."""
        self._issued += 1
        seq = self._issued
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.warning("No event loop for remote write", store=self._name, key=key)
            self._dirty.add(key)
            return
        task = loop.create_task(self._run(seq, key, write))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    def exclusive(self) -> asyncio.Lock:
        """Lock held by every mirrored write; hold it to run a full sync."""
        return self._lock

    def mark_dirty(self, keys: set[Hashable]) -> None:
        """Record keys whose local state the remote store has not seen."""
        self._dirty.update(keys)

    def reset(self) -> None:
        """Forget dirty keys after a full reconciliation made them moot."""
        self._dirty.clear()
        self._covered = {}

    async def drain(self) -> None:
        """Wait until every submitted write has settled."""
        while self._pending:
            await asyncio.gather(*self._pending, return_exceptions=True)

    # --- Internal helpers -----------------------------------------------------

    async def _run(self, seq: int, key: Hashable, write: RemoteWrite) -> None:
        async with self._lock:
            if self._dirty:
                await self._replay_dirty()

            if self._covered.get(key, 0) >= seq:
                return
            if key in self._dirty:
                # Still unsynced; a later replay pushes the absolute state.
                return

            try:
                await write()
            except TRANSIENT_ERRORS as exc:
                logger.warning(
                    "Remote write failed, will retry on next change",
                    store=self._name,
                    key=key,
                    error=str(exc),
                )
                self._dirty.add(key)

    async def _replay_dirty(self) -> None:
        keys = set(self._dirty)
        snapshot_seq = self._issued
        try:
            await self._replay(keys)
        except TRANSIENT_ERRORS as exc:
            logger.warning(
                "Replay of unsynced changes failed",
                store=self._name,
                keys=sorted(map(str, keys)),
                error=str(exc),
            )
            return
        self._dirty -= keys
        for key in keys:
            self._covered[key] = snapshot_seq
        logger.info("Replayed unsynced changes", store=self._name, count=len(keys))
