"""Debounced, single-flight dispatch of decode requests."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable

from samcut_backend.session.points import PromptSet

logger = logging.getLogger(__name__)

DEFAULT_DEBOUNCE_SECONDS = 0.2


class DecodeScheduler:
    """Bound the rate and concurrency of decode calls.

    Hover-driven submissions are coalesced with a trailing debounce: only the
    last submission within the window fires. Click-driven submissions skip the
    debounce. Either way at most one decode is outstanding; a submission that
    arrives while one is in flight waits in a single pending slot, where a
    newer submission replaces an older one, and fires as soon as the in-flight
    call returns.

    In-flight calls are never cancelled. ``cancel()`` only drops work that has
    not started yet.
    """

    def __init__(
        self,
        on_fire: Callable[[PromptSet], Awaitable[None]],
        debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS,
    ) -> None:
        self._on_fire = on_fire
        self._debounce_seconds = debounce_seconds
        self._timer: asyncio.Task[None] | None = None
        self._pending: PromptSet | None = None
        self._in_flight: asyncio.Task[None] | None = None
        self._dispatch_count = 0

    @property
    def in_flight(self) -> bool:
        return self._in_flight is not None

    @property
    def has_pending(self) -> bool:
        """True if a submission is waiting on the timer or the pending slot."""
        return self._timer is not None or self._pending is not None

    @property
    def dispatch_count(self) -> int:
        """Number of decode calls started since creation."""
        return self._dispatch_count

    def submit(self, points: PromptSet, *, debounce: bool = False) -> None:
        """Schedule a decode for the given points.

        Args:
            points: Snapshot of the prompt points to decode.
            debounce: Coalesce with other debounced submissions in the window.
        """
        self._cancel_timer()
        if debounce:
            self._timer = asyncio.get_running_loop().create_task(self._debounce(points))
            return
        self._enqueue(points)

    def cancel(self) -> None:
        """Drop the debounce timer and the pending slot."""
        self._cancel_timer()
        self._pending = None

    async def join(self) -> None:
        """Wait until no timer, in-flight call or pending submission remains."""
        while True:
            task = self._timer or self._in_flight
            if task is None:
                return
            await asyncio.wait({task})

    async def _debounce(self, points: PromptSet) -> None:
        await asyncio.sleep(self._debounce_seconds)
        self._timer = None
        self._enqueue(points)

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _enqueue(self, points: PromptSet) -> None:
        if self._pending is not None:
            logger.debug("Dropping superseded pending decode")
        self._pending = points
        if self._in_flight is None:
            self._dispatch()

    def _dispatch(self) -> None:
        points = self._pending
        self._pending = None
        if points is None:
            return
        self._dispatch_count += 1
        self._in_flight = asyncio.get_running_loop().create_task(self._run(points))

    async def _run(self, points: PromptSet) -> None:
        try:
            await self._on_fire(points)
        except Exception:
            # Decode runs detached from the pointer event that caused it
            logger.exception("Decode dispatch failed")
        finally:
            self._in_flight = None
            if self._pending is not None:
                logger.debug("Newer prompt queued during decode, dispatching again")
                self._dispatch()
