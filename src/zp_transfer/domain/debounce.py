"""Debounced, supersedable recipient search.

Two rules keep the displayed result consistent with the latest input:
  - scheduling a search cancels whatever search is still pending or in flight
  - every search carries a generation number; a completion whose generation
    is no longer the latest is dropped instead of applied

Cancellation alone is not enough: a lookup can complete between the moment a
newer search is issued and the moment the old task observes its
cancellation, so the generation check is the guard that actually matters.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Generic, TypeVar

from src.zp_common.errors import AppError, InternalError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class DebouncedSearch(Generic[T]):
    def __init__(
        self,
        search: Callable[[str], Awaitable[T]],
        on_result: Callable[[T], None],
        on_error: Callable[[AppError], None],
        delay: float,
    ) -> None:
        self._search = search
        self._on_result = on_result
        self._on_error = on_error
        self._delay = delay
        self._generation = 0
        self._task: asyncio.Task[None] | None = None

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def pending(self) -> asyncio.Task[None] | None:
        """The scheduled search task, if one has not finished yet."""
        if self._task is not None and not self._task.done():
            return self._task
        return None

    def is_current(self, generation: int) -> bool:
        return generation == self._generation

    def schedule(self, query: str) -> int:
        """Run `query` after the quiet period unless superseded first."""
        generation = self._supersede()
        self._task = asyncio.create_task(self._run_later(generation, query))
        return generation

    async def run_now(self, query: str) -> T | None:
        """Search immediately, superseding anything scheduled.

        Returns the result, or None when a newer search superseded this one
        while it was in flight. Errors from a current search are reported
        through on_error and re-raised.
        """
        generation = self._supersede()
        try:
            result = await self._search(query)
        except AppError as exc:
            if self.is_current(generation):
                self._on_error(exc)
                raise
            return None
        if not self.is_current(generation):
            logger.debug("Dropping stale search result (generation %d)", generation)
            return None
        self._on_result(result)
        return result

    def cancel(self) -> None:
        self._supersede()

    def _supersede(self) -> int:
        self._generation += 1
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None
        return self._generation

    async def _run_later(self, generation: int, query: str) -> None:
        await asyncio.sleep(self._delay)
        try:
            result = await self._search(query)
        except AppError as exc:
            if self.is_current(generation):
                self._on_error(exc)
            return
        except Exception:
            logger.exception("Background recipient search failed")
            if self.is_current(generation):
                self._on_error(InternalError("Search failed unexpectedly"))
            return
        if self.is_current(generation):
            self._on_result(result)
        else:
            logger.debug("Dropping stale search result (generation %d)", generation)
