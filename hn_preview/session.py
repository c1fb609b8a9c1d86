from __future__ import annotations

import asyncio
from typing import Callable, Optional

from hn_preview.constants import TOP_STORY_COUNT
from hn_preview.errors import FetchError
from hn_preview.gateway import HNGateway
from hn_preview.logging_config import get_logger
from hn_preview.models import (
    Loaded,
    Loading,
    PreviewState,
    StoryItem,
    StoryPageData,
    Unset,
)
from hn_preview.stories import list_top_story_previews, resolve_full_story

logger = get_logger(__name__)

StateListener = Callable[[PreviewState], None]


class PreviewSession:
    """
    Preview state and story cache for one UI session.

    Each story id is resolved at most once: results are cached for the
    lifetime of the session and concurrent selections of the same id share
    one in-flight resolution. Every selection bumps a generation counter,
    and a resolution that finishes after a newer selection was made leaves
    the state alone.
    """

    def __init__(self, gateway: HNGateway) -> None:
        self.gateway = gateway
        self._state: PreviewState = Unset()
        self._cache: dict[int, StoryPageData] = {}
        self._inflight: dict[int, asyncio.Task[StoryPageData]] = {}
        self._generation: int = 0
        self._listeners: list[StateListener] = []

    @property
    def state(self) -> PreviewState:
        return self._state

    def subscribe(self, listener: StateListener) -> None:
        """Call `listener` with the new state after every transition."""
        self._listeners.append(listener)

    def cached(self, story_id: int) -> Optional[StoryPageData]:
        return self._cache.get(story_id)

    async def list_top_story_previews(self, count: int = TOP_STORY_COUNT) -> list[StoryItem]:
        return await list_top_story_previews(self.gateway, count)

    async def select_story(self, story_id: int) -> PreviewState:
        self._generation += 1
        generation = self._generation

        cached = self._cache.get(story_id)
        if cached is not None:
            self._transition(Loaded(cached))
            return self._state

        self._transition(Loading())
        try:
            data = await self._resolve(story_id)
        except FetchError as e:
            logger.warning("story_resolve_failed", story_id=story_id, error=str(e))
            if generation == self._generation:
                self._transition(Unset())
            return self._state

        if generation == self._generation:
            self._transition(Loaded(data))
        else:
            logger.debug("stale_resolution_discarded", story_id=story_id)
        return self._state

    async def _resolve(self, story_id: int) -> StoryPageData:
        task = self._inflight.get(story_id)
        if task is None:
            task = asyncio.ensure_future(self._resolve_and_cache(story_id))
            self._inflight[story_id] = task
            task.add_done_callback(lambda t: self._forget(story_id, t))
        # A cancelled caller must not cancel a resolution other callers share
        return await asyncio.shield(task)

    def _forget(self, story_id: int, task: asyncio.Task[StoryPageData]) -> None:
        self._inflight.pop(story_id, None)
        # Collect the outcome even when every caller was cancelled
        if not task.cancelled() and task.exception() is not None:
            logger.debug("story_resolution_failed", story_id=story_id, error=str(task.exception()))

    async def _resolve_and_cache(self, story_id: int) -> StoryPageData:
        data = await resolve_full_story(self.gateway, story_id)
        # Write-once per id
        return self._cache.setdefault(story_id, data)

    def _transition(self, state: PreviewState) -> None:
        logger.debug("preview_state", state=type(state).__name__)
        self._state = state
        for listener in self._listeners:
            listener(state)
