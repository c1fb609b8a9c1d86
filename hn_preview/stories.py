from __future__ import annotations

from typing import Any

from hn_preview.comments import get_comment
from hn_preview.constants import ITEM_PATH_TEMPLATE, TOP_STORIES_PATH
from hn_preview.errors import DecodeError
from hn_preview.fanout import gather_successful
from hn_preview.gateway import HNGateway
from hn_preview.logging_config import get_logger
from hn_preview.models import StoryItem, StoryPageData

logger = get_logger(__name__)


def _decode_id_list(payload: Any) -> list[int]:
    if not isinstance(payload, list):
        raise DecodeError(f"story id list is {type(payload).__name__}, expected array")
    if any(isinstance(i, bool) or not isinstance(i, int) for i in payload):
        raise DecodeError("story id list contains non-integer entries")
    return payload


async def fetch_top_story_ids(gateway: HNGateway) -> list[int]:
    """Ranked ids of the current top stories."""
    return await gateway.fetch_json(TOP_STORIES_PATH, _decode_id_list)


async def get_story_preview(gateway: HNGateway, story_id: int) -> StoryItem:
    return await gateway.fetch_json(ITEM_PATH_TEMPLATE.format(id=story_id), StoryItem.from_dict)


async def list_top_story_previews(gateway: HNGateway, count: int) -> list[StoryItem]:
    """
    Previews of the first `count` top stories, in rank order.

    Fails only when the id list itself cannot be fetched; stories that
    fail to load are left out.
    """
    story_ids = await fetch_top_story_ids(gateway)
    selected = story_ids[: max(count, 0)]
    stories = await gather_successful([get_story_preview(gateway, sid) for sid in selected])
    logger.debug("top_stories_loaded", requested=len(selected), loaded=len(stories))
    return stories


async def resolve_full_story(gateway: HNGateway, story_id: int) -> StoryPageData:
    """
    A story plus its comment forest.

    The story fetch is a named target and fails hard. Each top-level
    comment tree is depth-bounded, and trees that fail to load are dropped.
    """
    item = await get_story_preview(gateway, story_id)
    comments = await gather_successful([get_comment(gateway, kid) for kid in item.kids])
    logger.debug(
        "story_resolved", story_id=story_id, kids=len(item.kids), comments=len(comments)
    )
    return StoryPageData(item=item, comments=comments)
