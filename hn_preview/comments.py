from __future__ import annotations

from dataclasses import replace

from hn_preview.constants import ITEM_PATH_TEMPLATE, MAX_COMMENT_DEPTH
from hn_preview.fanout import gather_successful
from hn_preview.gateway import HNGateway
from hn_preview.models import Comment


async def resolve_comment_tree(gateway: HNGateway, comment_id: int, depth: int) -> Comment:
    """
    Fetch a comment and its replies down to `depth` levels below it.

    A failure to fetch `comment_id` itself propagates. Replies that fail
    are dropped; the rest keep their `kids` order. At depth 0 the replies
    are not fetched at all.
    """
    comment = await gateway.fetch_json(
        ITEM_PATH_TEMPLATE.format(id=comment_id), Comment.from_dict
    )
    if depth <= 0 or not comment.kids:
        return comment

    sub_comments = await gather_successful(
        [resolve_comment_tree(gateway, kid, depth - 1) for kid in comment.kids]
    )
    return replace(comment, sub_comments=sub_comments)


async def get_comment(gateway: HNGateway, comment_id: int) -> Comment:
    return await resolve_comment_tree(gateway, comment_id, MAX_COMMENT_DEPTH)
