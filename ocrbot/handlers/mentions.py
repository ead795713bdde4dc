"""
Mentions in comments.

Where we look for images, in order:
1) the mentioning comment itself
2) its direct parent (a comment, or the post for a top-level comment)
Nothing above the direct parent is consulted.
"""

import logging
from typing import List, Optional

from ..models import AnnotatedBlock, Comment, Post, ReplyPayload
from ..services.assembler import Resolve, assemble, assemble_comment
from ..services.platform import Platform
from .replies import dispatch_reply

log = logging.getLogger(__name__)


async def resolve_mention_blocks(
    comment: Comment,
    platform: Platform,
    resolve: Resolve,
    post: Optional[Post] = None,
) -> List[AnnotatedBlock]:
    """
    `post` is the comment's post when the feed already delivered it; a
    top-level comment then needs no extra fetch for its parent.
    """
    blocks = await assemble_comment(comment, resolve)
    if blocks:
        return blocks

    if comment.parent_comment_id is None and post is not None and post.id == comment.post_id:
        parent: Post | Comment = post
    else:
        parent = await platform.fetch_parent(comment)
    log.debug("Comment %s has no text images, trying parent %s %s",
              comment.id, type(parent).__name__.lower(), parent.id)
    return await assemble(parent, resolve)


async def on_mention(
    comment: Comment,
    platform: Platform,
    resolve: Resolve,
    post: Optional[Post] = None,
) -> ReplyPayload:
    blocks = await resolve_mention_blocks(comment, platform, resolve, post)
    return await dispatch_reply(platform, blocks, post_id=comment.post_id, parent_id=comment.id)
