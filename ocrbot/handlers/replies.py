"""
Send the final reply: extracted text, or the "nothing found" message.
"""

import logging
from typing import Optional, Sequence

from ..models import AnnotatedBlock, ReplyPayload
from ..services.formatting import build_reply_text
from ..services.platform import Platform

log = logging.getLogger(__name__)


async def dispatch_reply(
    platform: Platform,
    blocks: Sequence[AnnotatedBlock],
    post_id: int,
    parent_id: Optional[int] = None,
) -> ReplyPayload:
    payload = ReplyPayload(content=build_reply_text(blocks), post_id=post_id, parent_id=parent_id)
    if not blocks:
        log.info("No text found for post %s (parent %s)", post_id, parent_id)
    await platform.reply(payload)
    return payload
