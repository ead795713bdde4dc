"""
New posts: answer only those whose body mentions the bot (@name@instance).
"""

import logging
from typing import Optional
from urllib.parse import urlsplit

from ..models import Post, ReplyPayload
from ..services.assembler import Resolve, assemble_post
from ..services.platform import Platform
from .replies import dispatch_reply

log = logging.getLogger(__name__)


def instance_host(instance: str) -> str:
    """
    Bare host of the instance address:
      "https://Lemmy.Example.com:8536/" -> "lemmy.example.com"
      "example.com:443"                 -> "example.com"
    """
    inst = instance.strip()
    if "://" not in inst:
        inst = "//" + inst
    return (urlsplit(inst).hostname or "").lower()


def self_mention_handle(username: str, instance: str) -> str:
    return f"@{username.strip().lstrip('@')}@{instance_host(instance)}".lower()


def mentions_bot(body: Optional[str], handle: str) -> bool:
    """Case-insensitive; "@Bot@example.com:443" matches "@bot@example.com"."""
    if not body or not handle:
        return False
    return handle.lower() in body.lower()


async def on_new_post(
    post: Post,
    platform: Platform,
    resolve: Resolve,
    handle: str,
    bot_person_id: Optional[int] = None,
) -> Optional[ReplyPayload]:
    """
    Reply to `post` with the text of its images if it mentions the bot.
    Returns the reply sent, or None when the post is not for us.
    """
    if bot_person_id is not None and post.creator_id == bot_person_id:
        return None
    if not mentions_bot(post.body, handle):
        return None

    log.info("Post %s mentions the bot", post.id)
    blocks = await assemble_post(post, resolve)
    return await dispatch_reply(platform, blocks, post_id=post.id)
