"""
Fan out OCR lookups for one post/comment and fan the results back in,
in source order.
"""

import asyncio
import logging
from typing import Awaitable, Callable, List, Optional, Sequence

from ..models import AnnotatedBlock, Comment, OCRResult, Post
from .formatting import URL_IMAGE_LABEL, body_image_label, comment_image_label
from .images import get_image_urls

log = logging.getLogger(__name__)

Resolve = Callable[[str], Awaitable[OCRResult]]


async def resolve_all(urls: Sequence[str], resolve: Resolve) -> List[Optional[OCRResult]]:
    """
    Run every lookup at once and return results indexed like `urls`.
    Each task writes only its own slot; nothing is read until all tasks settle.
    A task that raises leaves its slot empty.
    """
    slots: List[Optional[OCRResult]] = [None] * len(urls)

    async def _one(i: int, url: str) -> None:
        try:
            slots[i] = await resolve(url)
        except Exception as e:
            log.warning("Lookup %d (%s) failed: %r", i + 1, url, e)

    await asyncio.gather(*(_one(i, u) for i, u in enumerate(urls)))
    return slots


def _valid(res: Optional[OCRResult]) -> bool:
    return bool(res and res.success and res.text is not None)


async def assemble_post(post: Post, resolve: Resolve) -> List[AnnotatedBlock]:
    """
    Blocks for a post: "URL image text" first (if the link is an image with text),
    then "Body image N text" for each body image, N counted from 1 in body order.
    """
    body_urls = get_image_urls(post.body)
    urls = ([post.url] if post.url else []) + body_urls
    if not urls:
        return []

    slots = await resolve_all(urls, resolve)

    blocks: List[AnnotatedBlock] = []
    if post.url:
        head, slots = slots[0], slots[1:]
        if _valid(head):
            blocks.append(AnnotatedBlock(label=URL_IMAGE_LABEL, text=head.text))

    for n, res in enumerate(slots, start=1):
        if _valid(res):
            blocks.append(AnnotatedBlock(label=body_image_label(n), text=res.text))

    log.debug("Post %s: %d image(s), %d block(s)", post.id, len(urls), len(blocks))
    return blocks


async def assemble_comment(comment: Comment, resolve: Resolve) -> List[AnnotatedBlock]:
    """Blocks for a comment: "Image N text" per body image with text."""
    urls = get_image_urls(comment.content)
    if not urls:
        return []

    slots = await resolve_all(urls, resolve)
    blocks = [
        AnnotatedBlock(label=comment_image_label(n), text=res.text)
        for n, res in enumerate(slots, start=1)
        if _valid(res)
    ]
    log.debug("Comment %s: %d image(s), %d block(s)", comment.id, len(urls), len(blocks))
    return blocks


async def assemble(unit: Post | Comment, resolve: Resolve) -> List[AnnotatedBlock]:
    if isinstance(unit, Post):
        return await assemble_post(unit, resolve)
    return await assemble_comment(unit, resolve)
