"""
Reply formatting: one Lemmy spoiler per image, plus the bot footer.

Example:
"::: spoiler Image 1 text
hello world
:::

*This action was performed by a bot.*"
"""

from typing import Sequence

from ..models import AnnotatedBlock

BOT_FOOTER = "*This action was performed by a bot.*"
NOTHING_FOUND = "Could not find any images with text"

URL_IMAGE_LABEL = "URL image text"


def body_image_label(n: int) -> str:
    return f"Body image {n} text"


def comment_image_label(n: int) -> str:
    return f"Image {n} text"


def format_block(block: AnnotatedBlock) -> str:
    # Lemmy renders ":::" containers as collapsible sections
    return f"::: spoiler {block.label}\n{block.text}\n:::"


def build_reply_text(blocks: Sequence[AnnotatedBlock]) -> str:
    if not blocks:
        return NOTHING_FOUND
    body = "\n\n".join(format_block(b) for b in blocks)
    return body + "\n\n" + BOT_FOOTER
