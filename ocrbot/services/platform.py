"""
What the reply pipeline needs from the social platform.
"""

from typing import Protocol

from ..models import Comment, Post, ReplyPayload


class Platform(Protocol):
    async def fetch_post(self, post_id: int) -> Post: ...

    async def fetch_comment(self, comment_id: int) -> Comment: ...

    async def fetch_parent(self, comment: Comment) -> Post | Comment:
        """The comment's direct parent: another comment, or the post for top-level comments."""
        ...

    async def reply(self, payload: ReplyPayload) -> None: ...
