"""
Feed transport: polls the instance for unread mentions and new posts and
runs each one as its own task through the error middleware.
"""

import asyncio
import logging
import sqlite3
from typing import Any, Awaitable, Callable, Dict, List, Optional, Set, Tuple

from . import db
from .handlers.mentions import on_mention
from .handlers.posts import mentions_bot, on_new_post
from .middleware.errors import ErrorMiddleware
from .models import Mention, Post
from .services.assembler import Resolve
from .services.lemmy import LemmyClient

log = logging.getLogger(__name__)

Handler = Callable[[Any, Dict[str, Any]], Awaitable[Any]]


class FeedPoller:
    def __init__(
        self,
        client: LemmyClient,
        resolve: Resolve,
        handle: str,
        conn: sqlite3.Connection,
        interval: float = 30.0,
        posts_limit: int = 20,
        feed_type: str = "All",
        max_pages: int = 10,
    ):
        self.client = client
        self.resolve = resolve
        self.handle = handle
        self.conn = conn
        self.interval = interval
        self.posts_limit = posts_limit
        self.feed_type = feed_type
        self.max_pages = max_pages
        self.middleware = ErrorMiddleware()
        self._inflight: Set[Tuple[str, int]] = set()
        self._tasks: Set[asyncio.Task] = set()
        # Highest post id seen by an earlier poll
        self._last_post_id: Optional[int] = None

    # ───────────────────────────── handlers ───────────────────────────── #

    async def _handle_mention(self, mention: Mention, data: Dict[str, Any]) -> None:
        await on_mention(mention.comment, self.client, self.resolve, mention.post)
        await self.client.mark_mention_read(mention.mention_id)

    async def _handle_post(self, post: Post, data: Dict[str, Any]) -> None:
        await on_new_post(post, self.client, self.resolve, self.handle, self.client.person_id)

    # ───────────────────────────── scheduling ───────────────────────────── #

    def _spawn(self, kind: str, item_id: int, handler: Handler, event: Any) -> bool:
        key = (kind, item_id)
        if key in self._inflight or db.is_processed(self.conn, kind, item_id):
            return False
        self._inflight.add(key)
        task = asyncio.create_task(self._run(key, handler, event))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return True

    async def _run(self, key: Tuple[str, int], handler: Handler, event: Any) -> None:
        kind, item_id = key
        try:
            await self.middleware(handler, event, {"kind": kind, "id": item_id})
        except Exception:
            log.warning("Giving up on %s %s", kind, item_id)
        finally:
            # Answered or not, never pick the same event up twice
            db.mark_processed(self.conn, kind, item_id)
            self._inflight.discard(key)

    def _wants_post(self, post: Post) -> bool:
        if self.client.person_id is not None and post.creator_id == self.client.person_id:
            return False
        return mentions_bot(post.body, self.handle)

    async def fetch_new_posts(self) -> List[Post]:
        """
        Posts published since the last poll, newest first. Pages back until a
        page reaches a post seen before (the first poll reads one page only).
        """
        posts: Dict[int, Post] = {}
        for page in range(1, self.max_pages + 1):
            batch = await self.client.new_posts(limit=self.posts_limit, feed_type=self.feed_type, page=page)
            for p in batch:
                posts.setdefault(p.id, p)
            if self._last_post_id is None or len(batch) < self.posts_limit:
                break
            if any(p.id <= self._last_post_id for p in batch):
                break
        else:
            log.warning("Feed still ahead after %d pages; older posts may be missed", self.max_pages)

        if posts:
            self._last_post_id = max([*posts, self._last_post_id or 0])
        return list(posts.values())

    async def tick(self) -> int:
        """Fetch the feed once and start a task per new event. Returns how many were started."""
        started = 0

        for mention in await self.client.unread_mentions():
            if self.client.person_id is not None and mention.comment.creator_id == self.client.person_id:
                continue
            started += self._spawn("mention", mention.mention_id, self._handle_mention, mention)

        # Only posts meant for the bot are scheduled and remembered
        for post in await self.fetch_new_posts():
            if self._wants_post(post):
                started += self._spawn("post", post.id, self._handle_post, post)

        if started:
            log.info("Started %d event(s)", started)
        return started

    async def drain(self) -> None:
        """Wait for every in-flight event."""
        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def run(self) -> None:
        log.info("Polling every %.0fs as %s", self.interval, self.handle)
        while True:
            try:
                await self.tick()
            except Exception:
                log.exception("Feed poll failed")
            await asyncio.sleep(self.interval)
