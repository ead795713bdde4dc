"""
Thin async wrapper around the Lemmy v3 HTTP API (only the calls the bot uses).
"""

import logging
from typing import Any, Dict, List, Optional

import aiohttp

from ..models import Comment, Mention, Post, ReplyPayload

log = logging.getLogger(__name__)


class LemmyAPIError(Exception):
    """Non-2xx answer or an {"error": ...} body from the Lemmy API."""


def instance_base_url(instance: str) -> str:
    """
    "lemmy.world"               -> "https://lemmy.world"
    "http://localhost:8536/"    -> "http://localhost:8536"
    """
    inst = instance.strip().rstrip("/")
    if "://" not in inst:
        inst = "https://" + inst
    return inst


def parse_post(data: Dict[str, Any]) -> Post:
    return Post.model_validate(data)


def parse_comment(data: Dict[str, Any]) -> Comment:
    return Comment.model_validate(data)


class LemmyClient:
    """Implements the Platform interface on top of a Lemmy instance."""

    def __init__(
        self,
        session: aiohttp.ClientSession,
        instance: str,
        username_or_email: str,
        password: str,
    ):
        self.session = session
        self.base_url = instance_base_url(instance)
        self.username_or_email = username_or_email
        self.password = password
        self.jwt: Optional[str] = None
        self.person_id: Optional[int] = None

    # ───────────────────────────── plumbing ───────────────────────────── #

    def _headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self.jwt}"} if self.jwt else {}

    async def _request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        url = f"{self.base_url}/api/v3/{path}"
        async with self.session.request(method, url, params=params, json=json, headers=self._headers()) as resp:
            try:
                data = await resp.json(content_type=None)
            except ValueError:
                data = None
            if resp.status >= 400 or not isinstance(data, dict) or "error" in data:
                err = data.get("error") if isinstance(data, dict) else None
                raise LemmyAPIError(f"{method} {path} -> {resp.status}: {err or 'unexpected response'}")
            return data

    # ───────────────────────────── session ───────────────────────────── #

    async def login(self) -> None:
        data = await self._request(
            "POST", "user/login",
            json={"username_or_email": self.username_or_email, "password": self.password},
        )
        jwt = data.get("jwt")
        if not jwt:
            raise LemmyAPIError("login returned no token (is 2FA or e-mail verification pending?)")
        self.jwt = jwt

        site = await self._request("GET", "site")
        person = (((site.get("my_user") or {}).get("local_user_view") or {}).get("person") or {})
        self.person_id = person.get("id")
        log.info("Logged in to %s as person %s", self.base_url, self.person_id)

    # ───────────────────────────── Platform ───────────────────────────── #

    async def fetch_post(self, post_id: int) -> Post:
        data = await self._request("GET", "post", params={"id": post_id})
        return parse_post(data["post_view"]["post"])

    async def fetch_comment(self, comment_id: int) -> Comment:
        data = await self._request("GET", "comment", params={"id": comment_id})
        return parse_comment(data["comment_view"]["comment"])

    async def fetch_parent(self, comment: Comment) -> Post | Comment:
        parent_id = comment.parent_comment_id
        if parent_id is None:
            return await self.fetch_post(comment.post_id)
        return await self.fetch_comment(parent_id)

    async def reply(self, payload: ReplyPayload) -> None:
        body: Dict[str, Any] = {"content": payload.content, "post_id": payload.post_id}
        if payload.parent_id is not None:
            body["parent_id"] = payload.parent_id
        await self._request("POST", "comment", json=body)
        log.info("Replied on post %s (parent %s)", payload.post_id, payload.parent_id)

    # ───────────────────────────── feed ───────────────────────────── #

    async def unread_mentions(self) -> List[Mention]:
        data = await self._request(
            "GET", "user/mention", params={"unread_only": "true", "sort": "New", "limit": 50},
        )
        out = []
        for view in data.get("mentions") or []:
            out.append(Mention(
                mention_id=view["person_mention"]["id"],
                comment=parse_comment(view["comment"]),
                post=parse_post(view["post"]) if view.get("post") else None,
            ))
        return out

    async def mark_mention_read(self, mention_id: int) -> None:
        await self._request(
            "POST", "user/mention/mark_as_read",
            json={"person_mention_id": mention_id, "read": True},
        )

    async def new_posts(self, limit: int = 20, feed_type: str = "All", page: int = 1) -> List[Post]:
        data = await self._request(
            "GET", "post/list", params={"sort": "New", "type_": feed_type, "limit": limit, "page": page},
        )
        return [parse_post(view["post"]) for view in data.get("posts") or []]
