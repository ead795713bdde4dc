
import pytest

from fakes import comment
from ocrbot.models import ReplyPayload
from ocrbot.services.lemmy import LemmyAPIError, LemmyClient, instance_base_url


class FakeResponse:
    def __init__(self, status, payload):
        self.status = status
        self.payload = payload

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False

    async def json(self, content_type=None):
        return self.payload


class FakeSession:
    """Answers by (method, api path); records every request."""

    def __init__(self, routes):
        self.routes = routes
        self.requests = []

    def request(self, method, url, params=None, json=None, headers=None):
        path = url.split("/api/v3/", 1)[1]
        self.requests.append({"method": method, "path": path, "params": params, "json": json, "headers": headers})
        status, payload = self.routes[(method, path)]
        return FakeResponse(status, payload)


POST = {"id": 1, "name": "a post", "url": "https://i.test/a.png", "body": None, "creator_id": 3, "nsfw": False}
COMMENT = {"id": 4, "post_id": 1, "content": "hi", "path": "0.4", "creator_id": 3}


def test_base_url():
    assert instance_base_url("lemmy.test") == "https://lemmy.test"
    assert instance_base_url("http://localhost:8536/") == "http://localhost:8536"


@pytest.mark.asyncio
async def test_login_sets_token_and_person():
    session = FakeSession({
        ("POST", "user/login"): (200, {"jwt": "TOKEN"}),
        ("GET", "site"): (200, {"my_user": {"local_user_view": {"person": {"id": 42}}}}),
    })
    lemmy = LemmyClient(session, "lemmy.test", "ocr", "pw")
    await lemmy.login()

    assert lemmy.jwt == "TOKEN" and lemmy.person_id == 42
    assert session.requests[0]["json"] == {"username_or_email": "ocr", "password": "pw"}
    assert session.requests[1]["headers"] == {"Authorization": "Bearer TOKEN"}


@pytest.mark.asyncio
async def test_fetch_parent_follows_path():
    session = FakeSession({
        ("GET", "post"): (200, {"post_view": {"post": POST}}),
        ("GET", "comment"): (200, {"comment_view": {"comment": COMMENT}}),
    })
    lemmy = LemmyClient(session, "lemmy.test", "ocr", "pw")

    parent = await lemmy.fetch_parent(comment(5, post_id=1, path="0.4.5"))
    assert parent.id == 4 and parent.content == "hi"
    assert session.requests[-1]["params"] == {"id": 4}

    parent = await lemmy.fetch_parent(comment(4, post_id=1, path="0.4"))
    assert parent.id == 1 and parent.url == "https://i.test/a.png"
    assert session.requests[-1]["params"] == {"id": 1}


@pytest.mark.asyncio
async def test_reply_body():
    session = FakeSession({("POST", "comment"): (200, {"comment_view": {"comment": COMMENT}})})
    lemmy = LemmyClient(session, "lemmy.test", "ocr", "pw")

    await lemmy.reply(ReplyPayload(content="text", post_id=1, parent_id=4))
    await lemmy.reply(ReplyPayload(content="text", post_id=1))

    assert session.requests[0]["json"] == {"content": "text", "post_id": 1, "parent_id": 4}
    assert session.requests[1]["json"] == {"content": "text", "post_id": 1}


@pytest.mark.asyncio
async def test_unread_mentions_and_new_posts():
    session = FakeSession({
        ("GET", "user/mention"): (200, {"mentions": [
            {"person_mention": {"id": 77, "read": False}, "comment": COMMENT, "post": POST},
        ]}),
        ("GET", "post/list"): (200, {"posts": [{"post": POST}]}),
    })
    lemmy = LemmyClient(session, "lemmy.test", "ocr", "pw")

    mentions = await lemmy.unread_mentions()
    assert [(m.mention_id, m.comment.id, m.post.id) for m in mentions] == [(77, 4, 1)]

    posts = await lemmy.new_posts(limit=5)
    assert [p.id for p in posts] == [1]
    assert session.requests[-1]["params"] == {"sort": "New", "type_": "All", "limit": 5, "page": 1}


@pytest.mark.asyncio
@pytest.mark.parametrize("status,payload", [
    (400, {"error": "couldnt_find_post"}),
    (200, {"error": "not_logged_in"}),
    (502, None),
])
async def test_api_errors_raise(status, payload):
    session = FakeSession({("GET", "post"): (status, payload)})
    lemmy = LemmyClient(session, "lemmy.test", "ocr", "pw")
    with pytest.raises(LemmyAPIError):
        await lemmy.fetch_post(1)
