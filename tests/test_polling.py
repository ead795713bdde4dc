
import pytest

from fakes import FakeOCR, FakePlatform, comment, img, post
from ocrbot import db
from ocrbot.models import Mention
from ocrbot.polling import FeedPoller

IMG = "https://i.test/x.png"
HANDLE = "@ocr@lemmy.test"


class FakeLemmy(FakePlatform):
    def __init__(self, mentions=(), new=(), person_id=99, **kw):
        super().__init__(**kw)
        self.mentions = list(mentions)
        self.new = list(new)
        self.person_id = person_id
        self.read = []
        self.broken_posts = set()
        self.pages = []

    async def unread_mentions(self):
        return [m for m in self.mentions if m.mention_id not in self.read]

    async def mark_mention_read(self, mention_id):
        self.read.append(mention_id)

    async def new_posts(self, limit=20, feed_type="All", page=1):
        self.pages.append(page)
        return self.new[(page - 1) * limit:page * limit]

    async def fetch_post(self, post_id):
        if post_id in self.broken_posts:
            raise RuntimeError("instance is down")
        return await super().fetch_post(post_id)


@pytest.fixture
def conn():
    c = db.connect(":memory:")
    db.init_db(c)
    yield c
    c.close()


@pytest.mark.asyncio
async def test_tick_answers_each_event_once(conn):
    m = comment(5, post_id=1, content=f"{HANDLE} {img(IMG)}")
    p2 = post(2, body=f"{HANDLE} {img(IMG)}")
    quiet = post(3, body=img(IMG))
    lemmy = FakeLemmy(mentions=[Mention(mention_id=70, comment=m)], new=[p2, quiet], posts=[post(1), p2, quiet])
    poller = FeedPoller(lemmy, FakeOCR({IMG: "hi"}), HANDLE, conn)

    assert await poller.tick() == 2
    await poller.drain()

    assert sorted((r.post_id, r.parent_id) for r in lemmy.replies) == [(1, 5), (2, None)]
    assert lemmy.read == [70]
    assert db.is_processed(conn, "mention", 70)
    assert db.is_processed(conn, "post", 2)
    # posts that do not mention the bot are not remembered
    assert not db.is_processed(conn, "post", 3)

    # nothing new on the next poll
    assert await poller.tick() == 0


@pytest.mark.asyncio
async def test_failing_event_does_not_affect_others(conn):
    # top-level mention whose parent post cannot be fetched
    bad = Mention(mention_id=71, comment=comment(6, post_id=8, content=HANDLE))
    good = Mention(mention_id=72, comment=comment(7, post_id=1, content=img(IMG)))
    lemmy = FakeLemmy(mentions=[bad, good], posts=[post(1)])
    lemmy.broken_posts.add(8)
    poller = FeedPoller(lemmy, FakeOCR({IMG: "hi"}), HANDLE, conn)

    await poller.tick()
    await poller.drain()

    assert [(r.post_id, r.parent_id) for r in lemmy.replies] == [(1, 7)]
    assert lemmy.read == [72]
    # the failed one is not retried
    assert db.is_processed(conn, "mention", 71)
    assert await poller.tick() == 0


@pytest.mark.asyncio
async def test_own_comments_are_not_answered(conn):
    mine = Mention(mention_id=73, comment=comment(9, content=HANDLE, creator_id=99))
    lemmy = FakeLemmy(mentions=[mine], posts=[post(1)])
    poller = FeedPoller(lemmy, FakeOCR({}), HANDLE, conn)

    assert await poller.tick() == 0
    assert lemmy.replies == []


@pytest.mark.asyncio
async def test_pages_back_to_catch_up_with_busy_feed(conn):
    # newest first, like sort=New
    lemmy = FakeLemmy(new=[post(i, body="chatter") for i in range(10, 0, -1)])
    poller = FeedPoller(lemmy, FakeOCR({IMG: "hi"}), HANDLE, conn, posts_limit=3)

    # first poll only reads one page
    assert await poller.tick() == 0
    assert lemmy.pages == [1]

    # ten posts arrive before the next poll; the one for the bot is on page 3
    burst = [post(i, body="chatter") for i in range(20, 10, -1)]
    burst[7] = post(13, body=f"{HANDLE} {img(IMG)}")
    lemmy.new = burst + lemmy.new
    lemmy.posts.update({p.id: p for p in lemmy.new})
    lemmy.pages.clear()

    assert await poller.tick() == 1
    await poller.drain()

    # stops at page 4, the first one holding a post seen before
    assert lemmy.pages == [1, 2, 3, 4]
    assert [(r.post_id, r.parent_id) for r in lemmy.replies] == [(13, None)]
    assert [tuple(r) for r in conn.execute("SELECT kind, item_id FROM processed")] == [("post", 13)]


@pytest.mark.asyncio
async def test_paging_is_bounded(conn):
    lemmy = FakeLemmy(new=[post(i, body="chatter") for i in range(5, 0, -1)])
    poller = FeedPoller(lemmy, FakeOCR({}), HANDLE, conn, posts_limit=2, max_pages=3)
    await poller.tick()

    lemmy.new = [post(i, body="chatter") for i in range(50, 5, -1)] + lemmy.new
    lemmy.pages.clear()
    await poller.tick()

    assert lemmy.pages == [1, 2, 3]
