
from ocrbot import db
from ocrbot.models import Comment


def test_parent_comment_id_from_path():
    assert Comment(id=5, post_id=1, path="0.5").parent_comment_id is None
    assert Comment(id=5, post_id=1, path="0.4.5").parent_comment_id == 4
    assert Comment(id=5, post_id=1, path="0.2.3.4.5").parent_comment_id == 4


def test_processed_markers():
    conn = db.connect(":memory:")
    db.init_db(conn)

    assert not db.is_processed(conn, "mention", 10)
    db.mark_processed(conn, "mention", 10)
    db.mark_processed(conn, "mention", 10)  # second mark is a no-op
    assert db.is_processed(conn, "mention", 10)
    # ids are per kind
    assert not db.is_processed(conn, "post", 10)

    count = db.q(conn, "SELECT COUNT(*) AS n FROM processed").fetchone()["n"]
    assert count == 1
    conn.close()
