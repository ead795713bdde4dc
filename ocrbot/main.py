"""
Application entrypoint: logs in to Lemmy, wires the OCR client and the
feed poller, then polls forever.
"""

import asyncio
import logging

import aiohttp

from . import db
from .config import (
    BOT_USERNAME,
    HTTP_TIMEOUT_SEC,
    LEMMY_FEED_TYPE,
    LEMMY_INSTANCE,
    LEMMY_PASSWORD,
    LEMMY_USERNAME_OR_EMAIL,
    LOG_LEVEL,
    NEW_POSTS_LIMIT,
    NEW_POSTS_MAX_PAGES,
    OCR_API_KEY,
    OCR_ENDPOINT,
    OCR_ENGINE,
    OCR_STRICT_FORMATS,
    POLL_INTERVAL_SEC,
)
from .handlers.posts import self_mention_handle
from .middleware.logging import setup_logging
from .polling import FeedPoller
from .services.lemmy import LemmyClient
from .services.ocr import OCRClient

log = logging.getLogger(__name__)


async def main() -> None:
    # Fail fast on missing settings
    if not (LEMMY_INSTANCE and LEMMY_USERNAME_OR_EMAIL and LEMMY_PASSWORD):
        raise SystemExit("LEMMY_INSTANCE, LEMMY_USERNAME_OR_EMAIL and LEMMY_PASSWORD must be set")
    if not OCR_API_KEY:
        raise SystemExit("OCR_API_KEY is not set")
    if not BOT_USERNAME:
        raise SystemExit("BOT_USERNAME is not set (required when logging in with an e-mail)")

    setup_logging(LOG_LEVEL)
    db.init_db()

    timeout = aiohttp.ClientTimeout(total=HTTP_TIMEOUT_SEC)
    async with aiohttp.ClientSession(timeout=timeout) as session:
        lemmy = LemmyClient(session, LEMMY_INSTANCE, LEMMY_USERNAME_OR_EMAIL, LEMMY_PASSWORD)
        await lemmy.login()

        ocr = OCRClient(
            session,
            api_key=OCR_API_KEY,
            endpoint=OCR_ENDPOINT,
            engine=OCR_ENGINE,
            strict_formats=OCR_STRICT_FORMATS,
        )

        conn = db.connect()
        try:
            poller = FeedPoller(
                lemmy,
                ocr.resolve,
                handle=self_mention_handle(BOT_USERNAME, LEMMY_INSTANCE),
                conn=conn,
                interval=POLL_INTERVAL_SEC,
                posts_limit=NEW_POSTS_LIMIT,
                max_pages=NEW_POSTS_MAX_PAGES,
                feed_type=LEMMY_FEED_TYPE,
            )
            await poller.run()
        finally:
            conn.close()


def run() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    run()
