"""
Central config: loads .env and exposes settings.
"""

import os
from pathlib import Path
from dotenv import load_dotenv

load_dotenv()


def _get_int(name: str, default: int | None = None) -> int | None:
    v = os.getenv(name)
    if v is None or str(v).strip() == "":
        return default
    try:
        return int(v)
    except ValueError:
        return default


def _get_float(name: str, default: float) -> float:
    v = os.getenv(name)
    if v is None or str(v).strip() == "":
        return default
    try:
        return float(v)
    except ValueError:
        return default


def _get_bool(name: str, default: bool = False) -> bool:
    v = os.getenv(name, "")
    if v == "" or v is None:
        return default
    return str(v).strip().lower() in ("1", "true", "yes", "on")


# ───────────────────────────── Lemmy ───────────────────────────── #

# Home instance, e.g. "lemmy.world" or "https://lemmy.example.com:8536"
LEMMY_INSTANCE = os.getenv("LEMMY_INSTANCE", "").strip()

LEMMY_USERNAME_OR_EMAIL = os.getenv("LEMMY_USERNAME_OR_EMAIL", "").strip()
LEMMY_PASSWORD = os.getenv("LEMMY_PASSWORD", "")

# Handle used for self-mention matching. Falls back to the login name
# unless that is an e-mail address.
BOT_USERNAME = os.getenv("BOT_USERNAME", "").strip() or (
    LEMMY_USERNAME_OR_EMAIL if "@" not in LEMMY_USERNAME_OR_EMAIL else ""
)

# "All" | "Local" | "Subscribed"
LEMMY_FEED_TYPE = os.getenv("LEMMY_FEED_TYPE", "All").strip() or "All"


# ───────────────────────────── OCR ───────────────────────────── #

OCR_API_KEY = os.getenv("OCR_API_KEY", "").strip()
OCR_ENDPOINT = os.getenv("OCR_ENDPOINT", "https://api.ocr.space/parse/imageurl").strip()
OCR_ENGINE = _get_int("OCR_ENGINE", 2) or 2

# When on, only jpg/png/gif URLs are sent to OCR; webp/avif and URLs
# without an extension are skipped.
OCR_STRICT_FORMATS = _get_bool("OCR_STRICT_FORMATS", False)


# ───────────────────────────── Runtime ───────────────────────────── #

# Total timeout for a single HTTP request (OCR + Lemmy API)
HTTP_TIMEOUT_SEC = _get_float("HTTP_TIMEOUT_SEC", 60.0)

POLL_INTERVAL_SEC = _get_float("POLL_INTERVAL_SEC", 30.0)
NEW_POSTS_LIMIT = _get_int("NEW_POSTS_LIMIT", 20) or 20
# How far back one poll pages through the feed to catch up with posts it has not seen
NEW_POSTS_MAX_PAGES = _get_int("NEW_POSTS_MAX_PAGES", 10) or 10

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").strip().upper() or "INFO"

# Database file lives at project/ocrbot/../bot.db unless overridden
BOT_DB_PATH = Path(os.getenv("BOT_DB_PATH") or (Path(__file__).resolve().parent.parent / "bot.db"))
