"""
OCR.space client: one GET per image url, never raises.

Request shape:
  GET <endpoint>?apikey=<key>&url=<image url>&OCREngine=2[&filetype=PNG]
Response shape (fields we read):
  {"IsErroredOnProcessing": false, "ParsedResults": [{"ParsedText": "..."}]}
"""

import logging
import re
from typing import Optional, Tuple
from urllib.parse import unquote_plus, urlsplit, urlunsplit

import aiohttp

from ..models import OCRResponse, OCRResult

log = logging.getLogger(__name__)

# Formats the service reads natively
SUPPORTED_FORMATS = frozenset({"jpg", "jpeg", "png", "gif"})

# filetype values the service accepts
FILETYPE_HINTS = {"jpg": "JPG", "jpeg": "JPG", "png": "PNG", "gif": "GIF"}

# Formats the service mishandles; the image host converts them for us (?format=png)
CONVERTIBLE_FORMATS = frozenset({"webp", "avif"})
CONVERSION_FORMAT = "png"

# Query params that change between renders of the same image (pict-rs thumbnails,
# cache busters). They are dropped so the service always sees the same url.
VOLATILE_PARAMS = frozenset({"format", "thumbnail", "width", "height", "size", "v", "t"})

_EXT = re.compile(r"\.([A-Za-z0-9]{1,5})$")


def url_extension(url: str) -> Optional[str]:
    """Lower-cased extension of the url's last path segment, if any."""
    last = urlsplit(url).path.rsplit("/", 1)[-1]
    m = _EXT.search(last)
    return m.group(1).lower() if m else None


def _query_key(piece: str) -> str:
    return unquote_plus(piece.split("=", 1)[0]).lower()


def normalize_image_url(url: str) -> str:
    """Strip volatile query params and the fragment; other params are kept byte for byte."""
    parts = urlsplit(url.strip())
    query = "&".join(p for p in parts.query.split("&") if p and _query_key(p) not in VOLATILE_PARAMS)
    return urlunsplit((parts.scheme, parts.netloc, parts.path, query, ""))


def _with_param(url: str, key: str, value: str) -> str:
    parts = urlsplit(url)
    piece = f"{key}={value}"
    query = f"{parts.query}&{piece}" if parts.query else piece
    return urlunsplit((parts.scheme, parts.netloc, parts.path, query, ""))


def plan_request(url: str, strict_formats: bool = False) -> Optional[Tuple[str, Optional[str]]]:
    """
    Decide what to send for `url`.
    Returns (target_url, filetype_hint) or None when the image must be skipped.
      - jpg/jpeg/png/gif -> hint passed through ("PNG", "JPG", "GIF"; jpeg -> "JPG")
      - webp/avif        -> ask the host for png, hint forced to "PNG" (skipped in strict mode)
      - other extension  -> skipped
      - no extension     -> no hint (skipped in strict mode)
    """
    target = normalize_image_url(url)
    ext = url_extension(target)

    if ext in SUPPORTED_FORMATS:
        return target, FILETYPE_HINTS[ext]

    # Strict mode only sends the allow-listed formats
    if strict_formats:
        return None

    if ext is None:
        return target, None

    if ext in CONVERTIBLE_FORMATS:
        return _with_param(target, "format", CONVERSION_FORMAT), CONVERSION_FORMAT.upper()

    return None


def parse_response(data) -> OCRResult:
    """Turn a decoded JSON body into an OCRResult; any shape mismatch means no text."""
    res = OCRResponse.model_validate(data)
    if res.IsErroredOnProcessing or not res.ParsedResults:
        return OCRResult()
    return OCRResult(success=True, text=res.ParsedResults[0].ParsedText)


class OCRClient:
    """Resolves image urls to text through the remote OCR endpoint."""

    def __init__(
        self,
        session: aiohttp.ClientSession,
        api_key: str,
        endpoint: str = "https://api.ocr.space/parse/imageurl",
        engine: int = 2,
        strict_formats: bool = False,
    ):
        self.session = session
        self.api_key = api_key
        self.endpoint = endpoint
        self.engine = engine
        self.strict_formats = strict_formats

    async def resolve(self, url: str) -> OCRResult:
        plan = plan_request(url, self.strict_formats)
        if plan is None:
            log.debug("OCR skip (unsupported format): %s", url)
            return OCRResult()

        target, filetype = plan
        params = {"apikey": self.api_key, "url": target, "OCREngine": str(self.engine)}
        if filetype:
            params["filetype"] = filetype

        try:
            async with self.session.get(self.endpoint, params=params) as resp:
                resp.raise_for_status()
                data = await resp.json(content_type=None)
            result = parse_response(data)
        except Exception as e:
            log.warning("OCR failed for %s: %r", target, e)
            return OCRResult()

        if not result.success:
            log.info("OCR found no text in %s", target)
        return result
