
"""
Error middleware around every feed event, so failures are never silent.
"""

import logging
from typing import Any, Awaitable, Callable, Dict

log = logging.getLogger(__name__)


class ErrorMiddleware:
    async def __call__(
        self,
        handler: Callable[[Any, Dict[str, Any]], Awaitable[Any]],
        event: Any,
        data: Dict[str, Any],
    ) -> Any:
        try:
            return await handler(event, data)
        except Exception:
            log.exception("Error while handling %s %s", data.get("kind", "event"), data.get("id", getattr(event, "id", "?")))
            raise
