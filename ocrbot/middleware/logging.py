"""
Process-wide logging setup.
"""

import logging

# Chatty libraries we only want to hear from on problems
_QUIET = ("aiohttp.access", "aiohttp.client", "asyncio")


def setup_logging(level: str = "INFO") -> None:
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(
        "%(asctime)s %(name)s %(levelname)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    ))

    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    for name in _QUIET:
        logging.getLogger(name).setLevel(logging.WARNING)
