from __future__ import annotations

import logging
import re

from fastapi import Request

from .errors import InvalidIdentifier

LOG_FORMAT = "%(asctime)s %(levelname)s:%(name)s: %(message)s"
PACKAGE_LOGGER = "src.session_lists"

_IDENTIFIER_RE = re.compile(r"[0-9]+")


# PUBLIC_INTERFACE
def configure_logging(level: str = "INFO") -> logging.Logger:
    """
    Attach a single stdout handler to the package logger and set its level.

    Safe to call more than once: an existing handler is reused rather than duplicated.
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    if not any(getattr(h, "_session_lists_handler", False) for h in logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._session_lists_handler = True  # type: ignore[attr-defined]
        logger.addHandler(handler)
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    return logger


# PUBLIC_INTERFACE
def parse_identifier(raw: str) -> int:
    """
    Parse a decimal path identifier.

    Raises:
        InvalidIdentifier if raw is not made only of ASCII digits.
    """
    if not _IDENTIFIER_RE.fullmatch(raw or ""):
        raise InvalidIdentifier(raw)
    return int(raw)


# PUBLIC_INTERFACE
def is_async_request(request: Request) -> bool:
    """True when the client flagged the request as an XMLHttpRequest."""
    return request.headers.get("X-Requested-With") == "XMLHttpRequest"
