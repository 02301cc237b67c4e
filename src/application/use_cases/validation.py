"""Input checks shared by the use cases. Raise InvalidRequestError on bad input."""

import re
from typing import Any

from src.domain.errors import InvalidRequestError

MAX_MESSAGE_LENGTH = 5000

_SYMBOL = re.compile(r"^\^?[A-Z0-9][A-Z0-9.\-=]{0,11}$")


def require_user_id(user_id: Any) -> str:
    if not isinstance(user_id, str) or not user_id.strip():
        raise InvalidRequestError("UserId is required")
    return user_id.strip()


def require_symbol(symbol: Any) -> str:
    """Upper-case and validate a ticker (``AAPL``, ``BRK-B``, ``^GSPC``)."""
    if not isinstance(symbol, str) or not symbol.strip():
        raise InvalidRequestError("Stock symbol is required")
    value = symbol.strip().upper()
    if not _SYMBOL.match(value):
        raise InvalidRequestError(f"Invalid stock symbol: {symbol!r}")
    return value


def require_message(message: Any) -> str:
    if not isinstance(message, str) or not message.strip():
        raise InvalidRequestError("Message must be a non-empty string")
    if len(message) > MAX_MESSAGE_LENGTH:
        raise InvalidRequestError(f"Message too long (max {MAX_MESSAGE_LENGTH} characters)")
    return message
