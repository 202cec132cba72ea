"""Classification of API errors by their message text.

Upstream APIs surface rate limiting and overload as free-text messages rather
than a stable structured error type, so retryability is decided by substring
matching on ``str(exception)``.
"""

from __future__ import annotations

import math
import re
from decimal import Decimal
from typing import Callable, Optional

# Status codes are matched case-sensitively, phrases case-insensitively.
RETRYABLE_CODES = ("429", "500", "503")
RETRYABLE_PHRASES = ("quota", "rate limit")

_RETRY_HINT_RE = re.compile(r"retry in (\d+(?:\.\d+)?)", re.IGNORECASE | re.ASCII)

Classifier = Callable[[BaseException], bool]


def error_message(exception: Optional[BaseException]) -> str:
    """Human-readable message of an exception ("" when there is none)."""
    if exception is None:
        return ""
    return str(exception)


def is_retryable_message(message: Optional[str]) -> bool:
    """Check if an error message describes a transient failure."""
    if not message:
        return False
    if any(code in message for code in RETRYABLE_CODES):
        return True
    lowered = message.lower()
    return any(phrase in lowered for phrase in RETRYABLE_PHRASES)


def is_retryable_error(exception: BaseException) -> bool:
    """Default classifier: retry rate-limit, quota and 500/503 errors."""
    return is_retryable_message(error_message(exception))


def extract_retry_hint_ms(message: Optional[str]) -> Optional[int]:
    """Parse a server hint of the form ``retry in <seconds>``.

    Returns:
        Suggested wait in whole milliseconds (rounded up), or None if absent
    """
    if not message:
        return None
    match = _RETRY_HINT_RE.search(message)
    if match is None:
        return None
    # Decimal keeps "1.1" from becoming 1100.0000000000002 ms
    return math.ceil(Decimal(match.group(1)) * 1000)
