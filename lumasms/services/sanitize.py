"""Input sanitizer applied to every externally supplied string before it reaches the store."""

import re
from typing import Any

# C0/C1 control characters (tab and newline included: none of the user columns are multi-line).
_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f-\x9f]")


def sanitize_input(value: Any) -> Any:
    """Strip surrounding whitespace and control characters from strings; pass other types through."""
    if not isinstance(value, str):
        return value
    return _CONTROL_CHARS.sub("", value).strip()
