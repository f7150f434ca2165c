"""Input sanitization for answers before they are persisted."""

import re
from typing import Any, Dict, Mapping

_SCRIPT_RE = re.compile(r"<script\b[^<]*(?:(?!</script>)<[^<]*)*</script>", re.IGNORECASE)
_HANDLER_RE = re.compile(r"""on\w+\s*=\s*["'][^"']*["']""", re.IGNORECASE)


def sanitize_string(value: str) -> str:
    """Strip null bytes, <script> blocks and inline on*= handlers, then trim."""
    if not isinstance(value, str):
        return ""
    cleaned = value.replace("\0", "")
    cleaned = _SCRIPT_RE.sub("", cleaned)
    cleaned = _HANDLER_RE.sub("", cleaned)
    return cleaned.strip()


def sanitize_responses(responses: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Sanitize every string answer; other values are kept as-is.

    Strings inside list answers (multi-select) are sanitized too.
    """
    cleaned: Dict[str, Any] = {}
    for key, value in responses.items():
        if isinstance(value, str):
            cleaned[key] = sanitize_string(value)
        elif isinstance(value, list):
            cleaned[key] = [sanitize_string(v) if isinstance(v, str) else v for v in value]
        else:
            cleaned[key] = value
    return cleaned
