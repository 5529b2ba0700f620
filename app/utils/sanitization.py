import re
from typing import Optional

CONTROL_CHARS = re.compile(r"[\x00-\x08\x0B\x0C\x0E-\x1F\x7F]")


def clean_text(value: Optional[str], max_length: int = 5000) -> Optional[str]:
    """
    Trim user supplied text and remove control characters.

    Blank strings become None so optional columns stay NULL.

    Raises:
        ValueError: If the value exceeds max_length
    """
    if value is None:
        return None
    if not isinstance(value, str):
        return value

    value = CONTROL_CHARS.sub("", value).strip()
    if not value:
        return None
    if len(value) > max_length:
        raise ValueError(f"Input exceeds maximum length of {max_length} characters")
    return value


def sanitize_storage_filename(filename: str) -> str:
    """Object storage key segment: anything other than letters, digits, '.' and '-' becomes '_'"""
    return re.sub(r"[^a-zA-Z0-9.-]", "_", filename or "file")
