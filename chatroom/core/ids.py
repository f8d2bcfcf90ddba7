"""
Identifier coercion for ids handed in by callers (often strings from the HTTP layer).
"""
from typing import Any, Optional
import uuid


def as_uuid(value: Any) -> Optional[uuid.UUID]:
    """Return value as a UUID, or None when it is missing or not a valid UUID."""
    if value is None or isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except ValueError:
        return None
