"""Secret identifier validation."""
import re
from typing import Optional

# Standard hyphenated GUID form: 8-4-4-4-12 hex digits
_GUID_PATTERN = re.compile(
    r'[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}'
)


def validate_secret_id(raw: str) -> Optional[str]:
    """
    Validate a secret identifier.

    The value must already be trimmed. Braced, URN-prefixed and
    un-hyphenated forms are rejected.

    Args:
        raw: Secret identifier as read from input

    Returns:
        Canonical lower-case identifier, or None if the value is not a GUID
    """
    if not raw or not _GUID_PATTERN.fullmatch(raw):
        return None
    return raw.lower()
