"""
Opaque record identifiers.

Every record is keyed by a 32-character lowercase hex string. Values that
do not have that shape are rejected as bad input before any lookup runs.
Users are additionally keyed by email, which is kept in one canonical case.
"""

import re
import uuid

from backend.parcelpro.core.exceptions import BadRequestError

ID_LENGTH = 32
_ID_PATTERN = re.compile(r"^[0-9a-f]{32}$")


def new_id() -> str:
    """Generate a fresh identifier."""
    return uuid.uuid4().hex


def is_valid_id(value) -> bool:
    return isinstance(value, str) and _ID_PATTERN.match(value) is not None


def parse_id(value, field: str = "id") -> str:
    """
    Validate an identifier supplied by a caller.

    Raises:
        BadRequestError if the value is not a well-formed identifier
    """
    if not is_valid_id(value):
        raise BadRequestError(
            f"Invalid identifier for '{field}'",
            details={"field": field, "value": value}
        )
    return value


def normalize_email(email: str) -> str:
    """Emails are stored and compared lowercased, without surrounding spaces."""
    return email.strip().lower()
