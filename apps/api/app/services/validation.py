"""Validation and sanitization of raw signup submissions.

Pure functions, no I/O. Rules are applied in order and the first failure
wins, so the caller always sees a single, specific reason.
"""

import re
from datetime import UTC, datetime
from typing import Any

from app.core.exceptions import ValidationError
from app.schemas.signup import SignupData

NAME_MAX_LENGTH = 100
META_MAX_LENGTH = 500

EMAIL_PATTERN = re.compile(
    r"^[a-zA-Z0-9.!#$%&'*+/=?^_`{|}~-]+"
    r"@[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?"
    r"(?:\.[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?)*$"
)
_TAG_PATTERN = re.compile(r"<[^>]*>")


def strip_html(value: str) -> str:
    """Remove every ``<...>`` span from the string."""
    return _TAG_PATTERN.sub("", value)


def _clean_name(value: Any) -> str | None:
    if not isinstance(value, str):
        return None
    return strip_html(value.strip())[:NAME_MAX_LENGTH] or None


def _clean_meta(value: Any) -> str | None:
    # Truncated before stripping, so a tag cut at the limit survives as a fragment.
    if not isinstance(value, str):
        return None
    return strip_html(value[:META_MAX_LENGTH]) or None


def validate_signup(body: Any) -> SignupData:
    """Turn an untyped request body into sanitized signup data.

    Raises:
        ValidationError: with the user-facing reason for the first failed rule.
    """
    if not isinstance(body, dict):
        raise ValidationError("Invalid request body")

    email = body.get("email")
    if not email or not isinstance(email, str):
        raise ValidationError("Email is required")

    clean_email = email.strip().lower()
    if not EMAIL_PATTERN.fullmatch(clean_email):
        raise ValidationError("Invalid email format")

    if not body.get("consent"):
        raise ValidationError("Consent is required")

    timestamp = body.get("timestamp")
    if not timestamp or not isinstance(timestamp, str):
        timestamp = datetime.now(UTC).isoformat()

    return SignupData(
        name=_clean_name(body.get("name")),
        email=clean_email,
        consent=True,
        timestamp=timestamp,
        user_agent=_clean_meta(body.get("userAgent")),
        referrer=_clean_meta(body.get("referrer")),
    )
