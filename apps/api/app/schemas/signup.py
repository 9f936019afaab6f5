"""Pydantic schemas for coming-soon signups."""

import secrets
import time
from datetime import UTC, datetime
from typing import Any

from pydantic import Field

from app.schemas.common import BaseSchema

_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"


def _to_base36(value: int) -> str:
    digits = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(_BASE36[rem])
    return "".join(reversed(digits)) or "0"


def generate_signup_id() -> str:
    """Time-ordered base36 millisecond prefix followed by a random suffix."""
    random_part = "".join(secrets.choice(_BASE36) for _ in range(11))
    return _to_base36(time.time_ns() // 1_000_000) + random_part


class SignupData(BaseSchema):
    """Sanitized submission, as produced by the validator."""

    name: str | None = None
    email: str
    consent: bool = True
    timestamp: str
    user_agent: str | None = None
    referrer: str | None = None


class Signup(SignupData):
    """One accepted email-capture record, as persisted."""

    id: str = Field(default_factory=generate_signup_id)
    ip: str
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @classmethod
    def from_data(cls, data: SignupData, ip: str) -> "Signup":
        return cls(**data.model_dump(), ip=ip)

    def to_record(self) -> dict[str, Any]:
        """JSON-ready dict with camelCase keys, in storage field order."""
        record = self.model_dump(mode="json", by_alias=True)
        return {
            key: record[key]
            for key in (
                "id",
                "name",
                "email",
                "consent",
                "timestamp",
                "userAgent",
                "referrer",
                "ip",
                "createdAt",
            )
        }
