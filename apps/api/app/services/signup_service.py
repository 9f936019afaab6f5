"""Signup request handling shared by every entry point.

Pipeline per submission::

    rate-limit check -> parse body -> validate -> build Signup -> store
        -> notify operator -> confirm to user (skipped in dry-run) -> respond

Anything that fails before the store step leaves no trace. Once the record
is stored the request succeeds: email problems are logged, not reported.
"""

import json
import logging
from dataclasses import dataclass
from typing import Any

from starlette.concurrency import run_in_threadpool

from app.core.exceptions import (
    GENERIC_ERROR_MESSAGE,
    RateLimitError,
    SignupError,
    StorageError,
    ValidationError,
)
from app.core.rate_limit import RateLimiter
from app.schemas.common import SubscribeResponse
from app.schemas.signup import Signup
from app.services.notification_service import NotificationService
from app.services.signup_store import SignupStore
from app.services.validation import validate_signup

logger = logging.getLogger(__name__)

SUCCESS_MESSAGE = "Successfully subscribed! Check your email for confirmation."
INVALID_JSON_MESSAGE = "Invalid JSON in request body"


@dataclass(frozen=True)
class SubscribeOutcome:
    """Transport-neutral result: an HTTP status plus the JSON reply."""

    status_code: int
    response: SubscribeResponse

    @classmethod
    def ok(cls) -> "SubscribeOutcome":
        return cls(200, SubscribeResponse(success=True, message=SUCCESS_MESSAGE))

    @classmethod
    def failed(cls, status_code: int, message: str) -> "SubscribeOutcome":
        return cls(status_code, SubscribeResponse(success=False, message=message))

    def body(self) -> dict[str, Any]:
        return self.response.model_dump(by_alias=True)


def parse_body(raw: bytes | str | None) -> Any:
    """Decode a JSON request body.

    Raises:
        ValidationError: if the body is missing or not valid JSON.
    """
    if raw is None:
        raise ValidationError(INVALID_JSON_MESSAGE)
    try:
        return json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise ValidationError(INVALID_JSON_MESSAGE) from exc


class SignupService:
    """Orchestrates one signup submission."""

    def __init__(
        self,
        store: SignupStore,
        rate_limiter: RateLimiter,
        notifications: NotificationService,
    ) -> None:
        self.store = store
        self.rate_limiter = rate_limiter
        self.notifications = notifications

    async def subscribe(self, raw_body: bytes | str | None, client_ip: str) -> Signup:
        """Run the pipeline and return the stored signup.

        Raises:
            RateLimitError: the address has used up its submissions for the window.
            ValidationError: the body was unparsable or failed validation.
            StorageError: the signup could not be persisted.
        """
        if not self.rate_limiter.allow(client_ip):
            raise RateLimitError()

        data = validate_signup(parse_body(raw_body))
        signup = Signup.from_data(data, ip=client_ip)

        # File locking sleeps between attempts; keep it off the event loop.
        await run_in_threadpool(self.store.append, signup)

        await self._notify(signup)
        return signup

    async def _notify(self, signup: Signup) -> None:
        try:
            await self.notifications.notify_admin(signup)
            if not self.notifications.is_dry_run:
                await self.notifications.send_confirmation(signup)
        except Exception:
            logger.exception("Notification failed for signup %s", signup.id)

    async def handle(self, raw_body: bytes | str | None, client_ip: str) -> SubscribeOutcome:
        """Run the pipeline and map every outcome to a status and reply."""
        try:
            signup = await self.subscribe(raw_body, client_ip)
        except (RateLimitError, ValidationError) as exc:
            logger.info("Signup rejected from %s: %s", client_ip, exc.message)
            return SubscribeOutcome.failed(exc.status_code, exc.message)
        except StorageError:
            logger.exception("Signup storage failed for %s", client_ip)
            return SubscribeOutcome.failed(500, GENERIC_ERROR_MESSAGE)
        except SignupError as exc:
            logger.exception("Signup failed for %s", client_ip)
            return SubscribeOutcome.failed(exc.status_code, GENERIC_ERROR_MESSAGE)
        except Exception:
            logger.exception("Subscription error for %s", client_ip)
            return SubscribeOutcome.failed(500, GENERIC_ERROR_MESSAGE)

        logger.info("Signup accepted: id=%s", signup.id)
        return SubscribeOutcome.ok()
