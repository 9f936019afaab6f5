"""Dependency injection for FastAPI routes and the serverless adapter.

Collaborators are built once per process and shared; tests replace them
through ``app.dependency_overrides``.
"""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends

from app.core.config import Settings, get_settings
from app.core.rate_limit import MovingWindowRateLimiter, RateLimiter
from app.services.notification_service import NotificationService
from app.services.signup_service import SignupService
from app.services.signup_store import SignupStore, build_signup_store


@lru_cache
def get_rate_limiter() -> RateLimiter:
    """Process-wide rate limiter."""
    settings = get_settings()
    return MovingWindowRateLimiter(
        max_requests=settings.rate_limit_max,
        window_seconds=settings.rate_limit_window_seconds,
    )


@lru_cache
def get_signup_store() -> SignupStore:
    return build_signup_store(get_settings())


@lru_cache
def get_notification_service() -> NotificationService:
    return NotificationService(get_settings())


def build_signup_service(settings: Settings | None = None) -> SignupService:
    """Assemble a signup service, from explicit settings or the shared singletons."""
    if settings is None:
        return SignupService(
            store=get_signup_store(),
            rate_limiter=get_rate_limiter(),
            notifications=get_notification_service(),
        )
    return SignupService(
        store=build_signup_store(settings),
        rate_limiter=MovingWindowRateLimiter(
            max_requests=settings.rate_limit_max,
            window_seconds=settings.rate_limit_window_seconds,
        ),
        notifications=NotificationService(settings),
    )


def get_signup_service(
    store: Annotated[SignupStore, Depends(get_signup_store)],
    rate_limiter: Annotated[RateLimiter, Depends(get_rate_limiter)],
    notifications: Annotated[NotificationService, Depends(get_notification_service)],
) -> SignupService:
    return SignupService(store=store, rate_limiter=rate_limiter, notifications=notifications)


SettingsDep = Annotated[Settings, Depends(get_settings)]
SignupServiceDep = Annotated[SignupService, Depends(get_signup_service)]


__all__ = [
    "SettingsDep",
    "SignupServiceDep",
    "build_signup_service",
    "get_notification_service",
    "get_rate_limiter",
    "get_signup_service",
    "get_signup_store",
]
