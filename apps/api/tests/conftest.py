"""Pytest configuration and fixtures for the signup API test suite.

Provides:
- Settings pointing at a per-test temporary data directory (dry-run by default)
- A JSON file store, fresh rate limiter and notification service per test
- HTTP clients driving the FastAPI app in-process, with collaborators overridden
- A patched ``httpx.AsyncClient`` for the Resend API
"""

from collections.abc import AsyncGenerator, Callable, Generator
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from app.core.config import Settings, get_settings
from app.core.deps import get_notification_service, get_rate_limiter, get_signup_store
from app.core.rate_limit import MovingWindowRateLimiter
from app.main import app
from app.services.email_service import EmailService
from app.services.notification_service import NotificationService
from app.services.signup_service import SignupService
from app.services.signup_store import JsonFileSignupStore

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------
TEST_API_KEY = "re_test_key"
TEST_CLIENT_IP = "203.0.113.7"
RESEND_PATCH_TARGET = "app.services.email_service.httpx.AsyncClient"


def make_settings(data_dir: Path, **overrides: Any) -> Settings:
    """Build settings isolated from the developer's environment and .env file."""
    values: dict[str, Any] = {
        "data_dir": data_dir,
        "email_api_key": "",
        "email_provider": "resend",
        "email_from": "noreply@revanx.com",
        "email_to": "hello@revanx.com",
        "storage_mode": "json",
        "lock_attempts": 10,
        "lock_retry_delay_seconds": 0.01,
        "rate_limit_max": 5,
        "rate_limit_window_seconds": 900,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)  # type: ignore[call-arg]


# ---------------------------------------------------------------------------
# Core collaborators
# ---------------------------------------------------------------------------


@pytest.fixture
def data_dir(tmp_path: Path) -> Path:
    return tmp_path / "data"


@pytest.fixture
def test_settings(data_dir: Path) -> Settings:
    """Dry-run settings (no email API key)."""
    return make_settings(data_dir)


@pytest.fixture
def live_settings(data_dir: Path) -> Settings:
    """Settings with an email API key, so emails go to the (patched) provider."""
    return make_settings(data_dir, email_api_key=TEST_API_KEY)


@pytest.fixture
def store(test_settings: Settings) -> JsonFileSignupStore:
    return JsonFileSignupStore(
        path=test_settings.signups_path,
        lock_path=test_settings.lock_path,
        lock_attempts=test_settings.lock_attempts,
        lock_retry_delay=test_settings.lock_retry_delay_seconds,
    )


@pytest.fixture
def rate_limiter() -> Generator[MovingWindowRateLimiter, None, None]:
    limiter = MovingWindowRateLimiter(max_requests=5, window_seconds=900)
    yield limiter
    limiter.reset()


@pytest.fixture
def notification_service(test_settings: Settings) -> NotificationService:
    return NotificationService(test_settings, EmailService(test_settings))


@pytest.fixture
def signup_service(
    store: JsonFileSignupStore,
    rate_limiter: MovingWindowRateLimiter,
    notification_service: NotificationService,
) -> SignupService:
    return SignupService(store=store, rate_limiter=rate_limiter, notifications=notification_service)


# ---------------------------------------------------------------------------
# Resend mock
# ---------------------------------------------------------------------------


@pytest.fixture
def mock_resend() -> Generator[AsyncMock, None, None]:
    """Patch httpx.AsyncClient in the email service; yields the client mock.

    The default reply is a successful send with id ``em_123``.
    """
    with patch(RESEND_PATCH_TARGET) as mock_class:
        mock_client = AsyncMock()
        mock_class.return_value.__aenter__.return_value = mock_client

        response = MagicMock()
        response.is_success = True
        response.status_code = 200
        response.json.return_value = {"id": "em_123"}
        mock_client.post.return_value = response

        yield mock_client


# ---------------------------------------------------------------------------
# HTTP clients
# ---------------------------------------------------------------------------


@pytest.fixture
def override_app(
    test_settings: Settings,
    store: JsonFileSignupStore,
    rate_limiter: MovingWindowRateLimiter,
    notification_service: NotificationService,
) -> Generator[Callable[..., None], None, None]:
    """Install dependency overrides; returns a function to swap collaborators."""

    def _install(**overrides: Any) -> None:
        app.dependency_overrides[get_settings] = lambda: overrides.get("settings", test_settings)
        app.dependency_overrides[get_signup_store] = lambda: overrides.get("store", store)
        app.dependency_overrides[get_rate_limiter] = lambda: overrides.get(
            "rate_limiter", rate_limiter
        )
        app.dependency_overrides[get_notification_service] = lambda: overrides.get(
            "notifications", notification_service
        )

    _install()
    yield _install
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def client(override_app: Callable[..., None]) -> AsyncGenerator[AsyncClient, None]:
    """Async test client with collaborators bound to the per-test fixtures."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
        headers={"X-Forwarded-For": TEST_CLIENT_IP},
    ) as ac:
        yield ac


@pytest_asyncio.fixture
async def plain_client() -> AsyncGenerator[AsyncClient, None]:
    """Minimal async test client with NO dependency overrides."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac
