"""Tests for the serverless (Lambda / Netlify Functions) signup entry point."""

import base64
import json
from typing import Any
from unittest.mock import MagicMock, patch

from app.core.logging_config import request_id_var
from app.functions import subscribe as subscribe_function
from app.functions.subscribe import handler
from app.services.signup_service import SUCCESS_MESSAGE, SignupService
from app.services.signup_store import JsonFileSignupStore


def _event(method: str = "POST", body: Any = None, **extra: Any) -> dict[str, Any]:
    event: dict[str, Any] = {
        "httpMethod": method,
        "headers": {"x-forwarded-for": "203.0.113.50, 10.0.0.1"},
        "body": json.dumps(body) if body is not None else None,
    }
    event.update(extra)
    return event


class TestRouting:
    def test_preflight(self, signup_service: SignupService) -> None:
        result = handler(_event("OPTIONS"), None, service=signup_service)

        assert result["statusCode"] == 200
        assert result["body"] == ""
        assert result["headers"]["Access-Control-Allow-Methods"] == "POST, OPTIONS"

    def test_get_not_allowed(self, signup_service: SignupService) -> None:
        result = handler(_event("GET"), None, service=signup_service)

        assert result["statusCode"] == 405
        assert json.loads(result["body"]) == {"success": False, "message": "Method not allowed"}

    def test_http_api_v2_method(self, signup_service: SignupService) -> None:
        event = {"requestContext": {"http": {"method": "OPTIONS"}}}
        assert handler(event, None, service=signup_service)["statusCode"] == 200


class TestSubmission:
    def test_valid_signup(self, signup_service: SignupService, store: JsonFileSignupStore) -> None:
        result = handler(
            _event(body={"name": "Ada", "email": "ADA@Example.COM", "consent": True}),
            None,
            service=signup_service,
        )

        assert result["statusCode"] == 200
        assert json.loads(result["body"]) == {"success": True, "message": SUCCESS_MESSAGE}
        record = store.read_all()[0]
        assert record["email"] == "ada@example.com"
        assert record["ip"] == "203.0.113.50"
        assert result["headers"]["Content-Type"] == "application/json"

    def test_invalid_json(self, signup_service: SignupService) -> None:
        event = _event()
        event["body"] = "{not json"

        result = handler(event, None, service=signup_service)

        assert result["statusCode"] == 400
        assert json.loads(result["body"])["message"] == "Invalid JSON in request body"

    def test_base64_body(self, signup_service: SignupService, store: JsonFileSignupStore) -> None:
        raw = json.dumps({"email": "b64@example.com", "consent": True}).encode()
        event = _event(isBase64Encoded=True)
        event["body"] = base64.b64encode(raw).decode()

        result = handler(event, None, service=signup_service)

        assert result["statusCode"] == 200
        assert store.read_all()[0]["email"] == "b64@example.com"

    def test_source_ip_fallback(
        self, signup_service: SignupService, store: JsonFileSignupStore
    ) -> None:
        event = _event(
            body={"email": "a@b.com", "consent": True},
            requestContext={"identity": {"sourceIp": "192.0.2.44"}},
        )
        event["headers"] = {}

        handler(event, None, service=signup_service)

        assert store.read_all()[0]["ip"] == "192.0.2.44"

    def test_rate_limited_across_invocations(self, signup_service: SignupService) -> None:
        body = {"email": "a@b.com", "consent": True}
        statuses = [
            handler(_event(body=body), None, service=signup_service)["statusCode"]
            for _ in range(6)
        ]
        assert statuses == [200, 200, 200, 200, 200, 429]

    def test_uses_platform_request_id(self, signup_service: SignupService) -> None:
        context = MagicMock(aws_request_id="req-123")
        handler(_event("OPTIONS"), context, service=signup_service)
        assert request_id_var.get() == "req-123"


class TestCors:
    def test_wildcard_origin(self, signup_service: SignupService) -> None:
        with patch.object(subscribe_function.settings, "cors_origins", ["*"]):
            result = handler(_event("OPTIONS"), None, service=signup_service)
        assert result["headers"]["Access-Control-Allow-Origin"] == "*"

    def test_listed_origin_echoed(self, signup_service: SignupService) -> None:
        allowed = ["https://revanx.com", "https://www.revanx.com"]
        event = _event("OPTIONS", headers={"Origin": "https://www.revanx.com"})

        with patch.object(subscribe_function.settings, "cors_origins", allowed):
            result = handler(event, None, service=signup_service)

        assert result["headers"]["Access-Control-Allow-Origin"] == "https://www.revanx.com"
        assert result["headers"]["Vary"] == "Origin"

    def test_unlisted_origin_gets_no_allow_header(self, signup_service: SignupService) -> None:
        allowed = ["https://revanx.com", "https://www.revanx.com"]
        event = _event("OPTIONS", headers={"origin": "https://evil.example"})

        with patch.object(subscribe_function.settings, "cors_origins", allowed):
            result = handler(event, None, service=signup_service)

        assert "Access-Control-Allow-Origin" not in result["headers"]


def test_default_service_writes_under_function_data_dir() -> None:
    """Function roots are read-only; the warm-instance store lives in the writable dir."""
    store = subscribe_function._service.store
    if isinstance(store, JsonFileSignupStore):
        assert store.path.parent == subscribe_function.settings.function_data_dir
        assert store.lock_path.parent == subscribe_function.settings.function_data_dir
    assert subscribe_function.settings.function_data_dir.is_absolute()
