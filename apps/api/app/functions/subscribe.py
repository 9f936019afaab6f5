"""Serverless entry point for signup submissions.

Accepts the AWS Lambda / Netlify Functions proxy event shape and delegates to
the same ``SignupService`` as the HTTP app. Collaborators are built once per
warm instance, so rate-limit counts last as long as the instance does.
"""

import asyncio
import base64
import json
import logging
from typing import Any

from app.core.config import settings
from app.core.deps import build_signup_service
from app.core.logging_config import bind_request_id, setup_logging
from app.core.rate_limit import client_ip_from_headers
from app.services.signup_service import SignupService

logger = logging.getLogger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Methods": "POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
    "Content-Type": "application/json",
}

setup_logging(debug=settings.debug)
_service: SignupService = build_signup_service(
    settings.model_copy(update={"data_dir": settings.function_data_dir})
)


def _cors_headers(event: dict[str, Any], allowed_origins: list[str]) -> dict[str, str]:
    """CORS headers for the caller's origin; a single origin value per response."""
    headers = dict(CORS_HEADERS)
    if "*" in allowed_origins:
        headers["Access-Control-Allow-Origin"] = "*"
        return headers

    origin = next(
        (value for key, value in (event.get("headers") or {}).items() if key.lower() == "origin"),
        None,
    )
    headers["Vary"] = "Origin"
    if origin in allowed_origins:
        headers["Access-Control-Allow-Origin"] = origin
    return headers


def _response(
    event: dict[str, Any], status_code: int, body: dict[str, Any] | None
) -> dict[str, Any]:
    return {
        "statusCode": status_code,
        "headers": _cors_headers(event, settings.cors_origins),
        "body": json.dumps(body) if body is not None else "",
    }


def _raw_body(event: dict[str, Any]) -> bytes | str | None:
    body = event.get("body")
    if body is not None and event.get("isBase64Encoded"):
        try:
            return base64.b64decode(body, validate=True)
        except ValueError:
            return None
    return body


def _source_ip(event: dict[str, Any]) -> str | None:
    request_context = event.get("requestContext") or {}
    identity = request_context.get("identity") or {}
    return identity.get("sourceIp") or (request_context.get("http") or {}).get("sourceIp")


def _request_id(event: dict[str, Any], context: Any) -> str | None:
    return getattr(context, "aws_request_id", None) or (event.get("requestContext") or {}).get(
        "requestId"
    )


def handler(
    event: dict[str, Any],
    context: Any,
    service: SignupService | None = None,
) -> dict[str, Any]:
    """Handle one proxied HTTP invocation."""
    bind_request_id(_request_id(event, context))

    method = (
        event.get("httpMethod")
        or ((event.get("requestContext") or {}).get("http") or {}).get("method")
        or ""
    ).upper()
    if method == "OPTIONS":
        return _response(event, 200, None)
    if method != "POST":
        logger.info("Rejected %s request to signup function", method or "unknown")
        return _response(event, 405, {"success": False, "message": "Method not allowed"})

    client_ip = client_ip_from_headers(event.get("headers") or {}, _source_ip(event))
    outcome = asyncio.run((service or _service).handle(_raw_body(event), client_ip))
    return _response(event, outcome.status_code, outcome.body())
