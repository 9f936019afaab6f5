"""Submit a signup the way the coming-soon form does.

Applies the form's client-side checks (email shape, consent) before posting,
then prints the server's JSON reply. Handy for smoke-testing a deployment
or a webhook endpoint that accepts the same payload.

Usage:
    cd apps/api && uv run python -m scripts.submit_signup ada@example.com --name Ada

    # Against a deployed function:
    uv run python -m scripts.submit_signup ada@example.com \\
      --url https://example.netlify.app/.netlify/functions/subscribe
"""

import argparse
import json
import re
import sys
from datetime import UTC, datetime
from typing import Any

import httpx

DEFAULT_URL = "http://localhost:8000/subscribe"

# Deliberately looser than the server rule; the server has the final say.
FORM_EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def build_payload(email: str, name: str, consent: bool, referrer: str | None) -> dict[str, Any]:
    return {
        "email": email.strip(),
        "name": name.strip(),
        "consent": consent,
        "timestamp": datetime.now(UTC).isoformat(),
        "userAgent": f"submit-signup/{httpx.__version__}",
        "referrer": referrer,
    }


def check_form(email: str, consent: bool) -> str | None:
    """Return the message the form would show, or None if it would submit."""
    if not FORM_EMAIL_PATTERN.match(email.strip()):
        return "Please enter a valid email address (e.g., name@domain.com)."
    if not consent:
        return "Please agree to receive updates."
    return None


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("email")
    parser.add_argument("--name", default="")
    parser.add_argument("--url", default=DEFAULT_URL)
    parser.add_argument("--referrer", default=None)
    parser.add_argument("--no-consent", action="store_true", help="submit without consent")
    parser.add_argument(
        "--skip-form-checks",
        action="store_true",
        help="post even if the form would refuse to",
    )
    args = parser.parse_args(argv)

    consent = not args.no_consent
    problem = check_form(args.email, consent)
    if problem and not args.skip_form_checks:
        print(f"ERROR: {problem}", file=sys.stderr)
        return 1

    payload = build_payload(args.email, args.name, consent, args.referrer)
    try:
        response = httpx.post(args.url, json=payload, timeout=15.0)
    except httpx.HTTPError as exc:
        print(f"ERROR: request failed: {exc}", file=sys.stderr)
        return 1

    try:
        reply = response.json()
    except json.JSONDecodeError:
        reply = {"raw": response.text[:500]}
    print(json.dumps({"status": response.status_code, **reply}, indent=2))
    return 0 if response.is_success else 1


if __name__ == "__main__":
    sys.exit(main())
