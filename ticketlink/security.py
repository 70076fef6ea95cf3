"""Security-related helpers (built-in auth and webhook verification).

Provides optional HTTP Basic auth protection for the management API, plus the
signature/token checks GitHub and GitLab webhook deliveries are verified with.
"""

from __future__ import annotations

import base64
import binascii
import hashlib
import hmac
import secrets
from dataclasses import dataclass

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response


@dataclass(frozen=True)
class BasicAuthCredentials:
    username: str
    password: str


def _parse_basic_auth_header(header_value: str) -> BasicAuthCredentials | None:
    """Parse an Authorization header containing HTTP Basic auth."""
    if not header_value:
        return None

    scheme, _, param = header_value.partition(" ")
    if scheme.lower() != "basic" or not param:
        return None

    try:
        decoded = base64.b64decode(param, validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError):
        return None

    username, sep, password = decoded.partition(":")
    if sep != ":":
        return None

    return BasicAuthCredentials(username=username, password=password)


def verify_github_signature(secret: str, payload: bytes, header_value: str | None) -> bool:
    """Check an `X-Hub-Signature-256: sha256=<hex>` header against the raw body."""
    if not header_value:
        return False
    scheme, _, signature = header_value.partition("=")
    if scheme != "sha256" or not signature:
        return False
    expected = hmac.new(secret.encode("utf-8"), payload, hashlib.sha256).hexdigest()
    received = signature.strip().lower().encode("utf-8")
    return secrets.compare_digest(expected.encode("utf-8"), received)


def verify_gitlab_token(secret: str, header_value: str | None) -> bool:
    """Check the shared `X-Gitlab-Token` header."""
    if not header_value:
        return False
    return secrets.compare_digest(secret.encode("utf-8"), header_value.encode("utf-8"))


class BasicAuthMiddleware(BaseHTTPMiddleware):
    """Protect routes via HTTP Basic auth.

    If enabled, we protect all paths except an allowlist (/health and the
    webhook endpoints, which verify their own signatures).
    """

    def __init__(
        self,
        app,
        *,
        username: str,
        password: str,
        allow_paths: set[str] | None = None,
        realm: str = "TicketLink",
    ):
        super().__init__(app)
        self._username = username
        self._password = password
        self._allow_paths = allow_paths or {"/health"}
        self._realm = realm

    def _unauthorized(self) -> Response:
        return Response(
            content="Unauthorized",
            status_code=401,
            headers={"WWW-Authenticate": f'Basic realm="{self._realm}", charset="UTF-8"'},
        )

    async def dispatch(self, request: Request, call_next):
        if request.url.path in self._allow_paths:
            return await call_next(request)

        creds = _parse_basic_auth_header(request.headers.get("Authorization", ""))
        if creds is None:
            return self._unauthorized()

        ok_user = secrets.compare_digest(
            creds.username.encode("utf-8"), self._username.encode("utf-8")
        )
        ok_pass = secrets.compare_digest(
            creds.password.encode("utf-8"), self._password.encode("utf-8")
        )
        if not (ok_user and ok_pass):
            return self._unauthorized()

        return await call_next(request)
