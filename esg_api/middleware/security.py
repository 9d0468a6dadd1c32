"""Security middleware: HTTP headers and body size enforcement.

Both are implemented as pure ASGI middleware (no BaseHTTPMiddleware)
so they pass binary export responses through untouched.
"""

import json

import structlog
from starlette.datastructures import MutableHeaders
from starlette.types import ASGIApp, Receive, Scope, Send

logger = structlog.get_logger()

# ── 1. Security Headers ───────────────────────────────────────────────────────


class SecurityHeadersMiddleware:
    """Append security headers to every HTTP response.

    Exports and auth responses carry personal data and are marked no-store.
    """

    _BASE_HEADERS: tuple[tuple[str, str], ...] = (
        ("x-content-type-options", "nosniff"),
        ("x-frame-options", "DENY"),
        ("referrer-policy", "no-referrer"),
    )
    _HSTS = ("strict-transport-security", "max-age=63072000; includeSubDomains")
    _NO_STORE_PREFIXES: tuple[str, ...] = ("/export/", "/auth/")

    def __init__(self, app: ASGIApp, is_production: bool = False) -> None:
        self.app = app
        self._headers = list(self._BASE_HEADERS)
        if is_production:
            self._headers.append(self._HSTS)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        no_store = scope.get("path", "").startswith(self._NO_STORE_PREFIXES)

        async def _send(message: dict) -> None:
            if message["type"] == "http.response.start":
                headers = MutableHeaders(scope=message)
                for name, value in self._headers:
                    headers.append(name, value)
                if no_store:
                    headers["cache-control"] = "no-store"
                headers["server"] = "esg-api"
            await send(message)

        await self.app(scope, receive, _send)


# ── 2. Request Body Size Limiter ──────────────────────────────────────────────


class RequestBodySizeLimitMiddleware:
    """Reject requests whose Content-Length exceeds max_bytes before they hit handlers."""

    def __init__(self, app: ASGIApp, max_bytes: int = 1_048_576) -> None:
        self.app = app
        self.max_bytes = max_bytes

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        headers = dict(scope.get("headers", []))
        raw_cl = headers.get(b"content-length")
        if raw_cl:
            try:
                too_large = int(raw_cl) > self.max_bytes
            except ValueError:
                too_large = False  # Malformed header; let downstream handle it
            if too_large:
                logger.warning(
                    "request_body_too_large",
                    path=scope.get("path"),
                    content_length=raw_cl.decode(errors="replace"),
                    max_bytes=self.max_bytes,
                )
                await self._send_413(send)
                return

        await self.app(scope, receive, send)

    async def _send_413(self, send: Send) -> None:
        body = json.dumps({
            "error": "payload_too_large",
            "message": f"Request body too large. Maximum {self.max_bytes} bytes.",
            "detail": None,
            "request_id": "unknown",
        }).encode()
        await send(
            {
                "type": "http.response.start",
                "status": 413,
                "headers": [
                    (b"content-type", b"application/json"),
                    (b"content-length", str(len(body)).encode()),
                ],
            }
        )
        await send({"type": "http.response.body", "body": body, "more_body": False})
