"""
Request context for logs.

Each request is tagged with an X-Request-ID (accepted from the caller when it
looks sane, generated otherwise) and with the establishment slug sent in
X-Establishment-Slug. Both are exposed to log records through
RequestContextFilter, so a log line of a tenant route reads like
"... [req=3f2a.. tenant=joe-burger]".
"""

import re
import uuid
from contextvars import ContextVar

from starlette.types import ASGIApp, Message, Receive, Scope, Send

from shared.config.constants import REQUEST_ID_HEADER, TENANT_HEADER


request_id_var: ContextVar[str] = ContextVar("request_id", default="")
tenant_slug_var: ContextVar[str] = ContextVar("tenant_slug", default="")

# Client-supplied ids end up in logs; keep them short and printable
_VALID_REQUEST_ID = re.compile(r"^[A-Za-z0-9._:-]{1,64}$")


def get_request_id() -> str:
    return request_id_var.get()


def get_tenant_slug() -> str:
    return tenant_slug_var.get()


def _header(scope: Scope, name: str) -> str | None:
    wanted = name.lower().encode("latin-1")
    for key, value in scope.get("headers", []):
        if key == wanted:
            return value.decode("latin-1")
    return None


class RequestContextMiddleware:
    """
    Pure ASGI middleware: sets the request id and tenant slug context vars
    for the duration of the request and echoes X-Request-ID in the response.

    Plain ASGI rather than BaseHTTPMiddleware, so the response body and the
    background tasks after it pass through unwrapped.
    """

    def __init__(self, app: ASGIApp):
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        incoming = _header(scope, REQUEST_ID_HEADER)
        request_id = incoming if incoming and _VALID_REQUEST_ID.match(incoming) else uuid.uuid4().hex
        slug = (_header(scope, TENANT_HEADER) or "").strip().lower()[:60]

        scope.setdefault("state", {})["request_id"] = request_id
        request_token = request_id_var.set(request_id)
        tenant_token = tenant_slug_var.set(slug)

        async def send_with_id(message: Message) -> None:
            if message["type"] == "http.response.start":
                headers = list(message.get("headers", []))
                headers.append((REQUEST_ID_HEADER.lower().encode("latin-1"), request_id.encode("latin-1")))
                message["headers"] = headers
            await send(message)

        try:
            await self.app(scope, receive, send_with_id)
        finally:
            request_id_var.reset(request_token)
            tenant_slug_var.reset(tenant_token)


class RequestContextFilter:
    """
    Logging filter that copies request_id and tenant onto every record.

    Usage:
        handler = logging.StreamHandler()
        handler.addFilter(RequestContextFilter())
    """

    def filter(self, record) -> bool:
        record.request_id = request_id_var.get() or "-"
        record.tenant = tenant_slug_var.get() or "-"
        return True
