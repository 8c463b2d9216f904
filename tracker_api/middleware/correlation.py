"""Correlation IDs for request tracing.

Pure ASGI middleware: it wraps ``send`` instead of subclassing
BaseHTTPMiddleware, which misbehaves with asyncpg connections.
"""

import re
import time
import uuid

from starlette.types import ASGIApp, Message, Receive, Scope, Send

from tracker_api.logging_config import correlation_id_ctx, get_logger, user_id_ctx

logger = get_logger(__name__)

CORRELATION_ID_HEADER = "X-Correlation-ID"

# Incoming IDs are echoed into logs and headers, so keep them short and plain
_VALID_CORRELATION_ID = re.compile(r"^[A-Za-z0-9._-]{1,64}$")


def _incoming_correlation_id(scope: Scope) -> str | None:
    for name, value in scope.get("headers", []):
        if name == b"x-correlation-id":
            candidate = value.decode("latin-1").strip()
            if _VALID_CORRELATION_ID.match(candidate):
                return candidate
            return None
    return None


class CorrelationIdMiddleware:
    """Tag every HTTP request with a correlation ID.

    Reuses a well-formed ``X-Correlation-ID`` from the client or mints a
    UUID, exposes it to log records through a context variable and echoes
    it on the response.
    """

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        correlation_id = _incoming_correlation_id(scope) or str(uuid.uuid4())
        cid_token = correlation_id_ctx.set(correlation_id)
        uid_token = user_id_ctx.set(None)

        method = scope.get("method", "")
        path = scope.get("path", "")
        started = time.perf_counter()
        status_code: int | None = None

        async def send_wrapper(message: Message) -> None:
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message.get("status")
                headers = list(message.get("headers", []))
                headers.append(
                    (CORRELATION_ID_HEADER.lower().encode(), correlation_id.encode())
                )
                message = {**message, "headers": headers}
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
            logger.info(
                "Request completed",
                method=method,
                path=path,
                status_code=status_code,
                duration_ms=round((time.perf_counter() - started) * 1000, 2),
            )
        except Exception:
            logger.exception(
                "Request failed",
                method=method,
                path=path,
                duration_ms=round((time.perf_counter() - started) * 1000, 2),
            )
            raise
        finally:
            user_id_ctx.reset(uid_token)
            correlation_id_ctx.reset(cid_token)
