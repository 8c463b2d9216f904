"""Per-IP request throttling with slowapi.

Sits in front of the per-user failed-attempt limiter on the redeem
endpoint so a single address cannot spread guesses across many accounts.
"""

import ipaddress

from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from starlette.requests import Request
from starlette.responses import JSONResponse

from tracker_api.config import settings

# Memory storage in tests, Redis otherwise
_storage_uri = (
    "memory://"
    if settings.testing
    else (settings.redis_url if settings.redis_url else "memory://")
)


def _parse_ip(value: str | None) -> str | None:
    """Canonical form of an IP literal, or None if ``value`` is not one."""
    if not value:
        return None
    # Zone index ("fe80::1%eth0") is dropped
    candidate = value.strip().split("%", 1)[0]
    try:
        return str(ipaddress.ip_address(candidate))
    except ValueError:
        return None


def get_client_ip(request: Request) -> str:
    """Client address, honouring X-Forwarded-For and X-Real-IP from the proxy.

    Header values that do not parse as an IP address are ignored, so the
    result always fits the ``code_attempts.ip_address`` column.
    """
    if settings.trust_proxy_headers:
        forwarded_for = request.headers.get("x-forwarded-for")
        if forwarded_for:
            # Leftmost entry is the original client
            parsed = _parse_ip(forwarded_for.split(",")[0])
            if parsed:
                return parsed
        parsed = _parse_ip(request.headers.get("x-real-ip"))
        if parsed:
            return parsed
    return request.client.host if request.client else "unknown"


limiter = Limiter(
    key_func=get_client_ip,
    storage_uri=_storage_uri,
    enabled=not settings.testing,
)


async def rate_limit_exceeded_handler(
    request: Request, exc: RateLimitExceeded
) -> JSONResponse:
    return JSONResponse(
        status_code=429,
        content={
            "detail": f"Rate limit exceeded: {exc.detail}",
            "code": "RATE_LIMITED",
        },
    )
