"""Rate-limit gate shared by the AI endpoints."""

import logging

from fastapi import Request
from fastapi.responses import JSONResponse

from backend.rate_limit import RateLimiter, client_identity

logger = logging.getLogger(__name__)


def caller(request: Request) -> str:
    return client_identity(request.headers.get("x-forwarded-for"))


def rate_limited(retry_after: int) -> JSONResponse:
    return JSONResponse(
        status_code=429,
        content={"error": "Rate limit exceeded", "retryAfter": retry_after},
        headers={"Retry-After": str(retry_after)},
    )


def check_rate_limit(request: Request, name: str) -> JSONResponse | None:
    """Charge one request against `name`'s budget; a 429 response if denied."""
    limiter: RateLimiter = request.app.state.limiter
    identifier = f"{name}:{caller(request)}"
    result = limiter.check(identifier, request.app.state.settings["rate_limits"][name])
    if result.allowed:
        return None
    retry_after = result.retry_after(limiter.now())
    logger.warning("rate limit hit for %s, retry after %ss", identifier, retry_after)
    return rate_limited(retry_after)
