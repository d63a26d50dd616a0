from __future__ import annotations

import logging
import time
from typing import Sequence

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from inventory_api.core.errors import RateLimitExceeded
from inventory_api.core.rate_limit import RateLimiter

logger = logging.getLogger("inventory_api.requests")

_SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "no-referrer",
    "Cross-Origin-Resource-Policy": "cross-origin",
    "Content-Security-Policy": (
        "default-src 'self'; style-src 'self' 'unsafe-inline'; script-src 'self'; "
        "img-src 'self' data: https:; connect-src 'self'; font-src 'self' https: data:; "
        "object-src 'none'; media-src 'self'; frame-src 'none'"
    ),
}


def client_key(request: Request) -> str:
    if request.client and request.client.host:
        return request.client.host
    return "unknown"


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, *, hsts: bool = False):
        super().__init__(app)
        self.headers = dict(_SECURITY_HEADERS)
        if hsts:
            self.headers["Strict-Transport-Security"] = "max-age=15552000; includeSubDomains"

    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        for name, value in self.headers.items():
            response.headers.setdefault(name, value)
        return response


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        duration_ms = round((time.perf_counter() - started) * 1000, 1)
        if response.status_code >= 500:
            level = logging.ERROR
        elif response.status_code >= 400:
            level = logging.WARNING
        else:
            level = logging.INFO
        client = client_key(request)
        logger.log(
            level,
            "%s %s -> %s (%.1fms) client=%s",
            request.method,
            request.url.path,
            response.status_code,
            duration_ms,
            client,
            extra={
                "method": request.method,
                "path": request.url.path,
                "status_code": response.status_code,
                "duration_ms": duration_ms,
                "client": client,
            },
        )
        return response


class RateLimitMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, *, rules: Sequence[tuple[str, RateLimiter]]):
        super().__init__(app)
        self.rules = list(rules)

    async def dispatch(self, request: Request, call_next):
        key = client_key(request)
        path = request.url.path
        headers = {}
        for prefix, limiter in self.rules:
            if not path.startswith(prefix):
                continue
            try:
                remaining = limiter.hit(key)
            except RateLimitExceeded as exc:
                logger.warning("Rate limit '%s' exceeded by %s on %s", limiter.scope, key, path)
                return JSONResponse(
                    status_code=exc.status_code,
                    content=exc.to_body(),
                    headers={"Retry-After": str(exc.retry_after)},
                )
            headers["X-RateLimit-Limit"] = str(limiter.max_requests)
            headers["X-RateLimit-Remaining"] = str(remaining)

        response = await call_next(request)
        response.headers.update(headers)
        return response


__all__ = [
    "RateLimitMiddleware",
    "RequestLoggingMiddleware",
    "SecurityHeadersMiddleware",
    "client_key",
]
