"""
Global middleware.
"""

from __future__ import annotations

import logging
import time
from typing import Callable, Dict, Iterable, List, Set

from fastapi import FastAPI, Request, status
from starlette.middleware.base import BaseHTTPMiddleware

from api.errors import error_response
from config.settings import Settings

logger = logging.getLogger(__name__)


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    Per-client-IP sliding window limiter for paths under ``path_prefix``.

    Forwarding headers are only honoured when the direct peer is listed in
    ``trusted_proxies``; otherwise the socket address is the key.
    """

    def __init__(
        self,
        app,
        max_requests: int = 100,
        window_seconds: int = 900,
        path_prefix: str = "/api",
        trusted_proxies: Iterable[str] = (),
        clock: Callable[[], float] = time.monotonic,
    ):
        super().__init__(app)
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.path_prefix = path_prefix
        self.trusted_proxies: Set[str] = set(trusted_proxies)
        self._clock = clock
        self._last_sweep = clock()
        self.requests: Dict[str, List[float]] = {}  # IP -> timestamps

    async def dispatch(self, request: Request, call_next):
        if not request.url.path.startswith(self.path_prefix):
            return await call_next(request)

        client_ip = self._get_client_ip(request)
        now = self._clock()
        self._sweep(now)

        recent = [t for t in self.requests.get(client_ip, ()) if now - t < self.window_seconds]

        if len(recent) >= self.max_requests:
            self.requests[client_ip] = recent
            logger.warning(
                "Rate limit exceeded for %s (%d requests in %ds)",
                client_ip, len(recent), self.window_seconds,
            )
            response = error_response(
                status.HTTP_429_TOO_MANY_REQUESTS,
                "Too many requests from this IP, please try again later.",
                "rate_limited",
            )
            response.headers["Retry-After"] = str(
                max(1, int(self.window_seconds - (now - recent[0])))
            )
            self._set_headers(response, 0)
            return response

        recent.append(now)
        self.requests[client_ip] = recent
        response = await call_next(request)
        self._set_headers(response, max(0, self.max_requests - len(recent)))
        return response

    def _sweep(self, now: float) -> None:
        """Drop buckets with no timestamp left in the window, at most once per window."""
        if now - self._last_sweep < self.window_seconds:
            return
        self._last_sweep = now
        stale = [
            ip for ip, stamps in self.requests.items()
            if not stamps or now - stamps[-1] >= self.window_seconds
        ]
        for ip in stale:
            del self.requests[ip]

    def _set_headers(self, response, remaining: int) -> None:
        response.headers["X-RateLimit-Limit"] = str(self.max_requests)
        response.headers["X-RateLimit-Remaining"] = str(remaining)
        response.headers["X-RateLimit-Window"] = str(self.window_seconds)

    def _get_client_ip(self, request: Request) -> str:
        peer = request.client.host if request.client else "unknown"
        if peer not in self.trusted_proxies:
            return peer
        forwarded_for = request.headers.get("X-Forwarded-For")
        if forwarded_for:
            return forwarded_for.split(",")[0].strip()
        real_ip = request.headers.get("X-Real-IP")
        if real_ip:
            return real_ip.strip()
        return peer


def register_middleware(app: FastAPI, settings: Settings) -> None:
    """Attach app-level middleware."""

    app.add_middleware(
        RateLimitMiddleware,
        max_requests=settings.rate_limit_max_requests,
        window_seconds=settings.rate_limit_window_seconds,
        path_prefix=settings.rate_limit_path_prefix,
        trusted_proxies=settings.rate_limit_trusted_proxies,
    )

    @app.middleware("http")
    async def request_timer(request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        elapsed = time.perf_counter() - start
        response.headers["X-Process-Time"] = f"{elapsed:.4f}"
        logger.debug("%s %s — %.3fs", request.method, request.url.path, elapsed)
        return response
