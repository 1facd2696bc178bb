"""
CaseDesk Legal - Rate Limiting

In-memory sliding window limiter for the credential endpoints, keyed by
client IP and path. State is per process.
"""

import logging
import time
from collections import defaultdict
from starlette.types import ASGIApp, Receive, Scope, Send
from starlette.requests import Request
from starlette.responses import JSONResponse

logger = logging.getLogger(__name__)


class RateLimitStore:
    """In-memory sliding window rate limit store."""

    def __init__(self):
        # {key: [timestamp, ...]}
        self._requests: dict[str, list[float]] = defaultdict(list)

    def is_rate_limited(self, key: str, max_requests: int, window_seconds: int) -> bool:
        """Record a hit for key unless it is already over the limit."""
        now = time.monotonic()
        cutoff = now - window_seconds

        hits = [t for t in self._requests[key] if t > cutoff]
        if len(hits) >= max_requests:
            self._requests[key] = hits
            return True

        hits.append(now)
        self._requests[key] = hits
        return False

    def reset(self):
        """Forget all recorded hits."""
        self._requests.clear()


# Global rate limit store
rate_limit_store = RateLimitStore()

# {path prefix: (max_requests, window_seconds)}
RATE_LIMIT_RULES: dict[str, tuple[int, int]] = {
    "/api/auth/login": (10, 60),
    "/api/auth/register": (10, 60),
    "/api/auth/reset-password": (5, 60),
}


def match_rule(path: str):
    """The (max_requests, window_seconds) rule covering path, or None."""
    for rule_path, limits in RATE_LIMIT_RULES.items():
        if path == rule_path or path.startswith(rule_path + "/"):
            return limits
    return None


class RateLimitMiddleware:
    """Answers 429 with Retry-After once a client exceeds a POST rule."""

    def __init__(self, app: ASGIApp):
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request = Request(scope)
        rule = match_rule(request.url.path) if request.method == "POST" else None
        if rule is None:
            await self.app(scope, receive, send)
            return

        max_requests, window_seconds = rule
        client_ip = request.client.host if request.client else "unknown"
        key = f"{client_ip}:{request.url.path}"

        if rate_limit_store.is_rate_limited(key, max_requests, window_seconds):
            logger.warning("Rate limit exceeded for %s on %s", client_ip, request.url.path)
            response = JSONResponse(
                status_code=429,
                content={
                    "message": "Too many requests. Please try again later.",
                    "error": "RATE_LIMITED",
                },
                headers={"Retry-After": str(window_seconds)},
            )
            await response(scope, receive, send)
            return

        await self.app(scope, receive, send)
