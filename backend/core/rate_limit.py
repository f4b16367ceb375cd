"""
Rate Limiting Module
Fixed-window rate limiting for the intake endpoint over a pluggable store.

The in-memory store bounds a single process and resets on restart. Deploy
the Redis store when several instances serve the endpoint.
"""

import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Optional

import redis.asyncio as aioredis
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from backend.core.config import settings
from backend.core.exceptions import RateLimitError

logger = logging.getLogger(__name__)

Clock = Callable[[], float]


# =============================================================================
# Records and Stores
# =============================================================================


@dataclass
class RateLimitRecord:
    """Request count for one identifier within the current window."""

    count: int
    window_start: float


@dataclass(frozen=True)
class RateLimitDecision:
    """Result of checking one request."""

    allowed: bool
    limit: int
    remaining: int
    retry_after: int
    reset_at: float


class RateLimitStore(ABC):
    """Key-value store holding rate limit records."""

    @abstractmethod
    async def get(self, key: str) -> Optional[RateLimitRecord]:
        """Return the record for ``key`` or None if absent or expired."""

    @abstractmethod
    async def set(self, key: str, record: RateLimitRecord) -> None:
        """Store ``record`` under ``key``."""

    @abstractmethod
    async def expire(self, key: str, seconds: int) -> None:
        """Evict ``key`` once ``seconds`` have elapsed."""

    async def close(self) -> None:
        """Release any connections held by the store."""


class InMemoryRateLimitStore(RateLimitStore):
    """
    Dict-backed store for single-instance deployments.

    Expired keys are dropped on read and by a periodic sweep, so identifiers
    that never return do not accumulate.
    """

    def __init__(self, clock: Clock = time.time, cleanup_interval: float = 60.0):
        self._clock = clock
        self._records: dict[str, RateLimitRecord] = {}
        self._expires_at: dict[str, float] = {}
        self._cleanup_interval = cleanup_interval
        self._last_cleanup = clock()

    def __len__(self) -> int:
        return len(self._records)

    def _is_expired(self, key: str, now: float) -> bool:
        expires_at = self._expires_at.get(key)
        return expires_at is not None and now >= expires_at

    def _evict(self, key: str) -> None:
        self._records.pop(key, None)
        self._expires_at.pop(key, None)

    def _cleanup_if_needed(self) -> None:
        """Periodically clean up expired entries to prevent memory leaks."""
        now = self._clock()
        if now - self._last_cleanup < self._cleanup_interval:
            return

        self._last_cleanup = now
        for key in [k for k in self._records if self._is_expired(k, now)]:
            self._evict(key)

    async def get(self, key: str) -> Optional[RateLimitRecord]:
        self._cleanup_if_needed()
        if self._is_expired(key, self._clock()):
            self._evict(key)
            return None
        record = self._records.get(key)
        if record is None:
            return None
        return RateLimitRecord(count=record.count, window_start=record.window_start)

    async def set(self, key: str, record: RateLimitRecord) -> None:
        self._records[key] = RateLimitRecord(count=record.count, window_start=record.window_start)

    async def expire(self, key: str, seconds: int) -> None:
        if key in self._records:
            self._expires_at[key] = self._clock() + seconds


class RedisRateLimitStore(RateLimitStore):
    """
    Redis-backed store shared by every instance.

    Each record is a hash with ``count`` and ``window_start`` fields.
    """

    def __init__(self, redis_url: str):
        self.redis_url = redis_url
        self._redis: Optional[aioredis.Redis] = None

    async def get_redis(self) -> aioredis.Redis:
        """Get or create Redis connection."""
        if self._redis is None:
            self._redis = aioredis.from_url(
                self.redis_url,
                encoding="utf-8",
                decode_responses=True,
            )
        return self._redis

    async def get(self, key: str) -> Optional[RateLimitRecord]:
        redis = await self.get_redis()
        data = await redis.hgetall(key)
        if not data:
            return None
        return RateLimitRecord(count=int(data["count"]), window_start=float(data["window_start"]))

    async def set(self, key: str, record: RateLimitRecord) -> None:
        redis = await self.get_redis()
        await redis.hset(key, mapping={"count": record.count, "window_start": record.window_start})

    async def expire(self, key: str, seconds: int) -> None:
        redis = await self.get_redis()
        await redis.expire(key, seconds)

    async def close(self) -> None:
        """Close Redis connection."""
        if self._redis:
            await self._redis.aclose()
            self._redis = None


# =============================================================================
# Rate Limiter
# =============================================================================


class FixedWindowRateLimiter:
    """
    Counts requests per identifier in windows that start at the first request.

    A window lasts ``window_seconds``; the first request after it ends opens a
    new one. Rejected requests are not counted.
    """

    def __init__(
        self,
        store: RateLimitStore,
        max_requests: int = 3,
        window_seconds: int = 60,
        clock: Clock = time.time,
        key_prefix: str = "rate_limit:intake",
    ):
        self.store = store
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.clock = clock
        self.key_prefix = key_prefix

    def build_key(self, identifier: str) -> str:
        return f"{self.key_prefix}:{identifier}"

    async def check(self, identifier: str) -> RateLimitDecision:
        """
        Count a request from ``identifier`` and decide whether to allow it.

        Returns:
            RateLimitDecision with remaining quota and retry-after seconds
        """
        key = self.build_key(identifier)
        now = self.clock()
        record = await self.store.get(key)

        if record is None or now > record.window_start + self.window_seconds:
            record = RateLimitRecord(count=1, window_start=now)
            await self.store.set(key, record)
            # Keep the record one second past its window before eviction
            await self.store.expire(key, self.window_seconds + 1)
            return self._decision(True, record, now)

        if record.count >= self.max_requests:
            return self._decision(False, record, now)

        record.count += 1
        await self.store.set(key, record)
        return self._decision(True, record, now)

    def _decision(self, allowed: bool, record: RateLimitRecord, now: float) -> RateLimitDecision:
        reset_at = record.window_start + self.window_seconds
        retry_after = 0 if allowed else max(1, int(reset_at - now) + 1)
        return RateLimitDecision(
            allowed=allowed,
            limit=self.max_requests,
            remaining=max(0, self.max_requests - record.count),
            retry_after=retry_after,
            reset_at=reset_at,
        )

    async def close(self) -> None:
        await self.store.close()


def create_store(backend: str) -> RateLimitStore:
    """Build the configured store ("memory" or "redis")."""
    if backend == "redis":
        return RedisRateLimitStore(settings.redis_url)
    if backend == "memory":
        return InMemoryRateLimitStore()
    raise ValueError(f"Unknown rate limit backend: {backend}")


# Global rate limiter instances
_rate_limiter: Optional[FixedWindowRateLimiter] = None
_fallback_limiter: Optional[FixedWindowRateLimiter] = None
_store_available: bool = True  # Track primary store availability


def get_rate_limiter() -> FixedWindowRateLimiter:
    """Get the global intake rate limiter."""
    global _rate_limiter
    if _rate_limiter is None:
        _rate_limiter = FixedWindowRateLimiter(
            store=create_store(settings.rate_limit_backend),
            max_requests=settings.rate_limit_intake_requests,
            window_seconds=settings.rate_limit_intake_window,
        )
    return _rate_limiter


def get_fallback_limiter() -> FixedWindowRateLimiter:
    """Get the process-local limiter used while the primary store is down."""
    global _fallback_limiter
    if _fallback_limiter is None:
        _fallback_limiter = FixedWindowRateLimiter(
            store=InMemoryRateLimitStore(),
            max_requests=settings.rate_limit_intake_requests,
            window_seconds=settings.rate_limit_intake_window,
        )
    return _fallback_limiter


async def close_rate_limiter() -> None:
    """Close the global rate limiter."""
    global _rate_limiter, _fallback_limiter
    if _rate_limiter:
        await _rate_limiter.close()
        _rate_limiter = None
    _fallback_limiter = None


# =============================================================================
# Helper Functions
# =============================================================================


def get_client_identifier(request: Request) -> str:
    """
    Extract the client address used as the rate limit identifier.

    Clients that cannot be identified share the "unknown" bucket.
    """
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        # Take the first IP in the chain (client IP)
        first = forwarded_for.split(",")[0].strip()
        if first:
            return first

    real_ip = request.headers.get("X-Real-IP")
    if real_ip and real_ip.strip():
        return real_ip.strip()

    if request.client and request.client.host:
        return request.client.host
    return "unknown"


# =============================================================================
# Rate Limit Dependency
# =============================================================================


class IntakeRateLimit:
    """
    FastAPI dependency gating intake submissions.

    Usage:
        @router.post("", dependencies=[Depends(IntakeRateLimit())])
        async def submit(...):
            ...
    """

    def __init__(self, limiter_factory: Callable[[], FixedWindowRateLimiter] = get_rate_limiter):
        self.limiter_factory = limiter_factory

    async def _check(self, identifier: str) -> RateLimitDecision:
        global _store_available

        try:
            decision = await self.limiter_factory().check(identifier)
            _store_available = True
            return decision
        except Exception as e:
            # Primary store unavailable - keep enforcing with the in-memory fallback
            if _store_available:
                logger.warning(f"Rate limit store unavailable, using in-memory fallback: {e}")
                _store_available = False
            return await get_fallback_limiter().check(identifier)

    async def __call__(self, request: Request) -> None:
        """Check rate limit for the request."""
        if settings.rate_limit_enabled is False:
            return

        identifier = get_client_identifier(request)
        decision = await self._check(identifier)

        # Store rate limit info in request state for response headers
        request.state.rate_limit_limit = decision.limit
        request.state.rate_limit_remaining = decision.remaining
        request.state.rate_limit_reset = int(decision.reset_at)

        if not decision.allowed:
            logger.info(f"Intake rate limit exceeded for {identifier}")
            raise RateLimitError(retry_after=decision.retry_after)


# =============================================================================
# Rate Limit Middleware
# =============================================================================


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    Middleware to add rate limit headers to responses.

    This middleware adds X-RateLimit-* headers to responses when
    rate limiting information is available in request.state.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        response = await call_next(request)

        if hasattr(request.state, "rate_limit_limit"):
            response.headers["X-RateLimit-Limit"] = str(request.state.rate_limit_limit)
            response.headers["X-RateLimit-Remaining"] = str(getattr(request.state, "rate_limit_remaining", 0))
            response.headers["X-RateLimit-Reset"] = str(getattr(request.state, "rate_limit_reset", 0))

        return response
