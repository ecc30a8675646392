from fastapi import Request, status
from fastapi.responses import JSONResponse
import time
import redis
import structlog

logger = structlog.get_logger()

# Paths that are never rate limited
EXEMPT_PATHS = {"/health"}


class RedisTokenBucket:
    """Redis-backed rate limiter with an in-memory token bucket fallback"""

    def __init__(self, rate: int, period: int, redis_url: str | None = None):
        """
        Args:
            rate: Number of requests allowed
            period: Time period in seconds
            redis_url: Redis to share limits across workers; memory is used when unset
        """
        self.rate = rate
        self.period = period
        self.buckets = {}
        self.use_redis = False
        self.redis_client = None

        if redis_url:
            try:
                self.redis_client = redis.from_url(redis_url, decode_responses=False)
                self.redis_client.ping()
                self.use_redis = True
                logger.info("rate_limiter_using_redis")
            except redis.RedisError as e:
                logger.warning("rate_limiter_redis_failed_using_memory", error=str(e))
                self.redis_client = None

    def is_allowed(self, key: str) -> bool:
        """
        Check if request is allowed for given key

        Args:
            key: Identifier (e.g., IP address)

        Returns:
            True if allowed, False if rate limit exceeded
        """
        if self.use_redis:
            return self._is_allowed_redis(key)
        else:
            return self._is_allowed_memory(key)

    def _is_allowed_redis(self, key: str) -> bool:
        """Redis-based rate limiting using sliding window"""
        redis_key = f"rate_limit:{key}"
        now = time.time()
        window_start = now - self.period

        pipe = self.redis_client.pipeline()

        # Remove old entries outside the window
        pipe.zremrangebyscore(redis_key, 0, window_start)

        # Count requests in current window
        pipe.zcard(redis_key)

        # Add current request
        pipe.zadd(redis_key, {str(now): now})

        # Set expiry
        pipe.expire(redis_key, self.period)

        results = pipe.execute()

        # results[1] is the count before adding current request
        request_count = results[1]

        return request_count < self.rate

    def _is_allowed_memory(self, key: str) -> bool:
        """Fallback: in-memory token bucket"""
        if key not in self.buckets:
            self.buckets[key] = {
                "tokens": self.rate,
                "last_update": time.time()
            }

        bucket = self.buckets[key]
        now = time.time()

        # Refill tokens based on time passed
        time_passed = now - bucket["last_update"]
        bucket["last_update"] = now
        refill_amount = (time_passed / self.period) * self.rate
        bucket["tokens"] = min(self.rate, bucket["tokens"] + refill_amount)

        if bucket["tokens"] >= 1:
            bucket["tokens"] -= 1
            return True

        return False

    def get_remaining(self, key: str) -> int:
        """Get remaining requests for a key"""
        if self.use_redis:
            redis_key = f"rate_limit:{key}"
            now = time.time()
            window_start = now - self.period

            count = self.redis_client.zcount(redis_key, window_start, now)
            return max(0, self.rate - count)
        else:
            bucket = self.buckets.get(key)
            if not bucket:
                return self.rate
            return int(bucket["tokens"])

    def reset(self):
        """Forget all in-memory buckets"""
        self.buckets.clear()


def _limit_headers(limiter: RedisTokenBucket, remaining: int) -> dict[str, str]:
    return {
        "X-RateLimit-Limit": str(limiter.rate),
        "X-RateLimit-Remaining": str(max(0, remaining)),
        "X-RateLimit-Reset": str(limiter.period)
    }


async def rate_limit_middleware(request: Request, call_next):
    """
    Rate limiting middleware

    Limits requests per client IP address using the limiter on app.state
    """
    limiter: RedisTokenBucket | None = getattr(request.app.state, "rate_limiter", None)

    if limiter is None or request.url.path in EXEMPT_PATHS:
        return await call_next(request)

    client_ip = request.client.host if request.client else "unknown"
    rate_limit_key = f"ip:{client_ip}"

    if not limiter.is_allowed(rate_limit_key):
        remaining = limiter.get_remaining(rate_limit_key)

        logger.warning(
            "rate_limit_exceeded",
            key=rate_limit_key,
            path=request.url.path,
            remaining=remaining
        )

        return JSONResponse(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            content={
                "detail": "Too many requests, please try again later.",
                "retry_after": limiter.period
            },
            headers={
                **_limit_headers(limiter, remaining),
                "Retry-After": str(limiter.period)
            }
        )

    response = await call_next(request)

    response.headers.update(_limit_headers(limiter, limiter.get_remaining(rate_limit_key)))

    return response
