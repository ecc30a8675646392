from app.middleware.rate_limit import RedisTokenBucket


def test_memory_bucket_allows_up_to_rate():
    limiter = RedisTokenBucket(rate=2, period=60)

    assert limiter.use_redis is False
    assert limiter.get_remaining("ip:1") == 2
    assert limiter.is_allowed("ip:1")
    assert limiter.is_allowed("ip:1")
    assert not limiter.is_allowed("ip:1")
    assert limiter.get_remaining("ip:1") == 0


def test_keys_are_limited_independently():
    limiter = RedisTokenBucket(rate=1, period=60)

    assert limiter.is_allowed("ip:1")
    assert not limiter.is_allowed("ip:1")
    assert limiter.is_allowed("ip:2")


def test_tokens_refill_over_time(monkeypatch):
    clock = [1000.0]
    monkeypatch.setattr("app.middleware.rate_limit.time.time", lambda: clock[0])
    limiter = RedisTokenBucket(rate=2, period=60)

    assert limiter.is_allowed("ip:1")
    assert limiter.is_allowed("ip:1")
    assert not limiter.is_allowed("ip:1")

    # Half the period restores half the tokens
    clock[0] += 30
    assert limiter.is_allowed("ip:1")
    assert not limiter.is_allowed("ip:1")


def test_reset_forgets_buckets():
    limiter = RedisTokenBucket(rate=1, period=60)
    limiter.is_allowed("ip:1")

    limiter.reset()

    assert limiter.is_allowed("ip:1")


def test_unreachable_redis_falls_back_to_memory():
    limiter = RedisTokenBucket(rate=1, period=60, redis_url="redis://127.0.0.1:1/0")

    assert limiter.use_redis is False
    assert limiter.is_allowed("ip:1")
