from datetime import datetime, timedelta

from services.rate_limiter import RateLimiter

START = datetime(2024, 5, 1, 18, 0, 0)


def test_requests_over_the_cap_are_refused():
    limiter = RateLimiter(max_requests=2, window_seconds=60)

    assert limiter.allow(START)
    assert limiter.allow(START + timedelta(seconds=1))
    assert not limiter.allow(START + timedelta(seconds=2))
    assert len(limiter.timestamps) == 2


def test_window_slides():
    limiter = RateLimiter(max_requests=1, window_seconds=60)

    assert limiter.allow(START)
    assert not limiter.allow(START + timedelta(seconds=59))
    assert limiter.allow(START + timedelta(seconds=61))
