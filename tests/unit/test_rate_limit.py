"""Unit tests for the fixed-window rate limiter."""

from revops_maturity.api.rate_limit import FixedWindowRateLimiter


class _Clock:
    """Manually advanced monotonic clock."""

    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


class TestFixedWindowRateLimiter:
    """Counting, headers and window resets."""

    def test_allows_up_to_limit(self) -> None:
        limiter = FixedWindowRateLimiter(max_requests=3, window_seconds=60, clock=_Clock())
        decisions = [limiter.hit("10.0.0.1") for _ in range(4)]
        assert [d.allowed for d in decisions] == [True, True, True, False]
        assert [d.remaining for d in decisions] == [2, 1, 0, 0]

    def test_keys_are_independent(self) -> None:
        limiter = FixedWindowRateLimiter(max_requests=1, window_seconds=60, clock=_Clock())
        assert limiter.hit("a").allowed is True
        assert limiter.hit("b").allowed is True
        assert limiter.hit("a").allowed is False

    def test_window_resets(self) -> None:
        clock = _Clock()
        limiter = FixedWindowRateLimiter(max_requests=1, window_seconds=60, clock=clock)
        limiter.hit("a")
        assert limiter.hit("a").allowed is False
        clock.now += 60
        assert limiter.hit("a").allowed is True

    def test_headers(self) -> None:
        clock = _Clock()
        limiter = FixedWindowRateLimiter(max_requests=100, window_seconds=900, clock=clock)
        limiter.hit("a")
        clock.now += 100
        headers = limiter.hit("a").headers()
        assert headers == {
            "RateLimit-Limit": "100",
            "RateLimit-Remaining": "98",
            "RateLimit-Reset": "800",
        }
