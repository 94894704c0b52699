"""고정 윈도우 Rate Limiter 테스트"""
import pytest

from tubescout.services.impl.rate_limiter import RateLimiter
from tests.conftest import FakeClock, HookedDict


class TestRateLimiter:
    """RateLimiter.check / cleanup"""

    def test_first_request_opens_window(self, clock: FakeClock):
        limiter = RateLimiter(clock=clock)

        result = limiter.check("ip:1.2.3.4", max_requests=10, window_seconds=60)

        assert result.allowed is True
        assert result.remaining == 9
        assert result.reset_at == clock.now + 60

    def test_eleventh_request_denied(self, clock: FakeClock):
        """10회 허용 후 11번째는 거부, reset_at은 첫 요청 기준"""
        limiter = RateLimiter(clock=clock)
        started = clock.now

        results = []
        for _ in range(11):
            results.append(limiter.check("ip:1.2.3.4", max_requests=10, window_seconds=60))
            clock.advance(1)

        assert all(r.allowed for r in results[:10])
        assert [r.remaining for r in results[:10]] == list(range(9, -1, -1))
        assert results[10].allowed is False
        assert results[10].remaining == 0
        assert results[10].reset_at == started + 60
        assert len({r.reset_at for r in results}) == 1

    def test_request_at_reset_time_starts_new_window(self, clock: FakeClock):
        limiter = RateLimiter(clock=clock)
        for _ in range(3):
            limiter.check("channel:UC1", max_requests=3, window_seconds=300)
        assert limiter.check("channel:UC1", 3, 300).allowed is False

        clock.advance(300)
        result = limiter.check("channel:UC1", 3, 300)

        assert result.allowed is True
        assert result.remaining == 2
        assert result.reset_at == clock.now + 300

    def test_denied_requests_do_not_extend_window(self, clock: FakeClock):
        limiter = RateLimiter(clock=clock)
        first = limiter.check("ip:a", max_requests=1, window_seconds=60)

        clock.advance(30)
        denied = limiter.check("ip:a", max_requests=1, window_seconds=60)

        assert denied.allowed is False
        assert denied.reset_at == first.reset_at

    def test_identities_are_independent(self, clock: FakeClock):
        limiter = RateLimiter(clock=clock)
        assert limiter.check("ip:a", 1, 60).allowed is True
        assert limiter.check("ip:a", 1, 60).allowed is False

        assert limiter.check("ip:b", 1, 60).allowed is True
        assert limiter.check("channel:a", 1, 60).allowed is True

    def test_cleanup_removes_leaked_windows(self, clock: FakeClock):
        """다시 조회되지 않는 윈도우도 cleanup으로 제거"""
        limiter = RateLimiter(clock=clock)
        for i in range(5):
            limiter.check(f"ip:10.0.0.{i}", max_requests=10, window_seconds=60)
        limiter.check("channel:long", max_requests=5, window_seconds=300)
        assert len(limiter) == 6

        clock.advance(61)
        removed = limiter.cleanup()

        assert removed == 5
        assert len(limiter) == 1

    def test_cleanup_on_empty_limiter(self, clock: FakeClock):
        assert RateLimiter(clock=clock).cleanup() == 0

    @pytest.mark.parametrize("max_requests", [1, 5, 10])
    def test_exactly_max_requests_allowed(self, clock: FakeClock, max_requests: int):
        limiter = RateLimiter(clock=clock)
        allowed = [limiter.check("ip:x", max_requests, 60).allowed for _ in range(max_requests + 2)]

        assert allowed.count(True) == max_requests

    def test_cleanup_keeps_window_renewed_after_snapshot(self, clock: FakeClock):
        """정리 목록 작성 후 새로 열린 윈도우는 지우지 않음"""
        limiter = RateLimiter(clock=clock)
        limiter.check("ip:a", max_requests=1, window_seconds=60)
        clock.advance(60)

        windows = HookedDict(limiter._windows)
        windows.after_items = lambda: limiter.check("ip:a", max_requests=1, window_seconds=60)
        limiter._windows = windows

        assert limiter.cleanup() == 0
        assert len(limiter) == 1
        assert limiter.check("ip:a", max_requests=1, window_seconds=60).allowed is False
