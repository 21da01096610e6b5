"""
Unit tests for RequestThrottle.
"""

import pytest

from src.scrapers.rate_limiter import RequestThrottle


class FakeClock:
    """Monotonic clock that only advances when slept on."""
    
    def __init__(self):
        self.now = 100.0
        self.sleeps = []
    
    def monotonic(self):
        return self.now
    
    def sleep(self, seconds):
        self.sleeps.append(seconds)
        self.now += seconds


class TestRequestThrottle:
    """Test interval spacing and the rolling window."""
    
    @pytest.fixture
    def clock(self):
        return FakeClock()
    
    def test_first_request_does_not_wait(self, clock):
        throttle = RequestThrottle(min_interval=1.5, sleep=clock.sleep, monotonic=clock.monotonic)
        assert throttle.wait() == 0.0
    
    def test_min_interval_between_requests(self, clock):
        throttle = RequestThrottle(min_interval=1.5, sleep=clock.sleep, monotonic=clock.monotonic)
        throttle.wait()
        clock.now += 0.5
        
        waited = throttle.wait()
        
        assert waited == pytest.approx(1.0)
        assert clock.sleeps == [pytest.approx(1.0)]
    
    def test_no_wait_after_interval_elapsed(self, clock):
        throttle = RequestThrottle(min_interval=1.5, sleep=clock.sleep, monotonic=clock.monotonic)
        throttle.wait()
        clock.now += 5
        assert throttle.wait() == 0.0
    
    def test_window_ceiling_cools_down(self, clock):
        """Test that the request over the ceiling waits for the window to roll."""
        throttle = RequestThrottle(min_interval=0, max_per_minute=3, sleep=clock.sleep, monotonic=clock.monotonic)
        for _ in range(3):
            throttle.wait()
        clock.now += 10
        
        waited = throttle.wait()
        
        assert waited == pytest.approx(50.0)
        stats = throttle.stats()
        assert stats["cooldowns"] == 1
        assert stats["total_requests"] == 4
    
    def test_window_entries_expire(self, clock):
        throttle = RequestThrottle(min_interval=0, max_per_minute=2, sleep=clock.sleep, monotonic=clock.monotonic)
        throttle.wait()
        throttle.wait()
        clock.now += 61
        
        assert throttle.wait() == 0.0
        assert throttle.stats()["window_requests"] == 1
