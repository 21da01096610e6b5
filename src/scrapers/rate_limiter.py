"""
Request pacing shared by the listing sources and the WhatsApp client.

Enforces a minimum spacing between requests and a ceiling on requests in
any rolling 60-second window. Hitting the ceiling sleeps until the oldest
request leaves the window. State is per instance and process-local.
"""

import threading
import time
from collections import deque
from typing import Callable, Deque, Dict

from src.shared.logging.log_setup import get_logger

logger = get_logger(__name__)

WINDOW_SECONDS = 60.0


class RequestThrottle:
    """Minimum-interval plus rolling-window request limiter."""
    
    def __init__(
        self,
        min_interval: float = 1.5,
        max_per_minute: int = 30,
        name: str = "default",
        sleep: Callable[[float], None] = time.sleep,
        monotonic: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize the throttle.
        
        Args:
            min_interval: Minimum seconds between two requests
            max_per_minute: Requests allowed in any rolling minute
            name: Label used in log events
            sleep: Sleep function, injectable for tests
            monotonic: Clock function, injectable for tests
        """
        self.min_interval = min_interval
        self.max_per_minute = max_per_minute
        self.name = name
        self._sleep = sleep
        self._monotonic = monotonic
        self._lock = threading.Lock()
        self._recent: Deque[float] = deque()
        self._last_request = None
        self.total_requests = 0
        self.cooldowns = 0
    
    def _evict_expired(self, now: float) -> None:
        while self._recent and now - self._recent[0] >= WINDOW_SECONDS:
            self._recent.popleft()
    
    def wait(self) -> float:
        """
        Block until the next request may be sent, then record it.
        
        Returns:
            Seconds spent waiting
        """
        with self._lock:
            waited = 0.0
            now = self._monotonic()
            self._evict_expired(now)
            
            if len(self._recent) >= self.max_per_minute:
                cooldown = WINDOW_SECONDS - (now - self._recent[0])
                if cooldown > 0:
                    self.cooldowns += 1
                    logger.warning(
                        "rate_limit_cooldown",
                        throttle=self.name,
                        seconds=round(cooldown, 2),
                        window_requests=len(self._recent),
                    )
                    self._sleep(cooldown)
                    waited += cooldown
                now = self._monotonic()
                self._evict_expired(now)
            
            if self._last_request is not None:
                gap = self.min_interval - (now - self._last_request)
                if gap > 0:
                    self._sleep(gap)
                    waited += gap
                    now = self._monotonic()
            
            self._recent.append(now)
            self._last_request = now
            self.total_requests += 1
            return waited
    
    def stats(self) -> Dict[str, float]:
        """Current throttle counters."""
        with self._lock:
            self._evict_expired(self._monotonic())
            return {
                "total_requests": self.total_requests,
                "window_requests": len(self._recent),
                "max_per_minute": self.max_per_minute,
                "cooldowns": self.cooldowns,
            }
