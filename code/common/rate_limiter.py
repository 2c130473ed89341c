import asyncio, time
from enum import Enum
from typing import Tuple, Dict, Optional

class ActionType(Enum):
    FETCH_MESSAGES = "fetch_messages"
    BULK_DELETE = "bulk_delete"
    DELETE_MESSAGE = "delete_message"
    CREATE_MESSAGE = "create_message"

class RateLimiter:
    def __init__(self, max_rate: int, time_window: float):
        self._max_rate = max_rate
        self._time_window = time_window
        self._allowance = max_rate
        self._last_check = time.monotonic()
        self._lock = asyncio.Lock()
        self._cooldown_until = 0.0

    async def acquire(self):
        async with self._lock:
            now = time.monotonic()

            # Respect cooldowns set from 429 responses
            if now < self._cooldown_until:
                await asyncio.sleep(self._cooldown_until - now)
                now = time.monotonic()

            elapsed = now - self._last_check
            self._last_check = now

            # Refill tokens
            self._allowance = min(
                self._max_rate,
                self._allowance + elapsed * (self._max_rate / self._time_window),
            )

            if self._allowance < 1.0:
                # Sleep until we have 1 token
                wait = (1.0 - self._allowance) * (self._time_window / self._max_rate)
                if wait > 0:
                    await asyncio.sleep(wait)
                self._last_check = time.monotonic()
                self._allowance = 0.0
            else:
                self._allowance -= 1.0

    def backoff(self, seconds: float):
        now = time.monotonic()
        candidate_end = now + max(0.0, seconds)
        if candidate_end > self._cooldown_until:
            self._cooldown_until = candidate_end

    def remaining_cooldown(self) -> float:
        return max(0.0, self._cooldown_until - time.monotonic())


class RateLimitManager:
    """Per-action limiters, keyed by channel since Discord buckets message routes per channel."""

    def __init__(self, config: Dict[ActionType, Tuple[int, float]] = None):
        self._config = config or {
            ActionType.FETCH_MESSAGES: (5, 5.0),
            ActionType.BULK_DELETE: (1, 1.0),
            ActionType.DELETE_MESSAGE: (5, 5.0),
            ActionType.CREATE_MESSAGE: (5, 5.0),
        }
        self._limiters: Dict[Tuple[ActionType, Optional[str]], RateLimiter] = {}

    def _get(self, action: ActionType, key: str | None = None) -> Optional[RateLimiter]:
        cfg = self._config.get(action)
        if cfg is None:
            return None
        lim = self._limiters.get((action, key))
        if not lim:
            rate, window = cfg
            lim = RateLimiter(rate, window)
            self._limiters[(action, key)] = lim
        return lim

    async def acquire(self, action: ActionType, key: str = None):
        lim = self._get(action, key)
        if lim:
            await lim.acquire()

    def penalize(self, action: ActionType, seconds: float, key: str | None = None):
        lim = self._get(action, key)
        if lim:
            lim.backoff(seconds)

    def remaining(self, action: ActionType, key: str | None = None) -> float:
        lim = self._get(action, key)
        return lim.remaining_cooldown() if lim else 0.0
