"""Round-robin API key pool with a cooldown for keys that hit rate limits."""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable

logger = logging.getLogger(__name__)

KEY_COOLDOWN_S = 60.0


@dataclass(frozen=True)
class KeySlot:
    index: int
    key: str
    total: int

    @property
    def label(self) -> str:
        return f"{self.index + 1}/{self.total}"


class KeyPool:
    """Hands out keys in rotation, skipping keys that recently failed.

    A failed key is parked for ``cooldown`` seconds. When every key is parked
    the cursor still advances and the next key is returned, so callers always
    get something to try.
    """

    def __init__(
        self,
        keys: list[str],
        cooldown: float = KEY_COOLDOWN_S,
        clock: Callable[[], float] = time.monotonic,
        name: str = "gemini",
    ) -> None:
        self._keys = [k for k in keys if k]
        self.cooldown = cooldown
        self.name = name
        self._clock = clock
        self._cursor = 0
        self._failed_at: dict[int, float] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._keys)

    def _expire(self, now: float) -> None:
        expired = [i for i, ts in self._failed_at.items() if now - ts > self.cooldown]
        for idx in expired:
            del self._failed_at[idx]

    def acquire(self) -> KeySlot | None:
        if not self._keys:
            return None
        with self._lock:
            self._expire(self._clock())
            total = len(self._keys)
            for offset in range(total):
                idx = (self._cursor + offset) % total
                if idx not in self._failed_at:
                    self._cursor = idx
                    return KeySlot(idx, self._keys[idx], total)

            self._cursor = (self._cursor + 1) % total
            logger.warning("All %d %s keys in cooldown, reusing key %d", total, self.name, self._cursor + 1)
            return KeySlot(self._cursor, self._keys[self._cursor], total)

    def mark_failed(self, index: int) -> None:
        with self._lock:
            self._failed_at[index] = self._clock()
        logger.warning(
            "%s key %d/%d parked for %.0fs",
            self.name, index + 1, len(self._keys), self.cooldown,
        )

    @property
    def available(self) -> int:
        with self._lock:
            self._expire(self._clock())
            return len(self._keys) - len(self._failed_at)

    def status(self) -> str:
        return f"{self.available}/{len(self._keys)} available"
