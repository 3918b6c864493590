"""64-bit identifier generation for pages and history rows.

Layout (most significant bit first), the classic snowflake scheme:

    1 bit   unused (keeps ids positive in signed BIGINT columns)
    41 bits milliseconds since EPOCH_MS
    5 bits  datacenter id
    5 bits  worker id
    12 bits per-millisecond sequence

Ids are strictly increasing within one generator instance.
"""

import threading
import time
from typing import Callable, Optional, Protocol

# 2024-01-01T00:00:00Z
EPOCH_MS = 1704067200000

_WORKER_BITS = 5
_DATACENTER_BITS = 5
_SEQUENCE_BITS = 12

MAX_WORKER_ID = (1 << _WORKER_BITS) - 1
MAX_DATACENTER_ID = (1 << _DATACENTER_BITS) - 1
_SEQUENCE_MASK = (1 << _SEQUENCE_BITS) - 1

_WORKER_SHIFT = _SEQUENCE_BITS
_DATACENTER_SHIFT = _SEQUENCE_BITS + _WORKER_BITS
_TIMESTAMP_SHIFT = _SEQUENCE_BITS + _WORKER_BITS + _DATACENTER_BITS


class IdGenerator(Protocol):
    """Source of unique 64-bit identifiers."""

    def next_id(self) -> int:
        ...


class SnowflakeIdGenerator:
    """Thread-safe snowflake id generator."""

    def __init__(
        self,
        datacenter_id: int = 0,
        worker_id: int = 0,
        clock: Optional[Callable[[], int]] = None,
    ):
        if not 0 <= datacenter_id <= MAX_DATACENTER_ID:
            raise ValueError(f"datacenter_id must be in [0, {MAX_DATACENTER_ID}]")
        if not 0 <= worker_id <= MAX_WORKER_ID:
            raise ValueError(f"worker_id must be in [0, {MAX_WORKER_ID}]")

        self.datacenter_id = datacenter_id
        self.worker_id = worker_id
        self._clock = clock or (lambda: time.time_ns() // 1_000_000)
        self._lock = threading.Lock()
        self._last_ms = -1
        self._sequence = 0

    def next_id(self) -> int:
        with self._lock:
            now = self._clock()
            if now < self._last_ms:
                # Clock went backwards; keep issuing from the last seen millisecond.
                now = self._last_ms

            if now == self._last_ms:
                self._sequence = (self._sequence + 1) & _SEQUENCE_MASK
                if self._sequence == 0:
                    now = self._wait_next_ms(self._last_ms)
            else:
                self._sequence = 0

            self._last_ms = now
            return (
                ((now - EPOCH_MS) << _TIMESTAMP_SHIFT)
                | (self.datacenter_id << _DATACENTER_SHIFT)
                | (self.worker_id << _WORKER_SHIFT)
                | self._sequence
            )

    def _wait_next_ms(self, last_ms: int) -> int:
        now = self._clock()
        while now <= last_ms:
            time.sleep(0.0001)
            now = self._clock()
        return now


_default_generator: Optional[SnowflakeIdGenerator] = None
_default_lock = threading.Lock()


def get_id_generator() -> SnowflakeIdGenerator:
    """Process-wide generator configured from settings."""
    global _default_generator
    if _default_generator is None:
        with _default_lock:
            if _default_generator is None:
                from .config import settings
                _default_generator = SnowflakeIdGenerator(
                    datacenter_id=settings.snowflake_datacenter_id,
                    worker_id=settings.snowflake_worker_id,
                )
    return _default_generator
