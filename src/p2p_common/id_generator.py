"""Snowflake-style IDs for orders, responses, deals, reviews and reports.

IDs are fixed-width decimal strings. Entity tables key on VARCHAR and list
queries tie-break and paginate on `id`, so text order has to agree with
numeric (and therefore creation) order.
"""

import threading
import time

from config.settings import settings

ID_WIDTH = 20


class SnowflakeIdGenerator:
    """Layout (63 bits used):
      - 41 bits: milliseconds since EPOCH_MS
      - 10 bits: node id (0-1023), one per process writing to the same database
      - 12 bits: per-millisecond sequence
    """

    EPOCH_MS = 1_704_067_200_000  # 2024-01-01T00:00:00Z
    NODE_BITS = 10
    SEQUENCE_BITS = 12

    def __init__(self, machine_id: int = 0) -> None:
        if not 0 <= machine_id < (1 << self.NODE_BITS):
            raise ValueError(f"machine_id must be 0-{(1 << self.NODE_BITS) - 1}")
        self._node = machine_id
        self._last_ms = -1
        self._seq = 0
        self._mutex = threading.Lock()

    def next_id(self) -> str:
        with self._mutex:
            now_ms = max(time.time_ns() // 1_000_000, self._last_ms)
            if now_ms == self._last_ms:
                self._seq = (self._seq + 1) % (1 << self.SEQUENCE_BITS)
                if self._seq == 0:
                    # Sequence exhausted in this millisecond
                    while now_ms <= self._last_ms:
                        now_ms = time.time_ns() // 1_000_000
            else:
                self._seq = 0
            self._last_ms = now_ms

            value = (now_ms - self.EPOCH_MS) << (self.NODE_BITS + self.SEQUENCE_BITS)
            value |= self._node << self.SEQUENCE_BITS
            value |= self._seq
            return str(value).zfill(ID_WIDTH)


_generator = SnowflakeIdGenerator(machine_id=settings.NODE_ID)


def generate_id() -> str:
    return _generator.next_id()
