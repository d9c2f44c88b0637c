"""
Watermark set: membership tracking for integer ids that arrive mostly in order.

Everything strictly below `watermark` is known to be present. Ids just above it
are tracked in a window of 64-bit buckets; bucket i covers
[watermark + 64*i, watermark + 64*i + 64). Whenever the front bucket fills up
it is popped and the watermark moves up by 64, so memory follows the disorder
of the stream, not the number of ids seen.

    ws = WatermarkSet()
    for msg in bus:
        if not ws.contains(msg.id):
            ws.insert(msg.id)
            handle(msg)

Not thread-safe. Wrap it in a lock or give it a single owner task
(see sync.consumer.IdempotentConsumer).
"""
from collections import deque
from typing import Any, Deque, Dict, Optional, Tuple

from util.log import log
from watermarkset.errors import ArithmeticOverflow, WatermarkOverflow
from watermarkset.numeric import MAX_INDEX, UNBOUNDED, IntegerKind

BUCKET_BITS = 64
FULL_BUCKET = (1 << BUCKET_BITS) - 1
# A window this long means one id ran far ahead and the gap never filled.
WINDOW_WARN_BUCKETS = 1 << 14


class WatermarkSet:
    __slots__ = ("kind", "max_gap", "warn_buckets", "_watermark", "_window")

    def __init__(
        self,
        start: int = 0,
        kind: IntegerKind = UNBOUNDED,
        max_gap: Optional[int] = None,
        warn_buckets: int = WINDOW_WARN_BUCKETS,
    ) -> None:
        """
        start: initial watermark; every value below it counts as already seen.
        kind: integer element type (range and overflow rules).
        max_gap: largest allowed element - watermark distance, capped at MAX_INDEX.
        warn_buckets: log a `window_grow` event when the window grows past this.
        """
        self.kind = kind
        self.max_gap = MAX_INDEX if max_gap is None else min(int(max_gap), MAX_INDEX)
        if self.max_gap < 0:
            raise ValueError("max_gap must be >= 0")
        self.warn_buckets = int(warn_buckets)
        self._watermark: int = kind.validate(start)
        self._window: Deque[int] = deque()

    # ----- read-only state -----
    @property
    def watermark(self) -> int:
        return self._watermark

    @property
    def window(self) -> Tuple[int, ...]:
        """Snapshot of the bucket bitmasks, front (lowest ids) first."""
        return tuple(self._window)

    def window_len(self) -> int:
        return len(self._window)

    # ----- helpers -----
    def _bucket_and_offset(self, elem: int) -> Tuple[int, int]:
        # only the difference has to fit a machine-width index, never the watermark
        diff = self.kind.to_index(elem - self._watermark, self.max_gap)
        return divmod(diff, BUCKET_BITS)

    def _raise_water(self) -> None:
        window = self._window
        while window and window[0] == FULL_BUCKET:
            try:
                raised = self.kind.checked_add(self._watermark, BUCKET_BITS)
            except ArithmeticOverflow:
                raise WatermarkOverflow(self._watermark, self.kind.name) from None
            window.popleft()
            self._watermark = raised

    # ----- operations -----
    def insert(self, elem: int) -> None:
        """
        Mark `elem` as seen. Inserting the same value twice is a no-op.

        Raises WatermarkOverflow if a full window would push the watermark past
        the kind's max, AddressingOverflow if `elem` is further than `max_gap`
        above the watermark.
        """
        elem = self.kind.validate(elem)
        if elem < self._watermark:
            return

        bucket, offset = self._bucket_and_offset(elem)

        window = self._window
        have = len(window)
        if have <= bucket:
            window.extend([0] * (bucket + 1 - have))
            if have <= self.warn_buckets < len(window):
                log("window_grow", buckets=len(window), watermark=self._watermark, elem=elem)

        window[bucket] |= 1 << offset
        self._raise_water()

    def contains(self, elem: int) -> bool:
        elem = self.kind.validate(elem)
        # below the water everything has been inserted, no lookup needed
        if elem < self._watermark:
            return True
        bucket, offset = self._bucket_and_offset(elem)
        if bucket >= len(self._window):
            return False
        return (self._window[bucket] >> offset) & 1 == 1

    def size(self) -> int:
        """
        Number of distinct values inserted: submerged ids plus bits set above the water.

        Counts from 0, so a negative watermark has no size and raises ArithmeticOverflow.
        """
        if self._watermark < 0:
            raise ArithmeticOverflow(f"watermark {self._watermark} below 0 cannot be read as a count")
        return self._watermark + sum(b.bit_count() for b in self._window)

    def stats(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.name,
            "watermark": self._watermark,
            "buckets": len(self._window),
            "tracked": sum(b.bit_count() for b in self._window),
            "size": self.size() if self._watermark >= 0 else None,
        }

    def __contains__(self, elem: Any) -> bool:
        return self.contains(elem)

    def __repr__(self) -> str:
        return f"WatermarkSet(kind={self.kind.name}, watermark={self._watermark}, buckets={len(self._window)})"
