from __future__ import annotations
from typing import Any, Dict, List, Optional

from util.metrics import incr
from watermarkset.numeric import MAX_INDEX, UNBOUNDED, IntegerKind
from watermarkset.wmset import WatermarkSet


class DedupeTable:
    """
    Maintains a WatermarkSet per sender for (from_id, seq_no) duplicate checks.
    Sequence numbers only need to be mostly in order per sender; memory per
    sender follows how far out of order they arrive.
    """

    def __init__(self, kind: IntegerKind = UNBOUNDED, start: int = 0, max_gap: Optional[int] = None) -> None:
        self.kind = kind
        self.start = start
        self.max_gap = max_gap
        self._by_sender: Dict[str, WatermarkSet] = {}

    def _window(self, from_id: str) -> WatermarkSet:
        ws = self._by_sender.get(from_id)
        if ws is None:
            ws = self._by_sender[from_id] = WatermarkSet(self.start, kind=self.kind, max_gap=self.max_gap)
        return ws

    def already_seen(self, from_id: str, seq_no: int) -> bool:
        """True for a duplicate; otherwise records seq_no and returns False."""
        ws = self._window(from_id)
        if ws.contains(seq_no):
            incr("duplicates_dropped", 1)
            return True
        ws.insert(seq_no)
        return False

    def seen(self, from_id: str, seq_no: int) -> bool:
        ws = self._by_sender.get(from_id)
        if ws is None:
            # unknown sender: only the pre-seen range below start counts,
            # with the same gap limit a known sender's set applies
            seq_no = self.kind.validate(seq_no)
            if seq_no < self.start:
                return True
            limit = MAX_INDEX if self.max_gap is None else min(int(self.max_gap), MAX_INDEX)
            self.kind.to_index(seq_no - self.start, limit)
            return False
        return ws.contains(seq_no)

    def mark(self, from_id: str, seq_no: int) -> None:
        self._window(from_id).insert(seq_no)

    def window_for(self, from_id: str) -> Optional[WatermarkSet]:
        return self._by_sender.get(from_id)

    def senders(self) -> List[str]:
        return list(self._by_sender)

    def stats(self) -> Dict[str, Dict[str, Any]]:
        return {sid: ws.stats() for sid, ws in self._by_sender.items()}
