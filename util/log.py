import json
import sys
from typing import Any, Dict, Optional, TextIO
from util.metrics import now_ms

_stream: Optional[TextIO] = None  # None -> current sys.stderr
_enabled = True


def configure(stream: Optional[TextIO] = None, enabled: bool = True) -> None:
    global _stream, _enabled
    _stream = stream
    _enabled = enabled


def log(event: str, **fields: Dict[str, Any]) -> None:
    if not _enabled:
        return
    record = {"ts_ms": now_ms(), "event": event}
    record.update(fields)
    print(json.dumps(record, separators=(",", ":"), default=str), file=_stream or sys.stderr, flush=True)
