# sync/consumer.py
import asyncio
import inspect
from dataclasses import dataclass
from typing import Any, Callable, Optional

from sync.dedupe import DedupeTable
from util.log import log
from util.metrics import incr
from watermarkset.errors import WatermarkError


@dataclass
class Message:
    from_id: str
    seq_no: int
    payload: bytes = b""


class IdempotentConsumer:
    """
    Single owner task for a DedupeTable: drains a queue and calls `handler`
    once per (from_id, seq_no). A message is only marked seen after the handler
    returns, so a failed message can be redelivered and retried.
    """

    def __init__(self, handler: Callable[[Message], Any], table: Optional[DedupeTable] = None, maxsize: int = 0):
        self.handler = handler
        self.table = table if table is not None else DedupeTable()
        self._queue: "asyncio.Queue[Message]" = asyncio.Queue(maxsize=maxsize)
        self._task: Optional[asyncio.Task] = None
        self.handled = 0
        self.duplicates = 0

    async def start(self):
        if not self._task:
            self._task = asyncio.create_task(self._loop())
            log("consumer_start")

    async def stop(self):
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
            log("consumer_stop", handled=self.handled, duplicates=self.duplicates)

    async def submit(self, msg: Message) -> None:
        await self._queue.put(msg)

    async def join(self) -> None:
        """Wait until every submitted message has been processed."""
        await self._queue.join()

    async def _loop(self):
        while True:
            msg = await self._queue.get()
            try:
                await self._process(msg)
            finally:
                self._queue.task_done()

    async def _process(self, msg: Message) -> None:
        try:
            if self.table.seen(msg.from_id, msg.seq_no):
                self.duplicates += 1
                incr("duplicates_dropped", 1)
                return
        except (WatermarkError, TypeError) as e:
            incr("rejected", 1)
            log("message_rejected", from_id=msg.from_id, seq_no=msg.seq_no, error=str(e))
            return

        try:
            out = self.handler(msg)
            if inspect.isawaitable(out):
                await out
        except Exception as e:
            incr("handler_errors", 1)
            log("handler_error", from_id=msg.from_id, seq_no=msg.seq_no, error=repr(e))
            return

        try:
            self.table.mark(msg.from_id, msg.seq_no)
        except WatermarkError as e:
            incr("rejected", 1)
            log("message_rejected", from_id=msg.from_id, seq_no=msg.seq_no, error=str(e))
            return
        self.handled += 1
        incr("messages_handled", 1)
