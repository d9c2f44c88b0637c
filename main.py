# main.py
import asyncio

from sync.consumer import IdempotentConsumer, Message
from util.log import log
from util.metrics import snapshot


async def main():
    # a bus that redelivers: id 1 shows up twice, 3 arrives before 2
    message_bus = [
        Message("orders", 1, b"2"),
        Message("orders", 3, b"4"),
        Message("orders", 2, b"3"),
        Message("orders", 1, b"2"),
        Message("billing", 1, b"7"),
    ]

    totals = {}

    def handle(msg: Message) -> None:
        totals[msg.from_id] = totals.get(msg.from_id, 0) + int(msg.payload)

    consumer = IdempotentConsumer(handle)
    await consumer.start()
    for msg in message_bus:
        await consumer.submit(msg)
    await consumer.join()
    await consumer.stop()

    log("demo_done", totals=totals, senders=consumer.table.stats(), counters=snapshot())


if __name__ == "__main__":
    asyncio.run(main())
