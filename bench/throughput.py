"""
Throughput cases for WatermarkSet insert/contains.

Each case builds fresh sets per round, times only the measured loop and reports
elements per second over all rounds.
"""
from dataclasses import asdict, dataclass
from typing import Callable, Dict, List
import time

from bench.streams import in_order, interleaved
from util.log import log
from watermarkset.wmset import WatermarkSet

BATCH_SIZE = 1000
ROUNDS = 200
CONTAINS_SPAN = 64 * 10


@dataclass
class BenchResult:
    group: str
    name: str
    elements: int
    seconds: float

    @property
    def elements_per_sec(self) -> float:
        return self.elements / self.seconds if self.seconds > 0 else float("inf")

    def to_dict(self) -> Dict[str, object]:
        d = asdict(self)
        d["elements_per_sec"] = self.elements_per_sec
        return d


def _time_rounds(rounds: int, setup: Callable[[], WatermarkSet], body: Callable[[WatermarkSet], None]) -> float:
    total = 0.0
    for _ in range(rounds):
        ws = setup()
        t0 = time.perf_counter()
        body(ws)
        total += time.perf_counter() - t0
    return total


def bench_insert_in_order(batch: int = BATCH_SIZE, rounds: int = ROUNDS) -> BenchResult:
    ids = in_order(batch)

    def body(ws: WatermarkSet) -> None:
        for i in ids:
            ws.insert(i)

    return BenchResult("insert", "in_order", batch * rounds, _time_rounds(rounds, WatermarkSet, body))


def bench_insert_out_of_order(batch: int = BATCH_SIZE, rounds: int = ROUNDS) -> BenchResult:
    ids = interleaved(batch)

    def body(ws: WatermarkSet) -> None:
        for i in ids:
            ws.insert(i)

    return BenchResult("insert", "out_of_order", batch * rounds, _time_rounds(rounds, WatermarkSet, body))


def _filled(ids: List[int]) -> Callable[[], WatermarkSet]:
    def setup() -> WatermarkSet:
        ws = WatermarkSet()
        for i in ids:
            ws.insert(i)
        return ws
    return setup


def bench_contains_aligned(rounds: int = ROUNDS, span: int = CONTAINS_SPAN) -> BenchResult:
    def body(ws: WatermarkSet) -> None:
        for i in range(span):
            ws.contains(i)

    return BenchResult("contains", "aligned", span * rounds, _time_rounds(rounds, _filled(in_order(span)), body))


def bench_contains_unaligned(rounds: int = ROUNDS, span: int = CONTAINS_SPAN) -> BenchResult:
    # every other id inserted: nothing submerges, every lookup hits the window
    def body(ws: WatermarkSet) -> None:
        for i in range(span):
            ws.contains(i)

    evens = list(range(0, span, 2))
    return BenchResult("contains", "unaligned", span * rounds, _time_rounds(rounds, _filled(evens), body))


def run_all(batch: int = BATCH_SIZE, rounds: int = ROUNDS) -> List[BenchResult]:
    results = [
        bench_insert_in_order(batch, rounds),
        bench_insert_out_of_order(batch, rounds),
        bench_contains_aligned(rounds),
        bench_contains_unaligned(rounds),
    ]
    for r in results:
        log("bench_case", group=r.group, name=r.name, elements=r.elements,
            elements_per_sec=round(r.elements_per_sec, 1))
    return results
