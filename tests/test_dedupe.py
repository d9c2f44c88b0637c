import pytest

from sync.dedupe import DedupeTable
from util import metrics
from watermarkset.errors import AddressingOverflow
from watermarkset.numeric import U16


def test_already_seen_per_sender():
    table = DedupeTable()
    assert table.already_seen("A", 1) is False
    assert table.already_seen("A", 1) is True
    # same seq from another sender is independent
    assert table.already_seen("B", 1) is False
    assert sorted(table.senders()) == ["A", "B"]


@pytest.fixture
def counters():
    metrics.reset()
    yield
    metrics.reset()


def test_duplicates_are_counted(counters):
    table = DedupeTable()
    table.already_seen("A", 5)
    table.already_seen("A", 5)
    table.already_seen("A", 5)
    assert metrics.get("duplicates_dropped") == 2
    assert metrics.snapshot() == {"duplicates_dropped": 2}


def test_reset_clears_counters(counters):
    metrics.incr("duplicates_dropped", 3)
    metrics.reset()
    assert metrics.snapshot() == {}


def test_in_order_stream_keeps_window_small():
    table = DedupeTable()
    for seq in range(10_000):
        assert table.already_seen("A", seq) is False
    ws = table.window_for("A")
    assert ws.watermark == 9984
    assert ws.window_len() == 1
    assert table.stats()["A"]["size"] == 10_000


def test_seen_does_not_record():
    table = DedupeTable(start=10)
    assert table.seen("new", 9) is True
    assert table.seen("new", 10) is False
    assert table.senders() == []
    table.mark("new", 10)
    assert table.seen("new", 10) is True


def test_settings_apply_to_every_sender():
    table = DedupeTable(kind=U16, max_gap=256)
    table.mark("A", 256)
    with pytest.raises(AddressingOverflow):
        table.mark("B", 257)
    assert table.window_for("A").kind is U16
    assert table.window_for("missing") is None


def test_gap_check_same_for_known_and_unknown_sender():
    table = DedupeTable(max_gap=256)
    with pytest.raises(AddressingOverflow):
        table.seen("A", 10_000)
    assert table.seen("A", 256) is False
    table.mark("A", 1)
    with pytest.raises(AddressingOverflow):
        table.seen("A", 10_000)
    assert table.seen("A", 256) is False
