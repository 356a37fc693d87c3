import threading

from epoch_history import EpochHistory


def test_empty_history():
    h = EpochHistory()
    assert h.size() == 0
    assert h.last_epoch() == -1
    assert h.snapshot() == []


def test_append_and_last_epoch():
    h = EpochHistory()
    h.append(5).append(7).append(4)
    assert h.snapshot() == [5, 7, 4]
    assert h.size() == 3
    assert len(h) == 3
    assert h.last_epoch() == 4


def test_snapshot_is_disconnected():
    h = EpochHistory([5, 7])
    snap = h.snapshot()
    snap.append(99)
    snap[0] = 1
    assert h.snapshot() == [5, 7]


def test_replace_all():
    h = EpochHistory([5, 7, 4, 2])
    src = [3, 2]
    h.replace_all(src)
    src.append(8)
    assert h.snapshot() == [3, 2]
    assert h.last_epoch() == 2


def test_replace_all_empty_is_allowed():
    h = EpochHistory([5])
    h.replace_all([])
    assert h.size() == 0
    assert h.last_epoch() == -1


def test_repr_and_iter():
    h = EpochHistory([5, 7])
    assert repr(h) == "[5, 7]"
    assert list(h) == [5, 7]


def test_concurrent_readers_see_whole_histories():
    # The writer only ever installs [n] * n, so a torn read would mix lengths and values.
    h = EpochHistory([1])
    stop = threading.Event()
    bad = []

    def writer():
        for n in range(1, 200):
            h.replace_all([n] * n)
        stop.set()

    def reader():
        while not stop.is_set():
            snap = h.snapshot()
            if snap and snap != [snap[0]] * snap[0]:
                bad.append(snap)

    readers = [threading.Thread(target=reader) for _ in range(4)]
    for t in readers:
        t.start()
    writer()
    for t in readers:
        t.join()
    assert not bad
