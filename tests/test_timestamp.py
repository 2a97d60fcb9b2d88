import itertools
import threading

from pktbench.timestamp import TscClock, run_updater


def _counting_clock(start=1):
    counter = itertools.count(start)
    return TscClock(source=lambda: next(counter), hz=1000)


def test_last_starts_at_zero():
    assert _counting_clock().last == 0


def test_update_stores_reading():
    clock = _counting_clock(10)
    assert clock.update() == 10
    assert clock.last == 10
    assert clock.update() == 11
    assert clock.last == 11


def test_read_does_not_store():
    clock = _counting_clock(10)
    clock.update()
    assert clock.read() == 11
    assert clock.last == 10


def test_hz_is_kept():
    assert _counting_clock().hz == 1000


def test_default_clock_is_monotonic():
    clock = TscClock()
    first = clock.update()
    second = clock.update()
    assert second >= first
    assert clock.last == second


def test_run_updater_stops_on_event():
    stop = threading.Event()
    counter = itertools.count(1)

    def source():
        value = next(counter)
        if value == 5:
            stop.set()
        return value

    clock = TscClock(source=source, hz=1000)
    thread = threading.Thread(target=run_updater, args=(clock, stop))
    thread.start()
    thread.join(timeout=5)
    assert not thread.is_alive()
    assert clock.last == 5


def test_run_updater_with_stop_already_set():
    stop = threading.Event()
    stop.set()
    clock = _counting_clock(7)
    run_updater(clock, stop)
    assert clock.last == 0
    assert clock.read() == 7