"""A shared timestamp counter, updated by one thread and read by others."""

import time

_NS_PER_SECOND = 1_000_000_000


class TscClock:
    """A monotonic tick counter with a cached last reading.

    By default ticks are nanoseconds from ``time.perf_counter_ns``.
    """

    def __init__(self, source=None, hz=_NS_PER_SECOND):
        self._source = time.perf_counter_ns if source is None else source
        self.hz = hz
        self._last = 0

    @property
    def last(self):
        """The value stored by the most recent ``update``."""
        return self._last

    def read(self):
        """Return the current tick count without storing it."""
        return self._source()

    def update(self):
        """Read the counter, store the value as ``last`` and return it."""
        self._last = self._source()
        return self._last


def run_updater(clock, stop):
    """Keep updating ``clock`` until the event ``stop`` is set."""
    while not stop.is_set():
        clock.update()