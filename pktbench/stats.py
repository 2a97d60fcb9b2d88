"""Per-period statistics records and their bounded history."""

import collections
import copy
import dataclasses
import enum
import sys

STATS_SIZE = 64


class StatsKind(enum.Enum):
    """What a statistics record counts."""

    TX = "tx"
    RX = "rx"
    DELAY = "delay"


@dataclasses.dataclass
class TxStats:
    """Packets sent and dropped in one period."""

    tx: int = 0
    dropped: int = 0


@dataclasses.dataclass
class RxStats:
    """Packets received in one period."""

    rx: int = 0


@dataclasses.dataclass
class DelayStats:
    """Average round-trip delay in clock ticks and packets counted."""

    avg: int = 0
    num: int = 0


def format_stats(kind, data, hz):
    """Return the one-line report of a statistics record."""
    if kind is StatsKind.TX:
        return f"Tx-pps: {data.tx} {data.dropped} {data.tx + data.dropped}"
    if kind is StatsKind.RX:
        return f"Rx-pps: {data.rx}"
    if kind is StatsKind.DELAY:
        return f"Avg delay (us) and rx count: {data.avg / hz * 1000000.0:f} {data.num}"
    raise ValueError(f"unknown statistics kind {kind!r}")


class StatsHistory:
    """The last ``STATS_SIZE`` records of one kind, oldest first."""

    def __init__(self, kind=StatsKind.TX):
        self.kind = kind
        self._records = collections.deque(maxlen=STATS_SIZE)

    def __len__(self):
        return len(self._records)

    def save(self, data):
        """Store a copy of ``data``, dropping the oldest record when full."""
        self._records.append(copy.copy(data))

    def records(self):
        """Return the stored records, oldest first."""
        return list(self._records)

    def print_all(self, hz, file=None):
        """Print every stored record."""
        out = sys.stdout if file is None else file
        if not self._records:
            print("No stats to be printed.", file=out)
            return
        for record in self._records:
            print(format_stats(self.kind, record, hz), file=out)