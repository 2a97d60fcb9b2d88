import io

import pytest

from pktbench.stats import (
    STATS_SIZE,
    DelayStats,
    RxStats,
    StatsHistory,
    StatsKind,
    TxStats,
    format_stats,
)


@pytest.mark.parametrize(
    "kind, data, hz, expected",
    [
        (StatsKind.TX, TxStats(tx=5, dropped=3), 1, "Tx-pps: 5 3 8"),
        (StatsKind.RX, RxStats(rx=7), 1, "Rx-pps: 7"),
        (
            StatsKind.DELAY,
            DelayStats(avg=1500, num=4),
            1_000_000,
            "Avg delay (us) and rx count: 1500.000000 4",
        ),
    ],
)
def test_format_stats(kind, data, hz, expected):
    assert format_stats(kind, data, hz) == expected


@pytest.mark.parametrize(
    "saved, first_kept",
    [(3, 0), (STATS_SIZE, 0), (STATS_SIZE + 6, 6)],
)
def test_history_keeps_latest_in_order(saved, first_kept):
    history = StatsHistory(StatsKind.RX)
    for value in range(saved):
        history.save(RxStats(rx=value))
    assert [r.rx for r in history.records()] == list(range(first_kept, saved))
    assert len(history) == saved - first_kept


def test_history_stores_copies():
    history = StatsHistory(StatsKind.TX)
    period = TxStats(tx=1, dropped=2)
    history.save(period)
    period.tx = 100
    assert history.records() == [TxStats(tx=1, dropped=2)]


def test_print_all_empty():
    out = io.StringIO()
    StatsHistory(StatsKind.DELAY).print_all(1, out)
    assert out.getvalue() == "No stats to be printed.\n"


def test_print_all_lines():
    history = StatsHistory(StatsKind.TX)
    history.save(TxStats(tx=1, dropped=0))
    history.save(TxStats(tx=2, dropped=1))
    out = io.StringIO()
    history.print_all(1, out)
    assert out.getvalue() == "Tx-pps: 1 0 1\nTx-pps: 2 1 3\n"