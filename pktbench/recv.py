"""Traffic sink: counts the packets received each second."""

from pktbench.config import _run_socket_program
from pktbench.constants import (
    RECV_ADDR_IP,
    RECV_ADDR_MAC,
    RECV_PORT,
    SEND_ADDR_IP,
    SEND_ADDR_MAC,
    SEND_PORT,
)
from pktbench.payload import consume_data
from pktbench.stats import RxStats, StatsKind, format_stats

_DEFAULTS = {
    "local_port": RECV_PORT,
    "remote_port": SEND_PORT,
    "local_ip": RECV_ADDR_IP,
    "remote_ip": SEND_ADDR_IP,
    "local_mac": RECV_ADDR_MAC,
    "remote_mac": SEND_ADDR_MAC,
}


def _try_recv(sock, size):
    try:
        return sock.recv(size)
    except OSError:
        return None


def recv_loop(config, sock, clock, history, stop):
    """Receive packets until ``stop`` is set, counting them once per second.

    In batched mode up to a burst of packets is taken per iteration and all of
    them are counted; otherwise one packet is taken and counted only if it has
    the full expected length.
    """
    if config.bst_size <= 0:
        raise ValueError(f"invalid burst size {config.bst_size}")
    payload_len, used_len, base = config.buffer_layout
    hz = clock.hz
    period = RxStats()

    cur = prev = clock.update()
    while not stop.is_set():
        cur = clock.update()

        if cur - prev > hz:
            history.save(period)
            if not config.silent:
                print(format_stats(StatsKind.RX, period, hz))
            period = RxStats()
            prev = cur

        if config.use_mmsg:
            batch = []
            for _ in range(config.bst_size):
                data = _try_recv(sock, used_len)
                if data is None:
                    break
                batch.append(data)
        else:
            data = _try_recv(sock, used_len)
            batch = [data] if data is not None and len(data) == used_len else []

        if config.touch_data:
            for data in batch:
                consume_data(data[base:base + payload_len])
        period.rx += len(batch)


def recv_body(argv=None):
    """Run the receiver command; return the exit status."""
    return _run_socket_program(argv, "recv", _DEFAULTS, StatsKind.RX, False, recv_loop)