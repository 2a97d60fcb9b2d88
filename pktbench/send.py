"""Traffic generator: sends bursts of packets at a fixed rate."""

from pktbench.config import SockType, _run_socket_program
from pktbench.constants import (
    PKT_HEADER_SIZE,
    RECV_ADDR_IP,
    RECV_ADDR_MAC,
    RECV_PORT,
    SEND_ADDR_IP,
    SEND_ADDR_MAC,
    SEND_PORT,
    TSC_SIZE,
)
from pktbench.headers import build_header
from pktbench.payload import fill_data, put_u64
from pktbench.stats import StatsKind, TxStats, format_stats

_DEFAULTS = {
    "local_port": SEND_PORT,
    "remote_port": RECV_PORT,
    "local_ip": SEND_ADDR_IP,
    "remote_ip": RECV_ADDR_IP,
    "local_mac": SEND_ADDR_MAC,
    "remote_mac": RECV_ADDR_MAC,
}


def _template(config, payload_len, used_len):
    buffer = bytearray(used_len)
    if config.socktype == SockType.RAW:
        header = build_header(
            config.local_hwaddr, config.local_ip, config.local_port,
            config.remote_hwaddr, config.remote_ip, config.remote_port,
            payload_len,
        )
        buffer[:PKT_HEADER_SIZE] = header.pack()
    return buffer


def _try_send(sock, data):
    try:
        return sock.send(data)
    except OSError:
        return -1


def _send_burst_batched(config, sock, clock, template, payload_len, base):
    """Prepare a whole burst, then send it; return the number of packets sent."""
    packets = []
    for _ in range(config.bst_size):
        pkt = bytearray(template)
        if config.touch_data:
            fill_data(pkt, base + TSC_SIZE, payload_len - TSC_SIZE)
        put_u64(pkt, base, clock.update())
        packets.append(pkt)
    sent = 0
    for pkt in packets:
        if _try_send(sock, pkt) < 0:
            break
        sent += 1
    return sent


def _send_burst_single(config, sock, template, payload_len, base, used_len):
    """Send a burst one packet at a time; return the number sent in full."""
    pkt = bytearray(template)
    sent = 0
    for _ in range(config.bst_size):
        if config.touch_data:
            fill_data(pkt, base, payload_len)
        if _try_send(sock, pkt) >= used_len:
            sent += 1
    return sent


def send_loop(config, sock, clock, history, stop):
    """Send bursts at ``config.rate`` packets per second until ``stop`` is set.

    Once per second of clock ticks the sent and dropped counts are saved in
    ``history`` and, unless silent, printed.
    """
    if config.rate <= 0:
        raise ValueError(f"invalid rate {config.rate}")
    if config.bst_size <= 0:
        raise ValueError(f"invalid burst size {config.bst_size}")
    payload_len, used_len, base = config.buffer_layout
    template = _template(config, payload_len, used_len)

    hz = clock.hz
    incr = hz * config.bst_size // config.rate
    period = TxStats()

    cur = prev = next_burst = clock.update()
    while not stop.is_set():
        cur = clock.update()

        if cur - prev > hz:
            history.save(period)
            if not config.silent:
                print(format_stats(StatsKind.TX, period, hz))
            period = TxStats()
            prev = cur

        if cur > next_burst:
            next_burst += incr
            if config.use_mmsg:
                sent = _send_burst_batched(config, sock, clock, template, payload_len, base)
            else:
                sent = _send_burst_single(config, sock, template, payload_len, base, used_len)
            period.tx += sent
            period.dropped += config.bst_size - sent


def send_body(argv=None):
    """Run the sender command; return the exit status."""
    return _run_socket_program(argv, "send", _DEFAULTS, StatsKind.TX, True, send_loop)