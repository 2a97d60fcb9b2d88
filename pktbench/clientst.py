"""Single-packet client: sends one packet and spins until its echo returns."""

import sys
import threading

from pktbench.config import (
    Config,
    SockType,
    UsageError,
    create_socket,
    format_config,
    parse_parameters,
)
from pktbench.constants import (
    CLIENT_ADDR_IP,
    CLIENT_ADDR_MAC,
    CLIENT_PORT,
    OFFSET_PKT_PAYLOAD,
    PKT_HEADER_SIZE,
    SERVER_ADDR_IP,
    SERVER_ADDR_MAC,
    SERVER_PORT,
    TSC_SIZE,
    data_size,
    payload_size,
)
from pktbench.headers import build_header
from pktbench.payload import consume_data, fill_data, get_u64, put_u64
from pktbench.stats import DelayStats, StatsHistory, StatsKind, format_stats
from pktbench.timestamp import TscClock

_SEPARATOR = "-------------------------------------"


def _layout(config):
    """Return (payload length, buffer length, payload offset) for ``config``."""
    payload_len = payload_size(config.pkt_size)
    data_size(config.pkt_size)
    if config.socktype == SockType.RAW:
        return payload_len, OFFSET_PKT_PAYLOAD + payload_len, OFFSET_PKT_PAYLOAD
    return payload_len, payload_len, 0


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


def _try_recv(sock, size):
    try:
        return sock.recv(size)
    except OSError:
        return None


def _flush(config, period, history, hz):
    if period.num:
        period.avg //= period.num
        history.save(period)
        if not config.silent:
            print(format_stats(StatsKind.DELAY, period, hz))
    return DelayStats()


def clientst_loop(config, sock, clock, history, stop):
    """Ping-pong one packet at a time until ``stop`` is set.

    The sending rate is ignored: a new packet leaves as soon as the previous
    one came back or a hundredth of a second of ticks went by.  Echoes whose
    timestamp is not that of the last packet sent are rejected.
    """
    payload_len, used_len, base = _layout(config)
    data_offset = base + TSC_SIZE
    data_len = payload_len - TSC_SIZE
    template = _template(config, payload_len, used_len)
    hz = clock.hz
    max_delay = hz // 100
    period = DelayStats()

    last = prev = clock.update()
    while not stop.is_set():
        cur = clock.update()
        if cur - prev > hz:
            period = _flush(config, period, history, hz)
            prev = cur

        packet = bytearray(template)
        if config.touch_data:
            fill_data(packet, data_offset, data_len)

        while True:
            last = cur = clock.update()
            put_u64(packet, base, cur)
            if _try_send(sock, packet) == used_len:
                break
            if stop.is_set():
                return

        stamp = 0
        while True:
            reply = _try_recv(sock, used_len)
            cur = clock.update()
            valid = reply is not None and len(reply) == used_len
            if valid:
                stamp = get_u64(reply, base)
                if stamp != last:
                    valid = False
                    print("ERR: last timestamp is not the same!", file=sys.stderr)
            if valid or cur - last >= max_delay:
                break

        if cur - last < max_delay:
            if config.touch_data:
                consume_data(reply[data_offset:data_offset + data_len])
            cur = clock.update()
            period.avg += cur - stamp
            period.num += 1


def _final_report(history, hz):
    print("\nCaught signal Interrupt!")
    print(_SEPARATOR)
    print("FINAL STATS")
    history.print_all(hz)


def clientst_body(argv=None):
    """Run the single-packet client command; return the exit status."""
    argv = ["clientst", *sys.argv[1:]] if argv is None else list(argv)
    config = Config(
        local_port=CLIENT_PORT,
        remote_port=SERVER_PORT,
        socktype=SockType.DGRAM,
        local_ip=CLIENT_ADDR_IP,
        remote_ip=SERVER_ADDR_IP,
        local_mac=CLIENT_ADDR_MAC,
        remote_mac=SERVER_ADDR_MAC,
    )
    try:
        parse_parameters(argv, config)
    except UsageError as exc:
        print(exc, file=sys.stderr, end="")
        return 1

    print(format_config(config), end="")

    try:
        data_size(config.pkt_size)
    except ValueError as exc:
        print(f"ERR: {exc}", file=sys.stderr)
        return 1

    try:
        sock = create_socket(config, True, True)
    except (OSError, ValueError) as exc:
        print(f"Could not create socket: {exc}", file=sys.stderr)
        return 1

    clock = TscClock()
    history = StatsHistory(StatsKind.DELAY)
    with sock:
        try:
            clientst_loop(config, sock, clock, history, threading.Event())
        except KeyboardInterrupt:
            _final_report(history, clock.hz)
    return 0