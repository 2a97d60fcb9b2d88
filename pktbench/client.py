"""Round-trip client: sends timestamped bursts and measures the echo delay."""

import sys
import threading
import time

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
from pktbench.timestamp import TscClock, run_updater

_SEPARATOR = "-------------------------------------"
_U64_MASK = (1 << 64) - 1


def _validate(config):
    if config.rate <= 0:
        raise ValueError(f"invalid rate {config.rate}")
    if config.bst_size <= 0:
        raise ValueError(f"invalid burst size {config.bst_size}")
    data_size(config.pkt_size)


def _layout(config):
    """Return (payload length, buffer length, payload offset) for ``config``."""
    payload_len = payload_size(config.pkt_size)
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
    """Save and print the period's average delay; return a fresh record."""
    if period.num:
        period.avg //= period.num
        history.save(period)
        if not config.silent:
            print(format_stats(StatsKind.DELAY, period, hz))
    return DelayStats()


def client_send_loop(config, sock, clock, stop):
    """Send timestamped bursts at ``config.rate`` packets per second.

    The clock is only read here; another thread is expected to update it.
    """
    _validate(config)
    payload_len, used_len, base = _layout(config)
    data_offset = base + TSC_SIZE
    data_len = payload_len - TSC_SIZE
    template = _template(config, payload_len, used_len)
    incr = clock.hz * config.bst_size // config.rate

    next_burst = clock.last
    while not stop.is_set():
        cur = clock.last
        if cur <= next_burst:
            continue
        next_burst += incr

        if config.use_mmsg:
            burst = []
            for _ in range(config.bst_size):
                packet = bytearray(template)
                if config.touch_data:
                    fill_data(packet, data_offset, data_len)
                put_u64(packet, base, clock.last)
                burst.append(packet)
            for packet in burst:
                if _try_send(sock, packet) < 0:
                    break
        else:
            packet = bytearray(template)
            for _ in range(config.bst_size):
                if config.touch_data:
                    fill_data(packet, data_offset, data_len)
                put_u64(packet, base, clock.last)
                _try_send(sock, packet)


def _record(config, period, clock, reply, base, data_offset, data_len):
    stamp = get_u64(reply, base)
    if config.touch_data:
        consume_data(reply[data_offset:data_offset + data_len])
    hz = clock.hz
    diff = (clock.last - stamp) & _U64_MASK
    # Packets more than a tenth of a second late count as dropped.
    if diff < hz // 10:
        period.avg += diff
        period.num += 1
    elif not config.silent:
        print(
            "ERR: Received message with very big time difference: "
            f"TSC DIFF {diff} (TSC_HZ {hz})"
        )


def client_pong_loop(config, sock, clock, history, stop):
    """Receive echoed packets until ``stop`` is set and average their delay.

    Once per second of clock ticks the average is saved in ``history`` and,
    unless silent, printed.
    """
    _validate(config)
    payload_len, used_len, base = _layout(config)
    data_offset = base + TSC_SIZE
    data_len = payload_len - TSC_SIZE
    hz = clock.hz
    period = DelayStats()

    prev = clock.last
    while not stop.is_set():
        cur = clock.last
        if cur - prev > hz:
            period = _flush(config, period, history, hz)
            prev = cur

        count = config.bst_size if config.use_mmsg else 1
        for _ in range(count):
            reply = _try_recv(sock, used_len)
            if reply is None:
                break
            if len(reply) == used_len:
                _record(config, period, clock, reply, base, data_offset, data_len)


def _final_report(history, hz):
    print("\nCaught signal Interrupt!")
    print(_SEPARATOR)
    print("FINAL STATS")
    history.print_all(hz)


def client_body(argv=None):
    """Run the round-trip client command; return the exit status."""
    argv = ["client", *sys.argv[1:]] if argv is None else list(argv)
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
        _validate(config)
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
    stop = threading.Event()
    with sock:
        clock.update()
        updater = threading.Thread(target=run_updater, args=(clock, stop), daemon=True)
        updater.start()
        time.sleep(1)
        pong = threading.Thread(
            target=client_pong_loop,
            args=(config, sock, clock, history, stop),
            daemon=True,
        )
        pong.start()
        try:
            client_send_loop(config, sock, clock, stop)
        except KeyboardInterrupt:
            _final_report(history, clock.hz)
        finally:
            stop.set()
            pong.join(1)
            updater.join(1)
    return 0