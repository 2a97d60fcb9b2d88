"""Echo server: sends every received packet back to its sender."""

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
    payload_size,
)
from pktbench.headers import swap_addresses
from pktbench.payload import consume_data


def _layout(config):
    """Return (buffer length, payload offset) for ``config``."""
    payload_len = payload_size(config.pkt_size)
    if config.socktype == SockType.RAW:
        return OFFSET_PKT_PAYLOAD + payload_len, OFFSET_PKT_PAYLOAD
    return payload_len, 0


def _try_recvfrom(sock, size):
    try:
        return sock.recvfrom(size)
    except OSError:
        return None


def _try_sendto(sock, data, address):
    try:
        sock.sendto(data, address)
    except OSError:
        pass


def _prepare_reply(config, packet, base):
    if config.touch_data:
        consume_data(packet[base + TSC_SIZE:])
    if config.socktype == SockType.RAW and len(packet) >= PKT_HEADER_SIZE:
        swap_addresses(packet)


def server_loop(config, sock, stop):
    """Echo packets back to their senders until ``stop`` is set.

    With raw sockets the Ethernet, IP and UDP addresses are swapped first.
    """
    if config.bst_size <= 0:
        raise ValueError(f"invalid burst size {config.bst_size}")
    used_len, base = _layout(config)

    while not stop.is_set():
        if config.use_mmsg:
            batch = []
            for _ in range(config.bst_size):
                received = _try_recvfrom(sock, used_len)
                if received is None:
                    break
                data, address = received
                batch.append((bytearray(data), address))
            for packet, _ in batch:
                _prepare_reply(config, packet, base)
            for packet, address in batch:
                _try_sendto(sock, packet, address)
        else:
            received = _try_recvfrom(sock, used_len)
            if received is None or not received[0]:
                continue
            data, address = received
            packet = bytearray(data)
            _prepare_reply(config, packet, base)
            _try_sendto(sock, packet, address)


def server_body(argv=None):
    """Run the echo server command; return the exit status."""
    argv = ["server", *sys.argv[1:]] if argv is None else list(argv)
    config = Config(
        local_port=SERVER_PORT,
        remote_port=CLIENT_PORT,
        socktype=SockType.DGRAM,
        local_ip=SERVER_ADDR_IP,
        remote_ip=CLIENT_ADDR_IP,
        local_mac=SERVER_ADDR_MAC,
        remote_mac=CLIENT_ADDR_MAC,
    )
    try:
        parse_parameters(argv, config)
    except UsageError as exc:
        print(exc, file=sys.stderr, end="")
        return 1

    print(format_config(config), end="")

    try:
        sock = create_socket(config, True, False)
    except (OSError, ValueError) as exc:
        print(f"Could not create socket: {exc}", file=sys.stderr)
        return 1

    with sock:
        try:
            server_loop(config, sock, threading.Event())
        except KeyboardInterrupt:
            print("\nCaught signal Interrupt!")
        except ValueError as exc:
            print(f"ERR: {exc}", file=sys.stderr)
            return 1
    return 0