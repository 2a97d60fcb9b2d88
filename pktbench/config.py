"""Run configuration: defaults, command-line parsing and socket creation."""

import dataclasses
import enum
import re
import socket
import sys
import threading

from pktbench.constants import (
    DEFAULT_BST_SIZE,
    DEFAULT_PKT_SIZE,
    DEFAULT_RATE,
    ETHER_ADDR_LEN,
    OFFSET_PKT_PAYLOAD,
    payload_size,
)
from pktbench.stats import StatsHistory
from pktbench.timestamp import TscClock

_ETH_P_ALL = 0x0003
_IFNAME_MAX = 15
_SEPARATOR = "-------------------------------------"

_MAC_RE = re.compile(
    r"\s*" + r"\s*:\s*".join([r"[+-]?(?:0[xX])?([0-9a-fA-F]+)"] * ETHER_ADDR_LEN)
)
_ATOI_RE = re.compile(r"\s*([+-]?\d+)")

_USAGE = (
    "USAGE\n"
    "\t{cmd} <program-options-unordered-list> <addresses-ordered-list> -- <dpdk-parameters>\n"
    "\n"
    "Where:\n"
    " - <program-options-unordered-list> is a list of non-ordered parameters (see PARAMETERS section);\n"
    " - <adresses-ordered-list> is a list of IP and MAC addresses used by the program\n"
    "\t(see ADDRESSES section);\n"
    " - <dpdk-parameters> is a list of parameters for EAL DPDK environment\n"
    "\t(see online - used only by programs starting with 'dpdk-').\n"
    "\n"
    "PARAMETERS\n"
    "\n"
    "    -r <rate=1000000>\tThe sending/receiving rate in pps.\n"
    "    -p <packet_size=64>\tThe size of each frame in bytes.\n"
    "    -b <burst_size=32>\tThe size of each packet burst in number of packets.\n"
    "\n"
    "    -c\t\t\tGenerate actual data/Calculate a checksum on each received payload.\n"
    "\t\t\tThis ensures that each byte in a message payload is actually touched.\n"
    "\n"
    "    -R <interf_name>\tUse RAW sockets instead of UDP ones (default are UDP sockets).\n"
    "\t\t\tThe argument is the name of the interface to use.\n"
    "\t\t\tValid only for sockets-based programs, not DPDK ones.\n"
    "\n"
    "    -B\t\t\tUse blocking sockets instead of nonblocking ones.\n"
    "\t\t\tValid only for sockets-based programs, not DPDK ones.\n"
    "\n"
    "    -m\t\t\tUse SENDMMSG/RECVMMSG API to exchange packets.\n"
    "\t\t\tValid only for sockets-based programs, not DPDK ones.\n"
    "\n"
    "    -s\t\t\tRun in silent mode. Prints no stats until the termination SIGINT is received.\n"
    "\n"
    "\n"
    "ADDRESSES\n"
    "\n"
    "\tThe application expects some addresses to be given as argument in a specific order.\n"
    "\tThe following is the list of each address expected.\n"
    "\tDefault values will be used if not all addresses are provided and not all parameters are always used.\n"
    "\n"
    "\tSince the program will communicate with another application, we will refer as this\n"
    "\tprogram as the LOCAL application and use the REMOTE term to indicate the other one.\n"
    "\n"
    "\t<LOCAL_IP> <LOCAL_MAC> <REMOTE_IP> <REMOTE_MAC> \n"
    "\n"
)


class SockType(enum.IntEnum):
    """The kind of socket a program exchanges packets through."""

    NONE = 0
    DGRAM = 0x1
    RAW = 0x2
    DPDK = 0x4


class Direction(enum.IntFlag):
    """Whether a program sends, receives, or both."""

    RX = 0x1
    TX = 0x2
    TXRX = 0x3


class UsageError(Exception):
    """The command line could not be parsed; the message is the usage text."""


def parse_mac(text):
    """Parse ``aa:bb:cc:dd:ee:ff`` into six bytes; raise ValueError otherwise."""
    match = _MAC_RE.match(text)
    if match is None:
        raise ValueError(f"invalid MAC address {text!r}")
    return bytes(int(group, 16) & 0xFF for group in match.groups())


def _mac_or_zero(text):
    try:
        return parse_mac(text)
    except ValueError:
        return bytes(ETHER_ADDR_LEN)


def _atoi(text):
    match = _ATOI_RE.match(text)
    return int(match.group(1)) if match else 0


@dataclasses.dataclass
class Config:
    """Everything a program needs to know to run."""

    rate: int = DEFAULT_RATE
    pkt_size: int = DEFAULT_PKT_SIZE
    bst_size: int = DEFAULT_BST_SIZE
    socktype: SockType = SockType.NONE
    local_port: int = 0
    remote_port: int = 0
    local_mac: str = ""
    remote_mac: str = ""
    local_ip: str = ""
    remote_ip: str = ""
    local_interf: str = "eth0"
    use_block: bool = False
    use_mmsg: bool = False
    silent: bool = False
    touch_data: bool = False
    direction: Direction = Direction.TXRX

    @property
    def local_hwaddr(self):
        """The local MAC address as bytes, all zeros if it does not parse."""
        return _mac_or_zero(self.local_mac)

    @property
    def remote_hwaddr(self):
        """The remote MAC address as bytes, all zeros if it does not parse."""
        return _mac_or_zero(self.remote_mac)

    @property
    def local_addr(self):
        """The local (ip, port) pair."""
        return (self.local_ip, self.local_port)

    @property
    def remote_addr(self):
        """The remote (ip, port) pair."""
        return (self.remote_ip, self.remote_port)

    @property
    def buffer_layout(self):
        """(payload length, buffer length, payload offset) for the socket type."""
        payload_len = payload_size(self.pkt_size)
        if self.socktype == SockType.RAW:
            return payload_len, OFFSET_PKT_PAYLOAD + payload_len, OFFSET_PKT_PAYLOAD
        return payload_len, payload_len, 0


def usage(cmdname):
    """Return the usage text for the command ``cmdname``."""
    return _USAGE.format(cmd=cmdname)


def _apply_option(config, opt, value):
    if opt == "r":
        config.rate = _atoi(value)
    elif opt == "p":
        config.pkt_size = _atoi(value)
    elif opt == "b":
        config.bst_size = _atoi(value)
    elif opt == "R":
        config.socktype = SockType.RAW
        config.local_interf = value[:_IFNAME_MAX]
    elif opt == "B":
        config.use_block = True
    elif opt == "c":
        config.touch_data = True
    elif opt == "m":
        config.use_mmsg = True
    elif opt == "s":
        config.silent = True


def _parse_options(argv, index, config):
    """Consume options starting at ``index``; return the first index not consumed."""
    cmdname = argv[0]
    while index < len(argv):
        arg = argv[index]
        if arg == "--" or arg == "-" or not arg.startswith("-"):
            return index
        chars = arg[1:]
        for pos, opt in enumerate(chars):
            if opt in "rpbR":
                value = chars[pos + 1:]
                if not value:
                    index += 1
                    if index >= len(argv):
                        raise UsageError(usage(cmdname))
                    value = argv[index]
                _apply_option(config, opt, value)
                break
            if opt in "cmsB":
                _apply_option(config, opt, None)
            else:
                raise UsageError(usage(cmdname))
        index += 1
    return index


_ADDRESS_FIELDS = ("local_ip", "local_mac", "remote_ip", "remote_mac")


def parse_parameters(argv, config):
    """Fill ``config`` from ``argv`` (``argv[0]`` is the command name).

    Options and positional addresses may alternate until ``--``.  Returns the
    arguments that follow ``--``, or an empty list if there is none.
    Raises UsageError on an unknown option or a missing option argument.
    """
    argv = list(argv)
    index = 1
    position = 0
    while index < len(argv) and argv[index] != "--":
        start = index
        index = _parse_options(argv, index, config)
        while index < len(argv) and not argv[index].startswith("-"):
            if position < len(_ADDRESS_FIELDS):
                setattr(config, _ADDRESS_FIELDS[position], argv[index])
            position += 1
            index += 1
        if index == start:
            raise UsageError(usage(argv[0]))
    return argv[index + 1:] if index < len(argv) else []


def _create_dgram(config, nonblocking, connect):
    sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    try:
        sock.setblocking(not nonblocking)
        sock.bind(config.local_addr)
        if connect:
            sock.connect(config.remote_addr)
    except OSError:
        sock.close()
        raise
    return sock


def _create_raw(config, nonblocking):
    family = getattr(socket, "AF_PACKET", None)
    if family is None:
        raise OSError("raw packet sockets are not supported on this platform")
    sock = socket.socket(family, socket.SOCK_RAW, socket.htons(_ETH_P_ALL))
    try:
        sock.bind((config.local_interf, _ETH_P_ALL))
        sock.setblocking(not nonblocking)
    except OSError:
        sock.close()
        raise
    return sock


def create_socket(config, nonblocking, connect):
    """Open, bind and optionally connect the socket ``config`` asks for."""
    if config.socktype == SockType.DGRAM:
        return _create_dgram(config, nonblocking, connect)
    if config.socktype == SockType.RAW:
        return _create_raw(config, nonblocking)
    raise ValueError(f"cannot create a socket of type {config.socktype!r}")


def set_send_buffer(sock, size):
    """Set the socket send buffer and return the size actually granted.

    The kernel doubles the requested value; a warning is printed when the
    granted buffer is smaller than requested.
    """
    sock.setsockopt(socket.SOL_SOCKET, socket.SO_SNDBUF, size)
    granted = sock.getsockopt(socket.SOL_SOCKET, socket.SO_SNDBUF)
    if granted < 2 * size:
        print(
            f"WARN: socket send buffer too small: {granted} < 2*{size} !",
            file=sys.stderr,
        )
    return granted // 2


def format_config(config):
    """Return the configuration report printed at start-up."""
    lines = [
        "CONFIGURATION",
        _SEPARATOR,
        f"rate (pps)\t{config.rate}",
        f"pkt size\t{config.pkt_size}",
        f"bst size\t{config.bst_size}",
        f"sock type\t{'udp' if config.socktype == SockType.DGRAM else 'raw'}",
        f"port local\t{config.local_port}",
        f"port remote\t{config.remote_port}",
        f"ip local\t{config.local_ip}",
        f"ip remote\t{config.remote_ip}",
        f"mac local\t{config.local_mac}",
        f"mac remote\t{config.remote_mac}",
    ]
    flags = (
        ("using mmmsg API\t", config.use_mmsg),
        ("silent\t\t", config.silent),
        ("touch data\t", config.touch_data),
    )
    lines.extend(label + ("yes" if flag else "no") for label, flag in flags)
    lines.append(_SEPARATOR)
    return "\n".join(lines) + "\n"


def _run_socket_program(argv, name, defaults, kind, connect, loop):
    """Parse ``argv``, open the socket and run ``loop`` until interrupted.

    ``defaults`` holds the program's own Config field values.  Returns the
    exit status; on an interrupt the saved statistics are printed.
    """
    argv = [name, *sys.argv[1:]] if argv is None else list(argv)
    config = Config(socktype=SockType.DGRAM, **defaults)
    try:
        parse_parameters(argv, config)
    except UsageError as exc:
        print(exc, file=sys.stderr, end="")
        return 1

    print(format_config(config), end="")

    try:
        sock = create_socket(config, True, connect)
    except (OSError, ValueError) as exc:
        print(f"Could not create socket: {exc}", file=sys.stderr)
        return 1

    clock = TscClock()
    history = StatsHistory(kind)
    with sock:
        try:
            loop(config, sock, clock, history, threading.Event())
        except KeyboardInterrupt:
            print("\nCaught signal Interrupt!")
            print(_SEPARATOR)
            print("FINAL STATS")
            history.print_all(clock.hz)
        except ValueError as exc:
            print(f"ERR: {exc}", file=sys.stderr)
            return 1
    return 0