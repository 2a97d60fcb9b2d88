"""Ethernet, IPv4 and UDP header building, swapping and checking."""

import dataclasses
import ipaddress
import struct

from pktbench.constants import (
    ETHER_ADDR_LEN,
    ETHER_TYPE_IPV4,
    IP_DEFAULT_TTL,
    IP_VERSION_HDRLEN,
    IPPROTO_UDP,
    IPV4_HDR_LEN,
    OFFSET_PKT_IPV4,
    OFFSET_PKT_UDP,
    PKT_HEADER_SIZE,
    UDP_HDR_LEN,
)

_HEADER = struct.Struct("!6s6sHBBHHHBBHIIHHHH")


def _ipv4(value):
    return ipaddress.IPv4Address(value)


@dataclasses.dataclass(frozen=True)
class PacketHeader:
    """The Ethernet, IPv4 and UDP headers in front of every payload."""

    dst_mac: bytes = bytes(ETHER_ADDR_LEN)
    src_mac: bytes = bytes(ETHER_ADDR_LEN)
    ether_type: int = ETHER_TYPE_IPV4
    version_ihl: int = IP_VERSION_HDRLEN
    type_of_service: int = 0
    total_length: int = 0
    packet_id: int = 0
    fragment_offset: int = 0
    ttl: int = IP_DEFAULT_TTL
    protocol: int = IPPROTO_UDP
    checksum: int = 0
    src_ip: ipaddress.IPv4Address = ipaddress.IPv4Address(0)
    dst_ip: ipaddress.IPv4Address = ipaddress.IPv4Address(0)
    src_port: int = 0
    dst_port: int = 0
    udp_length: int = 0
    udp_checksum: int = 0

    def pack(self):
        """Return the headers in wire format."""
        return _HEADER.pack(
            self.dst_mac, self.src_mac, self.ether_type,
            self.version_ihl, self.type_of_service, self.total_length,
            self.packet_id, self.fragment_offset, self.ttl, self.protocol,
            self.checksum, int(self.src_ip), int(self.dst_ip),
            self.src_port, self.dst_port, self.udp_length, self.udp_checksum,
        )

    @classmethod
    def unpack(cls, data):
        """Parse the headers at the start of a frame."""
        if len(data) < PKT_HEADER_SIZE:
            raise ValueError(
                f"frame of {len(data)} bytes is shorter than the headers ({PKT_HEADER_SIZE})"
            )
        fields = list(_HEADER.unpack_from(data, 0))
        fields[11] = _ipv4(fields[11])
        fields[12] = _ipv4(fields[12])
        return cls(*fields)


def ipv4_checksum(header_bytes):
    """Return the Internet checksum of ``header_bytes``.

    Computed over a header whose checksum field is zero, it gives the value to
    store; computed over a header with a correct checksum, it gives zero.
    """
    data = bytes(header_bytes)
    if len(data) % 2:
        data += b"\x00"
    total = sum(struct.unpack(f"!{len(data) // 2}H", data))
    while total >> 16:
        total = (total & 0xFFFF) + (total >> 16)
    return ~total & 0xFFFF


def _check_mac(mac):
    mac = bytes(mac)
    if len(mac) != ETHER_ADDR_LEN:
        raise ValueError(f"MAC address must be {ETHER_ADDR_LEN} bytes, got {len(mac)}")
    return mac


def build_header(local_mac, local_ip, local_port, remote_mac, remote_ip,
                 remote_port, payload_size):
    """Build the headers of a packet sent from the local to the remote end."""
    udp_length = payload_size + UDP_HDR_LEN
    total_length = udp_length + IPV4_HDR_LEN
    if payload_size < 0 or total_length > 0xFFFF:
        raise ValueError(f"invalid payload size {payload_size}")
    for port in (local_port, remote_port):
        if not 0 <= port <= 0xFFFF:
            raise ValueError(f"invalid UDP port {port}")
    header = PacketHeader(
        dst_mac=_check_mac(remote_mac),
        src_mac=_check_mac(local_mac),
        total_length=total_length,
        src_ip=_ipv4(local_ip),
        dst_ip=_ipv4(remote_ip),
        src_port=local_port,
        dst_port=remote_port,
        udp_length=udp_length,
    )
    ip_bytes = header.pack()[OFFSET_PKT_IPV4:OFFSET_PKT_UDP]
    return dataclasses.replace(header, checksum=ipv4_checksum(ip_bytes))


def swap_addresses(frame):
    """Swap source and destination MAC, IP and port in ``frame`` in place."""
    if len(frame) < PKT_HEADER_SIZE:
        raise ValueError(
            f"frame of {len(frame)} bytes is shorter than the headers ({PKT_HEADER_SIZE})"
        )
    frame[0:6], frame[6:12] = bytes(frame[6:12]), bytes(frame[0:6])
    ip_src = OFFSET_PKT_IPV4 + 12
    ip_dst = ip_src + 4
    frame[ip_src:ip_dst], frame[ip_dst:ip_dst + 4] = (
        bytes(frame[ip_dst:ip_dst + 4]), bytes(frame[ip_src:ip_dst]))
    udp_dst = OFFSET_PKT_UDP + 2
    frame[OFFSET_PKT_UDP:udp_dst], frame[udp_dst:udp_dst + 2] = (
        bytes(frame[udp_dst:udp_dst + 2]), bytes(frame[OFFSET_PKT_UDP:udp_dst]))


def check_incoming(received, expected):
    """Tell whether ``received`` is addressed where ``expected`` says."""
    return (
        received.dst_mac == expected.dst_mac
        and received.dst_ip == expected.dst_ip
        and received.dst_port == expected.dst_port
    )