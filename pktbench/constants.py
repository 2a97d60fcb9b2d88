"""Default parameters, addresses and packet layout offsets."""

# Default parameter values
DEFAULT_RATE = 10_000_000  # packets per second
DEFAULT_PKT_SIZE = 64  # bytes
DEFAULT_BST_SIZE = 32  # packets per burst

MIN_PKT_SIZE = 64
MAX_PKT_SIZE = 1500

# Default UDP ports
SEND_PORT = 13994
RECV_PORT = 16994
SERVER_PORT = 16196
CLIENT_PORT = 16803

# Default IPv4 addresses
SEND_ADDR_IP = "127.0.0.1"
RECV_ADDR_IP = "127.0.0.1"
SERVER_ADDR_IP = "127.0.0.1"
CLIENT_ADDR_IP = "127.0.0.1"

# Default MAC addresses (locally administered)
SEND_ADDR_MAC = "02:00:00:00:00:02"
RECV_ADDR_MAC = "02:00:00:00:00:01"
SERVER_ADDR_MAC = "02:00:00:00:00:02"
CLIENT_ADDR_MAC = "02:00:00:00:00:01"

# IPv4 header defaults
IP_DEFAULT_TTL = 64
IP_VERSION = 0x40
IP_HEADER_LEN = 0x05  # five 32-bit words
IP_VERSION_HDRLEN = IP_VERSION | IP_HEADER_LEN
IPPROTO_UDP = 17
ETHER_TYPE_IPV4 = 0x0800

# Header sizes
ETHER_ADDR_LEN = 6
ETHER_HDR_LEN = 14
IPV4_HDR_LEN = 20
UDP_HDR_LEN = 8
TSC_SIZE = 8  # size of the timestamp stored in each payload

# Offsets inside a payload
OFFSET_PAYLOAD_TIMESTAMP = 0
OFFSET_PAYLOAD_DATA = OFFSET_PAYLOAD_TIMESTAMP + TSC_SIZE

# Offsets inside a whole frame
OFFSET_PKT_ETHER = 0
OFFSET_PKT_IPV4 = OFFSET_PKT_ETHER + ETHER_HDR_LEN
OFFSET_PKT_UDP = OFFSET_PKT_IPV4 + IPV4_HDR_LEN
OFFSET_PKT_PAYLOAD = OFFSET_PKT_UDP + UDP_HDR_LEN
OFFSET_PKT_TIMESTAMP = OFFSET_PKT_PAYLOAD + OFFSET_PAYLOAD_TIMESTAMP
OFFSET_PKT_DATA = OFFSET_PKT_PAYLOAD + OFFSET_PAYLOAD_DATA

PKT_HEADER_SIZE = OFFSET_PKT_PAYLOAD - OFFSET_PKT_ETHER


def payload_size(pkt_size):
    """Return the UDP payload size of a frame of ``pkt_size`` bytes."""
    size = pkt_size - PKT_HEADER_SIZE
    if size < 0:
        raise ValueError(
            f"packet size {pkt_size} is smaller than the headers ({PKT_HEADER_SIZE})"
        )
    return size


def data_size(pkt_size):
    """Return the size of the dummy data that follows the payload timestamp."""
    size = payload_size(pkt_size) - TSC_SIZE
    if size < 0:
        raise ValueError(f"packet size {pkt_size} leaves no room for the timestamp")
    return size