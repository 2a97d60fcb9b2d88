import socket

import pytest

from pktbench.config import (
    Config,
    Direction,
    SockType,
    UsageError,
    create_socket,
    format_config,
    parse_mac,
    parse_parameters,
    set_send_buffer,
    usage,
)
from pktbench.constants import DEFAULT_BST_SIZE, DEFAULT_PKT_SIZE, DEFAULT_RATE


def test_config_defaults():
    conf = Config()
    assert conf.rate == DEFAULT_RATE
    assert conf.pkt_size == DEFAULT_PKT_SIZE
    assert conf.bst_size == DEFAULT_BST_SIZE
    assert conf.socktype is SockType.NONE
    assert conf.local_interf == "eth0"
    assert conf.direction == Direction.TXRX
    assert not (conf.use_block or conf.use_mmsg or conf.silent or conf.touch_data)


def test_default_direction_is_both_ways():
    conf = Config()
    assert conf.direction == Direction.RX | Direction.TX
    assert Direction.RX in conf.direction
    assert Direction.TX in conf.direction


def test_parse_mac_valid():
    assert parse_mac("02:00:00:00:00:aa") == bytes([0x02, 0, 0, 0, 0, 0xAA])
    assert parse_mac("02:00:00:00:00:AA") == parse_mac("02:00:00:00:00:aa")


@pytest.mark.parametrize("text", ["", "02:00:00", "zz:00:00:00:00:01", "nonsense"])
def test_parse_mac_invalid(text):
    with pytest.raises(ValueError):
        parse_mac(text)


def test_invalid_mac_in_config_gives_zero_bytes():
    conf = Config(local_mac="bad", remote_mac="02:00:00:00:00:01")
    assert conf.local_hwaddr == bytes(6)
    assert conf.remote_hwaddr == parse_mac("02:00:00:00:00:01")


def test_parse_options():
    conf = Config()
    rest = parse_parameters(["prog", "-r", "500", "-p256", "-b", "8", "-cms", "-B"], conf)
    assert rest == []
    assert conf.rate == 500
    assert conf.pkt_size == 256
    assert conf.bst_size == 8
    assert conf.touch_data and conf.use_mmsg and conf.silent and conf.use_block


def test_parse_raw_option_sets_interface():
    conf = Config(socktype=SockType.DGRAM)
    parse_parameters(["prog", "-R", "lo"], conf)
    assert conf.socktype is SockType.RAW
    assert conf.local_interf == "lo"


def test_parse_positional_addresses_in_order():
    conf = Config()
    parse_parameters(
        ["prog", "10.0.0.1", "02:00:00:00:00:01", "-s", "10.0.0.2", "02:00:00:00:00:02", "extra"],
        conf,
    )
    assert conf.local_ip == "10.0.0.1"
    assert conf.local_mac == "02:00:00:00:00:01"
    assert conf.remote_ip == "10.0.0.2"
    assert conf.remote_mac == "02:00:00:00:00:02"
    assert conf.silent


def test_parse_stops_at_double_dash():
    conf = Config()
    rest = parse_parameters(["prog", "-c", "--", "-l", "0-3", "-s"], conf)
    assert rest == ["-l", "0-3", "-s"]
    assert conf.touch_data
    assert not conf.silent


def test_parse_non_numeric_rate_is_zero():
    conf = Config()
    parse_parameters(["prog", "-r", "abc"], conf)
    assert conf.rate == 0


def test_unknown_option_raises_usage():
    with pytest.raises(UsageError) as info:
        parse_parameters(["prog", "-x"], Config())
    assert str(info.value) == usage("prog")


def test_missing_option_argument_raises_usage():
    with pytest.raises(UsageError):
        parse_parameters(["prog", "-r"], Config())


def test_usage_mentions_command():
    text = usage("mytool")
    assert text.startswith("USAGE\n\tmytool ")
    assert "<LOCAL_IP> <LOCAL_MAC> <REMOTE_IP> <REMOTE_MAC>" in text


def test_format_config():
    conf = Config(socktype=SockType.DGRAM, local_ip="127.0.0.1", use_mmsg=True)
    lines = format_config(conf).splitlines()
    assert lines[0] == "CONFIGURATION"
    assert f"rate (pps)\t{DEFAULT_RATE}" in lines
    assert "sock type\tudp" in lines
    assert "ip local\t127.0.0.1" in lines
    assert "using mmmsg API\tyes" in lines
    assert "silent\t\tno" in lines
    assert lines[-1] == lines[1]


def test_format_config_raw():
    assert "sock type\traw" in format_config(Config(socktype=SockType.RAW))


def test_create_socket_rejects_none():
    with pytest.raises(ValueError):
        create_socket(Config(), True, False)


def test_create_dgram_sockets_exchange_data():
    server_conf = Config(socktype=SockType.DGRAM, local_ip="127.0.0.1", local_port=0)
    server = create_socket(server_conf, False, False)
    try:
        port = server.getsockname()[1]
        client_conf = Config(
            socktype=SockType.DGRAM, local_ip="127.0.0.1", local_port=0,
            remote_ip="127.0.0.1", remote_port=port,
        )
        client = create_socket(client_conf, True, True)
        try:
            assert client.getblocking() is False
            assert client.getpeername() == ("127.0.0.1", port)
            client.send(b"ping")
            server.settimeout(2)
            data, _ = server.recvfrom(16)
            assert data == b"ping"
        finally:
            client.close()
    finally:
        server.close()


def test_create_dgram_bad_address_raises():
    conf = Config(socktype=SockType.DGRAM, local_ip="not-an-ip", local_port=0)
    with pytest.raises(OSError):
        create_socket(conf, True, False)


def test_set_send_buffer_reports_half_of_kernel_value():
    with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sock:
        granted = set_send_buffer(sock, 65536)
        assert granted > 0
        assert granted == sock.getsockopt(socket.SOL_SOCKET, socket.SO_SNDBUF) // 2