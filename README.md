# pktbench

`pktbench` is a small network benchmark. It sends UDP traffic between two
endpoints at a fixed rate and reports either throughput (packets per second)
or round-trip latency. It works over ordinary UDP sockets or over a raw packet
socket bound to an interface. With a raw socket it builds the Ethernet, IPv4
and UDP headers itself. It uses only the standard library.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Commands

One entry point runs everything. The first argument chooses the role:

```
pktbench <command> [options] [LOCAL_IP LOCAL_MAC REMOTE_IP REMOTE_MAC] [-- ...]
```

| command    | role                                                                      |
|------------|---------------------------------------------------------------------------|
| `send`     | sends bursts of packets at the requested rate and reports Tx-pps          |
| `recv`     | counts the packets it receives and reports Rx-pps                         |
| `server`   | sends every packet it receives back to its sender                         |
| `client`   | sends timestamped bursts and measures the delay of the echoed packets     |
| `clientst` | sends one timestamped packet at a time and waits for it to come back      |

The names `dpdk-send`, `dpdk-recv`, `dpdk-server`, `dpdk-client` and
`dpdk-clientst` are aliases that run the same roles.

Before it runs a command, the program prints the banner line
`-------- TESTAPP OLD VERSION --------`. An unknown command name prints
`Wrong command name: <name>.` to standard error and exits with status 1. If no
command is given, the program exits with status 0 and does nothing.

The default ports are:

| role       | local port | remote port |
|------------|------------|-------------|
| `send`     | 13994      | 16994       |
| `recv`     | 16994      | 13994       |
| `server`   | 16196      | 16803       |
| `client`   | 16803      | 16196       |
| `clientst` | 16803      | 16196       |

The default IP address is `127.0.0.1` for every role. The default MAC
addresses are `02:00:00:00:00:01` and `02:00:00:00:00:02`.

### Options

Options and address arguments may be mixed in any order, and short options
may be grouped (`-cs`). Everything after `--` is ignored.

| option       | meaning                                                                          |
|--------------|----------------------------------------------------------------------------------|
| `-r <rate>`  | sending rate in packets per second (default 10000000)                            |
| `-p <size>`  | frame size in bytes, headers included (default 64)                               |
| `-b <size>`  | burst size in packets (default 32)                                               |
| `-c`         | fill each outgoing payload with checksummed dummy data and sum every received payload |
| `-R <iface>` | use a raw packet socket on the named interface instead of a UDP socket           |
| `-B`         | accepted and recorded, but sockets are always opened non-blocking                |
| `-m`         | batched mode: handle a whole burst per loop iteration (see below)                |
| `-s`         | silent: print no periodic lines                                                  |

An unknown option, or an option that is missing its argument, prints the
usage text to standard error and exits with status 1.

In batched mode `send` and `client` prepare every packet of a burst before
they send any of them. `recv`, `server` and the `client` receiver each read up
to one burst of packets per iteration. Each packet still goes out or comes in
through its own socket call.

### Addresses

The address arguments come in a fixed order:
`LOCAL_IP LOCAL_MAC REMOTE_IP REMOTE_MAC`. Any that you leave out keep the
role's defaults, and any beyond the fourth are ignored. The MAC addresses are
used only in the headers built for raw sockets.

## Examples

A throughput test on one machine, with each command in its own terminal:

```
pktbench recv
pktbench send -r 100000 -b 32
```

A latency test with payload data:

```
pktbench server -c
pktbench client -c -r 10000
```

A ping-pong latency test over a raw socket, with explicit addresses:

```
pktbench clientst -R eth0 10.0.0.1 02:00:00:00:00:01 10.0.0.2 02:00:00:00:00:02
```

## Output

Each command first prints its configuration. After that, unless `-s` was
given, `send`, `recv`, `client` and `clientst` print one line per second:

```
Tx-pps: <sent> <dropped> <total>
Rx-pps: <received>
Avg delay (us) and rx count: <microseconds> <packets>
```

`server` prints nothing while it runs.

Time is measured with `time.perf_counter_ns`. `client` counts an echo that
arrives more than 0.1 s late as lost and prints an `ERR:` line for it.
`clientst` gives up waiting for an echo after 10 ms, and it rejects any echo
whose timestamp does not match the last packet it sent.

Press Ctrl-C to stop. `send`, `recv`, `client` and `clientst` then print
`FINAL STATS` and the last 64 per-second records. If no records were saved,
they print `No stats to be printed.` instead.

## Library modules

- `pktbench.constants`: defaults, header sizes and frame offsets, plus
  `payload_size` and `data_size`.
- `pktbench.payload`: `produce_data`, `fill_data`, `consume_data`,
  `put_u64` and `get_u64`. These handle checksummed dummy data and big-endian
  64-bit fields.
- `pktbench.headers`: `PacketHeader` (with `pack` and `unpack`),
  `build_header`, `ipv4_checksum`, `swap_addresses` and `check_incoming`.
- `pktbench.stats`: `StatsKind`, `TxStats`, `RxStats`, `DelayStats`,
  `format_stats` and `StatsHistory`, a bounded history of 64 records.
- `pktbench.timestamp`: `TscClock` and `run_updater`.
- `pktbench.config`: `Config`, `SockType`, `Direction`, `UsageError`,
  `parse_parameters`, `parse_mac`, `usage`, `create_socket`, `set_send_buffer`
  and `format_config`.
- `pktbench.send`, `pktbench.recv`, `pktbench.server`, `pktbench.client`,
  `pktbench.clientst`: the loops and command bodies for each role.
- `pktbench.cli`: `main` and `run_command`.

## Limitations

- There is no kernel-bypass packet I/O. The `dpdk-*` names run the same
  socket-based programs as the plain names.
- Batched mode does not use `sendmmsg`/`recvmmsg`.
- Raw packet sockets need `AF_PACKET`, so they work on Linux only and
  normally require elevated privileges (`CAP_NET_RAW`).
- Python cannot reach the packet rates of a compiled tool. The numbers are
  useful for comparing runs with each other, not as line-rate measurements.