"""Command dispatcher: picks the program to run by its name."""

import sys

from pktbench.client import client_body
from pktbench.clientst import clientst_body
from pktbench.recv import recv_body
from pktbench.send import send_body
from pktbench.server import server_body

BANNER = "-------- TESTAPP OLD VERSION --------"

# The dpdk-* names run the same programs as the socket-based ones.
COMMANDS = {
    "server": server_body,
    "client": client_body,
    "clientst": clientst_body,
    "send": send_body,
    "recv": recv_body,
    "dpdk-server": server_body,
    "dpdk-client": client_body,
    "dpdk-clientst": clientst_body,
    "dpdk-send": send_body,
    "dpdk-recv": recv_body,
}


def run_command(argv):
    """Run the command named by ``argv[0]`` with ``argv``; return its exit status."""
    argv = list(argv)
    if not argv:
        raise ValueError("no command given")
    body = COMMANDS.get(argv[0])
    if body is None:
        print(f"Wrong command name: {argv[0]}.", file=sys.stderr)
        return 1
    return body(argv)


def main(argv=None):
    """Entry point; ``argv`` holds the arguments after the program name."""
    argv = sys.argv[1:] if argv is None else list(argv)
    if not argv:
        return 0
    print(BANNER)
    return run_command(argv)


if __name__ == "__main__":
    sys.exit(main())