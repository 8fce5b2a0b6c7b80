"""
curlbot CLI - Connect the thinking engine to a match server.

Usage:
    curlbot <host> <port>

Options:
    --name NAME          Name sent in dc_ok (env CURLBOT_NAME)
    --log-level LEVEL    Logging level (env CURLBOT_LOG_LEVEL)

Exit status is 1 for a bad invocation. Every failure after that
(protocol, transport, malformed message) is logged to standard error
and the process exits 0.
"""

import argparse
import logging
import os
import socket
import sys

from .bots import TurnPlanner
from .session import ClientConfig, GameLoop

logger = logging.getLogger("curlbot")

CURLBOT_NAME = os.getenv("CURLBOT_NAME", "curlbot")
CURLBOT_LOG_LEVEL = os.getenv("CURLBOT_LOG_LEVEL", "INFO")


class _ArgumentParser(argparse.ArgumentParser):
    """Argument parser that exits 1 on a usage error."""

    def error(self, message):
        self.print_usage(sys.stderr)
        sys.stderr.write(f"{self.prog}: error: {message}\n")
        sys.exit(1)


def build_parser() -> argparse.ArgumentParser:
    parser = _ArgumentParser(
        description="curlbot - Digital curling thinking engine",
        prog="curlbot",
    )
    parser.add_argument("host", help="Match server host")
    parser.add_argument("port", help="Match server port")
    parser.add_argument("--name", default=CURLBOT_NAME, help="Name sent in dc_ok")
    parser.add_argument("--log-level", default=CURLBOT_LOG_LEVEL, help="Logging level")
    return parser


def run(host: str, port: str, config: ClientConfig) -> int:
    """
    Play one match against the server at host:port.

    This is the single error boundary: any failure is logged and the
    exit status is still 0.
    """
    try:
        with socket.create_connection((host, int(port))) as sock:
            reader = sock.makefile("r", encoding="utf-8", newline="\n")
            writer = sock.makefile("w", encoding="utf-8", newline="\n")
            with reader, writer:
                GameLoop(reader, writer, TurnPlanner(), config).run()
    except Exception:
        logger.exception("Exception")
    return 0


def main(argv=None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    level = logging.getLevelName(args.log_level.upper())
    if not isinstance(level, int):
        parser.error(f"unknown log level {args.log_level!r}")

    logging.basicConfig(
        stream=sys.stderr,
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    return run(args.host, args.port, ClientConfig(name=args.name))


if __name__ == "__main__":
    sys.exit(main())
