"""Entry point for the wsh CLI."""

from __future__ import annotations

import argparse
import logging
import os
import sys

from wsh import __version__
from wsh.config import load_config
from wsh.shell import CommandError, Shell, ShellExit

LOG_FILE_ENV_VAR = "WSH_LOG_FILE"


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="wsh",
        description="A small interactive shell with tab completion and history",
    )
    parser.add_argument("-f", "--config", help="Path to a JSON config file (default: ~/.wsh.json)")
    parser.add_argument("-c", "--command", help="Run a single command and exit")
    parser.add_argument("-i", "--interactive", action="store_true", help="Start the interactive prompt")
    parser.add_argument(
        "--log-level",
        default="warning",
        choices=["debug", "info", "warning", "error"],
    )
    parser.add_argument(
        "--log-file",
        default=os.environ.get(LOG_FILE_ENV_VAR),
        help=f"Write logs to this file instead of stderr (default: ${LOG_FILE_ENV_VAR})",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser.parse_args(argv)


def setup_logging(level: str, log_file: str | None = None) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        filename=log_file,
    )


def run_command(shell: Shell, command: str) -> int:
    """Run *command* without the interactive prompt and return its status."""
    try:
        shell.execute_command(command)
    except ShellExit as e:
        return e.status
    except CommandError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    setup_logging(args.log_level, args.log_file)

    config = load_config(args.config)
    shell = Shell(config)

    if args.command is not None:
        return run_command(shell, args.command)

    try:
        return shell.run_interactive()
    except OSError as e:
        print(f"Error: terminal I/O failed: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
