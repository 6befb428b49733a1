"""Argument registration for the ``hopen`` command."""
from __future__ import annotations

import argparse

from hopen.core.web_server.daemon import INTERNAL_DIR_FLAG, INTERNAL_PORT_FLAG, INTERNAL_SERVE_FLAG


def register_args(parser: argparse.ArgumentParser) -> None:
    """Register the user-facing flags plus the hidden daemon flags."""
    parser.add_argument(
        "filename",
        nargs="?",
        help="HTML file to open, relative to the current directory (requires a site root)",
    )
    parser.add_argument(
        "-r",
        "--root",
        dest="site_home",
        metavar="SITE_HOME",
        help="Site root to serve (overrides HOPEN_SITE_HOME)",
    )
    parser.add_argument(
        "-e",
        "--exit",
        action="store_true",
        help="Stop the running server and exit",
    )
    parser.add_argument(
        "-f",
        "--foreground",
        action="store_true",
        help="Run the server in the foreground (blocks the terminal)",
    )
    parser.add_argument(
        "-m",
        "--menu",
        action="store_true",
        help="Show an interactive menu instead of reusing or starting directly",
    )
    parser.add_argument(
        "-p",
        "--prompt",
        action="store_true",
        help="Ask before opening the browser",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log debug output to stderr",
    )
    add_internal_args(parser)


def add_internal_args(parser: argparse.ArgumentParser) -> None:
    # Used only when hopen re-invokes itself as a background server.
    parser.add_argument(INTERNAL_SERVE_FLAG, dest="internal_serve", action="store_true", help=argparse.SUPPRESS)
    parser.add_argument(INTERNAL_PORT_FLAG, dest="internal_port", type=int, help=argparse.SUPPRESS)
    parser.add_argument(INTERNAL_DIR_FLAG, dest="internal_dir", help=argparse.SUPPRESS)


__all__ = ["register_args", "add_internal_args"]
