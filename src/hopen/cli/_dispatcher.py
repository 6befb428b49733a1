"""
Entry point for the ``hopen`` command.

Parses arguments, configures logging from the layered config, wires the
lifecycle's collaborators and maps errors to exit codes:

- 0: success (including cancelled menus and ``-e`` with nothing running)
- 1: any :class:`~hopen.core.exceptions.HopenError`
- 130: interrupted with Ctrl+C
"""
from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import Optional

from hopen.core.config.domains import LoggingConfig, ServerConfig
from hopen.core.exceptions import HopenError
from hopen.core.process import ProcessController, default_inspector
from hopen.core.stdlib_logging import configure_logging
from hopen.core.web_server.lifecycle import Invocation, LifecycleController
from hopen.core.web_server.probe import PortProbe
from hopen.core.web_server.server import ServerProcess

from ._args import register_args
from ._output import ConsoleUI, print_error, print_hopen_error

logger = logging.getLogger(__name__)

SITE_HOME_ENV = "HOPEN_SITE_HOME"

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_INTERRUPTED = 130


def _get_version() -> str:
    from hopen import __version__

    return __version__


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="hopen",
        description="Serve a directory of HTML files on localhost and open it in the browser",
        epilog=(
            "Without -r or HOPEN_SITE_HOME the current directory is served.\n"
            "With a site root the whole site is served and the URL points at the\n"
            "current directory (plus filename) inside it."
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {_get_version()}",
    )
    register_args(parser)
    return parser


def resolve_site_root(args: argparse.Namespace, server_cfg: ServerConfig) -> Optional[Path]:
    """``-r`` wins, then ``HOPEN_SITE_HOME``, then ``server.site_home``."""
    for candidate in (
        getattr(args, "site_home", None),
        os.environ.get(SITE_HOME_ENV),
        server_cfg.site_home,
    ):
        if candidate and str(candidate).strip():
            return Path(str(candidate).strip()).expanduser()
    return None


def _configure_logging(args: argparse.Namespace) -> None:
    log_cfg = LoggingConfig()
    level = "DEBUG" if args.verbose else log_cfg.level
    # The background child writes to its own per-PID log via stderr.
    log_path = None if args.internal_serve else log_cfg.path
    if args.internal_serve and level == "WARNING":
        level = "INFO"
    configure_logging(level=level, log_path=log_path, fmt=log_cfg.format)


def _run_internal_serve(args: argparse.Namespace, server_cfg: ServerConfig) -> int:
    if args.internal_port is None or not args.internal_dir:
        print_error("--internal-serve requires --internal-port and --internal-dir")
        return EXIT_ERROR
    ui = ConsoleUI()
    server = ServerProcess(server_cfg, PortProbe(host=server_cfg.host), ui)
    logger.info("internal serve pid=%s port=%s dir=%s", os.getpid(), args.internal_port, args.internal_dir)
    server.run_foreground(Path(args.internal_dir), args.internal_port)
    return EXIT_OK


def _build_controller(server_cfg: ServerConfig, ui: ConsoleUI) -> LifecycleController:
    probe = PortProbe(default_inspector(), host=server_cfg.host)
    server = ServerProcess(server_cfg, probe, ui)
    return LifecycleController(server_cfg, probe, ProcessController(), server, ui)


def main(argv: list[str] | None = None) -> int:
    """
    Main entry point for the hopen CLI.

    Args:
        argv: Command line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code
    """
    if argv is None:
        argv = sys.argv[1:]

    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        _configure_logging(args)
        server_cfg = ServerConfig()

        if args.internal_serve:
            return _run_internal_serve(args, server_cfg)

        invocation = Invocation(
            current_dir=Path.cwd(),
            site_root=resolve_site_root(args, server_cfg),
            filename=args.filename,
            exit=args.exit,
            foreground=args.foreground,
            menu=args.menu,
            prompt=args.prompt,
        )
        ui = ConsoleUI()
        outcome = _build_controller(server_cfg, ui).run(invocation)
        logger.debug("finished in state %s", outcome.state.value)
        return outcome.exit_code
    except HopenError as exc:
        logger.debug("hopen failed", exc_info=True)
        print_hopen_error(exc)
        return EXIT_ERROR
    except KeyboardInterrupt:
        print(file=sys.stderr)
        return EXIT_INTERRUPTED


__all__ = ["build_parser", "main", "resolve_site_root"]
