from __future__ import annotations

import io

from hopen.cli._output import ConsoleUI, print_hopen_error
from hopen.core.exceptions import StartupFailedError
from hopen.core.web_server.models import StartupChoice


def test_hopen_error_prints_message_and_context() -> None:
    err = io.StringIO()

    print_hopen_error(StartupFailedError(8001, "/tmp/hopen-server-12.log"), file=err)

    assert err.getvalue().splitlines() == [
        "Error: Failed to start server",
        "Port: 8001",
        "Check logs: /tmp/hopen-server-12.log",
    ]


def test_console_ui_status_lines() -> None:
    out = io.StringIO()
    ui = ConsoleUI(stream=out)

    ui.success("Server stopped (PID: 1, port: 8000)")
    ui.warning("Cancelled - no changes made")
    ui.kv("Port", 8000)

    assert out.getvalue().splitlines() == [
        "✓ Server stopped (PID: 1, port: 8000)",
        "⚠ Cancelled - no changes made",
        "Port: 8000",
    ]


def test_console_ui_select_uses_injected_input() -> None:
    ui = ConsoleUI(stream=io.StringIO(), input_fn=lambda _prompt: "3")

    assert ui.select("What would you like to do?", list(StartupChoice)) is StartupChoice.CANCEL
