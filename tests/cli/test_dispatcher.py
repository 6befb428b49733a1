from __future__ import annotations

import os
import socket
import webbrowser
from pathlib import Path

import pytest

from hopen import __version__
from hopen.cli import _dispatcher
from hopen.cli._dispatcher import build_parser, main, resolve_site_root
from hopen.core.config.domains import ServerConfig

from helpers.fakes import FakeProcessInspector


@pytest.fixture
def idle_ports(monkeypatch: pytest.MonkeyPatch) -> FakeProcessInspector:
    """Route the CLI's port probe at an empty in-memory port table."""
    inspector = FakeProcessInspector()
    monkeypatch.setattr(_dispatcher, "default_inspector", lambda: inspector)
    return inspector


class TestParser:
    def test_flags(self) -> None:
        args = build_parser().parse_args(["-e", "-f", "-m", "-p", "-r", "/srv/site", "page.html"])

        assert (args.exit, args.foreground, args.menu, args.prompt) == (True, True, True, True)
        assert args.site_home == "/srv/site"
        assert args.filename == "page.html"
        assert args.internal_serve is False

    def test_internal_flags_are_hidden(self, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit):
            build_parser().parse_args(["--help"])

        assert "--internal-serve" not in capsys.readouterr().out

    def test_version(self, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit) as excinfo:
            build_parser().parse_args(["--version"])

        assert excinfo.value.code == 0
        assert __version__ in capsys.readouterr().out


class TestSiteRootResolution:
    def test_flag_wins_over_env_and_config(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("HOPEN_SITE_HOME", "/from/env")
        args = build_parser().parse_args(["-r", "/from/flag"])
        cfg = ServerConfig(config={"server": {"site_home": "/from/config"}})

        assert resolve_site_root(args, cfg) == Path("/from/flag")

    def test_env_wins_over_config(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("HOPEN_SITE_HOME", "/from/env")
        cfg = ServerConfig(config={"server": {"site_home": "/from/config"}})

        assert resolve_site_root(build_parser().parse_args([]), cfg) == Path("/from/env")

    def test_config_is_last_resort(self) -> None:
        cfg = ServerConfig(config={"server": {"site_home": "/from/config"}})

        assert resolve_site_root(build_parser().parse_args([]), cfg) == Path("/from/config")

    def test_none_when_unset(self) -> None:
        assert resolve_site_root(build_parser().parse_args([]), ServerConfig(config={})) is None


def test_filename_without_root_exits_1(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str], idle_ports
) -> None:
    monkeypatch.chdir(tmp_path)

    assert main(["page.html"]) == 1

    err = capsys.readouterr().err
    assert "Error: filename argument requires either -r flag or HOPEN_SITE_HOME to be set" in err
    assert idle_ports.queried_ports == []


def test_no_html_files_exits_1_without_scanning(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str], idle_ports
) -> None:
    monkeypatch.chdir(tmp_path)

    assert main([]) == 1

    err = capsys.readouterr().err
    assert "Error: No HTML files found in current directory" in err
    assert f"Current directory: {Path(os.getcwd())}" in err
    assert idle_ports.queried_ports == []


def test_exit_with_nothing_running_exits_0(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str], idle_ports
) -> None:
    monkeypatch.chdir(tmp_path)

    assert main(["-e"]) == 0

    assert "No server running" in capsys.readouterr().out


def test_not_under_site_root_exits_1(
    tmp_path: Path, site: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str], idle_ports
) -> None:
    monkeypatch.chdir(tmp_path)

    assert main(["-r", str(site)]) == 1

    assert "Error: Current directory is not under site_home" in capsys.readouterr().err


def test_invalid_config_exits_1(
    user_config_dir: Path, tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    (user_config_dir / "config.yaml").write_text("server:\n  bogus: 1\n", encoding="utf-8")
    monkeypatch.chdir(tmp_path)

    assert main(["-e"]) == 1

    assert "Invalid configuration" in capsys.readouterr().err


def test_internal_serve_requires_port_and_dir(capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["--internal-serve"]) == 1

    assert "--internal-serve requires" in capsys.readouterr().err


def test_internal_serve_runs_foreground_server(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    calls = []
    monkeypatch.setattr(
        _dispatcher.ServerProcess,
        "run_foreground",
        lambda self, directory, port, token=None, **kwargs: calls.append((directory, port)),
    )

    assert main(["--internal-serve", "--internal-port", "8007", "--internal-dir", str(tmp_path)]) == 0

    assert calls == [(tmp_path, 8007)]


def test_keyboard_interrupt_exits_130(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    def interrupted(self, invocation):
        raise KeyboardInterrupt

    monkeypatch.setattr(_dispatcher.LifecycleController, "run", interrupted)
    monkeypatch.chdir(tmp_path)

    assert main([]) == 130


@pytest.fixture
def held_port(monkeypatch: pytest.MonkeyPatch):
    """A loopback port that is already listening, configured as the whole range."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        sock.listen(1)
        port = sock.getsockname()[1]
        monkeypatch.setenv("HOPEN_SERVER__PORT_RANGE__START", str(port))
        monkeypatch.setenv("HOPEN_SERVER__PORT_RANGE__END", str(port))
        yield port


def test_foreground_on_occupied_port_exits_1(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str], idle_ports, held_port: int
) -> None:
    (tmp_path / "index.html").write_text("<p>hi</p>", encoding="utf-8")
    monkeypatch.chdir(tmp_path)
    opened = []
    monkeypatch.setattr(webbrowser, "open", lambda url, *a, **kw: opened.append(url) or True)

    assert main(["-f"]) == 1

    err = capsys.readouterr().err
    assert "Error: Failed to start server" in err
    assert f"Port: {held_port}" in err
    assert opened == []


def test_internal_serve_on_occupied_port_exits_1(
    tmp_path: Path, capsys: pytest.CaptureFixture[str], held_port: int
) -> None:
    assert main(["--internal-serve", "--internal-port", str(held_port), "--internal-dir", str(tmp_path)]) == 1

    assert "Error: Failed to start server" in capsys.readouterr().err
