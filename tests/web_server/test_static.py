from __future__ import annotations

import socket
import threading
import urllib.error
import urllib.request
from pathlib import Path

import pytest

from hopen.core.exceptions import StartupFailedError
from hopen.core.web_server.static import CancellationToken, make_server, serve_directory, serve_until_cancelled


@pytest.fixture
def running_server(tmp_path: Path):
    (tmp_path / "index.html").write_text("<h1>home</h1>", encoding="utf-8")
    (tmp_path / "blog").mkdir()
    (tmp_path / "blog" / "post.html").write_text("<p>post</p>", encoding="utf-8")

    httpd = make_server(tmp_path, "127.0.0.1", 0)
    token = CancellationToken()
    thread = threading.Thread(target=serve_until_cancelled, args=(httpd, token), daemon=True)
    thread.start()
    yield f"http://127.0.0.1:{httpd.server_address[1]}", token, thread
    token.cancel()
    thread.join(timeout=5)


def _get(url: str):
    with urllib.request.urlopen(url, timeout=5) as resp:
        return resp.status, resp.headers, resp.read().decode("utf-8")


def test_serves_nested_file_with_html_content_type(running_server) -> None:
    base, _token, _thread = running_server

    status, headers, body = _get(f"{base}/blog/post.html")

    assert status == 200
    assert headers.get_content_type() == "text/html"
    assert headers["Cache-Control"] == "no-cache"
    assert body == "<p>post</p>"


def test_directory_request_serves_index(running_server) -> None:
    base, _token, _thread = running_server

    _status, _headers, body = _get(f"{base}/")

    assert body == "<h1>home</h1>"


def test_missing_file_is_404(running_server) -> None:
    base, _token, _thread = running_server

    with pytest.raises(urllib.error.HTTPError) as excinfo:
        _get(f"{base}/nope.html")

    assert excinfo.value.code == 404


def test_cancelling_token_stops_serve_loop(running_server) -> None:
    _base, token, thread = running_server

    token.cancel()
    thread.join(timeout=5)

    assert not thread.is_alive()
    assert token.cancelled


def test_serve_directory_reports_occupied_port_as_startup_failure(tmp_path: Path) -> None:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as held:
        held.bind(("127.0.0.1", 0))
        held.listen(1)
        port = held.getsockname()[1]

        with pytest.raises(StartupFailedError) as excinfo:
            serve_directory(tmp_path, "127.0.0.1", port)

    assert excinfo.value.port == port
    assert isinstance(excinfo.value.__cause__, OSError)


def test_on_ready_runs_once_bound_and_can_stop_the_server(tmp_path: Path) -> None:
    (tmp_path / "index.html").write_text("<h1>home</h1>", encoding="utf-8")
    token = CancellationToken()
    seen = []

    def on_ready(httpd) -> None:
        port = httpd.server_address[1]
        with socket.create_connection(("127.0.0.1", port), timeout=5):
            seen.append(port)
        token.cancel()

    serve_directory(tmp_path, "127.0.0.1", 0, token, on_ready=on_ready)

    assert len(seen) == 1
    assert token.cancelled
