from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest

from hopen.core.config import reset_config_cache
from hopen.core.stdlib_logging import reset_logging_for_tests

from helpers.fakes import FakeProcessInspector, RecordingOpener, ScriptedUI, make_server_config

# Keep the repository free of Python bytecode and __pycache__ artifacts during tests.
sys.dont_write_bytecode = True


@pytest.fixture(autouse=True)
def isolated_hopen_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    """Strip HOPEN_* variables and point the user config at an empty temp dir."""
    for key in list(os.environ):
        if key.startswith("HOPEN_"):
            monkeypatch.delenv(key, raising=False)
    config_dir = tmp_path / "hopen-config"
    config_dir.mkdir()
    monkeypatch.setenv("HOPEN_CONFIG_DIR", str(config_dir))
    reset_config_cache()
    yield config_dir
    reset_config_cache()
    reset_logging_for_tests()


@pytest.fixture
def user_config_dir(isolated_hopen_env: Path) -> Path:
    return isolated_hopen_env


@pytest.fixture
def site(tmp_path: Path) -> Path:
    """A small site tree: index.html at the root and blog/post.html below it."""
    root = tmp_path / "site"
    (root / "blog").mkdir(parents=True)
    (root / "index.html").write_text("<h1>home</h1>", encoding="utf-8")
    (root / "blog" / "post.html").write_text("<h1>post</h1>", encoding="utf-8")
    return root


@pytest.fixture
def inspector() -> FakeProcessInspector:
    return FakeProcessInspector()


@pytest.fixture
def opener() -> RecordingOpener:
    return RecordingOpener()


@pytest.fixture
def ui() -> ScriptedUI:
    return ScriptedUI()


@pytest.fixture
def server_config(tmp_path: Path):
    return make_server_config(tmp_path)
