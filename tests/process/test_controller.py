from __future__ import annotations

import pytest

from hopen.core.exceptions import TerminateFailedError
from hopen.core.process.controller import ProcessController

from helpers.fakes import FakeProcessInspector


def test_primary_success_skips_fallback() -> None:
    primary = FakeProcessInspector({8000: [42]})
    fallback = FakeProcessInspector({8000: [42]})

    ProcessController(primary, fallback).terminate(42)

    assert primary.terminated == [42]
    assert fallback.terminated == []


def test_falls_back_when_primary_cannot_find_process() -> None:
    primary = FakeProcessInspector()
    fallback = FakeProcessInspector({8000: [42]})

    ProcessController(primary, fallback).terminate(42)

    assert fallback.terminated == [42]


def test_both_failing_raises_with_pid() -> None:
    with pytest.raises(TerminateFailedError) as excinfo:
        ProcessController(FakeProcessInspector(), FakeProcessInspector()).terminate(42)

    assert excinfo.value.pid == 42
    assert excinfo.value.context["PID"] == 42


@pytest.mark.parametrize("pid", [0, -1])
def test_non_positive_pid_is_refused(pid: int) -> None:
    primary = FakeProcessInspector({8000: [pid]})

    with pytest.raises(TerminateFailedError):
        ProcessController(primary, FakeProcessInspector()).terminate(pid)

    assert primary.terminated == []
