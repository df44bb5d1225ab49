from __future__ import annotations

import signal

from cmdexec.errors import ExitError, StartError, TimeoutExpiredError


def test_exit_error_describes_exit_status() -> None:
    error = ExitError(["false"], 1)

    assert str(error) == "exit status 1"
    assert error.signal is None
    assert error.command == ["false"]


def test_exit_error_describes_signal() -> None:
    error = ExitError(["sleep", "5"], -signal.SIGTERM)

    assert error.signal == signal.SIGTERM
    assert str(error) == "signal: SIGTERM"


def test_timeout_error_is_an_exit_error() -> None:
    error = TimeoutExpiredError(["sleep", "5"], -signal.SIGKILL, 1.5)

    assert isinstance(error, ExitError)
    assert str(error) == "context deadline exceeded after 1.5s (signal: SIGKILL)"


def test_start_error_keeps_cause() -> None:
    cause = FileNotFoundError(2, "No such file or directory")
    error = StartError(["missing"], cause)

    assert error.__cause__ is cause
    assert "missing" in str(error)
