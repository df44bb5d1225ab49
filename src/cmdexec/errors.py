"""Error types raised and reported by the command executor."""

from __future__ import annotations

import signal as _signal
from typing import Sequence


class ExecutionError(RuntimeError):
    """Base class for failures of a single command invocation.

    Attributes:
        command: Executable followed by its arguments.
    """

    def __init__(self, message: str, command: Sequence[str]) -> None:
        super().__init__(message)
        self.command = list(command)


class StartError(ExecutionError):
    """Raised when the process could not be spawned at all."""

    def __init__(self, command: Sequence[str], cause: OSError) -> None:
        super().__init__(f"failed to start {command[0]!r}: {cause}", command)
        self.__cause__ = cause


class ExitError(ExecutionError):
    """The process ran but did not exit cleanly.

    Attributes:
        exit_code: Raw return code. Negative when killed by a signal.
        signal: Signal number that terminated the process, if any.
    """

    def __init__(self, command: Sequence[str], exit_code: int, message: str | None = None) -> None:
        self.exit_code = exit_code
        self.signal = -exit_code if exit_code < 0 else None
        super().__init__(message or _describe_exit(exit_code), command)


class TimeoutExpiredError(ExitError):
    """The process was killed because its deadline elapsed."""

    def __init__(self, command: Sequence[str], exit_code: int, timeout_s: float) -> None:
        self.timeout_s = timeout_s
        super().__init__(
            command,
            exit_code,
            f"context deadline exceeded after {timeout_s:g}s ({_describe_exit(exit_code)})",
        )


class OutputError(ExecutionError):
    """Copying process output into a writer failed."""

    def __init__(self, command: Sequence[str], cause: BaseException) -> None:
        super().__init__(f"failed to copy process output: {cause}", command)
        self.__cause__ = cause


class ConfigError(ValueError):
    """Raised when command configuration is invalid."""


def _describe_exit(exit_code: int) -> str:
    if exit_code < 0:
        try:
            name = _signal.Signals(-exit_code).name
        except ValueError:
            name = str(-exit_code)
        return f"signal: {name}"
    return f"exit status {exit_code}"
