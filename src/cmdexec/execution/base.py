"""Execution engine base types and interfaces."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Protocol, Sequence

from cmdexec.errors import ExecutionError, ExitError


@dataclass(frozen=True)
class CommandConfig:
    """Static description of a command to execute.

    Attributes:
        command: Executable name or path.
        directory: Working directory for the process. ``None`` inherits ours.
        foreground: Block until the process exits when True.
        timeout_s: Wall-clock limit in seconds. ``None`` or ``0`` disables it.
        out_placeholder: Non-empty to capture stdout in memory.
        err_placeholder: Non-empty to capture stderr in memory.
    """

    command: str
    directory: Path | None = None
    foreground: bool = True
    timeout_s: float | None = None
    out_placeholder: str = ""
    err_placeholder: str = ""

    @property
    def capture_stdout(self) -> bool:
        return bool(self.out_placeholder)

    @property
    def capture_stderr(self) -> bool:
        return bool(self.err_placeholder)

    @property
    def has_timeout(self) -> bool:
        return self.timeout_s is not None and self.timeout_s > 0


@dataclass(frozen=True)
class ExecutionResult:
    """Result of executing a command.

    Attributes:
        command: The executable followed by its arguments.
        stdout: Captured standard output, empty unless capture was enabled.
        stderr: Captured standard error, empty unless capture was enabled.
        error: Failure of the invocation, or None on success.
        duration_s: Seconds from invocation to the point the result was built.
        background: True when the process was left running in the background.
    """

    command: list[str]
    stdout: str = ""
    stderr: str = ""
    error: ExecutionError | None = None
    duration_s: float = 0.0
    background: bool = False

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def exit_code(self) -> int | None:
        """Exit code of a finished foreground process, if known."""

        if self.background:
            return None
        if self.error is None:
            return 0
        if isinstance(self.error, ExitError):
            return self.error.exit_code
        return None

    def raise_for_error(self) -> None:
        """Raise the carried error, if any."""

        if self.error is not None:
            raise self.error


class Runner(Protocol):
    """Something that runs and raises on failure."""

    def run(self) -> None: ...


class FunctionRunner:
    """Adapt a plain callable to the ``Runner`` protocol."""

    def __init__(self, func: Callable[[], None]) -> None:
        self._func = func

    def run(self) -> None:
        self._func()


class CodeExecutor(ABC):
    """Abstract base class for command execution engines."""

    @abstractmethod
    def run(self, args: Sequence[str] = ()) -> ExecutionResult:
        """Run the configured command with the given arguments.

        Args:
            args: Fully resolved arguments, passed to the process as-is.

        Returns:
            ExecutionResult with captured output and the outcome.
        """

    def runner(self, args: Sequence[str] = ()) -> Runner:
        """Bind ``args`` now and run later, raising on failure."""

        bound = list(args)
        return FunctionRunner(lambda: self.run(bound).raise_for_error())
