"""Run external commands with timeouts, output capture and completion logging."""

from cmdexec.errors import (
    ConfigError,
    ExecutionError,
    ExitError,
    OutputError,
    StartError,
    TimeoutExpiredError,
)
from cmdexec.execution import CommandConfig, CommandExecutor, ExecutionResult

__all__ = [
    "CommandConfig",
    "CommandExecutor",
    "ConfigError",
    "ExecutionError",
    "ExecutionResult",
    "ExitError",
    "OutputError",
    "StartError",
    "TimeoutExpiredError",
]
