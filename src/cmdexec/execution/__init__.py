"""Execution engine package."""

from cmdexec.execution.base import (
    CodeExecutor,
    CommandConfig,
    ExecutionResult,
    FunctionRunner,
    Runner,
)
from cmdexec.execution.local_exec import CommandExecutor
from cmdexec.execution.writers import CaptureBuffer, MultiWriter

__all__ = [
    "CaptureBuffer",
    "CodeExecutor",
    "CommandConfig",
    "CommandExecutor",
    "ExecutionResult",
    "FunctionRunner",
    "MultiWriter",
    "Runner",
]
