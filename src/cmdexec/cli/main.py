"""CLI entrypoints for cmdexec."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import List, Optional

import typer

from cmdexec.config import load_config
from cmdexec.errors import (
    ConfigError,
    ExecutionError,
    ExitError,
    StartError,
    TimeoutExpiredError,
)
from cmdexec.execution.base import CommandConfig, ExecutionResult
from cmdexec.execution.local_exec import CommandExecutor
from cmdexec.util.logging import configure_logging

TIMEOUT_EXIT_CODE = 124
START_FAILURE_EXIT_CODE = 127

_PASSTHROUGH = {"allow_interspersed_args": False, "ignore_unknown_options": True}

app = typer.Typer(help="Run external commands with timeouts and completion logging.")


@app.callback()
def main(
    log_level: str = typer.Option(
        "INFO",
        "--log-level",
        help="Logging level (e.g., DEBUG, INFO, WARNING).",
    ),
) -> None:
    """Configure CLI-level options."""

    configure_logging(log_level)


@app.command("run", context_settings=_PASSTHROUGH)
def run_command(
    command: str = typer.Argument(..., help="Executable to run."),
    args: Optional[List[str]] = typer.Argument(None, help="Arguments for the executable."),
    cwd: Optional[Path] = typer.Option(None, "--cwd", "-C", help="Working directory."),
    timeout: Optional[float] = typer.Option(
        None,
        "--timeout",
        "-t",
        help="Kill the process after this many seconds.",
    ),
    background: bool = typer.Option(
        False,
        "--background",
        "-b",
        help="Return as soon as the process has started.",
    ),
    separate_stderr: bool = typer.Option(
        False,
        "--separate-stderr",
        help="Write the process stderr to our stderr instead of stdout.",
    ),
) -> None:
    """Run a single command."""

    config = CommandConfig(
        command=command,
        directory=cwd,
        foreground=not background,
        timeout_s=timeout,
    )
    _execute(config, args or [], separate_stderr=separate_stderr)


@app.command("run-config", context_settings=_PASSTHROUGH)
def run_config_command(
    name: str = typer.Argument(..., help="Name of the configured command."),
    extra_args: Optional[List[str]] = typer.Argument(
        None, help="Arguments appended to the configured ones."
    ),
    config_path: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Config file or directory to search.",
    ),
    separate_stderr: bool = typer.Option(
        False,
        "--separate-stderr",
        help="Write the process stderr to our stderr instead of stdout.",
    ),
) -> None:
    """Run a command defined in a configuration file."""

    try:
        definition = load_config(config_path).get_command(name)
    except ConfigError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from exc

    _execute(
        definition.to_command_config(),
        [*definition.args, *(extra_args or [])],
        separate_stderr=separate_stderr,
    )


def _execute(config: CommandConfig, args: list[str], *, separate_stderr: bool) -> None:
    executor = CommandExecutor(
        config,
        stdout=sys.stdout,
        stderr=sys.stderr if separate_stderr else None,
    )
    result = executor.run(args)
    _finish(result)


def _finish(result: ExecutionResult) -> None:
    if result.error is not None:
        typer.echo(f"Error: {result.error}", err=True)
        raise typer.Exit(code=exit_code_for(result.error))
    if result.background:
        typer.echo(f"Started {result.command[0]} in the background.", err=True)


def exit_code_for(error: ExecutionError) -> int:
    """Map an execution failure to the exit code the CLI reports."""

    if isinstance(error, TimeoutExpiredError):
        return TIMEOUT_EXIT_CODE
    if isinstance(error, StartError):
        return START_FAILURE_EXIT_CODE
    if isinstance(error, ExitError) and error.exit_code > 0:
        return error.exit_code
    return 1
