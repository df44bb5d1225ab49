"""Local execution engine implementation."""

from __future__ import annotations

import queue
import subprocess
import sys
import threading
import time
from dataclasses import dataclass, field
from typing import Sequence

from cmdexec.errors import (
    ExecutionError,
    ExitError,
    OutputError,
    StartError,
    TimeoutExpiredError,
)
from cmdexec.execution.base import CodeExecutor, CommandConfig, ExecutionResult
from cmdexec.execution.deadline import DeadlineGuard, completion_signal
from cmdexec.execution.writers import (
    ByteWriter,
    CaptureBuffer,
    MultiWriter,
    StreamPump,
    as_byte_writer,
)
from cmdexec.util.observability import EventLogger

EXIT_EVENT = "command.exit"


@dataclass
class _Invocation:
    """State owned by a single call to ``CommandExecutor.run``."""

    command: list[str]
    log: EventLogger
    started_at: float
    done: queue.Queue[None]
    guard: DeadlineGuard | None = None
    out_buffer: CaptureBuffer | None = None
    err_buffer: CaptureBuffer | None = None
    process: subprocess.Popen[bytes] | None = None
    pumps: list[StreamPump] = field(default_factory=list)

    def captured(self) -> tuple[str, str]:
        stdout = self.out_buffer.getvalue() if self.out_buffer is not None else ""
        stderr = self.err_buffer.getvalue() if self.err_buffer is not None else ""
        return stdout, stderr


class CommandExecutor(CodeExecutor):
    """Execute a configured command on the local host.

    Output is streamed to ``stdout`` (default: ``sys.stdout``) and to
    ``stderr``, which falls back to the stdout writer when omitted. Streams
    whose placeholder is set are additionally captured in memory.
    """

    def __init__(
        self,
        config: CommandConfig,
        stdout: object | None = None,
        stderr: object | None = None,
        logger: EventLogger | None = None,
    ) -> None:
        """Initialize the executor.

        Args:
            config: The command to run and how to run it.
            stdout: Primary writer, binary or text.
            stderr: Optional separate writer for standard error.
            logger: Event logger for completion records.
        """

        self._config = config
        self._std_writer = as_byte_writer(stdout if stdout is not None else sys.stdout)
        self._err_writer = as_byte_writer(stderr) if stderr is not None else None
        self._logger = logger or EventLogger("cmdexec.command")

    @property
    def config(self) -> CommandConfig:
        return self._config

    def run(self, args: Sequence[str] = ()) -> ExecutionResult:
        """Run the command with ``args``.

        In foreground mode this blocks until the process exits and returns the
        captured output with the outcome. In background mode it returns right
        after the start attempt with empty captures and only the start error;
        waiting and logging carry on in a separate thread.

        Args:
            args: Fully resolved arguments.

        Returns:
            ExecutionResult describing the invocation.
        """

        command = [self._config.command, *args]
        invocation = _Invocation(
            command=command,
            log=self._logger.bind(command=command),
            started_at=time.monotonic(),
            done=completion_signal(),
        )

        if self._config.has_timeout:
            invocation.guard = DeadlineGuard(
                self._config.timeout_s or 0.0, invocation.done, invocation.started_at
            )
            invocation.guard.start()

        out_writer, err_writer = self._bind_streams(invocation)
        start_error = self._start(invocation, out_writer, err_writer)

        if self._config.foreground:
            return self._wait_and_log(invocation, start_error)

        threading.Thread(
            target=self._wait_and_log,
            args=(invocation, start_error),
            name=f"cmdexec-wait-{self._config.command}",
        ).start()
        return ExecutionResult(
            command=command,
            error=start_error,
            duration_s=time.monotonic() - invocation.started_at,
            background=True,
        )

    def _bind_streams(self, invocation: _Invocation) -> tuple[ByteWriter, ByteWriter]:
        out_writer: ByteWriter = self._std_writer
        err_writer: ByteWriter = (
            self._err_writer if self._err_writer is not None else self._std_writer
        )
        if self._config.capture_stdout:
            invocation.out_buffer = CaptureBuffer()
            out_writer = MultiWriter(out_writer, invocation.out_buffer)
        if self._config.capture_stderr:
            invocation.err_buffer = CaptureBuffer()
            err_writer = MultiWriter(err_writer, invocation.err_buffer)
        return out_writer, err_writer

    def _start(
        self,
        invocation: _Invocation,
        out_writer: ByteWriter,
        err_writer: ByteWriter,
    ) -> StartError | None:
        # One pipe keeps the relative order of both streams when they share a writer.
        merged = err_writer is out_writer
        directory = self._config.directory
        try:
            process = subprocess.Popen(
                invocation.command,
                cwd=str(directory) if directory is not None else None,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT if merged else subprocess.PIPE,
                bufsize=0,
            )
        except OSError as exc:
            return StartError(invocation.command, exc)

        invocation.process = process
        if invocation.guard is not None:
            invocation.guard.attach(process)

        if process.stdout is not None:
            invocation.pumps.append(StreamPump(process.stdout, out_writer, "cmdexec-stdout"))
        if process.stderr is not None:
            invocation.pumps.append(StreamPump(process.stderr, err_writer, "cmdexec-stderr"))
        for pump in invocation.pumps:
            pump.start()
        return None

    def _wait_and_log(
        self,
        invocation: _Invocation,
        start_error: StartError | None,
    ) -> ExecutionResult:
        error: ExecutionError | None = start_error
        try:
            if invocation.process is not None:
                returncode = invocation.process.wait()
                for pump in invocation.pumps:
                    pump.join()
                error = self._outcome(invocation, returncode)
        finally:
            invocation.done.put_nowait(None)

        duration = time.monotonic() - invocation.started_at
        log = invocation.log.named("exit")
        if error is not None:
            log.log(EXIT_EVENT, {"duration_s": duration, "error": str(error)}, level="ERROR")
        else:
            log.log(EXIT_EVENT, {"duration_s": duration})

        stdout, stderr = invocation.captured()
        return ExecutionResult(
            command=invocation.command,
            stdout=stdout,
            stderr=stderr,
            error=error,
            duration_s=duration,
        )

    @staticmethod
    def _outcome(invocation: _Invocation, returncode: int) -> ExecutionError | None:
        guard = invocation.guard
        if returncode != 0:
            if guard is not None and guard.expired:
                return TimeoutExpiredError(invocation.command, returncode, guard.timeout_s)
            return ExitError(invocation.command, returncode)
        for pump in invocation.pumps:
            if pump.error is not None:
                return OutputError(invocation.command, pump.error)
        return None
