"""Deadline enforcement for a single command invocation."""

from __future__ import annotations

import queue
import subprocess
import threading
import time


def completion_signal() -> queue.Queue[None]:
    """Return a single-slot queue used to announce that a wait step finished.

    A single ``put_nowait`` never blocks, whether or not a guard is listening.
    """

    return queue.Queue(maxsize=1)


class DeadlineGuard:
    """Kill a process once its deadline passes, unless it finished first.

    The guard thread sleeps on the completion signal. When the signal arrives
    before the deadline the guard simply exits. Otherwise it marks the deadline
    as expired, kills the attached process (or the process attached later) and
    keeps waiting for the signal, so it never outlives the wait step.
    """

    def __init__(self, timeout_s: float, done: queue.Queue[None], started_at: float) -> None:
        self.timeout_s = timeout_s
        self._deadline = started_at + timeout_s
        self._done = done
        self._lock = threading.Lock()
        self._process: subprocess.Popen[bytes] | None = None
        self._expired = False
        self._thread = threading.Thread(target=self._guard, name="cmdexec-deadline", daemon=True)

    @property
    def expired(self) -> bool:
        with self._lock:
            return self._expired

    def start(self) -> None:
        self._thread.start()

    def attach(self, process: subprocess.Popen[bytes]) -> None:
        """Hand over a started process, killing it at once if already overdue."""

        with self._lock:
            self._process = process
            if self._expired:
                _kill(process)

    def _guard(self) -> None:
        remaining = max(self._deadline - time.monotonic(), 0.0)
        try:
            self._done.get(timeout=remaining)
            return
        except queue.Empty:
            pass
        with self._lock:
            self._expired = True
            if self._process is not None:
                _kill(self._process)
        self._done.get()


def _kill(process: subprocess.Popen[bytes]) -> None:
    try:
        process.kill()
    except ProcessLookupError:
        pass
