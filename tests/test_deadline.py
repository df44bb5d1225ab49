from __future__ import annotations

import threading
import time

from cmdexec.execution.deadline import DeadlineGuard, completion_signal


class FakeProcess:
    def __init__(self) -> None:
        self.killed = False

    def kill(self) -> None:
        self.killed = True


def wait_until(predicate, timeout_s: float = 2.0) -> bool:
    deadline = time.monotonic() + timeout_s
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return predicate()


def guard_running() -> bool:
    return any(thread.name == "cmdexec-deadline" for thread in threading.enumerate())


def test_completion_signal_never_blocks_without_listener() -> None:
    done = completion_signal()

    done.put_nowait(None)

    assert done.full()


def test_guard_releases_when_process_finishes_first() -> None:
    done = completion_signal()
    guard = DeadlineGuard(10, done, time.monotonic())
    process = FakeProcess()
    guard.start()
    guard.attach(process)  # type: ignore[arg-type]

    done.put_nowait(None)

    assert wait_until(lambda: not guard_running())
    assert not guard.expired
    assert process.killed is False


def test_guard_kills_process_after_deadline() -> None:
    done = completion_signal()
    guard = DeadlineGuard(0.05, done, time.monotonic())
    process = FakeProcess()
    guard.start()
    guard.attach(process)  # type: ignore[arg-type]

    assert wait_until(lambda: process.killed)
    assert guard.expired
    # The guard stays up until the wait step reports completion.
    assert guard_running()

    done.put_nowait(None)
    assert wait_until(lambda: not guard_running())


def test_process_attached_after_deadline_is_killed_immediately() -> None:
    done = completion_signal()
    guard = DeadlineGuard(0.01, done, time.monotonic())
    guard.start()
    assert wait_until(lambda: guard.expired)

    process = FakeProcess()
    guard.attach(process)  # type: ignore[arg-type]

    assert process.killed
    done.put_nowait(None)
    assert wait_until(lambda: not guard_running())


def test_deadline_counts_from_invocation_start() -> None:
    done = completion_signal()
    guard = DeadlineGuard(1.0, done, time.monotonic() - 5)
    guard.start()

    assert wait_until(lambda: guard.expired, timeout_s=0.5)
    done.put_nowait(None)
    assert wait_until(lambda: not guard_running())
