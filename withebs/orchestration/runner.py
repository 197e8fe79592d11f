#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Guarded command execution for withebs.
Runs the caller's command in the foreground and returns as soon as it exits or
a termination signal arrives, whichever happens first.
"""
import contextlib
import logging
import queue
import signal
import subprocess
import threading
from typing import Iterator, List, Optional, Sequence

import psutil

from withebs.errors import RunInterruptedError, SpawnFailedError
from withebs.models import RunOutcome

logger = logging.getLogger("withebs")

# SIGKILL cannot be handled; SIGTERM is what supervisors send before it
TERMINATION_SIGNALS = (signal.SIGINT, signal.SIGTERM, signal.SIGHUP)


def signal_name(signum: int) -> str:
    try:
        return signal.Signals(signum).name
    except ValueError:
        return f"signal {signum}"


@contextlib.contextmanager
def _handlers(handler, signals: Sequence[int]) -> Iterator[None]:
    previous = {}
    try:
        for sig in signals:
            previous[sig] = signal.signal(sig, handler)
        yield
    finally:
        for sig, old in previous.items():
            signal.signal(sig, old)


class SignalLatch:
    """Records termination signals instead of acting on them.
    Acquisition steps call check() between steps, so an interrupt never lands
    between a remote call or mount and the cleanup entry that undoes it.
    """

    def __init__(self, signals: Sequence[int] = TERMINATION_SIGNALS):
        self.signals = tuple(signals)
        self.signum: Optional[int] = None
        self._scope = None

    def _record(self, signum, frame):
        if self.signum is None:
            self.signum = signum

    def __enter__(self) -> "SignalLatch":
        self._scope = _handlers(self._record, self.signals)
        self._scope.__enter__()
        return self

    def __exit__(self, *exc_info):
        return self._scope.__exit__(*exc_info)

    def check(self) -> None:
        """Raise RunInterruptedError if a signal has been recorded."""
        if self.signum is not None:
            raise RunInterruptedError(self.signum, signal_name(self.signum))


def signals_ignored(signals: Sequence[int] = TERMINATION_SIGNALS):
    """Ignore termination signals so teardown is not cut short."""
    return _handlers(signal.SIG_IGN, signals)


def _still_running(pid: int) -> bool:
    try:
        return psutil.Process(pid).status() != psutil.STATUS_ZOMBIE
    except psutil.NoSuchProcess:
        return False


class GuardedCommandRunner:
    """Foreground command runner that can be cut short by a signal.
    Must be used from the main thread, where Python delivers signals.
    """

    def __init__(self, signals: Sequence[int] = TERMINATION_SIGNALS, wake_interval: float = 0.2):
        self.signals = tuple(signals)
        self.wake_interval = wake_interval

    def run(self, argv: List[str], stdin=None, stdout=None, stderr=None) -> RunOutcome:
        """Start argv with the caller's stdio and wait for exit or a signal."""
        if not argv:
            raise SpawnFailedError("no command specified")
        events: "queue.SimpleQueue" = queue.SimpleQueue()

        def _on_signal(signum, frame):
            events.put(("signal", signum))

        with _handlers(_on_signal, self.signals):
            logger.info("invoking %s %r", argv[0], list(argv[1:]))
            try:
                proc = subprocess.Popen(list(argv), stdin=stdin, stdout=stdout, stderr=stderr)
            except (OSError, ValueError) as e:
                raise SpawnFailedError(f"cannot start {argv[0]}: {e}") from e
            waiter = threading.Thread(
                target=lambda: events.put(("exit", proc.wait())), name=f"wait-{proc.pid}", daemon=True
            )
            waiter.start()
            kind, value = self._next_event(events)
        if kind == "exit":
            logger.info("%s exited with status %s", argv[0], value)
            return RunOutcome(returncode=value, pid=proc.pid)
        logger.warning("received %s, cleaning up", signal_name(value))
        if _still_running(proc.pid):
            logger.warning("%s (pid %s) is still running; cleanup will not wait for it", argv[0], proc.pid)
        return RunOutcome(signum=value, pid=proc.pid)

    def _next_event(self, events: "queue.SimpleQueue"):
        # short timeouts give the interpreter a chance to run signal handlers
        while True:
            try:
                return events.get(timeout=self.wake_interval)
            except queue.Empty:
                continue
