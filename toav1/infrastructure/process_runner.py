"""Child process execution for the prober and the encoder.

SubprocessRunner is the only place that spawns processes; adapters receive
it as a constructor argument so tests can pass a fake with the same two
methods (capture / run_attached).
"""

import logging
import signal
import subprocess
import threading
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple


@dataclass(frozen=True)
class RunOutcome:
    returncode: Optional[int]  # None if the child was never started
    cancelled: bool = False


class InterruptScope:
    """Routes SIGINT/SIGTERM into a threading.Event while the scope is open.

    Usage:
        with InterruptScope() as cancel_event:
            runner.run_attached(cmd, cancel_event)

    The previous handlers are restored on exit, whatever the exit path.
    Must be entered from the main thread (signal.signal restriction).
    """

    SIGNALS: Tuple[signal.Signals, ...] = (signal.SIGINT, signal.SIGTERM)

    def __init__(self, signals: Optional[Tuple[signal.Signals, ...]] = None):
        self.signals = signals or self.SIGNALS
        self.event = threading.Event()
        self.received: Optional[int] = None
        self._previous: Dict[int, object] = {}

    def _handle(self, signum, frame):
        self.received = signum
        self.event.set()

    def __enter__(self) -> threading.Event:
        try:
            for sig in self.signals:
                self._previous[sig] = signal.signal(sig, self._handle)
        except BaseException:
            self._restore()
            raise
        return self.event

    def __exit__(self, exc_type, exc_val, exc_tb):
        self._restore()
        return False

    def _restore(self):
        for sig, handler in self._previous.items():
            # signal.signal returns None for handlers not installed from Python
            signal.signal(sig, signal.SIG_DFL if handler is None else handler)
        self._previous.clear()


class SubprocessRunner:
    """Runs external commands with subprocess."""

    def __init__(self, poll_interval: float = 0.1, terminate_grace: float = 3.0):
        self.poll_interval = poll_interval
        self.terminate_grace = terminate_grace
        self.logger = logging.getLogger(__name__)

    def capture(self, cmd: List[str]) -> subprocess.CompletedProcess:
        """Runs cmd to completion with stdout and stderr combined."""
        return subprocess.run(
            cmd,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
        )

    def run_attached(self, cmd: List[str], cancel_event: threading.Event) -> RunOutcome:
        """Runs cmd on the caller's terminal until it exits or cancel_event is set.

        The child inherits stdin/stdout/stderr so its own progress output is
        shown live. Spawn failures (OSError) propagate to the caller.
        """
        if cancel_event.is_set():
            return RunOutcome(returncode=None, cancelled=True)

        process = subprocess.Popen(cmd)
        while True:
            try:
                returncode = process.wait(timeout=self.poll_interval)
                break
            except subprocess.TimeoutExpired:
                if cancel_event.is_set():
                    self.logger.info(f"PROCESS_CANCEL: pid={process.pid}")
                    self._terminate(process)
                    return RunOutcome(returncode=process.returncode, cancelled=True)

        # A terminal Ctrl+C reaches the child too, so it may exit on its own
        # right as the event is set.
        return RunOutcome(returncode=returncode, cancelled=cancel_event.is_set())

    def _terminate(self, process: subprocess.Popen):
        process.terminate()
        try:
            process.wait(timeout=self.terminate_grace)
        except subprocess.TimeoutExpired:
            process.kill()
            process.wait()
