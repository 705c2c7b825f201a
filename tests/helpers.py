"""
In-memory stand-ins for the platform seams of the supervisor.

Process snapshot, signal backend, health checker and clock fakes let the
tree controller and the state machine run without touching real processes.
"""

import threading
from typing import Callable, Iterable, List, Optional

from core.enums import SignalKind
from core.models import CheckResult, SupervisedProcess
from supervisor.process import SignalBackend

# root 100 -> 101, 102; 101 -> 103; 103 -> 104; unrelated 200 -> 201
PROCESS_TABLE = [
    (1, 0),
    (100, 1),
    (101, 100),
    (102, 100),
    (103, 101),
    (104, 103),
    (200, 1),
    (201, 200),
]


class RecordingBackend(SignalBackend):
    """Signal backend that records deliveries instead of calling os.kill."""

    def __init__(self, alive: Iterable[int] = ()):
        self.alive = set(alive)
        self.sent: List[tuple] = []
        self._lock = threading.Lock()

    def _record(self, pid: int, kind: SignalKind) -> None:
        if pid not in self.alive:
            raise ProcessLookupError(3, "No such process")
        with self._lock:
            self.sent.append((pid, kind))

    def pause(self, pid: int) -> None:
        self._record(pid, SignalKind.PAUSE)

    def resume(self, pid: int) -> None:
        self._record(pid, SignalKind.RESUME)

    def terminate(self, pid: int) -> None:
        self._record(pid, SignalKind.TERMINATE)

    def exists(self, pid: int) -> bool:
        return pid in self.alive

    def pids(self, kind: SignalKind) -> List[int]:
        return [pid for pid, sent_kind in self.sent if sent_kind == kind]


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class ScriptedChecker:
    """Health checker returning pre-programmed outcomes, True = pass."""

    def __init__(self, outcomes: Optional[Iterable[bool]] = None, default: bool = True):
        self.outcomes = list(outcomes or [])
        self.default = default
        self.calls = 0
        self.on_call: Optional[Callable[[int], None]] = None

    def run(self, process: SupervisedProcess) -> CheckResult:
        self.calls += 1
        if self.on_call:
            self.on_call(self.calls)
        passed = self.outcomes.pop(0) if self.outcomes else self.default
        if passed:
            return CheckResult(passed=True, returncode=0)
        return CheckResult(passed=False, returncode=1, output="unhealthy")
