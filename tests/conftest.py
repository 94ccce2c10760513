"""Shared fixtures: an in-memory process table standing in for the OS."""

from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import pytest

from hexarctl.local.config import MergedSettings
from hexarctl.local.supervisor.marker import FileMarkerStore, MemoryMarkerStore
from hexarctl.local.supervisor.process_utils import ProcessSnapshot


@dataclass
class FakeProcess:
    pid: int
    ignores_term: bool = False
    term_delay: float = 0.0
    survives_kill: bool = False
    term_at: Optional[float] = None
    killed: bool = False


@dataclass
class FakeProcessTable:
    """Acts as probe, signal sender and clock at once, recording every event."""

    now: float = 0.0
    processes: dict = field(default_factory=dict)
    events: list = field(default_factory=list)

    def spawn(self, pid: int, **behaviour) -> FakeProcess:
        self.processes[pid] = FakeProcess(pid, **behaviour)
        return self.processes[pid]

    # probe
    def is_alive(self, pid: int) -> bool:
        proc = self.processes.get(pid)
        if proc is None:
            return False
        if proc.killed and not proc.survives_kill:
            return False
        if proc.term_at is not None and not proc.ignores_term:
            return self.now < proc.term_at + proc.term_delay
        return True

    def snapshot(self, pid: int) -> ProcessSnapshot:
        return ProcessSnapshot(pid=pid)

    # signals
    def terminate(self, pid: int) -> bool:
        self.events.append(("SIGTERM", self.now))
        if not self.is_alive(pid):
            return False
        self.processes[pid].term_at = self.now
        return True

    def kill(self, pid: int) -> bool:
        self.events.append(("SIGKILL", self.now))
        if not self.is_alive(pid):
            return False
        self.processes[pid].killed = True
        return True

    # clock
    def sleep(self, seconds: float) -> None:
        self.events.append(("sleep", seconds))
        self.now += seconds


class FakeBuilder:
    def __init__(self, succeeds: bool = True, build_log: Path = Path("logs/build.log")):
        self.succeeds = succeeds
        self.build_log = build_log
        self.calls = 0

    def build(self) -> bool:
        self.calls += 1
        return self.succeeds


class FakePopen:
    """Records launches instead of creating processes."""

    launches: list = []
    next_pid = 4242
    exit_code = 0
    interrupt_first_wait = False
    ignores_term = False

    def __init__(self, args, **kwargs):
        self.args = args
        self.kwargs = kwargs
        self.pid = FakePopen.next_pid
        self.killed = False
        self.terminated = False
        self.waits = []
        FakePopen.launches.append(self)

    def wait(self, timeout=None):
        self.waits.append(timeout)
        if FakePopen.interrupt_first_wait and len(self.waits) == 1:
            raise KeyboardInterrupt
        if timeout is not None and FakePopen.ignores_term and not self.killed:
            raise subprocess.TimeoutExpired(self.args, timeout)
        return FakePopen.exit_code

    def terminate(self):
        self.terminated = True

    def kill(self):
        self.killed = True


@pytest.fixture
def table() -> FakeProcessTable:
    return FakeProcessTable()


@pytest.fixture
def memory_store() -> MemoryMarkerStore:
    return MemoryMarkerStore()


@pytest.fixture
def file_store(tmp_path: Path) -> FileMarkerStore:
    return FileMarkerStore(tmp_path / "hexar.pid")


@pytest.fixture
def fake_popen():
    FakePopen.launches = []
    FakePopen.next_pid = 4242
    FakePopen.exit_code = 0
    FakePopen.interrupt_first_wait = False
    FakePopen.ignores_term = False
    return FakePopen


@pytest.fixture
def settings(tmp_path: Path) -> MergedSettings:
    """Controller settings rooted in a temporary project directory."""
    config = MergedSettings(overrides_path=tmp_path / "hexarctl.json")
    config.BASE_DIR = tmp_path
    config.LOGS_DIR = tmp_path / "logs"
    config.CONFIG_FILE_PATH = tmp_path / "config.toml"
    config.PID_FILE_PATH = tmp_path / "hexar.pid"
    config.PROCESS_LOG_PATH = tmp_path / "logs" / "hexar.log"
    config.BUILD_LOG_PATH = tmp_path / "logs" / "build.log"
    config.CONTROLLER_LOG_PATH = tmp_path / "logs" / "controller.log"
    config.STOP_POLL_INTERVAL = 0.05
    config.FORCE_KILL_GRACE_PERIOD = 0.1
    config.CPU_SAMPLE_INTERVAL = 0.0
    return config


@pytest.fixture(autouse=True)
def _reset_root_logger():
    """Keep handlers installed by setup_logging from leaking between tests."""
    root = logging.getLogger()
    saved = list(root.handlers), root.level
    yield
    for handler in root.handlers:
        if handler not in saved[0]:
            handler.close()
    root.handlers[:] = saved[0]
    root.setLevel(saved[1])
