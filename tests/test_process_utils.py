import os
import sys
import subprocess
import time

import psutil
import pytest

from hexarctl.local.supervisor import process_utils
from hexarctl.local.supervisor.errors import ShutdownError
from hexarctl.local.supervisor.process_utils import ProcessProbe, ProcessSnapshot, SignalSender


class _GoneProcess:
    def __init__(self, pid):
        raise psutil.NoSuchProcess(pid)


class _DeniedProcess:
    def __init__(self, pid):
        self.pid = pid

    def __getattr__(self, name):
        def denied(*args, **kwargs):
            raise psutil.AccessDenied(self.pid)
        return denied


def test_own_process_is_alive():
    assert ProcessProbe().is_alive(os.getpid())


@pytest.mark.parametrize("pid", [None, 0, -1])
def test_invalid_pids_are_not_alive(pid):
    assert not ProcessProbe().is_alive(pid)


def test_missing_process_is_not_alive(monkeypatch):
    monkeypatch.setattr(process_utils.psutil, "Process", _GoneProcess)
    assert not ProcessProbe().is_alive(123456)


def test_access_denied_counts_as_alive(monkeypatch):
    monkeypatch.setattr(process_utils.psutil, "Process", _DeniedProcess)
    assert ProcessProbe().is_alive(1)


@pytest.mark.skipif(sys.platform == "win32", reason="zombies are POSIX-only")
def test_zombie_child_is_not_alive():
    child = subprocess.Popen([sys.executable, "-c", "pass"])
    try:
        deadline = time.monotonic() + 10
        while psutil.Process(child.pid).status() != psutil.STATUS_ZOMBIE and time.monotonic() < deadline:
            time.sleep(0.05)
        assert not ProcessProbe().is_alive(child.pid)
    finally:
        child.wait()


def test_snapshot_of_own_process_has_metrics():
    snap = ProcessProbe(cpu_sample_interval=0.0).snapshot(os.getpid())

    assert snap.pid == os.getpid()
    assert snap.memory_kb and snap.memory_kb > 0
    assert snap.start_time is not None
    assert snap.cpu_percent is not None


def test_snapshot_degrades_to_unknown(monkeypatch):
    monkeypatch.setattr(process_utils.psutil, "Process", _DeniedProcess)
    snap = ProcessProbe().snapshot(42)

    assert snap == ProcessSnapshot(pid=42)
    assert snap.started == "Unknown"


def test_snapshot_of_missing_process_degrades(monkeypatch):
    monkeypatch.setattr(process_utils.psutil, "Process", _GoneProcess)
    assert ProcessProbe().snapshot(42) == ProcessSnapshot(pid=42)


def test_signalling_missing_process_returns_false(monkeypatch):
    monkeypatch.setattr(process_utils.psutil, "Process", _GoneProcess)
    signals = SignalSender()

    assert signals.terminate(5) is False
    assert signals.kill(5) is False


def test_signalling_denied_process_raises(monkeypatch):
    monkeypatch.setattr(process_utils.psutil, "Process", _DeniedProcess)
    with pytest.raises(ShutdownError):
        SignalSender().terminate(1)


def test_creation_flags_detach_child():
    flags = process_utils.get_popen_creation_flags()
    if sys.platform == "win32":
        assert "creationflags" in flags
    else:
        assert flags == {"start_new_session": True}
