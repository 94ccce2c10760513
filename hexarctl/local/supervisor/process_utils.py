import sys
import time
import psutil
import logging
import subprocess
from dataclasses import dataclass
from typing import Any, Dict, Optional

from .errors import ShutdownError

log = logging.getLogger(__name__)


#* --- Process Status & Monitoring ---
@dataclass
class ProcessSnapshot:
    """Best-effort OS accounting for one process. Unknown values are None."""
    pid: int
    name: Optional[str] = None
    start_time: Optional[float] = None
    memory_kb: Optional[int] = None
    cpu_percent: Optional[float] = None

    @property
    def started(self) -> str:
        if self.start_time is None:
            return "Unknown"
        return time.strftime('%a %b %d %H:%M:%S %Y', time.localtime(self.start_time))


class ProcessProbe:
    """Answers questions about a PID without affecting the process."""

    def __init__(self, cpu_sample_interval: float = 0.1) -> None:
        self.cpu_sample_interval = cpu_sample_interval

    def is_alive(self, pid: int) -> bool:
        """
        Checks whether a PID refers to a live process.

        Zombies count as dead. A process we are not allowed to inspect still
        counts as alive. A recycled PID is indistinguishable from the
        original process.
        """
        if pid is None or pid <= 0:
            return False
        try:
            proc = psutil.Process(pid)
            return proc.is_running() and proc.status() != psutil.STATUS_ZOMBIE
        except psutil.NoSuchProcess:
            return False
        except psutil.AccessDenied:
            return True

    def snapshot(self, pid: int) -> ProcessSnapshot:
        """Collects start time, memory and CPU usage. Each field may degrade to None."""
        snap = ProcessSnapshot(pid=pid)
        try:
            proc = psutil.Process(pid)
        except psutil.Error as e:
            log.debug(f"Could not inspect PID {pid}: {e}")
            return snap

        readers = {
            "name": proc.name,
            "start_time": proc.create_time,
            "memory_kb": lambda: proc.memory_info().rss // 1024,
            "cpu_percent": lambda: proc.cpu_percent(interval=self.cpu_sample_interval),
        }
        for field, reader in readers.items():
            try:
                setattr(snap, field, reader())
            except psutil.Error as e:
                log.debug(f"Could not read {field} for PID {pid}: {e}")
        return snap


#* --- Signal Delivery ---
class SignalSender:
    """Delivers the polite (SIGTERM) and forceful (SIGKILL) signals."""

    def terminate(self, pid: int) -> bool:
        """
        Sends SIGTERM to a process.

        :return: False if the process was already gone, True otherwise.
        :raises ShutdownError: If the signal is not permitted.
        """
        return self._send(pid, "terminate")

    def kill(self, pid: int) -> bool:
        """Sends SIGKILL to a process. Same contract as `terminate`."""
        return self._send(pid, "kill")

    @staticmethod
    def _send(pid: int, method: str) -> bool:
        try:
            getattr(psutil.Process(pid), method)()
            return True
        except psutil.NoSuchProcess:
            log.debug(f"Process {pid} no longer exists, skipping {method}.")
            return False
        except psutil.AccessDenied as e:
            raise ShutdownError(f"Permission denied sending {method} to process {pid}") from e


#* --- Process Creation ---
def get_popen_creation_flags() -> Dict[str, Any]:
    """Returns platform-specific flags that detach a child from our session."""
    if sys.platform == "win32":
        return {"creationflags": subprocess.DETACHED_PROCESS | subprocess.CREATE_NEW_PROCESS_GROUP}
    return {"start_new_session": True}


def relay_process_output(process: subprocess.Popen, name: str, sink=None) -> None:
    """
    Reads a child's combined output line by line until it closes, logging each
    line under `proc.<name>` and copying it into `sink` when given.
    """
    proc_logger = logging.getLogger(f"proc.{name}")
    for line_bytes in iter(process.stdout.readline, b""):
        line = line_bytes.decode("utf-8", errors="replace").rstrip()
        if sink is not None:
            sink.write(line + "\n")
        if line:
            proc_logger.info(line)
    process.stdout.close()
