import logging
from pathlib import Path
from dataclasses import dataclass, field
from typing import List, Optional

from .logs import tail_lines
from .marker import MarkerStore
from .process_utils import ProcessProbe, ProcessSnapshot

log = logging.getLogger(__name__)


@dataclass
class StatusReport:
    running: bool
    pid: Optional[int] = None
    stale_marker_cleared: bool = False
    snapshot: Optional[ProcessSnapshot] = None
    config_path: Optional[Path] = None
    log_dir: Optional[Path] = None
    recent_log_lines: List[str] = field(default_factory=list)


class StatusInspector:
    """
    Reports whether the recorded instance is alive.

    Never fails: missing metadata becomes "unknown" and a stale marker is
    cleaned up rather than reported as an error.
    """

    def __init__(self, store: MarkerStore, probe: ProcessProbe, process_log: Path,
                 config_path: Optional[Path] = None, log_lines: int = 10) -> None:
        self.store = store
        self.probe = probe
        self.process_log = Path(process_log)
        self.config_path = config_path
        self.log_lines = log_lines

    def status(self, detailed: bool = False) -> StatusReport:
        """
        Builds a status report for the current instance.

        :param detailed: Include start time, memory and CPU of a running instance.
        """
        report = StatusReport(running=False, log_dir=self.process_log.parent)
        if self.config_path is not None and Path(self.config_path).is_file():
            report.config_path = Path(self.config_path)

        try:
            pid = self.store.read()
        except OSError as e:
            log.error(f"Could not read the PID file: {e}")
            pid = None

        if pid is not None:
            if self.probe.is_alive(pid):
                report.running = True
                report.pid = pid
                if detailed:
                    report.snapshot = self.probe.snapshot(pid)
            else:
                log.warning(f"Removing stale PID file (PID {pid} is not running)")
                try:
                    self.store.clear()
                    report.stale_marker_cleared = True
                except OSError as e:
                    log.error(f"Could not remove stale PID file: {e}")

        if self.process_log.exists():
            try:
                report.recent_log_lines = tail_lines(self.process_log, self.log_lines)
            except OSError as e:
                log.warning(f"Could not read {self.process_log}: {e}")
        return report
