import logging
import subprocess
from pathlib import Path
from dataclasses import dataclass
from typing import Callable, List, Optional

from hexarctl.log import SUCCESS
from .build import Builder
from .errors import BuildFailed, LaunchError, MarkerExistsError
from .marker import MarkerStore
from .process_utils import get_popen_creation_flags

log = logging.getLogger(__name__)


@dataclass
class LaunchOutcome:
    """What happened when `start` was requested."""
    daemon: bool
    pid: Optional[int] = None
    already_running: bool = False
    exit_code: Optional[int] = None
    log_path: Optional[Path] = None


class Launcher:
    """
    Builds and starts the managed process in the foreground or as a daemon.

    The caller must have checked that no instance is alive; the launcher
    itself only guards the marker through its exclusive write.
    """

    def __init__(
        self,
        store: MarkerStore,
        builder: Builder,
        run_command: List[str],
        cwd: Path,
        process_log: Path,
        config_path: Optional[Path] = None,
        popen: Callable[..., subprocess.Popen] = subprocess.Popen,
        grace_period: float = 2.0,
    ) -> None:
        self.store = store
        self.builder = builder
        self.run_command = list(run_command)
        self.cwd = Path(cwd)
        self.process_log = Path(process_log)
        self.config_path = config_path
        self.popen = popen
        self.grace_period = grace_period

    def _config_args(self) -> List[str]:
        """Forwards the config file path only when the file is present."""
        if self.config_path is not None and Path(self.config_path).is_file():
            return ["--config", str(self.config_path)]
        return []

    def build_arguments(self, daemon: bool, unsafe: bool) -> List[str]:
        """Returns the full argument vector for a `start` of the managed process."""
        args = self.run_command + ["start"]
        if daemon:
            args.append("--daemon")
        if unsafe:
            args.append("--unsafe-mode")
            log.warning("Starting in UNSAFE MODE - safety checks bypassed")
        return args + self._config_args()

    def _require_build(self) -> None:
        if not self.builder.build():
            raise BuildFailed(self.builder.build_log)

    def start(self, daemon: bool = False, unsafe: bool = False) -> LaunchOutcome:
        """
        Builds and launches the managed process.

        :param daemon: Detach the process and record its PID.
        :param unsafe: Pass the unsafe-mode flag through to the process.
        :raises BuildFailed: If the build step fails. Nothing is launched.
        :raises LaunchError: If the process could not be started or recorded.
        """
        log.info("Starting hexar radar system...")
        self._require_build()
        args = self.build_arguments(daemon, unsafe)
        log.info(f"Executing: {subprocess.list2cmdline(args)}")

        if daemon:
            return self._start_daemon(args)

        exit_code = self._run_foreground(args)
        return LaunchOutcome(daemon=False, exit_code=exit_code)

    def run_action(self, action_args: List[str]) -> int:
        """
        Builds, then runs a one-shot action of the managed binary in the
        foreground (e.g. `diagnose` or `config show`).

        :return: The exit code of the managed binary.
        """
        self._require_build()
        args = self.run_command + list(action_args) + self._config_args()
        log.info(f"Executing: {subprocess.list2cmdline(args)}")
        return self._run_foreground(args)

    def _run_foreground(self, args: List[str]) -> int:
        try:
            process = self.popen(args, cwd=str(self.cwd))
        except OSError as e:
            raise LaunchError(f"Failed to start '{args[0]}': {e}") from e
        try:
            return process.wait()
        except KeyboardInterrupt:
            log.warning(f"Interrupted, stopping PID {process.pid}")
            self._terminate(process)
            raise

    def _terminate(self, process: subprocess.Popen) -> None:
        """Sends SIGTERM and waits, killing the child if it outlives the grace period."""
        process.terminate()
        try:
            process.wait(timeout=self.grace_period)
        except subprocess.TimeoutExpired:
            log.warning(f"PID {process.pid} ignored SIGTERM, killing it.")
            process.kill()
            process.wait()

    def _discard(self, process: subprocess.Popen) -> None:
        process.kill()
        process.wait()

    def _start_daemon(self, args: List[str]) -> LaunchOutcome:
        self.process_log.parent.mkdir(parents=True, exist_ok=True)
        try:
            with self.process_log.open("ab") as sink:
                process = self.popen(
                    args, cwd=str(self.cwd), stdin=subprocess.DEVNULL,
                    stdout=sink, stderr=subprocess.STDOUT, **get_popen_creation_flags(),
                )
        except OSError as e:
            raise LaunchError(f"Failed to start '{args[0]}': {e}") from e

        try:
            self.store.write(process.pid)
        except MarkerExistsError as e:
            log.error(f"Another controller claimed the instance first ({e}). Killing PID {process.pid}.")
            self._discard(process)
            raise LaunchError(f"Instance already started by another controller (PID: {e.pid})") from e
        except OSError as e:
            log.error(f"Could not record PID {process.pid}: {e}. Killing it.")
            self._discard(process)
            raise LaunchError(f"Failed to write PID file: {e}") from e
        except KeyboardInterrupt:
            log.warning(f"Interrupted before PID {process.pid} was recorded. Killing it.")
            self._discard(process)
            raise

        log.log(SUCCESS, f"System started in daemon mode (PID: {process.pid})")
        log.log(SUCCESS, f"Logs: {self.process_log}")
        return LaunchOutcome(daemon=True, pid=process.pid, log_path=self.process_log)
