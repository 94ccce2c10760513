import logging
from typing import Optional

from hexarctl.local import effective_settings
from hexarctl.local.config import MergedSettings
from .build import Builder
from .launcher import Launcher, LaunchOutcome
from .logs import LogFollower
from .marker import FileMarkerStore, MarkerStore
from .process_utils import ProcessProbe, SignalSender
from .shutdown import ShutdownCoordinator, StopOutcome
from .status import StatusInspector, StatusReport

log = logging.getLogger(__name__)


class ProcessManager:
    """
    Manages the lifecycle of the managed radar process.

    This class wires the marker store, probe and signal sender into the
    launcher, shutdown coordinator, status inspector and log follower, and
    enforces that only one instance runs at a time.
    """

    def __init__(
        self,
        config: MergedSettings = effective_settings,
        store: Optional[MarkerStore] = None,
        probe: Optional[ProcessProbe] = None,
        signals: Optional[SignalSender] = None,
        builder: Optional[Builder] = None,
        launcher: Optional[Launcher] = None,
        shutdown: Optional[ShutdownCoordinator] = None,
        inspector: Optional[StatusInspector] = None,
        follower: Optional[LogFollower] = None,
    ) -> None:
        """Initializes the ProcessManager, building any collaborator not supplied."""
        self.config = config
        self.store = store or FileMarkerStore(config.PID_FILE_PATH)
        self.probe = probe or ProcessProbe(config.CPU_SAMPLE_INTERVAL)
        self.signals = signals or SignalSender()
        self.builder = builder or Builder(config.BUILD_COMMAND, config.BASE_DIR, config.BUILD_LOG_PATH)
        self.launcher = launcher or Launcher(
            self.store, self.builder, config.RUN_COMMAND, config.BASE_DIR,
            config.PROCESS_LOG_PATH, config.CONFIG_FILE_PATH,
            grace_period=config.FORCE_KILL_GRACE_PERIOD,
        )
        self.shutdown = shutdown or ShutdownCoordinator(
            self.store, self.probe, self.signals,
            poll_interval=config.STOP_POLL_INTERVAL,
            force_grace_period=config.FORCE_KILL_GRACE_PERIOD,
        )
        self.inspector = inspector or StatusInspector(
            self.store, self.probe, config.PROCESS_LOG_PATH,
            config.CONFIG_FILE_PATH, config.STATUS_LOG_LINES,
        )
        self.follower = follower or LogFollower(
            config.PROCESS_LOG_PATH, config.MONITOR_LOG_LINES,
            config.STATUS_LOG_LINES, config.FOLLOW_POLL_INTERVAL,
        )

    def running_pid(self) -> Optional[int]:
        """
        Returns the PID of the live instance, clearing a stale marker on the way.

        :return: The PID if the recorded process is alive, else None.
        """
        pid = self.store.read()
        if pid is None:
            return None
        if self.probe.is_alive(pid):
            return pid
        log.warning(f"Removing stale PID file (PID {pid} is not running)")
        self.store.clear()
        return None

    def start(self, daemon: bool = False, unsafe: bool = False) -> LaunchOutcome:
        """
        Starts the managed process unless an instance is already alive.

        :param daemon: Detach the process and record its PID.
        :param unsafe: Start with safety checks bypassed.
        :return: The launch outcome; `already_running` is set when nothing was done.
        """
        pid = self.running_pid()
        if pid is not None:
            log.warning(f"System is already running (PID: {pid})")
            return LaunchOutcome(daemon=daemon, pid=pid, already_running=True)
        return self.launcher.start(daemon=daemon, unsafe=unsafe)

    def stop(self, timeout: Optional[float] = None) -> StopOutcome:
        """Stops the recorded instance, escalating to SIGKILL after `timeout` seconds."""
        if timeout is None:
            timeout = self.config.STOP_TIMEOUT
        return self.shutdown.stop(timeout)

    def status(self, detailed: bool = False) -> StatusReport:
        log.info("Checking system status...")
        return self.inspector.status(detailed)

    def diagnose(self, component: Optional[str] = None) -> int:
        """Builds and runs the managed binary's diagnostics in the foreground."""
        log.info("Running system diagnostics...")
        args = ["diagnose"]
        if component:
            args += ["--component", component]
        return self.launcher.run_action(args)

    def configure(self, action: str, key: Optional[str] = None, value: Optional[str] = None) -> int:
        """Relays a configuration action to the managed binary."""
        log.info(f"Configuration action: {action}")
        args = ["config", action]
        if action == "set":
            args += [key, value]
        return self.launcher.run_action(args)

    def monitor(self, follow: bool = False, level: Optional[str] = None) -> bool:
        log.info("Starting system monitoring...")
        return self.follower.show(follow=follow, level=level)

    def build(self) -> bool:
        return self.builder.build()
