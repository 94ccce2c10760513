import time
import logging
from enum import Enum
from typing import Callable

from hexarctl.log import SUCCESS
from .errors import ShutdownFailed
from .marker import MarkerStore
from .process_utils import ProcessProbe, SignalSender

log = logging.getLogger(__name__)


class ShutdownState(Enum):
    IDLE = "idle"
    SIGNAL_SENT = "signal_sent"
    WAITING_GRACEFUL = "waiting_graceful"
    SIGNAL_ESCALATED = "signal_escalated"
    WAITING_FORCE = "waiting_force"
    TERMINATED = "terminated"
    FAILED = "failed"


class StopOutcome(Enum):
    NOT_RUNNING = "not_running"
    STALE_MARKER_CLEARED = "stale_marker_cleared"
    STOPPED = "stopped"
    KILLED = "killed"


class ShutdownCoordinator:
    """
    Stops the recorded instance: SIGTERM, a bounded wait, then SIGKILL.

    The marker is cleared once the process is confirmed dead. If even
    SIGKILL does not take, the marker stays so the operator can look.
    """

    def __init__(
        self,
        store: MarkerStore,
        probe: ProcessProbe,
        signals: SignalSender,
        poll_interval: float = 1.0,
        force_grace_period: float = 2.0,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.store = store
        self.probe = probe
        self.signals = signals
        self.poll_interval = poll_interval
        self.force_grace_period = force_grace_period
        self.sleep = sleep
        self.state = ShutdownState.IDLE

    def _transition(self, state: ShutdownState) -> None:
        log.debug(f"Shutdown state: {self.state.value} -> {state.value}")
        self.state = state

    def stop(self, timeout: float = 30) -> StopOutcome:
        """
        Runs the stop sequence for the recorded instance.

        :param timeout: Seconds to wait after SIGTERM before escalating.
        :return: How the instance ended up stopped.
        :raises ShutdownFailed: If the process survives SIGKILL.
        :raises ShutdownError: If the process may not be signalled.
        """
        self.state = ShutdownState.IDLE
        log.info("Stopping hexar radar system...")

        pid = self.store.read()
        if pid is None:
            log.warning("PID file not found. System may not be running.")
            return StopOutcome.NOT_RUNNING

        if not self.probe.is_alive(pid):
            log.warning(f"Process {pid} is not running. Removing PID file.")
            self.store.clear()
            return StopOutcome.STALE_MARKER_CLEARED

        log.info(f"Sending SIGTERM to process {pid}...")
        self._transition(ShutdownState.SIGNAL_SENT)
        outcome = StopOutcome.STOPPED
        if self.signals.terminate(pid) and not self._wait_graceful(pid, timeout):
            log.warning("Graceful shutdown timed out. Sending SIGKILL...")
            self._transition(ShutdownState.SIGNAL_ESCALATED)
            self.signals.kill(pid)
            self._transition(ShutdownState.WAITING_FORCE)
            self.sleep(self.force_grace_period)
            if self.probe.is_alive(pid):
                self._transition(ShutdownState.FAILED)
                log.error(f"Failed to kill process {pid}. Leaving PID file in place.")
                raise ShutdownFailed(pid)
            outcome = StopOutcome.KILLED

        self._transition(ShutdownState.TERMINATED)
        self.store.clear()
        log.log(SUCCESS, "System stopped successfully")
        return outcome

    def _wait_graceful(self, pid: int, timeout: float) -> bool:
        """Polls until the process exits or `timeout` seconds pass. True if it exited."""
        self._transition(ShutdownState.WAITING_GRACEFUL)
        waited = 0.0
        while waited < timeout:
            if not self.probe.is_alive(pid):
                return True
            self.sleep(self.poll_interval)
            waited += self.poll_interval
        return not self.probe.is_alive(pid)
