from pathlib import Path
from typing import Optional


class ControllerError(Exception):
    """Base class for failures the controller reports to the operator."""
    exit_code = 1


class InvalidCommand(ControllerError):
    """The top-level command is not one the controller knows."""


class InvalidArguments(ControllerError):
    """The command is known but its options or arguments are malformed."""


class LaunchError(ControllerError):
    """The managed process could not be started."""


class BuildFailed(LaunchError):
    """The build step failed, so nothing was launched."""

    def __init__(self, build_log: Optional[Path] = None) -> None:
        self.build_log = build_log
        detail = f" Check {build_log} for details" if build_log else ""
        super().__init__(f"Build failed.{detail}")


class ShutdownError(ControllerError):
    """The managed process could not be signalled."""


class ShutdownFailed(ShutdownError):
    """The process survived the forceful kill. The marker is left in place."""

    def __init__(self, pid: int) -> None:
        self.pid = pid
        super().__init__(f"Failed to kill process {pid}")


class MarkerExistsError(ControllerError):
    """Another invocation already owns the instance marker."""

    def __init__(self, path: Path, pid: Optional[int] = None) -> None:
        self.path = path
        self.pid = pid
        owner = f" (PID: {pid})" if pid else ""
        super().__init__(f"Instance marker '{path}' already exists{owner}")
