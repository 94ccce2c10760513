import os
import logging
from pathlib import Path
from typing import Optional

from .errors import MarkerExistsError

log = logging.getLogger(__name__)


class MarkerStore:
    """
    The durable record of which process is the running instance.

    A marker exists while the controller believes the managed process is
    running. Subclasses decide where it lives.
    """

    def read(self) -> Optional[int]:
        raise NotImplementedError

    def write(self, pid: int) -> None:
        raise NotImplementedError

    def clear(self) -> None:
        raise NotImplementedError

    def exists(self) -> bool:
        return self.read() is not None


class FileMarkerStore(MarkerStore):
    """Keeps the PID as text in a single file, e.g. `hexar.pid`."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def __repr__(self) -> str:
        return f"FileMarkerStore({str(self.path)!r})"

    def exists(self) -> bool:
        return self.path.exists()

    def read(self) -> Optional[int]:
        """
        Reads the PID file from disk.

        :return: The PID if the file exists and is valid, else None.
        """
        try:
            content = self.path.read_text().strip()
        except FileNotFoundError:
            return None
        except OSError as e:
            log.error(f"Could not read PID file '{self.path}': {e}")
            raise

        try:
            pid = int(content)
        except ValueError:
            pid = 0
        if pid <= 0:
            log.warning(f"PID file '{self.path}' is malformed ({content!r}). Removing it.")
            self.clear()
            return None
        return pid

    def write(self, pid: int) -> None:
        """
        Publishes the PID, failing if a marker is already present.

        The PID is written to a temp file first and then hard-linked into
        place, so a reader never sees a partial value and two writers
        cannot both succeed.

        :param pid: The process ID of the managed process.
        :raises MarkerExistsError: If another instance already holds the marker.
        """
        if pid <= 0:
            raise ValueError(f"Refusing to record invalid PID {pid}")

        self.path.parent.mkdir(parents=True, exist_ok=True)
        temp_pid_path = self.path.with_name(f".{self.path.name}.{os.getpid()}.tmp")
        try:
            with temp_pid_path.open("w") as f:
                f.write(f"{pid}\n")
                f.flush()
                os.fsync(f.fileno())
            os.link(temp_pid_path, self.path)
        except FileExistsError:
            raise MarkerExistsError(self.path, self._peek()) from None
        finally:
            temp_pid_path.unlink(missing_ok=True)
        log.debug(f"Wrote PID {pid} to '{self.path}'.")

    def clear(self) -> None:
        """Removes the PID file. Does nothing if it is already gone."""
        self.path.unlink(missing_ok=True)
        log.debug(f"Cleared PID file '{self.path}'.")

    def _peek(self) -> Optional[int]:
        """Reads the current owner without the cleanup side effects of `read`."""
        try:
            return int(self.path.read_text().strip())
        except (OSError, ValueError):
            return None


class MemoryMarkerStore(MarkerStore):
    """An in-process marker, used where the filesystem is not wanted."""

    def __init__(self, pid: Optional[int] = None) -> None:
        self.pid = pid

    def read(self) -> Optional[int]:
        return self.pid

    def write(self, pid: int) -> None:
        if pid <= 0:
            raise ValueError(f"Refusing to record invalid PID {pid}")
        if self.pid is not None:
            raise MarkerExistsError(Path("<memory>"), self.pid)
        self.pid = pid

    def clear(self) -> None:
        self.pid = None
