import os
import re
import sys
import logging
import threading
from pathlib import Path
from collections import deque
from typing import Callable, Iterable, List, Optional

log = logging.getLogger(__name__)


def tail_lines(path: Path, count: int) -> List[str]:
    """Returns the last `count` lines of a text file, without newlines."""
    with open(path, 'r', encoding='utf-8', errors='replace') as f:
        return [line.rstrip("\n") for line in deque(f, maxlen=count)]


def level_filter(level: Optional[str]) -> Callable[[str], bool]:
    """Builds a predicate keeping lines that mention `level` as a word."""
    if not level:
        return lambda line: True
    pattern = re.compile(rf"\b{re.escape(level)}\b", re.IGNORECASE)
    return lambda line: bool(pattern.search(line))


class LogFollower:
    """Shows the managed process's log, once or continuously."""

    def __init__(
        self,
        log_path: Path,
        tail_count: int = 50,
        follow_tail_count: int = 10,
        poll_interval: float = 0.2,
        write: Callable[[str], None] = print,
    ) -> None:
        self.log_path = Path(log_path)
        self.tail_count = tail_count
        self.follow_tail_count = follow_tail_count
        self.poll_interval = poll_interval
        self.write = write

    def show(self, follow: bool = False, level: Optional[str] = None,
             stop_event: Optional[threading.Event] = None) -> bool:
        """
        Prints the log tail, and with `follow` keeps printing new lines.

        Following blocks until `stop_event` is set or the operator interrupts.

        :return: False if the log file does not exist.
        """
        if not self.log_path.exists():
            log.warning(f"Log file not found: {self.log_path}")
            return False

        keep = level_filter(level)
        if not follow:
            log.info("Recent log entries:")
            self._emit(tail_lines(self.log_path, self.tail_count), keep)
            return True

        log.info("Following logs (Ctrl+C to stop):")
        self._follow(keep, stop_event or threading.Event())
        return True

    def _emit(self, lines: Iterable[str], keep: Callable[[str], bool]) -> None:
        for line in lines:
            if keep(line):
                self.write(line)

    def _follow(self, keep: Callable[[str], bool], stop_event: threading.Event) -> None:
        with open(self.log_path, 'r', encoding='utf-8', errors='replace') as f:
            self._emit((line.rstrip("\n") for line in deque(f, maxlen=self.follow_tail_count)), keep)
            pending = ""
            while not stop_event.is_set():
                chunk = f.readline()
                if not chunk:
                    if self._was_truncated(f):
                        log.debug(f"{self.log_path} was truncated, reading from the start.")
                        f.seek(0)
                        pending = ""
                    stop_event.wait(self.poll_interval)
                    continue
                pending += chunk
                # A line without its newline is still being written.
                if not pending.endswith("\n"):
                    continue
                self._emit([pending.rstrip("\n")], keep)
                sys.stdout.flush()
                pending = ""

    def _was_truncated(self, f) -> bool:
        try:
            return os.stat(self.log_path).st_size < f.tell()
        except FileNotFoundError:
            return False
