import shutil
import logging
import subprocess
from pathlib import Path
from typing import List

from hexarctl.log import SUCCESS
from .process_utils import relay_process_output

log = logging.getLogger(__name__)


class Builder:
    """
    Runs the build step that produces the managed executable.

    The build is opaque: only its exit status matters. Output goes to the
    console and to the build log, which is rewritten on every build.
    """

    def __init__(self, command: List[str], cwd: Path, build_log: Path) -> None:
        self.command = list(command)
        self.cwd = Path(cwd)
        self.build_log = Path(build_log)

    def check_toolchain(self) -> bool:
        """
        Validates that the build tool can be found.

        :return: True if the executable is on PATH (or is an existing path).
        """
        if not self.command:
            log.error("No build command is configured (HEXAR_BUILD_COMMAND).")
            return False
        tool = self.command[0]
        if shutil.which(tool) is None:
            log.error(f"'{tool}' is not installed or not in PATH")
            if tool == "cargo":
                log.error("Please install Rust from https://rustup.rs/")
            return False
        log.debug(f"Toolchain check OK: found '{tool}' at '{shutil.which(tool)}'")
        return True

    def build(self) -> bool:
        """
        Runs the build command, tee'ing its output into the build log.

        :return: True if the build succeeded.
        """
        if not self.check_toolchain():
            return False

        log.info("Building hexar project...")
        self.build_log.parent.mkdir(parents=True, exist_ok=True)
        try:
            with self.build_log.open("w", encoding="utf-8") as sink:
                process = subprocess.Popen(
                    self.command, cwd=str(self.cwd), stdin=subprocess.DEVNULL,
                    stdout=subprocess.PIPE, stderr=subprocess.STDOUT,
                )
                relay_process_output(process, "build", sink)
                return_code = process.wait()
        except OSError as e:
            log.error(f"Could not run build command {self.command}: {e}")
            return False

        if return_code != 0:
            log.error(f"Build failed. Check {self.build_log} for details")
            return False
        log.log(SUCCESS, "Build completed successfully")
        return True
