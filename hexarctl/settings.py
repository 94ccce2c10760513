"""
This module contains the configuration settings for the Hexar controller.
It defines paths, the build and run commands of the managed radar process,
and the lifecycle timeouts used by the supervisor.
"""

import os
import shlex
import pathlib
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv(override=True)

#* --- Core Paths ---
BASE_DIR = pathlib.Path(os.getenv("HEXAR_PROJECT_ROOT", os.getcwd())).resolve()  # Project Root
LOGS_DIR = BASE_DIR / "logs"

#* --- Application File Paths ---
CONFIG_FILE_PATH = BASE_DIR / "config.toml"
PID_FILE_PATH = BASE_DIR / "hexar.pid"
PROCESS_LOG_PATH = LOGS_DIR / "hexar.log"
BUILD_LOG_PATH = LOGS_DIR / "build.log"
CONTROLLER_LOG_PATH = LOGS_DIR / "controller.log"
OVERRIDES_JSON_PATH = BASE_DIR / "hexarctl.json"

#* --- Managed Process Commands ---
# Both commands are split shell-style, so quoting works as in a terminal.
BUILD_COMMAND = shlex.split(os.getenv("HEXAR_BUILD_COMMAND", "cargo build --release"))
RUN_COMMAND = shlex.split(os.getenv("HEXAR_RUN_COMMAND", "cargo run --release --bin hexar --"))

#* --- Supervisor Settings ---
STOP_TIMEOUT = int(os.getenv("HEXAR_STOP_TIMEOUT", "30"))  # seconds before force-killing
STOP_POLL_INTERVAL = 1.0      # seconds between liveness probes while stopping
FORCE_KILL_GRACE_PERIOD = 2.0 # seconds to wait after SIGKILL before giving up
CPU_SAMPLE_INTERVAL = 0.1     # seconds, used for the detailed status CPU reading

#* --- Log Display Settings ---
STATUS_LOG_LINES = 10
MONITOR_LOG_LINES = 50
FOLLOW_POLL_INTERVAL = 0.2
LOG_LEVELS = ("TRACE", "DEBUG", "INFO", "WARN", "WARNING", "ERROR")

#* --- Application variables ---
PROCESS_TITLE = "Hexar - Controller"

#* --- MODIFIABLE SETTINGS (Changeable through hexarctl.json) ---
MODIFIABLE_SETTINGS = {
    "STOP_TIMEOUT", "STOP_POLL_INTERVAL", "FORCE_KILL_GRACE_PERIOD",
    "STATUS_LOG_LINES", "MONITOR_LOG_LINES", "FOLLOW_POLL_INTERVAL",
    "BUILD_COMMAND", "RUN_COMMAND",
}
