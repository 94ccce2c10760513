import sys
import logging
from pathlib import Path
from typing import Optional

import colorama
from colorama import Fore, Style

from hexarctl.local import effective_settings as config

# Success messages sit between INFO and WARNING.
SUCCESS = 25
logging.addLevelName(SUCCESS, "SUCCESS")


class ConsoleFormatter(logging.Formatter):
    """A colored formatter for operator-facing logs and raw subprocess output."""

    LEVEL_PREFIXES = {
        logging.DEBUG: f"{Style.DIM}[DEBUG]{Style.RESET_ALL}",
        SUCCESS: f"{Fore.GREEN}[SUCCESS]{Style.RESET_ALL}",
        logging.WARNING: f"{Fore.YELLOW}{Style.BRIGHT}[WARN]{Style.RESET_ALL}",
        logging.ERROR: f"{Fore.RED}[ERROR]{Style.RESET_ALL}",
        logging.CRITICAL: f"{Fore.RED}{Style.BRIGHT}[CRITICAL]{Style.RESET_ALL}",
    }

    def format(self, record):
        # Output relayed from a child process (e.g. the build) is printed as-is.
        if record.name.startswith('proc.'):
            return record.getMessage()

        prefix = self.LEVEL_PREFIXES.get(record.levelno)
        if prefix is None:
            timestamp = self.formatTime(record, '%Y-%m-%d %H:%M:%S')
            prefix = f"{Fore.BLUE}[{timestamp}]{Style.RESET_ALL}"
        message = f"{prefix} {record.getMessage()}"
        if record.exc_info:
            message = f"{message}\n{self.formatException(record.exc_info)}"
        return message


def setup_logging(console_level: int = logging.INFO, log_path: Optional[Path] = None) -> None:
    """
    Configures the root logger for the controller.
    This sets up a colored console handler and a plain file handler,
    clearing any previously configured handlers to prevent duplication.

    :param console_level: The logging level for the console output (e.g., logging.INFO).
    :param log_path: The controller log file, defaults to `CONTROLLER_LOG_PATH`.
    """
    colorama.just_fix_windows_console()
    log_path = log_path or config.CONTROLLER_LOG_PATH

    root_logger = logging.getLogger()
    # Set root level to lowest to capture all messages for handler filtering
    root_logger.setLevel(logging.DEBUG)

    # Clear any existing handlers to prevent re-adding them on re-runs
    if root_logger.hasHandlers():
        root_logger.handlers.clear()

    # --- Console Handler ---
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(console_level)
    console_handler.setFormatter(ConsoleFormatter())
    root_logger.addHandler(console_handler)

    # --- File Handler (always enabled for all levels) ---
    try:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter('%(asctime)s - %(levelname)-8s - [%(name)s] - %(message)s'))
        root_logger.addHandler(file_handler)
    except OSError as e:
        root_logger.error(f"Failed to initialize controller log file '{log_path}': {e}. Logging to file will be disabled.")
