import sys
import signal
import logging
from typing import List, Optional

import setproctitle

from hexarctl.local import effective_settings as config
from hexarctl.log.setup import setup_logging
from hexarctl.local.console import execute_command, parse_command, print_help
from hexarctl.local.supervisor import ProcessManager
from hexarctl.local.supervisor.errors import ControllerError, InvalidArguments, InvalidCommand

log = logging.getLogger("hexarctl")

INTERRUPTED_EXIT_CODE = 130


def handle_termination_signal(signum, frame):
    """Turns SIGTERM into the same interrupt path as Ctrl+C."""
    raise KeyboardInterrupt(f"signal {signum}")


def main(argv: Optional[List[str]] = None) -> int:
    """
    The main entry point for the controller.

    :param argv: Command-line arguments without the program name.
    :return: The process exit code.
    """
    argv = list(sys.argv[1:] if argv is None else argv)
    verbose = "--verbose" in argv
    argv = [arg for arg in argv if arg != "--verbose"]

    setproctitle.setproctitle(config.PROCESS_TITLE)
    setup_logging(logging.DEBUG if verbose else logging.INFO)
    signal.signal(signal.SIGTERM, handle_termination_signal)

    try:
        invocation = parse_command(argv)
        return execute_command(invocation, ProcessManager(config))
    except (InvalidCommand, InvalidArguments) as e:
        log.error(str(e))
        print_help()
        return e.exit_code
    except ControllerError as e:
        log.error(str(e))
        return e.exit_code
    except KeyboardInterrupt:
        log.warning("Interrupted")
        return INTERRUPTED_EXIT_CODE
    except OSError as e:
        log.error(f"An unexpected error occurred: {e}", exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
