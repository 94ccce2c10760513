import logging
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, TYPE_CHECKING

from hexarctl.local import effective_settings as config
from hexarctl.local.supervisor.errors import InvalidArguments, InvalidCommand
from hexarctl.local.console.handler import display_launch, display_status, print_help

if TYPE_CHECKING:
    from hexarctl.local.supervisor import ProcessManager

log = logging.getLogger(__name__)

COMMANDS = ("start", "stop", "status", "diagnose", "config", "monitor", "build", "help")
CONFIG_ACTIONS = ("show", "validate", "reset", "set")


@dataclass
class CommandInvocation:
    """One parsed operator command. Only the fields of `action` are meaningful."""
    action: str
    daemon: bool = False
    unsafe: bool = False
    timeout: Optional[int] = None
    detailed: bool = False
    component: Optional[str] = None
    config_action: Optional[str] = None
    key: Optional[str] = None
    value: Optional[str] = None
    follow: bool = False
    level: Optional[str] = None


#* --- Parsing ---
def _reject_extra(command: str, args: List[str]) -> None:
    if args:
        raise InvalidArguments(f"Unexpected argument for '{command}': {args[0]}")


def _parse_start(args: List[str]) -> CommandInvocation:
    invocation = CommandInvocation("start")
    for arg in args:
        if arg == "--daemon":
            invocation.daemon = True
        elif arg == "--unsafe":
            invocation.unsafe = True
        else:
            raise InvalidArguments(f"Unknown option: {arg}")
    return invocation


def _parse_stop(args: List[str]) -> CommandInvocation:
    invocation = CommandInvocation("stop")
    if args:
        try:
            invocation.timeout = int(args[0])
        except ValueError:
            raise InvalidArguments(f"Timeout must be a whole number of seconds, got '{args[0]}'") from None
        if invocation.timeout < 0:
            raise InvalidArguments(f"Timeout must not be negative, got {invocation.timeout}")
        _reject_extra("stop", args[1:])
    return invocation


def _parse_status(args: List[str]) -> CommandInvocation:
    invocation = CommandInvocation("status")
    if args and args[0] == "--detailed":
        invocation.detailed = True
        args = args[1:]
    _reject_extra("status", args)
    return invocation


def _parse_diagnose(args: List[str]) -> CommandInvocation:
    invocation = CommandInvocation("diagnose", component=args[0] if args else None)
    _reject_extra("diagnose", args[1:])
    return invocation


def _parse_config(args: List[str]) -> CommandInvocation:
    if not args:
        raise InvalidArguments(f"Config requires an action: {', '.join(CONFIG_ACTIONS)}")
    action = args[0].lower()
    if action not in CONFIG_ACTIONS:
        raise InvalidArguments(f"Unknown config action: {args[0]}")

    invocation = CommandInvocation("config", config_action=action)
    if action == "set":
        if len(args) < 3 or not args[1] or not " ".join(args[2:]).strip():
            raise InvalidArguments("Config set requires key and value")
        invocation.key, invocation.value = args[1], " ".join(args[2:])
    else:
        _reject_extra(f"config {action}", args[1:])
    return invocation


def _parse_monitor(args: List[str]) -> CommandInvocation:
    invocation = CommandInvocation("monitor")
    if args and args[0] == "--follow":
        invocation.follow = True
        args = args[1:]
    if args:
        level = args[0].upper()
        if level not in config.LOG_LEVELS:
            raise InvalidArguments(f"Unknown log level '{args[0]}'. Use one of: {', '.join(config.LOG_LEVELS)}")
        invocation.level = level
        _reject_extra("monitor", args[1:])
    return invocation


def _parse_bare(command: str) -> Callable[[List[str]], CommandInvocation]:
    def parse(args: List[str]) -> CommandInvocation:
        _reject_extra(command, args)
        return CommandInvocation(command)
    return parse


_PARSERS: Dict[str, Callable[[List[str]], CommandInvocation]] = {
    "start": _parse_start,
    "stop": _parse_stop,
    "status": _parse_status,
    "diagnose": _parse_diagnose,
    "config": _parse_config,
    "monitor": _parse_monitor,
    "build": _parse_bare("build"),
    "help": _parse_bare("help"),
}


def parse_command(argv: List[str]) -> CommandInvocation:
    """
    Turns the operator's arguments into a single validated invocation.

    :param argv: The command line without the program name.
    :raises InvalidCommand: If the command is unknown.
    :raises InvalidArguments: If options or arguments are malformed.
    """
    if not argv:
        return CommandInvocation("help")
    command = argv[0].lower()
    if command in ("--help", "-h"):
        command = "help"
    if command not in _PARSERS:
        raise InvalidCommand(f"Unknown command: {argv[0]}")
    return _PARSERS[command](list(argv[1:]))


#* --- Dispatch ---
def _run_start(manager: "ProcessManager", invocation: CommandInvocation) -> int:
    outcome = manager.start(daemon=invocation.daemon, unsafe=invocation.unsafe)
    return display_launch(outcome)


def _run_stop(manager: "ProcessManager", invocation: CommandInvocation) -> int:
    manager.stop(invocation.timeout)
    return 0


def _run_status(manager: "ProcessManager", invocation: CommandInvocation) -> int:
    display_status(manager.status(invocation.detailed), invocation.detailed)
    return 0


def _run_monitor(manager: "ProcessManager", invocation: CommandInvocation) -> int:
    manager.monitor(follow=invocation.follow, level=invocation.level)
    return 0


def execute_command(invocation: CommandInvocation, manager: "ProcessManager") -> int:
    """
    Executes a single parsed command.

    :param invocation: The command and its parameters.
    :param manager: The ProcessManager to act on.
    :return int: The exit code for the controller.
    """
    log.debug(f"Executing command: {invocation}")
    command_map = {
        "start": lambda: _run_start(manager, invocation),
        "stop": lambda: _run_stop(manager, invocation),
        "status": lambda: _run_status(manager, invocation),
        "diagnose": lambda: manager.diagnose(invocation.component),
        "config": lambda: manager.configure(invocation.config_action, invocation.key, invocation.value),
        "monitor": lambda: _run_monitor(manager, invocation),
        "build": lambda: 0 if manager.build() else 1,
        "help": lambda: print_help() or 0,
    }
    return command_map[invocation.action]()
