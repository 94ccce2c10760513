import sys
import logging
from typing import TYPE_CHECKING

from hexarctl.log import SUCCESS

if TYPE_CHECKING:
    from hexarctl.local.supervisor.launcher import LaunchOutcome
    from hexarctl.local.supervisor.status import StatusReport

log = logging.getLogger(__name__)


def _unknown(value, suffix: str = "") -> str:
    return "Unknown" if value is None else f"{value}{suffix}"


def display_status(report: "StatusReport", detailed: bool = False) -> None:
    """Prints a status report: liveness, optional process details, and recent log lines."""
    if report.running:
        log.log(SUCCESS, f"System is running (PID: {report.pid})")
        if detailed:
            snap = report.snapshot
            cpu = None if snap is None or snap.cpu_percent is None else f"{snap.cpu_percent:.1f}"
            log.info("Detailed status:")
            log.info(f"  PID: {report.pid}")
            log.info(f"  Start time: {snap.started if snap else 'Unknown'}")
            log.info(f"  Memory usage: {_unknown(snap.memory_kb if snap else None, ' KB')}")
            log.info(f"  CPU usage: {_unknown(cpu, '%')}")
            log.info(f"  Config file: {report.config_path or 'Default'}")
            log.info(f"  Log directory: {report.log_dir}")
    else:
        log.warning("System is not running")
        if report.stale_marker_cleared:
            log.warning("Removed stale PID file")

    if report.recent_log_lines:
        log.info("Recent log entries:")
        for line in report.recent_log_lines:
            print(f"  {line}")


def display_launch(outcome: "LaunchOutcome") -> int:
    """Reports the result of a start and returns the controller's exit code."""
    if outcome.already_running or outcome.daemon:
        return 0
    code = outcome.exit_code or 0
    if code != 0:
        log.warning(f"Hexar exited with code {code}")
    return code


def print_help() -> None:
    """Prints the main help text for the controller."""
    prog = "hexarctl"
    print(f"""Hexar Radar System Controller

Usage: {prog} COMMAND [OPTIONS]

Commands:
    start [--daemon] [--unsafe]     Start the radar system
    stop [timeout]                  Stop the radar system (default timeout: 30s)
    status [--detailed]             Show system status
    diagnose [component]            Run diagnostics
    config <action> [key] [value]   Configuration management
    monitor [--follow] [level]      Monitor system logs
    build                           Build the project
    help                            Show this help

Config Actions:
    show                            Show current configuration
    validate                        Validate configuration
    reset                           Reset to defaults
    set <key> <value>               Set configuration value

Global Options:
    --verbose                       Show debug output from the controller

Examples:
    {prog} start                         Start in foreground mode
    {prog} start --daemon                Start in daemon mode
    {prog} stop                          Stop gracefully
    {prog} status --detailed             Show detailed status
    {prog} diagnose                      Run full diagnostics
    {prog} config show                   Show configuration
    {prog} config set radar.antenna_count 8  Set antenna count
    {prog} monitor --follow              Follow logs in real-time

Safety Notes:
- Always run diagnostics before starting the system
- Use --unsafe flag only for testing/debugging
- Monitor logs for any safety alerts
""", file=sys.stdout)
