"""
The Supervisor package.
Manages the lifecycle of the managed radar process.

This package contains the central ProcessManager class and its helper modules,
which together handle building, starting, stopping, inspecting, and tailing
the logs of the single managed instance.
"""
from .supervisor import ProcessManager

__all__ = ['ProcessManager']
