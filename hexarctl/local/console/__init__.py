"""
This module initializes the console package, exposing command parsing and
execution along with the help text.
"""

from .process import CommandInvocation, parse_command, execute_command
from .handler import print_help

__all__ = ["CommandInvocation", "parse_command", "execute_command", "print_help"]
