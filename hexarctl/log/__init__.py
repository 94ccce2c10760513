"""
Logging module for the controller.
This module provides functionality to set up colored console and file logging.
"""

from .setup import setup_logging, SUCCESS

__all__ = ["setup_logging", "SUCCESS"]
