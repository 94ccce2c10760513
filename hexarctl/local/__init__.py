"""
Local package for the Hexar controller.

This package provides the controller configuration through the
effective_settings singleton, plus the supervisor and console packages.
"""

from .config import effective_settings

__all__ = ["effective_settings"]
