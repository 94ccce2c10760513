"""
hexarctl: operational controller for the Hexar radar process.
"""

__version__ = "0.1.0"
