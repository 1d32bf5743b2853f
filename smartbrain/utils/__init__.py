"""
Utility functions and helpers

This module contains formatting and logging helpers for the SmartBrain tools.
"""

from .formatting import format_duration, status_line
from .logging_setup import setup_logging

__all__ = ['format_duration', 'status_line', 'setup_logging']
