"""
Display communication

This module provides the UDP bridge that streams controller snapshots to
an external display application.
"""

from .state_sender import StateSender, snapshot_message

__all__ = ['StateSender', 'snapshot_message']
