"""
Lifecycle control and scheduling

This module contains the neurofeedback controller, the session clock and
the real / virtual timer schedulers that drive them.
"""

from .scheduler import Scheduler, ThreadScheduler, VirtualScheduler, TimerHandle
from .session_clock import SessionClock
from .controller import NeuroController

__all__ = ['Scheduler', 'ThreadScheduler', 'VirtualScheduler', 'TimerHandle',
           'SessionClock', 'NeuroController']
