"""
Core data types and structures for SmartBrain

This module contains the fundamental data classes, configuration and
error types used throughout the system.
"""

from .data_types import Sample, DataPoint, CognitiveState, LinkState, ControllerSnapshot
from .errors import SmartBrainError, InvalidTransition, BufferInvariantViolation
from .config import *

__all__ = [
    'Sample', 'DataPoint', 'CognitiveState', 'LinkState', 'ControllerSnapshot',
    'SmartBrainError', 'InvalidTransition', 'BufferInvariantViolation',
]
