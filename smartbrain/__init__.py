"""
SmartBrain - Closed-loop neurofeedback controller

A modular Python package that turns a stream of simulated band power samples
into a smoothed focus score, classifies the wearer's cognitive state and
drives a stimulation output with hysteresis.

Python: 3.10+
"""

__version__ = "1.0.0"

# Main package imports for easy access
from .core.data_types import Sample, DataPoint, CognitiveState, LinkState, ControllerSnapshot
from .core.errors import SmartBrainError, InvalidTransition, BufferInvariantViolation
from .acquisition.sources import SampleGenerator
from .processing.focus import FocusEstimator
from .processing.history import HistoryBuffer
from .detection.state_classifier import StateClassifier, classify
from .detection.stimulation import StimulationController
from .control.scheduler import ThreadScheduler, VirtualScheduler
from .control.session_clock import SessionClock
from .control.controller import NeuroController
from .communication.state_sender import StateSender

__all__ = [
    'Sample', 'DataPoint', 'CognitiveState', 'LinkState', 'ControllerSnapshot',
    'SmartBrainError', 'InvalidTransition', 'BufferInvariantViolation',
    'SampleGenerator', 'FocusEstimator', 'HistoryBuffer',
    'StateClassifier', 'classify', 'StimulationController',
    'ThreadScheduler', 'VirtualScheduler', 'SessionClock',
    'NeuroController', 'StateSender',
]
