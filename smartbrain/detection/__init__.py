"""
Cognitive state detection and actuation

This module implements the threshold state classifier and the hysteresis
stimulation controller.
"""

from .state_classifier import StateClassifier, classify
from .stimulation import StimulationController
from . import stimulation

__all__ = ['StateClassifier', 'classify', 'StimulationController', 'stimulation']
