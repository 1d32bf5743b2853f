"""
Signal processing pipeline

This module handles focus score estimation and the bounded history of
scored data points.
"""

from .focus import FocusEstimator, estimate, instantaneous_score, smooth, clamp
from .history import HistoryBuffer

__all__ = ['FocusEstimator', 'estimate', 'instantaneous_score', 'smooth', 'clamp',
           'HistoryBuffer']
