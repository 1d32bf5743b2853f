"""
Signal acquisition sources

This module handles the sample sources feeding the loop: the stochastic
generator used in place of a headset, and a scripted replay source.
"""

from .sources import SampleGenerator, ScriptedSampleSource

__all__ = ['SampleGenerator', 'ScriptedSampleSource']
