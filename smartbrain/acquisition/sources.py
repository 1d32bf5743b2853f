"""
Signal sample sources

This module provides the stochastic sample generator that stands in for a
real headset feed. Each call produces one pair of alpha/theta band powers.
"""

import logging
from typing import Tuple, Union

import numpy as np

from ..core.data_types import Sample
from ..core.config import ALPHA_RANGE, THETA_RANGE


class SampleGenerator:
    """
    Generate synthetic band power samples for the neurofeedback loop

    Alpha and theta are drawn uniformly from fixed physiological ranges.
    Pass a seed (or an existing numpy Generator) for reproducible runs.
    """

    def __init__(self, seed: Union[int, np.random.Generator, None] = None,
                 alpha_range: Tuple[float, float] = ALPHA_RANGE,
                 theta_range: Tuple[float, float] = THETA_RANGE):
        if isinstance(seed, np.random.Generator):
            self.rng = seed
        else:
            self.rng = np.random.default_rng(seed)
        self.alpha_range = alpha_range
        self.theta_range = theta_range

        logging.debug(f"Sample generator ready: alpha {alpha_range}, theta {theta_range}")

    def next_sample(self) -> Sample:
        """
        Draw one sample

        Returns:
            Sample: Fresh alpha/theta pair
        """
        alpha = float(self.rng.uniform(*self.alpha_range))
        theta = float(self.rng.uniform(*self.theta_range))
        return Sample(alpha=alpha, theta=theta)


class ScriptedSampleSource:
    """Replay a fixed sequence of samples, cycling when exhausted"""

    def __init__(self, samples, cycle: bool = True):
        self.samples = [s if isinstance(s, Sample) else Sample(*s) for s in samples]
        if not self.samples:
            raise ValueError("ScriptedSampleSource needs at least one sample")
        self.cycle = cycle
        self._index = 0

    def next_sample(self) -> Sample:
        if self._index >= len(self.samples):
            if not self.cycle:
                return self.samples[-1]
            self._index = 0
        sample = self.samples[self._index]
        self._index += 1
        return sample
