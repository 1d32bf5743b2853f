"""
Focus score estimation

This module turns a band power sample into a 0..100 focus score. The
instantaneous score is the clamped alpha/theta ratio, which is then
smoothed with an exponential moving average against the previous score.
"""

from ..core.data_types import Sample
from ..core.config import RATIO_OFFSET, SMOOTHING_FACTOR, SCORE_MIN, SCORE_MAX


def clamp(value: float, low: float = SCORE_MIN, high: float = SCORE_MAX) -> float:
    return min(max(value, low), high)


def instantaneous_score(sample: Sample, offset: float = RATIO_OFFSET) -> float:
    """
    Compute the unsmoothed focus score of one sample

    Args:
        sample: Alpha/theta band powers
        offset: Added to theta so the ratio stays finite

    Returns:
        float: alpha / (theta + offset) * 100, clamped to [0, 100]
    """
    ratio = sample.alpha / (sample.theta + offset)
    return clamp(ratio * 100.0)


def smooth(previous_score: float, instantaneous: float,
           factor: float = SMOOTHING_FACTOR) -> float:
    """Exponential moving average step"""
    return previous_score * (1.0 - factor) + instantaneous * factor


def estimate(sample: Sample, previous_score: float) -> float:
    """
    Derive the smoothed focus score for a new sample

    Args:
        sample: Fresh sample for this tick
        previous_score: Last published smoothed score (0 initially)

    Returns:
        float: Smoothed score in [0, 100]
    """
    return smooth(previous_score, instantaneous_score(sample))


class FocusEstimator:
    """
    Focus estimator with configurable ratio offset and smoothing factor

    Stateless: the previous score is always passed in, since the controller
    owns the published value.
    """

    def __init__(self, smoothing_factor: float = SMOOTHING_FACTOR,
                 ratio_offset: float = RATIO_OFFSET):
        if not 0.0 < smoothing_factor <= 1.0:
            raise ValueError(f"smoothing_factor must be in (0, 1], got {smoothing_factor}")
        self.smoothing_factor = smoothing_factor
        self.ratio_offset = ratio_offset

    def estimate(self, sample: Sample, previous_score: float) -> float:
        instant = instantaneous_score(sample, self.ratio_offset)
        return smooth(previous_score, instant, self.smoothing_factor)
