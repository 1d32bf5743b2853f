"""
Cognitive state classification

Maps the smoothed focus score onto a discrete cognitive state using ordered
thresholds. The first matching threshold wins.
"""

from ..core.data_types import CognitiveState
from ..core.config import FLOW_THRESHOLD, FOCUSED_THRESHOLD


def classify(score: float, flow_threshold: float = FLOW_THRESHOLD,
             focused_threshold: float = FOCUSED_THRESHOLD) -> CognitiveState:
    """
    Classify a focus score

    Args:
        score: Smoothed focus score
        flow_threshold: Scores strictly above this are Flow
        focused_threshold: Scores strictly above this (and not Flow) are Focused

    Returns:
        CognitiveState: FLOW, FOCUSED or DISTRACTED (never SIGNAL_NOISE)
    """
    if score > flow_threshold:
        return CognitiveState.FLOW
    elif score > focused_threshold:
        return CognitiveState.FOCUSED
    return CognitiveState.DISTRACTED


class StateClassifier:
    """Threshold classifier with per-instance thresholds"""

    def __init__(self, flow_threshold: float = FLOW_THRESHOLD,
                 focused_threshold: float = FOCUSED_THRESHOLD):
        if focused_threshold > flow_threshold:
            raise ValueError("focused_threshold must not exceed flow_threshold")
        self.flow_threshold = flow_threshold
        self.focused_threshold = focused_threshold

    def classify(self, score: float) -> CognitiveState:
        return classify(score, self.flow_threshold, self.focused_threshold)
