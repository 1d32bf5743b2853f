"""
Closed-loop stimulation control

This module implements the hysteresis policy that drives the binary
stimulation output. Stimulation switches on when the wearer becomes
Distracted and only switches off again once Flow is reached; Focused keeps
whatever the last decision was, which prevents rapid toggling around a
single threshold.
"""

import logging

from ..core.data_types import CognitiveState


def update(state: CognitiveState, previous_active: bool) -> bool:
    """
    Compute the next stimulation output

    Args:
        state: Current classified state
        previous_active: Stimulation output after the previous tick

    Returns:
        bool: New stimulation output
    """
    if state is CognitiveState.DISTRACTED and not previous_active:
        return True
    elif state is CognitiveState.FLOW:
        return False
    return previous_active


class StimulationController:
    """
    Stateful wrapper around the hysteresis policy

    Holds the single boolean output and counts activations so a session
    summary can report how often the actuator fired.
    """

    def __init__(self, active: bool = False):
        self.active = active
        self.activations = 0

    def update(self, state: CognitiveState) -> bool:
        new_active = update(state, self.active)
        if new_active and not self.active:
            self.activations += 1
            logging.info(f"Stimulation ON (state: {state.label})")
        elif self.active and not new_active:
            logging.info(f"Stimulation OFF (state: {state.label})")
        self.active = new_active
        return new_active
