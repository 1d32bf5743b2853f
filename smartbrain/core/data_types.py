"""
Core data types for SmartBrain

This module defines the fundamental data structures used throughout the system
for representing signal samples, history points, cognitive states and the
published controller snapshot.
"""

import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple


class CognitiveState(Enum):
    """Discrete cognitive state derived from the smoothed focus score"""
    FLOW = "flow"
    FOCUSED = "focused"
    DISTRACTED = "distracted"
    SIGNAL_NOISE = "signal_noise"  # Reserved for a future signal-quality input

    @property
    def label(self) -> str:
        return _STATE_LABELS[self]


_STATE_LABELS = {
    CognitiveState.FLOW: "Flow State",
    CognitiveState.FOCUSED: "Deep Focus",
    CognitiveState.DISTRACTED: "Distracted",
    CognitiveState.SIGNAL_NOISE: "Signal Noise",
}


class LinkState(Enum):
    """Connection / session lifecycle of the controller"""
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED_IDLE = "connected_idle"
    CONNECTED_SESSION = "connected_session"


@dataclass(frozen=True)
class Sample:
    """One raw signal sample (band powers)"""
    alpha: float
    theta: float


@dataclass(frozen=True)
class DataPoint:
    """Container for a single scored history entry"""
    timestamp: float          # Scheduler clock time (Unix time for real timers)
    alpha: float
    theta: float
    focus_score: float        # 0..100
    id: str = field(default_factory=lambda: uuid.uuid4().hex)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "t": self.timestamp,
            "alpha": float(self.alpha),
            "theta": float(self.theta),
            "focus_score": float(self.focus_score),
        }


@dataclass(frozen=True)
class ControllerSnapshot:
    """
    Immutable copy of the controller state at one point in time

    Observers receive these and may read them from any thread without
    synchronization.
    """
    link_state: LinkState
    is_connected: bool
    battery_level: float
    signal_quality: int
    focus_score: float
    cognitive_state: CognitiveState
    is_stimulating: bool
    session_duration: int
    session_active: bool
    history: Tuple[DataPoint, ...] = ()
    version: int = 0

    @property
    def latest(self) -> Optional[DataPoint]:
        return self.history[-1] if self.history else None

    def to_dict(self) -> Dict[str, Any]:
        """Render the snapshot as JSON-safe primitives"""
        return {
            "version": self.version,
            "link_state": self.link_state.value,
            "is_connected": self.is_connected,
            "battery_level": float(self.battery_level),
            "signal_quality": int(self.signal_quality),
            "focus_score": float(self.focus_score),
            "state": self.cognitive_state.value,
            "state_label": self.cognitive_state.label,
            "is_stimulating": self.is_stimulating,
            "session_duration": self.session_duration,
            "session_active": self.session_active,
            "history": [point.to_dict() for point in self.history],
        }
