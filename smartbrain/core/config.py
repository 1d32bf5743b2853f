"""
Configuration constants for SmartBrain

This module contains the timing, signal and control parameters of the
neurofeedback loop. Components take these values as constructor defaults,
so a caller can override any of them per instance.
"""

from typing import Tuple

# ============================================================================
# TIMING CONFIGURATION - all values in seconds (one "time unit")
# ============================================================================

DATA_TICK_SEC = 0.1               # Fast schedule: one sample per tick (10 Hz)
SESSION_TICK_SEC = 1.0            # Slow schedule: session clock resolution
HANDSHAKE_SEC = 1.5               # Simulated headset handshake latency

# ============================================================================
# SIGNAL CONFIGURATION
# ============================================================================

# Simulated band power ranges (placeholders for a real sensor feed)
ALPHA_RANGE: Tuple[float, float] = (0.3, 0.8)
THETA_RANGE: Tuple[float, float] = (0.2, 0.6)

RATIO_OFFSET = 0.1                # Added to theta before dividing
SMOOTHING_FACTOR = 0.1            # EMA weight of the newest instantaneous score
SCORE_MIN = 0.0
SCORE_MAX = 100.0

# ============================================================================
# CONTROL CONFIGURATION
# ============================================================================

FLOW_THRESHOLD = 80.0             # score > 80 -> Flow
FOCUSED_THRESHOLD = 50.0          # score > 50 -> Focused, else Distracted

HISTORY_CAPACITY = 50             # Data points kept for display

# Simulated hardware status
DEFAULT_BATTERY_LEVEL = 0.85      # Fraction 0..1
DEFAULT_SIGNAL_QUALITY = 100      # Percent

# ============================================================================
# DISPLAY / COMMUNICATION CONFIGURATION
# ============================================================================

UDP_HOST = "127.0.0.1"            # Display bridge UDP host
UDP_PORT = 5005                   # Display bridge UDP port
STATUS_INTERVAL_SEC = 2.0         # CLI status line period
