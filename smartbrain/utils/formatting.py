"""
Display formatting helpers

Text renderings of controller state used by the command line front end.
"""

from ..core.data_types import ControllerSnapshot


def format_duration(seconds: float) -> str:
    """
    Format a session duration as MM:SS

    Minutes are not wrapped at 60, so 3725 seconds renders as "62:05".
    """
    total = max(int(seconds), 0)
    minutes, secs = divmod(total, 60)
    return f"{minutes:02d}:{secs:02d}"


def status_line(snapshot: ControllerSnapshot) -> str:
    """One-line summary of a snapshot"""
    link = "CONNECTED" if snapshot.is_connected else "OFFLINE"
    stim = "STIM ACTIVE" if snapshot.is_stimulating else "stim off"
    return (f"{link:>9} | {format_duration(snapshot.session_duration)} | "
            f"Focus: {snapshot.focus_score:5.1f} | "
            f"State: {snapshot.cognitive_state.label:>10} | {stim} | "
            f"Points: {len(snapshot.history)}")
