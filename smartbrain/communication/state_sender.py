"""
Display bridge

This module handles UDP communication with an external display application,
formatting published controller snapshots into compact JSON messages.
"""

import json
import logging
import socket
from typing import Any, Dict

from ..core.data_types import ControllerSnapshot
from ..core.config import UDP_HOST, UDP_PORT


def snapshot_message(snapshot: ControllerSnapshot) -> Dict[str, Any]:
    """Build the JSON message for one snapshot (history reduced to the latest point)"""
    latest = snapshot.latest
    return {
        "v": snapshot.version,
        "t": latest.timestamp if latest else None,
        "alpha": float(latest.alpha) if latest else None,
        "theta": float(latest.theta) if latest else None,
        "focus": round(float(snapshot.focus_score), 3),
        "state": snapshot.cognitive_state.value,
        "label": snapshot.cognitive_state.label,
        "stim": snapshot.is_stimulating,
        "session": snapshot.session_duration,
        "connected": snapshot.is_connected,
        "battery": float(snapshot.battery_level),
        "signal": int(snapshot.signal_quality),
    }


class StateSender:
    """
    Send controller snapshots to a display over UDP JSON messages

    Instances are callable, so they can be passed straight to
    `NeuroController.subscribe()`.
    """

    def __init__(self, host: str = UDP_HOST, port: int = UDP_PORT):
        self.host = host
        self.port = port
        self.socket = None
        self.sent = 0
        self._setup_socket()

    def _setup_socket(self):
        """Setup UDP socket for communication"""
        try:
            self.socket = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
            logging.info(f"UDP sender initialized: {self.host}:{self.port}")
        except OSError as e:
            logging.error(f"Failed to setup UDP socket: {e}")

    def send_snapshot(self, snapshot: ControllerSnapshot) -> bool:
        """
        Send one snapshot to the display

        Args:
            snapshot: Published controller snapshot

        Returns:
            bool: True if sent successfully
        """
        if self.socket is None:
            return False

        try:
            json_str = json.dumps(snapshot_message(snapshot))
            self.socket.sendto(json_str.encode('utf-8'), (self.host, self.port))
            self.sent += 1
            return True
        except OSError as e:
            logging.error(f"Failed to send UDP message: {e}")
            return False

    def __call__(self, snapshot: ControllerSnapshot):
        self.send_snapshot(snapshot)

    def close(self):
        """Close UDP socket"""
        if self.socket:
            self.socket.close()
            self.socket = None
