"""
Session clock

Counts elapsed active-session seconds. The clock itself is a plain counter;
the controller owns the periodic schedule that calls `tick()`.
"""

import logging


class SessionClock:
    """
    Idle -> Running -> Idle counter of whole session seconds

    `start()` always begins a new session at zero, even when already
    running. `stop()` keeps the elapsed value for inspection.
    """

    def __init__(self):
        self.elapsed = 0
        self.is_running = False

    def start(self):
        if self.is_running:
            logging.debug("Session clock restarted while running")
        self.elapsed = 0
        self.is_running = True

    def stop(self):
        if not self.is_running:
            return
        self.is_running = False
        logging.debug(f"Session clock stopped at {self.elapsed}s")

    def tick(self) -> int:
        if self.is_running:
            self.elapsed += 1
        return self.elapsed
