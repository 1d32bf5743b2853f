"""
Closed-loop neurofeedback controller

This module owns the connection/session lifecycle, the two periodic
schedules (fast data tick, slow session clock), the simulated handshake and
the single source of truth for published state. Every mutation happens
under one re-entrant lock and ends with the publication of an immutable
ControllerSnapshot, so observers never see a half-updated state. Observers
are called after the state lock is released.
"""

import functools
import logging
import threading
from collections import deque
from typing import Callable, List, Optional

from ..core.data_types import (CognitiveState, ControllerSnapshot, DataPoint,
                               LinkState)
from ..core.errors import InvalidTransition
from ..core.config import (DATA_TICK_SEC, SESSION_TICK_SEC, HANDSHAKE_SEC,
                           HISTORY_CAPACITY, DEFAULT_BATTERY_LEVEL,
                           DEFAULT_SIGNAL_QUALITY)
from ..acquisition.sources import SampleGenerator
from ..processing.focus import FocusEstimator
from ..processing.history import HistoryBuffer
from ..detection.state_classifier import StateClassifier
from ..detection.stimulation import StimulationController
from .scheduler import Scheduler, ThreadScheduler, TimerHandle
from .session_clock import SessionClock

SnapshotCallback = Callable[[ControllerSnapshot], None]

_CONNECTED_STATES = (LinkState.CONNECTED_IDLE, LinkState.CONNECTED_SESSION)


def _delivers(method):
    """Deliver queued snapshots once `method` has released the state lock"""
    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        try:
            return method(self, *args, **kwargs)
        finally:
            self._deliver()
    return wrapper


class NeuroController:
    """
    Orchestrates the sample -> score -> state -> stimulation -> history loop

    Commands:
        connect(), disconnect()          - logged no-op outside their valid state
        start_session(), stop_session()  - raise InvalidTransition outside it

    Queries:
        snapshot()   - latest published ControllerSnapshot
        subscribe()  - callback for every published snapshot, in order

    Timer callbacks carry the generation number that was current when they
    were scheduled. Cancelling a schedule bumps the generation under the
    lock, so a tick that was already queued finds a stale generation and
    does nothing.

    Snapshots are queued under the state lock and handed to observers
    outside it, one thread at a time, in version order. A slow observer
    delays other observers but never `snapshot()` or a command issued from
    another thread.
    """

    def __init__(self, scheduler: Optional[Scheduler] = None,
                 sample_source=None,
                 estimator: Optional[FocusEstimator] = None,
                 classifier: Optional[StateClassifier] = None,
                 history_capacity: int = HISTORY_CAPACITY,
                 data_tick_sec: float = DATA_TICK_SEC,
                 session_tick_sec: float = SESSION_TICK_SEC,
                 handshake_sec: float = HANDSHAKE_SEC,
                 battery_level: float = DEFAULT_BATTERY_LEVEL,
                 signal_quality: int = DEFAULT_SIGNAL_QUALITY):
        self.scheduler = scheduler if scheduler is not None else ThreadScheduler()
        self.sample_source = sample_source if sample_source is not None else SampleGenerator()
        self.estimator = estimator or FocusEstimator()
        self.classifier = classifier or StateClassifier()
        self.data_tick_sec = data_tick_sec
        self.session_tick_sec = session_tick_sec
        self.handshake_sec = handshake_sec

        self._lock = threading.RLock()

        # Controller state
        self._link_state = LinkState.DISCONNECTED
        self._is_connected = False
        self._battery_level = battery_level
        self._signal_quality = signal_quality
        self._focus_score = 0.0
        self._cognitive_state = CognitiveState.DISTRACTED
        self._stimulation = StimulationController()
        self._clock = SessionClock()
        self._history = HistoryBuffer(history_capacity)

        # Schedules
        self._link_generation = 0
        self._session_generation = 0
        self._handshake_timer: Optional[TimerHandle] = None
        self._data_timer: Optional[TimerHandle] = None
        self._session_timer: Optional[TimerHandle] = None

        self._subscribers: List[SnapshotCallback] = []
        self._outbox = deque()
        self._delivery_lock = threading.Lock()
        self._version = 0
        self._snapshot = self._build_snapshot()

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def snapshot(self) -> ControllerSnapshot:
        with self._lock:
            return self._snapshot

    @property
    def link_state(self) -> LinkState:
        with self._lock:
            return self._link_state

    @property
    def stimulation_activations(self) -> int:
        with self._lock:
            return self._stimulation.activations

    @_delivers
    def subscribe(self, callback: SnapshotCallback, replay: bool = True) -> Callable[[], None]:
        """
        Register an observer for published snapshots

        Args:
            callback: Called with each new snapshot, in production order
            replay: If True, the current snapshot is queued for this callback
                ahead of every later one (delivered before subscribe returns
                unless another delivery is in progress)

        Returns:
            Callable: Call it to unsubscribe
        """
        with self._lock:
            self._subscribers.append(callback)
            if replay:
                self._outbox.append((self._snapshot, (callback,)))

        def unsubscribe():
            with self._lock:
                if callback in self._subscribers:
                    self._subscribers.remove(callback)

        return unsubscribe

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    @_delivers
    def connect(self) -> bool:
        """
        Begin the simulated headset handshake

        Returns:
            bool: True if a handshake was started, False if ignored
        """
        with self._lock:
            if self._link_state is not LinkState.DISCONNECTED:
                logging.warning(f"connect() ignored while {self._link_state.value}")
                return False

            self._link_generation += 1
            self._link_state = LinkState.CONNECTING
            self._handshake_timer = self.scheduler.call_later(
                self.handshake_sec,
                functools.partial(self._on_handshake, self._link_generation),
                name="handshake")
            logging.info(f"Connecting to headset (handshake {self.handshake_sec}s)...")
            self._publish()
            return True

    @_delivers
    def disconnect(self) -> bool:
        """
        Drop the connection and cancel every running schedule

        History, score, state and session duration are kept.

        Returns:
            bool: True if the controller was connected or connecting
        """
        with self._lock:
            if self._link_state is LinkState.DISCONNECTED:
                logging.warning("disconnect() ignored while disconnected")
                return False

            was_connecting = self._link_state is LinkState.CONNECTING
            self._link_generation += 1
            self._cancel_link_timers()
            if self._link_state is LinkState.CONNECTED_SESSION:
                self._end_session()

            self._is_connected = False
            self._link_state = LinkState.DISCONNECTED
            if was_connecting:
                logging.info("Handshake cancelled")
            logging.info("Headset disconnected")
            self._publish()
            return True

    @_delivers
    def start_session(self):
        """
        Start a new session: reset the session clock and start its tick

        Raises:
            InvalidTransition: If not connected and idle
        """
        with self._lock:
            if self._link_state is not LinkState.CONNECTED_IDLE:
                raise InvalidTransition("start session", self._link_state)

            self._clock.start()
            self._session_generation += 1
            self._session_timer = self.scheduler.call_every(
                self.session_tick_sec,
                functools.partial(self._on_session_tick, self._session_generation),
                name="session-clock")
            self._link_state = LinkState.CONNECTED_SESSION
            logging.info("Session started")
            self._publish()

    @_delivers
    def stop_session(self):
        """
        Stop the running session without disconnecting

        Raises:
            InvalidTransition: If no session is running
        """
        with self._lock:
            if self._link_state is not LinkState.CONNECTED_SESSION:
                raise InvalidTransition("stop session", self._link_state)

            self._end_session()
            self._link_state = LinkState.CONNECTED_IDLE
            self._publish()

    def shutdown(self):
        """Disconnect if needed and release the scheduler's timers"""
        if self.link_state is not LinkState.DISCONNECTED:
            self.disconnect()
        self.scheduler.shutdown()

    # ------------------------------------------------------------------
    # Timer callbacks
    # ------------------------------------------------------------------

    @_delivers
    def _on_handshake(self, generation: int):
        with self._lock:
            if generation != self._link_generation or self._link_state is not LinkState.CONNECTING:
                return

            self._handshake_timer = None
            self._is_connected = True
            self._link_state = LinkState.CONNECTED_IDLE
            self._data_timer = self.scheduler.call_every(
                self.data_tick_sec,
                functools.partial(self._on_data_tick, generation),
                name="data-tick")
            logging.info("Headset connected, streaming started")
            self._publish()

    @_delivers
    def _on_data_tick(self, generation: int):
        with self._lock:
            if generation != self._link_generation or self._link_state not in _CONNECTED_STATES:
                return

            sample = self.sample_source.next_sample()
            score = self.estimator.estimate(sample, self._focus_score)
            state = self.classifier.classify(score)
            stimulating = self._stimulation.update(state)

            point = DataPoint(timestamp=self.scheduler.now(), alpha=sample.alpha,
                              theta=sample.theta, focus_score=score)
            self._history.append(point)

            if state is not self._cognitive_state:
                logging.debug(f"State {self._cognitive_state.label} -> {state.label} "
                              f"(score {score:.1f})")
            self._focus_score = score
            self._cognitive_state = state
            logging.debug(f"Tick: alpha={sample.alpha:.3f} theta={sample.theta:.3f} "
                          f"score={score:.2f} stim={stimulating}")
            self._publish()

    @_delivers
    def _on_session_tick(self, generation: int):
        with self._lock:
            if generation != self._session_generation or self._link_state is not LinkState.CONNECTED_SESSION:
                return
            self._clock.tick()
            self._publish()

    # ------------------------------------------------------------------
    # Internals (callers hold the lock)
    # ------------------------------------------------------------------

    def _cancel_link_timers(self):
        for timer in (self._handshake_timer, self._data_timer):
            if timer is not None:
                timer.cancel()
        self._handshake_timer = None
        self._data_timer = None

    def _end_session(self):
        self._session_generation += 1
        if self._session_timer is not None:
            self._session_timer.cancel()
            self._session_timer = None
        self._clock.stop()
        logging.info(f"Session stopped after {self._clock.elapsed}s")

    def _build_snapshot(self) -> ControllerSnapshot:
        return ControllerSnapshot(
            link_state=self._link_state,
            is_connected=self._is_connected,
            battery_level=self._battery_level,
            signal_quality=self._signal_quality,
            focus_score=self._focus_score,
            cognitive_state=self._cognitive_state,
            is_stimulating=self._stimulation.active,
            session_duration=self._clock.elapsed,
            session_active=self._clock.is_running,
            history=self._history.points(),
            version=self._version,
        )

    def _publish(self):
        self._version += 1
        self._snapshot = self._build_snapshot()
        self._outbox.append((self._snapshot, tuple(self._subscribers)))

    # ------------------------------------------------------------------
    # Delivery (called without the state lock)
    # ------------------------------------------------------------------

    def _deliver(self):
        """
        Hand queued snapshots to observers, in order

        Only one thread drains at a time. A thread that finds delivery busy
        returns at once; the draining thread picks up its snapshots, which
        also covers an observer that issues a command from inside a callback.
        """
        while True:
            if not self._delivery_lock.acquire(blocking=False):
                return
            try:
                while True:
                    with self._lock:
                        if not self._outbox:
                            break
                        snapshot, targets = self._outbox.popleft()
                        targets = [cb for cb in targets if cb in self._subscribers]
                    for callback in targets:
                        self._notify(callback, snapshot)
            finally:
                self._delivery_lock.release()
            # Snapshots queued between the last check and the release
            with self._lock:
                if not self._outbox:
                    return

    @staticmethod
    def _notify(callback: SnapshotCallback, snapshot: ControllerSnapshot):
        try:
            callback(snapshot)
        except Exception as e:
            logging.error(f"Snapshot observer {callback!r} failed: {e}")
