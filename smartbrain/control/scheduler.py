"""
Periodic and one-shot scheduling primitives

The controller never touches timers directly; it asks a Scheduler for
one-shot (`call_later`) and periodic (`call_every`) timers and gets back a
TimerHandle it can cancel. Two implementations are provided:

- ThreadScheduler runs each timer on its own daemon thread against the
  real clock.
- VirtualScheduler keeps a virtual clock that tests and simulations
  advance explicitly, firing due timers in time order.
"""

import heapq
import itertools
import logging
import threading
import time
from typing import Callable, List, Optional

# Tolerance when comparing accumulated float deadlines to a target time
TIME_EPSILON = 1e-9


class TimerHandle:
    """Cancellation handle for a scheduled timer"""

    def __init__(self, name: str = "timer"):
        self.name = name
        self._cancelled = threading.Event()

    def cancel(self):
        self._cancelled.set()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def __repr__(self):
        return f"TimerHandle({self.name!r}, cancelled={self.cancelled})"


class Scheduler:
    """Interface shared by the real and virtual schedulers"""

    def now(self) -> float:
        raise NotImplementedError

    def call_later(self, delay: float, callback: Callable[[], None],
                   name: str = "one-shot") -> TimerHandle:
        raise NotImplementedError

    def call_every(self, period: float, callback: Callable[[], None],
                   name: str = "periodic") -> TimerHandle:
        raise NotImplementedError

    def shutdown(self):
        """Cancel every timer still pending"""
        raise NotImplementedError


class ThreadScheduler(Scheduler):
    """
    Real-time scheduler backed by daemon threads

    Periodic deadlines are computed from the start time rather than the
    previous fire, so slow callbacks do not accumulate drift. A callback that
    overruns several periods is followed by the next future deadline, not by
    a burst of late calls.
    """

    def __init__(self):
        self._handles: List[TimerHandle] = []
        self._threads: List[threading.Thread] = []
        self._guard = threading.Lock()

    def now(self) -> float:
        return time.time()

    def _spawn(self, handle: TimerHandle, target, *args):
        thread = threading.Thread(target=target, args=(handle,) + args,
                                  name=f"smartbrain-{handle.name}", daemon=True)
        with self._guard:
            self._handles = [h for h in self._handles if not h.cancelled]
            self._threads = [t for t in self._threads if t.is_alive()]
            self._handles.append(handle)
            self._threads.append(thread)
        thread.start()

    def call_later(self, delay, callback, name="one-shot"):
        handle = TimerHandle(name)
        self._spawn(handle, self._run_once, delay, callback)
        return handle

    def call_every(self, period, callback, name="periodic"):
        if period <= 0:
            raise ValueError(f"Timer period must be positive, got {period}")
        handle = TimerHandle(name)
        self._spawn(handle, self._run_periodic, period, callback)
        return handle

    @staticmethod
    def _invoke(handle: TimerHandle, callback):
        try:
            callback()
        except Exception as e:
            logging.error(f"Timer '{handle.name}' callback failed: {e}")

    def _run_once(self, handle: TimerHandle, delay: float, callback):
        # wait() returns True as soon as the handle is cancelled
        if not handle._cancelled.wait(max(delay, 0.0)):
            self._invoke(handle, callback)
        handle.cancel()

    def _run_periodic(self, handle: TimerHandle, period: float, callback):
        start = time.monotonic()
        n = 1
        while True:
            remaining = start + n * period - time.monotonic()
            if handle._cancelled.wait(max(remaining, 0.0)):
                break
            self._invoke(handle, callback)
            # Deadlines missed while the callback ran are skipped, not replayed
            n = max(n + 1, int((time.monotonic() - start) / period) + 1)

    def shutdown(self, timeout: float = 1.0):
        with self._guard:
            handles, threads = list(self._handles), list(self._threads)
            self._handles, self._threads = [], []
        for handle in handles:
            handle.cancel()
        for thread in threads:
            if thread is not threading.current_thread():
                thread.join(timeout)


class _VirtualTimer:
    def __init__(self, handle: TimerHandle, callback, origin: float,
                 delay: float, period: Optional[float]):
        self.handle = handle
        self.callback = callback
        self.origin = origin
        self.delay = delay
        self.period = period
        self.fired = 0

    def next_due(self) -> float:
        if self.period is None:
            return self.origin + self.delay
        return self.origin + (self.fired + 1) * self.period


class VirtualScheduler(Scheduler):
    """
    Deterministic scheduler driven by an explicit virtual clock

    Nothing fires until `advance()` or `run_until()` is called. Timers due at
    the same instant fire in the order they were scheduled. Callbacks may
    schedule or cancel timers; new timers due within the current advance
    window fire in the same call.
    """

    def __init__(self, start: float = 0.0):
        self._time = start
        self._queue = []
        self._seq = itertools.count()

    def now(self) -> float:
        return self._time

    def _push(self, timer: _VirtualTimer):
        heapq.heappush(self._queue, (timer.next_due(), next(self._seq), timer))

    def call_later(self, delay, callback, name="one-shot"):
        handle = TimerHandle(name)
        self._push(_VirtualTimer(handle, callback, self._time, max(delay, 0.0), None))
        return handle

    def call_every(self, period, callback, name="periodic"):
        if period <= 0:
            raise ValueError(f"Timer period must be positive, got {period}")
        handle = TimerHandle(name)
        self._push(_VirtualTimer(handle, callback, self._time, period, period))
        return handle

    def run_until(self, target: float) -> int:
        """
        Fire every timer due at or before `target` and move the clock there

        Returns:
            int: Number of callbacks invoked
        """
        fired = 0
        while self._queue and self._queue[0][0] <= target + TIME_EPSILON:
            due, _, timer = heapq.heappop(self._queue)
            if timer.handle.cancelled:
                continue
            self._time = max(self._time, due)
            timer.fired += 1
            if timer.period is None:
                timer.handle.cancel()
            timer.callback()
            fired += 1
            if timer.period is not None and not timer.handle.cancelled:
                self._push(timer)
        self._time = max(self._time, target)
        return fired

    def advance(self, seconds: float) -> int:
        if seconds < 0:
            raise ValueError("Cannot advance virtual time backwards")
        return self.run_until(self._time + seconds)

    def pending(self) -> int:
        """Number of live timers still queued"""
        return sum(1 for _, _, timer in self._queue if not timer.handle.cancelled)

    def shutdown(self):
        for _, _, timer in self._queue:
            timer.handle.cancel()
        self._queue = []
