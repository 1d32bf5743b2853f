import threading
import time

import pytest

from smartbrain.acquisition.sources import ScriptedSampleSource
from smartbrain.control.controller import NeuroController
from smartbrain.control.scheduler import ThreadScheduler
from smartbrain.core.data_types import CognitiveState, LinkState
from smartbrain.core.errors import InvalidTransition

from .conftest import LOW_FOCUS


def test_initial_state(controller):
    snap = controller.snapshot()

    assert snap.link_state is LinkState.DISCONNECTED
    assert not snap.is_connected
    assert snap.battery_level == pytest.approx(0.85)
    assert snap.signal_quality == 100
    assert snap.focus_score == 0.0
    assert snap.cognitive_state is CognitiveState.DISTRACTED
    assert not snap.is_stimulating
    assert snap.session_duration == 0
    assert snap.history == ()


def test_handshake_completes_after_latency(controller, scheduler):
    assert controller.connect() is True
    assert controller.link_state is LinkState.CONNECTING
    assert not controller.snapshot().is_connected

    scheduler.advance(1.49)
    assert controller.link_state is LinkState.CONNECTING
    assert controller.snapshot().history == ()

    scheduler.advance(0.01)
    snap = controller.snapshot()
    assert snap.link_state is LinkState.CONNECTED_IDLE
    assert snap.is_connected


def test_data_ticks_every_tenth_of_a_second(connected, scheduler):
    scheduler.advance(1.0)
    history = connected.snapshot().history

    assert len(history) == 10
    assert [p.timestamp for p in history] == pytest.approx([1.5 + 0.1 * n for n in range(1, 11)])


def test_tick_publishes_scored_point(connected, scheduler):
    scheduler.advance(0.1)
    snap = connected.snapshot()
    point = snap.latest

    assert 0.3 <= point.alpha <= 0.8
    assert 0.2 <= point.theta <= 0.6
    assert point.focus_score == snap.focus_score
    # first tick from 0: 0.1 * instantaneous, and instantaneous <= 100
    assert 0.0 < snap.focus_score <= 10.0
    assert snap.cognitive_state is CognitiveState.DISTRACTED
    assert snap.is_stimulating


def test_history_bounded_at_50(connected, scheduler):
    scheduler.advance(10.0)
    history = connected.snapshot().history

    assert len(history) == 50
    timestamps = [p.timestamp for p in history]
    assert timestamps == sorted(timestamps)
    assert timestamps[-1] == pytest.approx(11.5)


def test_closed_loop_reaches_flow_and_releases_stimulation(high_focus_controller, scheduler):
    ctrl = high_focus_controller
    ctrl.connect()
    scheduler.advance(1.5)

    scheduler.advance(0.1)
    assert ctrl.snapshot().is_stimulating
    assert ctrl.snapshot().focus_score == pytest.approx(10.0)

    # 100 * (1 - 0.9**7) > 50: Focused, stimulation held
    scheduler.advance(0.6)
    snap = ctrl.snapshot()
    assert snap.cognitive_state is CognitiveState.FOCUSED
    assert snap.is_stimulating

    # 100 * (1 - 0.9**16) > 80: Flow, stimulation released
    scheduler.advance(0.9)
    snap = ctrl.snapshot()
    assert snap.cognitive_state is CognitiveState.FLOW
    assert not snap.is_stimulating
    assert ctrl.stimulation_activations == 1


def test_connect_twice_runs_one_handshake(controller, scheduler):
    states = []
    controller.subscribe(lambda s: states.append(s.link_state), replay=False)

    assert controller.connect() is True
    scheduler.advance(0.5)
    assert controller.connect() is False
    scheduler.advance(2.0)

    transitions = [s for i, s in enumerate(states) if i == 0 or states[i - 1] is not s]
    assert transitions == [LinkState.CONNECTING, LinkState.CONNECTED_IDLE]
    # one data tick schedule: 1.0s after the handshake gives exactly 10 points
    assert len(controller.snapshot().history) == 10


def test_connect_while_connected_is_noop(connected):
    version = connected.snapshot().version
    assert connected.connect() is False
    assert connected.snapshot().version == version


def test_disconnect_during_handshake_cancels_it(controller, scheduler):
    controller.connect()
    scheduler.advance(1.0)
    assert controller.disconnect() is True

    scheduler.advance(10.0)
    snap = controller.snapshot()
    assert snap.link_state is LinkState.DISCONNECTED
    assert not snap.is_connected
    assert snap.history == ()
    assert scheduler.pending() == 0


def test_reconnect_after_cancelled_handshake_waits_full_latency(controller, scheduler):
    controller.connect()
    scheduler.advance(1.0)
    controller.disconnect()
    controller.connect()

    # the first handshake would have fired at 1.5
    scheduler.advance(1.0)
    assert controller.link_state is LinkState.CONNECTING
    scheduler.advance(0.5)
    assert controller.link_state is LinkState.CONNECTED_IDLE


def test_disconnect_stops_ticks_and_keeps_history(connected, scheduler):
    scheduler.advance(2.0)
    before = connected.snapshot()
    connected.disconnect()
    scheduler.advance(5.0)
    after = connected.snapshot()

    assert after.link_state is LinkState.DISCONNECTED
    assert after.history == before.history
    assert after.focus_score == before.focus_score
    assert after.cognitive_state is before.cognitive_state
    assert scheduler.pending() == 0


def test_disconnect_while_disconnected_is_noop(controller):
    assert controller.disconnect() is False
    assert controller.snapshot().version == 0


def test_start_session_rejected_while_disconnected(controller):
    before = controller.snapshot()
    with pytest.raises(InvalidTransition) as excinfo:
        controller.start_session()

    assert excinfo.value.state is LinkState.DISCONNECTED
    assert controller.snapshot() is before


def test_start_session_rejected_while_connecting(controller):
    controller.connect()
    with pytest.raises(InvalidTransition):
        controller.start_session()
    assert controller.link_state is LinkState.CONNECTING


def test_start_session_rejected_during_session(connected):
    connected.start_session()
    with pytest.raises(InvalidTransition):
        connected.start_session()


def test_stop_session_rejected_without_session(controller, connected):
    with pytest.raises(InvalidTransition):
        connected.stop_session()
    connected.disconnect()
    with pytest.raises(InvalidTransition):
        connected.stop_session()


def test_session_clock_counts_seconds(connected, scheduler):
    connected.start_session()
    assert connected.link_state is LinkState.CONNECTED_SESSION

    scheduler.advance(5.0)
    assert connected.snapshot().session_duration == 5

    connected.stop_session()
    scheduler.advance(3.0)
    snap = connected.snapshot()
    assert snap.session_duration == 5
    assert not snap.session_active
    assert snap.link_state is LinkState.CONNECTED_IDLE
    assert snap.is_connected


def test_new_session_resets_duration(connected, scheduler):
    connected.start_session()
    scheduler.advance(4.0)
    connected.stop_session()

    connected.start_session()
    assert connected.snapshot().session_duration == 0
    scheduler.advance(2.0)
    assert connected.snapshot().session_duration == 2


def test_data_ticks_continue_outside_session(connected, scheduler):
    connected.start_session()
    scheduler.advance(1.0)
    connected.stop_session()
    scheduler.advance(1.0)
    assert len(connected.snapshot().history) == 20


def test_disconnect_ends_session_and_keeps_duration(connected, scheduler):
    connected.start_session()
    scheduler.advance(3.0)
    connected.disconnect()
    scheduler.advance(3.0)

    snap = connected.snapshot()
    assert snap.session_duration == 3
    assert not snap.session_active
    assert scheduler.pending() == 0


def test_observers_see_versions_in_order(connected, scheduler):
    seen = []
    connected.subscribe(seen.append)
    connected.start_session()
    scheduler.advance(5.0)
    connected.stop_session()

    versions = [s.version for s in seen]
    assert versions == list(range(versions[0], versions[0] + len(versions)))
    durations = [s.session_duration for s in seen]
    assert durations == sorted(durations)
    assert durations[-1] == 5


def test_snapshots_are_immutable(connected, scheduler):
    scheduler.advance(0.5)
    snap = connected.snapshot()
    with pytest.raises(AttributeError):
        snap.focus_score = 99.0
    scheduler.advance(0.5)
    assert len(snap.history) == 5


def test_unsubscribe(connected, scheduler):
    seen = []
    unsubscribe = connected.subscribe(seen.append, replay=False)
    scheduler.advance(0.3)
    unsubscribe()
    scheduler.advance(0.3)
    assert len(seen) == 3


def test_failing_observer_does_not_break_ticks(connected, scheduler):
    def broken(_snapshot):
        raise RuntimeError("display crashed")

    good = []
    connected.subscribe(broken, replay=False)
    connected.subscribe(good.append, replay=False)
    scheduler.advance(0.5)

    assert len(good) == 5
    assert len(connected.snapshot().history) == 5


def test_observer_command_keeps_order(controller, scheduler):
    seen_a, seen_b = [], []

    def starter(snapshot):
        seen_a.append(snapshot.version)
        if snapshot.link_state is LinkState.CONNECTED_IDLE and not snapshot.session_active:
            controller.start_session()

    controller.subscribe(starter, replay=False)
    controller.subscribe(lambda s: seen_b.append(s.version), replay=False)
    controller.connect()
    scheduler.advance(2.0)

    assert controller.link_state is LinkState.CONNECTED_SESSION
    assert seen_a == sorted(seen_a)
    assert seen_b == sorted(seen_b)
    assert seen_a == seen_b


def test_snapshot_to_dict(connected, scheduler):
    scheduler.advance(0.2)
    data = connected.snapshot().to_dict()

    assert data["link_state"] == "connected_idle"
    assert data["state_label"] == "Distracted"
    assert len(data["history"]) == 2
    assert set(data["history"][0]) == {"id", "t", "alpha", "theta", "focus_score"}


def test_real_time_disconnect_cancels_queued_ticks():
    controller = NeuroController(scheduler=ThreadScheduler(),
                                 sample_source=ScriptedSampleSource([LOW_FOCUS]),
                                 data_tick_sec=0.005, handshake_sec=0.02)
    streaming = threading.Event()
    controller.subscribe(lambda s: len(s.history) >= 5 and streaming.set(), replay=False)
    try:
        controller.connect()
        assert streaming.wait(3.0)
        controller.disconnect()
        count = len(controller.snapshot().history)
        time.sleep(0.1)
        assert len(controller.snapshot().history) == count
        assert controller.link_state is LinkState.DISCONNECTED
    finally:
        controller.shutdown()


def test_subscribe_with_replay_from_inside_a_callback(connected, scheduler):
    late = []
    at_subscribe = []

    def early(snapshot):
        if len(snapshot.history) == 2 and not at_subscribe:
            at_subscribe.append(snapshot.version)
            connected.subscribe(late.append, replay=True)

    connected.subscribe(early, replay=False)
    scheduler.advance(0.5)

    versions = [s.version for s in late]
    assert versions[0] == at_subscribe[0]
    assert versions == list(range(versions[0], versions[0] + len(versions)))
    assert versions[-1] == connected.snapshot().version


def test_blocked_observer_does_not_block_queries_or_commands():
    controller = NeuroController(scheduler=ThreadScheduler(),
                                 sample_source=ScriptedSampleSource([LOW_FOCUS]),
                                 data_tick_sec=0.01, handshake_sec=0.01)
    blocked = threading.Event()
    release = threading.Event()
    seen = []

    def slow_display(snapshot):
        seen.append(snapshot.version)
        if snapshot.history and not blocked.is_set():
            blocked.set()
            release.wait(5.0)

    controller.subscribe(slow_display, replay=False)
    try:
        controller.connect()
        assert blocked.wait(3.0)

        started = time.monotonic()
        snap = controller.snapshot()
        assert controller.disconnect() is True
        assert time.monotonic() - started < 0.2
        assert snap.is_connected
        assert controller.link_state is LinkState.DISCONNECTED

        release.set()
        final = controller.snapshot().version
        deadline = time.monotonic() + 3.0
        while seen[-1] != final and time.monotonic() < deadline:
            time.sleep(0.01)
        assert seen == list(range(1, final + 1))
    finally:
        release.set()
        controller.shutdown()
