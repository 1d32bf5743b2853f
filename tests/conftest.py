"""
Shared fixtures for the SmartBrain test suite
"""

import pytest

from smartbrain.acquisition.sources import SampleGenerator, ScriptedSampleSource
from smartbrain.control.controller import NeuroController
from smartbrain.control.scheduler import VirtualScheduler
from smartbrain.core.data_types import Sample


# Drives the score straight up: instantaneous score is clamped to 100
HIGH_FOCUS = Sample(alpha=0.8, theta=0.2)
# alpha / (theta + 0.1) * 100 = 0.3 / 0.7 * 100 ~ 42.9
LOW_FOCUS = Sample(alpha=0.3, theta=0.6)


@pytest.fixture
def scheduler():
    return VirtualScheduler()


@pytest.fixture
def controller(scheduler):
    ctrl = NeuroController(scheduler=scheduler, sample_source=SampleGenerator(seed=1234))
    yield ctrl
    ctrl.shutdown()


@pytest.fixture
def high_focus_controller(scheduler):
    ctrl = NeuroController(scheduler=scheduler,
                           sample_source=ScriptedSampleSource([HIGH_FOCUS]))
    yield ctrl
    ctrl.shutdown()


@pytest.fixture
def connected(controller, scheduler):
    controller.connect()
    scheduler.advance(controller.handshake_sec)
    return controller
