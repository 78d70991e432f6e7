"""Shared fixtures and host fakes for the flow-field tests."""
import logging
import os

import numpy as np
import pytest

# pygame must not try to open a real window or audio device under test.
os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("SDL_AUDIODRIVER", "dummy")

from sim_config import SimulationConfig
from noise_field import NoiseField
from particle import ParticleSystem
from simulation import Simulation

WIDTH = 800
HEIGHT = 600
PALETTE = ["#4f46e5", "#ec4899", "#8b5cf6"]


class FakeSurface:
    """Records drawing calls instead of rasterising them."""
    def __init__(self, width=WIDTH, height=HEIGHT):
        self.width = width
        self.height = height
        self.calls = []

    def fill_rect(self, x, y, w, h, color):
        self.calls.append(("fill_rect", x, y, w, h, color))

    def draw_filled_circle(self, x, y, radius, color):
        self.calls.append(("circle", x, y, radius, color))

    def circles(self):
        return [call for call in self.calls if call[0] == "circle"]


class FakeScheduler:
    """Holds scheduled callbacks until the test runs them."""
    def __init__(self):
        self.pending = {}
        self.cancelled = []
        self._next = 1

    def schedule_next_frame(self, callback):
        handle = self._next
        self._next += 1
        self.pending[handle] = callback
        return handle

    def cancel_scheduled_frame(self, handle):
        self.cancelled.append(handle)
        self.pending.pop(handle, None)

    def run_pending(self):
        callbacks, self.pending = self.pending, {}
        for callback in callbacks.values():
            callback()
        return len(callbacks)


class ConstantNoise:
    """Noise stand-in returning one value everywhere and recording samples."""
    def __init__(self, value=0.0):
        self.value = value
        self.last_xs = None
        self.last_ys = None

    def sample_many(self, xs, ys):
        self.last_xs = np.array(xs)
        self.last_ys = np.array(ys)
        return np.full(np.shape(xs), self.value, dtype=np.float64)


def make_config(**overrides):
    params = {
        "particle_count": 50,
        "base_speed": 2.0,
        "flow_scale": 0.005,
        "fade_rate": 0.08,
        "interaction_radius": 150.0,
        "interaction_strength": 5.0,
        "palette": list(PALETTE),
    }
    params.update(overrides)
    return SimulationConfig(params)


@pytest.fixture
def config():
    return make_config()


@pytest.fixture
def particles():
    return ParticleSystem(rng=1234)


@pytest.fixture
def noise_field():
    return NoiseField(rng=42)


@pytest.fixture
def simulation(particles, noise_field):
    return Simulation(particles, noise_field)


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    level = root.level
    yield root
    for handler in list(root.handlers):
        handler.close()
        root.removeHandler(handler)
    root.setLevel(level)
