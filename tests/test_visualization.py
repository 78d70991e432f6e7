import pygame
import pytest

from constants import PALETTES
from render_loop import RenderLoop
from constants import TUNABLE_PARAMS
from visualization import (
    PRESET_KEYS, TUNING_KEYS, PygameFrameScheduler, PygameSurface, Visualizer
)

from conftest import make_config


class FakeClock:
    def __init__(self):
        self.ticks = 0

    def tick(self, fps):
        self.ticks += 1
        return 16

    def get_fps(self):
        return 60.0


def test_surface_reports_size():
    surface = PygameSurface(pygame.Surface((64, 32)))
    assert (surface.width, surface.height) == (64, 32)


def test_opaque_fill_covers_target():
    target = pygame.Surface((20, 10))
    target.fill((255, 255, 255))
    surface = PygameSurface(target)
    surface.fill_rect(0, 0, 20, 10, (0, 0, 0, 1.0))
    assert target.get_at((5, 5))[:3] == (0, 0, 0)


def test_translucent_fill_darkens_gradually():
    target = pygame.Surface((20, 10))
    target.fill((200, 200, 200))
    surface = PygameSurface(target)
    surface.fill_rect(0, 0, 20, 10, (0, 0, 0, 0.5))
    r, g, b = target.get_at((5, 5))[:3]
    assert 0 < r < 200


def test_circle_uses_hex_color():
    target = pygame.Surface((20, 20))
    surface = PygameSurface(target)
    surface.draw_filled_circle(10.0, 10.0, 3.0, "#ec4899")
    assert target.get_at((10, 10))[:3] == (0xec, 0x48, 0x99)


def test_scheduler_runs_each_callback_once():
    scheduler = PygameFrameScheduler(clock=FakeClock())
    calls = []
    scheduler.schedule_next_frame(lambda: calls.append("a"))
    handle = scheduler.schedule_next_frame(lambda: calls.append("b"))
    scheduler.cancel_scheduled_frame(handle)

    assert scheduler.run_pending() == 1
    assert calls == ["a"]
    assert not scheduler.has_pending
    assert scheduler.clock.ticks == 1


def test_scheduler_defers_callbacks_scheduled_during_a_frame():
    scheduler = PygameFrameScheduler(clock=FakeClock())
    calls = []

    def frame():
        calls.append(len(calls))
        scheduler.schedule_next_frame(frame)

    scheduler.schedule_next_frame(frame)
    scheduler.run_pending()
    scheduler.run_pending()
    assert calls == [0, 1]
    assert scheduler.has_pending


@pytest.fixture
def visualizer(simulation):
    config = make_config(particle_count=25)
    vis = Visualizer(config, fullscreen=False, window_size=(160, 120))
    vis.scheduler.clock = FakeClock()
    loop = RenderLoop(vis.surface, vis.scheduler, simulation, config)
    vis.attach(loop)
    yield vis
    vis.close()


def post(event_type, **attributes):
    pygame.event.post(pygame.event.Event(event_type, **attributes))


def test_visualizer_runs_frames(visualizer):
    visualizer.loop.start()
    pygame.event.clear()
    assert visualizer.run_frame() is True
    assert visualizer.loop.frame_count == 1
    assert len(visualizer.loop.simulation.particles) == 25


def test_mouse_motion_updates_pointer(visualizer):
    pygame.event.clear()
    post(pygame.MOUSEMOTION, pos=(30, 40), rel=(0, 0), buttons=(0, 0, 0))
    assert visualizer.handle_events() is True
    assert visualizer.pointer.snapshot() == (30.0, 40.0, True)
    assert visualizer.loop.pointer is visualizer.pointer


def test_preset_key_queues_config(visualizer):
    assert PRESET_KEYS[pygame.K_2] == "Cyberpunk"
    pygame.event.clear()
    post(pygame.KEYDOWN, key=pygame.K_2, mod=0, unicode="", scancode=0)
    visualizer.handle_events()
    visualizer.loop.start()
    visualizer.run_frame()
    assert visualizer.config.palette == PALETTES["Cyberpunk"]
    assert visualizer.loop.config.palette == PALETTES["Cyberpunk"]


def test_quit_event_stops(visualizer):
    pygame.event.clear()
    post(pygame.QUIT)
    assert visualizer.handle_events() is False


def test_close_stops_loop(simulation):
    vis = Visualizer(make_config(), fullscreen=False, window_size=(64, 64))
    loop = RenderLoop(vis.surface, vis.scheduler, simulation, make_config())
    vis.attach(loop)
    loop.start()
    vis.close()
    assert not loop.running


def press(key):
    post(pygame.KEYDOWN, key=key, mod=0, unicode="", scancode=0)


def test_speed_key_queues_adjusted_config(visualizer):
    assert TUNING_KEYS[pygame.K_w] == ("base_speed", 1)
    pygame.event.clear()
    press(pygame.K_w)
    visualizer.handle_events()
    assert visualizer.config.base_speed == pytest.approx(2.1)

    visualizer.loop.start()
    visualizer.run_frame()
    assert visualizer.loop.config.base_speed == pytest.approx(2.1)


def test_tuning_keys_stay_within_range(visualizer):
    low, high, _ = TUNABLE_PARAMS["interaction_strength"]
    pygame.event.clear()
    for _ in range(60):
        press(pygame.K_f)
    visualizer.handle_events()
    assert visualizer.config.interaction_strength == high

    pygame.event.clear()
    for _ in range(60):
        press(pygame.K_d)
    visualizer.handle_events()
    assert visualizer.config.interaction_strength == low


def test_particle_count_keys_step_by_hundreds(visualizer):
    visualizer.config = make_config(particle_count=3000)
    pygame.event.clear()
    press(pygame.K_a)
    press(pygame.K_a)
    visualizer.handle_events()
    visualizer.loop.start()
    visualizer.run_frame()
    assert visualizer.loop.config.particle_count == 2800
    assert len(visualizer.loop.simulation.particles) == 2800


def test_hud_frame_renders(visualizer):
    pygame.event.clear()
    press(pygame.K_h)
    visualizer.loop.start()
    assert visualizer.run_frame() is True
    assert visualizer.show_hud
