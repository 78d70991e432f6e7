# render_loop.py
"""
Drives one fade, simulate and draw pass per animation frame.

The RenderLoop is host-agnostic: it talks to a drawing surface and a frame
scheduler through the small interfaces described below, so the same loop
runs against pygame in the application and against in-memory fakes in the
tests.
"""
import logging
import threading
from typing import Any, Optional, Tuple

from sim_config import SimulationConfig
from simulation import Simulation

# --- Data Contracts ---
#
# Drawing surface (duck-typed):
#   - width: int, height: int
#   - fill_rect(x, y, w, h, color: Tuple[int, int, int, float]) -> None
#     The last channel is an opacity in [0, 1].
#   - draw_filled_circle(x, y, radius, color: str) -> None
#
# Frame scheduler (duck-typed):
#   - schedule_next_frame(callback) -> handle
#   - cancel_scheduled_frame(handle) -> None
#
# class PointerState:
#   - move_to(x, y): stores the position and marks the pointer active.
#   - release(): marks the pointer inactive, keeping the last position.
#   - snapshot() -> (x, y, active): consistent read of all three fields.
#
# class RenderLoop:
#   - __init__(self, surface, scheduler, simulation, config, pointer=None)
#   - start() / stop(): begin scheduling frames / cancel the pending frame.
#   - update_config(config): queued, applied before the next frame's work.
#   - render_frame() -> bool: one frame of work. False if it was skipped
#     because the surface is missing or has no area.
#   - Invariants: particle state is fully updated before any particle is
#     drawn; configuration never changes in the middle of a frame.

# Log a skipped frame at most this often while the surface is unusable.
SKIP_LOG_THROTTLE = 120


class PointerState:
    """
    Pointer position and activity, written by input handling and read by
    the simulation as one consistent snapshot.
    """
    def __init__(self, x: float = 0.0, y: float = 0.0, active: bool = False):
        self._lock = threading.Lock()
        self._x = float(x)
        self._y = float(y)
        self._active = bool(active)

    def move_to(self, x: float, y: float) -> None:
        with self._lock:
            self._x = float(x)
            self._y = float(y)
            self._active = True

    def release(self) -> None:
        with self._lock:
            self._active = False

    def snapshot(self) -> Tuple[float, float, bool]:
        with self._lock:
            return self._x, self._y, self._active

    @property
    def active(self) -> bool:
        return self.snapshot()[2]


class RenderLoop:
    """
    Schedules and performs the per-frame trail fade, simulation step and
    particle draw pass.
    """
    def __init__(self, surface: Any, scheduler: Any, simulation: Simulation,
                 config: SimulationConfig, pointer: Optional[PointerState] = None):
        self.surface = surface
        self.scheduler = scheduler
        self.simulation = simulation
        self.config = config
        self.pointer = pointer if pointer is not None else PointerState()

        # The initial config is applied on the first usable frame, which
        # also populates the particle system.
        self._pending_config: Optional[SimulationConfig] = config
        self._handle = None
        self._running = False
        self.frame_count = 0
        self.skipped_frames = 0

    @property
    def running(self) -> bool:
        return self._running

    def start(self) -> None:
        if self._running:
            return
        self._running = True
        self._handle = self.scheduler.schedule_next_frame(self._on_frame)
        logging.info("Render loop started.")

    def stop(self) -> None:
        """Cancels the pending frame. No further frames are scheduled."""
        if not self._running:
            return
        self._running = False
        if self._handle is not None:
            self.scheduler.cancel_scheduled_frame(self._handle)
            self._handle = None
        logging.info(f"Render loop stopped after {self.frame_count} frames.")

    def update_config(self, config: SimulationConfig) -> None:
        """Queues a configuration change for the next frame boundary."""
        self._pending_config = config

    def resize(self, surface: Any) -> None:
        """
        Switches to a new surface and re-spawns the population inside its
        bounds, as happens when the hosting window changes size.
        """
        self.surface = surface
        if self._surface_is_usable():
            self.simulation.particles.reset(surface.width, surface.height, self.config.palette)

    def _on_frame(self) -> None:
        self._handle = None
        if not self._running:
            return
        self.render_frame()
        if self._running:
            self._handle = self.scheduler.schedule_next_frame(self._on_frame)

    def _surface_is_usable(self) -> bool:
        surface = self.surface
        return surface is not None and surface.width > 0 and surface.height > 0

    def _apply_pending_config(self, width: int, height: int) -> None:
        config = self._pending_config
        if config is None:
            return
        self._pending_config = None
        particles = self.simulation.particles
        particles.resize_population(config.particle_count, width, height, config.palette)
        particles.recolor_if_palette_changed(config.palette)
        self.config = config

    def render_frame(self) -> bool:
        """
        Performs one frame: fade, advance time, step, draw.

        Returns:
            bool: False if the frame was skipped, True otherwise.
        """
        if not self._surface_is_usable():
            if self.skipped_frames % SKIP_LOG_THROTTLE == 0:
                logging.debug("Drawing surface unavailable or empty. Skipping frame.")
            self.skipped_frames += 1
            return False

        surface = self.surface
        width, height = surface.width, surface.height
        self._apply_pending_config(width, height)
        config = self.config

        # 1. Trail fade: translucent background over the previous frame
        surface.fill_rect(0, 0, width, height, (*config.background_color, config.fade_rate))

        # 2. Advance the noise field's time
        self.simulation.advance_time()

        # 3. Update every particle before any of them is drawn
        self.simulation.step(config, self.pointer, width, height)

        # 4. Draw particles sized by their speed
        particles = self.simulation.particles
        radii = particles.render_radii()
        for (x, y), radius, color in zip(particles.positions, radii, particles.colors):
            surface.draw_filled_circle(float(x), float(y), float(radius), str(color))

        self.frame_count += 1
        return True
