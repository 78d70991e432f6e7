# visualization.py
"""
Handles the visualization of the flow field using Pygame.

This module provides the pygame side of the render loop: a drawing surface
adapter, a clock-driven frame scheduler, and the Visualizer window that
turns mouse, touch, keyboard and resize events into pointer updates,
preset switches, live parameter tuning and surface changes.
"""
import logging
import pygame
from typing import Callable, Dict, Optional, Tuple

from sim_config import SimulationConfig
from constants import FPS, FULLSCREEN, PRESETS, WINDOW_SIZE, WINDOW_TITLE
from render_loop import PointerState, RenderLoop

# --- Data Contracts ---
#
# class PygameSurface:
#   - __init__(self, target: pygame.Surface)
#   - width, height: size of the target surface.
#   - fill_rect(x, y, w, h, color): color is (r, g, b, opacity in [0, 1]).
#     Blends a translucent rectangle over the target.
#   - draw_filled_circle(x, y, radius, color): color is any value accepted
#     by pygame.Color, e.g. "#4f46e5".
#
# class PygameFrameScheduler:
#   - schedule_next_frame(callback) -> int
#   - cancel_scheduled_frame(handle: int) -> None
#   - run_pending() -> int: waits for the next tick of the clock, then runs
#     and clears the callbacks scheduled so far. Returns how many ran.
#
# class Visualizer:
#   - __init__(self, config: SimulationConfig, fullscreen: bool = FULLSCREEN):
#     - Side Effects: Initializes Pygame and creates a display surface.
#   - attach(self, loop: RenderLoop) -> None
#   - run_frame(self) -> bool:
#     - Outputs: False if the user has quit or the loop stopped.
#     - Side Effects: Handles events, runs one scheduled frame, flips the
#       display.
#   - close(self) -> None: stops the loop and shuts down Pygame.
#
# Keys: 1-5 presets, Q/W speed, A/S particle count, Z/X flow scale,
# E/R trail fade, D/F pointer force, H toggles the HUD, ESC quits.

# Keys 1..5 select the presets in definition order.
PRESET_KEYS = {pygame.K_1 + i: name for i, name in enumerate(PRESETS)}

# Key pairs that step a tunable parameter down / up.
TUNING_KEYS = {
    pygame.K_q: ("base_speed", -1), pygame.K_w: ("base_speed", 1),
    pygame.K_a: ("particle_count", -1), pygame.K_s: ("particle_count", 1),
    pygame.K_z: ("flow_scale", -1), pygame.K_x: ("flow_scale", 1),
    pygame.K_e: ("fade_rate", -1), pygame.K_r: ("fade_rate", 1),
    pygame.K_d: ("interaction_strength", -1), pygame.K_f: ("interaction_strength", 1),
}


class PygameSurface:
    """
    Exposes a pygame.Surface through the drawing interface the render loop
    expects.
    """
    def __init__(self, target: pygame.Surface):
        self.target = target
        self._overlay: Optional[pygame.Surface] = None
        self._color_cache: Dict[str, pygame.Color] = {}

    @property
    def width(self) -> int:
        return self.target.get_width()

    @property
    def height(self) -> int:
        return self.target.get_height()

    def fill_rect(self, x: float, y: float, w: float, h: float,
                  color: Tuple[int, int, int, float]) -> None:
        r, g, b, opacity = color
        size = (int(w), int(h))
        if size[0] <= 0 or size[1] <= 0:
            return
        # Reuse the overlay surface between frames while the size is stable.
        if self._overlay is None or self._overlay.get_size() != size:
            self._overlay = pygame.Surface(size, pygame.SRCALPHA)
        alpha = int(round(max(0.0, min(1.0, opacity)) * 255))
        self._overlay.fill((r, g, b, alpha))
        self.target.blit(self._overlay, (int(x), int(y)))

    def draw_filled_circle(self, x: float, y: float, radius: float, color: str) -> None:
        pygame.draw.circle(self.target, self._color(color), (x, y), radius)

    def _color(self, value: str) -> pygame.Color:
        color = self._color_cache.get(value)
        if color is None:
            color = pygame.Color(value)
            self._color_cache[value] = color
        return color


class PygameFrameScheduler:
    """
    A requestAnimationFrame-style scheduler paced by a pygame Clock.
    """
    def __init__(self, fps: int = FPS, clock: Optional[pygame.time.Clock] = None):
        self.fps = fps
        self.clock = clock if clock is not None else pygame.time.Clock()
        self._pending: Dict[int, Callable[[], None]] = {}
        self._next_handle = 1

    def schedule_next_frame(self, callback: Callable[[], None]) -> int:
        handle = self._next_handle
        self._next_handle += 1
        self._pending[handle] = callback
        return handle

    def cancel_scheduled_frame(self, handle: int) -> None:
        self._pending.pop(handle, None)

    @property
    def has_pending(self) -> bool:
        return bool(self._pending)

    def run_pending(self) -> int:
        self.clock.tick(self.fps)
        # Callbacks scheduled while running belong to the next frame.
        callbacks, self._pending = self._pending, {}
        for callback in callbacks.values():
            callback()
        return len(callbacks)


class Visualizer:
    """
    Owns the pygame window and routes input events into the render loop.
    """
    def __init__(self, config: SimulationConfig, fullscreen: bool = FULLSCREEN,
                 window_size: Tuple[int, int] = WINDOW_SIZE):
        """
        Initializes Pygame and the display window.
        """
        pygame.init()
        pygame.font.init()

        if fullscreen:
            display_info = pygame.display.Info()
            size = (display_info.current_w, display_info.current_h)
            self.screen = pygame.display.set_mode(size, pygame.FULLSCREEN)
        else:
            self.screen = pygame.display.set_mode(window_size, pygame.RESIZABLE)
        pygame.display.set_caption(WINDOW_TITLE)
        self.screen.fill(config.background_color)

        self.config = config
        self.surface = PygameSurface(self.screen)
        self.scheduler = PygameFrameScheduler()
        self.pointer = PointerState()
        self.loop: Optional[RenderLoop] = None
        self.show_hud = False

        try:
            self.font_main = pygame.font.SysFont("Segoe UI", 14)
        except pygame.error:
            logging.warning("Segoe UI font not found, falling back to default sans-serif.")
            self.font_main = pygame.font.SysFont(None, 18)

        logging.info(f"Visualizer initialized with Pygame display ({self.surface.width}x{self.surface.height}).")

    @property
    def width(self) -> int:
        return self.surface.width

    @property
    def height(self) -> int:
        return self.surface.height

    def attach(self, loop: RenderLoop) -> None:
        """Connects a render loop whose frames this window will host."""
        self.loop = loop
        loop.pointer = self.pointer

    def handle_events(self) -> bool:
        """
        Processes pending pygame events.

        Returns:
            bool: False if the user asked to quit, True otherwise.
        """
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                logging.info("Quit event received. Shutting down visualizer.")
                return False

            if event.type == pygame.KEYDOWN:
                if event.key == pygame.K_ESCAPE:
                    logging.info("ESC key pressed. Shutting down visualizer.")
                    return False
                if event.key == pygame.K_h:
                    self.show_hud = not self.show_hud
                elif event.key in PRESET_KEYS:
                    self._select_preset(PRESET_KEYS[event.key])
                elif event.key in TUNING_KEYS:
                    self._adjust_parameter(*TUNING_KEYS[event.key])

            elif event.type == pygame.MOUSEMOTION:
                self.pointer.move_to(*event.pos)
            elif event.type == pygame.WINDOWLEAVE:
                self.pointer.release()
            elif event.type == pygame.FINGERMOTION or event.type == pygame.FINGERDOWN:
                # Finger coordinates are normalised to [0, 1].
                self.pointer.move_to(event.x * self.width, event.y * self.height)
            elif event.type == pygame.FINGERUP:
                self.pointer.release()
            elif event.type == pygame.VIDEORESIZE:
                self._on_resize()

        return True

    def _select_preset(self, name: str) -> None:
        self.config = self.config.with_preset(name)
        if self.loop is not None:
            self.loop.update_config(self.config)

    def _adjust_parameter(self, key: str, steps: int) -> None:
        self.config = self.config.adjusted(key, steps)
        if self.loop is not None:
            self.loop.update_config(self.config)

    def _on_resize(self) -> None:
        self.screen = pygame.display.get_surface()
        self.surface = PygameSurface(self.screen)
        self.screen.fill(self.config.background_color)
        logging.info(f"Window resized to {self.width}x{self.height}.")
        if self.loop is not None:
            self.loop.resize(self.surface)

    def _draw_hud(self) -> None:
        config = self.config
        text = (
            f"{config.palette_name} | {len(self.loop.simulation.particles)}/{config.particle_count} particles | "
            f"speed {config.base_speed:.1f} | flow {config.flow_scale:.3f} | "
            f"fade {config.fade_rate:.2f} | force {config.interaction_strength:.0f} | "
            f"{self.scheduler.clock.get_fps():.0f} fps"
        )
        text_surf = self.font_main.render(text, True, (255, 255, 255))
        self.screen.blit(text_surf, (10, self.height - text_surf.get_height() - 10))

    def run_frame(self) -> bool:
        """
        Handles events, runs the scheduled frame and presents it.

        Returns:
            bool: False if the application should exit, True otherwise.
        """
        if self.loop is None or not self.handle_events():
            return False
        self.scheduler.run_pending()
        if self.show_hud:
            self._draw_hud()
        pygame.display.flip()
        return self.loop.running

    def close(self) -> None:
        """Stops scheduling frames and shuts down Pygame."""
        if self.loop is not None:
            self.loop.stop()
        pygame.font.quit()
        pygame.quit()
