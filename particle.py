# particle.py
"""
Manages the state of all particles in the simulation.

This module defines the ParticleSystem class, which is responsible for
spawning, respawning, resizing and recoloring the particle population.
Particle data (position, velocity, color, age, life span) lives in
NumPy arrays; the Particle tuple is a read-only snapshot of one entry.
"""
import logging
import numpy as np
from typing import Any, List, NamedTuple, Optional, Sequence, Union

from constants import (
    LIFE_SPAN_MAX, LIFE_SPAN_MIN, MAX_PARTICLE_RADIUS, MIN_PARTICLE_RADIUS,
    SPEED_TO_RADIUS
)

# --- Data Contracts ---
#
# class ParticleSystem:
#   - __init__(self, rng: Optional[Union[np.random.Generator, int]] = None):
#     - Inputs:
#       - rng: NumPy Generator or seed used for every random draw.
#     - Outputs: None
#     - Side Effects: Creates empty state arrays.
#     - Invariants:
#       - self.positions is a NumPy array of shape (N, 2) of dtype float64.
#       - self.velocities is a NumPy array of shape (N, 2) of dtype float64.
#       - self.colors is a NumPy unicode array of shape (N,).
#       - self.ages is a NumPy array of shape (N,) of dtype int64.
#       - self.life_spans is a NumPy array of shape (N,) of dtype float64.
#
#   - spawn(self, count, width, height, palette) -> None:
#     - Side Effects: Appends `count` particles at uniform positions with
#       zero velocity, a uniform palette color, age 0 and a life span drawn
#       from [LIFE_SPAN_MIN, LIFE_SPAN_MAX).
#
#   - respawn(self, indices, width, height) -> None:
#     - Side Effects: Moves the selected particles to uniform positions and
#       resets their age. Velocity and color are preserved.
#
#   - resize_population(self, target_count, width, height, palette) -> None:
#     - Side Effects: Appends or truncates from the tail until
#       len(self) == max(target_count, 0). Idempotent.
#
#   - recolor_if_palette_changed(self, palette) -> int:
#     - Outputs: number of particles that were recolored.
#     - Side Effects: Particles whose color is not in `palette` get a uniform
#       random color from it. Others are untouched.


class Particle(NamedTuple):
    """Snapshot of a single particle's state."""
    x: float
    y: float
    vx: float
    vy: float
    color: str
    age: int
    life_span: float


class ParticleSystem:
    """
    A container for all particles, managing their state via NumPy arrays.
    """
    def __init__(self, rng: Optional[Union[np.random.Generator, int]] = None):
        """
        Initializes an empty particle system.

        Args:
            rng: A NumPy Generator or integer seed. None draws fresh entropy.
        """
        if not isinstance(rng, np.random.Generator):
            rng = np.random.default_rng(rng)
        self.rng = rng

        self.positions = np.zeros((0, 2), dtype=np.float64)
        self.velocities = np.zeros((0, 2), dtype=np.float64)
        self.colors = np.zeros(0, dtype=str)
        self.ages = np.zeros(0, dtype=np.int64)
        self.life_spans = np.zeros(0, dtype=np.float64)

    def __len__(self) -> int:
        return self.positions.shape[0]

    @property
    def particle_count(self) -> int:
        return len(self)

    def particle(self, index: int) -> Particle:
        """Returns a snapshot of the particle at `index`."""
        x, y = self.positions[index]
        vx, vy = self.velocities[index]
        return Particle(
            float(x), float(y), float(vx), float(vy),
            str(self.colors[index]), int(self.ages[index]),
            float(self.life_spans[index])
        )

    def spawn(self, count: int, width: float, height: float, palette: Sequence[str]) -> None:
        """
        Appends `count` freshly spawned particles.

        Args:
            count (int): Number of particles to add.
            width (float): The width of the simulation area.
            height (float): The height of the simulation area.
            palette (Sequence[str]): Colors to draw from.
        """
        if count <= 0:
            return
        if len(palette) == 0:
            raise ValueError("Cannot spawn particles from an empty palette.")

        positions = self.rng.uniform(low=[0, 0], high=[width, height], size=(count, 2))
        velocities = np.zeros((count, 2), dtype=np.float64)
        colors = self._pick_colors(palette, count)
        ages = np.zeros(count, dtype=np.int64)
        life_spans = self.rng.uniform(LIFE_SPAN_MIN, LIFE_SPAN_MAX, size=count)

        self.positions = np.concatenate((self.positions, positions))
        self.velocities = np.concatenate((self.velocities, velocities))
        self.colors = np.concatenate((self.colors, colors))
        self.ages = np.concatenate((self.ages, ages))
        self.life_spans = np.concatenate((self.life_spans, life_spans))

    def respawn(self, indices: Any, width: float, height: float) -> None:
        """
        Moves the selected particles to new random positions and resets
        their age. `indices` may be an int, a sequence of ints or a boolean
        mask over the population.
        """
        selected = np.atleast_1d(np.arange(len(self))[indices])
        count = selected.shape[0]
        if count == 0:
            return
        self.positions[selected] = self.rng.uniform(
            low=[0, 0], high=[width, height], size=(count, 2)
        )
        self.ages[selected] = 0

    def reset(self, width: float, height: float, palette: Sequence[str]) -> None:
        """Discards every particle and spawns the same number again."""
        count = len(self)
        self.resize_population(0, width, height, palette)
        self.spawn(count, width, height, palette)
        logging.info(f"Particle population re-initialised for a {width}x{height} surface.")

    def resize_population(self, target_count: int, width: float, height: float,
                          palette: Sequence[str]) -> None:
        """
        Grows the population with new particles or truncates it from the end.
        """
        target_count = max(int(target_count), 0)
        current = len(self)
        if target_count == current:
            return

        if target_count > current:
            self.spawn(target_count - current, width, height, palette)
        else:
            self.positions = self.positions[:target_count]
            self.velocities = self.velocities[:target_count]
            self.colors = self.colors[:target_count]
            self.ages = self.ages[:target_count]
            self.life_spans = self.life_spans[:target_count]

        logging.info(f"Particle population resized from {current} to {target_count}.")

    def recolor_if_palette_changed(self, palette: Sequence[str]) -> int:
        """
        Reassigns a random palette color to every particle whose color is
        no longer part of `palette`.

        Returns:
            int: The number of particles that were recolored.
        """
        if len(self) == 0:
            return 0
        if len(palette) == 0:
            raise ValueError("Cannot recolor particles with an empty palette.")

        stale = ~np.isin(self.colors, np.asarray(palette, dtype=str))
        stale_count = int(np.count_nonzero(stale))
        if stale_count:
            # Widen the dtype first so longer color strings are not truncated.
            new_colors = self._pick_colors(palette, stale_count)
            self.colors = self.colors.astype(np.result_type(self.colors, new_colors))
            self.colors[stale] = new_colors
            logging.debug(f"Recolored {stale_count} particles for the new palette.")
        return stale_count

    def render_radii(self) -> np.ndarray:
        """
        Draw radius for every particle: faster particles are larger,
        clamped to [MIN_PARTICLE_RADIUS, MAX_PARTICLE_RADIUS].
        """
        speed = np.linalg.norm(self.velocities, axis=1)
        return np.clip(speed * SPEED_TO_RADIUS, MIN_PARTICLE_RADIUS, MAX_PARTICLE_RADIUS)

    def _pick_colors(self, palette: Sequence[str], count: int) -> np.ndarray:
        choices = np.asarray(palette, dtype=str)
        return choices[self.rng.integers(0, len(choices), size=count)]

    def as_list(self) -> List[Particle]:
        """Snapshots of every particle, mainly for inspection and tests."""
        return [self.particle(i) for i in range(len(self))]
