# simulation.py
"""
Handles the core simulation logic and physics calculations.

This module defines the Simulation class, which is responsible for
advancing the state of the particle system by one time step. Each particle
is steered by the angle of a scrolling noise field, slowed by friction,
pulled towards an active pointer and wrapped around the surface edges.
"""
import logging
import numpy as np
from typing import Optional, TYPE_CHECKING

from sim_config import SimulationConfig
from constants import (
    FLOW_FORCE_GAIN, FRICTION, NOISE_ANGLE_RANGE, POINTER_FORCE_GAIN,
    TIME_FLOW_RATE, TIME_STEP
)
from noise_field import NoiseField
from particle import ParticleSystem

# Forward reference for type hinting to avoid circular import
if TYPE_CHECKING:
    from render_loop import PointerState

# --- Data Contracts ---
#
# class Simulation:
#   - __init__(self, particles: ParticleSystem, noise_field: NoiseField,
#              elapsed_time: float = 0.0):
#     - Inputs:
#       - particles: The ParticleSystem to advance.
#       - noise_field: A constructed NoiseField, shared read-only.
#       - elapsed_time: Starting value of the time accumulator.
#     - Outputs: None
#     - Side Effects: Stores references.
#
#   - advance_time(self) -> float:
#     - Side Effects: elapsed_time += TIME_STEP. Returns the new value.
#
#   - step(self, config, pointer, width, height, elapsed_time=None) -> None:
#     - Inputs:
#       - config: SimulationConfig read for this frame only.
#       - pointer: PointerState (or None); sampled once per step.
#       - width, height: Current surface bounds.
#       - elapsed_time: Overrides the internal accumulator when given.
#     - Outputs: None
#     - Side Effects: Modifies positions, velocities and ages of the
#       internal ParticleSystem.
#     - Invariants: Particle count remains constant. After the step every
#       position lies in [0, width) x [0, height). No NaN is introduced by a
#       pointer located exactly on a particle.


def wrap_positions(positions: np.ndarray, width: float, height: float) -> None:
    """
    Toroidal wrap-around, in place. A particle leaving through one edge
    re-enters at the opposite edge rather than keeping its overshoot.
    """
    for axis, extent in ((0, float(width)), (1, float(height))):
        coord = positions[:, axis]
        coord[coord >= extent] = 0.0
        # The far edge itself is outside [0, extent), so use the closest
        # representable value below it.
        coord[coord < 0.0] = np.nextafter(extent, 0.0)


class Simulation:
    """
    Advances the flow-field particle system one frame at a time.
    """
    def __init__(self, particles: ParticleSystem, noise_field: NoiseField,
                 elapsed_time: float = 0.0):
        """
        Initializes the simulation.

        Args:
            particles (ParticleSystem): The particle system to simulate.
            noise_field (NoiseField): The flow noise source.
            elapsed_time (float): Initial value of the time accumulator.
        """
        self.particles = particles
        self.noise_field = noise_field
        self.elapsed_time = float(elapsed_time)
        logging.info("Simulation logic initialized.")

    def advance_time(self) -> float:
        """Moves the noise field forward by one frame's worth of time."""
        self.elapsed_time += TIME_STEP
        return self.elapsed_time

    def flow_angles(self, positions: np.ndarray, flow_scale: float, elapsed_time: float) -> np.ndarray:
        """
        Samples the noise field under each position and maps it to an angle
        spanning four full turns.
        """
        xs = positions[:, 0] * flow_scale
        ys = positions[:, 1] * flow_scale + elapsed_time * TIME_FLOW_RATE
        return self.noise_field.sample_many(xs, ys) * NOISE_ANGLE_RANGE

    def step(self, config: SimulationConfig, pointer: Optional["PointerState"],
             width: float, height: float, elapsed_time: Optional[float] = None) -> None:
        """
        Executes one time step of the simulation.
        """
        particles = self.particles
        if len(particles) == 0:
            return
        if elapsed_time is None:
            elapsed_time = self.elapsed_time

        positions = particles.positions
        velocities = particles.velocities

        # 1. Flow force from the noise angle
        angles = self.flow_angles(positions, config.flow_scale, elapsed_time)
        flow_force = np.column_stack((np.cos(angles), np.sin(angles))) * config.base_speed

        # 2. Integrate flow force, then apply friction
        velocities += flow_force * FLOW_FORCE_GAIN
        velocities *= FRICTION

        # 3. Pointer attraction with linear falloff inside the radius
        if pointer is not None:
            px, py, active = pointer.snapshot()
            if active and config.interaction_strength > 0:
                self._apply_pointer_force(px, py, config)

        # 4. Integrate position and wrap around the surface edges
        positions += velocities
        self._recover_non_finite(width, height)
        wrap_positions(positions, width, height)

        # 5. Lifecycle bookkeeping
        particles.ages += 1
        if config.respawn_expired:
            expired = particles.ages >= particles.life_spans
            if expired.any():
                particles.respawn(expired, width, height)

    def _apply_pointer_force(self, px: float, py: float, config: SimulationConfig) -> None:
        positions = self.particles.positions
        delta = np.array([px, py], dtype=np.float64) - positions
        distance = np.hypot(delta[:, 0], delta[:, 1])

        # A particle sitting exactly on the pointer has no direction to move in.
        in_range = (distance > 0) & (distance < config.interaction_radius)
        if not in_range.any():
            return

        dist = distance[in_range]
        falloff = (config.interaction_radius - dist) / config.interaction_radius
        magnitude = falloff * config.interaction_strength * POINTER_FORCE_GAIN
        self.particles.velocities[in_range] += (
            delta[in_range] / dist[:, np.newaxis]
        ) * magnitude[:, np.newaxis]

    def _recover_non_finite(self, width: float, height: float) -> None:
        """Respawns, at rest, any particle whose state stopped being finite."""
        particles = self.particles
        broken = ~(
            np.isfinite(particles.positions).all(axis=1)
            & np.isfinite(particles.velocities).all(axis=1)
        )
        if broken.any():
            logging.warning(f"Respawning {int(broken.sum())} particles with non-finite state.")
            particles.velocities[broken] = 0.0
            particles.respawn(broken, width, height)

    def mean_speed(self) -> float:
        """Aggregated metric for throttled DEBUG logging."""
        if len(self.particles) == 0:
            return 0.0
        return float(np.mean(np.linalg.norm(self.particles.velocities, axis=1)))
