# sim_config.py
"""
Validated simulation configuration.

SimulationConfig turns the `simulation_parameters` section of config.json
into a checked, read-only object. The simulation core never mutates it;
callers build a new one (for example from a preset) and hand it to the
render loop between frames.
"""
import logging
from typing import Any, Dict, List, Optional, Tuple

from constants import (
    BACKGROUND_COLOR, DEFAULT_SIMULATION_PARAMS, PALETTES, PRESETS, TUNABLE_PARAMS
)

# --- Data Contracts ---
#
# class SimulationConfig:
#   - __init__(self, params: Optional[Dict[str, Any]] = None):
#     - Inputs:
#       - params: Dictionary of simulation parameters from config.json.
#         - "particle_count": int (values <= 0 mean an empty field)
#         - "base_speed": float >= 0
#         - "flow_scale": float > 0
#         - "fade_rate": float in (0, 1]
#         - "interaction_radius": float > 0
#         - "interaction_strength": float >= 0
#         - "palette_name": str, a key of PALETTES (ignored if "palette" given)
#         - "palette": Optional list of color strings
#         - "background_color": Optional RGB triple
#         - "respawn_expired": bool
#         - "seed": Optional int
#     - Outputs: None
#     - Side Effects: None.
#     - Invariants: All fields are in range and the palette is non-empty.
#       Otherwise ValueError is raised and logged at CRITICAL.
#
#   - adjusted(self, key: str, steps: int) -> SimulationConfig:
#     - Outputs: A copy with one TUNABLE_PARAMS value stepped and clamped.


def _fail(msg: str) -> None:
    logging.critical(msg)
    raise ValueError(msg)


class SimulationConfig:
    """
    The externally owned parameters read by the simulation every frame.
    """
    def __init__(self, params: Optional[Dict[str, Any]] = None):
        merged = dict(DEFAULT_SIMULATION_PARAMS)
        merged.update(params or {})

        self.particle_count = int(merged["particle_count"])
        self.base_speed = float(merged["base_speed"])
        self.flow_scale = float(merged["flow_scale"])
        self.fade_rate = float(merged["fade_rate"])
        self.interaction_radius = float(merged["interaction_radius"])
        self.interaction_strength = float(merged["interaction_strength"])
        self.respawn_expired = bool(merged["respawn_expired"])
        self.seed = merged.get("seed")
        self.background_color: Tuple[int, int, int] = tuple(
            merged.get("background_color") or BACKGROUND_COLOR
        )

        palette = merged.get("palette")
        self.palette_name = merged.get("palette_name")
        if palette is None:
            if self.palette_name not in PALETTES:
                _fail(
                    f"Configuration error: unknown palette '{self.palette_name}'. "
                    f"Known palettes: {', '.join(PALETTES)}."
                )
            palette = PALETTES[self.palette_name]
        elif "palette_name" not in (params or {}):
            self.palette_name = "Custom"
        self.palette: List[str] = list(palette)

        self._validate()

    def _validate(self) -> None:
        """Rule 7: Enforce data contracts at construction time."""
        if not self.palette:
            _fail("Configuration error: palette must contain at least one color.")
        if not all(isinstance(color, str) for color in self.palette):
            _fail(f"Configuration error: palette colors must be strings, got {self.palette}.")
        if self.particle_count < 0:
            logging.warning(
                f"particle_count {self.particle_count} is negative. Using an empty field."
            )
            self.particle_count = 0
        if self.base_speed < 0:
            _fail(f"Configuration error: base_speed must be >= 0, got {self.base_speed}.")
        if self.flow_scale <= 0:
            _fail(f"Configuration error: flow_scale must be > 0, got {self.flow_scale}.")
        if not 0 < self.fade_rate <= 1:
            _fail(f"Configuration error: fade_rate must be in (0, 1], got {self.fade_rate}.")
        if self.interaction_radius <= 0:
            _fail(
                f"Configuration error: interaction_radius must be > 0, "
                f"got {self.interaction_radius}."
            )
        if self.interaction_strength < 0:
            _fail(
                f"Configuration error: interaction_strength must be >= 0, "
                f"got {self.interaction_strength}."
            )
        if len(self.background_color) != 3:
            _fail(
                f"Configuration error: background_color must be an RGB triple, "
                f"got {self.background_color}."
            )

    def to_dict(self) -> Dict[str, Any]:
        """The parameters as a plain dictionary, suitable for display or merging."""
        return {
            "particle_count": self.particle_count,
            "base_speed": self.base_speed,
            "flow_scale": self.flow_scale,
            "fade_rate": self.fade_rate,
            "interaction_radius": self.interaction_radius,
            "interaction_strength": self.interaction_strength,
            "palette_name": self.palette_name,
            "palette": list(self.palette),
            "background_color": list(self.background_color),
            "respawn_expired": self.respawn_expired,
            "seed": self.seed,
        }

    def adjusted(self, key: str, steps: int) -> "SimulationConfig":
        """
        Returns a new config with `key` moved by `steps` increments,
        clamped to the range listed in TUNABLE_PARAMS.
        """
        if key not in TUNABLE_PARAMS:
            _fail(f"Configuration error: '{key}' is not a tunable parameter.")
        low, high, step = TUNABLE_PARAMS[key]
        value = min(max(getattr(self, key) + steps * step, low), high)
        # Snap to the step grid so repeated presses do not drift.
        value = round(round(value / step) * step, 6)
        value = min(max(value, low), high)

        params = self.to_dict()
        params[key] = int(round(value)) if key == "particle_count" else value
        logging.info(f"{key} adjusted to {params[key]}.")
        return SimulationConfig(params)

    def with_preset(self, name: str) -> "SimulationConfig":
        """
        Returns a new config with the named preset applied on top of this one.
        """
        if name not in PRESETS:
            _fail(f"Configuration error: unknown preset '{name}'. Known presets: {', '.join(PRESETS)}.")
        params = self.to_dict()
        params.update(PRESETS[name])
        # The preset's palette name wins over any explicit color list.
        params.pop("palette", None)
        logging.info(f"Preset '{name}' applied.")
        return SimulationConfig(params)

    @classmethod
    def from_preset(cls, name: str, overrides: Optional[Dict[str, Any]] = None) -> "SimulationConfig":
        """Builds a config from the defaults, a preset and optional overrides."""
        if name not in PRESETS:
            _fail(f"Configuration error: unknown preset '{name}'. Known presets: {', '.join(PRESETS)}.")
        params = dict(DEFAULT_SIMULATION_PARAMS)
        params.update(PRESETS[name])
        params.update(overrides or {})
        return cls(params)

    def __repr__(self) -> str:
        return f"SimulationConfig({self.to_dict()!r})"
