# constants.py
"""
Application-level constants.

These values are static and do not change between simulation runs.
They are fundamental to the application's framework, such as rendering
properties, default window sizes, or the fixed coefficients of the
flow-field integrator that are not part of the experimental configuration.
"""
import math

# Visualization settings
# Set to True to run in borderless fullscreen mode.
# Set to False to run in a resizable window (1280x720).
FULLSCREEN = False
WINDOW_SIZE = (1280, 720)
FPS = 60
BACKGROUND_COLOR = (0, 0, 0) # Black
WINDOW_TITLE = "Flux"

# --- Flow Field Physics ---
# Elapsed-time increment applied once per rendered frame.
TIME_STEP = 0.005
# How fast the noise field scrolls along its y axis per unit of elapsed time.
TIME_FLOW_RATE = 0.1
# Noise in [-1, 1] is mapped to an angle spanning four full turns.
NOISE_ANGLE_RANGE = math.pi * 4
# Fraction of the flow force added to the velocity each frame.
FLOW_FORCE_GAIN = 0.1
# Multiplicative velocity decay applied every frame.
FRICTION = 0.9
# Scale of the pointer attraction force.
POINTER_FORCE_GAIN = 0.5

# --- Particle Rendering ---
# Draw radius is speed * SPEED_TO_RADIUS, clamped to [MIN, MAX].
SPEED_TO_RADIUS = 0.5
MIN_PARTICLE_RADIUS = 1.0
MAX_PARTICLE_RADIUS = 3.0

# --- Particle Lifecycle ---
# Life spans are drawn uniformly from [LIFE_SPAN_MIN, LIFE_SPAN_MAX).
LIFE_SPAN_MIN = 100
LIFE_SPAN_MAX = 300

# --- Noise ---
# Scale that normalises the summed simplex corner contributions to [-1, 1].
NOISE_SCALE = 70.0
PERMUTATION_SIZE = 256


# Color palettes, keyed by preset name. Colors are hex strings.
PALETTES = {
    "Nebula": ["#4f46e5", "#ec4899", "#8b5cf6", "#06b6d4", "#ffffff"],
    "Cyberpunk": ["#facc15", "#f472b6", "#22d3ee", "#000000", "#10b981"],
    "Aurora": ["#059669", "#34d399", "#a7f3d0", "#6366f1", "#1e1b4b"],
    "Inferno": ["#ef4444", "#f97316", "#fbbf24", "#7f1d1d", "#fff7ed"],
    "Monochrome": ["#ffffff", "#e5e5e5", "#a3a3a3", "#525252", "#171717"],
}

# Defaults used for any simulation parameter the config file omits.
DEFAULT_SIMULATION_PARAMS = {
    "particle_count": 3000,
    "base_speed": 2.0,
    "flow_scale": 0.005,
    "fade_rate": 0.08,
    "interaction_radius": 150.0,
    "interaction_strength": 5.0,
    "palette_name": "Nebula",
    "respawn_expired": False,
    "seed": None,
}

# Partial overrides applied on top of the current parameters when a preset
# is selected. Every preset carries its own palette.
PRESETS = {
    "Nebula": {"palette_name": "Nebula", "flow_scale": 0.005, "base_speed": 2.0},
    "Cyberpunk": {
        "palette_name": "Cyberpunk",
        "base_speed": 4.0,
        "flow_scale": 0.01,
        "interaction_strength": 10.0,
        "fade_rate": 0.15,
    },
    "Aurora": {
        "palette_name": "Aurora",
        "base_speed": 1.0,
        "flow_scale": 0.002,
        "particle_count": 4000,
        "fade_rate": 0.04,
    },
    "Inferno": {
        "palette_name": "Inferno",
        "base_speed": 6.0,
        "flow_scale": 0.008,
        "interaction_strength": 20.0,
    },
    "Monochrome": {
        "palette_name": "Monochrome",
        "base_speed": 3.0,
        "flow_scale": 0.005,
        "particle_count": 2000,
    },
}

# Live-tunable parameters: (minimum, maximum, step per key press).
TUNABLE_PARAMS = {
    "base_speed": (0.5, 10.0, 0.1),
    "particle_count": (500, 5000, 100),
    "flow_scale": (0.001, 0.02, 0.001),
    "fade_rate": (0.01, 0.5, 0.01),
    "interaction_strength": (0.0, 50.0, 1.0),
}
