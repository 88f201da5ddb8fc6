"""Global configuration and constants for the parametric surface studio."""

import math
from dataclasses import dataclass


# Tessellation limits
MIN_STEPS = 4
MAX_GRID_CELLS = 50_000  # uSteps * vSteps

# Fourier fitting
MIN_FOURIER_SAMPLES = 16
MIN_FOURIER_ORDER = 1
MAX_FOURIER_ORDER = 60
DEFAULT_FOURIER_ORDER = 5
COEFFICIENT_EPSILON = 1e-4     # terms below this magnitude are dropped from expressions
COEFFICIENT_DECIMALS = 4
FOURIER_PREVIEW_STEPS = 400    # samples along the fitted curve for the canvas overlay
MIN_STROKE_SPACING_SQ = 1.0    # px^2, closer pointer samples are skipped

# Bounding sphere radius used when the mesh has no extent
FALLBACK_RADIUS = 1.0

# Preset file format
PRESET_TYPE = "paramSurfacePreset"
PRESET_VERSION = 1
DEFAULT_PRESET_NAME = "My surface"


@dataclass
class SurfaceDefaults:
    x: str = "cos(u) * cos(v)"
    y: str = "sin(u) * cos(v)"
    z: str = "sin(v)"
    u_min: str = "0"
    u_max: str = "2 * pi"
    v_min: str = "-pi / 2"
    v_max: str = "pi / 2"
    u_steps: int = 60
    v_steps: int = 30


@dataclass
class RibbonDefaults:
    """Extrusion used when a fitted Fourier curve is sent to the surface view."""
    z: str = "0.1 * v"
    u_min: str = "0"
    u_max: str = "2 * pi"
    v_min: str = "-1"
    v_max: str = "1"


TWO_PI = 2.0 * math.pi

SERVER_HOST = "0.0.0.0"
SERVER_PORT = 8000
