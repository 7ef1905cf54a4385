"""Centralized application default values for easier review and tweaks."""

import math
from typing import Tuple

# Anchor limits
MIN_ANCHORS = 1
MAX_ANCHORS = 8

# Single-anchor waypoint synthesis
SINGLE_ANCHOR_WAYPOINTS = 8
SINGLE_ANCHOR_CHROMA_SWELL = 0.2
SINGLE_ANCHOR_LIGHTNESS_SWELL = 0.1

# Perceptual dynamics
LIGHTNESS_BIAS_AMOUNT = 0.2
MUTED_CHROMA_MULTIPLIER = 0.6
VIVID_CHROMA_MULTIPLIER = 1.4
DEFAULT_MID_JOURNEY_VIBRANCY = 0.3
VIBRANCY_PEAK_GAIN = 0.6
VIBRANCY_WINDOW = 0.35
TEMPERATURE_SHIFT = 0.3  # radians, roughly 17 degrees
MAX_CHROMA = 0.4

# Contrast thresholds (OKLab delta E)
CONTRAST_LOW = 0.05
CONTRAST_MEDIUM = 0.10
CONTRAST_HIGH = 0.15

# Delta range defaults: just-noticeable floor, soft ceiling
DEFAULT_DELTA_RANGE: Tuple[float, float] = (0.02, 0.05)
BAND_TOLERANCE = 1e-4

# Contrast enforcement
SINGLE_PASS_LIGHTNESS_SHARE = 0.7
SINGLE_PASS_CHROMA_BOOST = 1.15
CONTRAST_MAX_ROUNDS = 5
CONTRAST_LIGHTNESS_SHARE = 0.5
CONTRAST_HUE_STEP = 0.2  # radians per round
CONTRAST_CHROMA_GAIN = 0.5
CONTRAST_FALLBACK_MARGIN = 1e-3

# Discrete position mapping
STREAMING_SPACING = 0.05  # 20 colors per cycle

# Large palette chroma rhythm
RHYTHM_MIN_COUNT = 20
RHYTHM_AMPLITUDE = 0.1
RHYTHM_FREQUENCY = math.pi / 5.0
RHYTHM_BACKOFF: Tuple[float, ...] = (1.0, 0.5, 0.25, 0.0)

# Variation layer
DEFAULT_VARIATION_SEED = 0x123456789ABCDEF0
SUBTLE_VARIATION = 0.02
NOTICEABLE_VARIATION = 0.05
VARIATION_T_SCALE = 1_000_000

# Readability heuristic
READABLE_LIGHTNESS: Tuple[float, float] = (0.2, 0.95)

# Preview request limits
PREVIEW_DEFAULT_COUNT = 8
PREVIEW_ADVISORY_COUNT = 50
PREVIEW_MAX_COUNT = 200
PREVIEW_GRADIENT_STOPS = 64

# Export defaults
DEFAULT_EXPORT_KEY_PREFIX = ""
DEFAULT_EXPORT_LINE_TERMINATOR = ";"
DEFAULT_EXPORT_WRAP_QUOTES = False
# Stored as the PaletteFormat enum value name for cycle-free import.
DEFAULT_EXPORT_FORMAT = "hex"
