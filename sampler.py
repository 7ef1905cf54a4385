"""Continuous journey sampling: t in, linear RGB out."""
from __future__ import annotations

import logging
import math
from typing import List, Optional, Tuple

from color_spaces import (
    BLACK,
    LChColor,
    RGBColor,
    lch_to_rgb,
    normalize_hue,
)
from defaults import (
    LIGHTNESS_BIAS_AMOUNT,
    MAX_CHROMA,
    MUTED_CHROMA_MULTIPLIER,
    VIBRANCY_PEAK_GAIN,
    VIBRANCY_WINDOW,
    VIVID_CHROMA_MULTIPLIER,
)
from journey import (
    ChromaBias,
    Journey,
    JourneyConfig,
    LightnessBias,
    LoopMode,
    Waypoint,
    is_usable,
    smoothstep,
)
from variation import apply_variation

logger = logging.getLogger(__name__)


def _lerp(a: float, b: float, t: float) -> float:
    return a + (b - a) * t


def normalize_t(t: float, loop_mode: LoopMode) -> float:
    if not math.isfinite(t):
        return 0.0
    if loop_mode == LoopMode.CLOSED:
        t = math.fmod(t, 1.0)
        if t < 0.0:
            t += 1.0
    elif loop_mode == LoopMode.PING_PONG:
        t = math.fmod(t, 2.0)
        if t < 0.0:
            t += 2.0
        if t > 1.0:
            t = 2.0 - t
    return max(0.0, min(1.0, t))


def interpolate_waypoints(waypoints: Tuple[Waypoint, ...], t: float) -> LChColor:
    """Blend the two waypoints bracketing ``t`` (already in [0, 1])."""
    if len(waypoints) == 1:
        return waypoints[0].lch

    segment_size = 1.0 / (len(waypoints) - 1)
    segment = min(int(t / segment_size), len(waypoints) - 2)
    local_t = smoothstep((t - segment * segment_size) / segment_size)

    a = waypoints[segment].lch
    b = waypoints[segment + 1].lch

    hue_diff = b.h - a.h
    if hue_diff > math.pi:
        hue_diff -= 2.0 * math.pi
    elif hue_diff <= -math.pi:
        hue_diff += 2.0 * math.pi

    return LChColor(
        _lerp(a.L, b.L, local_t),
        _lerp(a.C, b.C, local_t),
        normalize_hue(a.h + hue_diff * local_t),
    )


def apply_dynamics(config: JourneyConfig, color: LChColor, t: float) -> LChColor:
    L, C, h = color

    if config.lightness_bias == LightnessBias.LIGHTER:
        L = _lerp(L, 1.0, LIGHTNESS_BIAS_AMOUNT)
    elif config.lightness_bias == LightnessBias.DARKER:
        L = _lerp(L, 0.0, LIGHTNESS_BIAS_AMOUNT)
    elif config.lightness_bias == LightnessBias.CUSTOM:
        L += config.lightness_custom_weight * LIGHTNESS_BIAS_AMOUNT

    if config.chroma_bias == ChromaBias.MUTED:
        C *= MUTED_CHROMA_MULTIPLIER
    elif config.chroma_bias == ChromaBias.VIVID:
        C *= VIVID_CHROMA_MULTIPLIER
    elif config.chroma_bias == ChromaBias.CUSTOM:
        C *= config.chroma_custom_multiplier

    # Peak at t = 0.5, zero outside the window.
    peak = max(0.0, 1.0 - abs(t - 0.5) / VIBRANCY_WINDOW)
    C *= 1.0 + config.mid_journey_vibrancy * VIBRANCY_PEAK_GAIN * peak

    return LChColor(max(0.0, min(1.0, L)), max(0.0, min(MAX_CHROMA, C)), h)


def sample_lch(journey: Journey, t: float) -> LChColor:
    """LCh at ``t`` after loop handling, dynamics and variation."""
    config = journey.config
    t = normalize_t(t, config.loop_mode)
    color = interpolate_waypoints(journey.waypoints, t)
    color = apply_dynamics(config, color, t)
    variation = config.variation
    if variation.enabled:
        color = apply_variation(
            color,
            t,
            seed=variation.seed,
            dimensions=variation.dimensions,
            magnitude=variation.magnitude,
        )
    return color


def sample(journey: Optional[Journey], t: float) -> RGBColor:
    if not is_usable(journey):
        logger.debug("sample() on a missing or destroyed journey, returning black")
        return BLACK
    return lch_to_rgb(sample_lch(journey, t))


def gradient(journey: Optional[Journey], stops: int) -> List[RGBColor]:
    """Evenly spaced samples over [0, 1], endpoints included."""
    if stops <= 0:
        return []
    if stops == 1:
        return [sample(journey, 0.0)]
    return [sample(journey, i / (stops - 1)) for i in range(stops)]
