"""Journey configuration, style presets and waypoint construction."""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Iterable, List, NamedTuple, Optional, Sequence, Tuple

from color_spaces import LChColor, RGBColor, normalize_hue, rgb_to_lch
from defaults import (
    CONTRAST_HIGH,
    CONTRAST_LOW,
    CONTRAST_MEDIUM,
    DEFAULT_MID_JOURNEY_VIBRANCY,
    DEFAULT_VARIATION_SEED,
    MAX_ANCHORS,
    MIN_ANCHORS,
    SINGLE_ANCHOR_CHROMA_SWELL,
    SINGLE_ANCHOR_LIGHTNESS_SWELL,
    SINGLE_ANCHOR_WAYPOINTS,
    TEMPERATURE_SHIFT,
)
from variation import MASK64, VariationDimension, VariationStrength, magnitude_for

logger = logging.getLogger(__name__)


class JourneyConfigError(ValueError):
    """Raised by ``create_journey`` when a configuration cannot be used."""


class LightnessBias(str, Enum):
    NEUTRAL = "neutral"
    LIGHTER = "lighter"
    DARKER = "darker"
    CUSTOM = "custom"


class ChromaBias(str, Enum):
    NEUTRAL = "neutral"
    MUTED = "muted"
    VIVID = "vivid"
    CUSTOM = "custom"


class ContrastLevel(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CUSTOM = "custom"


class TemperatureBias(str, Enum):
    NEUTRAL = "neutral"
    WARM = "warm"
    COOL = "cool"


class LoopMode(str, Enum):
    OPEN = "open"
    CLOSED = "closed"
    PING_PONG = "ping_pong"


CONTRAST_THRESHOLDS = {
    ContrastLevel.LOW: CONTRAST_LOW,
    ContrastLevel.MEDIUM: CONTRAST_MEDIUM,
    ContrastLevel.HIGH: CONTRAST_HIGH,
}


@dataclass(frozen=True)
class VariationConfig:
    enabled: bool = False
    dimensions: VariationDimension = VariationDimension.NONE
    strength: VariationStrength = VariationStrength.SUBTLE
    custom_magnitude: float = 0.0
    seed: int = DEFAULT_VARIATION_SEED

    @classmethod
    def off(cls) -> "VariationConfig":
        return cls(enabled=False)

    @classmethod
    def subtle(
        cls, dimensions: VariationDimension, seed: Optional[int] = None
    ) -> "VariationConfig":
        return cls(
            enabled=True,
            dimensions=dimensions,
            strength=VariationStrength.SUBTLE,
            seed=DEFAULT_VARIATION_SEED if seed is None else seed,
        )

    @property
    def magnitude(self) -> float:
        return magnitude_for(self.strength, self.custom_magnitude)


class DeltaRange(NamedTuple):
    """Band for adjacent delta E. The minimum is hard, the maximum best-effort."""

    minimum: float
    maximum: float


@dataclass(frozen=True)
class JourneyConfig:
    anchors: Tuple[RGBColor, ...] = ()
    lightness_bias: LightnessBias = LightnessBias.NEUTRAL
    lightness_custom_weight: float = 0.0
    chroma_bias: ChromaBias = ChromaBias.NEUTRAL
    chroma_custom_multiplier: float = 1.0
    contrast_level: ContrastLevel = ContrastLevel.MEDIUM
    contrast_custom_threshold: float = CONTRAST_MEDIUM
    mid_journey_vibrancy: float = DEFAULT_MID_JOURNEY_VIBRANCY
    temperature_bias: TemperatureBias = TemperatureBias.NEUTRAL
    loop_mode: LoopMode = LoopMode.OPEN
    variation: VariationConfig = field(default_factory=VariationConfig)
    delta_range: Optional[DeltaRange] = None

    @classmethod
    def single_anchor(
        cls, color: Sequence[float], style: Optional["JourneyStyle"] = None
    ) -> "JourneyConfig":
        config = cls(anchors=(RGBColor(*color),))
        return (style or JourneyStyle.BALANCED).apply(config)

    @classmethod
    def multi_anchor(
        cls, colors: Iterable[Sequence[float]], style: Optional["JourneyStyle"] = None
    ) -> "JourneyConfig":
        config = cls(anchors=tuple(RGBColor(*color) for color in colors))
        return (style or JourneyStyle.BALANCED).apply(config)

    def contrast_threshold(self) -> float:
        if self.contrast_level == ContrastLevel.CUSTOM:
            return self.contrast_custom_threshold
        return CONTRAST_THRESHOLDS[self.contrast_level]

    def adjacent_bounds(self) -> Tuple[float, Optional[float]]:
        """Minimum and optional maximum delta E between adjacent discrete colors."""
        if self.delta_range is not None:
            return self.delta_range.minimum, self.delta_range.maximum
        return self.contrast_threshold(), None


class JourneyStyle(str, Enum):
    """Pre-tuned bias combinations for common use cases."""

    BALANCED = "balanced"
    PASTEL_DRIFT = "pastel_drift"
    VIVID_LOOP = "vivid_loop"
    NIGHT_MODE = "night_mode"
    WARM_EARTH = "warm_earth"
    COOL_SKY = "cool_sky"

    def apply(self, config: JourneyConfig) -> JourneyConfig:
        if self == JourneyStyle.PASTEL_DRIFT:
            return replace(
                config,
                lightness_bias=LightnessBias.LIGHTER,
                chroma_bias=ChromaBias.MUTED,
                contrast_level=ContrastLevel.LOW,
                mid_journey_vibrancy=0.1,
            )
        if self == JourneyStyle.VIVID_LOOP:
            return replace(
                config,
                lightness_bias=LightnessBias.NEUTRAL,
                chroma_bias=ChromaBias.VIVID,
                contrast_level=ContrastLevel.HIGH,
                loop_mode=LoopMode.CLOSED,
                mid_journey_vibrancy=0.5,
            )
        if self == JourneyStyle.NIGHT_MODE:
            return replace(
                config,
                lightness_bias=LightnessBias.DARKER,
                chroma_bias=ChromaBias.CUSTOM,
                chroma_custom_multiplier=0.8,
                contrast_level=ContrastLevel.MEDIUM,
            )
        if self == JourneyStyle.WARM_EARTH:
            return replace(
                config,
                temperature_bias=TemperatureBias.WARM,
                chroma_bias=ChromaBias.CUSTOM,
                chroma_custom_multiplier=0.9,
                lightness_bias=LightnessBias.CUSTOM,
                lightness_custom_weight=-0.1,
            )
        if self == JourneyStyle.COOL_SKY:
            return replace(
                config,
                temperature_bias=TemperatureBias.COOL,
                lightness_bias=LightnessBias.LIGHTER,
                chroma_bias=ChromaBias.NEUTRAL,
            )
        return replace(
            config,
            lightness_bias=LightnessBias.NEUTRAL,
            chroma_bias=ChromaBias.NEUTRAL,
            contrast_level=ContrastLevel.MEDIUM,
            temperature_bias=TemperatureBias.NEUTRAL,
        )


# --- Validation --------------------------------------------------------------

def _require_finite(name: str, value: float) -> float:
    try:
        value = float(value)
    except (TypeError, ValueError) as exc:
        raise JourneyConfigError(f"{name} must be a number, got {value!r}") from exc
    if not math.isfinite(value):
        raise JourneyConfigError(f"{name} must be finite, got {value}")
    return value


def _clamp_with_warning(name: str, value: float, low: float, high: float) -> float:
    clamped = max(low, min(high, value))
    if clamped != value:
        logger.warning("%s %.4f outside [%.2f, %.2f], clamped to %.4f", name, value, low, high, clamped)
    return clamped


def normalize_config(config: JourneyConfig) -> JourneyConfig:
    """Validate ``config`` and return a copy with soft ranges clamped.

    Anchor count, non-finite values and impossible thresholds are rejected;
    documented soft ranges are clamped with a logged warning.
    """
    anchors = tuple(config.anchors)
    if not MIN_ANCHORS <= len(anchors) <= MAX_ANCHORS:
        raise JourneyConfigError(
            f"Journey needs {MIN_ANCHORS}-{MAX_ANCHORS} anchors, got {len(anchors)}"
        )

    normalized_anchors: List[RGBColor] = []
    for index, anchor in enumerate(anchors):
        if len(anchor) != 3:
            raise JourneyConfigError(f"Anchor {index} must have 3 channels")
        channels = [
            _clamp_with_warning(
                f"Anchor {index} channel {name}",
                _require_finite(f"Anchor {index} channel {name}", value),
                0.0,
                1.0,
            )
            for name, value in zip("rgb", anchor)
        ]
        normalized_anchors.append(RGBColor(*channels))

    lightness_weight = _clamp_with_warning(
        "lightness_custom_weight",
        _require_finite("lightness_custom_weight", config.lightness_custom_weight),
        -1.0,
        1.0,
    )
    chroma_multiplier = _require_finite(
        "chroma_custom_multiplier", config.chroma_custom_multiplier
    )
    if chroma_multiplier < 0.0:
        raise JourneyConfigError("chroma_custom_multiplier must not be negative")
    contrast_threshold = _require_finite(
        "contrast_custom_threshold", config.contrast_custom_threshold
    )
    if contrast_threshold < 0.0:
        raise JourneyConfigError("contrast_custom_threshold must not be negative")
    vibrancy = _clamp_with_warning(
        "mid_journey_vibrancy",
        _require_finite("mid_journey_vibrancy", config.mid_journey_vibrancy),
        0.0,
        1.0,
    )

    variation = config.variation
    _require_finite("variation custom_magnitude", variation.custom_magnitude)
    variation = replace(variation, seed=int(variation.seed) & MASK64)

    delta_range = config.delta_range
    if delta_range is not None:
        minimum = _require_finite("delta_range minimum", delta_range[0])
        maximum = _require_finite("delta_range maximum", delta_range[1])
        if minimum < 0.0 or maximum < minimum:
            raise JourneyConfigError(
                f"delta_range needs 0 <= minimum <= maximum, got ({minimum}, {maximum})"
            )
        delta_range = DeltaRange(minimum, maximum)
        contrast_level = ContrastLevel(config.contrast_level)
        if contrast_level != ContrastLevel.MEDIUM:
            logger.warning(
                "delta_range minimum %.4f replaces contrast_level %s threshold",
                minimum,
                contrast_level.value,
            )

    return replace(
        config,
        anchors=tuple(normalized_anchors),
        lightness_bias=LightnessBias(config.lightness_bias),
        lightness_custom_weight=lightness_weight,
        chroma_bias=ChromaBias(config.chroma_bias),
        chroma_custom_multiplier=chroma_multiplier,
        contrast_level=ContrastLevel(config.contrast_level),
        contrast_custom_threshold=contrast_threshold,
        mid_journey_vibrancy=vibrancy,
        temperature_bias=TemperatureBias(config.temperature_bias),
        loop_mode=LoopMode(config.loop_mode),
        variation=variation,
        delta_range=delta_range,
    )


# --- Waypoints ---------------------------------------------------------------

class Waypoint(NamedTuple):
    lch: LChColor
    weight: float = 1.0


def smoothstep(t: float) -> float:
    t = max(0.0, min(1.0, t))
    return t * t * (3.0 - 2.0 * t)


def build_waypoints(
    anchor_lch: Sequence[LChColor], temperature: TemperatureBias
) -> Tuple[Waypoint, ...]:
    if len(anchor_lch) == 1:
        base = anchor_lch[0]
        waypoints = []
        for i in range(SINGLE_ANCHOR_WAYPOINTS):
            t = i / (SINGLE_ANCHOR_WAYPOINTS - 1)
            hue = normalize_hue(base.h + smoothstep(t) * 2.0 * math.pi)
            chroma = base.C * (1.0 + SINGLE_ANCHOR_CHROMA_SWELL * math.sin(t * math.pi))
            lightness = base.L * (
                1.0 + SINGLE_ANCHOR_LIGHTNESS_SWELL * math.sin(t * 2.0 * math.pi)
            )
            waypoints.append(Waypoint(LChColor(lightness, chroma, hue)))
    else:
        waypoints = [Waypoint(lch) for lch in anchor_lch]

    if temperature != TemperatureBias.NEUTRAL:
        shift = TEMPERATURE_SHIFT if temperature == TemperatureBias.WARM else -TEMPERATURE_SHIFT
        waypoints = [
            Waypoint(LChColor(w.lch.L, w.lch.C, normalize_hue(w.lch.h + shift)), w.weight)
            for w in waypoints
        ]
    return tuple(waypoints)


# --- Journey handle ----------------------------------------------------------

class Journey:
    """Immutable journey: normalized config, anchor LCh and waypoints.

    Read-only after construction, so any number of threads may sample it.
    ``destroy`` only flips the handle to the invalid state.
    """

    __slots__ = ("_config", "_anchor_lch", "_waypoints", "_alive")

    def __init__(self, config: JourneyConfig) -> None:
        config = normalize_config(config)
        anchor_lch = tuple(rgb_to_lch(anchor) for anchor in config.anchors)
        self._config = config
        self._anchor_lch = anchor_lch
        self._waypoints = build_waypoints(anchor_lch, config.temperature_bias)
        self._alive = True

    @property
    def config(self) -> JourneyConfig:
        return self._config

    @property
    def anchor_lch(self) -> Tuple[LChColor, ...]:
        return self._anchor_lch

    @property
    def waypoints(self) -> Tuple[Waypoint, ...]:
        return self._waypoints

    @property
    def alive(self) -> bool:
        return self._alive

    def destroy(self) -> None:
        self._alive = False

    def __repr__(self) -> str:
        state = "alive" if self._alive else "destroyed"
        return f"Journey({len(self._anchor_lch)} anchors, {len(self._waypoints)} waypoints, {state})"


def create_journey(config: JourneyConfig) -> Journey:
    return Journey(config)


def destroy_journey(journey: Optional[Journey]) -> None:
    if journey is not None:
        journey.destroy()


def is_usable(journey: Optional[Journey]) -> bool:
    return journey is not None and journey.alive
