"""Discrete palettes, index access and ranges built on the sampler.

All three access patterns walk the same contrast chain: color ``i`` is the
sample at position ``t(i)`` pushed away from the realized color ``i - 1``.
Only the position mapping differs. A fixed count spreads the positions over
the journey, index and range access stream ``i * 0.05 mod 1``.
"""
from __future__ import annotations

import logging
import math
from collections import deque
from dataclasses import dataclass, field
from itertools import islice
from typing import Dict, Iterable, Iterator, List, Optional

from color_spaces import (
    BLACK,
    LChColor,
    OKLabColor,
    OklabCache,
    RGBColor,
    clamp_rgb,
    delta_e,
    lch_to_oklab,
    linear_rgb_to_hex,
    normalize_hue,
    oklab_to_lch,
    oklab_to_rgb,
    rgb_to_oklab,
)
from defaults import (
    BAND_TOLERANCE,
    CONTRAST_CHROMA_GAIN,
    CONTRAST_FALLBACK_MARGIN,
    CONTRAST_HUE_STEP,
    CONTRAST_LIGHTNESS_SHARE,
    CONTRAST_MAX_ROUNDS,
    MAX_CHROMA,
    RHYTHM_AMPLITUDE,
    RHYTHM_BACKOFF,
    RHYTHM_FREQUENCY,
    RHYTHM_MIN_COUNT,
    STREAMING_SPACING,
)
from journey import Journey, LoopMode, is_usable
from sampler import sample

logger = logging.getLogger(__name__)

CHAIN_CACHE_SIZE = 64


# --- Position mapping --------------------------------------------------------

def position_for_index(loop_mode: LoopMode, index: int, count: Optional[int] = None) -> float:
    """Journey position of discrete color ``index``.

    With ``count`` the palette spans the journey evenly for that count, a
    closed loop leaving room for the wrap back to the start. Without it the
    position streams at a fixed spacing of 20 colors per cycle.
    """
    if index < 0:
        return 0.0
    if count is None:
        return math.fmod(index * STREAMING_SPACING, 1.0)
    if count <= 0:
        return 0.0
    if loop_mode == LoopMode.CLOSED:
        return index / count
    if count == 1:
        return 0.5
    t = index / (count - 1)
    if loop_mode == LoopMode.PING_PONG:
        t *= 2.0
        if t > 1.0:
            t = 2.0 - t
    return t


# --- Contrast enforcement ----------------------------------------------------

def _realize(lab: OKLabColor) -> RGBColor:
    return clamp_rgb(oklab_to_rgb(lab))


def enforce_minimum_contrast(
    color: RGBColor,
    previous: RGBColor,
    minimum: float,
    cache: Optional[OklabCache] = None,
) -> RGBColor:
    """Refine ``color`` until it sits at least ``minimum`` delta E from ``previous``.

    Each round nudges lightness by half the shortfall, then rotates hue and
    lifts chroma if that was not enough. Distances are always measured on the
    gamut-clamped color. If five rounds fall short the color is replaced by
    the neutral at the required lightness distance, so the minimum holds
    whenever it fits inside the lightness range at all.
    """
    prev_lab = rgb_to_oklab(previous, cache)
    current = color
    curr_lab = rgb_to_oklab(current, cache)
    direction = 1.0 if prev_lab.L < 0.5 else -1.0

    for round_index in range(CONTRAST_MAX_ROUNDS):
        distance = delta_e(curr_lab, prev_lab)
        if distance >= minimum:
            return current

        shortfall = minimum - distance
        nudged = max(0.0, min(1.0, curr_lab.L + direction * shortfall * CONTRAST_LIGHTNESS_SHARE))
        current = _realize(OKLabColor(nudged, curr_lab.a, curr_lab.b))
        curr_lab = rgb_to_oklab(current, cache)
        distance = delta_e(curr_lab, prev_lab)
        if distance >= minimum:
            return current

        shortfall = minimum - distance
        lch = oklab_to_lch(curr_lab)
        hue = normalize_hue(lch.h + CONTRAST_HUE_STEP * round_index)
        chroma = lch.C
        if chroma > 1e-5:
            chroma = min(chroma * (1.0 + shortfall * CONTRAST_CHROMA_GAIN), MAX_CHROMA)
        current = _realize(lch_to_oklab(LChColor(lch.L, chroma, hue)))
        curr_lab = rgb_to_oklab(current, cache)

    if delta_e(curr_lab, prev_lab) >= minimum:
        return current

    lightness = max(0.0, min(1.0, prev_lab.L + direction * (minimum + CONTRAST_FALLBACK_MARGIN)))
    logger.debug(
        "Contrast refinement fell short of %.3f, using neutral at L=%.3f", minimum, lightness
    )
    return _realize(OKLabColor(lightness, 0.0, 0.0))


def enforce_maximum_delta(
    color: RGBColor,
    previous: RGBColor,
    minimum: float,
    maximum: float,
    cache: Optional[OklabCache] = None,
) -> RGBColor:
    """Pull ``color`` toward ``previous`` until delta E is about ``maximum``.

    Best effort: if clamping the pulled color would break ``minimum`` the
    original color is kept, since the minimum always wins.
    """
    prev_lab = rgb_to_oklab(previous, cache)
    curr_lab = rgb_to_oklab(color, cache)
    distance = delta_e(curr_lab, prev_lab)
    if distance <= maximum or distance == 0.0:
        return color

    ratio = maximum / distance
    pulled = _realize(
        OKLabColor(
            prev_lab.L + (curr_lab.L - prev_lab.L) * ratio,
            prev_lab.a + (curr_lab.a - prev_lab.a) * ratio,
            prev_lab.b + (curr_lab.b - prev_lab.b) * ratio,
        )
    )
    if delta_e(rgb_to_oklab(pulled, cache), prev_lab) < minimum:
        return color
    return pulled


def _walk(
    journey: Journey, positions: Iterable[float], cache: Optional[OklabCache] = None
) -> Iterator[RGBColor]:
    minimum, maximum = journey.config.adjacent_bounds()
    previous: Optional[RGBColor] = None
    for t in positions:
        color = sample(journey, t)
        if previous is not None:
            color = enforce_minimum_contrast(color, previous, minimum, cache)
            if maximum is not None:
                color = enforce_maximum_delta(color, previous, minimum, maximum, cache)
        previous = color
        yield color


def _streaming_positions(journey: Journey, stop: int) -> Iterator[float]:
    loop_mode = journey.config.loop_mode
    return (position_for_index(loop_mode, i) for i in range(stop))


def _pulse_chroma(lch: LChColor, pulse: float) -> RGBColor:
    chroma = max(0.0, min(MAX_CHROMA, lch.C * (1.0 + pulse)))
    return _realize(lch_to_oklab(LChColor(lch.L, chroma, lch.h)))


def apply_chroma_rhythm(
    colors: List[RGBColor], minimum: float = 0.0, maximum: Optional[float] = None
) -> List[RGBColor]:
    """Periodic chroma swell across a large palette, applied after the chain.

    Each pulsed color is measured against the already final previous one.
    The pulse shrinks until the pair is back inside ``[minimum, maximum]``;
    failing that the first pulse meeting ``minimum`` is kept, and if even the
    unpulsed color falls short it is refined again. The rhythm never costs
    the minimum.
    """
    result: List[RGBColor] = []
    for i, color in enumerate(colors):
        lch = oklab_to_lch(rgb_to_oklab(color))
        pulse = RHYTHM_AMPLITUDE * math.cos(i * RHYTHM_FREQUENCY)
        if not result:
            result.append(_pulse_chroma(lch, pulse))
            continue

        prev_lab = rgb_to_oklab(result[-1])
        fallback: Optional[RGBColor] = None
        for scale in RHYTHM_BACKOFF:
            candidate = _pulse_chroma(lch, pulse * scale)
            distance = delta_e(rgb_to_oklab(candidate), prev_lab)
            if distance < minimum:
                continue
            if maximum is None or distance <= maximum:
                chosen = candidate
                break
            if fallback is None:
                fallback = candidate
        else:
            chosen = fallback

        if chosen is None:
            logger.debug("Rhythm at index %d broke minimum %.3f, refining again", i, minimum)
            chosen = enforce_minimum_contrast(color, result[-1], minimum)
        result.append(chosen)
    return result


# --- Public API --------------------------------------------------------------

def discrete(journey: Optional[Journey], count: int) -> List[RGBColor]:
    if count <= 0:
        return []
    if not is_usable(journey):
        logger.debug("discrete() on a missing or destroyed journey, returning black")
        return [BLACK] * count

    loop_mode = journey.config.loop_mode
    positions = (position_for_index(loop_mode, i, count) for i in range(count))
    colors = list(_walk(journey, positions, OklabCache(CHAIN_CACHE_SIZE)))
    if count > RHYTHM_MIN_COUNT:
        minimum, maximum = journey.config.adjacent_bounds()
        colors = apply_chroma_rhythm(colors, minimum, maximum)
    return colors


def discrete_at(journey: Optional[Journey], index: int) -> RGBColor:
    """Color ``index`` of the streaming sequence; recomputes the chain from 0."""
    if not is_usable(journey) or index < 0:
        logger.debug("discrete_at(%s) on invalid input, returning black", index)
        return BLACK
    walk = _walk(journey, _streaming_positions(journey, index + 1), OklabCache(CHAIN_CACHE_SIZE))
    return deque(walk, maxlen=1)[0]


def discrete_range(journey: Optional[Journey], start: int, count: int) -> List[RGBColor]:
    """Colors ``start`` .. ``start + count - 1`` in one pass over the chain."""
    if count <= 0:
        return []
    if not is_usable(journey) or start < 0:
        logger.debug("discrete_range(%s, %s) on invalid input, returning black", start, count)
        return [BLACK] * count
    walk = _walk(
        journey, _streaming_positions(journey, start + count), OklabCache(CHAIN_CACHE_SIZE)
    )
    return list(islice(walk, start, None))


# --- Palette reports ---------------------------------------------------------

def adjacent_delta_es(colors: List[RGBColor]) -> List[float]:
    labs = [rgb_to_oklab(color) for color in colors]
    return [delta_e(labs[i], labs[i + 1]) for i in range(len(labs) - 1)]


@dataclass
class JourneyPalette:
    colors: List[RGBColor]
    deltas: List[float]
    minimum: float
    maximum: Optional[float] = None
    tolerance: float = BAND_TOLERANCE
    warnings: List[str] = field(default_factory=list)
    _hex_cache: Dict[int, str] = field(
        default_factory=dict, init=False, repr=False, compare=False
    )

    @property
    def max_violations(self) -> int:
        if self.maximum is None:
            return 0
        return sum(1 for value in self.deltas if value > self.maximum + self.tolerance)

    @property
    def max_violation_ratio(self) -> float:
        if not self.deltas:
            return 0.0
        return self.max_violations / len(self.deltas)

    def hex_colors(self) -> Dict[int, str]:
        if not self._hex_cache:
            self._hex_cache = {
                index: linear_rgb_to_hex(color) for index, color in enumerate(self.colors)
            }
        return self._hex_cache


def generate_palette(
    journey: Optional[Journey], count: int, *, tolerance: float = BAND_TOLERANCE
) -> JourneyPalette:
    """``discrete`` plus the adjacent distances and any band violations."""
    colors = discrete(journey, count)
    deltas = adjacent_delta_es(colors)
    if is_usable(journey):
        minimum, maximum = journey.config.adjacent_bounds()
    else:
        minimum, maximum = 0.0, None

    warnings: List[str] = []
    if not is_usable(journey) and count > 0:
        warnings.append("Journey is missing or destroyed; palette is all black.")
    for i, value in enumerate(deltas):
        if value < minimum - tolerance:
            warnings.append(
                f"Colors {i}→{i + 1}: ΔE {value:.3f} below minimum {minimum:.3f}."
            )
        elif maximum is not None and value > maximum + tolerance:
            warnings.append(
                f"Colors {i}→{i + 1}: ΔE {value:.3f} above maximum {maximum:.3f} (best effort)."
            )

    return JourneyPalette(
        colors=colors,
        deltas=deltas,
        minimum=minimum,
        maximum=maximum,
        tolerance=tolerance,
        warnings=warnings,
    )
