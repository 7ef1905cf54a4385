"""Color space utilities for OKLab/LCh conversions, distances and contrast."""
from __future__ import annotations

import math
import threading
from typing import List, NamedTuple, Optional, Tuple

from defaults import (
    MAX_CHROMA,
    READABLE_LIGHTNESS,
    SINGLE_PASS_CHROMA_BOOST,
    SINGLE_PASS_LIGHTNESS_SHARE,
)

TAU = 2.0 * math.pi


class RGBColor(NamedTuple):
    """Linear sRGB, nominally [0, 1] per channel."""

    r: float
    g: float
    b: float


class OKLabColor(NamedTuple):
    L: float
    a: float
    b: float


class LChColor(NamedTuple):
    """Cylindrical OKLab. Hue is in radians, [0, 2pi)."""

    L: float
    C: float
    h: float


BLACK = RGBColor(0.0, 0.0, 0.0)


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def normalize_hue(hue: float) -> float:
    hue = math.fmod(hue, TAU)
    if hue < 0.0:
        hue += TAU
    # fmod of a tiny negative value can round up to exactly TAU
    if hue >= TAU:
        hue = 0.0
    return hue


# --- sRGB transfer helpers -------------------------------------------------

def srgb_to_linear(channel: float) -> float:
    if channel <= 0.04045:
        return channel / 12.92
    return ((channel + 0.055) / 1.055) ** 2.4


def linear_to_srgb(channel: float) -> float:
    if channel <= 0.0031308:
        return channel * 12.92
    return 1.055 * (channel ** (1 / 2.4)) - 0.055


_SRGB8_LUT: Optional[Tuple[float, ...]] = None
_SRGB8_LUT_LOCK = threading.Lock()


def srgb8_lut() -> Tuple[float, ...]:
    """Return the 256-entry sRGB byte to linear table.

    The table is built by the first caller under a lock and published as an
    immutable tuple; every later call only reads it.
    """
    global _SRGB8_LUT
    table = _SRGB8_LUT
    if table is not None:
        return table
    with _SRGB8_LUT_LOCK:
        if _SRGB8_LUT is None:
            _SRGB8_LUT = tuple(srgb_to_linear(i / 255.0) for i in range(256))
        return _SRGB8_LUT


def srgb8_to_linear(value: int) -> float:
    return srgb8_lut()[max(0, min(255, int(value)))]


def hex_to_linear_rgb(hex_color: str) -> RGBColor:
    hex_color = hex_color.strip().lstrip("#")
    if len(hex_color) != 6:
        raise ValueError(f"Hex color must have 6 digits, got {hex_color!r}")
    r, g, b = (int(hex_color[i : i + 2], 16) for i in (0, 2, 4))
    return RGBColor(srgb8_to_linear(r), srgb8_to_linear(g), srgb8_to_linear(b))


def _linear_to_byte(channel: float) -> int:
    encoded = linear_to_srgb(_clamp(channel, 0.0, 1.0))
    return max(0, min(255, int(round(encoded * 255.0))))


def linear_rgb_to_bytes(rgb: RGBColor) -> Tuple[int, int, int]:
    return (_linear_to_byte(rgb.r), _linear_to_byte(rgb.g), _linear_to_byte(rgb.b))


def linear_rgb_to_hex(rgb: RGBColor) -> str:
    return "#{:02x}{:02x}{:02x}".format(*linear_rgb_to_bytes(rgb))


# --- Caller-owned conversion cache -----------------------------------------

class OklabCache:
    """Fixed-size open-addressed memo table for ``rgb_to_oklab``.

    The caller owns the table and passes it into conversions explicitly.
    Nothing in the engine shares one, so thread affinity is up to the owner.
    """

    MAX_PROBES = 8

    def __init__(self, size: int = 1024) -> None:
        if size < 1:
            raise ValueError("OklabCache size must be positive")
        capacity = 1
        while capacity < size:
            capacity <<= 1
        self._mask = capacity - 1
        self._keys: List[Optional[RGBColor]] = [None] * capacity
        self._values: List[Optional[OKLabColor]] = [None] * capacity
        self.hits = 0
        self.misses = 0

    @property
    def capacity(self) -> int:
        return self._mask + 1

    def _slot(self, key: RGBColor) -> int:
        return hash(key) & self._mask

    def get(self, key: RGBColor) -> Optional[OKLabColor]:
        slot = self._slot(key)
        for probe in range(self.MAX_PROBES):
            index = (slot + probe) & self._mask
            stored = self._keys[index]
            if stored is None:
                break
            if stored == key:
                self.hits += 1
                return self._values[index]
        self.misses += 1
        return None

    def put(self, key: RGBColor, value: OKLabColor) -> None:
        slot = self._slot(key)
        for probe in range(self.MAX_PROBES):
            index = (slot + probe) & self._mask
            stored = self._keys[index]
            if stored is None or stored == key:
                self._keys[index] = key
                self._values[index] = value
                return
        # Probe chain full: evict the home slot.
        self._keys[slot] = key
        self._values[slot] = value

    def clear(self) -> None:
        self._keys = [None] * self.capacity
        self._values = [None] * self.capacity
        self.hits = 0
        self.misses = 0


# --- OKLab/LCh conversions -------------------------------------------------

def _cbrt(value: float) -> float:
    return math.copysign(abs(value) ** (1 / 3), value)


def rgb_to_oklab(rgb: RGBColor, cache: Optional[OklabCache] = None) -> OKLabColor:
    """Convert linear RGB to OKLab using a full double precision cube root."""
    if cache is not None:
        cached = cache.get(rgb)
        if cached is not None:
            return cached

    r, g, b = rgb
    l = 0.4122214708 * r + 0.5363325363 * g + 0.0514459929 * b
    m = 0.2119034982 * r + 0.6806995451 * g + 0.1073969566 * b
    s = 0.0883024619 * r + 0.2817188376 * g + 0.6299787005 * b

    l_ = _cbrt(l)
    m_ = _cbrt(m)
    s_ = _cbrt(s)

    lab = OKLabColor(
        0.2104542553 * l_ + 0.7936177850 * m_ - 0.0040720468 * s_,
        1.9779984951 * l_ - 2.4285922050 * m_ + 0.4505937099 * s_,
        0.0259040371 * l_ + 0.7827717662 * m_ - 0.8086757660 * s_,
    )
    if cache is not None:
        cache.put(rgb, lab)
    return lab


def oklab_to_rgb(lab: OKLabColor) -> RGBColor:
    """Inverse of ``rgb_to_oklab``. The result may be out of gamut."""
    L, a, b = lab
    l_ = L + 0.3963377774 * a + 0.2158037573 * b
    m_ = L - 0.1055613458 * a - 0.0638541728 * b
    s_ = L - 0.0894841775 * a - 1.2914855480 * b

    l = l_ ** 3
    m = m_ ** 3
    s = s_ ** 3

    return RGBColor(
        +4.0767416621 * l - 3.3077115913 * m + 0.2309699292 * s,
        -1.2684380046 * l + 2.6097574011 * m - 0.3413193965 * s,
        -0.0041960863 * l - 0.7034186147 * m + 1.7076147010 * s,
    )


def oklab_to_lch(lab: OKLabColor) -> LChColor:
    return LChColor(lab.L, math.hypot(lab.a, lab.b), normalize_hue(math.atan2(lab.b, lab.a)))


def lch_to_oklab(lch: LChColor) -> OKLabColor:
    return OKLabColor(lch.L, lch.C * math.cos(lch.h), lch.C * math.sin(lch.h))


def rgb_to_lch(rgb: RGBColor) -> LChColor:
    return oklab_to_lch(rgb_to_oklab(rgb))


def lch_to_rgb(lch: LChColor) -> RGBColor:
    return clamp_rgb(oklab_to_rgb(lch_to_oklab(lch)))


def delta_e(first: OKLabColor, second: OKLabColor) -> float:
    return math.sqrt(
        (first.L - second.L) ** 2 + (first.a - second.a) ** 2 + (first.b - second.b) ** 2
    )


def clamp_rgb(rgb: RGBColor) -> RGBColor:
    return RGBColor(
        _clamp(rgb.r, 0.0, 1.0), _clamp(rgb.g, 0.0, 1.0), _clamp(rgb.b, 0.0, 1.0)
    )


def is_readable(lab: OKLabColor) -> bool:
    low, high = READABLE_LIGHTNESS
    return low <= lab.L <= high


# --- Contrast --------------------------------------------------------------

def enforce_contrast_single_pass(
    color: OKLabColor, reference: OKLabColor, min_delta_e: float
) -> OKLabColor:
    """Push ``color`` away from ``reference`` in one deterministic step.

    Lightness moves first, to 70% of the threshold on the color's own side of
    the reference. Chroma gets a 15% boost only if that is not enough.
    """
    if delta_e(color, reference) >= min_delta_e:
        return color

    sign = 1.0 if color.L - reference.L >= 0.0 else -1.0
    lightness = _clamp(
        reference.L + sign * min_delta_e * SINGLE_PASS_LIGHTNESS_SHARE, 0.0, 1.0
    )
    adjusted = OKLabColor(lightness, color.a, color.b)
    if delta_e(adjusted, reference) >= min_delta_e:
        return adjusted

    lch = oklab_to_lch(adjusted)
    boosted = _clamp(lch.C * SINGLE_PASS_CHROMA_BOOST, 0.0, MAX_CHROMA)
    return lch_to_oklab(LChColor(lch.L, boosted, lch.h))
