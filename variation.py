"""Deterministic seeded micro-variation for sampled colors.

The generator is xoroshiro128+ with both state words seeded by splitmix64.
State is rebuilt from ``seed ^ floor(t * 1e6)`` on every call, so a journey
never holds a generator and concurrent samplers cannot disturb each other.
"""
from __future__ import annotations

import math
from enum import Enum, Flag
from typing import Iterator

from color_spaces import LChColor, normalize_hue
from defaults import (
    DEFAULT_VARIATION_SEED,
    MAX_CHROMA,
    NOTICEABLE_VARIATION,
    SUBTLE_VARIATION,
    VARIATION_T_SCALE,
)

MASK64 = (1 << 64) - 1

SPLITMIX_GAMMA = 0x9E3779B97F4A7C15
SPLITMIX_MUL1 = 0xBF58476D1CE4E5B9
SPLITMIX_MUL2 = 0x94D049BB133111EB


class VariationDimension(Flag):
    NONE = 0
    HUE = 1 << 0
    LIGHTNESS = 1 << 1
    CHROMA = 1 << 2
    ALL = HUE | LIGHTNESS | CHROMA


class VariationStrength(str, Enum):
    SUBTLE = "subtle"
    NOTICEABLE = "noticeable"
    CUSTOM = "custom"


def magnitude_for(strength: VariationStrength, custom_magnitude: float = 0.0) -> float:
    if strength == VariationStrength.NOTICEABLE:
        return NOTICEABLE_VARIATION
    if strength == VariationStrength.CUSTOM:
        return custom_magnitude
    return SUBTLE_VARIATION


def _splitmix64(state: int) -> Iterator[int]:
    while True:
        state = (state + SPLITMIX_GAMMA) & MASK64
        z = state
        z = ((z ^ (z >> 30)) * SPLITMIX_MUL1) & MASK64
        z = ((z ^ (z >> 27)) * SPLITMIX_MUL2) & MASK64
        yield z ^ (z >> 31)


def _rotl(x: int, k: int) -> int:
    return ((x << k) | (x >> (64 - k))) & MASK64


class Xoroshiro128Plus:
    """Small 64-bit generator; one instance lives for a single sample call."""

    def __init__(self, seed: int) -> None:
        seeder = _splitmix64(seed & MASK64)
        self._s0 = next(seeder)
        self._s1 = next(seeder)
        if self._s0 == 0 and self._s1 == 0:
            self._s1 = SPLITMIX_GAMMA

    def next_u64(self) -> int:
        s0, s1 = self._s0, self._s1
        result = (s0 + s1) & MASK64
        s1 ^= s0
        self._s0 = _rotl(s0, 24) ^ s1 ^ ((s1 << 16) & MASK64)
        self._s1 = _rotl(s1, 37)
        return result

    def next_float(self) -> float:
        """Uniform in [0, 1) from the top 53 bits."""
        return (self.next_u64() >> 11) * (1.0 / (1 << 53))


def effective_seed(seed: int) -> int:
    seed &= MASK64
    return seed if seed else DEFAULT_VARIATION_SEED


def quantize_t(t: float) -> int:
    return int(math.floor(t * VARIATION_T_SCALE)) & MASK64


def generator_for(seed: int, t: float) -> Xoroshiro128Plus:
    return Xoroshiro128Plus(effective_seed(seed) ^ quantize_t(t))


def apply_variation(
    color: LChColor,
    t: float,
    *,
    seed: int,
    dimensions: VariationDimension,
    magnitude: float,
) -> LChColor:
    rng = generator_for(seed, t)
    L, C, h = color
    if dimensions & VariationDimension.HUE:
        h = normalize_hue(h + (rng.next_float() - 0.5) * magnitude * math.pi)
    if dimensions & VariationDimension.LIGHTNESS:
        L = max(0.0, min(1.0, L + (rng.next_float() - 0.5) * magnitude))
    if dimensions & VariationDimension.CHROMA:
        C = max(0.0, min(MAX_CHROMA, C + (rng.next_float() - 0.5) * magnitude * 0.5))
    return LChColor(L, C, h)
