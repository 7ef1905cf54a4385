import math
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from color_spaces import LChColor  # noqa: E402
from defaults import DEFAULT_VARIATION_SEED  # noqa: E402
from discrete import discrete  # noqa: E402
from journey import JourneyConfig, VariationConfig, create_journey  # noqa: E402
from sampler import sample  # noqa: E402
from variation import (  # noqa: E402
    MASK64,
    VariationDimension,
    VariationStrength,
    Xoroshiro128Plus,
    apply_variation,
    effective_seed,
    generator_for,
    magnitude_for,
    quantize_t,
)

BASE = LChColor(0.5, 0.1, 1.0)


def varied_config(seed, dimensions=VariationDimension.ALL, strength=VariationStrength.NOTICEABLE):
    return JourneyConfig(
        anchors=((0.3, 0.5, 0.8), (0.9, 0.4, 0.1)),
        variation=VariationConfig(
            enabled=True, dimensions=dimensions, strength=strength, seed=seed
        ),
    )


def test_generator_is_deterministic_per_seed():
    first = Xoroshiro128Plus(42)
    second = Xoroshiro128Plus(42)
    other = Xoroshiro128Plus(43)
    values = [first.next_u64() for _ in range(8)]
    assert values == [second.next_u64() for _ in range(8)]
    assert values != [other.next_u64() for _ in range(8)]
    assert len(set(values)) == 8
    assert all(0 <= value <= MASK64 for value in values)


def test_next_float_is_in_unit_interval():
    rng = Xoroshiro128Plus(0)
    floats = [rng.next_float() for _ in range(1000)]
    assert all(0.0 <= value < 1.0 for value in floats)
    assert 0.4 < sum(floats) / len(floats) < 0.6


def test_zero_seed_uses_default():
    assert effective_seed(0) == DEFAULT_VARIATION_SEED
    assert effective_seed(7) == 7
    assert effective_seed(1 << 64) == DEFAULT_VARIATION_SEED


def test_t_is_quantized_to_micro_steps():
    assert quantize_t(0.5) == 500_000
    assert quantize_t(0.0) == 0
    a = generator_for(42, 0.1234561).next_u64()
    b = generator_for(42, 0.1234569).next_u64()
    assert a == b


def test_magnitudes():
    assert magnitude_for(VariationStrength.SUBTLE) == pytest.approx(0.02)
    assert magnitude_for(VariationStrength.NOTICEABLE) == pytest.approx(0.05)
    assert magnitude_for(VariationStrength.CUSTOM, 0.08) == pytest.approx(0.08)


def test_variation_stays_within_magnitude():
    magnitude = 0.05
    for i in range(200):
        t = i / 199
        varied = apply_variation(
            BASE, t, seed=42, dimensions=VariationDimension.ALL, magnitude=magnitude
        )
        hue_shift = abs(math.remainder(varied.h - BASE.h, 2 * math.pi))
        assert hue_shift <= magnitude * math.pi / 2 + 1e-12
        assert abs(varied.L - BASE.L) <= magnitude / 2 + 1e-12
        assert abs(varied.C - BASE.C) <= magnitude / 4 + 1e-12


def test_only_selected_dimensions_change():
    varied = apply_variation(
        BASE, 0.3, seed=9, dimensions=VariationDimension.LIGHTNESS, magnitude=0.05
    )
    assert varied.h == BASE.h
    assert varied.C == BASE.C
    assert varied.L != BASE.L

    untouched = apply_variation(
        BASE, 0.3, seed=9, dimensions=VariationDimension.NONE, magnitude=0.05
    )
    assert untouched == BASE


def test_variation_clamps_channels():
    dark = LChColor(0.0, 0.0, 0.0)
    for i in range(50):
        varied = apply_variation(
            dark, i / 49, seed=5, dimensions=VariationDimension.ALL, magnitude=0.2
        )
        assert 0.0 <= varied.L <= 1.0
        assert varied.C >= 0.0
        assert 0.0 <= varied.h < 2 * math.pi


def test_same_seed_gives_identical_palettes_across_journeys():
    first = create_journey(varied_config(42))
    second = create_journey(varied_config(42))
    assert discrete(first, 10) == discrete(second, 10)


def test_variation_changes_output():
    plain = create_journey(
        JourneyConfig(anchors=((0.3, 0.5, 0.8), (0.9, 0.4, 0.1)))
    )
    varied = create_journey(varied_config(42))
    reseeded = create_journey(varied_config(43))

    samples = [i / 10 for i in range(11)]
    assert [sample(plain, t) for t in samples] != [sample(varied, t) for t in samples]
    assert [sample(varied, t) for t in samples] != [sample(reseeded, t) for t in samples]


def test_disabled_variation_ignores_seed():
    first = create_journey(
        JourneyConfig(anchors=((0.3, 0.5, 0.8),), variation=VariationConfig(seed=1))
    )
    second = create_journey(
        JourneyConfig(anchors=((0.3, 0.5, 0.8),), variation=VariationConfig(seed=2))
    )
    assert sample(first, 0.4) == sample(second, 0.4)
