import math
import random
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from color_spaces import (  # noqa: E402
    OKLabColor,
    OklabCache,
    RGBColor,
    clamp_rgb,
    delta_e,
    enforce_contrast_single_pass,
    hex_to_linear_rgb,
    is_readable,
    lch_to_oklab,
    linear_rgb_to_hex,
    normalize_hue,
    oklab_to_lch,
    oklab_to_rgb,
    rgb_to_oklab,
    srgb8_lut,
    srgb8_to_linear,
)


def test_round_trip_random_rgb():
    rng = random.Random(7)
    for _ in range(200):
        rgb = RGBColor(rng.random(), rng.random(), rng.random())
        back = oklab_to_rgb(rgb_to_oklab(rgb))
        assert back == pytest.approx(rgb, abs=1e-4)


def test_white_and_black_land_on_the_lightness_axis():
    white = rgb_to_oklab(RGBColor(1.0, 1.0, 1.0))
    black = rgb_to_oklab(RGBColor(0.0, 0.0, 0.0))
    assert white.L == pytest.approx(1.0, abs=1e-6)
    assert white.a == pytest.approx(0.0, abs=1e-6)
    assert white.b == pytest.approx(0.0, abs=1e-6)
    assert black == pytest.approx((0.0, 0.0, 0.0), abs=1e-12)


def test_lch_hue_is_normalized_to_positive_radians():
    lch = oklab_to_lch(OKLabColor(0.5, 0.0, -0.1))
    assert lch.C == pytest.approx(0.1)
    assert lch.h == pytest.approx(1.5 * math.pi)


def test_lch_round_trip():
    lab = OKLabColor(0.6, -0.12, 0.07)
    assert lch_to_oklab(oklab_to_lch(lab)) == pytest.approx(lab, abs=1e-12)


def test_normalize_hue_wraps_into_range():
    assert normalize_hue(-0.1) == pytest.approx(2 * math.pi - 0.1)
    assert normalize_hue(2 * math.pi) == 0.0
    assert normalize_hue(5 * math.pi) == pytest.approx(math.pi)
    assert 0.0 <= normalize_hue(-1e-18) < 2 * math.pi


def test_delta_e_is_symmetric_and_zero_for_identical_colors():
    red = rgb_to_oklab(RGBColor(1.0, 0.0, 0.0))
    blue = rgb_to_oklab(RGBColor(0.0, 0.0, 1.0))
    assert delta_e(red, red) == 0.0
    assert delta_e(red, blue) == pytest.approx(delta_e(blue, red))
    assert delta_e(red, blue) > 0.15


def test_clamp_rgb_limits_each_channel():
    assert clamp_rgb(RGBColor(1.5, -0.1, 0.8)) == RGBColor(1.0, 0.0, 0.8)


def test_single_pass_contrast_leaves_distinct_colors_alone():
    reference = OKLabColor(0.5, 0.0, 0.0)
    color = OKLabColor(0.8, 0.0, 0.0)
    assert enforce_contrast_single_pass(color, reference, 0.1) is color


def test_single_pass_contrast_moves_lightness_then_chroma():
    reference = OKLabColor(0.5, 0.0, 0.0)
    color = OKLabColor(0.51, 0.05, 0.0)

    adjusted = enforce_contrast_single_pass(color, reference, 0.1)

    assert adjusted.L == pytest.approx(0.57)
    assert adjusted.a == pytest.approx(0.05 * 1.15)
    assert adjusted.b == pytest.approx(0.0, abs=1e-12)


def test_single_pass_contrast_moves_down_for_darker_colors():
    reference = OKLabColor(0.5, 0.0, 0.0)
    adjusted = enforce_contrast_single_pass(OKLabColor(0.49, 0.0, 0.0), reference, 0.1)
    assert adjusted.L == pytest.approx(0.43)


def test_is_readable_bounds():
    assert is_readable(OKLabColor(0.5, 0.0, 0.0))
    assert not is_readable(OKLabColor(0.1, 0.0, 0.0))
    assert not is_readable(OKLabColor(0.97, 0.0, 0.0))


def test_srgb8_table_is_built_once_and_read_only():
    table = srgb8_lut()
    assert srgb8_lut() is table
    assert isinstance(table, tuple)
    assert len(table) == 256
    assert table[0] == 0.0
    assert table[255] == pytest.approx(1.0)
    assert srgb8_to_linear(300) == table[255]


def test_hex_round_trip_preserves_value():
    original = "#4a83ff"
    assert linear_rgb_to_hex(hex_to_linear_rgb(original)) == original
    assert hex_to_linear_rgb("#ffffff") == pytest.approx((1.0, 1.0, 1.0))


def test_hex_parser_rejects_short_values():
    with pytest.raises(ValueError):
        hex_to_linear_rgb("#fff")


def test_oklab_cache_is_used_only_when_passed():
    cache = OklabCache(16)
    rgb = RGBColor(0.2, 0.4, 0.6)

    first = rgb_to_oklab(rgb, cache)
    second = rgb_to_oklab(rgb, cache)
    rgb_to_oklab(rgb)

    assert first == second == rgb_to_oklab(rgb)
    assert cache.misses == 1
    assert cache.hits == 1


def test_oklab_cache_capacity_and_eviction():
    assert OklabCache(100).capacity == 128

    cache = OklabCache(1)
    first = RGBColor(0.1, 0.1, 0.1)
    second = RGBColor(0.9, 0.9, 0.9)
    cache.put(first, rgb_to_oklab(first))
    cache.put(second, rgb_to_oklab(second))

    assert cache.get(second) == rgb_to_oklab(second)
    assert cache.get(first) is None

    cache.clear()
    assert cache.get(second) is None
    assert cache.hits == 0


def test_oklab_cache_rejects_empty_size():
    with pytest.raises(ValueError):
        OklabCache(0)
