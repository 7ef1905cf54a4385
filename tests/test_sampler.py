import math
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from color_spaces import BLACK, LChColor, RGBColor  # noqa: E402
from journey import (  # noqa: E402
    ChromaBias,
    JourneyConfig,
    LightnessBias,
    LoopMode,
    Waypoint,
    create_journey,
    destroy_journey,
)
from sampler import (  # noqa: E402
    apply_dynamics,
    gradient,
    interpolate_waypoints,
    normalize_t,
    sample,
)

RED = RGBColor(1.0, 0.0, 0.0)
BLUE = RGBColor(0.0, 0.0, 1.0)


def test_normalize_t_per_loop_mode():
    assert normalize_t(-0.5, LoopMode.OPEN) == 0.0
    assert normalize_t(1.5, LoopMode.OPEN) == 1.0
    assert normalize_t(1.25, LoopMode.CLOSED) == pytest.approx(0.25)
    assert normalize_t(-0.25, LoopMode.CLOSED) == pytest.approx(0.75)
    assert normalize_t(1.5, LoopMode.PING_PONG) == pytest.approx(0.5)
    assert normalize_t(-0.5, LoopMode.PING_PONG) == pytest.approx(0.5)
    assert normalize_t(float("nan"), LoopMode.CLOSED) == 0.0
    assert normalize_t(float("inf"), LoopMode.OPEN) == 0.0


def test_closed_loop_wraps_back_to_start():
    journey = create_journey(JourneyConfig(anchors=(RED, BLUE), loop_mode=LoopMode.CLOSED))
    assert sample(journey, 1.0) == sample(journey, 0.0)
    assert sample(journey, 1.3) == sample(journey, 0.3)


def test_ping_pong_mirrors_positions():
    journey = create_journey(JourneyConfig(anchors=(RED, BLUE), loop_mode=LoopMode.PING_PONG))
    assert sample(journey, 1.75) == sample(journey, 0.25)


def test_open_mode_clamps_outside_unit_range():
    journey = create_journey(JourneyConfig(anchors=(RED, BLUE)))
    assert sample(journey, -1.0) == sample(journey, 0.0)
    assert sample(journey, 7.0) == sample(journey, 1.0)


def test_sampling_is_deterministic():
    journey = create_journey(JourneyConfig.single_anchor((0.3, 0.5, 0.8)))
    first = sample(journey, 0.37)
    assert all(sample(journey, 0.37) == first for _ in range(1000))


def test_samples_stay_in_gamut():
    journey = create_journey(
        JourneyConfig(anchors=(RED, BLUE), chroma_bias=ChromaBias.VIVID, mid_journey_vibrancy=1.0)
    )
    for color in gradient(journey, 101):
        assert all(0.0 <= channel <= 1.0 for channel in color)


def test_open_journey_endpoints_match_anchors():
    journey = create_journey(JourneyConfig(anchors=(RED, RGBColor(0.2, 0.6, 0.3), BLUE)))
    assert sample(journey, 0.0) == pytest.approx(RED, abs=1e-4)
    assert sample(journey, 1.0) == pytest.approx(BLUE, abs=1e-4)


def test_interpolation_takes_shortest_hue_path():
    waypoints = (
        Waypoint(LChColor(0.5, 0.1, 0.1)),
        Waypoint(LChColor(0.5, 0.1, 2 * math.pi - 0.1)),
    )
    mid = interpolate_waypoints(waypoints, 0.5)
    # Crosses zero instead of sweeping through pi.
    assert min(mid.h, 2 * math.pi - mid.h) == pytest.approx(0.0, abs=1e-12)


def test_interpolation_uses_smoothstep_inside_segment():
    waypoints = (Waypoint(LChColor(0.2, 0.0, 0.0)), Waypoint(LChColor(0.6, 0.0, 0.0)))
    assert interpolate_waypoints(waypoints, 0.25).L == pytest.approx(0.2 + 0.4 * 0.15625)
    assert interpolate_waypoints(waypoints, 1.0).L == pytest.approx(0.6)


@pytest.mark.parametrize(
    "bias, weight, expected",
    [
        (LightnessBias.NEUTRAL, 0.0, 0.5),
        (LightnessBias.LIGHTER, 0.0, 0.6),
        (LightnessBias.DARKER, 0.0, 0.4),
        (LightnessBias.CUSTOM, -0.5, 0.4),
    ],
)
def test_lightness_dynamics(bias, weight, expected):
    config = JourneyConfig(lightness_bias=bias, lightness_custom_weight=weight)
    color = apply_dynamics(config, LChColor(0.5, 0.1, 1.0), 0.0)
    assert color.L == pytest.approx(expected)


@pytest.mark.parametrize(
    "bias, multiplier, expected",
    [
        (ChromaBias.NEUTRAL, 1.0, 0.1),
        (ChromaBias.MUTED, 1.0, 0.06),
        (ChromaBias.VIVID, 1.0, 0.14),
        (ChromaBias.CUSTOM, 2.0, 0.2),
    ],
)
def test_chroma_dynamics(bias, multiplier, expected):
    config = JourneyConfig(chroma_bias=bias, chroma_custom_multiplier=multiplier)
    color = apply_dynamics(config, LChColor(0.5, 0.1, 1.0), 0.0)
    assert color.C == pytest.approx(expected)


def test_vibrancy_peaks_mid_journey():
    config = JourneyConfig(mid_journey_vibrancy=1.0)
    base = LChColor(0.5, 0.1, 1.0)
    assert apply_dynamics(config, base, 0.5).C == pytest.approx(0.16)
    assert apply_dynamics(config, base, 0.1).C == pytest.approx(0.1)
    assert apply_dynamics(config, base, 0.325).C == pytest.approx(0.13)


def test_dynamics_clamp_chroma():
    config = JourneyConfig(chroma_bias=ChromaBias.CUSTOM, chroma_custom_multiplier=10.0)
    assert apply_dynamics(config, LChColor(0.5, 0.2, 1.0), 0.0).C == 0.4


def test_gradient_includes_endpoints():
    journey = create_journey(JourneyConfig(anchors=(RED, BLUE)))
    stops = gradient(journey, 5)
    assert len(stops) == 5
    assert stops[0] == sample(journey, 0.0)
    assert stops[-1] == sample(journey, 1.0)
    assert gradient(journey, 0) == []


def test_missing_or_destroyed_journey_samples_black():
    assert sample(None, 0.5) == BLACK
    journey = create_journey(JourneyConfig(anchors=(RED,)))
    destroy_journey(journey)
    assert sample(journey, 0.5) == BLACK
