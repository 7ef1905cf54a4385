import importlib
from typing import Any, List, Optional, Tuple

import streamlit as st

from color_spaces import RGBColor, hex_to_linear_rgb, linear_rgb_to_hex
from defaults import (
    DEFAULT_DELTA_RANGE,
    DEFAULT_EXPORT_FORMAT,
    DEFAULT_EXPORT_KEY_PREFIX,
    DEFAULT_EXPORT_LINE_TERMINATOR,
    DEFAULT_EXPORT_WRAP_QUOTES,
    MAX_ANCHORS,
    PREVIEW_ADVISORY_COUNT,
    PREVIEW_DEFAULT_COUNT,
    PREVIEW_GRADIENT_STOPS,
    PREVIEW_MAX_COUNT,
)
from discrete import JourneyPalette, generate_palette
from journey import (
    ChromaBias,
    ContrastLevel,
    DeltaRange,
    JourneyConfig,
    JourneyConfigError,
    JourneyStyle,
    LightnessBias,
    LoopMode,
    TemperatureBias,
    VariationConfig,
    create_journey,
    destroy_journey,
)
from palette_export import (
    PALETTE_FORMAT_LABELS,
    PaletteExportOptions,
    PaletteFormat,
    format_palette_export,
)
from sampler import gradient
from variation import VariationDimension, VariationStrength

pyperclip: Optional[Any]
try:
    pyperclip = importlib.import_module("pyperclip")
except ImportError:  # pragma: no cover - optional dependency
    pyperclip = None

DEFAULT_ANCHOR_HEXES = ["#5b8fd6", "#d65b8f", "#8fd65b", "#d6a25b"]

STYLE_LABELS = {
    JourneyStyle.BALANCED: "Balanced",
    JourneyStyle.PASTEL_DRIFT: "Pastel drift",
    JourneyStyle.VIVID_LOOP: "Vivid loop",
    JourneyStyle.NIGHT_MODE: "Night mode",
    JourneyStyle.WARM_EARTH: "Warm earth",
    JourneyStyle.COOL_SKY: "Cool sky",
}


def validate_palette_count(count: int) -> Tuple[int, Optional[str]]:
    """Clamp a requested palette size and return an advisory when needed."""
    if count < 1:
        return 1, "Palette size must be at least 1."
    if count > PREVIEW_MAX_COUNT:
        return PREVIEW_MAX_COUNT, f"Palette size cannot exceed {PREVIEW_MAX_COUNT}."
    if count > PREVIEW_ADVISORY_COUNT:
        return count, "Large palettes repeat hues; consider a range query instead."
    return count, None


def gradient_css(colors: List[RGBColor]) -> str:
    stops = ", ".join(linear_rgb_to_hex(color) for color in colors)
    return f"linear-gradient(90deg, {stops})"


def anchor_component() -> List[RGBColor]:
    st.subheader("Anchors")
    anchor_count = st.slider(
        label="Anchor count",
        min_value=1,
        max_value=min(MAX_ANCHORS, len(DEFAULT_ANCHOR_HEXES)),
        value=st.session_state.get("anchor_count", 1),
        key="anchor_count",
        help="A single anchor sweeps the whole hue wheel; more anchors are visited in order.",
    )
    cols = st.columns(anchor_count)
    anchors: List[RGBColor] = []
    for index, col in enumerate(cols):
        hex_value = col.color_picker(
            label=f"Anchor {index + 1}",
            value=st.session_state.get(f"anchor_{index}", DEFAULT_ANCHOR_HEXES[index]),
            key=f"anchor_{index}",
        )
        anchors.append(hex_to_linear_rgb(hex_value))
    return anchors


def journey_parameter_component() -> Tuple[JourneyConfig, int]:
    st.header("Parameters")

    anchors = anchor_component()

    style = st.selectbox(
        label="Style",
        options=list(JourneyStyle),
        format_func=lambda opt: STYLE_LABELS[opt],
        key="journey_style",
    )
    config = style.apply(JourneyConfig(anchors=tuple(anchors)))

    with st.expander("Perceptual Dynamics", expanded=False):
        st.caption("Override the style preset per dimension.")
        lightness = st.selectbox(
            "Lightness", options=list(LightnessBias), index=list(LightnessBias).index(config.lightness_bias)
        )
        lightness_weight = st.slider(
            "Custom lightness weight", -1.0, 1.0, float(config.lightness_custom_weight), 0.05
        )
        chroma = st.selectbox(
            "Chroma", options=list(ChromaBias), index=list(ChromaBias).index(config.chroma_bias)
        )
        chroma_multiplier = st.slider(
            "Custom chroma multiplier", 0.5, 2.0, float(config.chroma_custom_multiplier), 0.05
        )
        contrast = st.selectbox(
            "Contrast", options=list(ContrastLevel), index=list(ContrastLevel).index(config.contrast_level)
        )
        contrast_threshold = st.slider(
            "Custom contrast ΔE", 0.01, 0.3, float(config.contrast_custom_threshold), 0.01
        )
        vibrancy = st.slider(
            "Mid-journey vibrancy",
            0.0,
            1.0,
            float(config.mid_journey_vibrancy),
            0.05,
        )
        temperature = st.selectbox(
            "Temperature",
            options=list(TemperatureBias),
            index=list(TemperatureBias).index(config.temperature_bias),
        )
        loop_mode = st.selectbox(
            "Loop mode", options=list(LoopMode), index=list(LoopMode).index(config.loop_mode)
        )

    with st.expander("Variation", expanded=False):
        enabled = st.checkbox("Enable seeded variation", value=False)
        dimension_names = st.multiselect(
            "Dimensions", options=["hue", "lightness", "chroma"], default=["hue", "lightness"]
        )
        strength = st.selectbox("Strength", options=list(VariationStrength))
        magnitude = st.slider("Custom magnitude", 0.0, 0.2, 0.03, 0.005)
        seed = int(st.number_input("Seed", min_value=0, value=42, step=1))

    with st.expander("Delta Range", expanded=False):
        st.caption("Keep adjacent colors inside a ΔE band. The minimum is guaranteed, the maximum is best effort.")
        use_range = st.checkbox("Enforce delta range", value=False)
        band = st.slider("Adjacent ΔE", 0.0, 0.3, DEFAULT_DELTA_RANGE, 0.005)

    dimensions = VariationDimension.NONE
    for name in dimension_names:
        dimensions |= VariationDimension[name.upper()]

    count, advisory = validate_palette_count(
        int(st.number_input("Palette size", value=PREVIEW_DEFAULT_COUNT, step=1))
    )
    if advisory:
        st.info(advisory)

    config = JourneyConfig(
        anchors=tuple(anchors),
        lightness_bias=lightness,
        lightness_custom_weight=lightness_weight,
        chroma_bias=chroma,
        chroma_custom_multiplier=chroma_multiplier,
        contrast_level=contrast,
        contrast_custom_threshold=contrast_threshold,
        mid_journey_vibrancy=vibrancy,
        temperature_bias=temperature,
        loop_mode=loop_mode,
        variation=VariationConfig(
            enabled=enabled,
            dimensions=dimensions,
            strength=strength,
            custom_magnitude=magnitude,
            seed=seed,
        ),
        delta_range=DeltaRange(*band) if use_range else None,
    )
    return config, count


def palette_component(palette: JourneyPalette, gradient_colors: List[RGBColor]) -> None:
    st.header("Palette")

    st.markdown(
        f'<div style="height:48px;border-radius:8px;background:{gradient_css(gradient_colors)}"></div>',
        unsafe_allow_html=True,
    )

    hex_palette = palette.hex_colors()
    signature = tuple(hex_palette.items())
    if st.session_state.get("palette_signature") != signature:
        st.session_state["palette_signature"] = signature
        for index, color in hex_palette.items():
            st.session_state[f"color_{index}"] = color

    per_row = 10
    items = list(hex_palette.items())
    for row_start in range(0, len(items), per_row):
        row = items[row_start : row_start + per_row]
        cols = st.columns(per_row)
        for (index, _), col in zip(row, cols):
            col.color_picker(label=f"{index}", key=f"color_{index}", disabled=True)
            if index > 0:
                col.caption(f"ΔE {palette.deltas[index - 1]:.3f}")

    for warning in palette.warnings:
        st.warning(warning)

    with st.expander("Export Options", expanded=False):
        if "palette_format" not in st.session_state:
            st.session_state["palette_format"] = PaletteFormat(DEFAULT_EXPORT_FORMAT)
        if "export_line_terminator" not in st.session_state:
            st.session_state["export_line_terminator"] = DEFAULT_EXPORT_LINE_TERMINATOR
        if "export_wrap_quotes" not in st.session_state:
            st.session_state["export_wrap_quotes"] = DEFAULT_EXPORT_WRAP_QUOTES
        if "export_key_prefix" not in st.session_state:
            st.session_state["export_key_prefix"] = DEFAULT_EXPORT_KEY_PREFIX

        key_prefix = st.text_input(
            "Key Prefix",
            key="export_key_prefix",
            help="Prepended before each palette index.",
        )
        line_terminator = st.text_input(
            "Line Terminator",
            key="export_line_terminator",
            help="Appended after each color (e.g., ;, ,, blank).",
        )
        wrap_values_in_quotes = st.checkbox(
            "Wrap Values In Quotes",
            key="export_wrap_quotes",
        )
        palette_format = st.selectbox(
            label="Format",
            options=list(PaletteFormat),
            format_func=lambda opt: PALETTE_FORMAT_LABELS[opt],
            key="palette_format",
        )

    export_str = format_palette_export(
        colors=palette.colors,
        palette_format=palette_format,
        options=PaletteExportOptions(
            key_prefix=key_prefix,
            line_terminator=line_terminator,
            wrap_values_in_quotes=wrap_values_in_quotes,
        ),
    )
    st.code(body=export_str, language="typescript")

    if st.button(label="Copy"):
        if pyperclip:
            pyperclip.copy(export_str)
            st.success("Copied to clipboard!")
        else:
            st.warning("pyperclip is not installed in this environment.")


def main() -> None:
    st.title("Color Journey Preview")

    config, count = journey_parameter_component()

    try:
        journey = create_journey(config)
    except JourneyConfigError as exc:
        st.error(str(exc))
        return

    try:
        with st.spinner("Generating palette..."):
            palette = generate_palette(journey, count)
            gradient_colors = gradient(journey, PREVIEW_GRADIENT_STOPS)
    finally:
        destroy_journey(journey)

    palette_component(palette, gradient_colors)


if __name__ == "__main__":
    main()
