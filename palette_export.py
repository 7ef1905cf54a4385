"""Text export of generated journey palettes."""
import math
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Sequence, Union

from color_spaces import RGBColor, linear_rgb_to_bytes, linear_rgb_to_hex, rgb_to_lch
from defaults import (
    DEFAULT_EXPORT_KEY_PREFIX,
    DEFAULT_EXPORT_LINE_TERMINATOR,
    DEFAULT_EXPORT_WRAP_QUOTES,
)


class PaletteFormat(str, Enum):
    HEX = "hex"
    RGB = "rgb"
    OKLCH = "oklch"
    LINEAR = "linear"


PALETTE_FORMAT_LABELS = {
    PaletteFormat.HEX: "Hex (#RRGGBB)",
    PaletteFormat.RGB: "RGB (r, g, b)",
    PaletteFormat.OKLCH: "OKLCH (L, C, H°)",
    PaletteFormat.LINEAR: "Linear RGB floats",
}


@dataclass
class PaletteExportOptions:
    key_prefix: str = DEFAULT_EXPORT_KEY_PREFIX
    line_terminator: str = DEFAULT_EXPORT_LINE_TERMINATOR
    wrap_values_in_quotes: bool = DEFAULT_EXPORT_WRAP_QUOTES


def format_color(color: RGBColor, palette_format: PaletteFormat) -> str:
    if palette_format == PaletteFormat.RGB:
        r, g, b = linear_rgb_to_bytes(color)
        return f"rgb({r}, {g}, {b})"
    if palette_format == PaletteFormat.OKLCH:
        lightness, chroma, hue = rgb_to_lch(color)
        # CSS oklch() takes degrees
        return f"oklch({lightness:.4f} {chroma:.4f} {math.degrees(hue):.2f})"
    if palette_format == PaletteFormat.LINEAR:
        return f"({color.r:.4f}, {color.g:.4f}, {color.b:.4f})"
    return linear_rgb_to_hex(color)


def _as_mapping(colors: Union[Sequence[RGBColor], Dict[int, RGBColor]]) -> Dict[int, RGBColor]:
    if isinstance(colors, dict):
        return colors
    return dict(enumerate(colors))


def _export_key(prefix: str, index: int) -> str:
    key = f"{prefix}{index}"
    # Object keys with separators are not valid bare identifiers.
    if any(char in key for char in " -"):
        return f'"{key}"'
    return key


def format_palette_export(
    colors: Union[Sequence[RGBColor], Dict[int, RGBColor]],
    palette_format: PaletteFormat,
    options: PaletteExportOptions,
) -> str:
    lines: List[str] = []
    for index, color in _as_mapping(colors).items():
        value = format_color(color, palette_format)
        if options.wrap_values_in_quotes:
            value = f'"{value}"'
        key = _export_key(options.key_prefix, index)
        lines.append(f"    {key}: {value}{options.line_terminator}")

    return "{\n" + "\n".join(lines) + "\n}"


def palette_to_typescript_color_array_str(
    colors: Union[Sequence[RGBColor], Dict[int, RGBColor]],
    palette_format: PaletteFormat = PaletteFormat.HEX,
) -> str:
    return format_palette_export(
        colors,
        palette_format,
        PaletteExportOptions(line_terminator=",", wrap_values_in_quotes=True),
    )
