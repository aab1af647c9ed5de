"""Color and style constants for the heat overlay."""

import math
from dataclasses import dataclass

# Fixed heat ramp: value 0.0 -> hue 120 (green), value 1.0 -> hue 0 (red)
HUE_AT_ZERO = 120
HUE_PER_UNIT = -120
HEAT_SATURATION = 100  # percent
HEAT_LIGHTNESS = 50  # percent
HEAT_FILL_OPACITY = 0.3


def format_number(value: float) -> str:
    """
    Render a number the way the map widget displays it.

    Integral floats drop the trailing ".0" (``1.0`` -> ``"1"``); everything
    else uses the shortest round-tripping representation.
    """
    if isinstance(value, bool):
        value = int(value)
    if isinstance(value, int):
        return str(value)
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    if value.is_integer() and abs(value) < 1e21:
        return str(int(value))
    return repr(value)


def value_to_hue(value: float) -> float:
    """Map a normalized value to a hue in degrees.

    Values outside [0, 1] extrapolate linearly; there is no clamping.
    """
    return value * HUE_PER_UNIT + HUE_AT_ZERO


def percentage_to_hsl(value: float) -> str:
    """Fill color for a region value, e.g. ``hsla(60, 100%, 50%, 0.3)``."""
    hue = format_number(value_to_hue(value))
    return f"hsla({hue}, {HEAT_SATURATION}%, {HEAT_LIGHTNESS}%, {HEAT_FILL_OPACITY})"


@dataclass(frozen=True)
class LabelStyle:
    """Text style for region value labels."""

    font: str
    stroke_color: str
    stroke_width: int
    overflow: bool = True


# Style applied to a region while the pointer hovers over it: the region's own
# fill color plus its value as a label
HOVER_LABEL_STYLE = LabelStyle(
    font="18px Calibri,sans-serif",
    stroke_color="#fff",
    stroke_width=2,
    overflow=True,
)


@dataclass(frozen=True)
class HeatStyle:
    """Style configuration for a heat region polygon."""

    fill_color: str  # hsla() string
    label: str  # value display text

    def to_simplestyle(self) -> dict:
        """Convert to SimpleStyle-like properties for GeoJSON export."""
        return {
            "fill": self.fill_color,
            "stroke-width": 0,
            "label": self.label,
        }


def style_for_value(value: float) -> HeatStyle:
    """Build the fill + label style for a region value."""
    return HeatStyle(fill_color=percentage_to_hsl(value), label=format_number(value))
