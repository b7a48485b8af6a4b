"""SVG layout — time grid plus one shaded bar per extracted region."""

import html
import logging
from dataclasses import dataclass

from trace2_flamegraph.config import DEFAULT_CONFIG, Config
from trace2_flamegraph.errors import DegenerateDepthError
from trace2_flamegraph.extractor import Extraction
from trace2_flamegraph.models import Rectangle

logger = logging.getLogger(__name__)

BOTTOM_MARGIN = 10
AXIS_LABEL_OFFSET = 3
AXIS_LABEL_Y = 10
BOX_LABEL_OFFSET = 5
BOX_LABEL_BASELINE = 0.8  # fraction of row height

STYLE = [
    "<style>",
    ".box { font: 16px sans-serif; }",
    ".axis { font: 12px sans-serif; }",
    "</style>",
]


@dataclass(frozen=True)
class Scale:
    unit: str
    unit_divisor: int  # ms per displayed unit
    interval: int  # ms between grid lines
    width_divisor: int  # ms per pixel


# (exclusive lower bound on total duration in ms, scale), longest first
SCALE_TIERS = [
    (10000, Scale(unit="s", unit_divisor=1000, interval=5000, width_divisor=50)),
    (2500, Scale(unit="s", unit_divisor=1000, interval=1000, width_divisor=10)),
]
DEFAULT_SCALE = Scale(unit="ms", unit_divisor=1, interval=100, width_divisor=1)


def select_scale(total_duration: int) -> Scale:
    """Pick grid unit, spacing and horizontal compression for a trace length."""
    for threshold, scale in SCALE_TIERS:
        if total_duration > threshold:
            return scale
    return DEFAULT_SCALE


def shade_ratio(depth: int, max_depth: int) -> float:
    """Relative depth in [0, 1] used for colouring.

    Raises DegenerateDepthError when the graph has no nesting to scale against.
    """
    if max_depth <= 0:
        raise DegenerateDepthError(f"cannot shade depth {depth} against max depth {max_depth}")
    return depth / max_depth


def _num(value: float) -> str:
    """Format a coordinate without a trailing '.0' on whole numbers."""
    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))


def _rect_style(depth: int, max_depth: int) -> str:
    try:
        ratio = shade_ratio(depth, max_depth)
    except DegenerateDepthError:
        ratio = 0.0
    fill = 150 + 100 * ratio
    border = round(100 * ratio)
    fill_color = f"rgb({round(fill)},{round(fill / 3)},{round(fill / 3)})"
    border_color = f"rgb({border},{border},{border})"
    return f"fill:{fill_color};stroke-width:3;stroke:{border_color}"


def render_grid(total_duration: int, height: int, scale: Scale) -> list[str]:
    lines = []
    for t in range(0, total_duration, scale.interval):
        x = t / scale.width_divisor
        lines.append(
            f'<line x1="{_num(x)}" y1="0" x2="{_num(x)}" y2="{height}" '
            f'style="stroke-width:1; stroke:black;" />'
        )
        lines.append(
            f'<text class="axis" x="{_num(x + AXIS_LABEL_OFFSET)}" y="{AXIS_LABEL_Y}">'
            f"{_num(t / scale.unit_divisor)}{scale.unit}</text>"
        )
    return lines


def render_rectangle(
    rect: Rectangle,
    extraction: Extraction,
    scale: Scale,
    height: int,
    config: Config,
) -> list[str]:
    """SVG for one bar and its label, or nothing if it would be too narrow to read."""
    w = rect.duration / scale.width_divisor
    if w < config.min_visible_width:
        return []

    x = (rect.start - extraction.start_time) / scale.width_divisor
    y = height - BOTTOM_MARGIN - config.row_height * (rect.depth + 1)
    style = _rect_style(rect.depth, extraction.max_depth)

    return [
        f'<rect width="{_num(w)}" height="{config.row_height}" x="{_num(x)}" y="{_num(y)}" '
        f'style="{style}" />',
        f'<text class="box" x="{_num(x + BOX_LABEL_OFFSET)}" '
        f'y="{_num(y + BOX_LABEL_BASELINE * config.row_height)}">'
        f"{html.escape(rect.display_label)}</text>",
    ]


def render_svg(extraction: Extraction, config: Config = DEFAULT_CONFIG) -> str:
    """Lay out the extracted rectangles as a complete SVG document."""
    scale = select_scale(extraction.total_duration)
    width = extraction.total_duration / scale.width_divisor
    height = config.header_margin + config.row_height * (extraction.max_depth + 1)

    out = [f'<svg xmlns="http://www.w3.org/2000/svg" width="{_num(width)}" height="{height}">']
    out.extend(STYLE)
    out.extend(render_grid(extraction.total_duration, height, scale))

    drawn = 0
    for rect in extraction.rectangles:
        parts = render_rectangle(rect, extraction, scale, height, config)
        if parts:
            drawn += 1
            out.extend(parts)

    out.append("</svg>")
    logger.info(
        "Rendered %d of %d rectangles on a %sx%d canvas (%s grid)",
        drawn, len(extraction.rectangles), _num(width), height, scale.unit,
    )
    return "\n".join(out) + "\n"
