"""Design system utilities - value formatting and style lookup tables.

Maps workbook-side style vocabulary onto python-pptx constants:
- Vertical alignment: top / center / bottom -> MSO_ANCHOR
- Chart kinds: (chart tag, bar direction, grouping) -> XL_CHART_TYPE
- Legend positions: r / l / t / b / tr -> XL_LEGEND_POSITION

and renders scalar cell values as the text placed into slides.
"""

import datetime
import math

from pptx.dml.color import RGBColor
from pptx.enum.chart import XL_CHART_TYPE, XL_LEGEND_POSITION
from pptx.enum.text import MSO_ANCHOR


# ---------------------------------------------------------------------------
# Lookup tables
# ---------------------------------------------------------------------------

VERTICAL_ANCHOR_MAP = {
    "top": MSO_ANCHOR.TOP,
    "center": MSO_ANCHOR.MIDDLE,
    "middle": MSO_ANCHOR.MIDDLE,
    "bottom": MSO_ANCHOR.BOTTOM,
}

DEFAULT_VERTICAL_ANCHOR = MSO_ANCHOR.MIDDLE

# Keyed by (tagname, barDir, grouping); None where the chart has no such field.
CHART_TYPE_MAP = {
    ("barChart", "col", "clustered"): XL_CHART_TYPE.COLUMN_CLUSTERED,
    ("barChart", "col", "standard"): XL_CHART_TYPE.COLUMN_CLUSTERED,
    ("barChart", "col", "stacked"): XL_CHART_TYPE.COLUMN_STACKED,
    ("barChart", "col", "percentStacked"): XL_CHART_TYPE.COLUMN_STACKED_100,
    ("barChart", "bar", "clustered"): XL_CHART_TYPE.BAR_CLUSTERED,
    ("barChart", "bar", "standard"): XL_CHART_TYPE.BAR_CLUSTERED,
    ("barChart", "bar", "stacked"): XL_CHART_TYPE.BAR_STACKED,
    ("barChart", "bar", "percentStacked"): XL_CHART_TYPE.BAR_STACKED_100,
    ("lineChart", None, "standard"): XL_CHART_TYPE.LINE,
    ("lineChart", None, "stacked"): XL_CHART_TYPE.LINE_STACKED,
    ("lineChart", None, "percentStacked"): XL_CHART_TYPE.LINE_STACKED_100,
    ("areaChart", None, "standard"): XL_CHART_TYPE.AREA,
    ("areaChart", None, "stacked"): XL_CHART_TYPE.AREA_STACKED,
    ("areaChart", None, "percentStacked"): XL_CHART_TYPE.AREA_STACKED_100,
    ("pieChart", None, None): XL_CHART_TYPE.PIE,
    ("pie3DChart", None, None): XL_CHART_TYPE.THREE_D_PIE,
    ("doughnutChart", None, None): XL_CHART_TYPE.DOUGHNUT,
}

LEGEND_POSITION_MAP = {
    "r": XL_LEGEND_POSITION.RIGHT,
    "l": XL_LEGEND_POSITION.LEFT,
    "t": XL_LEGEND_POSITION.TOP,
    "b": XL_LEGEND_POSITION.BOTTOM,
    "tr": XL_LEGEND_POSITION.CORNER,
}


def vertical_anchor(alignment: str | None):
    """Return the MSO_ANCHOR for a sheet alignment name (middle if unknown)."""
    if not alignment:
        return DEFAULT_VERTICAL_ANCHOR
    return VERTICAL_ANCHOR_MAP.get(alignment.lower(), DEFAULT_VERTICAL_ANCHOR)


def chart_type_key(chart) -> tuple[str, str | None, str | None]:
    """Build the CHART_TYPE_MAP key for an openpyxl chart."""
    tag = chart.tagname
    bar_dir = getattr(chart, "type", None) if tag == "barChart" else None
    if tag in ("barChart", "lineChart", "areaChart"):
        grouping = getattr(chart, "grouping", None) or "standard"
    else:
        grouping = None
    return tag, bar_dir, grouping


def legend_position(position: str | None):
    """Return the XL_LEGEND_POSITION for an openpyxl legend position."""
    return LEGEND_POSITION_MAP.get(position or "r", XL_LEGEND_POSITION.RIGHT)


# ---------------------------------------------------------------------------
# Colors
# ---------------------------------------------------------------------------

def hex_to_rgb(hex_color: str) -> RGBColor:
    """Convert '#RRGGBB' hex string to an RGBColor."""
    h = hex_color.lstrip("#")
    return RGBColor(*bytes.fromhex(h))


def sheet_color_to_hex(color) -> str | None:
    """Convert an openpyxl Color to '#RRGGBB'.

    Only literal RGB colors convert; theme and indexed colors return None.
    The alpha byte of ARGB values is dropped.
    """
    if color is None or getattr(color, "type", None) != "rgb":
        return None
    rgb = color.rgb
    if not isinstance(rgb, str) or len(rgb) not in (6, 8):
        return None
    return "#" + rgb[-6:].upper()


# ---------------------------------------------------------------------------
# Scalar formatting
# ---------------------------------------------------------------------------

def _is_missing(value) -> bool:
    """Check if a value is None or NaN."""
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    return False


def format_scalar(value) -> str:
    """Render a cell value as slide text.

    None/NaN   -> ""
    42.0       -> "42"
    True       -> "TRUE"
    2026-01-31 00:00 -> "2026-01-31"
    """
    if _is_missing(value):
        return ""
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, datetime.datetime):
        if value.time() == datetime.time(0, 0):
            return value.date().isoformat()
        return value.strftime("%Y-%m-%d %H:%M:%S")
    if isinstance(value, (datetime.date, datetime.time)):
        return value.isoformat()
    return str(value)
