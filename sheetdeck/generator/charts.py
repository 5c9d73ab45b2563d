"""Chart substitution - replaces a placeholder shape with a sheet chart.

The sheet chart is rebuilt as a native PowerPoint chart from the cells it
references, inserted at its natural size and, when that does not fit the
placeholder's box, scaled down uniformly so the aspect ratio is kept.

Supported chart kinds are those listed in ``CHART_TYPE_MAP``:
    barChart (column/bar; clustered, stacked, 100% stacked)
    lineChart, areaChart (standard, stacked, 100% stacked)
    pieChart, pie3DChart, doughnutChart

Usage:
    from sheetdeck.generator.charts import substitute_chart

    frame = substitute_chart(slide, placeholder_shape, registry["<%chart_sales%>"])
"""

from __future__ import annotations

import math
from typing import Any

from pptx.chart.data import CategoryChartData
from pptx.util import Emu

from sheetdeck.errors import ConfigurationError
from sheetdeck.processor.sheets import (
    ChartSource,
    chart_natural_size,
    read_chart_source,
)
from sheetdeck.schema.design_system import (
    CHART_TYPE_MAP,
    chart_type_key,
    legend_position,
)
from sheetdeck.schema.models import SheetChart

from .shapes import Box, remove_shape


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _safe_value(value: Any) -> float:
    """Coerce a value to a safe float for chart data.  None/NaN/inf/text -> 0."""
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        if math.isnan(value) or math.isinf(value):
            return 0.0
        return float(value)
    return 0.0


def resolve_chart_type(sheet_chart: SheetChart):
    """Return the XL_CHART_TYPE for a sheet chart.

    Raises:
        ConfigurationError: If the chart kind has no PowerPoint counterpart.
    """
    key = chart_type_key(sheet_chart.chart)
    xl_chart_type = CHART_TYPE_MAP.get(key)
    if xl_chart_type is None:
        raise ConfigurationError(
            f"Unsupported chart type {key[0]!r} on sheet {sheet_chart.title!r}"
        )
    return xl_chart_type


def scale_to_fit(width: int, height: int, max_width: int,
                 max_height: int) -> tuple[int, int]:
    """Scale (width, height) down uniformly to fit inside the max box.

    A size that already fits is returned unchanged; the result is never
    larger than the input.

    Raises:
        ConfigurationError: If width or height is zero or negative.
    """
    if width <= 0 or height <= 0:
        raise ConfigurationError(
            f"Chart has no natural size ({width} x {height} EMU)"
        )
    if width <= max_width and height <= max_height:
        return width, height
    scale = min(max_width / width, max_height / height)
    return int(round(width * scale)), int(round(height * scale))


# ---------------------------------------------------------------------------
# Chart data builders
# ---------------------------------------------------------------------------

def build_chart_data(source: ChartSource) -> CategoryChartData:
    """Build python-pptx chart data from a resolved chart source.

    Series are padded with zeros or truncated to the category count.  A
    chart without category labels gets 1..n.
    """
    length = max((len(values) for _, values in source.series), default=0)
    categories = list(source.categories)
    if not categories:
        categories = [str(i + 1) for i in range(length)]

    chart_data = CategoryChartData()
    chart_data.categories = categories

    for name, values in source.series:
        values = list(values)
        if len(values) < len(categories):
            values += [0.0] * (len(categories) - len(values))
        elif len(values) > len(categories):
            values = values[: len(categories)]
        chart_data.add_series(name, tuple(_safe_value(v) for v in values))

    return chart_data


def _apply_chart_style(chart, source: ChartSource) -> None:
    """Carry the sheet chart's title and legend over."""
    if source.title:
        chart.has_title = True
        chart.chart_title.text_frame.text = source.title
    else:
        chart.has_title = False

    chart.has_legend = source.has_legend
    if source.has_legend:
        chart.legend.position = legend_position(source.legend_position)
        chart.legend.include_in_layout = False


# ---------------------------------------------------------------------------
# Substitution
# ---------------------------------------------------------------------------

def substitute_chart(slide, placeholder, sheet_chart: SheetChart):
    """Replace ``placeholder`` on ``slide`` with a rebuilt sheet chart.

    Returns the new chart's GraphicFrame.

    Raises:
        ConfigurationError: If the chart kind is unsupported or the chart
            has zero natural width or height.
    """
    xl_chart_type = resolve_chart_type(sheet_chart)
    natural_width, natural_height = chart_natural_size(sheet_chart)
    if natural_width <= 0 or natural_height <= 0:
        raise ConfigurationError(
            f"Chart on sheet {sheet_chart.title!r} has no natural size "
            f"({natural_width} x {natural_height} EMU)"
        )

    source = read_chart_source(sheet_chart)
    box = Box.of(placeholder)
    left, top = box.origin

    frame = slide.shapes.add_chart(
        xl_chart_type, left, top,
        Emu(natural_width), Emu(natural_height),
        build_chart_data(source),
    )
    _apply_chart_style(frame.chart, source)

    width, height = scale_to_fit(int(frame.width), int(frame.height),
                                 box.width, box.height)
    frame.width = Emu(width)
    frame.height = Emu(height)
    frame.left = left
    frame.top = top

    remove_shape(placeholder)
    return frame
