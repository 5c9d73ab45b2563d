"""Workbook processing for SheetDeck - tokens, sheet readers and the registry."""

from .placeholders import (
    PLACEHOLDER_RE,
    classify_placeholder,
    find_placeholders,
    is_chart_name,
    is_table_name,
    iter_text_shapes,
    scan_presentation,
)
from .registry import build_registry, first_chart
from .sheets import (
    ChartSource,
    cell_style,
    chart_natural_size,
    column_pixels,
    column_width_to_pixels,
    range_footprint,
    read_chart_source,
    read_grid,
    read_key_values,
    read_reference,
    read_styles,
    row_pixels,
    used_range,
)
