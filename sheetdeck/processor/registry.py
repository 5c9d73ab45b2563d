"""Substitution registry builder.

Scans a workbook once per update cycle and records what each placeholder
token resolves to:

- ``substitutions`` tab: column A holds full tokens (``<%name%>``), column B
  the scalar value
- tabs named like a chart token (``<%chart_sales%>``): the first chart on
  the tab
- tabs named like a table token (``<%table_kpis%>``): the tab's used range

Usage::

    from openpyxl import load_workbook
    from sheetdeck.processor.registry import build_registry

    registry = build_registry(load_workbook("data.xlsx", data_only=True))
    registry["<%name%>"]
"""

from typing import Any

from sheetdeck.schema.models import (
    DEFAULT_SUBSTITUTIONS_SHEET,
    PlaceholderKind,
    Registry,
    SheetChart,
)

from .placeholders import classify_placeholder
from .sheets import read_key_values, used_range


def first_chart(worksheet) -> SheetChart | None:
    """Return the first chart drawn on a worksheet, if any."""
    charts = getattr(worksheet, "_charts", None) or []
    if not charts:
        return None
    return SheetChart(chart=charts[0], worksheet=worksheet)


def build_registry(workbook,
                   substitutions_sheet: str = DEFAULT_SUBSTITUTIONS_SHEET) -> Registry:
    """Build the token registry for one update cycle.

    A workbook without the substitutions tab still yields chart and table
    entries; the returned registry records the absence so that text lookups
    fail loudly instead of silently missing.
    """
    entries: dict[str, Any] = {}

    has_substitutions = substitutions_sheet in workbook.sheetnames
    if has_substitutions:
        for key, value in read_key_values(workbook[substitutions_sheet]):
            entries[key] = value

    worksheets = list(workbook.worksheets)

    for ws in worksheets:
        if classify_placeholder(ws.title) != PlaceholderKind.CHART:
            continue
        sheet_chart = first_chart(ws)
        if sheet_chart is not None:
            entries[ws.title] = sheet_chart

    for ws in worksheets:
        if classify_placeholder(ws.title) != PlaceholderKind.TABLE:
            continue
        entries[ws.title] = used_range(ws)

    return Registry(entries, has_substitutions=has_substitutions)
