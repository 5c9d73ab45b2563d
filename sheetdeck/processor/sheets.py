"""Workbook readers - values, styles, geometry and chart sources.

Reads what the substitution engine needs from an openpyxl workbook:
- Key/value rows of the substitutions tab
- The used range of a table tab (trailing blank rows trimmed)
- Cell values and per-cell styles of a range
- The on-sheet footprint of a range or chart, in EMU
- Category/series data behind a sheet chart

Geometry follows the spreadsheet's own units: column widths are stored in
character units and rendered with a 7 px maximum digit width, row heights
are stored in points.  Everything is converted to pixels at 96 dpi and then
to EMU (9525 per pixel).
"""

from dataclasses import dataclass, field

import pandas as pd
from openpyxl.drawing.spreadsheet_drawing import TwoCellAnchor
from openpyxl.utils import get_column_letter, range_boundaries
from openpyxl.utils.units import cm_to_EMU, pixels_to_EMU, points_to_pixels

from sheetdeck.errors import ConfigurationError
from sheetdeck.schema.design_system import format_scalar, sheet_color_to_hex
from sheetdeck.schema.models import CellStyle, SheetChart, SheetRange


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

DEFAULT_COLUMN_PIXELS = 64
DEFAULT_ROW_POINTS = 15.0

_MAX_DIGIT_WIDTH = 7


# ---------------------------------------------------------------------------
# Blank detection
# ---------------------------------------------------------------------------

def _blank_mask(frame: pd.DataFrame) -> pd.DataFrame:
    """True where a cell holds nothing (None, NaN or empty string)."""
    return frame.isna() | frame.eq("")


def read_key_values(worksheet) -> list[tuple[str, object]]:
    """Read (key, value) rows from the first two columns, starting at row 1.

    Rows with a blank key are skipped.  Blank values become "".
    """
    rows = list(worksheet.iter_rows(min_row=1, max_col=2, values_only=True))
    if not rows:
        return []
    frame = pd.DataFrame(rows, columns=["key", "value"], dtype=object)
    blank = _blank_mask(frame)
    frame = frame[~blank["key"]]

    pairs = []
    for key, value in zip(frame["key"], frame["value"]):
        if pd.isna(value):
            value = ""
        pairs.append((key if isinstance(key, str) else format_scalar(key), value))
    return pairs


def used_range(worksheet) -> SheetRange:
    """Return A1 to the last column x the last row holding any value.

    Trailing blank rows are dropped; the column extent is the sheet's own
    and is not trimmed.
    """
    max_col = worksheet.max_column
    rows = list(worksheet.iter_rows(min_row=1, max_row=worksheet.max_row,
                                    max_col=max_col, values_only=True))
    frame = pd.DataFrame(rows, dtype=object)
    if frame.empty:
        return SheetRange(worksheet, 1, 1, 0, max_col)

    populated = ~_blank_mask(frame).all(axis=1)
    if not populated.any():
        return SheetRange(worksheet, 1, 1, 0, max_col)
    last_row = int(populated[populated].index[-1]) + 1
    return SheetRange(worksheet, 1, 1, last_row, max_col)


# ---------------------------------------------------------------------------
# Values and styles
# ---------------------------------------------------------------------------

def _iter_cells(sheet_range: SheetRange, values_only: bool = False):
    return sheet_range.worksheet.iter_rows(
        min_row=sheet_range.min_row, max_row=sheet_range.max_row,
        min_col=sheet_range.min_col, max_col=sheet_range.max_col,
        values_only=values_only,
    )


def read_grid(sheet_range: SheetRange) -> list[list]:
    """Read the range's current values as a row-major grid."""
    if sheet_range.is_empty:
        return []
    return [list(row) for row in _iter_cells(sheet_range, values_only=True)]


def cell_style(cell) -> CellStyle:
    """Extract the style attributes the table renderer copies."""
    font = cell.font
    fill = cell.fill
    background = None
    if getattr(fill, "fill_type", None) == "solid":
        background = sheet_color_to_hex(fill.fgColor)
    underline = font.u
    return CellStyle(
        bold=bool(font.b),
        italic=bool(font.i),
        strikethrough=bool(font.strike),
        underline=bool(underline) and underline != "none",
        font_family=font.name,
        font_size=float(font.sz) if font.sz else None,
        foreground=sheet_color_to_hex(font.color),
        background=background,
        vertical_alignment=cell.alignment.vertical,
    )


def read_styles(sheet_range: SheetRange) -> list[list[CellStyle]]:
    """Read per-cell styles, same shape as read_grid()."""
    if sheet_range.is_empty:
        return []
    return [[cell_style(c) for c in row] for row in _iter_cells(sheet_range)]


# ---------------------------------------------------------------------------
# Geometry
# ---------------------------------------------------------------------------

def column_width_to_pixels(width: float) -> int:
    """Convert a stored column width (character units) to pixels."""
    return int(((256 * width + int(128 / _MAX_DIGIT_WIDTH)) / 256)
               * _MAX_DIGIT_WIDTH)


def _column_dimension(worksheet, col: int):
    dims = worksheet.column_dimensions
    dim = dims.get(get_column_letter(col))
    if dim is not None:
        return dim
    # Loaded files may group consecutive columns under the first letter
    for candidate in dims.values():
        if candidate.min and candidate.max and candidate.min <= col <= candidate.max:
            return candidate
    return None


def column_pixels(worksheet, col: int) -> int:
    """Width of a 1-based column in pixels."""
    dim = _column_dimension(worksheet, col)
    if dim is not None and dim.width:
        return column_width_to_pixels(dim.width)
    default = worksheet.sheet_format.defaultColWidth
    if default:
        return column_width_to_pixels(default)
    return DEFAULT_COLUMN_PIXELS


def row_pixels(worksheet, row: int) -> int:
    """Height of a 1-based row in pixels."""
    dim = worksheet.row_dimensions.get(row)
    if dim is not None and dim.height:
        points = dim.height
    else:
        points = worksheet.sheet_format.defaultRowHeight or DEFAULT_ROW_POINTS
    return points_to_pixels(points)


def range_footprint(sheet_range: SheetRange) -> tuple[int, int]:
    """Width and height (EMU) the range occupies on its sheet."""
    ws = sheet_range.worksheet
    width_px = sum(column_pixels(ws, c)
                   for c in range(sheet_range.min_col, sheet_range.max_col + 1))
    height_px = sum(row_pixels(ws, r)
                    for r in range(sheet_range.min_row, sheet_range.max_row + 1))
    return pixels_to_EMU(width_px), pixels_to_EMU(height_px)


def chart_natural_size(sheet_chart: SheetChart) -> tuple[int, int]:
    """Width and height (EMU) of a chart as drawn on its sheet.

    Two-cell anchors are measured across the spanned columns/rows; one-cell
    and absolute anchors carry an explicit extent; charts added in code and
    not yet saved still hold a cell string and use their cm size.
    """
    chart = sheet_chart.chart
    ws = sheet_chart.worksheet
    anchor = chart.anchor

    if isinstance(anchor, TwoCellAnchor):
        start, end = anchor._from, anchor.to
        width = sum(pixels_to_EMU(column_pixels(ws, c + 1))
                    for c in range(start.col, end.col))
        height = sum(pixels_to_EMU(row_pixels(ws, r + 1))
                     for r in range(start.row, end.row))
        width += end.colOff - start.colOff
        height += end.rowOff - start.rowOff
        return max(width, 0), max(height, 0)

    ext = getattr(anchor, "ext", None)
    if ext is not None:
        return int(ext.cx or 0), int(ext.cy or 0)

    return cm_to_EMU(chart.width or 0), cm_to_EMU(chart.height or 0)


# ---------------------------------------------------------------------------
# Chart sources
# ---------------------------------------------------------------------------

@dataclass
class ChartSource:
    """Data and labels behind a sheet chart, resolved to plain values."""
    title: str | None = None
    categories: list = field(default_factory=list)
    series: list[tuple[str, list]] = field(default_factory=list)
    has_legend: bool = True
    legend_position: str | None = None


def read_reference(workbook, reference: str, default_sheet=None) -> list:
    """Resolve a reference such as ``'Sales 2026'!$B$2:$B$5`` to a flat list.

    Values are read row by row.  References without a sheet part resolve
    against ``default_sheet``.
    """
    sheet_part, _, cells = reference.rpartition("!")
    if sheet_part:
        name = sheet_part
        if name.startswith("'") and name.endswith("'"):
            name = name[1:-1].replace("''", "'")
        if name not in workbook.sheetnames:
            raise ConfigurationError(
                f"Chart reference {reference!r} points to missing sheet {name!r}"
            )
        ws = workbook[name]
    elif default_sheet is not None:
        ws = default_sheet
    else:
        raise ConfigurationError(f"Chart reference {reference!r} has no sheet")

    try:
        min_col, min_row, max_col, max_row = range_boundaries(cells.replace("$", ""))
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(
            f"Unsupported chart reference {reference!r}: {exc}"
        ) from exc

    return [
        value
        for row in ws.iter_rows(min_row=min_row, max_row=max_row,
                                min_col=min_col, max_col=max_col,
                                values_only=True)
        for value in row
    ]


def _text_of_title(title) -> str | None:
    if title is None:
        return None
    if isinstance(title, str):
        return title or None
    rich = getattr(getattr(title, "tx", None), "rich", None)
    if rich is None:
        return None
    lines = []
    for paragraph in rich.p or []:
        lines.append("".join(run.t or "" for run in (paragraph.r or [])))
    text = "\n".join(lines).strip()
    return text or None


def _series_name(series, workbook, worksheet, index: int) -> str:
    tx = series.tx
    if tx is not None:
        if tx.strRef is not None and tx.strRef.f:
            values = read_reference(workbook, tx.strRef.f, worksheet)
            if values and values[0] is not None:
                return format_scalar(values[0])
        if tx.v:
            return tx.v
    return f"Series {index + 1}"


def _category_reference(series) -> str | None:
    cat = series.cat
    if cat is None:
        return None
    for ref in (cat.strRef, cat.numRef):
        if ref is not None and ref.f:
            return ref.f
    return None


def read_chart_source(sheet_chart: SheetChart) -> ChartSource:
    """Resolve a sheet chart's title, categories and series values."""
    chart = sheet_chart.chart
    ws = sheet_chart.worksheet
    wb = ws.parent

    source = ChartSource(title=_text_of_title(chart.title))
    legend = chart.legend
    source.has_legend = legend is not None
    if legend is not None:
        source.legend_position = legend.position

    for idx, series in enumerate(chart.series):
        if not source.categories:
            cat_ref = _category_reference(series)
            if cat_ref:
                source.categories = [
                    "" if v is None else v
                    for v in read_reference(wb, cat_ref, ws)
                ]
        values = []
        if series.val is not None and series.val.numRef is not None \
                and series.val.numRef.f:
            values = read_reference(wb, series.val.numRef.f, ws)
        source.series.append((_series_name(series, wb, ws, idx), values))

    return source
