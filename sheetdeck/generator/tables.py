"""Table substitution - replaces a placeholder shape with a sheet range.

The new table sits at the placeholder's top-left corner.  Its size is the
range's footprint on the sheet, capped by the placeholder's box in each
dimension; python-pptx spreads that size evenly across rows and columns.
Cell text and style (font, colors, fill, vertical alignment) come from the
source cells.

Usage::

    from sheetdeck.generator.tables import substitute_table

    frame = substitute_table(slide, placeholder_shape, registry["<%table_kpis%>"])
"""

from __future__ import annotations

from pptx.util import Emu, Pt

from sheetdeck.errors import ConfigurationError
from sheetdeck.processor.sheets import range_footprint, read_grid, read_styles
from sheetdeck.schema.design_system import format_scalar, hex_to_rgb, vertical_anchor
from sheetdeck.schema.models import CellStyle, SheetRange

from .shapes import Box, remove_shape


# ---------------------------------------------------------------------------
# Geometry
# ---------------------------------------------------------------------------

def fit_table_size(natural: tuple[int, int], box: Box) -> tuple[int, int]:
    """Component-wise minimum of the natural footprint and the box size."""
    width, height = natural
    return min(width, box.width), min(height, box.height)


# ---------------------------------------------------------------------------
# Styling
# ---------------------------------------------------------------------------

def _apply_strikethrough(font, enabled: bool) -> None:
    # python-pptx has no strike property; set the a:rPr attribute directly
    font._rPr.set("strike", "sngStrike" if enabled else "noStrike")


def _style_run(run, style: CellStyle) -> None:
    font = run.font
    font.bold = style.bold
    font.italic = style.italic
    font.underline = style.underline
    _apply_strikethrough(font, style.strikethrough)
    if style.font_family:
        font.name = style.font_family
    if style.font_size:
        font.size = Pt(style.font_size)
    if style.foreground:
        font.color.rgb = hex_to_rgb(style.foreground)


def style_table_cell(cell, style: CellStyle) -> None:
    """Copy a source cell's style onto a python-pptx table cell."""
    for paragraph in cell.text_frame.paragraphs:
        for run in paragraph.runs:
            _style_run(run, style)

    if style.background:
        cell.fill.solid()
        cell.fill.fore_color.rgb = hex_to_rgb(style.background)

    cell.vertical_anchor = vertical_anchor(style.vertical_alignment)


# ---------------------------------------------------------------------------
# Substitution
# ---------------------------------------------------------------------------

def substitute_table(slide, placeholder, sheet_range: SheetRange):
    """Replace ``placeholder`` on ``slide`` with a table built from a range.

    Returns the new table's GraphicFrame.

    Raises:
        ConfigurationError: If the range holds no rows or no columns.
    """
    grid = read_grid(sheet_range)
    if not grid or not grid[0]:
        raise ConfigurationError(
            f"Table range on sheet {sheet_range.title!r} is empty"
        )
    styles = read_styles(sheet_range)

    box = Box.of(placeholder)
    width, height = fit_table_size(range_footprint(sheet_range), box)

    num_rows, num_cols = len(grid), len(grid[0])
    left, top = box.origin
    frame = slide.shapes.add_table(num_rows, num_cols, left, top,
                                   Emu(width), Emu(height))
    table = frame.table
    # The default table style would recolor the header row and bands
    table.first_row = False
    table.horz_banding = False

    for r, row in enumerate(grid):
        for c, value in enumerate(row):
            cell = table.cell(r, c)
            cell.text = format_scalar(value)
            style_table_cell(cell, styles[r][c])

    remove_shape(placeholder)
    return frame
