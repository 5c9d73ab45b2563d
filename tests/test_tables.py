"""Tests for table substitution."""

import pytest
from openpyxl import Workbook
from openpyxl.styles import Alignment, Font, PatternFill
from pptx import Presentation
from pptx.dml.color import RGBColor
from pptx.enum.text import MSO_ANCHOR
from pptx.util import Emu, Inches, Pt

from sheetdeck.errors import ConfigurationError
from sheetdeck.generator.shapes import Box
from sheetdeck.generator.tables import (
    fit_table_size,
    style_table_cell,
    substitute_table,
)
from sheetdeck.processor.sheets import used_range
from sheetdeck.schema.models import CellStyle


# 400 x 300 px
BOX_WIDTH = Emu(3810000)
BOX_HEIGHT = Emu(2857500)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def table_ws():
    ws = Workbook().active
    ws.title = "<%table1%>"
    for row in [["Region", "Revenue"], ["North", 100], ["South", 200.5]]:
        ws.append(row)
    ws.column_dimensions["A"].width = 35.7
    ws.column_dimensions["B"].width = 35.7
    ws.row_dimensions[1].height = 18.75
    ws.row_dimensions[2].height = 18.75
    ws.row_dimensions[3].height = 37.5
    ws["A1"].font = Font(bold=True)
    ws["A1"].fill = PatternFill(fill_type="solid", fgColor="FF0000")
    ws["B3"].font = Font(italic=True, color="FF0000FF", size=9)
    ws["B3"].alignment = Alignment(vertical="bottom")
    return ws


@pytest.fixture
def slide_and_placeholder():
    prs = Presentation()
    slide = prs.slides.add_slide(prs.slide_layouts[6])
    placeholder = slide.shapes.add_textbox(Inches(1), Inches(2), BOX_WIDTH, BOX_HEIGHT)
    placeholder.text_frame.text = "<%table1%>"
    return slide, placeholder


# ---------------------------------------------------------------------------
# Geometry
# ---------------------------------------------------------------------------

class TestFitTableSize:
    def test_caps_each_dimension(self):
        box = Box(0, 0, 100, 300)
        assert fit_table_size((500, 100), box) == (100, 100)

    def test_fits(self):
        box = Box(0, 0, 1000, 1000)
        assert fit_table_size((500, 100), box) == (500, 100)


# ---------------------------------------------------------------------------
# substitute_table
# ---------------------------------------------------------------------------

class TestSubstituteTable:
    def test_placeholder_removed(self, table_ws, slide_and_placeholder):
        slide, placeholder = slide_and_placeholder
        frame = substitute_table(slide, placeholder, used_range(table_ws))
        shapes = list(slide.shapes)
        assert len(shapes) == 1
        assert shapes[0].shape_id == frame.shape_id
        assert shapes[0].has_table

    def test_dimensions(self, table_ws, slide_and_placeholder):
        slide, placeholder = slide_and_placeholder
        table = substitute_table(slide, placeholder, used_range(table_ws)).table
        assert len(table.rows) == 3
        assert len(table.columns) == 2

    def test_position_is_placeholder_origin(self, table_ws, slide_and_placeholder):
        slide, placeholder = slide_and_placeholder
        frame = substitute_table(slide, placeholder, used_range(table_ws))
        assert frame.left == Inches(1)
        assert frame.top == Inches(2)

    def test_size_capped_by_box(self, table_ws, slide_and_placeholder):
        # Natural footprint is 500 x 100 px; the box is 400 x 300 px
        slide, placeholder = slide_and_placeholder
        frame = substitute_table(slide, placeholder, used_range(table_ws))
        assert frame.width == 3810000
        assert frame.height == 952500

    def test_cell_text(self, table_ws, slide_and_placeholder):
        slide, placeholder = slide_and_placeholder
        table = substitute_table(slide, placeholder, used_range(table_ws)).table
        assert table.cell(0, 0).text == "Region"
        assert table.cell(1, 1).text == "100"
        assert table.cell(2, 1).text == "200.5"

    def test_header_style(self, table_ws, slide_and_placeholder):
        slide, placeholder = slide_and_placeholder
        table = substitute_table(slide, placeholder, used_range(table_ws)).table
        cell = table.cell(0, 0)
        assert cell.text_frame.paragraphs[0].runs[0].font.bold is True
        assert cell.fill.fore_color.rgb == RGBColor(0xFF, 0x00, 0x00)
        assert cell.vertical_anchor == MSO_ANCHOR.MIDDLE

    def test_body_style(self, table_ws, slide_and_placeholder):
        slide, placeholder = slide_and_placeholder
        table = substitute_table(slide, placeholder, used_range(table_ws)).table
        cell = table.cell(2, 1)
        font = cell.text_frame.paragraphs[0].runs[0].font
        assert font.italic is True
        assert font.size == Pt(9)
        assert font.color.rgb == RGBColor(0x00, 0x00, 0xFF)
        assert cell.vertical_anchor == MSO_ANCHOR.BOTTOM

    def test_banding_off(self, table_ws, slide_and_placeholder):
        slide, placeholder = slide_and_placeholder
        table = substitute_table(slide, placeholder, used_range(table_ws)).table
        assert table.first_row is False
        assert table.horz_banding is False

    def test_reads_values_at_render_time(self, table_ws, slide_and_placeholder):
        slide, placeholder = slide_and_placeholder
        rng = used_range(table_ws)
        table_ws["A2"] = "East"
        table = substitute_table(slide, placeholder, rng).table
        assert table.cell(1, 0).text == "East"

    def test_empty_range_rejected(self, slide_and_placeholder):
        slide, placeholder = slide_and_placeholder
        ws = Workbook().active
        ws.title = "<%table_blank%>"
        with pytest.raises(ConfigurationError, match="empty"):
            substitute_table(slide, placeholder, used_range(ws))
        # Nothing was changed
        assert len(slide.shapes) == 1
        assert slide.shapes[0].text_frame.text == "<%table1%>"


# ---------------------------------------------------------------------------
# style_table_cell
# ---------------------------------------------------------------------------

class TestStyleTableCell:
    @pytest.fixture
    def cell(self):
        prs = Presentation()
        slide = prs.slides.add_slide(prs.slide_layouts[6])
        table = slide.shapes.add_table(1, 1, 0, 0, Inches(2), Inches(1)).table
        cell = table.cell(0, 0)
        cell.text = "x"
        return cell

    def test_strikethrough(self, cell):
        style_table_cell(cell, CellStyle(strikethrough=True))
        rPr = cell.text_frame.paragraphs[0].runs[0].font._rPr
        assert rPr.get("strike") == "sngStrike"

    def test_underline_and_family(self, cell):
        style_table_cell(cell, CellStyle(underline=True, font_family="Arial"))
        font = cell.text_frame.paragraphs[0].runs[0].font
        assert font.underline is True
        assert font.name == "Arial"

    def test_no_background_leaves_fill(self, cell):
        style_table_cell(cell, CellStyle())
        assert cell.fill.type is None

    def test_top_alignment(self, cell):
        style_table_cell(cell, CellStyle(vertical_alignment="top"))
        assert cell.vertical_anchor == MSO_ANCHOR.TOP
