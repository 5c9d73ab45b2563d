"""Tests for the presentation updater (the placeholder walk)."""

import datetime

import pytest
from openpyxl import Workbook
from openpyxl.chart import BarChart, Reference
from pptx import Presentation
from pptx.util import Emu, Inches, Pt

from sheetdeck.errors import ConfigurationError
from sheetdeck.generator.pptx_updater import (
    PresentationUpdater,
    substitute_text,
    update_presentation,
)
from sheetdeck.processor.registry import build_registry
from sheetdeck.schema.models import PlaceholderKind, Registry


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def wb():
    wb = Workbook()
    subs = wb.active
    subs.title = "substitutions"
    subs.append(["<%name%>", "Acme Corp"])
    subs.append(["<%revenue%>", 1250000.0])
    subs.append(["<%date%>", datetime.datetime(2026, 1, 31)])
    subs.append(["<%blank%>", None])

    chart_ws = wb.create_sheet("<%chart_sales%>")
    for row in [["Month", "Sales"], ["Jan", 10], ["Feb", 20], ["Mar", 30]]:
        chart_ws.append(row)
    chart = BarChart()
    chart.add_data(Reference(chart_ws, min_col=2, min_row=1, max_row=4),
                   titles_from_data=True)
    chart.set_categories(Reference(chart_ws, min_col=1, min_row=2, max_row=4))
    chart.width = 20
    chart.height = 15
    chart_ws.add_chart(chart, "D2")

    table_ws = wb.create_sheet("<%table_kpis%>")
    for row in [["KPI", "Value"], ["NPS", 42]]:
        table_ws.append(row)
    return wb


@pytest.fixture
def prs():
    prs = Presentation()
    prs.slides.add_slide(prs.slide_layouts[6])
    return prs


def _textbox(slide, *paragraphs, width=Inches(6), height=Inches(4)):
    tb = slide.shapes.add_textbox(Inches(1), Inches(1), width, height)
    tf = tb.text_frame
    tf.text = paragraphs[0]
    for text in paragraphs[1:]:
        tf.add_paragraph().text = text
    return tb


def _texts(slide):
    return [s.text_frame.text for s in slide.shapes if s.has_text_frame]


# ---------------------------------------------------------------------------
# substitute_text
# ---------------------------------------------------------------------------

class TestSubstituteText:
    def test_every_occurrence(self, prs):
        tb = _textbox(prs.slides[0], "<%x%>-<%x%>")
        run = tb.text_frame.paragraphs[0].runs[0]
        substitute_text("<%x%>", 7, run)
        assert run.text == "7-7"

    def test_formats_value(self, prs):
        tb = _textbox(prs.slides[0], "<%x%>")
        run = tb.text_frame.paragraphs[0].runs[0]
        substitute_text("<%x%>", 3.0, run)
        assert run.text == "3"

    def test_absent_token_noop(self, prs):
        tb = _textbox(prs.slides[0], "plain")
        run = tb.text_frame.paragraphs[0].runs[0]
        substitute_text("<%x%>", "y", run)
        assert run.text == "plain"


# ---------------------------------------------------------------------------
# Text placeholders
# ---------------------------------------------------------------------------

class TestTextSubstitution:
    def test_inline_token(self, wb, prs):
        _textbox(prs.slides[0], "Hello <%name%>, welcome")
        result = update_presentation(prs, wb)
        assert _texts(prs.slides[0]) == ["Hello Acme Corp, welcome"]
        assert result.missing_sheet_tokens == []
        assert result.count(PlaceholderKind.TEXT) == 1

    def test_scalar_formatting(self, wb, prs):
        _textbox(prs.slides[0], "<%revenue%> on <%date%>")
        update_presentation(prs, wb)
        assert _texts(prs.slides[0]) == ["1250000 on 2026-01-31"]

    def test_blank_value(self, wb, prs):
        _textbox(prs.slides[0], "[<%blank%>]")
        update_presentation(prs, wb)
        assert _texts(prs.slides[0]) == ["[]"]

    def test_run_formatting_kept(self, wb, prs):
        tb = _textbox(prs.slides[0], "<%name%>")
        font = tb.text_frame.paragraphs[0].runs[0].font
        font.bold = True
        font.size = Pt(28)
        update_presentation(prs, wb)
        run = tb.text_frame.paragraphs[0].runs[0]
        assert run.text == "Acme Corp"
        assert run.font.bold is True
        assert run.font.size == Pt(28)

    def test_several_shapes_and_slides(self, wb, prs):
        _textbox(prs.slides[0], "<%name%>")
        slide2 = prs.slides.add_slide(prs.slide_layouts[6])
        _textbox(slide2, "Q: <%name%>")
        result = update_presentation(prs, wb)
        assert _texts(prs.slides[0]) == ["Acme Corp"]
        assert _texts(slide2) == ["Q: Acme Corp"]
        assert [s.slide_index for s in result.substitutions] == [0, 1]

    def test_idempotent(self, wb, prs):
        _textbox(prs.slides[0], "Hello <%name%>")
        update_presentation(prs, wb)
        second = update_presentation(prs, wb)
        assert _texts(prs.slides[0]) == ["Hello Acme Corp"]
        assert second.substitutions == []

    def test_table_cells_not_walked(self, wb, prs):
        frame = prs.slides[0].shapes.add_table(1, 1, 0, 0, Inches(2), Inches(1))
        frame.table.cell(0, 0).text = "<%name%>"
        result = update_presentation(prs, wb)
        assert frame.table.cell(0, 0).text == "<%name%>"
        assert result.substitutions == []


# ---------------------------------------------------------------------------
# Missing tokens
# ---------------------------------------------------------------------------

class TestMissingTokens:
    def test_logged_per_occurrence(self, wb, prs):
        _textbox(prs.slides[0], "<%x%> and <%x%>")
        result = update_presentation(prs, wb)
        assert result.missing_sheet_tokens == ["<%x%>", "<%x%>"]
        assert _texts(prs.slides[0]) == ["<%x%> and <%x%>"]

    def test_walk_continues_after_missing(self, wb, prs):
        _textbox(prs.slides[0], "<%ghost%> <%name%>")
        result = update_presentation(prs, wb)
        assert _texts(prs.slides[0]) == ["<%ghost%> Acme Corp"]
        assert result.missing_sheet_tokens == ["<%ghost%>"]

    def test_missing_chart_left_in_place(self, wb, prs):
        _textbox(prs.slides[0], "<%chart_missing%>")
        result = update_presentation(prs, wb)
        assert result.missing_sheet_tokens == ["<%chart_missing%>"]
        assert _texts(prs.slides[0]) == ["<%chart_missing%>"]

    def test_presentation_tokens_never_filled(self, wb, prs):
        _textbox(prs.slides[0], "<%name%>")
        assert update_presentation(prs, wb).missing_presentation_tokens == []


# ---------------------------------------------------------------------------
# Chart and table placeholders
# ---------------------------------------------------------------------------

class TestShapeReplacement:
    def test_chart(self, wb, prs):
        slide = prs.slides[0]
        _textbox(slide, "<%chart_sales%>", width=Emu(3600000), height=Emu(5400000))
        result = update_presentation(prs, wb)
        shapes = list(slide.shapes)
        assert len(shapes) == 1
        assert shapes[0].has_chart
        assert (shapes[0].width, shapes[0].height) == (3600000, 2700000)
        assert result.count(PlaceholderKind.CHART) == 1

    def test_table(self, wb, prs):
        slide = prs.slides[0]
        _textbox(slide, "<%table_kpis%>")
        result = update_presentation(prs, wb)
        shapes = list(slide.shapes)
        assert len(shapes) == 1
        assert shapes[0].has_table
        assert shapes[0].table.cell(1, 1).text == "42"
        assert result.count(PlaceholderKind.TABLE) == 1

    def test_rest_of_shape_skipped(self, wb, prs):
        _textbox(prs.slides[0], "<%chart_sales%>", "<%ghost%>")
        result = update_presentation(prs, wb)
        assert result.missing_sheet_tokens == []
        assert [s.kind for s in result.substitutions] == [PlaceholderKind.CHART]

    def test_one_replacement_per_shape(self, wb, prs):
        _textbox(prs.slides[0], "<%chart_sales%>", "<%table_kpis%>")
        result = update_presentation(prs, wb)
        assert [s.kind for s in result.substitutions] == [PlaceholderKind.CHART]
        assert not any(s.has_table for s in prs.slides[0].shapes)

    def test_text_before_chart(self, wb, prs):
        _textbox(prs.slides[0], "<%name%>", "<%chart_sales%>")
        result = update_presentation(prs, wb)
        assert [s.kind for s in result.substitutions] == [
            PlaceholderKind.TEXT, PlaceholderKind.CHART,
        ]
        assert len(prs.slides[0].shapes) == 1

    def test_other_shapes_still_walked(self, wb, prs):
        slide = prs.slides[0]
        _textbox(slide, "<%table_kpis%>")
        _textbox(slide, "By <%name%>")
        update_presentation(prs, wb)
        assert _texts(slide) == ["By Acme Corp"]

    def test_shape_name_recorded(self, wb, prs):
        tb = _textbox(prs.slides[0], "<%table_kpis%>")
        name = tb.name
        result = update_presentation(prs, wb)
        assert result.substitutions[0].shape_name == name


# ---------------------------------------------------------------------------
# Configuration errors
# ---------------------------------------------------------------------------

class TestConfigurationErrors:
    def test_text_without_substitutions_tab(self, wb, prs):
        wb["substitutions"].title = "values"
        _textbox(prs.slides[0], "<%name%>")
        with pytest.raises(ConfigurationError, match="no substitutions sheet"):
            update_presentation(prs, wb)

    def test_charts_work_without_substitutions_tab(self, wb, prs):
        wb["substitutions"].title = "values"
        _textbox(prs.slides[0], "<%chart_sales%>")
        result = update_presentation(prs, wb)
        assert result.count(PlaceholderKind.CHART) == 1

    def test_empty_table_aborts(self, wb, prs):
        wb.create_sheet("<%table_blank%>")
        _textbox(prs.slides[0], "<%table_blank%>")
        with pytest.raises(ConfigurationError):
            update_presentation(prs, wb)

    def test_earlier_substitutions_kept_on_abort(self, wb, prs):
        wb.create_sheet("<%table_blank%>")
        _textbox(prs.slides[0], "<%name%>")
        _textbox(prs.slides[0], "<%table_blank%>")
        with pytest.raises(ConfigurationError):
            update_presentation(prs, wb)
        assert _texts(prs.slides[0])[0] == "Acme Corp"

    def test_chart_token_with_scalar_value(self, prs):
        _textbox(prs.slides[0], "<%chart_x%>")
        updater = PresentationUpdater(Registry({"<%chart_x%>": "not a chart"}))
        with pytest.raises(ConfigurationError, match="chart placeholder"):
            updater.update(prs)

    def test_text_token_with_range_value(self, wb, prs):
        registry = build_registry(wb)
        table = registry["<%table_kpis%>"]
        _textbox(prs.slides[0], "<%name%>")
        updater = PresentationUpdater(Registry({"<%name%>": table}))
        with pytest.raises(ConfigurationError, match="text placeholder"):
            updater.update(prs)


class TestUpdateResult:
    def test_summary(self, wb, prs):
        _textbox(prs.slides[0], "<%name%> <%ghost%>")
        _textbox(prs.slides[0], "<%table_kpis%>")
        result = update_presentation(prs, wb)
        assert result.summary() == (
            "1 text, 0 chart, 1 table substitution(s); 1 missing token(s)"
        )

    def test_to_dict(self, wb, prs):
        _textbox(prs.slides[0], "<%name%>")
        d = update_presentation(prs, wb).to_dict()
        assert d["missing_sheet_tokens"] == []
        assert d["substitutions"][0]["token"] == "<%name%>"
        assert d["substitutions"][0]["kind"] == "text"
