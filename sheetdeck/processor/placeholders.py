"""Placeholder tokens - scanning text for ``<%...%>`` and classifying them.

A token is a chart placeholder when the text between its delimiters contains
``chart``, a table placeholder when it contains ``table``, and a plain text
placeholder otherwise.  Matching is case-sensitive.  Worksheet names are
classified with the same patterns so that a tab called ``<%chart_sales%>``
feeds the ``<%chart_sales%>`` token.
"""

import re

from pptx.shapes.autoshape import Shape

from sheetdeck.schema.models import FoundPlaceholder, PlaceholderKind


PLACEHOLDER_RE = re.compile(r"<%.*?%>", re.MULTILINE)

_CHART_RE = re.compile(r"<%.*chart.*%>")
_TABLE_RE = re.compile(r"<%.*table.*%>")


def find_placeholders(text: str) -> list[str]:
    """Return every token in ``text`` in order, repeats included."""
    if not text:
        return []
    return PLACEHOLDER_RE.findall(text)


def is_chart_name(name: str) -> bool:
    return bool(_CHART_RE.search(name or ""))


def is_table_name(name: str) -> bool:
    return bool(_TABLE_RE.search(name or ""))


def classify_placeholder(token: str) -> PlaceholderKind:
    """Classify a token (or worksheet name) as chart, table or text.

    Chart takes precedence when both substrings are present.
    """
    if is_chart_name(token):
        return PlaceholderKind.CHART
    if is_table_name(token):
        return PlaceholderKind.TABLE
    return PlaceholderKind.TEXT


def iter_text_shapes(slide):
    """Yield the text-bearing ``p:sp`` shapes of a slide.

    The shape list is snapshotted so callers may add or remove shapes while
    iterating.  Pictures, graphic frames, groups and connectors are skipped.
    """
    for shape in list(slide.shapes):
        if isinstance(shape, Shape) and shape.has_text_frame:
            yield shape


def scan_presentation(prs) -> list[FoundPlaceholder]:
    """List every placeholder token in a presentation without changing it."""
    found: list[FoundPlaceholder] = []
    for slide_index, slide in enumerate(prs.slides):
        for shape in iter_text_shapes(slide):
            for paragraph in shape.text_frame.paragraphs:
                for run in paragraph.runs:
                    for token in find_placeholders(run.text.strip()):
                        found.append(FoundPlaceholder(
                            slide_index=slide_index,
                            shape_name=shape.name,
                            token=token,
                            kind=classify_placeholder(token),
                        ))
    return found
