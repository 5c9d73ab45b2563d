"""Presentation updater - fills a template's placeholder tokens from a workbook.

Walks every slide, every text-bearing shape and every text run, finds
``<%...%>`` tokens and replaces them from the registry:

- text tokens are replaced inside the run, keeping the run's formatting
- chart and table tokens replace the whole shape; once that happens the
  shape is done and its remaining runs are not visited
- tokens without a registry entry are left in place and logged

Usage::

    from openpyxl import load_workbook
    from pptx import Presentation
    from sheetdeck.generator.pptx_updater import update_presentation

    prs = Presentation("template.pptx")
    wb = load_workbook("data.xlsx", data_only=True)
    result = update_presentation(prs, wb)
    prs.save("report.pptx")

    print(result.missing_sheet_tokens)
"""

from typing import Any

from sheetdeck.errors import ConfigurationError
from sheetdeck.processor.placeholders import (
    classify_placeholder,
    find_placeholders,
    iter_text_shapes,
)
from sheetdeck.processor.registry import build_registry
from sheetdeck.schema.design_system import format_scalar
from sheetdeck.schema.models import (
    DEFAULT_SUBSTITUTIONS_SHEET,
    AppliedSubstitution,
    PlaceholderKind,
    Registry,
    ShapeState,
    SheetChart,
    SheetRange,
    UpdateResult,
)

from .charts import substitute_chart
from .tables import substitute_table


_MISSING = object()


# ---------------------------------------------------------------------------
# Text substitution
# ---------------------------------------------------------------------------

def substitute_text(token: str, value: Any, run) -> None:
    """Replace every occurrence of ``token`` in a run with ``value``.

    Formatting lives on the run, so the replacement inherits it.
    """
    text = run.text
    if token in text:
        run.text = text.replace(token, format_scalar(value))


# ---------------------------------------------------------------------------
# PresentationUpdater
# ---------------------------------------------------------------------------

class PresentationUpdater:
    """Applies a registry to a presentation.

    Parameters
    ----------
    registry : Registry
        Token resolutions for this update cycle, usually from
        ``build_registry``.
    """

    def __init__(self, registry: Registry) -> None:
        self.registry = registry

    def update(self, prs) -> UpdateResult:
        """Substitute every resolvable token in ``prs`` in place.

        Returns
        -------
        UpdateResult
            Tokens that had no registry entry, and the substitutions made.

        Raises
        ------
        ConfigurationError
            On a text lookup without a substitutions tab, an empty table
            range, an unusable chart, or a registry value of the wrong kind.
        """
        result = UpdateResult()
        for slide_index, slide in enumerate(prs.slides):
            for shape in iter_text_shapes(slide):
                self._update_shape(slide_index, slide, shape, result)
        return result

    # ------------------------------------------------------------------
    # Per-shape walk
    # ------------------------------------------------------------------

    def _update_shape(self, slide_index: int, slide, shape,
                      result: UpdateResult) -> ShapeState:
        """Visit the runs of one shape until a chart/table replaces it."""
        state = ShapeState.SCANNING
        shape_name = shape.name

        for paragraph in shape.text_frame.paragraphs:
            for run in paragraph.runs:
                tokens = find_placeholders(run.text.strip())
                for token in tokens:
                    kind = classify_placeholder(token)
                    value = self._resolve(token, kind)
                    if value is _MISSING:
                        result.missing_sheet_tokens.append(token)
                        continue

                    if kind == PlaceholderKind.CHART:
                        substitute_chart(slide, shape, value)
                        state = ShapeState.RESOLVED
                    elif kind == PlaceholderKind.TABLE:
                        substitute_table(slide, shape, value)
                        state = ShapeState.RESOLVED
                    else:
                        substitute_text(token, value, run)

                    result.substitutions.append(AppliedSubstitution(
                        slide_index=slide_index,
                        shape_name=shape_name,
                        token=token,
                        kind=kind,
                    ))
                    if state == ShapeState.RESOLVED:
                        return state

        return ShapeState.EXHAUSTED

    def _resolve(self, token: str, kind: PlaceholderKind) -> Any:
        """Look up a token; _MISSING when the registry has no entry."""
        if kind == PlaceholderKind.TEXT and not self.registry.has_substitutions:
            raise ConfigurationError(
                f"Cannot resolve {token!r}: workbook has no substitutions sheet"
            )
        if token not in self.registry:
            return _MISSING

        value = self.registry[token]
        expected = {
            PlaceholderKind.CHART: SheetChart,
            PlaceholderKind.TABLE: SheetRange,
        }.get(kind)
        if expected is not None and not isinstance(value, expected):
            raise ConfigurationError(
                f"{token!r} is a {kind.value} placeholder but resolves to "
                f"{type(value).__name__}"
            )
        if expected is None and isinstance(value, (SheetChart, SheetRange)):
            raise ConfigurationError(
                f"{token!r} is a text placeholder but resolves to "
                f"{type(value).__name__}"
            )
        return value


# ---------------------------------------------------------------------------
# Convenience function
# ---------------------------------------------------------------------------

def update_presentation(prs, workbook,
                        substitutions_sheet: str = DEFAULT_SUBSTITUTIONS_SHEET
                        ) -> UpdateResult:
    """One-shot convenience: build the registry and update ``prs``."""
    registry = build_registry(workbook, substitutions_sheet)
    return PresentationUpdater(registry).update(prs)
