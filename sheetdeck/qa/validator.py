"""QA validator - inspects an updated PPTX for placeholders left behind.

A placeholder survives an update when the workbook has no entry for it, or
when formatting split its text across several runs.  Either way the deck is
not ready to send.  The validator reads the presentation back with
python-pptx and reports every leftover token, including those inside tables
and grouped shapes.

Usage::

    from sheetdeck.qa.validator import QAValidator

    validator = QAValidator(registry)
    result = validator.validate(pptx_bytes)
    assert result.passed, result.summary()
"""

import io
from collections import Counter
from dataclasses import dataclass, field

from pptx import Presentation
from pptx.shapes.group import GroupShape

from sheetdeck.processor.placeholders import classify_placeholder, find_placeholders
from sheetdeck.schema.models import Registry


# ---------------------------------------------------------------------------
# Result types
# ---------------------------------------------------------------------------

@dataclass
class Issue:
    """A single QA issue found during validation."""
    severity: str       # "error" or "warning"
    slide_index: int    # -1 for presentation-level issues
    shape_name: str     # "" for slide-level issues
    category: str       # e.g. "unresolved_token", "empty_slide"
    message: str

    def __str__(self) -> str:
        loc = f"slide {self.slide_index}"
        if self.shape_name:
            loc += f" / {self.shape_name}"
        return f"[{self.severity.upper()}] {loc}: {self.message}"


@dataclass
class QAResult:
    """Aggregated result of QA validation."""
    issues: list[Issue] = field(default_factory=list)

    @property
    def errors(self) -> list[Issue]:
        return [i for i in self.issues if i.severity == "error"]

    @property
    def warnings(self) -> list[Issue]:
        return [i for i in self.issues if i.severity == "warning"]

    @property
    def passed(self) -> bool:
        return len(self.errors) == 0

    @property
    def error_count(self) -> int:
        return len(self.errors)

    @property
    def warning_count(self) -> int:
        return len(self.warnings)

    def summary(self) -> str:
        """One-line summary string."""
        status = "PASS" if self.passed else "FAIL"
        return (
            f"QA {status}: {self.error_count} error(s), "
            f"{self.warning_count} warning(s)"
        )

    def report(self) -> str:
        """Multi-line report of all issues."""
        lines = [self.summary()]
        for issue in self.issues:
            lines.append(f"  {issue}")
        return "\n".join(lines)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _iter_shapes(shapes):
    """Yield shapes depth-first, descending into groups."""
    for shape in shapes:
        if isinstance(shape, GroupShape):
            yield from _iter_shapes(shape.shapes)
        else:
            yield shape


def _iter_paragraphs(shape):
    """Yield the paragraphs of a shape, table cells included."""
    if shape.has_text_frame:
        yield from shape.text_frame.paragraphs
    if shape.has_table:
        for row in shape.table.rows:
            for cell in row.cells:
                yield from cell.text_frame.paragraphs


# ---------------------------------------------------------------------------
# QAValidator
# ---------------------------------------------------------------------------

class QAValidator:
    """Checks an updated presentation for leftover placeholder tokens.

    Tokens are searched in whole paragraphs.  A token that only appears once
    the runs are joined was split by formatting, which the updater cannot
    resolve; it is reported separately so the template can be fixed.

    Parameters
    ----------
    registry : Registry, optional
        The registry used for the update.  When given, messages say whether
        a leftover token had a workbook entry.
    """

    def __init__(self, registry: Registry | None = None) -> None:
        self.registry = registry

    def validate(self, pptx_bytes: bytes) -> QAResult:
        """Run all validation checks on a saved PPTX."""
        prs = Presentation(io.BytesIO(pptx_bytes))
        return self.validate_presentation(prs)

    def validate_presentation(self, prs) -> QAResult:
        """Run all validation checks on an open Presentation."""
        result = QAResult()
        if len(prs.slides) == 0:
            result.issues.append(Issue(
                severity="warning",
                slide_index=-1,
                shape_name="",
                category="no_slides",
                message="Presentation has no slides",
            ))
        for slide_index, slide in enumerate(prs.slides):
            self._check_slide(slide_index, slide, result)
        return result

    # ------------------------------------------------------------------
    # Per-slide checks
    # ------------------------------------------------------------------

    def _check_slide(self, slide_index: int, slide, result: QAResult) -> None:
        if len(slide.shapes) == 0:
            result.issues.append(Issue(
                severity="warning",
                slide_index=slide_index,
                shape_name="",
                category="empty_slide",
                message="Slide has no shapes",
            ))
            return

        for shape in _iter_shapes(slide.shapes):
            for paragraph in _iter_paragraphs(shape):
                self._check_paragraph(slide_index, shape.name, paragraph, result)

    def _check_paragraph(self, slide_index: int, shape_name: str, paragraph,
                         result: QAResult) -> None:
        in_runs = Counter()
        for run in paragraph.runs:
            in_runs.update(find_placeholders(run.text))
        joined = "".join(run.text for run in paragraph.runs)

        for token in find_placeholders(joined):
            split = in_runs[token] == 0
            if not split:
                in_runs[token] -= 1
            result.issues.append(
                self._leftover_issue(slide_index, shape_name, token, split)
            )

    def _leftover_issue(self, slide_index: int, shape_name: str, token: str,
                        split: bool) -> Issue:
        kind = classify_placeholder(token).value
        has_entry = self.registry is not None and token in self.registry
        if split:
            detail = " (has a workbook entry)" if has_entry else ""
            return Issue(
                severity="error",
                slide_index=slide_index,
                shape_name=shape_name,
                category="split_token",
                message=(
                    f"{kind} placeholder {token} is split across formatting "
                    f"runs{detail}; retype it with uniform formatting"
                ),
            )
        message = f"{kind} placeholder {token} was not substituted"
        if self.registry is not None and not has_entry:
            message = f"{kind} placeholder {token} has no workbook entry"
        return Issue(
            severity="error",
            slide_index=slide_index,
            shape_name=shape_name,
            category="unresolved_token",
            message=message,
        )


# ---------------------------------------------------------------------------
# Convenience function
# ---------------------------------------------------------------------------

def validate_presentation(pptx_bytes: bytes,
                          registry: Registry | None = None) -> QAResult:
    """One-shot convenience: validate PPTX bytes."""
    return QAValidator(registry).validate(pptx_bytes)
