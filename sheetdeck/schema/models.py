"""Core models - the contract between the workbook readers and the updater.

Defines what a placeholder token can resolve to (a scalar, a sheet chart or a
sheet range), the registry holding those resolutions for one update cycle,
and the result returned when a presentation has been updated.
"""

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class PlaceholderKind(Enum):
    """What a placeholder token is replaced with."""
    TEXT = "text"      # Scalar from the substitutions tab
    CHART = "chart"    # First chart of a chart tab
    TABLE = "table"    # Used range of a table tab


class ShapeState(Enum):
    """Progress of the walker through a single shape."""
    SCANNING = "scanning"
    RESOLVED = "resolved"     # A chart or table replaced the shape
    EXHAUSTED = "exhausted"   # Every run was visited


# ---------------------------------------------------------------------------
# Cell styling
# ---------------------------------------------------------------------------

@dataclass
class CellStyle:
    """Style attributes read from a single workbook cell."""
    bold: bool = False
    italic: bool = False
    strikethrough: bool = False
    underline: bool = False
    font_family: str | None = None
    font_size: float | None = None
    foreground: str | None = None          # "#RRGGBB"
    background: str | None = None          # "#RRGGBB", solid fills only
    vertical_alignment: str | None = None  # top, center, bottom, ...

    def to_dict(self) -> dict:
        d: dict[str, Any] = {}
        for key in ("bold", "italic", "strikethrough", "underline"):
            if getattr(self, key):
                d[key] = True
        for key in ("font_family", "font_size", "foreground", "background",
                    "vertical_alignment"):
            value = getattr(self, key)
            if value is not None:
                d[key] = value
        return d


# ---------------------------------------------------------------------------
# Registry values
# ---------------------------------------------------------------------------

@dataclass
class SheetRange:
    """A rectangular cell range on a worksheet, 1-based and inclusive.

    Only the bounds are stored; values and styles are read when the range is
    rendered so they reflect the workbook at that moment.
    """
    worksheet: Any
    min_row: int
    min_col: int
    max_row: int
    max_col: int

    @property
    def num_rows(self) -> int:
        return max(self.max_row - self.min_row + 1, 0)

    @property
    def num_cols(self) -> int:
        return max(self.max_col - self.min_col + 1, 0)

    @property
    def is_empty(self) -> bool:
        return self.num_rows == 0 or self.num_cols == 0

    @property
    def title(self) -> str:
        return self.worksheet.title


@dataclass
class SheetChart:
    """A chart found on a worksheet, together with the sheet holding it."""
    chart: Any
    worksheet: Any

    @property
    def title(self) -> str:
        return self.worksheet.title


class Registry(Mapping):
    """Token -> resolved value for one update cycle.

    Values are scalars (str, numbers, dates, bools), :class:`SheetChart` or
    :class:`SheetRange`.  Keys are the raw tokens, delimiters included.

    ``has_substitutions`` is False when the workbook had no substitutions
    tab; text lookups are then a configuration error.
    """

    def __init__(self, entries: dict[str, Any] | None = None,
                 has_substitutions: bool = True) -> None:
        self._entries: dict[str, Any] = dict(entries or {})
        self.has_substitutions = has_substitutions

    def __getitem__(self, token: str) -> Any:
        return self._entries[token]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return (f"Registry({len(self.scalars())} scalar(s), "
                f"{len(self.charts())} chart(s), {len(self.ranges())} range(s))")

    def scalars(self) -> dict[str, Any]:
        return {k: v for k, v in self._entries.items()
                if not isinstance(v, (SheetChart, SheetRange))}

    def charts(self) -> dict[str, SheetChart]:
        return {k: v for k, v in self._entries.items()
                if isinstance(v, SheetChart)}

    def ranges(self) -> dict[str, SheetRange]:
        return {k: v for k, v in self._entries.items()
                if isinstance(v, SheetRange)}


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------

@dataclass
class AppliedSubstitution:
    """One placeholder that was replaced during a walk."""
    slide_index: int
    shape_name: str
    token: str
    kind: PlaceholderKind

    def to_dict(self) -> dict:
        return {"slide_index": self.slide_index, "shape_name": self.shape_name,
                "token": self.token, "kind": self.kind.value}


@dataclass
class FoundPlaceholder:
    """A placeholder token seen in a template (dry run, nothing replaced)."""
    slide_index: int
    shape_name: str
    token: str
    kind: PlaceholderKind


@dataclass
class UpdateResult:
    """Outcome of one update cycle.

    ``missing_sheet_tokens`` lists every token occurrence with no registry
    entry, in walk order.  ``missing_presentation_tokens`` is part of the
    result shape but the walk never fills it.
    """
    missing_sheet_tokens: list[str] = field(default_factory=list)
    missing_presentation_tokens: list[str] = field(default_factory=list)
    substitutions: list[AppliedSubstitution] = field(default_factory=list)

    def count(self, kind: PlaceholderKind) -> int:
        return sum(1 for s in self.substitutions if s.kind == kind)

    def summary(self) -> str:
        """One-line summary string."""
        return (
            f"{self.count(PlaceholderKind.TEXT)} text, "
            f"{self.count(PlaceholderKind.CHART)} chart, "
            f"{self.count(PlaceholderKind.TABLE)} table substitution(s); "
            f"{len(self.missing_sheet_tokens)} missing token(s)"
        )

    def to_dict(self) -> dict:
        return {
            "missing_sheet_tokens": list(self.missing_sheet_tokens),
            "missing_presentation_tokens": list(self.missing_presentation_tokens),
            "substitutions": [s.to_dict() for s in self.substitutions],
        }


# ---------------------------------------------------------------------------
# Job configuration
# ---------------------------------------------------------------------------

DEFAULT_SUBSTITUTIONS_SHEET = "substitutions"


@dataclass
class JobConfig:
    """Files and options for one update run."""
    template: str | None = None
    workbook: str | None = None
    output: str | None = None
    substitutions_sheet: str = DEFAULT_SUBSTITUTIONS_SHEET

    def to_dict(self) -> dict:
        d: dict[str, Any] = {}
        for key in ("template", "workbook", "output"):
            value = getattr(self, key)
            if value is not None:
                d[key] = value
        if self.substitutions_sheet != DEFAULT_SUBSTITUTIONS_SHEET:
            d["substitutions_sheet"] = self.substitutions_sheet
        return d

    @classmethod
    def from_dict(cls, d: dict) -> "JobConfig":
        return cls(
            template=d.get("template"),
            workbook=d.get("workbook"),
            output=d.get("output"),
            substitutions_sheet=d.get("substitutions_sheet",
                                      DEFAULT_SUBSTITUTIONS_SHEET),
        )
