"""Schema package - typed models shared by the readers and the updater.

- models.py: Core dataclasses (Registry, SheetRange, SheetChart, UpdateResult, ...)
- design_system.py: Scalar formatting and style/type lookup tables
- loader.py: YAML job file serialization/deserialization
"""

from .design_system import (
    CHART_TYPE_MAP,
    LEGEND_POSITION_MAP,
    VERTICAL_ANCHOR_MAP,
    chart_type_key,
    format_scalar,
    hex_to_rgb,
    legend_position,
    sheet_color_to_hex,
    vertical_anchor,
)
from .loader import load_job, save_job
from .models import (
    DEFAULT_SUBSTITUTIONS_SHEET,
    AppliedSubstitution,
    CellStyle,
    FoundPlaceholder,
    JobConfig,
    PlaceholderKind,
    Registry,
    ShapeState,
    SheetChart,
    SheetRange,
    UpdateResult,
)

__all__ = [
    # Models
    "DEFAULT_SUBSTITUTIONS_SHEET",
    "AppliedSubstitution",
    "CellStyle",
    "FoundPlaceholder",
    "JobConfig",
    "PlaceholderKind",
    "Registry",
    "ShapeState",
    "SheetChart",
    "SheetRange",
    "UpdateResult",
    # Loader
    "load_job",
    "save_job",
    # Formatting and lookups
    "CHART_TYPE_MAP",
    "LEGEND_POSITION_MAP",
    "VERTICAL_ANCHOR_MAP",
    "chart_type_key",
    "format_scalar",
    "hex_to_rgb",
    "legend_position",
    "sheet_color_to_hex",
    "vertical_anchor",
]
