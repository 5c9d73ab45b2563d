"""SheetDeck - fill PowerPoint templates from an Excel workbook.

Placeholder tokens (``<%name%>``, ``<%chart_sales%>``, ``<%table_kpis%>``) in a
template are replaced with workbook values, charts and styled tables.
"""

from .errors import ConfigurationError
from .generator.pptx_updater import PresentationUpdater, update_presentation
from .processor.registry import build_registry
from .schema.models import PlaceholderKind, Registry, UpdateResult

__all__ = [
    "ConfigurationError",
    "PlaceholderKind",
    "PresentationUpdater",
    "Registry",
    "UpdateResult",
    "build_registry",
    "update_presentation",
]
