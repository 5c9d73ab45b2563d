"""Presentation generator package - placeholder substitution engine.

Consumes a token registry and mutates a python-pptx Presentation in place.

Modules:
    pptx_updater: Presentation walker and text substitution
    tables: Table substitution (sheet range -> styled table)
    charts: Chart substitution (sheet chart -> native chart)
"""

from .charts import build_chart_data, scale_to_fit, substitute_chart
from .pptx_updater import PresentationUpdater, substitute_text, update_presentation
from .tables import fit_table_size, style_table_cell, substitute_table

__all__ = [
    "PresentationUpdater",
    "update_presentation",
    "substitute_text",
    "substitute_table",
    "substitute_chart",
    "build_chart_data",
    "scale_to_fit",
    "fit_table_size",
    "style_table_cell",
]
