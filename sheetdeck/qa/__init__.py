"""QA validation package for SheetDeck.

Validates updated PPTX output - reports placeholder tokens that survived the
update and slides left without content.
"""

from .validator import (
    Issue,
    QAResult,
    QAValidator,
    validate_presentation,
)

__all__ = [
    "Issue",
    "QAResult",
    "QAValidator",
    "validate_presentation",
]
