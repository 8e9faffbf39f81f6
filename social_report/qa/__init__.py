"""Read-back QA for generated reports.

Opens a finished PPTX with python-pptx and checks slide count, canvas
dimensions, empty slides and footer page numbering.
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
