"""
errors.py — Exception taxonomy for report generation.

Every failure surfaces to the caller of a generate_* entry point as one of
these (or as an unchanged ReportLab/backend exception). No partial document
is ever returned.
"""


class ReportGenerationError(Exception):
    """Base class for all engine errors."""


class ReportDataError(ReportGenerationError, ValueError):
    """Raised when input data violates the caller contract.

    Raised before any drawing begins, so a failed validation never produces
    a page.
    """

    def __init__(self, errors: list[str]):
        self.errors = errors
        super().__init__(f"Report data validation failed: {'; '.join(errors)}")


class TableLayoutError(ReportGenerationError, ValueError):
    """Raised when table rows or column widths do not match the header."""


class GenerationCancelled(ReportGenerationError):
    """Raised at a section boundary when the cancellation token is set."""

    def __init__(self, stage: str):
        self.stage = stage
        super().__init__(f"Report generation cancelled before '{stage}'")


class DocumentFinalizedError(ReportGenerationError):
    """Raised when a finalized document is drawn on or decorated again."""
