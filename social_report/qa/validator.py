"""QA validator - inspects a generated report PPTX.

Checks that the file opens, that it has the expected number of slides on
the configured canvas, that no slide is empty and that the footer page
numbers increase from slide to slide. Uses python-pptx to read the file
back.

Usage::

    from social_report.qa.validator import QAValidator

    validator = QAValidator(settings)
    result = validator.validate(report.content, expected_slides=14)
    assert result.passed, result.report()
"""

import io
import re
from dataclasses import dataclass, field

from pptx import Presentation
from pptx.util import Inches

from ..schema.models import ReportSettings

# Footer page numbers sit in the bottom-right corner as two digits.
_PAGE_RE = re.compile(r"^\d{2,3}$")
_FOOTER_MIN_LEFT = Inches(8.5)
_FOOTER_MIN_TOP = Inches(4.9)


# ---------------------------------------------------------------------------
# Result types
# ---------------------------------------------------------------------------

@dataclass
class Issue:
    """A single QA issue found during validation."""
    severity: str       # "error" or "warning"
    slide_index: int    # -1 for presentation-level issues
    category: str       # e.g. "open", "slide_count", "empty_slide", "page_numbers"
    message: str

    def __str__(self) -> str:
        loc = "presentation" if self.slide_index < 0 else f"slide {self.slide_index + 1}"
        return f"[{self.severity.upper()}] {loc}: {self.message}"


@dataclass
class QAResult:
    """Aggregated result of QA validation."""
    issues: list[Issue] = field(default_factory=list)
    slide_count: int = 0
    page_numbers: list[int] = field(default_factory=list)

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
            f"QA {status}: {self.slide_count} slide(s), {self.error_count} error(s), "
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

def _all_text_on_slide(slide) -> str:
    """Concatenate all text on a slide for content searches."""
    parts: list[str] = []
    for shape in slide.shapes:
        if shape.has_text_frame:
            parts.append(shape.text_frame.text)
    return " ".join(parts)


def _footer_page_number(slide) -> int | None:
    """The printed page number of a slide, or None when it has no footer."""
    for shape in slide.shapes:
        if not shape.has_text_frame:
            continue
        if shape.left is None or shape.top is None:
            continue
        if shape.left < _FOOTER_MIN_LEFT or shape.top < _FOOTER_MIN_TOP:
            continue
        value = shape.text_frame.text.strip()
        if _PAGE_RE.match(value):
            return int(value)
    return None


# ---------------------------------------------------------------------------
# QAValidator
# ---------------------------------------------------------------------------

class QAValidator:
    """Validates a generated report.

    Parameters
    ----------
    settings : ReportSettings
        Settings the report was generated with (canvas size).
    """

    def __init__(self, settings: ReportSettings | None = None) -> None:
        self.settings = settings or ReportSettings()

    def validate(self, pptx_bytes: bytes,
                 expected_slides: int | None = None) -> QAResult:
        """Run all validation checks on a built PPTX.

        Parameters
        ----------
        pptx_bytes : bytes
            The raw PPTX file content.
        expected_slides : int, optional
            Slide count the report should have; not checked when omitted.
        """
        result = QAResult()
        try:
            prs = Presentation(io.BytesIO(pptx_bytes))
        except Exception as exc:
            result.issues.append(Issue("error", -1, "open",
                                       f"File cannot be opened: {exc}"))
            return result

        result.slide_count = len(prs.slides)
        self._check_slide_count(prs, expected_slides, result)
        self._check_dimensions(prs, result)
        for idx, slide in enumerate(prs.slides):
            self._check_not_empty(idx, slide, result)
        self._check_page_numbers(prs, result)
        return result

    # ------------------------------------------------------------------
    # Presentation-level checks
    # ------------------------------------------------------------------

    def _check_slide_count(self, prs, expected: int | None,
                           result: QAResult) -> None:
        actual = len(prs.slides)
        if actual == 0:
            result.issues.append(Issue("error", -1, "slide_count",
                                       "Presentation has no slides"))
        elif expected is not None and actual != expected:
            result.issues.append(Issue("error", -1, "slide_count",
                                       f"Expected {expected} slides, got {actual}"))

    def _check_dimensions(self, prs, result: QAResult) -> None:
        expected_w = Inches(self.settings.slide_width)
        expected_h = Inches(self.settings.slide_height)
        if prs.slide_width != expected_w:
            result.issues.append(Issue(
                "error", -1, "dimensions",
                f"Slide width {prs.slide_width} != expected {expected_w}",
            ))
        if prs.slide_height != expected_h:
            result.issues.append(Issue(
                "error", -1, "dimensions",
                f"Slide height {prs.slide_height} != expected {expected_h}",
            ))

    # ------------------------------------------------------------------
    # Per-slide checks
    # ------------------------------------------------------------------

    def _check_not_empty(self, idx: int, slide, result: QAResult) -> None:
        if len(slide.shapes) == 0:
            result.issues.append(Issue("error", idx, "empty_slide",
                                       "Slide has no shapes"))
        elif not _all_text_on_slide(slide).strip():
            result.issues.append(Issue("warning", idx, "empty_slide",
                                       "Slide has no text"))

    def _check_page_numbers(self, prs, result: QAResult) -> None:
        """Printed page numbers must increase and match the slide position."""
        previous = 0
        for idx, slide in enumerate(prs.slides):
            page = _footer_page_number(slide)
            if page is None:
                continue
            result.page_numbers.append(page)
            if page <= previous:
                result.issues.append(Issue(
                    "error", idx, "page_numbers",
                    f"Page number {page:02d} does not follow {previous:02d}",
                ))
            elif page != idx + 1:
                result.issues.append(Issue(
                    "warning", idx, "page_numbers",
                    f"Page number {page:02d} printed on slide {idx + 1}",
                ))
            previous = page


def validate_presentation(pptx_bytes: bytes, settings: ReportSettings | None = None,
                          expected_slides: int | None = None) -> QAResult:
    """One-shot convenience: validate a generated report."""
    return QAValidator(settings).validate(pptx_bytes, expected_slides)
