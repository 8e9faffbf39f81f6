"""Error taxonomy for report generation.

Only ``FatalComposerFailure`` (and the request-level ``ReportCancelled`` /
``CustomerNotFound``) ever reach a caller. ``DataUnavailable`` and
``AssetUnavailable`` are recovered where they occur; ``ModuleRenderFailure``
is recorded on the result instead of being raised.
"""

from typing import Any


class ReportError(Exception):
    """Base class for report generation errors."""

    code = "REPORT_ERROR"

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        return {"code": self.code, "message": str(self), "details": self.details}


class DataUnavailable(ReportError):
    """A metrics query for one (platform, month) returned nothing usable."""

    code = "DATA_UNAVAILABLE"


class AssetUnavailable(ReportError):
    """An image could not be fetched or decoded."""

    code = "ASSET_UNAVAILABLE"


class ModuleRenderFailure(ReportError):
    """A slide module raised while rendering."""

    code = "MODULE_RENDER_FAILURE"

    def __init__(self, module_id: str, error: BaseException,
                 details: dict[str, Any] | None = None):
        super().__init__(f"Slide module '{module_id}' failed: {error}", details)
        self.module_id = module_id
        self.error = error


class FatalComposerFailure(ReportError):
    """The finished document could not be serialised."""

    code = "FATAL_COMPOSER_FAILURE"


class ReportCancelled(ReportError):
    """The enclosing request was aborted before the document was finished."""

    code = "REPORT_CANCELLED"


class CustomerNotFound(ReportError):
    """The customer directory has no entry for the requested id."""

    code = "CUSTOMER_NOT_FOUND"

    def __init__(self, customer_id: str):
        super().__init__(f"Customer with id '{customer_id}' not found",
                         {"customer_id": customer_id})
        self.customer_id = customer_id
