"""
Error taxonomy for the invoice service.

Each error carries the HTTP status and the short `error` label used in the
JSON error body; `message` holds the underlying diagnostic text.
"""


class InvoiceServiceError(Exception):
    status_code = 500
    error = "Internal error"

    def __init__(self, message: str, *, error: str | None = None, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        if error is not None:
            self.error = error
        if status_code is not None:
            self.status_code = status_code

    def to_dict(self) -> dict:
        return {"success": False, "error": self.error, "message": self.message}


class ValidationError(InvoiceServiceError):
    """Bad or missing input. Raised before any side effect."""

    status_code = 400
    error = "Invalid request"


class ExtractionError(InvoiceServiceError):
    """The model call failed or its reply could not be decoded."""

    status_code = 500
    error = "Failed to process invoice"


class ExportError(InvoiceServiceError):
    """Workbook or CSV generation failed."""

    status_code = 500
    error = "Failed to generate export file"


class LogStoreError(InvoiceServiceError):
    """Activity log could not be read or written."""

    status_code = 500
    error = "Failed to fetch logs"
