"""Error types raised by the pdfqa services.

Each error maps to an HTTP status code so the Flask routes, the CLI and the
MCP tools can report failures in the same structured shape:
``{"error": message, "details": details}``.
"""

from typing import Any


class PdfQAError(Exception):
    """Base class for all errors surfaced to pdfqa callers."""

    status_code = 500

    def __init__(self, message: str, details: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict[str, Any]:
        """Render the error as a JSON-serialisable response body."""
        body: dict[str, Any] = {"error": self.message}
        if self.details:
            body["details"] = self.details
        return body


class InvalidInputError(PdfQAError):
    """The request is malformed or missing required data."""

    status_code = 400


class PayloadTooLargeError(InvalidInputError):
    """The uploaded file exceeds the size limit."""

    status_code = 413


class NotFoundError(PdfQAError):
    """A referenced document does not exist."""

    status_code = 404


class UpstreamError(PdfQAError):
    """An embedding, completion or store call failed."""


class PartialFailureError(UpstreamError):
    """An upload failed after the document row was created.

    The document has already been rolled back when this is raised.
    """
