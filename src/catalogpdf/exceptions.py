"""
catalogpdf exception hierarchy.

All domain-specific exceptions inherit from CatalogPdfError, so callers can
catch any pipeline error with a single base class while still handling the
fatal/recoverable split at the right boundary.

Hierarchy::

    CatalogPdfError
    ├── ConfigurationError        - blank endpoint fields, bad credentials file, bad config
    ├── ConnectionError_          - authentication, host key, channel open, remote listing
    ├── DocumentProcessingError   - one document failed (recovered by the batch loop)
    ├── XmlParseError             - catalog XML could not be parsed
    ├── RenderError               - rendering service returned a non-success response
    └── RetryError                - caller-side retry exhausted

    CleanupWarning (UserWarning)  - local cleanup failed; logged only, never raised
"""

from __future__ import annotations


class CatalogPdfError(Exception):
    """Base exception for all catalogpdf errors."""

    def __init__(self, message: str, *, details: dict | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


# --- Configuration -----------------------------------------------------------


class ConfigurationError(CatalogPdfError):
    """Raised when configuration, endpoint fields or the credentials file are invalid."""


# --- Connections -------------------------------------------------------------


class ConnectionError_(CatalogPdfError):
    """Raised when the remote file store session or channel cannot be established.

    Named with trailing underscore to avoid shadowing the builtin
    ``ConnectionError``; the public alias ``RemoteConnectionError``
    is preferred for external use.
    """


# Public alias so callers don't need the underscore
RemoteConnectionError = ConnectionError_


# --- Documents ---------------------------------------------------------------


class DocumentProcessingError(CatalogPdfError):
    """Raised when a single document fails to process."""

    def __init__(self, document: str, message: str, *, cause: Exception | None = None) -> None:
        full = f"Document '{document}' failed: {message}"
        super().__init__(full, details={"document": document})
        self.document = document
        if cause is not None:
            self.__cause__ = cause


class XmlParseError(CatalogPdfError):
    """Raised when a catalog XML document cannot be parsed."""


# --- Rendering ---------------------------------------------------------------


class RenderError(CatalogPdfError):
    """Raised when the rendering service does not report success."""

    def __init__(self, operation: str, status: int | None, body: str) -> None:
        status_text = status if status is not None else "no response"
        super().__init__(f"{operation} failed: {status_text} - {body}", details={"status": status})
        self.operation = operation
        self.status = status
        self.body = body


# --- Retry -------------------------------------------------------------------


class RetryError(CatalogPdfError):
    """Raised when all retry attempts are exhausted."""


# --- Cleanup -----------------------------------------------------------------


class CleanupWarning(UserWarning):
    """Warning category for local files or directories that could not be removed."""
