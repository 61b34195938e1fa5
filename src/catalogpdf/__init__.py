"""
catalogpdf - Batch conversion of catalog XML documents to PDF.

Downloads catalog XML exports from an SFTP drop, renders them through a
Gotenberg-compatible service and uploads the PDFs back.
"""

__version__ = "0.1.0"

from catalogpdf.exceptions import (
    CatalogPdfError,
    CleanupWarning,
    ConfigurationError,
    ConnectionError_,
    DocumentProcessingError,
    RemoteConnectionError,
    RenderError,
    RetryError,
    XmlParseError,
)
from catalogpdf.progress import BatchProgress, ProgressTracker

__all__ = [
    "__version__",
    "BatchProgress",
    "CatalogPdfError",
    "CleanupWarning",
    "ConfigurationError",
    "ConnectionError_",
    "DocumentProcessingError",
    "ProgressTracker",
    "RemoteConnectionError",
    "RenderError",
    "RetryError",
    "XmlParseError",
]
