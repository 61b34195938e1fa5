"""
Remote sync: SFTP session handling, staging and the batch orchestrator.
"""

from catalogpdf.sync.credentials import load_credentials
from catalogpdf.sync.orchestrator import RemoteSyncOrchestrator
from catalogpdf.sync.sftp import SFTPConnection
from catalogpdf.sync.staging import DeferredCleanup, StagingArea
from catalogpdf.sync.types import (
    Credentials,
    DocumentProcessor,
    OutputArtifact,
    RemoteEndpoint,
    SourceDocument,
    SyncSummary,
    UploadTarget,
)

__all__ = [
    "Credentials",
    "DeferredCleanup",
    "DocumentProcessor",
    "OutputArtifact",
    "RemoteEndpoint",
    "RemoteSyncOrchestrator",
    "SFTPConnection",
    "SourceDocument",
    "StagingArea",
    "SyncSummary",
    "UploadTarget",
    "load_credentials",
]
