"""
Type definitions for remote sync runs.
"""

from __future__ import annotations

import posixpath
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from catalogpdf.exceptions import ConfigurationError


@dataclass(frozen=True)
class RemoteEndpoint:
    """Where to fetch source documents from and where to publish artifacts."""

    host: str
    port: int
    download_dir: str
    upload_dir: str
    credentials_file: str
    extension: str = ".xml"
    connect_timeout_s: float = 30.0
    verify_host_key: bool = True
    known_hosts_path: str | None = None

    def validate(self) -> None:
        """Fail fast on blank fields, before any network I/O."""
        blank = [
            name
            for name in ("host", "download_dir", "upload_dir", "credentials_file")
            if not str(getattr(self, name) or "").strip()
        ]
        if blank:
            raise ConfigurationError(
                f"Remote endpoint has blank required field(s): {', '.join(blank)}",
                details={"fields": blank},
            )
        if not isinstance(self.port, int) or not 0 < self.port < 65536:
            raise ConfigurationError(f"Remote endpoint port must be 1-65535, got {self.port!r}")
        if not self.extension.strip():
            raise ConfigurationError("Remote endpoint extension must not be blank")

    def matches(self, filename: str) -> bool:
        """Case-insensitive extension filter for remote listings."""
        return filename.lower().endswith(self.extension.lower())


@dataclass(frozen=True)
class Credentials:
    username: str
    password: str = field(repr=False)

    def __repr__(self) -> str:
        return f"Credentials(username={self.username!r}, password='***')"


@dataclass(frozen=True)
class SourceDocument:
    """A downloaded remote file, owned by the staging area."""

    name: str
    local_path: Path
    remote_path: str
    # Where processors should write artifacts for this document
    output_dir: Path


@dataclass(frozen=True)
class OutputArtifact:
    """A generated file waiting to be uploaded."""

    name: str
    local_path: Path
    source: SourceDocument | None = None


@dataclass(frozen=True)
class UploadTarget:
    directory: str
    filename: str

    @property
    def remote_path(self) -> str:
        return posixpath.join(self.directory, self.filename)

    @classmethod
    def for_artifact(cls, upload_dir: str, artifact: OutputArtifact) -> UploadTarget:
        # Only the bare name is used so artifacts cannot escape the upload directory
        return cls(directory=upload_dir, filename=posixpath.basename(artifact.name.replace("\\", "/")))


@dataclass
class SyncSummary:
    """Counters for one sync run."""

    total: int = 0
    processed: int = 0
    failed: int = 0
    uploaded: int = 0
    skipped: list[str] = field(default_factory=list)
    failed_documents: list[str] = field(default_factory=list)
    # Matching files that never reached processing; not part of total/failed
    download_failures: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "total": self.total,
            "processed": self.processed,
            "failed": self.failed,
            "uploaded": self.uploaded,
            "skipped": list(self.skipped),
            "failed_documents": list(self.failed_documents),
            "download_failures": list(self.download_failures),
        }


# A processor turns one source document into a lazy stream of artifacts
DocumentProcessor = Callable[[SourceDocument], Iterable[OutputArtifact]]
