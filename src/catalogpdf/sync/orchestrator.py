"""
Remote sync orchestration: download -> process -> upload -> clean up.

One call to RemoteSyncOrchestrator.sync() owns one SFTP session, one staging
directory and one deferred-cleanup list. Documents are processed strictly in
listing order; a failing document is logged and skipped.
"""

from __future__ import annotations

import os
import stat
from collections.abc import Callable
from pathlib import Path
from typing import Any

from catalogpdf.exceptions import CleanupWarning, ConnectionError_, DocumentProcessingError
from catalogpdf.progress import BatchProgress
from catalogpdf.sync.credentials import load_credentials
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
from catalogpdf.utils.logging import get_logger

logger = get_logger("catalogpdf.sync.orchestrator")

ConnectionFactory = Callable[[RemoteEndpoint, Credentials], Any]
ProgressCallback = Callable[[BatchProgress], None]


class RemoteSyncOrchestrator:
    """
    Runs one batch against a remote file store.

    Args:
        connection_factory: builds the connection object from endpoint and
            credentials; it must expose ``connect() -> sftp client`` and
            ``close()``. Defaults to SFTPConnection.
        staging_base_dir: parent directory for the staging area (default: system temp)
    """

    def __init__(
        self,
        connection_factory: ConnectionFactory | None = None,
        staging_base_dir: str | Path | None = None,
    ):
        self.connection_factory = connection_factory or SFTPConnection
        self.staging_base_dir = staging_base_dir

    def sync(
        self,
        endpoint: RemoteEndpoint,
        processor: DocumentProcessor,
        progress: ProgressCallback | None = None,
    ) -> SyncSummary:
        """
        Download every matching document, process it, upload its artifacts.

        Raises:
            ConfigurationError: blank endpoint fields or bad credentials file
                (raised before any network call)
            ConnectionError_: authentication, channel or listing failure
        """
        endpoint.validate()
        credentials = load_credentials(endpoint.credentials_file)

        summary = SyncSummary()
        cleanup = DeferredCleanup()
        staging = StagingArea(base_dir=self.staging_base_dir)
        connection = None
        try:
            staging.create()
            connection = self.connection_factory(endpoint, credentials)
            try:
                client = connection.connect()
            except ConnectionError_:
                raise
            except Exception as e:
                raise ConnectionError_(f"Could not open session to {endpoint.host}:{endpoint.port}: {e}") from e

            documents = self._download_documents(client, endpoint, staging, summary)
            summary.total = len(documents)
            logger.info(f"Processing {summary.total} document(s) from {endpoint.download_dir}")
            _notify(progress, BatchProgress.running_at(summary.total, 0))

            for index, document in enumerate(documents, start=1):
                try:
                    for artifact in processor(document):
                        self._publish(client, endpoint, artifact, cleanup)
                        summary.uploaded += 1
                    summary.processed += 1
                except Exception as e:
                    summary.failed += 1
                    summary.failed_documents.append(document.name)
                    error = e
                    if not isinstance(e, DocumentProcessingError):
                        error = DocumentProcessingError(document.name, str(e), cause=e)
                    logger.error(error.message, exc_info=True)
                _notify(progress, BatchProgress.running_at(summary.total, index, document.name))
        finally:
            _teardown(connection, cleanup, staging)

        logger.info(
            f"Sync finished: {summary.processed}/{summary.total} processed, "
            f"{summary.failed} failed, {len(summary.download_failures)} not downloaded, "
            f"{summary.uploaded} artifact(s) uploaded"
        )
        return summary

    def _download_documents(
        self,
        client: Any,
        endpoint: RemoteEndpoint,
        staging: StagingArea,
        summary: SyncSummary,
    ) -> list[SourceDocument]:
        try:
            entries = client.listdir_attr(endpoint.download_dir)
        except (OSError, EOFError) as e:
            raise ConnectionError_(f"Cannot list remote directory {endpoint.download_dir}: {e}") from e

        documents: list[SourceDocument] = []
        # Listing order is preserved
        for slot, attr in enumerate(entries):
            name = attr.filename
            if _is_dir(attr) or not endpoint.matches(name):
                summary.skipped.append(name)
                continue

            remote_path = f"{endpoint.download_dir.rstrip('/')}/{name}"
            local_path, output_dir = staging.document_dirs(slot, name)
            try:
                _download_sftp_file(client, remote_path, local_path)
            except Exception as e:
                summary.download_failures.append(name)
                logger.error(f"Download of {remote_path} failed: {e}")
                continue
            documents.append(
                SourceDocument(name=name, local_path=local_path, remote_path=remote_path, output_dir=output_dir)
            )
        return documents

    def _publish(self, client: Any, endpoint: RemoteEndpoint, artifact: OutputArtifact, cleanup: DeferredCleanup) -> None:
        """Upload one artifact, then delete the local copy."""
        target = UploadTarget.for_artifact(endpoint.upload_dir, artifact)
        with open(artifact.local_path, "rb") as f:
            client.putfo(f, target.remote_path)
        logger.info(f"Uploaded {artifact.name} -> {target.remote_path}")

        try:
            os.remove(artifact.local_path)
        except OSError as e:
            logger.warning(f"{CleanupWarning.__name__}: could not delete {artifact.local_path}, deferring: {e}")
            cleanup.schedule(artifact.local_path)


def _teardown(connection: Any, cleanup: DeferredCleanup, staging: StagingArea) -> None:
    """Every teardown step runs even when an earlier one fails."""
    if connection is not None:
        try:
            connection.close()
        except Exception as e:
            logger.warning(f"{CleanupWarning.__name__}: closing connection failed: {e}")
    try:
        cleanup.run()
    except Exception as e:
        logger.warning(f"{CleanupWarning.__name__}: deferred cleanup failed: {e}")
    staging.destroy()


def _is_dir(attr: Any) -> bool:
    # paramiko SFTPAttributes: st_mode encodes file type bits
    return stat.S_ISDIR(getattr(attr, "st_mode", 0) or 0)


def _download_sftp_file(client: Any, remote_path: str, local_path: Path) -> None:
    local_path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = f"{local_path}.part"
    client.get(remote_path, tmp_path)
    os.replace(tmp_path, local_path)


def _notify(progress: ProgressCallback | None, state: BatchProgress) -> None:
    if progress is not None:
        progress(state)
