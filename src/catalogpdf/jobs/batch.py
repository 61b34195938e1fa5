"""
Batch job: one end-to-end discover -> parse -> render -> upload run,
reported through a ProgressTracker.
"""

from __future__ import annotations

import threading

from catalogpdf.exceptions import CatalogPdfError
from catalogpdf.progress import BatchProgress, ProgressTracker
from catalogpdf.sync.orchestrator import RemoteSyncOrchestrator
from catalogpdf.sync.types import DocumentProcessor, RemoteEndpoint, SyncSummary
from catalogpdf.utils.logging import get_logger

logger = get_logger("catalogpdf.jobs.batch")


class BatchJob:
    """
    Wires an endpoint, a document processor and an orchestrator together.

    The tracker is injected so that the same instance can be handed to
    whoever polls the run.
    """

    def __init__(
        self,
        endpoint: RemoteEndpoint,
        processor: DocumentProcessor,
        tracker: ProgressTracker,
        orchestrator: RemoteSyncOrchestrator | None = None,
    ):
        self.endpoint = endpoint
        self.processor = processor
        self.tracker = tracker
        self.orchestrator = orchestrator or RemoteSyncOrchestrator()

    def run(self, key: str) -> SyncSummary:
        """
        Run the batch in the calling thread.

        The tracker ends in ``completed`` (per-document failures included) or
        ``failed`` when a fatal error aborts the run; the error is re-raised.
        """
        self.tracker.update(key, BatchProgress.initial())
        try:
            summary = self.orchestrator.sync(
                self.endpoint,
                self.processor,
                progress=lambda state: self.tracker.update(key, state),
            )
        except Exception as e:
            last = self.tracker.get(key)
            message = e.message if isinstance(e, CatalogPdfError) else f"{type(e).__name__}: {e}"
            self.tracker.update(key, BatchProgress.failed_with(message, total=last.total, current=last.current))
            logger.error(f"Batch '{key}' failed: {message}")
            raise

        self.tracker.update(key, BatchProgress.completed_with(summary.total))
        logger.info(f"Batch '{key}' completed: {summary.to_dict()}")
        return summary

    def start(self, key: str) -> threading.Thread:
        """Run the batch on a background thread and return it (already started)."""

        def _target() -> None:
            try:
                self.run(key)
            except Exception:
                # Already recorded as failed for pollers
                logger.debug(f"Background batch '{key}' ended with a fatal error", exc_info=True)

        thread = threading.Thread(target=_target, name=f"catalogpdf-batch-{key}", daemon=True)
        thread.start()
        return thread
