"""
Tests for RemoteSyncOrchestrator and BatchJob end to end (SFTP doubled).
"""

from dataclasses import replace
from unittest.mock import MagicMock, patch

import pytest

from catalogpdf.exceptions import ConfigurationError, ConnectionError_
from catalogpdf.jobs.batch import BatchJob
from catalogpdf.progress import ProgressTracker
from catalogpdf.sync.orchestrator import RemoteSyncOrchestrator

from conftest import FakeConnection, FakeSFTPClient, write_artifacts


def _orchestrator(conn, tmp_path):
    return RemoteSyncOrchestrator(connection_factory=conn.factory, staging_base_dir=tmp_path / "staging")


@pytest.fixture(autouse=True)
def staging_root(tmp_path):
    (tmp_path / "staging").mkdir()
    return tmp_path / "staging"


class TestSync:
    """Tests for the download -> process -> upload loop."""

    def test_uploads_every_artifact_and_cleans_up(self, endpoint, tmp_path, staging_root):
        client = FakeSFTPClient({"a.xml": b"<a/>", "b.xml": b"<b/>"})
        conn = FakeConnection(client)
        seen = []

        def processor(document):
            seen.append((document.name, document.local_path.read_bytes()))
            return write_artifacts(document, [f"{document.local_path.stem}.pdf"])

        summary = _orchestrator(conn, tmp_path).sync(endpoint, processor)

        assert seen == [("a.xml", b"<a/>"), ("b.xml", b"<b/>")]
        assert set(client.uploaded) == {"/export/pdf/a.pdf", "/export/pdf/b.pdf"}
        assert summary.to_dict()["uploaded"] == 2
        assert summary.processed == 2
        assert conn.close_calls == 1
        assert list(staging_root.iterdir()) == []

    def test_listing_order_preserved(self, endpoint, tmp_path):
        client = FakeSFTPClient({"c.xml": b"", "a.xml": b"", "b.xml": b""})
        order = []
        _orchestrator(FakeConnection(client), tmp_path).sync(endpoint, lambda d: order.append(d.name) or [])
        assert order == ["c.xml", "a.xml", "b.xml"]

    def test_filters_extension_and_directories(self, endpoint, tmp_path):
        client = FakeSFTPClient({"a.XML": b"", "notes.txt": b""}, dirs=("archive.xml",))
        summary = _orchestrator(FakeConnection(client), tmp_path).sync(endpoint, lambda d: [])
        assert client.downloaded == ["/export/xml/a.XML"]
        assert summary.total == 1
        assert sorted(summary.skipped) == ["archive.xml", "notes.txt"]

    def test_zero_artifacts_is_not_a_failure(self, endpoint, tmp_path):
        client = FakeSFTPClient({"a.xml": b"", "b.xml": b""})
        summary = _orchestrator(FakeConnection(client), tmp_path).sync(endpoint, lambda d: iter(()))
        assert summary.processed == 2
        assert summary.failed == 0
        assert client.uploaded == {}

    def test_failing_document_does_not_abort_batch(self, endpoint, tmp_path, caplog):
        client = FakeSFTPClient({"a.xml": b"", "bad.xml": b"", "c.xml": b""})

        def processor(document):
            if document.name == "bad.xml":
                raise ValueError("broken XML")
            return write_artifacts(document, [document.name + ".pdf"])

        with caplog.at_level("ERROR", logger="catalogpdf"):
            summary = _orchestrator(FakeConnection(client), tmp_path).sync(endpoint, processor)

        assert summary.failed == 1
        assert summary.failed_documents == ["bad.xml"]
        assert set(client.uploaded) == {"/export/pdf/a.xml.pdf", "/export/pdf/c.xml.pdf"}
        assert "Document 'bad.xml' failed: broken XML" in caplog.text

    def test_failure_mid_stream_keeps_uploaded_artifacts(self, endpoint, tmp_path):
        client = FakeSFTPClient({"a.xml": b""})

        def processor(document):
            yield from write_artifacts(document, ["first.pdf"])
            raise RuntimeError("second render failed")

        summary = _orchestrator(FakeConnection(client), tmp_path).sync(endpoint, processor)
        assert list(client.uploaded) == ["/export/pdf/first.pdf"]
        assert summary.failed == 1

    def test_artifact_uploaded_before_next_is_generated(self, endpoint, tmp_path):
        client = FakeSFTPClient({"a.xml": b""})
        uploaded_when_second_requested = []

        def processor(document):
            yield from write_artifacts(document, ["one.pdf"])
            uploaded_when_second_requested.append(list(client.uploaded))
            yield from write_artifacts(document, ["two.pdf"])

        _orchestrator(FakeConnection(client), tmp_path).sync(endpoint, processor)
        assert uploaded_when_second_requested == [["/export/pdf/one.pdf"]]

    def test_local_artifact_deleted_after_upload(self, endpoint, tmp_path):
        client = FakeSFTPClient({"a.xml": b""})
        paths = []

        def processor(document):
            for artifact in write_artifacts(document, ["x.pdf"]):
                paths.append(artifact.local_path)
                yield artifact
                assert not artifact.local_path.exists()

        _orchestrator(FakeConnection(client), tmp_path).sync(endpoint, processor)
        assert paths and not paths[0].exists()

    def test_delete_failure_is_deferred_not_raised(self, endpoint, tmp_path, caplog):
        client = FakeSFTPClient({"a.xml": b""})
        with patch("catalogpdf.sync.orchestrator.os.remove", side_effect=PermissionError("locked")):
            with caplog.at_level("WARNING", logger="catalogpdf"):
                summary = _orchestrator(FakeConnection(client), tmp_path).sync(
                    endpoint, lambda d: write_artifacts(d, ["x.pdf"])
                )
        assert summary.uploaded == 1
        assert summary.failed == 0
        assert "deferring" in caplog.text

    def test_download_failure_skips_file(self, endpoint, tmp_path):
        client = FakeSFTPClient({"a.xml": b"", "b.xml": b""})
        original_get = client.get

        def flaky_get(remote, local):
            if remote.endswith("a.xml"):
                raise OSError("read error")
            original_get(remote, local)

        client.get = flaky_get
        seen = []
        summary = _orchestrator(FakeConnection(client), tmp_path).sync(endpoint, lambda d: seen.append(d.name) or [])
        assert seen == ["b.xml"]
        assert summary.download_failures == ["a.xml"]
        assert summary.failed_documents == []
        assert summary.failed == 0
        assert summary.to_dict()["download_failures"] == ["a.xml"]

    def test_progress_reported_after_each_document(self, endpoint, tmp_path):
        client = FakeSFTPClient({"a.xml": b"", "b.xml": b""})
        states = []
        _orchestrator(FakeConnection(client), tmp_path).sync(endpoint, lambda d: [], progress=states.append)
        assert [(s.total, s.current, s.current_item_label) for s in states] == [
            (2, 0, None),
            (2, 1, "a.xml"),
            (2, 2, "b.xml"),
        ]
        assert all(s.running for s in states)


class TestFatalErrors:
    """Tests for configuration and connection failures."""

    def test_blank_endpoint_fails_before_io(self, endpoint, tmp_path):
        factory = MagicMock()
        orchestrator = RemoteSyncOrchestrator(connection_factory=factory)
        with pytest.raises(ConfigurationError):
            orchestrator.sync(replace(endpoint, host=""), lambda d: [])
        factory.assert_not_called()

    def test_single_line_credentials_fails_before_connect(self, endpoint, credentials_file, tmp_path):
        credentials_file.write_text("only-user\n")
        conn = FakeConnection(FakeSFTPClient({"a.xml": b""}))
        with pytest.raises(ConfigurationError):
            _orchestrator(conn, tmp_path).sync(endpoint, lambda d: [])
        assert conn.connect_calls == 0

    def test_connection_failure_aborts_without_downloads(self, endpoint, tmp_path, staging_root):
        client = FakeSFTPClient({"a.xml": b""})
        conn = FakeConnection(client, connect_error=OSError("auth failed"))
        processor = MagicMock()
        with pytest.raises(ConnectionError_, match="auth failed"):
            _orchestrator(conn, tmp_path).sync(endpoint, processor)
        assert client.downloaded == []
        processor.assert_not_called()
        assert conn.close_calls == 1
        assert list(staging_root.iterdir()) == []

    def test_listing_failure_is_fatal(self, endpoint, tmp_path):
        client = FakeSFTPClient({})
        client.listdir_attr = MagicMock(side_effect=IOError("No such file"))
        with pytest.raises(ConnectionError_, match="Cannot list"):
            _orchestrator(FakeConnection(client), tmp_path).sync(endpoint, lambda d: [])

    def test_close_failure_still_removes_staging(self, endpoint, tmp_path, staging_root, caplog):
        class ClosingFails(FakeConnection):
            def close(self):
                super().close()
                raise RuntimeError("socket already gone")

        conn = ClosingFails(FakeSFTPClient({"a.xml": b"<a/>"}))
        with caplog.at_level("WARNING", logger="catalogpdf"):
            summary = _orchestrator(conn, tmp_path).sync(endpoint, lambda d: write_artifacts(d, ["a.pdf"]))
        assert summary.uploaded == 1
        assert conn.close_calls == 1
        assert list(staging_root.iterdir()) == []
        assert "closing connection failed: socket already gone" in caplog.text

    def test_close_failure_does_not_mask_fatal_error(self, endpoint, tmp_path, staging_root):
        class ClosingFails(FakeConnection):
            def close(self):
                raise RuntimeError("socket already gone")

        client = FakeSFTPClient({})
        client.listdir_attr = MagicMock(side_effect=IOError("No such file"))
        with pytest.raises(ConnectionError_, match="Cannot list"):
            _orchestrator(ClosingFails(client), tmp_path).sync(endpoint, lambda d: [])
        assert list(staging_root.iterdir()) == []

    def test_credentials_passed_to_factory(self, endpoint, tmp_path):
        conn = FakeConnection(FakeSFTPClient({}))
        _orchestrator(conn, tmp_path).sync(endpoint, lambda d: [])
        assert conn.credentials.username == "catalog"


class TestBatchJob:
    """End-to-end runs through BatchJob and the ProgressTracker."""

    def test_mixed_batch_completes(self, endpoint, tmp_path):
        """Non-XML ignored, one processor raises, one yields two artifacts."""
        client = FakeSFTPClient({"offer.xml": b"<o/>", "readme.txt": b"", "broken.xml": b"<"})

        def processor(document):
            if document.name == "broken.xml":
                raise ValueError("unparseable")
            return write_artifacts(document, ["P1_produktovy_list_A4.pdf", "P1_produktovy_list_full.pdf"])

        tracker = ProgressTracker()
        job = BatchJob(endpoint, processor, tracker, orchestrator=_orchestrator(FakeConnection(client), tmp_path))
        summary = job.run("nightly")

        assert client.downloaded == ["/export/xml/offer.xml", "/export/xml/broken.xml"]
        assert summary.total == 2
        assert summary.uploaded == 2
        state = tracker.get("nightly")
        assert state.completed
        assert state.total == state.current == 2
        assert state.error is None

    def test_zero_yield_documents_complete(self, endpoint, tmp_path):
        client = FakeSFTPClient({"a.xml": b"", "b.xml": b"", "c.xml": b""})
        tracker = ProgressTracker()
        job = BatchJob(endpoint, lambda d: [], tracker, orchestrator=_orchestrator(FakeConnection(client), tmp_path))
        job.run("k")
        state = tracker.get("k")
        assert state.completed and state.current == state.total == 3
        assert client.uploaded == {}

    def test_connection_failure_marks_failed(self, endpoint, tmp_path):
        client = FakeSFTPClient({"a.xml": b""})
        conn = FakeConnection(client, connect_error=ConnectionError_("Authentication failed"))
        tracker = ProgressTracker()
        job = BatchJob(endpoint, lambda d: [], tracker, orchestrator=_orchestrator(conn, tmp_path))

        with pytest.raises(ConnectionError_):
            job.run("k")
        state = tracker.get("k")
        assert state.failed
        assert state.error == "Authentication failed"
        assert client.downloaded == []

    def test_start_runs_in_background(self, endpoint, tmp_path):
        client = FakeSFTPClient({"a.xml": b""})
        tracker = ProgressTracker()
        job = BatchJob(
            endpoint,
            lambda d: write_artifacts(d, ["a.pdf"]),
            tracker,
            orchestrator=_orchestrator(FakeConnection(client), tmp_path),
        )
        thread = job.start("bg")
        final = tracker.wait_for_terminal("bg", interval=0.01, timeout=10)
        thread.join(timeout=10)
        assert final.completed
        assert list(client.uploaded) == ["/export/pdf/a.pdf"]

    def test_start_records_failure_without_raising(self, endpoint, credentials_file, tmp_path):
        credentials_file.write_text("one line\n")
        tracker = ProgressTracker()
        job = BatchJob(endpoint, lambda d: [], tracker, orchestrator=RemoteSyncOrchestrator(MagicMock()))
        thread = job.start("bg")
        thread.join(timeout=10)
        state = tracker.get("bg")
        assert state.failed
        assert "two lines" in state.error
