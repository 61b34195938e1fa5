"""
Tests for endpoint validation, credentials loading and staging/cleanup.
"""

from pathlib import Path
from unittest.mock import patch

import pytest

from catalogpdf.exceptions import ConfigurationError
from catalogpdf.sync.credentials import load_credentials
from catalogpdf.sync.staging import DeferredCleanup, StagingArea
from catalogpdf.sync.types import Credentials, OutputArtifact, RemoteEndpoint, SyncSummary, UploadTarget


class TestRemoteEndpoint:
    """Tests for eager endpoint validation."""

    def test_valid(self, endpoint):
        endpoint.validate()

    @pytest.mark.parametrize("field", ["host", "download_dir", "upload_dir", "credentials_file"])
    def test_blank_field_rejected(self, endpoint, field):
        from dataclasses import replace

        broken = replace(endpoint, **{field: "  "})
        with pytest.raises(ConfigurationError) as exc_info:
            broken.validate()
        assert field in str(exc_info.value)
        assert exc_info.value.details["fields"] == [field]

    def test_bad_port(self, endpoint):
        from dataclasses import replace

        with pytest.raises(ConfigurationError):
            replace(endpoint, port=0).validate()

    @pytest.mark.parametrize("name,expected", [("a.xml", True), ("B.XML", True), ("c.Xml", True), ("d.txt", False), ("xml", False)])
    def test_extension_match_is_case_insensitive(self, endpoint, name, expected):
        assert endpoint.matches(name) is expected


class TestCredentials:
    """Tests for the two-line credentials file."""

    def test_loads_and_trims(self, tmp_path):
        path = tmp_path / "creds"
        path.write_text("  user  \n  pass \nignored\n")
        creds = load_credentials(path)
        assert creds == Credentials("user", "pass")

    def test_single_line_rejected(self, tmp_path):
        path = tmp_path / "creds"
        path.write_text("user-only\n")
        with pytest.raises(ConfigurationError, match="two lines"):
            load_credentials(path)

    def test_blank_password_rejected(self, tmp_path):
        path = tmp_path / "creds"
        path.write_text("user\n   \n")
        with pytest.raises(ConfigurationError, match="empty"):
            load_credentials(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError, match="Cannot read"):
            load_credentials(tmp_path / "absent")

    def test_repr_hides_password(self):
        creds = Credentials("user", "hunter2")
        assert "hunter2" not in repr(creds)
        assert "user" in repr(creds)


class TestUploadTarget:
    """Tests for deterministic remote paths."""

    def test_remote_path(self):
        artifact = OutputArtifact(name="1D31A_produktovy_list_A4.pdf", local_path=Path("/tmp/x.pdf"))
        target = UploadTarget.for_artifact("/export/pdf/", artifact)
        assert target.remote_path == "/export/pdf/1D31A_produktovy_list_A4.pdf"

    def test_name_cannot_escape_directory(self):
        artifact = OutputArtifact(name="../../etc/passwd", local_path=Path("/tmp/x"))
        assert UploadTarget.for_artifact("/out", artifact).remote_path == "/out/passwd"


class TestStagingArea:
    """Tests for the scoped staging directory."""

    def test_created_and_removed(self, tmp_path):
        with StagingArea(base_dir=tmp_path) as staging:
            path = staging.path
            assert path.is_dir()
            assert path.name.startswith("sftp-sync-")
            local, out = staging.document_dirs(0, "a.xml")
            local.write_text("<x/>")
            assert out.is_dir()
        assert not path.exists()

    def test_removed_on_exception(self, tmp_path):
        with pytest.raises(RuntimeError):
            with StagingArea(base_dir=tmp_path) as staging:
                path = staging.path
                raise RuntimeError("boom")
        assert not path.exists()

    def test_destroy_failure_is_logged_not_raised(self, tmp_path, caplog):
        staging = StagingArea(base_dir=tmp_path)
        staging.create()
        with patch("catalogpdf.sync.staging.shutil.rmtree", side_effect=OSError("busy")):
            with caplog.at_level("WARNING", logger="catalogpdf"):
                staging.destroy()
        assert "CleanupWarning" in caplog.text

    def test_document_names_are_sanitized(self, tmp_path):
        with StagingArea(base_dir=tmp_path) as staging:
            local, _ = staging.document_dirs(1, "../../evil.xml")
            assert local.parent.parent == staging.path
            assert local.name == "evil.xml"


class TestDeferredCleanup:
    """Tests for the run-scoped deferred deletion list."""

    def test_run_deletes_pending(self, tmp_path):
        leftover_file = tmp_path / "a.pdf"
        leftover_file.write_bytes(b"x")
        cleanup = DeferredCleanup()
        cleanup.schedule(leftover_file)
        assert cleanup.run() == []
        assert not leftover_file.exists()
        assert cleanup.pending == []

    def test_run_reports_undeletable(self, tmp_path):
        path = tmp_path / "a.pdf"
        cleanup = DeferredCleanup()
        cleanup.schedule(path)
        with patch("pathlib.Path.unlink", side_effect=PermissionError("locked")):
            assert cleanup.run() == [path]


class TestSyncSummary:
    def test_to_dict(self):
        summary = SyncSummary(total=2, processed=1, failed=1, uploaded=2, skipped=["notes.txt"])
        assert summary.to_dict()["skipped"] == ["notes.txt"]
        assert summary.to_dict()["uploaded"] == 2
