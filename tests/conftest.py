"""
Shared fixtures: in-memory SFTP doubles, endpoints, credentials, images.
"""

import stat
from io import BytesIO
from pathlib import Path
from types import SimpleNamespace

import pytest
from PIL import Image

from catalogpdf.sync.types import OutputArtifact, RemoteEndpoint


def make_png(height: int, width: int = 794) -> bytes:
    buf = BytesIO()
    Image.new("RGB", (width, height), "white").save(buf, format="PNG")
    return buf.getvalue()


class FakeSFTPClient:
    """Enough of paramiko.SFTPClient for the orchestrator."""

    def __init__(self, files: dict[str, bytes], dirs: tuple[str, ...] = ()):
        self.files = files
        self.dirs = dirs
        self.downloaded: list[str] = []
        self.uploaded: dict[str, bytes] = {}
        self.closed = False

    def listdir_attr(self, path):
        entries = [SimpleNamespace(filename=name, st_mode=stat.S_IFREG | 0o644) for name in self.files]
        entries += [SimpleNamespace(filename=name, st_mode=stat.S_IFDIR | 0o755) for name in self.dirs]
        return entries

    def get(self, remote_path, local_path):
        name = remote_path.rsplit("/", 1)[-1]
        self.downloaded.append(remote_path)
        Path(local_path).write_bytes(self.files[name])

    def putfo(self, fl, remote_path):
        self.uploaded[remote_path] = fl.read()

    def close(self):
        self.closed = True


class FakeConnection:
    """Connection double recording connect/close calls."""

    def __init__(self, client: FakeSFTPClient, connect_error: Exception | None = None):
        self.client = client
        self.connect_error = connect_error
        self.connect_calls = 0
        self.close_calls = 0
        self.credentials = None

    def factory(self, endpoint, credentials):
        self.credentials = credentials
        return self

    def connect(self):
        self.connect_calls += 1
        if self.connect_error is not None:
            raise self.connect_error
        return self.client

    def close(self):
        self.close_calls += 1
        return []


@pytest.fixture
def credentials_file(tmp_path):
    path = tmp_path / "sftp.credentials"
    path.write_text("catalog\ns3cret\n", encoding="utf-8")
    return path


@pytest.fixture
def endpoint(credentials_file):
    return RemoteEndpoint(
        host="sftp.example.com",
        port=22,
        download_dir="/export/xml",
        upload_dir="/export/pdf",
        credentials_file=str(credentials_file),
    )


def write_artifacts(document, names):
    """Processor helper: write one small PDF per name into the document's output dir."""
    for name in names:
        path = document.output_dir / name
        path.write_bytes(b"%PDF-1.7 " + name.encode())
        yield OutputArtifact(name=name, local_path=path, source=document)
