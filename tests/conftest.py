"""Shared fixtures: an in-memory stand-in for the GCS client."""

from pathlib import Path

import pytest
from google.api_core.exceptions import NotFound, ServiceUnavailable

from pysecrets.config import SecretsSettings
from pysecrets.output import OutputFormatter
from pysecrets.transfer import TransferGateway

BUCKET = "test-bucket"


class FakeBlob:
    """Minimal blob supporting the calls made by TransferGateway."""

    def __init__(self, client: "FakeClient", name: str):
        self.client = client
        self.name = name

    def download_to_filename(self, filename: str) -> None:
        self.client.calls.append(("download", self.name))
        if self.name in self.client.failures:
            raise ServiceUnavailable("backend unavailable")
        if self.name not in self.client.objects:
            raise NotFound(f"No such object: {BUCKET}/{self.name}")
        Path(filename).write_bytes(self.client.objects[self.name])

    def upload_from_filename(self, filename: str) -> None:
        self.client.calls.append(("upload", self.name))
        if self.name in self.client.failures:
            raise ServiceUnavailable("backend unavailable")
        self.client.objects[self.name] = Path(filename).read_bytes()


class FakeBucket:
    def __init__(self, client: "FakeClient", name: str):
        self.client = client
        self.name = name

    def blob(self, name: str) -> FakeBlob:
        return FakeBlob(self.client, name)


class FakeClient:
    """In-memory storage client with a single bucket."""

    def __init__(self, objects=None):
        self.objects: dict[str, bytes] = dict(objects or {})
        self.calls: list[tuple[str, str]] = []
        self.failures: set[str] = set()

    def bucket(self, name: str) -> FakeBucket:
        assert name == BUCKET
        return FakeBucket(self, name)

    def list_blobs(self, bucket_name: str) -> list[FakeBlob]:
        assert bucket_name == BUCKET
        return [FakeBlob(self, name) for name in sorted(self.objects)]

    def uploads(self) -> list[str]:
        return [name for action, name in self.calls if action == "upload"]

    def downloads(self) -> list[str]:
        return [name for action, name in self.calls if action == "download"]


@pytest.fixture
def local_root(tmp_path):
    """Create the local secrets directory."""
    root = tmp_path / "secrets"
    root.mkdir()
    return root


@pytest.fixture
def settings(tmp_path, local_root):
    """Settings pointing at temporary directories."""
    return SecretsSettings(
        local_root=local_root,
        bucket=BUCKET,
        staging_root=tmp_path / "staging",
    )


@pytest.fixture
def fake_client():
    """Provide an empty fake storage client."""
    return FakeClient()


@pytest.fixture
def output():
    """Provide a default output formatter."""
    return OutputFormatter()


@pytest.fixture
def gateway(settings, output, fake_client):
    """Provide a transfer gateway backed by the fake client."""
    return TransferGateway(settings, output, client=fake_client)
