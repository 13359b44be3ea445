"""
Shared fixtures for storage tests.

Nothing here touches the network: attachments are plain objects and
directories are the in-memory MockDirectory or small fakes built on it.
"""

import io
from typing import Optional

import pytest

from src.core.storage.errors import TransientNotFound
from src.core.storage.options import StorageOptions
from src.infrastructure.storage.client import MockDirectory
from src.infrastructure.storage.softlayer import SoftLayerStorage


class FakeAttachment:
    """Attachment with fixed style paths, counting flush callbacks."""

    default_style = "original"

    def __init__(self, paths: Optional[dict] = None, original_filename: Optional[str] = "photo.png") -> None:
        self.paths = paths if paths is not None else {
            "original": "photos/1/original.png",
            "thumb": "photos/1/thumb.png",
        }
        self.original_filename = original_filename
        self.after_flush_calls = 0

    def path(self, style: Optional[str] = None) -> Optional[str]:
        return self.paths.get(style or self.default_style)

    def url(self, style: Optional[str] = None) -> str:
        return f"/system/{self.path(style)}"

    def after_flush_writes(self) -> None:
        self.after_flush_calls += 1


class CountingDirectory(MockDirectory):
    """MockDirectory that counts calls and can keep failing after save()."""

    def __init__(self, key: str = "attachments", exists: bool = True, stay_missing: bool = False) -> None:
        super().__init__(key, exists=exists)
        self.stay_missing = stay_missing
        self.create_calls = 0
        self.save_calls = 0
        self.destroyed: list[str] = []

    def create_file(self, **fields) -> None:
        self.create_calls += 1
        if self.stay_missing:
            raise TransientNotFound(f"Bucket {self.key} does not exist")
        super().create_file(**fields)

    def save(self) -> None:
        self.save_calls += 1
        super().save()

    def destroy(self, key: str) -> None:
        self.destroyed.append(key)
        super().destroy(key)


class SingleDirectoryConnection:
    """Connection that always hands out the same directory."""

    def __init__(self, directory: MockDirectory) -> None:
        self._directory = directory
        self.requested: list[str] = []

    def directory(self, key: str) -> MockDirectory:
        self.requested.append(key)
        return self._directory


def upload(data: bytes, name: str = "upload.png", content_type: Optional[str] = "image/png") -> io.BytesIO:
    """In-memory file as a framework would queue it."""
    file = io.BytesIO(data)
    file.name = name
    if content_type:
        file.content_type = content_type
    return file


SOFTLAYER_CREDENTIALS = {
    "provider": "softlayer",
    "auth_url": "https://s3.dal05.objectstorage.softlayer.net",
    "username": "test-user",
    "password": "test-secret",
}


@pytest.fixture
def attachment() -> FakeAttachment:
    return FakeAttachment()


@pytest.fixture
def directory() -> CountingDirectory:
    return CountingDirectory()


@pytest.fixture
def make_storage(attachment, directory):
    """Build a SoftLayerStorage over the counting directory."""

    def _make(**option_overrides) -> SoftLayerStorage:
        values = {
            "credentials": dict(SOFTLAYER_CREDENTIALS),
            "directory": "attachments",
        }
        values.update(option_overrides)
        connection = SingleDirectoryConnection(directory)
        return SoftLayerStorage(
            attachment,
            StorageOptions(**values),
            environment="test",
            connection_factory=lambda credentials: connection,
        )

    return _make
