"""
SoftLayer object storage backend for attachments.

SoftLayerStorage is what an attachment framework talks to: it owns the
queues of pending writes and deletes for one attachment, flushes them to
the configured container, and renders URLs for stored styles.

Credentials, the connection and the directory are resolved lazily on first
use and cached for the lifetime of the instance. Instances are not
thread-safe; use one per attachment.
"""

import logging
from typing import Any, BinaryIO, Callable, Optional

from ...config.settings import Settings, get_settings
from ...core.storage.attachment import Attachment
from ...core.storage.credentials import CredentialResolver
from ...core.storage.directory import Directory
from ...core.storage.errors import LocalCopyError, TransportError
from ...core.storage.flusher import flush_deletes, flush_writes
from ...core.storage.options import StorageOptions, resolve_option
from ...core.storage.urls import ExpiryTime, UrlComposer
from .client import MockConnection, create_connection

logger = logging.getLogger(__name__)

# Shared across storages so mock objects outlive a single attachment
_mock_connection: Optional[MockConnection] = None


class SoftLayerStorage:
    """Object storage for one attachment."""

    def __init__(
        self,
        attachment: Attachment,
        options: StorageOptions,
        environment: Optional[str] = None,
        connection_factory: Callable[[dict], Any] = create_connection,
    ) -> None:
        self.attachment = attachment
        self.options = options
        self._connection_factory = connection_factory
        self._resolver = CredentialResolver(options.credentials, environment, attachment)

        self.queued_for_write: dict[str, BinaryIO] = {}
        self.queued_for_delete: list[str] = []

        self._connection: Any = None
        self._directory: Optional[Directory] = None
        self._extra_upload_fields: Optional[dict] = None
        self._urls = UrlComposer(
            attachment,
            options.host,
            credentials=lambda: self.credentials,
            directory=lambda: self.directory,
        )

    # -----------------------------------------------------------------------
    # Lazily resolved state
    # -----------------------------------------------------------------------

    @property
    def credentials(self) -> dict:
        return self._resolver.resolve()

    @property
    def connection(self) -> Any:
        if self._connection is None:
            self._connection = self._connection_factory(self.credentials)
        return self._connection

    @property
    def directory(self) -> Directory:
        """The container reference. No request is made to build it."""
        if self._directory is None:
            name = resolve_option(self.options.directory, self.attachment)
            self._directory = self.connection.directory(name)
        return self._directory

    @property
    def extra_upload_fields(self) -> dict:
        if self._extra_upload_fields is None:
            if self.options.extra_upload_fields is None:
                self._extra_upload_fields = {}
            else:
                self._extra_upload_fields = dict(
                    resolve_option(self.options.extra_upload_fields, self.attachment) or {}
                )
        return self._extra_upload_fields

    @property
    def scheme(self) -> str:
        return self._urls.scheme

    def _style(self, style: Optional[str]) -> str:
        return style or self.attachment.default_style

    def public(self, style: Optional[str] = None) -> bool:
        return self.options.is_public(self._style(style))

    # -----------------------------------------------------------------------
    # Queries
    # -----------------------------------------------------------------------

    def exists(self, style: Optional[str] = None) -> bool:
        if not self.attachment.original_filename:
            return False
        return self.directory.head(self.attachment.path(self._style(style))) is not None

    def public_url(self, style: Optional[str] = None) -> str:
        return self._urls.public_url(style)

    def expiring_url(self, time: ExpiryTime = None, style: Optional[str] = None) -> str:
        return self._urls.expiring_url(time, style)

    # -----------------------------------------------------------------------
    # Queues
    # -----------------------------------------------------------------------

    def queue_write(self, style: str, file: BinaryIO) -> None:
        self.queued_for_write[style] = file

    def queue_delete(self, path: str) -> None:
        self.queued_for_delete.append(path)

    def flush_writes(self) -> None:
        flush_writes(
            self.directory,
            self.queued_for_write,
            path=self.attachment.path,
            is_public=self.public,
            extra_fields=self.extra_upload_fields,
            after_flush_writes=self.attachment.after_flush_writes,
        )

    def flush_deletes(self) -> None:
        flush_deletes(self.directory, self.queued_for_delete)

    # -----------------------------------------------------------------------
    # Local access
    # -----------------------------------------------------------------------

    def read(self, style: Optional[str] = None) -> bytes:
        """Download a style. Raises LocalCopyError on storage failures."""
        path = self.attachment.path(self._style(style))
        try:
            return self.directory.get(path)
        except TransportError as e:
            raise LocalCopyError(str(e)) from e

    def copy_to_local_file(self, style: Optional[str], local_dest_path: str) -> bool:
        """
        Download a style into a local file.

        Storage failures are logged and reported as False rather than
        raised; local filesystem errors still propagate.
        """
        path = self.attachment.path(self._style(style))
        logger.info(
            "copying",
            extra={"storage_path": path, "local_path": local_dest_path}
        )

        try:
            with open(local_dest_path, "wb") as local_file:
                local_file.write(self.read(style))
        except LocalCopyError as e:
            logger.warning(
                "Cannot copy to local file",
                extra={"storage_path": path, "local_path": local_dest_path, "error": str(e)}
            )
            return False

        return True


# ---------------------------------------------------------------------------
# Factory Functions
# ---------------------------------------------------------------------------

def options_from_settings(settings: Settings, **overrides: Any) -> StorageOptions:
    """
    Build StorageOptions from process settings.

    Keyword overrides win, so an attachment can keep the shared credentials
    but use its own directory or host.
    """
    credentials: Any = settings.storage_credentials_path
    if credentials is None and settings.storage_mock_mode:
        credentials = {"provider": "mock"}

    values = {
        "credentials": credentials,
        "directory": settings.storage_directory,
        "public": settings.storage_public,
        "host": settings.storage_host,
    }
    values.update(overrides)
    return StorageOptions(**values)


def _mock_connection_factory(credentials: dict) -> MockConnection:
    global _mock_connection
    if _mock_connection is None:
        _mock_connection = create_connection(credentials, mock_mode=True)
    return _mock_connection


def create_storage(
    attachment: Attachment,
    settings: Optional[Settings] = None,
    **overrides: Any,
) -> SoftLayerStorage:
    """
    Create a storage backend for an attachment from settings.

    Mock mode storages share one in-memory connection.
    """
    if settings is None:
        settings = get_settings()

    if settings.storage_mock_mode:
        connection_factory = _mock_connection_factory
    else:
        connection_factory = create_connection

    return SoftLayerStorage(
        attachment,
        options_from_settings(settings, **overrides),
        environment=settings.app_env,
        connection_factory=connection_factory,
    )
