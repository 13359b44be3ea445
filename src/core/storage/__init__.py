"""
Object storage for file attachments.

Framework-agnostic pieces: option handling, credential resolution, URL
composition and queue flushing. The boto3-backed directory and the
SoftLayerStorage facade live in src/infrastructure/storage.
"""

from .attachment import Attachment, content_type_of
from .credentials import CredentialResolver, resolve_credentials
from .directory import Directory
from .errors import (
    ConfigurationError,
    FatalTransportError,
    LocalCopyError,
    StorageError,
    TransientNotFound,
    TransportError,
)
from .flusher import UploadState, flush_deletes, flush_writes, upload_with_retry
from .options import Computed, Literal, StorageOptions, as_option, resolve_option
from .urls import UrlComposer, convert_time, shard_host

__all__ = [
    "Attachment",
    "content_type_of",
    "CredentialResolver",
    "resolve_credentials",
    "Directory",
    "ConfigurationError",
    "FatalTransportError",
    "LocalCopyError",
    "StorageError",
    "TransientNotFound",
    "TransportError",
    "UploadState",
    "flush_deletes",
    "flush_writes",
    "upload_with_retry",
    "Computed",
    "Literal",
    "StorageOptions",
    "as_option",
    "resolve_option",
    "UrlComposer",
    "convert_time",
    "shard_host",
]
