"""
Exception hierarchy for the object-storage backend.

Callers generally catch StorageError. The finer classes exist because the
flusher and local copy treat them differently: a missing container is
recovered once, a failed download is turned into a boolean.
"""


class StorageError(Exception):
    """Base class for everything raised by the storage backend."""
    pass


class ConfigurationError(StorageError):
    """Raised when storage options or credentials are malformed."""
    pass


class TransportError(StorageError):
    """Raised when the storage client fails."""
    pass


class TransientNotFound(TransportError):
    """The target container does not exist (yet)."""
    pass


class FatalTransportError(TransportError):
    """A client failure that will not be retried."""
    pass


class LocalCopyError(TransportError):
    """Raised when an object cannot be downloaded."""
    pass
