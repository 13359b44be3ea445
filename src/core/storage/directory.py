"""
Protocol for a remote directory (bucket / container).

Implementations live in src/infrastructure/storage. A directory object is a
reference: building one does not talk to the service, and the container may
not exist until save() is called.
"""

from typing import Optional, Protocol


class Directory(Protocol):
    """
    Operations the storage backend performs against one container.

    Implementations may also offer scheme-specific signed URLs as
    get_https_url(key, expires_at) / get_http_url(key, expires_at);
    callers look these up by name and fall back when missing.
    """

    key: str

    @property
    def host_name(self) -> str:
        """Host (and path prefix) objects in this directory are served from."""
        ...

    def head(self, key: str) -> Optional[dict]:
        """Object metadata, or None if the object doesn't exist."""
        ...

    def create_file(self, **fields) -> None:
        """
        Store an object. Fields include key, body, public and content_type.

        Raises TransientNotFound if the container doesn't exist.
        """
        ...

    def save(self) -> None:
        """Create the container remotely."""
        ...

    def destroy(self, key: str) -> None:
        ...

    def get(self, key: str) -> bytes:
        ...

    def public_url(self, key: str) -> str:
        ...
