"""
Public and expiring URLs for stored objects.

A custom host may be configured to serve objects through a CDN alias. When
the host contains "%d", it is treated as a template for several virtual
hosts (assets0.example.com ... assets3.example.com) and the index is derived
from the object path, so one object is always served from the same host and
browsers can cache it.
"""

import zlib
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Optional, Union

from .attachment import Attachment
from .directory import Directory
from .options import Computed, Option, resolve_option

SOFTLAYER_PROVIDER = "softlayer"
DEFAULT_SCHEME = "https"
DEFAULT_EXPIRY_SECONDS = 3600
SHARD_COUNT = 4
SHARD_PLACEHOLDER = "%d"

ExpiryTime = Union[None, int, float, timedelta, datetime]


def shard_index(path: str, shards: int = SHARD_COUNT) -> int:
    """
    Stable shard for a path.

    crc32 rather than hash() because str hashes are salted per process.
    """
    return zlib.crc32(path.encode("utf-8")) % shards


def shard_host(template: str, path: str, shards: int = SHARD_COUNT) -> str:
    if SHARD_PLACEHOLDER in template:
        return template.replace(SHARD_PLACEHOLDER, str(shard_index(path, shards)), 1)
    return template


def convert_time(time: ExpiryTime, now: Optional[datetime] = None) -> datetime:
    """
    Absolute expiry for a signed URL.

    None means one hour from now; numbers and timedeltas are relative to now.
    """
    if now is None:
        now = datetime.now(timezone.utc)

    if time is None:
        return now + timedelta(seconds=DEFAULT_EXPIRY_SECONDS)
    if isinstance(time, datetime):
        return time
    if isinstance(time, timedelta):
        return now + time
    if isinstance(time, (int, float)) and not isinstance(time, bool):
        return now + timedelta(seconds=time)

    raise TypeError(f"Unsupported expiry time: {time!r}")


class UrlComposer:
    """
    Computes URLs for one attachment.

    credentials and directory are callables so nothing is resolved (and no
    connection is built) for a URL that only needs the custom host.
    """

    def __init__(
        self,
        attachment: Attachment,
        host: Optional[Option],
        credentials: Callable[[], dict],
        directory: Callable[[], Directory],
    ) -> None:
        self._attachment = attachment
        self._host = host
        self._credentials = credentials
        self._directory = directory
        self._scheme: Optional[str] = None

    @property
    def scheme(self) -> str:
        if self._scheme is None:
            self._scheme = self._credentials().get("scheme") or DEFAULT_SCHEME
        return self._scheme

    @property
    def provider(self) -> str:
        return str(self._credentials().get("provider", "")).lower()

    @property
    def default_host(self) -> str:
        return self._directory().host_name

    def _style(self, style: Optional[str]) -> str:
        return style or self._attachment.default_style

    def _path(self, style: str) -> str:
        return self._attachment.path(style) or ""

    def dynamic_host(self, style: Optional[str] = None) -> str:
        """The configured host for a style, with the shard placeholder filled."""
        style = self._style(style)
        host = resolve_option(self._host, self._attachment)
        if isinstance(self._host, Computed):
            return str(host)
        return shard_host(str(host), self._path(style))

    def public_url(self, style: Optional[str] = None) -> str:
        style = self._style(style)
        path = self._path(style)

        if self._host is not None:
            return f"{self.dynamic_host(style)}/{path}"

        if self.provider == SOFTLAYER_PROVIDER:
            return f"{self.scheme}://{self.default_host}/{path}"

        return self._directory().public_url(path)

    def expiring_url(self, time: ExpiryTime = None, style: Optional[str] = None) -> str:
        style = self._style(style)
        expires_at = convert_time(time)
        path = self._attachment.path(style)

        signer: Any = None
        if path:
            signer = getattr(self._directory(), f"get_{self.scheme}_url", None)

        if signer is None:
            return self._attachment.url(style)

        url = signer(path, expires_at)

        if self._host is not None:
            # Plain substring replace; a default host repeated inside the
            # query string would be rewritten too.
            url = url.replace(f"{self.scheme}://{self.default_host}", self.dynamic_host(style))

        return url
