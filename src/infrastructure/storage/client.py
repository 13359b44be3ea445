"""
Object storage directories for attachments.

SoftLayer Object Storage (now IBM Cloud Object Storage) speaks the S3 API,
so the real implementation is a thin wrapper around a boto3 S3 client.
Any other S3-compatible service works the same way.

Mock mode keeps objects in memory, enabling local development and tests
without provisioning a bucket.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Optional
from urllib.parse import urlsplit, urlunsplit

from botocore.exceptions import BotoCoreError, ClientError

from ...core.storage.errors import (
    ConfigurationError,
    FatalTransportError,
    TransientNotFound,
)

logger = logging.getLogger(__name__)

# Error codes S3-compatible services return for a missing bucket or object
MISSING_BUCKET_CODES = {"NoSuchBucket"}
MISSING_OBJECT_CODES = {"404", "NoSuchKey", "NotFound"}
EXISTING_BUCKET_CODES = {"BucketAlreadyOwnedByYou"}


@dataclass
class StorageConfig:
    """Connection settings for an S3-compatible endpoint."""
    access_key_id: str
    secret_access_key: str
    endpoint_url: str
    region: str = "us-standard"

    @classmethod
    def from_credentials(cls, credentials: dict) -> "StorageConfig":
        """
        Build from resolved credentials.

        Expects auth_url, username and password; region is optional.
        """
        missing = [
            name for name in ("auth_url", "username", "password")
            if not credentials.get(name)
        ]
        if missing:
            raise ConfigurationError(
                f"Storage credentials missing: {', '.join(missing)}"
            )

        return cls(
            access_key_id=str(credentials["username"]),
            secret_access_key=str(credentials["password"]),
            endpoint_url=str(credentials["auth_url"]).rstrip("/"),
            region=str(credentials.get("region") or "us-standard"),
        )


def _error_code(error: Exception) -> str:
    response = getattr(error, "response", None) or {}
    return str(response.get("Error", {}).get("Code", ""))


def _with_scheme(url: str, scheme: str) -> str:
    parts = urlsplit(url)
    return urlunsplit((scheme,) + tuple(parts[1:]))


class S3Directory:
    """
    One bucket on an S3-compatible service.

    Creating this object makes no request; the bucket is only created by
    save(). botocore errors are translated into the storage error hierarchy.
    """

    def __init__(self, s3_client: Any, key: str, endpoint_url: str) -> None:
        self._s3_client = s3_client
        self.key = key
        self._endpoint_url = endpoint_url

    @property
    def host_name(self) -> str:
        # Path-style addressing: the bucket is the first path segment
        return f"{urlsplit(self._endpoint_url).netloc}/{self.key}"

    def head(self, key: str) -> Optional[dict]:
        try:
            return self._s3_client.head_object(Bucket=self.key, Key=key)
        except ClientError as e:
            if _error_code(e) in MISSING_OBJECT_CODES | MISSING_BUCKET_CODES:
                return None
            raise FatalTransportError(f"HEAD {key} failed: {e}") from e
        except BotoCoreError as e:
            raise FatalTransportError(f"HEAD {key} failed: {e}") from e

    def create_file(self, key: str, body: Any, public: bool = True,
                    content_type: Optional[str] = None, **extra: Any) -> None:
        params = dict(extra)
        params.update(
            Bucket=self.key,
            Key=key,
            Body=body,
            ACL="public-read" if public else "private",
        )
        if content_type:
            params["ContentType"] = content_type

        try:
            self._s3_client.put_object(**params)
        except ClientError as e:
            if _error_code(e) in MISSING_BUCKET_CODES:
                raise TransientNotFound(f"Bucket {self.key} does not exist") from e
            raise FatalTransportError(f"Upload of {key} failed: {e}") from e
        except BotoCoreError as e:
            raise FatalTransportError(f"Upload of {key} failed: {e}") from e

    def save(self) -> None:
        try:
            self._s3_client.create_bucket(Bucket=self.key)
        except ClientError as e:
            if _error_code(e) in EXISTING_BUCKET_CODES:
                return
            raise FatalTransportError(f"Creating bucket {self.key} failed: {e}") from e
        except BotoCoreError as e:
            raise FatalTransportError(f"Creating bucket {self.key} failed: {e}") from e

        logger.info("Created bucket", extra={"bucket": self.key})

    def destroy(self, key: str) -> None:
        try:
            self._s3_client.delete_object(Bucket=self.key, Key=key)
        except (ClientError, BotoCoreError) as e:
            raise FatalTransportError(f"Delete of {key} failed: {e}") from e

    def get(self, key: str) -> bytes:
        try:
            response = self._s3_client.get_object(Bucket=self.key, Key=key)
            return response["Body"].read()
        except (ClientError, BotoCoreError) as e:
            raise FatalTransportError(f"Download of {key} failed: {e}") from e

    def public_url(self, key: str) -> str:
        return f"{self._endpoint_url}/{self.key}/{key}"

    def get_https_url(self, key: str, expires_at: datetime) -> str:
        return self._presigned_url(key, expires_at, "https")

    def get_http_url(self, key: str, expires_at: datetime) -> str:
        return self._presigned_url(key, expires_at, "http")

    def _presigned_url(self, key: str, expires_at: datetime, scheme: str) -> str:
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=timezone.utc)
        expires_in = int((expires_at - datetime.now(timezone.utc)).total_seconds())

        try:
            url = self._s3_client.generate_presigned_url(
                "get_object",
                Params={"Bucket": self.key, "Key": key},
                ExpiresIn=max(expires_in, 1),
            )
        except (ClientError, BotoCoreError) as e:
            raise FatalTransportError(f"Signing URL for {key} failed: {e}") from e

        return _with_scheme(url, scheme)


class S3Connection:
    """
    boto3 S3 client bound to one endpoint.

    boto3 is imported here (not at module level) because mock mode
    doesn't need it.
    """

    def __init__(self, config: StorageConfig) -> None:
        try:
            import boto3
            from botocore.config import Config
        except ImportError:
            raise ImportError(
                "boto3 is required for object storage. Install with: pip install boto3"
            )

        self._config = config

        # Path-style addressing keeps the bucket out of the hostname,
        # which SoftLayer endpoints require
        boto_config = Config(
            signature_version="s3v4",
            s3={"addressing_style": "path"},
        )

        self._s3_client = boto3.client(
            "s3",
            endpoint_url=config.endpoint_url,
            aws_access_key_id=config.access_key_id,
            aws_secret_access_key=config.secret_access_key,
            region_name=config.region,
            config=boto_config,
        )

        logger.info(
            "Initialized object storage client",
            extra={"endpoint": config.endpoint_url}
        )

    def directory(self, key: str) -> S3Directory:
        return S3Directory(self._s3_client, key, self._config.endpoint_url)


# ---------------------------------------------------------------------------
# Mock Storage for Local Development
# ---------------------------------------------------------------------------

class MockDirectory:
    """
    In-memory directory.

    Starts out missing unless exists=True, so the create-on-first-upload
    path behaves as it does against a real service.
    """

    def __init__(self, key: str, exists: bool = False) -> None:
        self.key = key
        self.exists = exists
        self.objects: dict[str, dict] = {}

    @property
    def host_name(self) -> str:
        return f"mock.objectstorage.local/{self.key}"

    def head(self, key: str) -> Optional[dict]:
        stored = self.objects.get(key)
        if stored is None:
            return None
        return {
            "ContentType": stored["content_type"],
            "ContentLength": len(stored["body"]),
        }

    def create_file(self, key: str, body: Any, public: bool = True,
                    content_type: Optional[str] = None, **extra: Any) -> None:
        if not self.exists:
            raise TransientNotFound(f"Bucket {self.key} does not exist")

        data = body.read() if hasattr(body, "read") else body
        if isinstance(data, str):
            data = data.encode("utf-8")

        self.objects[key] = {
            "body": bytes(data),
            "public": public,
            "content_type": content_type,
            "extra": extra,
        }

        logger.debug(
            "Stored object in mock storage",
            extra={"bucket": self.key, "key": key, "size_bytes": len(data)}
        )

    def save(self) -> None:
        self.exists = True

    def destroy(self, key: str) -> None:
        self.objects.pop(key, None)

    def get(self, key: str) -> bytes:
        if key not in self.objects:
            raise FatalTransportError(f"Object not found: {key}")
        return self.objects[key]["body"]

    def public_url(self, key: str) -> str:
        return f"mock://{self.host_name}/{key}"

    def get_https_url(self, key: str, expires_at: datetime) -> str:
        return f"https://{self.host_name}/{key}?expires={int(expires_at.timestamp())}"


class MockConnection:
    """Hands out one MockDirectory per name so state survives between calls."""

    def __init__(self) -> None:
        self._directories: dict[str, MockDirectory] = {}
        logger.info("Initialized mock storage client (in-memory)")

    def directory(self, key: str) -> MockDirectory:
        if key not in self._directories:
            self._directories[key] = MockDirectory(key)
        return self._directories[key]


# ---------------------------------------------------------------------------
# Factory Function
# ---------------------------------------------------------------------------

def create_connection(credentials: dict, mock_mode: bool = False):
    """
    Create a storage connection from resolved credentials.

    Args:
        credentials: Provider-ready credential mapping
        mock_mode: If True, return an in-memory connection

    Returns:
        Connection whose directory(name) returns a Directory
    """
    if mock_mode:
        return MockConnection()

    return S3Connection(StorageConfig.from_credentials(credentials))
