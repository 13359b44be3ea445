"""
Object storage integration for attachments.

Supports SoftLayer / IBM Cloud Object Storage and other S3-compatible
services via boto3. Includes mock mode for local development without
credentials.
"""

from .client import MockConnection, MockDirectory, S3Connection, S3Directory, StorageConfig, create_connection
from .softlayer import SoftLayerStorage, create_storage, options_from_settings

__all__ = [
    "MockConnection",
    "MockDirectory",
    "S3Connection",
    "S3Directory",
    "StorageConfig",
    "create_connection",
    "SoftLayerStorage",
    "create_storage",
    "options_from_settings",
]
