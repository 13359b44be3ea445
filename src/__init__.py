"""
Object storage backend for file attachments.

This package contains:
- core: Framework-agnostic storage logic (credentials, URLs, flushing)
- infrastructure: The boto3-backed directory and the SoftLayerStorage facade
- config: Application configuration
"""

__version__ = "0.1.0"
