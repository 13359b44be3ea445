"""
Infrastructure layer - external service integrations.

- storage: Object storage (SoftLayer / S3-compatible) via boto3

These wrappers translate between the storage client and our domain errors.
"""
