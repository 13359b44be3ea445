"""
Core attachment storage logic.

This module is framework-agnostic - it doesn't import boto3 or any
infrastructure concerns. This separation means we can test credential
resolution, URL composition and flushing without a storage service.
"""
