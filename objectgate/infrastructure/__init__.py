"""
Infrastructure layer - external service integrations.

- storage: S3-compatible object store client (boto3) and in-memory mock

These wrappers translate between external formats and our domain models.
"""
