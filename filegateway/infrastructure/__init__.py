"""
Infrastructure layer - external service integrations.

- storage: Object storage (S3 and S3-compatible stores via boto3)

These wrappers translate between SDK formats and errors and our domain models.
"""
