"""
Infrastructure layer - external service integrations.

Each subdirectory wraps an external dependency:
- storage: Object storage (S3) and local disk
- products: Product record persistence

These wrappers translate between external formats and our domain models.
"""
