"""
Image storage integration.

Remote storage goes through the S3 API (AWS S3 or any S3-compatible
store), with a mock mode for local development without credentials.
Local disk storage is the fallback.
"""

from .client import (
    MockImageStore,
    S3Config,
    S3ImageStore,
    StorageError,
    create_remote_store,
)
from .local import LocalImageStore

__all__ = [
    "MockImageStore",
    "S3Config",
    "S3ImageStore",
    "StorageError",
    "create_remote_store",
    "LocalImageStore",
]
