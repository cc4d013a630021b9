"""
Local disk storage for product images.

Used when no remote credentials are configured, or when a remote upload
fails. Unlike remote failures, a failed disk write is raised to the caller.
"""

import logging
import os

from .client import StorageError

logger = logging.getLogger(__name__)


class LocalImageStore:
    """Writes image bytes to paths under the public upload root."""

    def write(self, content: bytes, absolute_path: str) -> None:
        try:
            os.makedirs(os.path.dirname(absolute_path), exist_ok=True)
            with open(absolute_path, "wb") as f:
                f.write(content)

        except OSError as e:
            logger.error(
                "Failed to write image to disk",
                extra={"path": absolute_path, "error": str(e)}
            )
            raise StorageError(f"Local write failed: {e}")

        logger.debug(
            "Wrote image to disk",
            extra={"path": absolute_path, "size_bytes": len(content)}
        )
