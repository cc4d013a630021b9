"""
Domain models for product image storage.

These are plain value objects. They don't know about S3, the filesystem,
or HTTP. Everything the resolver needs is passed in explicitly, so a
product's image state is never read from ambient, shared attributes.
"""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional, Union


@dataclass(frozen=True)
class StorageConfig:
    """
    Process-wide image storage configuration.

    Built once at startup from settings and never mutated, which makes it
    safe to share between concurrent requests.
    """
    default_image_path: str
    remote_credentials_present: bool
    local_upload_root: str
    remote_base_url: Optional[str] = None
    remote_path_root: str = "/"


@dataclass(frozen=True)
class UploadedImage:
    """An image file received from the client, already validated upstream."""
    filename: Optional[str]
    content: Optional[bytes]
    content_type: Optional[str] = None

    @property
    def basename(self) -> Optional[str]:
        """
        Final path component of the client's filename.

        Directories sent by the client are dropped, so a stored file can
        never land outside its company directory. None when nothing usable
        is left.
        """
        if not self.filename:
            return None
        name = self.filename.replace("\\", "/").rsplit("/", 1)[-1]
        if name in ("", ".", ".."):
            return None
        return name

    @property
    def extension(self) -> str:
        name = self.basename
        if name and "." in name:
            return name.rsplit(".", 1)[-1].lower()
        return ""


@dataclass(frozen=True)
class ProductImageState:
    """
    The image-related slice of a product record.

    Frozen because a state is a snapshot: updates produce a new state
    via with_image() rather than mutating the record in place.
    """
    product_id: int
    company_id: Optional[int] = None
    image_path: Optional[str] = None

    def using_default_image(self, config: StorageConfig) -> bool:
        return self.image_path == config.default_image_path

    def with_image(self, image_path: str) -> "ProductImageState":
        return replace(self, image_path=image_path)


class SkipReason(Enum):
    """Why an upload did not produce a stored image."""
    MISSING_COMPANY = "missing_company"
    MISSING_FILE = "missing_file"


@dataclass(frozen=True)
class Written:
    """The image was stored under `key`."""
    key: str
    remote: bool = False


@dataclass(frozen=True)
class Skipped:
    """Nothing was stored. Callers fall back to the default image."""
    reason: SkipReason


WriteOutcome = Union[Written, Skipped]
