"""
Image storage for entry pictures.

Routers talk to the ImageStore protocol; LocalImageStore keeps files on disk
under IMAGE_STORAGE_DIR and main.py serves that directory at /media.
"""
import logging
import uuid
from pathlib import Path
from typing import Protocol

from kempoverse.settings import get_settings

logger = logging.getLogger(__name__)

ALLOWED_IMAGE_TYPES = ("image/jpeg", "image/jpg", "image/png", "image/webp", "image/gif")


class ImageStore(Protocol):
    def put(self, key: str, data: bytes, content_type: str) -> str:
        """Store the object and return its public URL."""
        ...


def object_key(entry_id: str, filename: str | None) -> str:
    """<entry_id>/<uuid4>.<ext>, extension from the upload's name (default jpg)."""
    ext = "jpg"
    if filename and "." in filename:
        ext = filename.rsplit(".", 1)[-1].lower() or "jpg"
    return f"{entry_id}/{uuid.uuid4()}.{ext}"


class LocalImageStore:
    def __init__(self, root: Path, public_base_url: str):
        self.root = Path(root)
        self.public_base_url = public_base_url.rstrip("/")

    def put(self, key: str, data: bytes, content_type: str) -> str:
        path = (self.root / key).resolve()
        if self.root.resolve() not in path.parents:
            raise ValueError(f"object key escapes storage root: {key!r}")
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
        logger.info("Stored %s (%s, %d bytes)", key, content_type, len(data))
        return f"{self.public_base_url}/{key}"


def get_image_store() -> ImageStore:
    s = get_settings()
    return LocalImageStore(Path(s.IMAGE_STORAGE_DIR), s.IMAGE_PUBLIC_BASE_URL)
