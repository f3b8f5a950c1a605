"""
PlaceShare Backend: Image Storage Service
=========================================

What:  Validates uploaded images and writes them to the storage root.
How:   Extension and declared MIME type must both be PNG/JPEG, size must be
       within MAX_FILE_SIZE, and the file is written with aiofiles under a
       UUID filename. The returned value is the public path the image is
       served from (`uploads/images/<uuid>.<ext>`), which is what the place
       and user records store.
Who:   PlaceService and UserService, before their database work runs.

Deleting files is not done here; see ResourceCleaner.

Storage layout:
    storage_root/
    ├── 0b6f1d7e-....png
    └── 9a3c55e2-....jpg
"""

import logging
import uuid
from pathlib import Path
from typing import Optional

import aiofiles
import aiofiles.os

from placeshare.exceptions import FileStorageError, ValidationError

logger = logging.getLogger(__name__)

ALLOWED_MIME_TYPES = {
    "image/png": ".png",
    "image/jpeg": ".jpg",
    "image/jpg": ".jpg",
}

ALLOWED_EXTENSIONS = {".png", ".jpg", ".jpeg"}

# URL prefix the stored images are served under (see routes/uploads.py)
PUBLIC_PREFIX = "uploads/images"


class FileService:
    """
    Lifecycle of an uploaded image:
        1. validate_extension()  fast check on the client filename
        2. validate_mime_type()  declared Content-Type of the form part
        3. validate_size()       non-empty and within the configured cap
        4. store_file()          aiofiles write, UUID name
        5. public path returned, stored on the record
    """

    def __init__(self, storage_root: str, max_file_size: int):
        self.storage_root = Path(storage_root).resolve()
        self.max_file_size = max_file_size
        logger.info("FileService initialized with storage_root=%s", self.storage_root)

    def validate_extension(self, filename: str) -> str:
        """Returns the normalized extension (lowercase, with dot)."""
        ext = Path(filename).suffix.lower()
        if ext not in ALLOWED_EXTENSIONS:
            raise ValidationError(
                message=(
                    f"File type '{ext or 'none'}' is not supported. "
                    f"Allowed types: {', '.join(sorted(ALLOWED_EXTENSIONS))}"
                ),
                field="image",
                context={"extension": ext},
            )
        return ext

    def validate_mime_type(self, content_type: Optional[str]) -> str:
        mime_type = (content_type or "").split(";")[0].strip().lower()
        if mime_type not in ALLOWED_MIME_TYPES:
            raise ValidationError(
                message="Invalid mime type! The image must be a PNG or JPEG file.",
                field="image",
                context={"declared_mime": mime_type},
            )
        return mime_type

    def validate_size(self, actual_size: int) -> None:
        if actual_size == 0:
            raise ValidationError(message="The uploaded image is empty.", field="image")
        if actual_size > self.max_file_size:
            max_kb = self.max_file_size / 1000
            raise ValidationError(
                message=f"Image is too large. Maximum size is {max_kb:.0f}KB.",
                field="image",
                context={"actual_size": actual_size, "max_size": self.max_file_size},
            )

    async def store_file(self, content: bytes, extension: str) -> str:
        """
        Write validated content to disk.

        Returns:
            Public path of the stored file, e.g. "uploads/images/<uuid>.png".

        Raises:
            FileStorageError if the write fails.
        """
        filename = f"{uuid.uuid4()}{extension}"
        absolute_path = self.storage_root / filename

        try:
            async with aiofiles.open(absolute_path, "wb") as f:
                await f.write(content)
        except OSError as e:
            logger.error("Failed to store file at %s: %s", absolute_path, str(e))
            await self._remove_partial(absolute_path)
            raise FileStorageError(context={"path": str(absolute_path), "os_error": str(e)})

        logger.info("File stored: %s (%d bytes)", filename, len(content))
        return f"{PUBLIC_PREFIX}/{filename}"

    async def _remove_partial(self, absolute_path: Path) -> None:
        """Drop whatever an interrupted write left behind."""
        try:
            await aiofiles.os.remove(absolute_path)
            logger.info("Removed partial write: %s", absolute_path.name)
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning("Failed to remove partial write %s: %s", absolute_path.name, str(e))

    def validate(self, filename: str, content_type: Optional[str], content: bytes) -> str:
        """Run every check without touching the disk; returns the extension."""
        ext = self.validate_extension(filename)
        self.validate_mime_type(content_type)
        self.validate_size(len(content))
        return ext

    async def validate_and_store(
        self,
        filename: str,
        content_type: Optional[str],
        content: bytes,
    ) -> str:
        """Complete validation and storage pipeline; returns the public path."""
        ext = self.validate(filename, content_type, content)
        return await self.store_file(content, ext)

    def resolve(self, image_path: str) -> Path:
        """
        Map a public image path (or bare filename) to its absolute location.

        Raises:
            ValidationError if the path would escape the storage root.
        """
        name = image_path
        if name.startswith(PUBLIC_PREFIX + "/"):
            name = name[len(PUBLIC_PREFIX) + 1:]
        full_path = (self.storage_root / name).resolve()
        if full_path.parent != self.storage_root:
            raise ValidationError(message="Invalid file path", field="image")
        return full_path
