"""
TaskBoard Backend — Upload Storage Service
============================================

What:  Validates, stores and removes task images on local disk.
How:   Checks extension and size, writes bytes under settings.upload_dir
       with a generated UUID filename, returns the public /uploads path.
Who:   Called by the task upload and delete routes.

Security Model:
    1. Extension check:  only common image formats are accepted
    2. Size check:       bounded by settings.max_upload_size
    3. UUID filename:    no user input reaches the file system path
    4. Path guard:       removals are confined to the upload directory
"""

import logging
import os
import uuid
from pathlib import Path
from typing import Optional, Tuple

import aiofiles

from app.config import settings
from app.exceptions import FileStorageError, ValidationError

logger = logging.getLogger(__name__)

# Upload field name on POST /api/tasks/{id}/upload
UPLOAD_FIELD = "image"

# URL prefix the upload directory is mounted under (see main.create_app)
PUBLIC_PREFIX = "/uploads"

ALLOWED_EXTENSIONS = {".png", ".jpg", ".jpeg", ".gif", ".webp"}


class FileService:
    """
    Manages the lifecycle of uploaded task images.

    Directory Structure:
        uploads/
        ├── 3f1c...-9a2e.png
        └── 77b0...-1c44.jpg
    """

    def __init__(self, upload_dir: Optional[str] = None):
        """
        Args:
            upload_dir: Override the default directory (used in tests).
                        If None, uses settings.upload_dir.
        """
        self.upload_dir = Path(upload_dir or settings.upload_dir).resolve()
        self.upload_dir.mkdir(parents=True, exist_ok=True)
        logger.info("FileService initialized with upload_dir=%s", self.upload_dir)

    def validate_extension(self, filename: str) -> str:
        """
        Returns the normalized extension (lowercase with dot).
        Raises ValidationError if the extension is not allowed.
        """
        ext = Path(filename).suffix.lower()
        if ext not in ALLOWED_EXTENSIONS:
            raise ValidationError(
                message=(
                    f"File type '{ext or 'none'}' is not supported. "
                    f"Allowed types: {', '.join(sorted(ALLOWED_EXTENSIONS))}"
                ),
                field=UPLOAD_FIELD,
                context={"extension": ext, "allowed": sorted(ALLOWED_EXTENSIONS)},
            )
        return ext

    def validate_size(self, content_length: Optional[int], actual_size: int) -> None:
        """
        Reject empty uploads and uploads above settings.max_upload_size.

        Args:
            content_length: Size reported by the client (may be None or inaccurate)
            actual_size: Actual byte count of the uploaded file
        """
        max_mb = settings.max_upload_size / (1024 * 1024)

        if actual_size == 0:
            raise ValidationError(message="Uploaded file is empty", field=UPLOAD_FIELD)

        if (content_length and content_length > settings.max_upload_size) or (
            actual_size > settings.max_upload_size
        ):
            raise ValidationError(
                message=f"File is too large. Maximum size is {max_mb:.0f}MB.",
                field=UPLOAD_FIELD,
                context={
                    "max_size_mb": max_mb,
                    "reported_size": content_length,
                    "actual_size": actual_size,
                },
            )

    def public_path(self, stored_name: str) -> str:
        return f"{PUBLIC_PREFIX}/{stored_name}"

    def resolve_public_path(self, public_path: str) -> Optional[Path]:
        """
        Map "/uploads/<name>" back to a file inside upload_dir.

        Returns None for paths outside the prefix or escaping the directory.
        """
        prefix = PUBLIC_PREFIX + "/"
        if not public_path.startswith(prefix):
            return None
        candidate = (self.upload_dir / public_path[len(prefix):]).resolve()
        if candidate.parent != self.upload_dir:
            return None
        return candidate

    async def store_file(self, content: bytes, extension: str) -> Tuple[str, str]:
        """
        Write validated file content to disk.

        Returns: Tuple of (absolute_path, public_path).
        Raises:  FileStorageError if the write fails.
        """
        stored_name = f"{uuid.uuid4()}{extension}"
        absolute_path = self.upload_dir / stored_name

        try:
            self.upload_dir.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(absolute_path, "wb") as f:
                await f.write(content)
        except OSError as e:
            logger.error("Failed to store file at %s: %s", absolute_path, str(e))
            raise FileStorageError(
                message="Failed to save uploaded image. Please try again.",
                context={"path": str(absolute_path), "os_error": str(e)},
            ) from e

        logger.info("File stored: %s (%d bytes)", stored_name, len(content))
        return str(absolute_path), self.public_path(stored_name)

    async def cleanup_file(self, file_path: str) -> None:
        """
        Remove a file from storage, best-effort.

        Accepts an absolute path or a public "/uploads/..." path.
        Missing files are ignored; other failures are logged, not raised.
        """
        try:
            if file_path.startswith(PUBLIC_PREFIX + "/"):
                path = self.resolve_public_path(file_path)
                if path is None:
                    logger.warning("Refusing to clean up path outside uploads: %s", file_path)
                    return
            else:
                path = Path(file_path)

            if path.exists():
                os.remove(path)
                logger.info("Cleaned up file: %s", path.name)
            else:
                logger.debug("Cleanup: file already gone: %s", path.name)
        except OSError as e:
            logger.warning("Failed to clean up file %s: %s", file_path, str(e))

    async def validate_and_store(
        self,
        filename: str,
        content: bytes,
        content_length: Optional[int] = None,
    ) -> Tuple[str, str]:
        """
        Validate extension and size, then store the file.

        Returns: Tuple of (absolute_path, public_path).
        """
        ext = self.validate_extension(filename)
        self.validate_size(content_length, len(content))
        return await self.store_file(content, ext)


file_service = FileService()
