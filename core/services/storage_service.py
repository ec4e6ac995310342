# =============================================================================
# core/services/storage_service.py - Supabase Storage Operations
# =============================================================================
# Handles image uploads (avatars, product and article images) to Supabase
# Storage. The returned public URL is what gets written to the record's
# avatar_url / image_url field.
# =============================================================================

import logging
import os
import uuid
from typing import Callable

from fastapi.concurrency import run_in_threadpool
from supabase import Client

from app.exceptions import EmptyFileError, FileTooLargeError, InvalidFileTypeError, StorageUploadError

logger = logging.getLogger(__name__)

CONTENT_TYPES = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".gif": "image/gif",
    ".webp": "image/webp",
}


class StorageService:
    """
    Service for Supabase Storage operations.

    Example:
        storage = StorageService(store.get_client, bucket="images", allowed_extensions=[".png"], max_bytes=5_242_880)
        url = await storage.upload_image("products/7", "shoe.png", content)
    """

    def __init__(
        self,
        client_factory: Callable[[], Client],
        bucket: str,
        allowed_extensions: list[str],
        max_bytes: int,
    ):
        self._client_factory = client_factory
        self.bucket = bucket
        self.allowed_extensions = allowed_extensions
        self.max_bytes = max_bytes

    def check_image(self, filename: str, content: bytes) -> str:
        """
        Validate an image before upload.

        Returns:
            The lowercased file extension

        Raises:
            InvalidFileTypeError: If the extension is not allowed
            EmptyFileError: If the file has no content
            FileTooLargeError: If the file exceeds the size limit
        """
        extension = os.path.splitext(filename or "")[1].lower()
        if extension not in self.allowed_extensions:
            raise InvalidFileTypeError(filename or "", self.allowed_extensions)

        if not content:
            raise EmptyFileError(filename)

        if len(content) > self.max_bytes:
            raise FileTooLargeError(
                size_mb=len(content) / (1024 * 1024),
                max_mb=self.max_bytes // (1024 * 1024),
            )
        return extension

    async def upload_image(self, folder: str, filename: str, content: bytes) -> str:
        """
        Upload an image and return its public URL.

        Args:
            folder: Storage folder, e.g. "avatars/4" or "products/7"
            filename: Original filename (only the extension is kept)
            content: File bytes

        Returns:
            Public URL of the stored image

        Raises:
            StorageUploadError: If upload fails
        """
        extension = self.check_image(filename, content)
        path = f"{folder}/{uuid.uuid4().hex}{extension}"

        def _upload() -> str:
            bucket = self._client_factory().storage.from_(self.bucket)
            bucket.upload(
                path=path,
                file=content,
                file_options={"content-type": CONTENT_TYPES.get(extension, "application/octet-stream"), "upsert": "true"}
            )
            return bucket.get_public_url(path)

        try:
            url = await run_in_threadpool(_upload)
        except Exception as e:
            logger.error(f"Storage upload failed: {e}")
            raise StorageUploadError(str(e)) from e

        logger.info(f"Uploaded image to storage: {path}")
        return url
