"""
Avatar Upload Module

Stores uploaded profile images under UPLOAD_DIR and serves them back as
``/uploads/...`` URLs.

Key Features:
- Image content-type check
- Chunked writes with a size limit
- Removal of replaced local avatars
"""
import os
import random
import time
from typing import Optional

from fastapi import HTTPException, UploadFile, status

from ..utils.config import settings
from ..utils.logger import storage_logger as logger

ALLOWED_IMAGE_TYPES = ("image/jpeg", "image/png", "image/gif", "image/webp")
UPLOAD_URL_PREFIX = "/uploads/"
CHUNK_SIZE = 64 * 1024


class UploadService:
    """Centralized service for avatar file operations"""

    def __init__(self, upload_dir: Optional[str] = None, max_bytes: Optional[int] = None):
        self.upload_dir = upload_dir or settings.UPLOAD_DIR
        self.max_bytes = max_bytes or settings.MAX_UPLOAD_BYTES

        # Ensure directory exists
        os.makedirs(self.upload_dir, exist_ok=True)

    def avatar_filename(self, original_name: Optional[str]) -> str:
        """Unique name of the form avatar-<ms timestamp>-<random><ext>"""
        ext = os.path.splitext(original_name or "")[1]
        return f"avatar-{int(time.time() * 1000)}-{random.randint(0, 10**9)}{ext}"

    def file_url(self, filename: str) -> str:
        return f"{UPLOAD_URL_PREFIX}{filename}"

    async def save_avatar(self, file: UploadFile) -> str:
        """
        Validate and store an uploaded avatar.

        Returns:
            Public URL of the stored file

        Raises:
            HTTPException(400): not an allowed image type
            HTTPException(413): larger than the size limit
        """
        if file.content_type not in ALLOWED_IMAGE_TYPES:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Only image files are allowed")

        filename = self.avatar_filename(file.filename)
        filepath = os.path.join(self.upload_dir, filename)

        written = 0
        try:
            with open(filepath, "wb") as f:
                while True:
                    chunk = await file.read(CHUNK_SIZE)
                    if not chunk:
                        break
                    written += len(chunk)
                    if written > self.max_bytes:
                        raise HTTPException(
                            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                            detail=f"File too large. Maximum size is {self.max_bytes} bytes"
                        )
                    f.write(chunk)
        except Exception:
            if os.path.exists(filepath):
                os.remove(filepath)
            raise

        logger.info(f"Saved avatar to {filepath} ({written} bytes)")
        return self.file_url(filename)

    def delete_avatar(self, avatar_url: Optional[str]) -> bool:
        """Remove a previously uploaded avatar. External URLs are left alone."""
        if not avatar_url or not avatar_url.startswith(UPLOAD_URL_PREFIX):
            return False

        filename = os.path.basename(avatar_url)
        filepath = os.path.join(self.upload_dir, filename)
        try:
            if os.path.exists(filepath):
                os.remove(filepath)
                logger.info(f"Deleted old avatar {filepath}")
                return True
        except OSError as e:
            logger.error(f"Error deleting old avatar {filepath}: {str(e)}")
        return False


def get_upload_service() -> UploadService:
    return UploadService()
