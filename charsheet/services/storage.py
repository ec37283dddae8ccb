"""
Storage Service
Handles portrait file storage on the local filesystem.
"""

import logging
import shutil
from pathlib import Path
from typing import Optional

from charsheet.core.config import settings

logger = logging.getLogger(__name__)


class StorageService:
    """Service for file storage operations. Keys are paths relative to the storage root."""

    def __init__(self, base_path: Optional[str] = None):
        self.base_path = Path(base_path or settings.LOCAL_STORAGE_PATH)
        self.base_path.mkdir(parents=True, exist_ok=True)
        logger.debug(f"[Storage] Using local storage: {self.base_path}")

    def _resolve(self, path: str) -> Path:
        file_path = (self.base_path / path).resolve()
        if self.base_path.resolve() not in file_path.parents and file_path != self.base_path.resolve():
            raise ValueError(f"Path escapes storage root: {path}")
        return file_path

    async def upload_bytes(self, data: bytes, path: str) -> str:
        """Save bytes under the given key and return its public URL."""
        file_path = self._resolve(path)
        file_path.parent.mkdir(parents=True, exist_ok=True)

        with open(file_path, "wb") as f:
            f.write(data)

        logger.info(f"[Storage] Stored file: {path} ({len(data)} bytes)")
        return self.get_public_url(path)

    async def delete_file(self, path: str):
        """
        Delete a single file.

        Raises FileNotFoundError when nothing is stored under the key and
        OSError when the file cannot be removed.
        """
        file_path = self._resolve(path)
        if not file_path.is_file():
            raise FileNotFoundError(path)
        file_path.unlink()
        logger.info(f"[Storage] Deleted file: {path}")

    async def delete_folder(self, prefix: str):
        """Delete all files with given prefix."""
        folder_path = self._resolve(prefix)
        if folder_path.exists():
            shutil.rmtree(folder_path)
            logger.info(f"[Storage] Deleted folder: {prefix}")

    async def get_file(self, path: str) -> bytes:
        """Get file contents."""
        file_path = self._resolve(path)
        with open(file_path, "rb") as f:
            return f.read()

    def exists(self, path: str) -> bool:
        return self._resolve(path).is_file()

    def get_public_url(self, path: str) -> str:
        """Files are served back through the API's /files route."""
        return f"/files/{path}"
