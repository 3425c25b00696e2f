import logging
import os
import re
import shutil
import time

from fastapi.concurrency import run_in_threadpool

from ..errors import StorageWriteError

logger = logging.getLogger(__name__)

DEFAULT_BASENAME = "photo"
DEFAULT_EXTENSION = ".jpg"


def safe_filename(original_name: str, timestamp_ms: int) -> str:
    """
    Builds "<epoch-ms>_<base><ext>" with whitespace turned into underscores and
    anything outside [A-Za-z0-9._-] dropped from the base name.
    """
    name = os.path.basename(original_name or "")
    base, ext = os.path.splitext(name)
    ext = ext or DEFAULT_EXTENSION
    base = re.sub(r"\s+", "_", base or DEFAULT_BASENAME)
    base = re.sub(r"[^a-zA-Z0-9._-]", "", base)
    return f"{timestamp_ms}_{base}{ext}"


class UploadStore:
    """Saves uploaded photos to disk and returns the public path they are served at."""

    def __init__(self, upload_dir: str, url_prefix: str = "/uploads"):
        self.upload_dir = upload_dir
        self.url_prefix = url_prefix.rstrip("/")
        os.makedirs(self.upload_dir, exist_ok=True)

    def _save(self, upload) -> str:
        filename = safe_filename(upload.filename, int(time.time() * 1000))
        file_path = os.path.join(self.upload_dir, filename)
        try:
            with open(file_path, "wb") as buffer:
                shutil.copyfileobj(upload.file, buffer)
        except OSError as e:
            logger.error(f"Failed to save file: {e}")
            raise StorageWriteError("Upload save failed") from e
        logger.info(f"Saved snapshot to {file_path}")
        return f"{self.url_prefix}/{filename}"

    async def save(self, upload) -> str:
        return await run_in_threadpool(self._save, upload)
