# app/services/storage_service.py
"""
Local-disk storage for uploaded files (agent documents, car images).

Saves to:  {UPLOAD_DIR}/{category}/{owner_id}/{timestamp}-{original_name}
Returns paths relative to UPLOAD_DIR's parent so they can be stored in the DB
and served back as-is.
"""

import os
import re
from datetime import datetime
from app.config import settings
from app.utils.logger import get_logger

logger = get_logger(__name__)

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def _safe_name(original_name: str) -> str:
    base = os.path.basename(original_name or "upload")
    return _UNSAFE_CHARS.sub("_", base).strip("._") or "upload"


def save_upload(category: str, owner_id: int, original_name: str, content: bytes) -> str:
    """Write bytes to disk and return the stored relative path."""
    directory = os.path.join(settings.UPLOAD_DIR, category, str(owner_id))
    os.makedirs(directory, exist_ok=True)

    timestamp = datetime.utcnow().strftime("%Y%m%d_%H%M%S_%f")
    filename = f"{timestamp}-{_safe_name(original_name)}"
    filepath = os.path.join(directory, filename)
    with open(filepath, "wb") as f:
        f.write(content)

    logger.info(f"[STORAGE] Saved {filepath} ({len(content)} bytes)")
    return filepath.replace(os.sep, "/")


def delete_upload(relative_path: str) -> bool:
    """Remove a stored file. Missing files are not an error."""
    if not relative_path:
        return False
    try:
        os.remove(relative_path)
        logger.info(f"[STORAGE] Deleted {relative_path}")
        return True
    except FileNotFoundError:
        logger.warning(f"[STORAGE] Already gone: {relative_path}")
        return False
