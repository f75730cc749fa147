"""
Upload service — stores files on local disk under UPLOAD_FOLDER.

Stored names are ``<uuid hex>_<secure filename>`` so two uploads with the
same original name never overwrite each other. The returned descriptor is
what attachments and file deliverables embed.
"""

from __future__ import annotations

import logging
import os
import uuid

from werkzeug.utils import secure_filename

from app.core.exceptions import ValidationError

logger = logging.getLogger(__name__)

UPLOAD_URL_PREFIX = "/uploads"


def save_upload(file_storage, upload_folder: str) -> dict:
    """Persist an uploaded file and describe it.

    Returns:
        ``{"url", "name", "type", "size"}``

    Raises:
        ValidationError: no file, or an empty filename.
    """
    if file_storage is None or not file_storage.filename:
        raise ValidationError("No file uploaded", details={"file": "required"})

    original = file_storage.filename
    safe = secure_filename(original) or "upload"
    stored = f"{uuid.uuid4().hex}_{safe}"

    os.makedirs(upload_folder, exist_ok=True)
    path = os.path.join(upload_folder, stored)
    file_storage.save(path)
    size = os.path.getsize(path)

    logger.info("File uploaded name=%s stored=%s size=%d", original, stored, size)
    return {
        "url": f"{UPLOAD_URL_PREFIX}/{stored}",
        "name": original,
        "type": file_storage.mimetype or "application/octet-stream",
        "size": size,
    }


def discard_upload(descriptor: dict, upload_folder: str) -> None:
    """Remove a stored file that ended up unreferenced. Missing files are ignored."""
    stored = os.path.basename(descriptor.get("url") or "")
    if not stored:
        return
    path = os.path.join(upload_folder, stored)
    if os.path.exists(path):
        os.remove(path)
        logger.info("Upload discarded stored=%s", stored)
