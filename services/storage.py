"""Local disk storage for uploaded photos and notice attachments."""

import logging
import os
import random
import shutil
import time
from typing import Optional

from fastapi import UploadFile

from config import settings

logger = logging.getLogger(__name__)

PUBLIC_PREFIX = "/uploads/"


def save_upload(upload: UploadFile) -> str:
    """Copy the upload into UPLOAD_DIR and return its public path (/uploads/<name>)."""
    os.makedirs(settings.UPLOAD_DIR, exist_ok=True)

    file_ext = os.path.splitext(upload.filename or "")[1].lower()
    unique_name = f"{int(time.time() * 1000)}_{random.randint(1000, 9999)}{file_ext}"
    file_path = os.path.join(settings.UPLOAD_DIR, unique_name)

    with open(file_path, "wb") as buffer:
        shutil.copyfileobj(upload.file, buffer)

    logger.info("Stored upload %s as %s", upload.filename, unique_name)
    return PUBLIC_PREFIX + unique_name


def resolve_upload(public_path: Optional[str]) -> Optional[str]:
    """Map /uploads/<name> back to a file under UPLOAD_DIR; None for anything else."""
    if not public_path or not public_path.startswith(PUBLIC_PREFIX):
        return None

    root = os.path.realpath(settings.UPLOAD_DIR)
    candidate = os.path.realpath(os.path.join(root, public_path[len(PUBLIC_PREFIX):]))
    if os.path.dirname(candidate) != root:
        return None
    return candidate


def delete_upload(public_path: Optional[str]) -> bool:
    file_path = resolve_upload(public_path)
    if file_path is None:
        if public_path:
            logger.warning("Refusing to delete file outside upload dir: %s", public_path)
        return False

    if not os.path.exists(file_path):
        return False

    try:
        os.remove(file_path)
    except OSError as e:
        logger.warning("Could not delete %s: %s", file_path, e)
        return False

    logger.info("Deleted upload %s", public_path)
    return True
