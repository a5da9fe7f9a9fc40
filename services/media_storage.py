"""
Receipegram Media Storage
Stores uploaded recipe videos and images on local disk under UPLOAD_DIR
"""

from pathlib import Path
from typing import Optional
import uuid

from fastapi import UploadFile
import structlog

from core.config import get_settings
from core.exceptions import PayloadTooLargeError, ValidationError

settings = get_settings()
logger = structlog.get_logger()

CHUNK_SIZE = 1024 * 1024

# Form field name -> required content-type prefix
ALLOWED_MEDIA_FIELDS = {
    "video": "video/",
    "image": "image/",
}


def upload_dir() -> Path:
    return Path(settings.UPLOAD_DIR)


def ensure_upload_dir() -> Path:
    path = upload_dir()
    path.mkdir(parents=True, exist_ok=True)
    return path


def has_upload(upload: Optional[UploadFile]) -> bool:
    """Browsers send an empty, unnamed part when no file was chosen"""
    return upload is not None and bool(upload.filename)


def check_media_type(field: str, upload: UploadFile) -> None:
    """Reject a part whose content type does not match its field"""
    prefix = ALLOWED_MEDIA_FIELDS.get(field)
    if prefix is None:
        raise ValidationError("Unknown field")

    content_type = upload.content_type or ""
    if not content_type.startswith(prefix):
        raise ValidationError(f"Only {field} files are allowed for {field} field")


async def save_upload(field: str, upload: Optional[UploadFile]) -> Optional[str]:
    """
    Persist an uploaded part and return its stored file name

    The stored name is a fresh uuid4 plus the original extension. Parts
    larger than MAX_UPLOAD_SIZE are discarded and raise PayloadTooLargeError.
    """
    if not has_upload(upload):
        return None

    check_media_type(field, upload)

    filename = f"{uuid.uuid4()}{Path(upload.filename).suffix.lower()}"
    destination = ensure_upload_dir() / filename

    written = 0
    try:
        with destination.open("wb") as out:
            while True:
                chunk = await upload.read(CHUNK_SIZE)
                if not chunk:
                    break
                written += len(chunk)
                if written > settings.MAX_UPLOAD_SIZE:
                    raise PayloadTooLargeError("File too large")
                out.write(chunk)
    except Exception:
        destination.unlink(missing_ok=True)
        raise
    finally:
        await upload.close()

    logger.info("Media stored", field=field, filename=filename, size=written)
    return filename


def remove_media(*filenames: Optional[str]) -> None:
    """Best-effort removal of stored media; failures are only logged"""
    for filename in filenames:
        if not filename:
            continue

        # Stored names never contain a directory part
        path = upload_dir() / Path(filename).name
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            logger.warning("Failed to remove media file", filename=filename, error=str(e))
