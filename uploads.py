import logging
import os
import re
import time

from fastapi import UploadFile

logger = logging.getLogger(__name__)

PUBLIC_PREFIX = "/files"
MB = 1024 * 1024


def _size_label(n: int) -> str:
    if n >= MB and n % MB == 0:
        return f"{n // MB}MB"
    return f"{n} bytes"


class UploadTooLarge(Exception):
    def __init__(self, max_bytes: int):
        super().__init__(f"File size must be less than {_size_label(max_bytes)}")
        self.max_bytes = max_bytes


def sanitize_filename(name: str) -> str:
    return re.sub(r"[^A-Za-z0-9.-]", "_", name or "")


def stored_name(name: str, now: float = None) -> str:
    timestamp = int((now if now is not None else time.time()) * 1000)
    return f"{timestamp}-{sanitize_filename(name)}"


async def save_upload(upload: UploadFile, directory: str, max_bytes: int) -> dict:
    """Write an uploaded file under `directory` and return its public URL.

    The whole body is buffered; anything above `max_bytes` is refused before
    the target directory is touched.
    """
    data = await upload.read(max_bytes + 1)
    if len(data) > max_bytes:
        logger.warning("rejected upload %s: over %d bytes", upload.filename, max_bytes)
        raise UploadTooLarge(max_bytes)

    os.makedirs(directory, exist_ok=True)
    filename = stored_name(upload.filename)
    with open(os.path.join(directory, filename), "wb") as fh:
        fh.write(data)

    logger.info("stored upload %s (%d bytes)", filename, len(data))
    return {"url": f"{PUBLIC_PREFIX}/{filename}", "filename": filename, "size": len(data)}
