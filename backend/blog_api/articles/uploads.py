"""Image upload storage for articles."""

import logging
import random
import time
from dataclasses import dataclass
from pathlib import Path

from fastapi import UploadFile
from fastapi.concurrency import run_in_threadpool

from ..config import settings
from ..errors import ValidationError

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024


@dataclass(frozen=True)
class StoredImage:
    path: str  # public URL path, e.g. /public/1700000000000-123456789.png
    size: int
    content_type: str


def _unique_filename(original_name: str | None) -> str:
    suffix = Path(original_name or "").suffix
    return f"{int(time.time() * 1000)}-{random.randint(0, 10**9)}{suffix}"


async def _read_limited(upload: UploadFile, limit: int) -> bytes:
    chunks: list[bytes] = []
    total = 0
    while True:
        chunk = await upload.read(CHUNK_SIZE)
        if not chunk:
            break
        total += len(chunk)
        if total > limit:
            raise ValidationError(
                "Image is too large",
                extra={"error": f"maximum upload size is {limit} bytes"},
            )
        chunks.append(chunk)
    return b"".join(chunks)


def _write_file(target: Path, data: bytes) -> None:
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_bytes(data)


async def store_image(upload: UploadFile) -> StoredImage:
    """
    Validate an uploaded image and write it into ``UPLOAD_DIR``.

    Only ``image/*`` content types up to ``MAX_UPLOAD_SIZE`` bytes are
    accepted; anything else raises ``ValidationError`` before touching disk.
    """
    content_type = upload.content_type or ""
    if not content_type.startswith("image/"):
        raise ValidationError("Only image files are allowed", extra={"error": f"unsupported type {content_type!r}"})

    data = await _read_limited(upload, settings.MAX_UPLOAD_SIZE)
    filename = _unique_filename(upload.filename)
    await run_in_threadpool(_write_file, Path(settings.UPLOAD_DIR) / filename, data)

    public_path = f"{settings.PUBLIC_URL_PATH.rstrip('/')}/{filename}"
    logger.info(f"Stored upload {upload.filename!r} as {public_path} ({len(data)} bytes)")
    return StoredImage(path=public_path, size=len(data), content_type=content_type)
