"""Resize and recompress uploaded images before they are stored."""

import io
import logging
import threading
from typing import BinaryIO

from fastapi import UploadFile
from PIL import Image, ImageOps, UnidentifiedImageError

from campus_pulse.core.config import Settings
from campus_pulse.core.errors import ImageProcessingError, UploadTooLargeError

logger = logging.getLogger(__name__)

_READ_CHUNK_BYTES = 64 * 1024


def read_upload(file: UploadFile | None, max_bytes: int) -> bytes | None:
    """
    Return the uploaded bytes, or None when no file was attached.

    Reads at most max_bytes + 1 bytes so an oversized upload is rejected
    without being buffered whole. Browsers send an empty part with no
    filename for an untouched file input; that counts as no file.
    """
    if file is None:
        return None
    stream: BinaryIO = file.file
    buf = bytearray()
    while len(buf) <= max_bytes:
        chunk = stream.read(min(_READ_CHUNK_BYTES, max_bytes + 1 - len(buf)))
        if not chunk:
            break
        buf.extend(chunk)
    if len(buf) > max_bytes:
        raise UploadTooLargeError(
            f"File upload error: File too large (limit {max_bytes // (1024 * 1024)} MB)"
            if max_bytes >= 1024 * 1024
            else f"File upload error: File too large (limit {max_bytes} bytes)"
        )
    if not buf and not file.filename:
        return None
    return bytes(buf)


def compress_image(raw: bytes, max_width: int, quality: int) -> bytes:
    """
    Re-encode raw image bytes as a JPEG no wider than max_width.

    EXIF orientation is applied first, transparency is flattened onto white,
    and images already narrower than max_width keep their size.
    """
    try:
        with Image.open(io.BytesIO(raw)) as img:
            img.load()
            img = ImageOps.exif_transpose(img)
            if img.mode in ("RGBA", "LA") or (img.mode == "P" and "transparency" in img.info):
                rgba = img.convert("RGBA")
                background = Image.new("RGB", rgba.size, (255, 255, 255))
                background.paste(rgba, mask=rgba.getchannel("A"))
                img = background
            elif img.mode != "RGB":
                img = img.convert("RGB")

            if img.width > max_width:
                height = max(1, round(img.height * max_width / img.width))
                img = img.resize((max_width, height), Image.Resampling.LANCZOS)

            out = io.BytesIO()
            img.save(out, format="JPEG", quality=quality, optimize=True)
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as e:
        raise ImageProcessingError(f"Image processing error: {e}") from e
    return out.getvalue()


class ImageProcessor:
    """
    Applies the configured resize/quality to uploads.

    Sync routes run on a thread pool, so transforms are capped with a
    semaphore to keep CPU-bound work from fanning out with request volume.
    """

    def __init__(self, settings: Settings) -> None:
        self.max_upload_bytes = settings.IMAGE_MAX_UPLOAD_BYTES
        self.max_width = settings.IMAGE_MAX_WIDTH
        self.quality = settings.IMAGE_JPEG_QUALITY
        self._slots = threading.BoundedSemaphore(settings.IMAGE_MAX_CONCURRENT_TRANSFORMS)

    def read(self, file: UploadFile | None) -> bytes | None:
        return read_upload(file, self.max_upload_bytes)

    def process(self, raw: bytes) -> bytes:
        with self._slots:
            compressed = compress_image(raw, self.max_width, self.quality)
        logger.debug("Compressed image %d -> %d bytes", len(raw), len(compressed))
        return compressed
