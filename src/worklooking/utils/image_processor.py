"""Profile photo optimization for embedding in resume.json (Pillow)."""

from __future__ import annotations

import base64
import logging
from dataclasses import dataclass
from io import BytesIO
from pathlib import Path

from worklooking.errors import ImageProcessingFailed

logger = logging.getLogger(__name__)

IMAGE_MAX_SIZE = 200  # pixels, both dimensions
JPEG_QUALITY = 85


@dataclass
class ProcessedImage:
    data_url: str
    original_size: int
    optimized_size: int


def optimize_image(file_path: str | Path) -> ProcessedImage:
    """Shrink an image to fit within 200x200 and re-encode it as a JPEG data URL.

    Aspect ratio is kept and small images are never enlarged.
    """
    from PIL import Image

    try:
        original = Path(file_path).read_bytes()
        with Image.open(BytesIO(original)) as source:
            image = source.convert("RGB")
        image.thumbnail((IMAGE_MAX_SIZE, IMAGE_MAX_SIZE))
        buffer = BytesIO()
        image.save(buffer, format="JPEG", quality=JPEG_QUALITY, optimize=True)
    except OSError as exc:
        raise ImageProcessingFailed(f"Failed to process image: {exc}") from exc

    optimized = buffer.getvalue()
    logger.info("Optimized %s: %d -> %d bytes", file_path, len(original), len(optimized))
    return ProcessedImage(
        data_url="data:image/jpeg;base64," + base64.b64encode(optimized).decode("ascii"),
        original_size=len(original),
        optimized_size=len(optimized),
    )
