import io
from typing import Optional
from PIL import Image, UnidentifiedImageError

from config import settings
from utils.logger import get_logger

logger = get_logger(__name__)


class ImageCompressionError(Exception):
    pass


def encode(raw: bytes, quality: Optional[int] = None) -> bytes:
    """
    Re-encode an uploaded image as the JPEG blob that gets stored.

    Args:
        raw: image file contents in any format Pillow can open
        quality: JPEG quality, defaults to IMAGE_JPEG_QUALITY

    Raises:
        ImageCompressionError: the bytes are not a readable image
    """
    quality = quality or settings.IMAGE_JPEG_QUALITY
    try:
        with Image.open(io.BytesIO(raw)) as img:
            if img.mode not in ("RGB", "L"):
                img = img.convert("RGB")
            out = io.BytesIO()
            img.save(out, "JPEG", quality=quality)
            return out.getvalue()
    except (UnidentifiedImageError, OSError, ValueError) as e:
        logger.error(f"Error encoding image: {e}")
        raise ImageCompressionError(str(e)) from e


def decode(data: bytes) -> Optional[Image.Image]:
    try:
        img = Image.open(io.BytesIO(data))
        img.load()
        return img
    except (UnidentifiedImageError, OSError) as e:
        logger.error(f"Error decoding image: {e}")
        return None
