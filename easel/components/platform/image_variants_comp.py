"""Responsive image variants with Pillow.

Each upload is written once per width in VARIANT_WIDTHS as `<width>w.webp`
and `<width>w.jpg`. Images narrower than a target width are written at their
own size, never enlarged. Every function is synchronous and does blocking I/O.
"""

from __future__ import annotations

import io
import logging
import os

from PIL import Image

from easel.helpers.dto.image_dto import CropBox, ImageVariant
from easel.helpers.exceptions import ContentValidationError, ImageProcessingError

logger = logging.getLogger(__name__)

VARIANT_WIDTHS = (480, 960, 1440, 2048)
DEFAULT_DISPLAY_WIDTH = 960
WEBP_QUALITY = 85
JPEG_QUALITY = 90


def open_image(data: bytes) -> Image.Image:
    """Decode uploaded bytes into a fully loaded image.

    Raises:
        ImageProcessingError: Bytes are not a decodable image
    """
    try:
        image = Image.open(io.BytesIO(data))
        image.load()
    except (OSError, ValueError, Image.DecompressionBombError) as e:
        raise ImageProcessingError(f"Could not decode image: {e}") from e
    return image


def crop(image: Image.Image, box: CropBox) -> Image.Image:
    """Extract `box` from the image.

    Raises:
        ContentValidationError: The box is empty or reaches outside the image
    """
    right = box.left + box.width
    bottom = box.top + box.height
    if box.width <= 0 or box.height <= 0 or box.left < 0 or box.top < 0:
        raise ContentValidationError("Crop area is outside the image")
    if right > image.width or bottom > image.height:
        raise ContentValidationError("Crop area is outside the image")
    return image.crop((box.left, box.top, right, bottom))


def scale_to_width(image: Image.Image, width: int) -> Image.Image:
    """Resize to `width` keeping the aspect ratio; narrower images are returned as-is."""
    if image.width <= width:
        return image
    height = max(1, round(image.height * width / image.width))
    return image.resize((width, height), Image.Resampling.LANCZOS)


def _has_alpha(image: Image.Image) -> bool:
    return image.mode in ("RGBA", "LA", "PA") or (image.mode == "P" and "transparency" in image.info)


def _for_webp(image: Image.Image) -> Image.Image:
    if image.mode in ("RGB", "RGBA"):
        return image
    return image.convert("RGBA" if _has_alpha(image) else "RGB")


def _for_jpeg(image: Image.Image) -> Image.Image:
    return image if image.mode == "RGB" else image.convert("RGB")


def write_variants(image: Image.Image, output_dir: str, url_prefix: str) -> list[ImageVariant]:
    """Write every width as WebP and JPEG into `output_dir`.

    Args:
        image: Decoded (and optionally cropped) source image
        output_dir: Directory for the files; created if missing
        url_prefix: Public URL of `output_dir`, without a trailing slash

    Returns:
        One ImageVariant per width, smallest first

    Raises:
        ImageProcessingError: A file could not be encoded or written
    """
    variants = []
    try:
        os.makedirs(output_dir, exist_ok=True)
        for width in VARIANT_WIDTHS:
            scaled = scale_to_width(image, width)
            _for_webp(scaled).save(os.path.join(output_dir, f"{width}w.webp"), "WEBP", quality=WEBP_QUALITY)
            _for_jpeg(scaled).save(os.path.join(output_dir, f"{width}w.jpg"), "JPEG", quality=JPEG_QUALITY)
            variants.append(
                ImageVariant(
                    width=width,
                    webp=f"{url_prefix}/{width}w.webp",
                    jpeg=f"{url_prefix}/{width}w.jpg",
                )
            )
    except (OSError, ValueError) as e:
        raise ImageProcessingError(f"Could not write variants to {output_dir}: {e}") from e
    logger.info(f"[Images] Wrote {len(variants)} variants to {output_dir}")
    return variants
