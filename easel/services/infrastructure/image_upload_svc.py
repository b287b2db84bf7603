"""
Image upload service - turns one admin upload into responsive variants.

Files land in <assets_dir>/optimized/<slug>/ and are served under
/attached_assets/optimized/<slug>/. Uploading again with the same slug
overwrites the previous variants.
"""

from __future__ import annotations

import json
import logging
import os
import re
import uuid
from typing import Any

from easel.components.platform import image_variants_comp
from easel.helpers.dto.image_dto import CropBox, UploadResult
from easel.helpers.exceptions import ContentValidationError

logger = logging.getLogger(__name__)

ASSETS_URL_PREFIX = "/attached_assets"
OPTIMIZED_SUBDIR = "optimized"
MAX_UPLOAD_BYTES = 10 * 1024 * 1024

# Same shape as artwork slugs; also keeps the slug a single path segment
_SLUG_RE = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")


def parse_crop(crop_data: str | None) -> CropBox | None:
    """Parse the `cropData` form field.

    Missing, empty or zero-sized crop data means "use the whole image".

    Raises:
        ContentValidationError: Not a JSON object, or non-numeric coordinates
    """
    if not crop_data:
        return None
    try:
        raw = json.loads(crop_data)
    except json.JSONDecodeError:
        raise ContentValidationError("Invalid crop data") from None
    if not isinstance(raw, dict):
        raise ContentValidationError("Invalid crop data")
    if not raw.get("width") or not raw.get("height"):
        return None
    try:
        return CropBox(
            left=round(_number(raw.get("x", 0))),
            top=round(_number(raw.get("y", 0))),
            width=round(_number(raw["width"])),
            height=round(_number(raw["height"])),
        )
    except (TypeError, ValueError):
        raise ContentValidationError("Invalid crop data") from None


def _number(value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TypeError(f"not a number: {value!r}")
    return float(value)


class ImageUploadService:
    """Service for admin image uploads."""

    def __init__(self, assets_dir: str, max_bytes: int = MAX_UPLOAD_BYTES) -> None:
        self.assets_dir = assets_dir
        self.max_bytes = max_bytes

    def resolve_slug(self, slug: str | None) -> str:
        """The folder name for an upload: the given slug, or a fresh uuid.

        Raises:
            ContentValidationError: Slug is not lowercase words joined by hyphens
        """
        if not slug:
            return str(uuid.uuid4())
        if not _SLUG_RE.match(slug):
            raise ContentValidationError("Invalid slug")
        return slug

    def process(self, data: bytes, crop_data: str | None = None, slug: str | None = None) -> UploadResult:
        """
        Crop (optionally) and write every variant of an uploaded image.

        Raises:
            ContentValidationError: Bad slug or crop data
            ImageProcessingError: The bytes are not an image, or writing failed
        """
        folder = self.resolve_slug(slug)
        box = parse_crop(crop_data)

        image = image_variants_comp.open_image(data)
        if box is not None:
            image = image_variants_comp.crop(image, box)

        output_dir = os.path.join(self.assets_dir, OPTIMIZED_SUBDIR, folder)
        url_prefix = f"{ASSETS_URL_PREFIX}/{OPTIMIZED_SUBDIR}/{folder}"
        variants = image_variants_comp.write_variants(image, output_dir, url_prefix)

        logger.info(f"[Images] Uploaded '{folder}' ({image.width}x{image.height})")
        return UploadResult(
            url=f"{url_prefix}/{image_variants_comp.DEFAULT_DISPLAY_WIDTH}w.jpg",
            variants=variants,
        )
