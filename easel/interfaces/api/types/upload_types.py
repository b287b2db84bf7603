"""Upload API types - responsive variants of an uploaded image."""

from __future__ import annotations

from pydantic import BaseModel

from easel.helpers.dto.image_dto import UploadResult


class ImageVariantResponse(BaseModel):
    width: int
    webp: str
    jpeg: str


class UploadImageResponse(BaseModel):
    """Response for an image upload."""

    success: bool = True
    url: str
    variants: list[ImageVariantResponse]

    @classmethod
    def from_dto(cls, dto: UploadResult) -> UploadImageResponse:
        """Convert UploadResult DTO to Pydantic response model."""
        return cls(
            url=dto.url,
            variants=[ImageVariantResponse(width=v.width, webp=v.webp, jpeg=v.jpeg) for v in dto.variants],
        )
