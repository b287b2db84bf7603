"""Image upload DTOs shared by the variant component, the upload service and the API."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class CropBox:
    """Pixel rectangle to extract before resizing, already rounded."""

    left: int
    top: int
    width: int
    height: int


@dataclass
class ImageVariant:
    width: int
    webp: str
    jpeg: str


@dataclass
class UploadResult:
    """Where the optimized variants of one upload can be fetched."""

    url: str
    """Default display image: the 960w JPEG."""

    variants: list[ImageVariant] = field(default_factory=list)
