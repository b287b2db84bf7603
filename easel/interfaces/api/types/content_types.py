"""Content API types - Pydantic models for artworks, artist info, FAQs and settings.

External API contracts for content endpoints. Create models require every
field; update models make everything optional and are applied with
model_dump(exclude_unset=True) so only sent fields are merged. An explicit
null is only accepted for fields that are nullable on create.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

ArtworkStatus = Literal["available", "sold", "exhibition", "private"]
ArtworkCategory = Literal["original", "commission", "exhibition"]


def reject_null(value: Any) -> Any:
    """Omitting a field leaves it alone; sending null for a required field is an error."""
    if value is None:
        raise ValueError("must not be null")
    return value


class ArtworkImage(BaseModel):
    url: str
    alt: str
    isPrimary: bool = False


class ArtworkCreateRequest(BaseModel):
    """Request body for creating an artwork."""

    title: str = Field(..., min_length=1)
    slug: str = Field(..., min_length=1, pattern=r"^[a-z0-9]+(?:-[a-z0-9]+)*$")
    description: str
    medium: str
    artform: str
    dateCreated: str
    width: float
    height: float
    depth: float | None = None
    price: float | None = None
    status: ArtworkStatus
    category: ArtworkCategory
    images: list[ArtworkImage] = Field(default_factory=list)
    featured: bool = False


class ArtworkUpdateRequest(BaseModel):
    """Partial update for an artwork; unknown fields are rejected."""

    model_config = ConfigDict(extra="forbid")

    title: str | None = Field(None, min_length=1)
    slug: str | None = Field(None, min_length=1, pattern=r"^[a-z0-9]+(?:-[a-z0-9]+)*$")
    description: str | None = None
    medium: str | None = None
    artform: str | None = None
    dateCreated: str | None = None
    width: float | None = None
    height: float | None = None
    depth: float | None = None
    price: float | None = None
    status: ArtworkStatus | None = None
    category: ArtworkCategory | None = None
    images: list[ArtworkImage] | None = None
    featured: bool | None = None

    # depth and price are the only fields an artwork may clear
    check_not_null = field_validator(
        "title",
        "slug",
        "description",
        "medium",
        "artform",
        "dateCreated",
        "width",
        "height",
        "status",
        "category",
        "images",
        "featured",
    )(reject_null)


class SocialLinks(BaseModel):
    model_config = ConfigDict(extra="allow")

    instagram: str | None = None
    etsy: str | None = None
    website: str | None = None


class Exhibition(BaseModel):
    year: str
    title: str
    location: str


class ArtistUpdateRequest(BaseModel):
    """Upsert body for the artist singleton. Every field may be omitted."""

    name: str | None = None
    tagline: str | None = None
    bio: str | None = None
    location: str | None = None
    email: str | None = None
    phone: str | None = None
    social: SocialLinks | None = None
    profileImage: str | None = None
    exhibitions: list[Exhibition] | None = None

    # phone is the only field the artist may clear
    check_not_null = field_validator(
        "name", "tagline", "bio", "location", "email", "social", "profileImage", "exhibitions"
    )(reject_null)


class FaqCreateRequest(BaseModel):
    question: str = Field(..., min_length=1)
    answer: str = Field(..., min_length=1)
    category: str
    order: float = 0


class FaqUpdateRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    question: str | None = Field(None, min_length=1)
    answer: str | None = Field(None, min_length=1)
    category: str | None = None
    order: float | None = None

    check_not_null = field_validator("question", "answer", "category", "order")(reject_null)


class SettingsUpdateRequest(BaseModel):
    """Accent color; each component is range-checked."""

    accentHue: float | None = Field(None, ge=0, le=360)
    accentSaturation: float | None = Field(None, ge=0, le=100)
    accentLightness: float | None = Field(None, ge=0, le=100)
