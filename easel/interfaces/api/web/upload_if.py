"""Admin image upload endpoint."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile

from easel.helpers.exceptions import ImageProcessingError
from easel.helpers.logging_helper import sanitize_exception_message
from easel.interfaces.api.auth import require_admin
from easel.interfaces.api.types.upload_types import UploadImageResponse
from easel.interfaces.api.web.dependencies import get_image_upload_service
from easel.services.infrastructure.image_upload_svc import ImageUploadService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["Uploads"], dependencies=[Depends(require_admin)])


@router.post("/upload-image", response_model=UploadImageResponse)
def upload_image(
    image: UploadFile | None = File(None),
    cropData: str | None = Form(None),
    slug: str | None = Form(None),
    uploads: ImageUploadService = Depends(get_image_upload_service),
) -> UploadImageResponse:
    """
    Store an image as 480/960/1440/2048px WebP and JPEG variants.

    Multipart fields: `image` (required), `cropData` (JSON {x, y, width, height},
    applied before resizing) and `slug` (folder name; a uuid when omitted).
    """
    if image is None or not image.filename:
        raise HTTPException(status_code=400, detail="No image provided")
    if not (image.content_type or "").startswith("image/"):
        raise HTTPException(status_code=400, detail="Only image files are allowed")

    data = image.file.read(uploads.max_bytes + 1)
    if len(data) > uploads.max_bytes:
        raise HTTPException(status_code=413, detail="Image exceeds the upload size limit")

    try:
        result = uploads.process(data, crop_data=cropData, slug=slug)
    except ImageProcessingError as e:
        raise HTTPException(status_code=500, detail=sanitize_exception_message(e, "Failed to upload image")) from None
    return UploadImageResponse.from_dto(result)
