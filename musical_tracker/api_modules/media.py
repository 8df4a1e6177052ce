"""
Musical Tracker Media API Module

Image uploads used as musical and performance posters and actor profile
images. Files are stored through Django's default storage under
``<imageType>/<random name>``; the database row keeps the metadata.

Public API Overview:
==================

Base URL: /v2/media

- POST   /media          - Upload an image (multipart: file, imageType)
- GET    /media          - List uploads (own uploads; admins see all)
- GET    /media/{id}     - Get image metadata and URL (public)
- DELETE /media/{id}     - Delete the row and the stored file (uploader or admin)

Upload Rules:
============

- imageType: poster, profile or thumbnail
- file: JPEG, PNG, WebP or GIF that Pillow can decode
- size: at most MEDIA_MAX_UPLOAD_SIZE bytes (default 5 MiB), and at most
  2 MiB for profile images and thumbnails

Processing:
==========

Every upload is re-encoded as JPEG before it is stored:

- poster:    shrunk to fit 1200x1800, quality 85
- profile:   center-cropped square, at most 300x300, quality 90
- thumbnail: center-cropped square, at most 150x150, quality 80

The stored size and dimensions are those of the processed file.
"""

import io
import logging
import uuid
from datetime import datetime
from typing import Optional

from django.conf import settings
from django.core.files.base import ContentFile
from ninja import File, Form, Schema
from ninja.files import UploadedFile
from PIL import Image, ImageOps, UnidentifiedImageError

from tracker.models import Media
from musical_tracker.validator import Validator
from .auth import JWTAuth, ErrorSchema, MessageSchema, ValidationErrorSchema, check_owner_or_admin
from .core import DEFAULT_PAGE_LIMIT, PaginationSchema, check_pagination, paginate, validation_failed

logger = logging.getLogger(__name__)

IMAGE_TYPES = [choice for choice, _ in Media.IMAGE_TYPES]

# Pillow format names accepted as input
ALLOWED_FORMATS = ("JPEG", "PNG", "WEBP", "GIF")

MAX_UPLOAD_SIZES = {
    "poster": 5 * 1024 * 1024,
    "profile": 2 * 1024 * 1024,
    "thumbnail": 2 * 1024 * 1024,
}

PROCESSING = {
    "poster": {"max_size": (1200, 1800), "quality": 85, "square": False},
    "profile": {"max_size": (300, 300), "quality": 90, "square": True},
    "thumbnail": {"max_size": (150, 150), "quality": 80, "square": True},
}

STORED_CONTENT_TYPE = "image/jpeg"
STORED_EXTENSION = ".jpg"

# ============================================================================
# Schemas
# ============================================================================

class MediaSchema(Schema):
    id: int
    imageType: str
    url: Optional[str] = None
    originalName: str
    contentType: str
    size: int
    width: Optional[int] = None
    height: Optional[int] = None
    uploadedBy: Optional[int] = None
    createdAt: datetime


class MediaListSchema(Schema):
    data: list[MediaSchema]
    pagination: PaginationSchema

# ============================================================================
# Utility Functions
# ============================================================================

def create_media_response(media: Media) -> dict:
    return {
        "id": media.id,
        "imageType": media.image_type,
        "url": media.url,
        "originalName": media.original_name,
        "contentType": media.content_type,
        "size": media.size,
        "width": media.width,
        "height": media.height,
        "uploadedBy": media.uploaded_by_id,
        "createdAt": media.created_at,
    }


def inspect_image(validator: Validator, upload: UploadedFile) -> Optional[dict]:
    """
    Decode the upload with Pillow.

    Returns the detected format and dimensions, or None (with a ``file``
    error recorded) when the bytes are not an accepted image.
    """
    try:
        with Image.open(upload) as img:
            image_format = img.format
            width, height = img.size
            img.verify()
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, SyntaxError) as e:
        logger.debug("Rejected upload %s: %s", upload.name, e)
        validator.add_error("file", "must be a valid image")
        return None
    finally:
        upload.seek(0)

    if image_format not in ALLOWED_FORMATS:
        validator.add_error("file", "must be a JPEG, PNG, WebP or GIF image")
        return None

    if Image.MAX_IMAGE_PIXELS and width * height > Image.MAX_IMAGE_PIXELS:
        validator.add_error("file", "is too large to process")
        return None

    return {"format": image_format, "width": width, "height": height}


def process_image(upload: UploadedFile, image_type: str) -> dict:
    """
    Resize, crop and re-encode an accepted upload as JPEG.

    Raises OSError when Pillow cannot decode the pixel data.
    """
    options = PROCESSING[image_type]
    upload.seek(0)
    with Image.open(upload) as source:
        img = ImageOps.exif_transpose(source)

    # JPEG has no alpha channel, transparent areas become white
    if img.mode in ("RGBA", "LA", "P"):
        img = img.convert("RGBA")
        background = Image.new("RGB", img.size, (255, 255, 255))
        background.paste(img, mask=img.getchannel("A"))
        img = background
    elif img.mode != "RGB":
        img = img.convert("RGB")

    max_width, max_height = options["max_size"]
    if options["square"]:
        side = min(img.width, img.height, max_width)
        img = ImageOps.fit(img, (side, side), method=Image.Resampling.LANCZOS)
    else:
        img.thumbnail((max_width, max_height), Image.Resampling.LANCZOS)

    buffer = io.BytesIO()
    img.save(buffer, format="JPEG", quality=options["quality"])
    return {
        "content": ContentFile(buffer.getvalue()),
        "width": img.width,
        "height": img.height,
        "size": buffer.tell(),
    }

# ============================================================================
# API Endpoints
# ============================================================================

def register_media_endpoints(api):
    """Register all media endpoints with the API router."""

    @api.post("/media", auth=JWTAuth(),
              response={201: MediaSchema, 400: ValidationErrorSchema, 401: ErrorSchema})
    def upload_media(request, file: UploadedFile = File(...), imageType: str = Form(None)):
        """
        Upload an image.

        The format is detected from the decoded bytes, not from the client's
        declared type. The stored file is the processed JPEG.

        Returns:
            201: Media created, including its public URL
            400: Unknown imageType, file too large or not an accepted image
        """
        validator = Validator()
        validator.check(imageType in IMAGE_TYPES, "imageType", f"must be one of: {', '.join(IMAGE_TYPES)}")
        max_size = min(settings.MEDIA_MAX_UPLOAD_SIZE,
                       MAX_UPLOAD_SIZES.get(imageType, settings.MEDIA_MAX_UPLOAD_SIZE))
        validator.check(file.size <= max_size, "file", f"must be at most {max_size} bytes")
        validator.check(file.size > 0, "file", "is empty")

        processed = None
        if validator.valid and inspect_image(validator, file) is not None:
            try:
                processed = process_image(file, imageType)
            except OSError as e:
                logger.warning("Could not process upload %s: %s", file.name, e)
                validator.add_error("file", "could not be processed")
        if not validator.valid:
            return validation_failed(validator)

        media = Media(
            image_type=imageType,
            original_name=(file.name or "")[:255],
            content_type=STORED_CONTENT_TYPE,
            size=processed["size"],
            width=processed["width"],
            height=processed["height"],
            uploaded_by_id=request.auth.id,
        )
        media.file.save(f"{uuid.uuid4().hex}{STORED_EXTENSION}", processed["content"], save=False)
        media.save()

        logger.info("Media %s (%s, %s bytes) uploaded by user %s",
                    media.id, media.image_type, media.size, request.auth.id)
        return 201, create_media_response(media)

    @api.get("/media", auth=JWTAuth(),
             response={200: MediaListSchema, 400: ValidationErrorSchema, 401: ErrorSchema})
    def list_media(request, page: int = 1, limit: int = DEFAULT_PAGE_LIMIT, imageType: str = None):
        validator = Validator()
        check_pagination(validator, page, limit)
        if imageType is not None:
            validator.check(imageType in IMAGE_TYPES, "imageType", f"must be one of: {', '.join(IMAGE_TYPES)}")
        if not validator.valid:
            return validation_failed(validator)

        uploads = Media.objects.all()
        if not request.auth.is_admin:
            uploads = uploads.filter(uploaded_by_id=request.auth.id)
        if imageType:
            uploads = uploads.filter(image_type=imageType)

        return 200, paginate(uploads, page, limit, create_media_response)

    @api.get("/media/{media_id}", response={200: MediaSchema, 404: ErrorSchema})
    def get_media(request, media_id: int):
        try:
            return 200, create_media_response(Media.objects.get(id=media_id))
        except Media.DoesNotExist:
            return 404, {"message": "Media not found"}

    @api.delete("/media/{media_id}", auth=JWTAuth(),
                response={200: MessageSchema, 401: ErrorSchema, 403: ErrorSchema, 404: ErrorSchema})
    def delete_media(request, media_id: int):
        """
        Delete an upload and its stored file.

        Rows pointing at it (posters, profile images) lose the reference.
        """
        try:
            media = Media.objects.get(id=media_id)
        except Media.DoesNotExist:
            return 404, {"message": "Media not found"}

        has_permission, error_message = check_owner_or_admin(request.auth, media.uploaded_by_id)
        if not has_permission:
            return 403, {"message": error_message}

        media.file.delete(save=False)
        media.delete()
        logger.info("Media %s deleted by user %s", media_id, request.auth.id)
        return 200, {"message": "Media deleted successfully"}
