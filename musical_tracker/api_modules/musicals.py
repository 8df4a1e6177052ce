"""
Musical Tracker Musicals API Module

Public API Overview:
==================

Base URL: /v2/musical

Public Endpoints (token optional):
- GET  /musical                  - List musicals (approved only for non-admins)
- GET  /musical/{id}            - Get musical details

Protected Endpoints (JWT Token Required):
- POST   /musical                - Submit a new musical (starts unapproved)
- PUT    /musical/{id}          - Update musical (admin)
- DELETE /musical/{id}          - Delete musical (admin)
- POST   /musical/{id}/approve  - Approve a submitted musical (admin)

Musical Data Structure:
======================

- id, name, composer, lyricist
- approved: moderation flag, false until an admin approves
- synopsis: optional text
- posterId / posterUrl: optional uploaded poster (see /v2/media)
- createdAt: insert timestamp

Example Usage:
=============

curl -X POST /v2/musical \\
  -H "Authorization: Bearer {token}" \\
  -H "Content-Type: application/json" \\
  -d '{"name":"Hamilton","composer":"Lin-Manuel Miranda","lyricist":"Lin-Manuel Miranda"}'
"""

import logging
from datetime import datetime
from typing import Optional

from django.db.models import ProtectedError
from ninja import Schema

from tracker.models import Media, Musical
from musical_tracker.validator import Validator
from .auth import JWTAuth, ErrorSchema, MessageSchema, ValidationErrorSchema, check_admin_permissions, get_identity
from .core import (
    DEFAULT_PAGE_LIMIT, PaginationSchema, check_max_length, check_pagination, check_required,
    lookup_reference, nothing_to_update, paginate, validation_failed,
)

logger = logging.getLogger(__name__)

# ============================================================================
# Schemas
# ============================================================================

class MusicalSchema(Schema):
    """Response schema for musical data."""
    id: int
    name: str
    composer: str
    lyricist: str
    approved: bool
    synopsis: Optional[str] = None
    posterId: Optional[int] = None
    posterUrl: Optional[str] = None
    createdAt: datetime


class MusicalListSchema(Schema):
    data: list[MusicalSchema]
    pagination: PaginationSchema


class MusicalPayloadSchema(Schema):
    """Request schema for creating or updating a musical."""
    name: Optional[str] = None
    composer: Optional[str] = None
    lyricist: Optional[str] = None
    synopsis: Optional[str] = None
    posterId: Optional[int] = None
    approved: Optional[bool] = None

# ============================================================================
# Utility Functions
# ============================================================================

def create_musical_response(musical: Musical) -> dict:
    return {
        "id": musical.id,
        "name": musical.name,
        "composer": musical.composer,
        "lyricist": musical.lyricist,
        "approved": musical.approved,
        "synopsis": musical.synopsis,
        "posterId": musical.poster_id,
        "posterUrl": musical.poster.url if musical.poster else None,
        "createdAt": musical.created_at,
    }


def validate_musical(validator: Validator, data: dict, creating: bool):
    for key in ("name", "composer", "lyricist"):
        check_required(validator, data, key, creating)
        check_max_length(validator, data, key, 255)
    return lookup_reference(validator, Media, data, "posterId")


def visible_musicals(identity):
    """Non-admin callers only ever see approved musicals."""
    queryset = Musical.objects.select_related('poster')
    if identity is None or not identity.is_admin:
        queryset = queryset.filter(approved=True)
    return queryset

# ============================================================================
# API Endpoints
# ============================================================================

def register_musical_endpoints(api):
    """Register all musical endpoints with the API router."""

    @api.get("/musical", response={200: MusicalListSchema, 400: ValidationErrorSchema})
    def list_musicals(request, page: int = 1, limit: int = DEFAULT_PAGE_LIMIT, search: str = None,
                      composer: str = None, approved: bool = None):
        """
        List musicals.

        Anonymous callers and plain users get approved musicals only; admins
        see everything and may filter on ``approved``.

        Args:
            page, limit: Pagination
            search: Case-insensitive match on the name
            composer: Case-insensitive match on the composer
            approved: Admin-only moderation filter
        """
        validator = Validator()
        check_pagination(validator, page, limit)
        if not validator.valid:
            return validation_failed(validator)

        identity = get_identity(request)
        musicals = visible_musicals(identity)
        if search:
            musicals = musicals.filter(name__icontains=search)
        if composer:
            musicals = musicals.filter(composer__icontains=composer)
        if approved is not None and identity is not None and identity.is_admin:
            musicals = musicals.filter(approved=approved)

        return 200, paginate(musicals, page, limit, create_musical_response)

    @api.get("/musical/{musical_id}", response={200: MusicalSchema, 404: ErrorSchema})
    def get_musical(request, musical_id: int):
        try:
            musical = visible_musicals(get_identity(request)).get(id=musical_id)
            return 200, create_musical_response(musical)
        except Musical.DoesNotExist:
            return 404, {"message": "Musical not found"}

    @api.post("/musical", auth=JWTAuth(),
              response={201: MusicalSchema, 400: ValidationErrorSchema, 401: ErrorSchema, 403: ErrorSchema})
    def create_musical(request, payload: MusicalPayloadSchema):
        """
        Submit a new musical.

        Any authenticated user may submit; the musical stays hidden from the
        public until an admin approves it. Only admins may set ``approved``.

        Returns:
            201: Musical created
            400: Missing or invalid fields
            401: Authentication required
            403: Non-admin tried to set the approval flag
        """
        identity = request.auth
        data = payload.dict(exclude_unset=True)
        if data.get("approved") is not None and not identity.is_admin:
            return 403, {"message": "Only admins can set the approval flag"}

        validator = Validator()
        poster = validate_musical(validator, data, creating=True)
        if not validator.valid:
            return validation_failed(validator)

        musical = Musical.objects.create(
            name=data["name"].strip(),
            composer=data["composer"].strip(),
            lyricist=data["lyricist"].strip(),
            synopsis=data.get("synopsis"),
            poster=poster,
            approved=bool(data.get("approved")),
        )
        logger.info("Musical %s '%s' submitted by user %s", musical.id, musical.name, identity.id)
        return 201, create_musical_response(musical)

    @api.put("/musical/{musical_id}", auth=JWTAuth(),
             response={200: MusicalSchema, 400: ValidationErrorSchema, 401: ErrorSchema, 403: ErrorSchema,
                       404: ErrorSchema})
    def update_musical(request, musical_id: int, payload: MusicalPayloadSchema):
        """
        Update an existing musical.

        Requires admin permissions. Only fields present in the body change.
        """
        has_permission, error_message = check_admin_permissions(request.auth)
        if not has_permission:
            return 403, {"message": error_message}

        try:
            musical = Musical.objects.get(id=musical_id)
        except Musical.DoesNotExist:
            return 404, {"message": "Musical not found"}

        data = payload.dict(exclude_unset=True)
        if not data:
            return nothing_to_update()

        validator = Validator()
        poster = validate_musical(validator, data, creating=False)
        if not validator.valid:
            return validation_failed(validator)

        for key in ("name", "composer", "lyricist"):
            if key in data:
                setattr(musical, key, data[key].strip())
        if "synopsis" in data:
            musical.synopsis = data["synopsis"]
        if "posterId" in data:
            musical.poster = poster
        if data.get("approved") is not None:
            musical.approved = data["approved"]

        musical.save()
        return 200, create_musical_response(musical)

    @api.delete("/musical/{musical_id}", auth=JWTAuth(),
                response={200: MessageSchema, 401: ErrorSchema, 403: ErrorSchema, 404: ErrorSchema,
                          409: ErrorSchema})
    def delete_musical(request, musical_id: int):
        has_permission, error_message = check_admin_permissions(request.auth)
        if not has_permission:
            return 403, {"message": error_message}

        try:
            musical = Musical.objects.get(id=musical_id)
            musical_name = musical.name
            musical.delete()
        except Musical.DoesNotExist:
            return 404, {"message": "Musical not found"}
        except ProtectedError:
            return 409, {"message": "Musical still has roles, performances or productions"}

        logger.info("Musical %s '%s' deleted by user %s", musical_id, musical_name, request.auth.id)
        return 200, {"message": f"Musical '{musical_name}' deleted successfully"}

    @api.post("/musical/{musical_id}/approve", auth=JWTAuth(),
              response={200: MusicalSchema, 401: ErrorSchema, 403: ErrorSchema, 404: ErrorSchema})
    def approve_musical(request, musical_id: int):
        """Approve a submitted musical so it becomes publicly visible (admin)."""
        has_permission, error_message = check_admin_permissions(request.auth)
        if not has_permission:
            return 403, {"message": error_message}

        try:
            musical = Musical.objects.select_related('poster').get(id=musical_id)
        except Musical.DoesNotExist:
            return 404, {"message": "Musical not found"}

        musical.approved = True
        musical.save(update_fields=['approved'])
        logger.info("Musical %s approved by user %s", musical.id, request.auth.id)
        return 200, create_musical_response(musical)
