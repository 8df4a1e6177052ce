"""
Musical Tracker Theaters API Module

Public API Overview:
==================

Base URL: /v2/theater

Public Endpoints (token optional):
- GET  /theater                  - List theaters (verified only for non-admins)
- GET  /theater/{id}            - Get theater details

Protected Endpoints (JWT Token Required):
- POST   /theater                - Submit a new theater
- PUT    /theater/{id}          - Update theater (admin)
- DELETE /theater/{id}          - Delete theater (admin)
- POST   /theater/{id}/verify   - Verify a submitted theater (admin)

Validation Rules:
================

- name and city are required
- address, state and zipCode default to empty strings
- capacity, when given, must be a positive number of seats
"""

import logging
from datetime import datetime
from typing import Optional

from django.db.models import ProtectedError
from ninja import Schema

from tracker.models import Theater
from musical_tracker.validator import Validator
from .auth import JWTAuth, ErrorSchema, MessageSchema, ValidationErrorSchema, check_admin_permissions, get_identity
from .core import (
    DEFAULT_PAGE_LIMIT, PaginationSchema, check_max_length, check_pagination, check_required,
    nothing_to_update, paginate, validation_failed,
)

logger = logging.getLogger(__name__)

TEXT_FIELDS = {
    "name": ("name", 255),
    "address": ("address", 500),
    "city": ("city", 100),
    "state": ("state", 100),
    "zipCode": ("zip_code", 20),
}

# ============================================================================
# Schemas
# ============================================================================

class TheaterSchema(Schema):
    id: int
    name: str
    address: str = ""
    city: str
    state: str = ""
    zipCode: str = ""
    capacity: Optional[int] = None
    verified: bool
    createdAt: datetime


class TheaterListSchema(Schema):
    data: list[TheaterSchema]
    pagination: PaginationSchema


class TheaterPayloadSchema(Schema):
    name: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zipCode: Optional[str] = None
    capacity: Optional[int] = None
    verified: Optional[bool] = None

# ============================================================================
# Utility Functions
# ============================================================================

def create_theater_response(theater: Theater) -> dict:
    return {
        "id": theater.id,
        "name": theater.name,
        "address": theater.address or "",
        "city": theater.city,
        "state": theater.state or "",
        "zipCode": theater.zip_code or "",
        "capacity": theater.capacity,
        "verified": theater.verified,
        "createdAt": theater.created_at,
    }


def validate_theater(validator: Validator, data: dict, creating: bool) -> None:
    check_required(validator, data, "name", creating)
    check_required(validator, data, "city", creating)
    for key, (_, max_length) in TEXT_FIELDS.items():
        check_max_length(validator, data, key, max_length)
    if data.get("capacity") is not None:
        validator.check(data["capacity"] > 0, "capacity", "must be a positive number")


def visible_theaters(identity):
    queryset = Theater.objects.all()
    if identity is None or not identity.is_admin:
        queryset = queryset.filter(verified=True)
    return queryset

# ============================================================================
# API Endpoints
# ============================================================================

def register_theater_endpoints(api):
    """Register all theater endpoints with the API router."""

    @api.get("/theater", response={200: TheaterListSchema, 400: ValidationErrorSchema})
    def list_theaters(request, page: int = 1, limit: int = DEFAULT_PAGE_LIMIT, search: str = None,
                      city: str = None, state: str = None, verified: bool = None):
        validator = Validator()
        check_pagination(validator, page, limit)
        if not validator.valid:
            return validation_failed(validator)

        identity = get_identity(request)
        theaters = visible_theaters(identity)
        if search:
            theaters = theaters.filter(name__icontains=search)
        if city:
            theaters = theaters.filter(city__iexact=city)
        if state:
            theaters = theaters.filter(state__iexact=state)
        if verified is not None and identity is not None and identity.is_admin:
            theaters = theaters.filter(verified=verified)

        return 200, paginate(theaters, page, limit, create_theater_response)

    @api.get("/theater/{theater_id}", response={200: TheaterSchema, 404: ErrorSchema})
    def get_theater(request, theater_id: int):
        try:
            theater = visible_theaters(get_identity(request)).get(id=theater_id)
            return 200, create_theater_response(theater)
        except Theater.DoesNotExist:
            return 404, {"message": "Theater not found"}

    @api.post("/theater", auth=JWTAuth(),
              response={201: TheaterSchema, 400: ValidationErrorSchema, 401: ErrorSchema, 403: ErrorSchema})
    def create_theater(request, payload: TheaterPayloadSchema):
        identity = request.auth
        data = payload.dict(exclude_unset=True)
        if data.get("verified") is not None and not identity.is_admin:
            return 403, {"message": "Only admins can set the verification flag"}

        validator = Validator()
        validate_theater(validator, data, creating=True)
        if not validator.valid:
            return validation_failed(validator)

        fields = {
            attribute: (data.get(key) or "").strip()
            for key, (attribute, _) in TEXT_FIELDS.items()
        }
        theater = Theater.objects.create(
            capacity=data.get("capacity"),
            verified=bool(data.get("verified")),
            **fields,
        )
        logger.info("Theater %s '%s' submitted by user %s", theater.id, theater.name, identity.id)
        return 201, create_theater_response(theater)

    @api.put("/theater/{theater_id}", auth=JWTAuth(),
             response={200: TheaterSchema, 400: ValidationErrorSchema, 401: ErrorSchema, 403: ErrorSchema,
                       404: ErrorSchema})
    def update_theater(request, theater_id: int, payload: TheaterPayloadSchema):
        has_permission, error_message = check_admin_permissions(request.auth)
        if not has_permission:
            return 403, {"message": error_message}

        try:
            theater = Theater.objects.get(id=theater_id)
        except Theater.DoesNotExist:
            return 404, {"message": "Theater not found"}

        data = payload.dict(exclude_unset=True)
        if not data:
            return nothing_to_update()

        validator = Validator()
        validate_theater(validator, data, creating=False)
        if not validator.valid:
            return validation_failed(validator)

        for key, (attribute, _) in TEXT_FIELDS.items():
            if key in data:
                setattr(theater, attribute, (data[key] or "").strip())
        if "capacity" in data:
            theater.capacity = data["capacity"]
        if data.get("verified") is not None:
            theater.verified = data["verified"]

        theater.save()
        return 200, create_theater_response(theater)

    @api.delete("/theater/{theater_id}", auth=JWTAuth(),
                response={200: MessageSchema, 401: ErrorSchema, 403: ErrorSchema, 404: ErrorSchema,
                          409: ErrorSchema})
    def delete_theater(request, theater_id: int):
        has_permission, error_message = check_admin_permissions(request.auth)
        if not has_permission:
            return 403, {"message": error_message}

        try:
            theater = Theater.objects.get(id=theater_id)
            theater_name = theater.name
            theater.delete()
        except Theater.DoesNotExist:
            return 404, {"message": "Theater not found"}
        except ProtectedError:
            return 409, {"message": "Theater still hosts performances or productions"}

        logger.info("Theater %s '%s' deleted by user %s", theater_id, theater_name, request.auth.id)
        return 200, {"message": f"Theater '{theater_name}' deleted successfully"}

    @api.post("/theater/{theater_id}/verify", auth=JWTAuth(),
              response={200: TheaterSchema, 401: ErrorSchema, 403: ErrorSchema, 404: ErrorSchema})
    def verify_theater(request, theater_id: int):
        has_permission, error_message = check_admin_permissions(request.auth)
        if not has_permission:
            return 403, {"message": error_message}

        try:
            theater = Theater.objects.get(id=theater_id)
        except Theater.DoesNotExist:
            return 404, {"message": "Theater not found"}

        theater.verified = True
        theater.save(update_fields=['verified'])
        logger.info("Theater %s verified by user %s", theater.id, request.auth.id)
        return 200, create_theater_response(theater)
