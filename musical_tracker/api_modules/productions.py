"""
Musical Tracker Productions API Module

A production is a run of a musical: the span between opening and closing
night, optionally tied to the theater that hosted it.

Public API Overview:
==================

Base URL: /v2/production

- GET    /production            - List productions (of approved musicals for non-admins)
- GET    /production/{id}       - Get production details
- POST   /production            - Create production (authenticated)
- PUT    /production/{id}       - Update production (admin)
- DELETE /production/{id}       - Delete production (admin)

Filters: musicalId, theaterId
"""

import logging
from datetime import date as date_type, datetime
from typing import Optional

from django.core.exceptions import ValidationError as DjangoValidationError
from django.core.validators import URLValidator
from ninja import Schema

from tracker.models import Musical, Production, Theater
from musical_tracker.validator import Validator
from .auth import JWTAuth, ErrorSchema, MessageSchema, ValidationErrorSchema, check_admin_permissions, get_identity
from .core import (
    DEFAULT_PAGE_LIMIT, PaginationSchema, check_max_length, check_pagination, lookup_reference,
    nothing_to_update, paginate, validation_failed,
)

logger = logging.getLogger(__name__)

validate_url = URLValidator(schemes=['http', 'https'])

# ============================================================================
# Schemas
# ============================================================================

class ProductionSchema(Schema):
    id: int
    musicalId: int
    musicalName: str
    theaterId: Optional[int] = None
    theaterName: Optional[str] = None
    startDate: date_type
    endDate: date_type
    posterUrl: Optional[str] = None
    createdAt: datetime


class ProductionListSchema(Schema):
    data: list[ProductionSchema]
    pagination: PaginationSchema


class ProductionPayloadSchema(Schema):
    musicalId: Optional[int] = None
    theaterId: Optional[int] = None
    startDate: Optional[date_type] = None
    endDate: Optional[date_type] = None
    posterUrl: Optional[str] = None

# ============================================================================
# Utility Functions
# ============================================================================

def create_production_response(production: Production) -> dict:
    return {
        "id": production.id,
        "musicalId": production.musical_id,
        "musicalName": production.musical.name,
        "theaterId": production.theater_id,
        "theaterName": production.theater.name if production.theater else None,
        "startDate": production.start_date,
        "endDate": production.end_date,
        "posterUrl": production.poster_url,
        "createdAt": production.created_at,
    }


def visible_productions(identity):
    queryset = Production.objects.select_related('musical', 'theater')
    if identity is None or not identity.is_admin:
        queryset = queryset.filter(musical__approved=True)
    return queryset


def validate_production(validator: Validator, data: dict, creating: bool, current: Production = None) -> dict:
    """
    Check a create or update body.

    On update the date order is checked against the stored dates for
    whichever side the body leaves out.
    """
    for key in ("musicalId", "startDate", "endDate"):
        if creating or key in data:
            validator.check(data.get(key) is not None, key, "is required")

    if data.get("posterUrl"):
        check_max_length(validator, data, "posterUrl", 1000)
        try:
            validate_url(data["posterUrl"])
        except DjangoValidationError:
            validator.add_error("posterUrl", "must be a valid http(s) URL")

    start_date = data.get("startDate") or (current.start_date if current else None)
    end_date = data.get("endDate") or (current.end_date if current else None)
    if start_date and end_date:
        validator.check(end_date >= start_date, "endDate", "must not be before startDate")

    return {
        "musical": lookup_reference(validator, Musical, data, "musicalId"),
        "theater": lookup_reference(validator, Theater, data, "theaterId"),
    }

# ============================================================================
# API Endpoints
# ============================================================================

def register_production_endpoints(api):
    """Register all production endpoints with the API router."""

    @api.get("/production", response={200: ProductionListSchema, 400: ValidationErrorSchema})
    def list_productions(request, page: int = 1, limit: int = DEFAULT_PAGE_LIMIT, musicalId: int = None,
                         theaterId: int = None):
        validator = Validator()
        check_pagination(validator, page, limit)
        if not validator.valid:
            return validation_failed(validator)

        productions = visible_productions(get_identity(request))
        if musicalId is not None:
            productions = productions.filter(musical_id=musicalId)
        if theaterId is not None:
            productions = productions.filter(theater_id=theaterId)

        return 200, paginate(productions, page, limit, create_production_response)

    @api.get("/production/{production_id}", response={200: ProductionSchema, 404: ErrorSchema})
    def get_production(request, production_id: int):
        try:
            production = visible_productions(get_identity(request)).get(id=production_id)
            return 200, create_production_response(production)
        except Production.DoesNotExist:
            return 404, {"message": "Production not found"}

    @api.post("/production", auth=JWTAuth(),
              response={201: ProductionSchema, 400: ValidationErrorSchema, 401: ErrorSchema})
    def create_production(request, payload: ProductionPayloadSchema):
        """
        Record a production run.

        Returns:
            201: Production created
            400: Missing musicalId/startDate/endDate, unknown references or closing before opening
        """
        data = payload.dict(exclude_unset=True)
        validator = Validator()
        references = validate_production(validator, data, creating=True)
        if not validator.valid:
            return validation_failed(validator)

        production = Production.objects.create(
            start_date=data["startDate"],
            end_date=data["endDate"],
            poster_url=data.get("posterUrl") or None,
            **references,
        )
        logger.info("Production %s of musical %s created by user %s",
                    production.id, production.musical_id, request.auth.id)
        return 201, create_production_response(production)

    @api.put("/production/{production_id}", auth=JWTAuth(),
             response={200: ProductionSchema, 400: ValidationErrorSchema, 401: ErrorSchema, 403: ErrorSchema,
                       404: ErrorSchema})
    def update_production(request, production_id: int, payload: ProductionPayloadSchema):
        has_permission, error_message = check_admin_permissions(request.auth)
        if not has_permission:
            return 403, {"message": error_message}

        try:
            production = Production.objects.select_related('musical', 'theater').get(id=production_id)
        except Production.DoesNotExist:
            return 404, {"message": "Production not found"}

        data = payload.dict(exclude_unset=True)
        if not data:
            return nothing_to_update()

        validator = Validator()
        references = validate_production(validator, data, creating=False, current=production)
        if not validator.valid:
            return validation_failed(validator)

        if references["musical"] is not None:
            production.musical = references["musical"]
        if "theaterId" in data:
            production.theater = references["theater"]
        if "startDate" in data:
            production.start_date = data["startDate"]
        if "endDate" in data:
            production.end_date = data["endDate"]
        if "posterUrl" in data:
            production.poster_url = data["posterUrl"] or None

        production.save()
        return 200, create_production_response(production)

    @api.delete("/production/{production_id}", auth=JWTAuth(),
                response={200: MessageSchema, 401: ErrorSchema, 403: ErrorSchema, 404: ErrorSchema})
    def delete_production(request, production_id: int):
        has_permission, error_message = check_admin_permissions(request.auth)
        if not has_permission:
            return 403, {"message": error_message}

        try:
            production = Production.objects.get(id=production_id)
        except Production.DoesNotExist:
            return 404, {"message": "Production not found"}

        production.delete()
        logger.info("Production %s deleted by user %s", production_id, request.auth.id)
        return 200, {"message": "Production deleted successfully"}
