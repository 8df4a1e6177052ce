"""
Musical Tracker Performances API Module

A performance is one showing of a musical at a theater on a given date.
Users log the performances they attended; the user who logged a performance
owns it and may edit or remove it, admins may edit any.

Public API Overview:
==================

Base URL: /v2/performance

- GET    /performance            - List performances
- GET    /performance/{id}       - Get performance details
- POST   /performance            - Log a performance (authenticated)
- PUT    /performance/{id}       - Update (owner or admin)
- DELETE /performance/{id}       - Delete (owner or admin)

Filters: musicalId, theaterId, dateFrom, dateTo (inclusive, YYYY-MM-DD)
"""

import logging
from datetime import date as date_type, datetime, time as time_type
from typing import Optional

from django.db.models import ProtectedError, Q
from ninja import Schema

from tracker.models import Media, Musical, Performance, Theater
from musical_tracker.validator import Validator
from .auth import JWTAuth, ErrorSchema, MessageSchema, ValidationErrorSchema, check_owner_or_admin, get_identity
from .core import (
    DEFAULT_PAGE_LIMIT, PaginationSchema, check_pagination, lookup_reference, nothing_to_update, paginate,
    validation_failed,
)

logger = logging.getLogger(__name__)

# ============================================================================
# Schemas
# ============================================================================

class PerformanceSchema(Schema):
    id: int
    date: date_type
    time: Optional[time_type] = None
    musicalId: int
    musicalName: str
    theaterId: int
    theaterName: str
    notes: Optional[str] = None
    posterId: Optional[int] = None
    posterUrl: Optional[str] = None
    createdBy: Optional[int] = None
    createdAt: datetime


class PerformanceListSchema(Schema):
    data: list[PerformanceSchema]
    pagination: PaginationSchema


class PerformancePayloadSchema(Schema):
    date: Optional[date_type] = None
    time: Optional[time_type] = None
    musicalId: Optional[int] = None
    theaterId: Optional[int] = None
    notes: Optional[str] = None
    posterId: Optional[int] = None

# ============================================================================
# Utility Functions
# ============================================================================

def create_performance_response(performance: Performance) -> dict:
    return {
        "id": performance.id,
        "date": performance.date,
        "time": performance.time,
        "musicalId": performance.musical_id,
        "musicalName": performance.musical.name,
        "theaterId": performance.theater_id,
        "theaterName": performance.theater.name,
        "notes": performance.notes,
        "posterId": performance.poster_id,
        "posterUrl": performance.poster.url if performance.poster else None,
        "createdBy": performance.created_by_id,
        "createdAt": performance.created_at,
    }


def visible_performances(identity):
    """
    Non-admin callers see performances of approved musicals plus the ones they logged themselves.
    """
    queryset = Performance.objects.select_related('musical', 'theater', 'poster')
    if identity is None:
        return queryset.filter(musical__approved=True)
    if not identity.is_admin:
        return queryset.filter(Q(musical__approved=True) | Q(created_by_id=identity.id))
    return queryset


def validate_performance(validator: Validator, data: dict, creating: bool) -> dict:
    for key in ("date", "musicalId", "theaterId"):
        if creating or key in data:
            validator.check(data.get(key) is not None, key, "is required")
    return {
        "musical": lookup_reference(validator, Musical, data, "musicalId"),
        "theater": lookup_reference(validator, Theater, data, "theaterId"),
        "poster": lookup_reference(validator, Media, data, "posterId"),
    }

# ============================================================================
# API Endpoints
# ============================================================================

def register_performance_endpoints(api):
    """Register all performance endpoints with the API router."""

    @api.get("/performance", response={200: PerformanceListSchema, 400: ValidationErrorSchema})
    def list_performances(request, page: int = 1, limit: int = DEFAULT_PAGE_LIMIT, musicalId: int = None,
                          theaterId: int = None, dateFrom: date_type = None, dateTo: date_type = None):
        validator = Validator()
        check_pagination(validator, page, limit)
        if dateFrom and dateTo:
            validator.check(dateFrom <= dateTo, "dateTo", "must not be before dateFrom")
        if not validator.valid:
            return validation_failed(validator)

        performances = visible_performances(get_identity(request))
        if musicalId is not None:
            performances = performances.filter(musical_id=musicalId)
        if theaterId is not None:
            performances = performances.filter(theater_id=theaterId)
        if dateFrom:
            performances = performances.filter(date__gte=dateFrom)
        if dateTo:
            performances = performances.filter(date__lte=dateTo)

        return 200, paginate(performances, page, limit, create_performance_response)

    @api.get("/performance/{performance_id}", response={200: PerformanceSchema, 404: ErrorSchema})
    def get_performance(request, performance_id: int):
        try:
            performance = visible_performances(get_identity(request)).get(id=performance_id)
            return 200, create_performance_response(performance)
        except Performance.DoesNotExist:
            return 404, {"message": "Performance not found"}

    @api.post("/performance", auth=JWTAuth(),
              response={201: PerformanceSchema, 400: ValidationErrorSchema, 401: ErrorSchema})
    def create_performance(request, payload: PerformancePayloadSchema):
        """
        Log a performance.

        The caller becomes the owner of the new performance.

        Returns:
            201: Performance created
            400: Missing date/musicalId/theaterId or unknown references
        """
        data = payload.dict(exclude_unset=True)
        validator = Validator()
        references = validate_performance(validator, data, creating=True)
        if not validator.valid:
            return validation_failed(validator)

        performance = Performance.objects.create(
            date=data["date"],
            time=data.get("time"),
            notes=data.get("notes"),
            created_by_id=request.auth.id,
            **references,
        )
        logger.info("Performance %s logged by user %s", performance.id, request.auth.id)
        return 201, create_performance_response(performance)

    @api.put("/performance/{performance_id}", auth=JWTAuth(),
             response={200: PerformanceSchema, 400: ValidationErrorSchema, 401: ErrorSchema, 403: ErrorSchema,
                       404: ErrorSchema})
    def update_performance(request, performance_id: int, payload: PerformancePayloadSchema):
        """
        Update a performance (owner or admin).

        The musical cannot change while castings exist, since their roles
        belong to the current musical.
        """
        try:
            performance = Performance.objects.select_related('musical', 'theater', 'poster').get(id=performance_id)
        except Performance.DoesNotExist:
            return 404, {"message": "Performance not found"}

        has_permission, error_message = check_owner_or_admin(request.auth, performance.created_by_id)
        if not has_permission:
            return 403, {"message": error_message}

        data = payload.dict(exclude_unset=True)
        if not data:
            return nothing_to_update()

        validator = Validator()
        references = validate_performance(validator, data, creating=False)
        musical = references["musical"]
        if musical is not None and musical.id != performance.musical_id:
            validator.check(not performance.castings.exists(), "musicalId",
                            "cannot change while the performance has castings")
        if not validator.valid:
            return validation_failed(validator)

        for key in ("date", "time", "notes"):
            if key in data:
                setattr(performance, key, data[key])
        if musical is not None:
            performance.musical = musical
        if references["theater"] is not None:
            performance.theater = references["theater"]
        if "posterId" in data:
            performance.poster = references["poster"]

        performance.save()
        return 200, create_performance_response(performance)

    @api.delete("/performance/{performance_id}", auth=JWTAuth(),
                response={200: MessageSchema, 401: ErrorSchema, 403: ErrorSchema, 404: ErrorSchema,
                          409: ErrorSchema})
    def delete_performance(request, performance_id: int):
        try:
            performance = Performance.objects.get(id=performance_id)
        except Performance.DoesNotExist:
            return 404, {"message": "Performance not found"}

        has_permission, error_message = check_owner_or_admin(request.auth, performance.created_by_id)
        if not has_permission:
            return 403, {"message": error_message}

        try:
            performance.delete()
        except ProtectedError:
            return 409, {"message": "Performance still has castings"}

        logger.info("Performance %s deleted by user %s", performance_id, request.auth.id)
        return 200, {"message": "Performance deleted successfully"}
