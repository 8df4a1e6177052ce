"""
Musical Tracker Castings API Module

A casting records that an actor played a role in one specific performance.

Public API Overview:
==================

Base URL: /v2/casting

- GET    /casting                - List castings (filters: actorId, roleId, performanceId)
- GET    /casting/{id}           - Get casting details
- POST   /casting                - Create casting (authenticated; own performances unless admin)
- PUT    /casting/{id}           - Update casting (performance owner or admin)
- DELETE /casting/{id}           - Delete casting (performance owner or admin)

Validation Rules:
================

- actorId, roleId and performanceId are required and must exist
- the role must belong to the musical being performed
- the same actor/role/performance triple can only be recorded once (409)
"""

import logging
from datetime import datetime

from django.db import IntegrityError, transaction
from django.db.models import Q
from ninja import Schema
from typing import Optional

from tracker.models import Actor, Casting, Performance, Role
from musical_tracker.validator import Validator
from .auth import JWTAuth, ErrorSchema, MessageSchema, ValidationErrorSchema, check_owner_or_admin, get_identity
from .core import (
    DEFAULT_PAGE_LIMIT, PaginationSchema, check_pagination, lookup_reference, nothing_to_update, paginate,
    validation_failed,
)

logger = logging.getLogger(__name__)

REFERENCES = (
    ("actorId", Actor, "actor"),
    ("roleId", Role, "role"),
    ("performanceId", Performance, "performance"),
)

# ============================================================================
# Schemas
# ============================================================================

class CastingSchema(Schema):
    id: int
    actorId: int
    actorName: str
    roleId: int
    roleName: str
    performanceId: int
    performanceDate: str
    musicalId: int
    createdAt: datetime


class CastingListSchema(Schema):
    data: list[CastingSchema]
    pagination: PaginationSchema


class CastingPayloadSchema(Schema):
    actorId: Optional[int] = None
    roleId: Optional[int] = None
    performanceId: Optional[int] = None

# ============================================================================
# Utility Functions
# ============================================================================

def create_casting_response(casting: Casting) -> dict:
    return {
        "id": casting.id,
        "actorId": casting.actor_id,
        "actorName": casting.actor.name,
        "roleId": casting.role_id,
        "roleName": casting.role.name,
        "performanceId": casting.performance_id,
        "performanceDate": casting.performance.date.isoformat(),
        "musicalId": casting.performance.musical_id,
        "createdAt": casting.created_at,
    }


def visible_castings(identity):
    """Castings follow the visibility of their performance."""
    queryset = Casting.objects.select_related('actor', 'role', 'performance')
    if identity is None:
        return queryset.filter(performance__musical__approved=True)
    if not identity.is_admin:
        return queryset.filter(
            Q(performance__musical__approved=True) | Q(performance__created_by_id=identity.id)
        )
    return queryset


def check_role_matches_performance(validator: Validator, role: Role, performance: Performance) -> None:
    if role is not None and performance is not None:
        validator.check(role.musical_id == performance.musical_id, "roleId",
                        "must belong to the same musical as the performance")


def casting_exists(actor, role, performance, exclude_id=None) -> bool:
    duplicates = Casting.objects.filter(actor=actor, role=role, performance=performance)
    if exclude_id is not None:
        duplicates = duplicates.exclude(id=exclude_id)
    return duplicates.exists()

# ============================================================================
# API Endpoints
# ============================================================================

def register_casting_endpoints(api):
    """Register all casting endpoints with the API router."""

    @api.get("/casting", response={200: CastingListSchema, 400: ValidationErrorSchema})
    def list_castings(request, page: int = 1, limit: int = DEFAULT_PAGE_LIMIT, actorId: int = None,
                      roleId: int = None, performanceId: int = None):
        validator = Validator()
        check_pagination(validator, page, limit)
        if not validator.valid:
            return validation_failed(validator)

        castings = visible_castings(get_identity(request))
        if actorId is not None:
            castings = castings.filter(actor_id=actorId)
        if roleId is not None:
            castings = castings.filter(role_id=roleId)
        if performanceId is not None:
            castings = castings.filter(performance_id=performanceId)

        return 200, paginate(castings, page, limit, create_casting_response)

    @api.get("/casting/{casting_id}", response={200: CastingSchema, 404: ErrorSchema})
    def get_casting(request, casting_id: int):
        try:
            casting = visible_castings(get_identity(request)).get(id=casting_id)
            return 200, create_casting_response(casting)
        except Casting.DoesNotExist:
            return 404, {"message": "Casting not found"}

    @api.post("/casting", auth=JWTAuth(),
              response={201: CastingSchema, 400: ValidationErrorSchema, 401: ErrorSchema, 403: ErrorSchema,
                        409: ErrorSchema})
    def create_casting(request, payload: CastingPayloadSchema):
        """
        Record who played which role in a performance.

        Non-admin users may only add castings to performances they logged.

        Returns:
            201: Casting created
            400: Missing/unknown ids, or the role belongs to a different musical
            403: Performance belongs to another user
            409: Casting already recorded
        """
        data = payload.dict(exclude_unset=True)
        validator = Validator()
        found = {}
        for key, model, name in REFERENCES:
            validator.check(data.get(key) is not None, key, "is required")
            found[name] = lookup_reference(validator, model, data, key)
        check_role_matches_performance(validator, found["role"], found["performance"])
        if not validator.valid:
            return validation_failed(validator)

        has_permission, error_message = check_owner_or_admin(request.auth, found["performance"].created_by_id)
        if not has_permission:
            return 403, {"message": error_message}

        if casting_exists(**found):
            return 409, {"message": "Casting already exists"}

        try:
            with transaction.atomic():
                casting = Casting.objects.create(**found)
        except IntegrityError:
            return 409, {"message": "Casting already exists"}

        logger.info("Casting %s created: actor %s as role %s in performance %s",
                    casting.id, casting.actor_id, casting.role_id, casting.performance_id)
        return 201, create_casting_response(casting)

    @api.put("/casting/{casting_id}", auth=JWTAuth(),
             response={200: CastingSchema, 400: ValidationErrorSchema, 401: ErrorSchema, 403: ErrorSchema,
                       404: ErrorSchema, 409: ErrorSchema})
    def update_casting(request, casting_id: int, payload: CastingPayloadSchema):
        """
        Update a casting (performance owner or admin).

        The role/performance rule is checked against the row as it would be
        after the update, so changing only one side is validated too.
        """
        try:
            casting = Casting.objects.select_related('actor', 'role', 'performance').get(id=casting_id)
        except Casting.DoesNotExist:
            return 404, {"message": "Casting not found"}

        has_permission, error_message = check_owner_or_admin(request.auth, casting.performance.created_by_id)
        if not has_permission:
            return 403, {"message": error_message}

        data = payload.dict(exclude_unset=True)
        if not data:
            return nothing_to_update()

        validator = Validator()
        merged = {"actor": casting.actor, "role": casting.role, "performance": casting.performance}
        for key, model, name in REFERENCES:
            if key in data:
                validator.check(data[key] is not None, key, "is required")
                instance = lookup_reference(validator, model, data, key)
                if instance is not None:
                    merged[name] = instance
        check_role_matches_performance(validator, merged["role"], merged["performance"])
        if not validator.valid:
            return validation_failed(validator)

        if merged["performance"].id != casting.performance_id:
            has_permission, error_message = check_owner_or_admin(request.auth, merged["performance"].created_by_id)
            if not has_permission:
                return 403, {"message": error_message}

        if casting_exists(exclude_id=casting.id, **merged):
            return 409, {"message": "Casting already exists"}

        casting.actor = merged["actor"]
        casting.role = merged["role"]
        casting.performance = merged["performance"]
        try:
            with transaction.atomic():
                casting.save()
        except IntegrityError:
            return 409, {"message": "Casting already exists"}

        return 200, create_casting_response(casting)

    @api.delete("/casting/{casting_id}", auth=JWTAuth(),
                response={200: MessageSchema, 401: ErrorSchema, 403: ErrorSchema, 404: ErrorSchema})
    def delete_casting(request, casting_id: int):
        try:
            casting = Casting.objects.select_related('performance').get(id=casting_id)
        except Casting.DoesNotExist:
            return 404, {"message": "Casting not found"}

        has_permission, error_message = check_owner_or_admin(request.auth, casting.performance.created_by_id)
        if not has_permission:
            return 403, {"message": error_message}

        casting.delete()
        logger.info("Casting %s deleted by user %s", casting_id, request.auth.id)
        return 200, {"message": "Casting deleted successfully"}
