"""
Musical Tracker Roles API Module

Roles are the characters of a musical ("Eliza Hamilton" in "Hamilton").
Every role belongs to exactly one musical.

Public API Overview:
==================

Base URL: /v2/role

- GET    /role              - List roles (of approved musicals for non-admins)
- GET    /role/{id}         - Get role details
- POST   /role              - Create role (authenticated)
- PUT    /role/{id}         - Update role (admin)
- DELETE /role/{id}         - Delete role (admin)
"""

import logging
from datetime import datetime
from typing import Optional

from django.db.models import ProtectedError
from ninja import Schema

from tracker.models import Musical, Role
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

class RoleSchema(Schema):
    id: int
    name: str
    description: Optional[str] = None
    musicalId: int
    musicalName: str
    createdAt: datetime


class RoleListSchema(Schema):
    data: list[RoleSchema]
    pagination: PaginationSchema


class RolePayloadSchema(Schema):
    name: Optional[str] = None
    description: Optional[str] = None
    musicalId: Optional[int] = None

# ============================================================================
# Utility Functions
# ============================================================================

def create_role_response(role: Role) -> dict:
    return {
        "id": role.id,
        "name": role.name,
        "description": role.description,
        "musicalId": role.musical_id,
        "musicalName": role.musical.name,
        "createdAt": role.created_at,
    }


def visible_roles(identity):
    """Roles are public once their musical is approved."""
    queryset = Role.objects.select_related('musical')
    if identity is None or not identity.is_admin:
        queryset = queryset.filter(musical__approved=True)
    return queryset

# ============================================================================
# API Endpoints
# ============================================================================

def register_role_endpoints(api):
    """Register all role endpoints with the API router."""

    @api.get("/role", response={200: RoleListSchema, 400: ValidationErrorSchema})
    def list_roles(request, page: int = 1, limit: int = DEFAULT_PAGE_LIMIT, musicalId: int = None,
                   search: str = None):
        validator = Validator()
        check_pagination(validator, page, limit)
        if not validator.valid:
            return validation_failed(validator)

        roles = visible_roles(get_identity(request))
        if musicalId is not None:
            roles = roles.filter(musical_id=musicalId)
        if search:
            roles = roles.filter(name__icontains=search)

        return 200, paginate(roles, page, limit, create_role_response)

    @api.get("/role/{role_id}", response={200: RoleSchema, 404: ErrorSchema})
    def get_role(request, role_id: int):
        try:
            role = visible_roles(get_identity(request)).get(id=role_id)
            return 200, create_role_response(role)
        except Role.DoesNotExist:
            return 404, {"message": "Role not found"}

    @api.post("/role", auth=JWTAuth(), response={201: RoleSchema, 400: ValidationErrorSchema, 401: ErrorSchema})
    def create_role(request, payload: RolePayloadSchema):
        """
        Create a role for a musical.

        Returns:
            201: Role created
            400: Missing name, missing or unknown musicalId
        """
        data = payload.dict(exclude_unset=True)
        validator = Validator()
        check_required(validator, data, "name", creating=True)
        check_max_length(validator, data, "name", 255)
        validator.check(data.get("musicalId") is not None, "musicalId", "is required")
        musical = lookup_reference(validator, Musical, data, "musicalId")
        if not validator.valid:
            return validation_failed(validator)

        role = Role.objects.create(
            name=data["name"].strip(),
            description=data.get("description"),
            musical=musical,
        )
        logger.info("Role %s '%s' created for musical %s", role.id, role.name, musical.id)
        return 201, create_role_response(role)

    @api.put("/role/{role_id}", auth=JWTAuth(),
             response={200: RoleSchema, 400: ValidationErrorSchema, 401: ErrorSchema, 403: ErrorSchema,
                       404: ErrorSchema})
    def update_role(request, role_id: int, payload: RolePayloadSchema):
        """
        Update a role (admin).

        Moving a role to another musical is refused while it is cast in a
        performance, since those castings would then point at the wrong show.
        """
        has_permission, error_message = check_admin_permissions(request.auth)
        if not has_permission:
            return 403, {"message": error_message}

        try:
            role = Role.objects.select_related('musical').get(id=role_id)
        except Role.DoesNotExist:
            return 404, {"message": "Role not found"}

        data = payload.dict(exclude_unset=True)
        if not data:
            return nothing_to_update()

        validator = Validator()
        check_required(validator, data, "name", creating=False)
        check_max_length(validator, data, "name", 255)
        if "musicalId" in data:
            validator.check(data["musicalId"] is not None, "musicalId", "is required")
        musical = lookup_reference(validator, Musical, data, "musicalId")
        if musical is not None and musical.id != role.musical_id:
            validator.check(not role.castings.exists(), "musicalId",
                            "cannot change while the role is cast in performances")
        if not validator.valid:
            return validation_failed(validator)

        if "name" in data:
            role.name = data["name"].strip()
        if "description" in data:
            role.description = data["description"]
        if musical is not None:
            role.musical = musical

        role.save()
        return 200, create_role_response(role)

    @api.delete("/role/{role_id}", auth=JWTAuth(),
                response={200: MessageSchema, 401: ErrorSchema, 403: ErrorSchema, 404: ErrorSchema,
                          409: ErrorSchema})
    def delete_role(request, role_id: int):
        has_permission, error_message = check_admin_permissions(request.auth)
        if not has_permission:
            return 403, {"message": error_message}

        try:
            role = Role.objects.get(id=role_id)
            role_name = role.name
            role.delete()
        except Role.DoesNotExist:
            return 404, {"message": "Role not found"}
        except ProtectedError:
            return 409, {"message": "Role is still cast in one or more performances"}

        logger.info("Role %s '%s' deleted by user %s", role_id, role_name, request.auth.id)
        return 200, {"message": f"Role '{role_name}' deleted successfully"}
