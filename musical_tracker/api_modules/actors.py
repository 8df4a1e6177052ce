"""
Musical Tracker Actors API Module

Public API Overview:
==================

Base URL: /v2/actor

Public Endpoints (token optional):
- GET  /actor                    - List actors (approved only for non-admins)
- GET  /actor/{id}              - Get actor details

Protected Endpoints (JWT Token Required):
- POST   /actor                  - Submit a new actor
- PUT    /actor/{id}            - Update actor (admin)
- DELETE /actor/{id}            - Delete actor (admin)
- POST   /actor/{id}/approve    - Make the actor publicly visible (admin)
- POST   /actor/{id}/verify     - Mark the actor's identity as confirmed (admin)
"""

import logging
from datetime import datetime
from typing import Optional

from django.db.models import ProtectedError
from ninja import Schema

from tracker.models import Actor, Media
from musical_tracker.validator import Validator, is_email
from .auth import JWTAuth, ErrorSchema, MessageSchema, ValidationErrorSchema, check_admin_permissions, get_identity
from .core import (
    DEFAULT_PAGE_LIMIT, PaginationSchema, check_max_length, check_pagination, check_required,
    lookup_reference, nothing_to_update, paginate, validation_failed,
)

logger = logging.getLogger(__name__)

MODERATION_FLAGS = ("verified", "approved")

# ============================================================================
# Schemas
# ============================================================================

class ActorSchema(Schema):
    id: int
    name: str
    email: str
    bio: Optional[str] = None
    profileImageId: Optional[int] = None
    profileImageUrl: Optional[str] = None
    verified: bool
    approved: bool
    createdAt: datetime


class ActorListSchema(Schema):
    data: list[ActorSchema]
    pagination: PaginationSchema


class ActorPayloadSchema(Schema):
    name: Optional[str] = None
    email: Optional[str] = None
    bio: Optional[str] = None
    profileImageId: Optional[int] = None
    verified: Optional[bool] = None
    approved: Optional[bool] = None

# ============================================================================
# Utility Functions
# ============================================================================

def create_actor_response(actor: Actor) -> dict:
    return {
        "id": actor.id,
        "name": actor.name,
        "email": actor.email,
        "bio": actor.bio,
        "profileImageId": actor.profile_image_id,
        "profileImageUrl": actor.profile_image.url if actor.profile_image else None,
        "verified": actor.verified,
        "approved": actor.approved,
        "createdAt": actor.created_at,
    }


def validate_actor(validator: Validator, data: dict, creating: bool):
    check_required(validator, data, "name", creating)
    check_max_length(validator, data, "name", 255)
    check_required(validator, data, "email", creating)
    if data.get("email"):
        validator.check(is_email(data["email"]), "email", "must be a valid email address")
        check_max_length(validator, {"email": data["email"].strip()}, "email", 254)
    return lookup_reference(validator, Media, data, "profileImageId")


def visible_actors(identity):
    queryset = Actor.objects.select_related('profile_image')
    if identity is None or not identity.is_admin:
        queryset = queryset.filter(approved=True)
    return queryset


def set_actor_flag(request, actor_id: int, flag: str):
    has_permission, error_message = check_admin_permissions(request.auth)
    if not has_permission:
        return 403, {"message": error_message}

    try:
        actor = Actor.objects.select_related('profile_image').get(id=actor_id)
    except Actor.DoesNotExist:
        return 404, {"message": "Actor not found"}

    setattr(actor, flag, True)
    actor.save(update_fields=[flag])
    logger.info("Actor %s marked %s by user %s", actor.id, flag, request.auth.id)
    return 200, create_actor_response(actor)

# ============================================================================
# API Endpoints
# ============================================================================

def register_actor_endpoints(api):
    """Register all actor endpoints with the API router."""

    @api.get("/actor", response={200: ActorListSchema, 400: ValidationErrorSchema})
    def list_actors(request, page: int = 1, limit: int = DEFAULT_PAGE_LIMIT, search: str = None,
                    approved: bool = None, verified: bool = None):
        """
        List actors.

        Admin callers see unapproved actors too and may filter on the
        ``approved`` and ``verified`` flags.
        """
        validator = Validator()
        check_pagination(validator, page, limit)
        if not validator.valid:
            return validation_failed(validator)

        identity = get_identity(request)
        actors = visible_actors(identity)
        if search:
            actors = actors.filter(name__icontains=search)
        if identity is not None and identity.is_admin:
            if approved is not None:
                actors = actors.filter(approved=approved)
            if verified is not None:
                actors = actors.filter(verified=verified)

        return 200, paginate(actors, page, limit, create_actor_response)

    @api.get("/actor/{actor_id}", response={200: ActorSchema, 404: ErrorSchema})
    def get_actor(request, actor_id: int):
        try:
            actor = visible_actors(get_identity(request)).get(id=actor_id)
            return 200, create_actor_response(actor)
        except Actor.DoesNotExist:
            return 404, {"message": "Actor not found"}

    @api.post("/actor", auth=JWTAuth(),
              response={201: ActorSchema, 400: ValidationErrorSchema, 401: ErrorSchema, 403: ErrorSchema})
    def create_actor(request, payload: ActorPayloadSchema):
        """
        Submit a new actor.

        Returns:
            201: Actor created (unapproved and unverified unless an admin says otherwise)
            400: Missing name/email or unknown profile image
            403: Non-admin tried to set a moderation flag
        """
        identity = request.auth
        data = payload.dict(exclude_unset=True)
        if any(data.get(flag) is not None for flag in MODERATION_FLAGS) and not identity.is_admin:
            return 403, {"message": "Only admins can set verification or approval flags"}

        validator = Validator()
        profile_image = validate_actor(validator, data, creating=True)
        if not validator.valid:
            return validation_failed(validator)

        actor = Actor.objects.create(
            name=data["name"].strip(),
            email=data["email"].strip(),
            bio=data.get("bio"),
            profile_image=profile_image,
            verified=bool(data.get("verified")),
            approved=bool(data.get("approved")),
        )
        logger.info("Actor %s '%s' submitted by user %s", actor.id, actor.name, identity.id)
        return 201, create_actor_response(actor)

    @api.put("/actor/{actor_id}", auth=JWTAuth(),
             response={200: ActorSchema, 400: ValidationErrorSchema, 401: ErrorSchema, 403: ErrorSchema,
                       404: ErrorSchema})
    def update_actor(request, actor_id: int, payload: ActorPayloadSchema):
        has_permission, error_message = check_admin_permissions(request.auth)
        if not has_permission:
            return 403, {"message": error_message}

        try:
            actor = Actor.objects.get(id=actor_id)
        except Actor.DoesNotExist:
            return 404, {"message": "Actor not found"}

        data = payload.dict(exclude_unset=True)
        if not data:
            return nothing_to_update()

        validator = Validator()
        profile_image = validate_actor(validator, data, creating=False)
        if not validator.valid:
            return validation_failed(validator)

        if "name" in data:
            actor.name = data["name"].strip()
        if "email" in data:
            actor.email = data["email"].strip()
        if "bio" in data:
            actor.bio = data["bio"]
        if "profileImageId" in data:
            actor.profile_image = profile_image
        for flag in MODERATION_FLAGS:
            if data.get(flag) is not None:
                setattr(actor, flag, data[flag])

        actor.save()
        return 200, create_actor_response(actor)

    @api.delete("/actor/{actor_id}", auth=JWTAuth(),
                response={200: MessageSchema, 401: ErrorSchema, 403: ErrorSchema, 404: ErrorSchema,
                          409: ErrorSchema})
    def delete_actor(request, actor_id: int):
        has_permission, error_message = check_admin_permissions(request.auth)
        if not has_permission:
            return 403, {"message": error_message}

        try:
            actor = Actor.objects.get(id=actor_id)
            actor_name = actor.name
            actor.delete()
        except Actor.DoesNotExist:
            return 404, {"message": "Actor not found"}
        except ProtectedError:
            return 409, {"message": "Actor is still cast in one or more performances"}

        logger.info("Actor %s '%s' deleted by user %s", actor_id, actor_name, request.auth.id)
        return 200, {"message": f"Actor '{actor_name}' deleted successfully"}

    @api.post("/actor/{actor_id}/approve", auth=JWTAuth(),
              response={200: ActorSchema, 401: ErrorSchema, 403: ErrorSchema, 404: ErrorSchema})
    def approve_actor(request, actor_id: int):
        return set_actor_flag(request, actor_id, "approved")

    @api.post("/actor/{actor_id}/verify", auth=JWTAuth(),
              response={200: ActorSchema, 401: ErrorSchema, 403: ErrorSchema, 404: ErrorSchema})
    def verify_actor(request, actor_id: int):
        return set_actor_flag(request, actor_id, "verified")
