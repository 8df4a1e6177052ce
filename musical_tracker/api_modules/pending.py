"""
Moderation queue for admins.

Lists the submissions that are not yet visible to regular users:
unapproved musicals and actors, unverified theaters.
"""

import logging

from ninja import Schema

from tracker.models import Actor, Musical, Theater
from musical_tracker.validator import Validator
from .auth import JWTAuth, ErrorSchema, ValidationErrorSchema, check_admin_permissions
from .actors import ActorListSchema, create_actor_response
from .core import DEFAULT_PAGE_LIMIT, check_pagination, paginate, validation_failed
from .musicals import MusicalListSchema, create_musical_response
from .theaters import TheaterListSchema, create_theater_response

logger = logging.getLogger(__name__)


class PendingCountsSchema(Schema):
    musicals: int
    actors: int
    theaters: int
    total: int


def pending_musicals():
    return Musical.objects.select_related('poster').filter(approved=False)


def pending_actors():
    return Actor.objects.select_related('profile_image').filter(approved=False)


def pending_theaters():
    return Theater.objects.filter(verified=False)


def list_pending(request, queryset, page: int, limit: int, serialize):
    has_permission, error_message = check_admin_permissions(request.auth)
    if not has_permission:
        return 403, {"message": error_message}

    validator = Validator()
    check_pagination(validator, page, limit)
    if not validator.valid:
        return validation_failed(validator)

    return 200, paginate(queryset, page, limit, serialize)


def register_pending_endpoints(api):
    """Register moderation queue endpoints."""

    @api.get("/pending", auth=JWTAuth(), response={200: PendingCountsSchema, 401: ErrorSchema, 403: ErrorSchema})
    def pending_counts(request):
        has_permission, error_message = check_admin_permissions(request.auth)
        if not has_permission:
            return 403, {"message": error_message}

        counts = {
            "musicals": pending_musicals().count(),
            "actors": pending_actors().count(),
            "theaters": pending_theaters().count(),
        }
        counts["total"] = sum(counts.values())
        return 200, counts

    @api.get("/pending/musicals", auth=JWTAuth(),
             response={200: MusicalListSchema, 400: ValidationErrorSchema, 401: ErrorSchema, 403: ErrorSchema})
    def pending_musical_list(request, page: int = 1, limit: int = DEFAULT_PAGE_LIMIT):
        return list_pending(request, pending_musicals(), page, limit, create_musical_response)

    @api.get("/pending/actors", auth=JWTAuth(),
             response={200: ActorListSchema, 400: ValidationErrorSchema, 401: ErrorSchema, 403: ErrorSchema})
    def pending_actor_list(request, page: int = 1, limit: int = DEFAULT_PAGE_LIMIT):
        return list_pending(request, pending_actors(), page, limit, create_actor_response)

    @api.get("/pending/theaters", auth=JWTAuth(),
             response={200: TheaterListSchema, 400: ValidationErrorSchema, 401: ErrorSchema, 403: ErrorSchema})
    def pending_theater_list(request, page: int = 1, limit: int = DEFAULT_PAGE_LIMIT):
        return list_pending(request, pending_theaters(), page, limit, create_theater_response)
