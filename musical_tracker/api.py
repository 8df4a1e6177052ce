"""
Musical Tracker API - v2

REST API for tracking musicals, the actors who perform in them, the theaters
that host them, and the individual performances a user has attended.

📚 API STRUCTURE
================

All resources live under the versioned prefix ``/v2``:

- /v2/user         - registration, login, token refresh, account management
- /v2/musical      - musicals (approved ones are public)
- /v2/actor        - actors (approved ones are public)
- /v2/theater      - theaters (verified ones are public)
- /v2/role         - roles of a musical
- /v2/performance  - performances of a musical at a theater
- /v2/casting      - which actor played which role in which performance
- /v2/production   - production runs of a musical
- /v2/media        - image uploads (posters, profile pictures)
- /v2/pending      - moderation queue (admin only)
- /v2/permissions  - navigation sections available to the caller

🔑 AUTHENTICATION
=================

    Authorization: Bearer <token>

Anonymous requests are allowed on public reads. Mutations need a token;
moderation and most updates/deletes need an admin token.

📊 RESPONSE FORMAT
==================

List endpoints:
    {"data": [...], "pagination": {"page": 1, "limit": 20, "total": 42, "totalPages": 3}}

Validation errors (400):
    {"errors": {"name": "is required"}}

Other errors (401/403/404/409/500):
    {"message": "Musical not found"}

Interactive documentation is served at ``/v2/docs``.
"""

import logging

from ninja import NinjaAPI
from ninja.errors import AuthenticationError, HttpError, ValidationError

from .api_modules.core import SERVER_ERROR, register_core_endpoints
from .api_modules.users import register_user_endpoints
from .api_modules.theaters import register_theater_endpoints
from .api_modules.roles import register_role_endpoints
from .api_modules.actors import register_actor_endpoints
from .api_modules.musicals import register_musical_endpoints
from .api_modules.performances import register_performance_endpoints
from .api_modules.castings import register_casting_endpoints
from .api_modules.productions import register_production_endpoints
from .api_modules.media import register_media_endpoints
from .api_modules.pending import register_pending_endpoints

logger = logging.getLogger(__name__)

REQUEST_LOCATIONS = ("body", "query", "path", "form", "file", "header", "cookie")

# ============================================================================
# API Configuration
# ============================================================================

api = NinjaAPI(
    title="Musical Tracker API",
    description="Musicals, actors, theaters, performances and castings",
    version="2.0.0",
)

# ============================================================================
# Error Handlers
# ============================================================================

def validation_error_key(loc) -> str:
    parts = [str(part) for part in loc if part not in REQUEST_LOCATIONS]
    if len(parts) <= 1 and loc and loc[0] == "body":
        return "body"
    return parts[-1] if parts else "body"


@api.exception_handler(ValidationError)
def on_validation_error(request, exc: ValidationError):
    """Report request parsing failures in the same shape as handler validation."""
    errors = {}
    for error in exc.errors:
        errors.setdefault(validation_error_key(error.get("loc", ())), error.get("msg", "is invalid"))
    return api.create_response(request, {"errors": errors}, status=400)


@api.exception_handler(AuthenticationError)
def on_authentication_error(request, exc):
    return api.create_response(request, {"message": "Authentication required"}, status=401)


@api.exception_handler(HttpError)
def on_http_error(request, exc: HttpError):
    """Errors raised by ninja itself, such as an unparsable JSON body."""
    if exc.status_code == 400:
        body = {"errors": {"body": str(exc)}}
    else:
        body = {"message": str(exc)}
    return api.create_response(request, body, status=exc.status_code)


@api.exception_handler(Exception)
def on_unexpected_error(request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.path)
    return api.create_response(request, {"message": SERVER_ERROR}, status=500)

# ============================================================================
# Register API Modules
# ============================================================================

register_core_endpoints(api)         # /, /health, /permissions
register_user_endpoints(api)         # Accounts and tokens
register_theater_endpoints(api)      # Theaters
register_role_endpoints(api)         # Roles
register_actor_endpoints(api)        # Actors
register_musical_endpoints(api)      # Musicals
register_performance_endpoints(api)  # Performances
register_casting_endpoints(api)      # Castings
register_production_endpoints(api)   # Production runs
register_media_endpoints(api)        # Image uploads
register_pending_endpoints(api)      # Moderation queue
