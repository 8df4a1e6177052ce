"""
Musical Tracker Authentication Module

Bearer-token authentication shared by every resource router.

Authentication Flow:
==================

1. POST /v2/user/login with email and password to receive a token
2. Send it on later requests: "Authorization: Bearer {token}"
3. Tokens expire after AUTH_TOKEN_LIFETIME_HOURS - use /v2/user/refresh-token

Public vs Protected Routes:
==========================

A missing or unusable token never fails a request by itself. Routes that need
a caller attach ``JWTAuth()`` (401 when no valid token is sent); routes that
only adjust what they show call ``get_identity(request)`` and treat ``None``
as an anonymous visitor. Admin-only operations additionally call
``check_admin_permissions`` and answer 403 for plain users.

Error Handling:
==============

- 401: {"message": "Authentication required"}
- 403: {"message": "Admin privileges required"}
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from django.conf import settings
from django.contrib.auth.models import User
from django.http import HttpRequest
from ninja import Schema
from ninja.security import HttpBearer

from tracker.models import Profile

logger = logging.getLogger(__name__)

ADMIN_ROLE = 'admin'
USER_ROLE = 'user'

# ============================================================================
# Identity
# ============================================================================

@dataclass(frozen=True)
class Identity:
    """The authenticated caller: who they are and what they may do."""
    id: int
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == ADMIN_ROLE


def token_lifetime() -> timedelta:
    return timedelta(hours=settings.AUTH_TOKEN_LIFETIME_HOURS)


def generate_jwt_token(user: User) -> str:
    """
    Generate a signed token for an authenticated user.

    Args:
        user: Django User object

    Returns:
        JWT token string
    """
    now = datetime.now(timezone.utc)
    payload = {
        "user_id": user.id,
        "role": get_user_role(user),
        "exp": now + token_lifetime(),
        "iat": now,
    }
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.AUTH_TOKEN_ALGORITHM)


def get_user_role(user: User) -> str:
    profile, _ = Profile.objects.get_or_create(user=user)
    return profile.role


def resolve_token(token: str) -> Optional[Identity]:
    """
    Verify a bearer token and look up the caller.

    The role is read from the database rather than the token so that
    demoting an admin takes effect immediately.
    """
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.AUTH_TOKEN_ALGORITHM])
    except jwt.ExpiredSignatureError:
        logger.debug("Rejected expired token")
        return None
    except jwt.InvalidTokenError as e:
        logger.debug("Rejected invalid token: %s", e)
        return None

    user_id = payload.get("user_id")
    if not user_id:
        logger.debug("Token has no user_id claim")
        return None

    user = User.objects.filter(id=user_id, is_active=True).select_related('profile').first()
    if user is None:
        logger.debug("Token user %s does not exist or is inactive", user_id)
        return None

    try:
        role = user.profile.role
    except Profile.DoesNotExist:
        role = USER_ROLE
    return Identity(id=user.id, role=role)


def get_identity(request: HttpRequest) -> Optional[Identity]:
    """Return the caller behind the Authorization header, or None for anonymous requests."""
    header = request.headers.get("Authorization")
    if not header:
        return None

    parts = header.split(" ")
    if len(parts) != 2 or parts[0] != "Bearer" or not parts[1]:
        return None

    return resolve_token(parts[1])

# ============================================================================
# JWT Authentication Class
# ============================================================================

class JWTAuth(HttpBearer):
    """Bearer token authentication for routes that require a caller."""

    def authenticate(self, request: HttpRequest, token: str):
        return resolve_token(token)

# ============================================================================
# Permission checks
# ============================================================================

def check_admin_permissions(identity: Optional[Identity]) -> tuple[bool, str]:
    """
    Check if the caller may perform admin-only operations.

    Returns:
        Tuple of (has_permission, error_message)
    """
    if identity is None:
        return False, "Authentication required"
    if not identity.is_admin:
        return False, "Admin privileges required"
    return True, ""


def check_owner_or_admin(identity: Identity, owner_id: Optional[int]) -> tuple[bool, str]:
    """Check if the caller owns a row (or is an admin)."""
    if identity.is_admin or (owner_id is not None and owner_id == identity.id):
        return True, ""
    return False, "Access denied - you can only modify your own records"

# ============================================================================
# Shared Schemas
# ============================================================================

class ErrorSchema(Schema):
    """Standard error response schema."""
    message: str


class ValidationErrorSchema(Schema):
    """Field-keyed validation errors."""
    errors: dict[str, str]


class MessageSchema(Schema):
    message: str
