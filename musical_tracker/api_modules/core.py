"""
Core API utilities and basic endpoints.
Contains health checks, the navigation/permissions endpoint and the
pagination helpers shared by every list endpoint.
"""

import math
from datetime import datetime, timezone
from typing import Callable, Optional

from django.contrib.auth.models import User
from django.db.models import QuerySet
from ninja import Schema

from musical_tracker.navigation import NavigationState, Section, available_sections
from musical_tracker.validator import Validator, is_blank
from .auth import get_identity

DEFAULT_PAGE_LIMIT = 20
MAX_PAGE_LIMIT = 100

SERVER_ERROR = "The server encountered a problem and could not process your request"

# ============================================================================
# Schemas
# ============================================================================

class PaginationSchema(Schema):
    page: int
    limit: int
    total: int
    totalPages: int


class HealthSchema(Schema):
    status: str
    timestamp: str


class PermissionsSchema(Schema):
    """What the client may show for the current caller."""
    authenticated: bool
    user_id: Optional[int] = None
    role: Optional[str] = None
    permissions: dict
    sections: list[str]
    active_section: str

# ============================================================================
# Pagination
# ============================================================================

def check_pagination(validator: Validator, page: int, limit: int) -> None:
    validator.check(page >= 1, "page", "must be at least 1")
    validator.check(1 <= limit <= MAX_PAGE_LIMIT, "limit", f"must be between 1 and {MAX_PAGE_LIMIT}")


def paginate(queryset: QuerySet, page: int, limit: int, serialize: Callable) -> dict:
    """
    Slice a queryset into one page.

    Rows are ordered by primary key so consecutive pages never overlap or skip rows.
    Pages past the end are answered without querying, so any page number is safe.
    """
    total = queryset.count()
    total_pages = math.ceil(total / limit) if total else 0
    offset = (page - 1) * limit
    rows = queryset.order_by('id')[offset:offset + limit] if offset < total else []

    return {
        "data": [serialize(row) for row in rows],
        "pagination": {
            "page": page,
            "limit": limit,
            "total": total,
            "totalPages": total_pages,
        },
    }


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()

# ============================================================================
# Field checks shared by create and update handlers
# ============================================================================

def check_required(validator: Validator, data: dict, key: str, creating: bool) -> None:
    """
    Required fields must be present on create and may not be blanked on update.
    """
    if creating or key in data:
        validator.check(not is_blank(data.get(key)), key, "is required")


def check_max_length(validator: Validator, data: dict, key: str, max_length: int) -> None:
    value = data.get(key)
    if isinstance(value, str):
        validator.check(len(value) <= max_length, key, f"must be at most {max_length} characters")


def lookup_reference(validator: Validator, model, data: dict, key: str):
    """
    Resolve a foreign-key id from the payload.

    Records ``<key>: does not exist`` and returns None when the row is missing.
    Returns None silently when the key was not sent or is null.
    """
    pk = data.get(key)
    if pk is None:
        return None
    instance = model.objects.filter(id=pk).first()
    validator.check(instance is not None, key, "does not exist")
    return instance


def validation_failed(validator: Validator):
    return 400, {"errors": validator.errors}


def nothing_to_update():
    return 400, {"errors": {"body": "at least one field is required"}}

# ============================================================================
# Basic API Endpoints
# ============================================================================

def register_core_endpoints(api):
    """Register core/basic API endpoints."""

    @api.get("/", response=dict)
    def index(request):
        return {
            "status": "ok",
            "message": "Musical Tracker API",
            "version": api.version,
            "timestamp": now_iso(),
        }

    @api.get("/health", response=HealthSchema)
    def health(request):
        """Liveness probe for load balancers."""
        return {"status": "healthy", "timestamp": now_iso()}

    @api.get("/permissions", response=PermissionsSchema)
    def get_permissions(request, section: str = Section.HOME.value):
        """
        Get navigation permissions for the caller.

        Anonymous callers are allowed; the answer then only lists public
        sections. The ``section`` parameter reports what the client would
        land on when trying to open that section.

        Returns:
            200: Permission flags, allowed sections and resolved active section
        """
        identity = get_identity(request)
        state = NavigationState(identity)
        try:
            active = state.activate(section)
        except ValueError:
            active = state.activate(Section.HOME)

        user = User.objects.filter(id=identity.id).first() if identity else None
        is_admin = bool(identity and identity.is_admin)

        return {
            "authenticated": identity is not None,
            "user_id": identity.id if identity else None,
            "role": identity.role if identity else None,
            "permissions": {
                "can_submit": identity is not None,
                "can_moderate": is_admin,
                "can_manage_users": is_admin,
                "can_access_admin_panel": is_admin or bool(user and user.is_staff),
            },
            "sections": [s.value for s in available_sections(identity)],
            "active_section": active.value,
        }
