"""
Musical Tracker User Management API Module

Accounts, login and bearer tokens.

Public API Overview:
==================

Base URL: /v2/user

Public Endpoints:
- POST /user                     - Register a new account
- POST /user/login               - Exchange email and password for a token

Protected Endpoints (JWT Token Required):
- POST   /user/refresh-token     - Get a fresh token
- GET    /user/me                - Own account
- PUT    /user/me                - Update own account (role cannot be changed)
- DELETE /user/me                - Delete own account

Admin Endpoints:
- GET    /user                   - List accounts (filters: search, role)
- GET    /user/{id}              - Get any account
- PUT    /user/{id}              - Update any account, including its role
- DELETE /user/{id}              - Delete any account

Account Rules:
=============

- firstName and lastName: at least 3 characters
- email: valid address, unique regardless of case; also used as the username
- password: at least 8 characters, stored hashed by Django
"""

import logging
from datetime import datetime
from typing import Optional

from django.contrib.auth.models import User
from django.db import IntegrityError, transaction
from django.db.models import Q
from django.utils import timezone
from ninja import Schema

from tracker.models import Profile
from musical_tracker.validator import Validator, is_blank, is_email
from .auth import (
    ADMIN_ROLE, USER_ROLE, JWTAuth, ErrorSchema, MessageSchema, ValidationErrorSchema, check_admin_permissions,
    generate_jwt_token, get_user_role,
)
from .core import (
    DEFAULT_PAGE_LIMIT, PaginationSchema, check_max_length, check_pagination, nothing_to_update, paginate,
    validation_failed,
)

logger = logging.getLogger(__name__)

ROLES = (USER_ROLE, ADMIN_ROLE)
MIN_NAME_LENGTH = 3
MIN_PASSWORD_LENGTH = 8
MAX_NAME_LENGTH = User._meta.get_field('first_name').max_length
# The lowercased email doubles as the username
MAX_EMAIL_LENGTH = User._meta.get_field('username').max_length

# ============================================================================
# Schemas
# ============================================================================

class UserSchema(Schema):
    """Account data returned to clients. Never includes the password."""
    id: int
    firstName: str
    lastName: str
    email: str
    role: str
    isActive: bool
    dateJoined: datetime
    lastLogin: Optional[datetime] = None


class UserListSchema(Schema):
    data: list[UserSchema]
    pagination: PaginationSchema


class RegisterSchema(Schema):
    firstName: Optional[str] = None
    lastName: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None


class UserUpdateSchema(Schema):
    firstName: Optional[str] = None
    lastName: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    role: Optional[str] = None


class LoginSchema(Schema):
    email: Optional[str] = None
    password: Optional[str] = None


class TokenSchema(Schema):
    token: str
    user: UserSchema

# ============================================================================
# Utility Functions
# ============================================================================

def create_user_response(user: User) -> dict:
    return {
        "id": user.id,
        "firstName": user.first_name,
        "lastName": user.last_name,
        "email": user.email,
        "role": get_user_role(user),
        "isActive": user.is_active,
        "dateJoined": user.date_joined,
        "lastLogin": user.last_login,
    }


def email_taken(email: str, exclude_id: int = None) -> bool:
    users = User.objects.filter(email__iexact=email)
    if exclude_id is not None:
        users = users.exclude(id=exclude_id)
    return users.exists()


def validate_account(validator: Validator, data: dict, creating: bool) -> None:
    """Name, email and password rules shared by registration and updates."""
    for key in ("firstName", "lastName"):
        if creating or key in data:
            value = data.get(key)
            validator.check(not is_blank(value), key, "is required")
            if not is_blank(value):
                validator.check(len(value.strip()) >= MIN_NAME_LENGTH, key,
                                f"must be at least {MIN_NAME_LENGTH} characters")
                check_max_length(validator, {key: value.strip()}, key, MAX_NAME_LENGTH)

    if creating or "email" in data:
        validator.check(not is_blank(data.get("email")), "email", "is required")
        if not is_blank(data.get("email")):
            validator.check(is_email(data["email"].strip()), "email", "must be a valid email address")
            check_max_length(validator, {"email": data["email"].strip()}, "email", MAX_EMAIL_LENGTH)

    if creating or "password" in data:
        validator.check(not is_blank(data.get("password")), "password", "is required")
        if data.get("password"):
            validator.check(len(data["password"]) >= MIN_PASSWORD_LENGTH, "password",
                            f"must be at least {MIN_PASSWORD_LENGTH} characters")


def apply_account_changes(user: User, data: dict) -> None:
    if "firstName" in data:
        user.first_name = data["firstName"].strip()
    if "lastName" in data:
        user.last_name = data["lastName"].strip()
    if "email" in data:
        user.email = data["email"].strip()
        user.username = user.email.lower()
    if "password" in data:
        user.set_password(data["password"])


def update_account(user: User, data: dict, allow_role_change: bool):
    """
    Validate and apply an update body to an account.

    Returns the ``(status, body)`` pair the endpoint should answer with.
    """
    if not data:
        return nothing_to_update()

    if data.get("role") is not None and not allow_role_change:
        return 403, {"message": "Only admins can change account roles"}

    validator = Validator()
    validate_account(validator, data, creating=False)
    if "role" in data:
        validator.check(data["role"] in ROLES, "role", f"must be one of: {', '.join(ROLES)}")
    if not validator.valid:
        return validation_failed(validator)

    if "email" in data and email_taken(data["email"].strip(), exclude_id=user.id):
        return 409, {"message": "A user with this email already exists"}

    try:
        with transaction.atomic():
            apply_account_changes(user, data)
            user.save()
            if data.get("role"):
                Profile.objects.update_or_create(user=user, defaults={"role": data["role"]})
    except IntegrityError:
        user.refresh_from_db()
        return 409, {"message": "A user with this email already exists"}

    return 200, create_user_response(user)

# ============================================================================
# API Endpoints
# ============================================================================

def register_user_endpoints(api):
    """Register all account endpoints with the API router."""

    @api.post("/user", response={201: UserSchema, 400: ValidationErrorSchema, 409: ErrorSchema})
    def register_user(request, payload: RegisterSchema):
        """
        Register a new account.

        New accounts always get the plain user role.

        Returns:
            201: Account created
            400: Field validation failed
            409: Email already registered
        """
        data = payload.dict(exclude_unset=True)
        validator = Validator()
        validate_account(validator, data, creating=True)
        if not validator.valid:
            return validation_failed(validator)

        email = data["email"].strip()
        if email_taken(email):
            return 409, {"message": "A user with this email already exists"}

        # Stored exactly as sent; create_user() would lowercase the domain
        user = User(
            username=email.lower(),
            email=email,
            first_name=data["firstName"].strip(),
            last_name=data["lastName"].strip(),
        )
        user.set_password(data["password"])
        try:
            with transaction.atomic():
                user.save()
        except IntegrityError:
            logger.info("Concurrent registration for %s", email)
            return 409, {"message": "A user with this email already exists"}

        logger.info("Registered user %s", user.id)
        return 201, create_user_response(user)

    @api.post("/user/login", response={200: TokenSchema, 400: ValidationErrorSchema, 401: ErrorSchema})
    def login(request, payload: LoginSchema):
        """
        User login endpoint.

        Authenticates the credentials and returns a bearer token. The reply
        does not reveal whether the email or the password was wrong.

        Returns:
            200: Login successful with token and user info
            400: Missing email or password
            401: Authentication failed
        """
        validator = Validator()
        validator.check(not is_blank(payload.email), "email", "is required")
        validator.check(not is_blank(payload.password), "password", "is required")
        if not validator.valid:
            return validation_failed(validator)

        user = User.objects.filter(email__iexact=payload.email.strip()).first()
        if user is None or not user.is_active or not user.check_password(payload.password):
            logger.info("Failed login attempt for %s", payload.email)
            return 401, {"message": "Invalid email or password"}

        user.last_login = timezone.now()
        user.save(update_fields=['last_login'])

        token = generate_jwt_token(user)
        logger.info("User %s logged in", user.id)
        return 200, {"token": token, "user": create_user_response(user)}

    @api.post("/user/refresh-token", auth=JWTAuth(), response={200: TokenSchema, 401: ErrorSchema})
    def refresh_token(request):
        """Issue a new token for the caller, resetting the expiry window."""
        user = User.objects.get(id=request.auth.id)
        return 200, {"token": generate_jwt_token(user), "user": create_user_response(user)}

    @api.get("/user/me", auth=JWTAuth(), response={200: UserSchema, 401: ErrorSchema})
    def get_me(request):
        return 200, create_user_response(User.objects.get(id=request.auth.id))

    @api.put("/user/me", auth=JWTAuth(),
             response={200: UserSchema, 400: ValidationErrorSchema, 401: ErrorSchema, 403: ErrorSchema,
                       409: ErrorSchema})
    def update_me(request, payload: UserUpdateSchema):
        user = User.objects.get(id=request.auth.id)
        return update_account(user, payload.dict(exclude_unset=True), allow_role_change=request.auth.is_admin)

    @api.delete("/user/me", auth=JWTAuth(), response={200: MessageSchema, 401: ErrorSchema})
    def delete_me(request):
        User.objects.filter(id=request.auth.id).delete()
        logger.info("User %s deleted their account", request.auth.id)
        return 200, {"message": "Account deleted successfully"}

    @api.get("/user", auth=JWTAuth(),
             response={200: UserListSchema, 400: ValidationErrorSchema, 401: ErrorSchema, 403: ErrorSchema})
    def list_users(request, page: int = 1, limit: int = DEFAULT_PAGE_LIMIT, search: str = None, role: str = None):
        """
        List all accounts (admin only).

        ``search`` matches first name, last name or email.
        """
        has_permission, error_message = check_admin_permissions(request.auth)
        if not has_permission:
            return 403, {"message": error_message}

        validator = Validator()
        check_pagination(validator, page, limit)
        if role is not None:
            validator.check(role in ROLES, "role", f"must be one of: {', '.join(ROLES)}")
        if not validator.valid:
            return validation_failed(validator)

        users = User.objects.select_related('profile')
        if search:
            users = users.filter(
                Q(first_name__icontains=search) | Q(last_name__icontains=search) | Q(email__icontains=search)
            )
        if role == ADMIN_ROLE:
            users = users.filter(profile__role=ADMIN_ROLE)
        elif role == USER_ROLE:
            users = users.exclude(profile__role=ADMIN_ROLE)

        return 200, paginate(users, page, limit, create_user_response)

    @api.get("/user/{user_id}", auth=JWTAuth(), response={200: UserSchema, 401: ErrorSchema, 403: ErrorSchema,
                                                          404: ErrorSchema})
    def get_user(request, user_id: int):
        has_permission, error_message = check_admin_permissions(request.auth)
        if not has_permission:
            return 403, {"message": error_message}

        try:
            return 200, create_user_response(User.objects.get(id=user_id))
        except User.DoesNotExist:
            return 404, {"message": "User not found"}

    @api.put("/user/{user_id}", auth=JWTAuth(),
             response={200: UserSchema, 400: ValidationErrorSchema, 401: ErrorSchema, 403: ErrorSchema,
                       404: ErrorSchema, 409: ErrorSchema})
    def update_user(request, user_id: int, payload: UserUpdateSchema):
        has_permission, error_message = check_admin_permissions(request.auth)
        if not has_permission:
            return 403, {"message": error_message}

        try:
            user = User.objects.get(id=user_id)
        except User.DoesNotExist:
            return 404, {"message": "User not found"}

        status, body = update_account(user, payload.dict(exclude_unset=True), allow_role_change=True)
        if status == 200:
            logger.info("User %s updated by admin %s", user_id, request.auth.id)
        return status, body

    @api.delete("/user/{user_id}", auth=JWTAuth(),
                response={200: MessageSchema, 401: ErrorSchema, 403: ErrorSchema, 404: ErrorSchema})
    def delete_user(request, user_id: int):
        has_permission, error_message = check_admin_permissions(request.auth)
        if not has_permission:
            return 403, {"message": error_message}

        deleted, _ = User.objects.filter(id=user_id).delete()
        if not deleted:
            return 404, {"message": "User not found"}

        logger.info("User %s deleted by admin %s", user_id, request.auth.id)
        return 200, {"message": "User deleted successfully"}
