"""
Identity API endpoints with JWT authentication.

Provides registration, login and the current-user profile. Clients send the
issued token as ``Authorization: Bearer <token>``.
"""
from typing import Optional
from ninja import Router
from django.http import HttpRequest
from ninja.errors import HttpError

from .models import User
from .dtos import AuthResponse, LoginIn, RegisterIn, UserOut
from .services import authenticate_user, get_active_user, register_user, to_user_dto
from .jwt_auth import create_access_token, get_bearer_token, get_user_id_from_token

router = Router(tags=["Identity"])


# =============================================================================
# Helper Functions
# =============================================================================

def get_current_user(request: HttpRequest) -> Optional[User]:
    """
    Extract and validate user from the bearer token.

    The user is re-read from the database on every call, so organization and
    role always reflect the stored record rather than the token's claims.
    """
    token = get_bearer_token(request.headers.get('Authorization'))
    if not token:
        return None

    user_id = get_user_id_from_token(token)
    if not user_id:
        return None

    return get_active_user(user_id)


def require_auth(request: HttpRequest) -> User:
    """
    Require authentication. Raises 401 if not authenticated.
    """
    user = get_current_user(request)
    if not user:
        raise HttpError(401, "Authentication required")
    return user


def _auth_response(user: User, message: str) -> dict:
    return {
        "message": message,
        "token": create_access_token(user.id, user.org_id),
        "user": to_user_dto(user),
    }


# =============================================================================
# Auth Endpoints
# =============================================================================

@router.post("/register", response={201: AuthResponse}, auth=None)
def register(request: HttpRequest, payload: RegisterIn):
    """
    Create an account with no organization and return a bearer token.
    """
    user = register_user(payload)
    return 201, _auth_response(user, "User registered successfully")


@router.post("/login", response=AuthResponse, auth=None)
def login(request: HttpRequest, payload: LoginIn):
    """
    Exchange email and password for a bearer token.
    """
    user = authenticate_user(request, payload.email, payload.password)
    return _auth_response(user, "Logged in successfully")


@router.get("/me", response=UserOut, auth=None)
def get_me(request: HttpRequest):
    """
    Get current authenticated user's profile.
    """
    user = require_auth(request)
    return to_user_dto(user)
