"""
JWT bearer authentication - supplies the current user to the API.
"""

from datetime import datetime, timedelta, timezone
from typing import Any

import jwt
from django.conf import settings
from django.http import HttpRequest
from ninja.errors import HttpError
from ninja.security import HttpBearer

from apps.users.models import User, UserRole


class AuthBearer(HttpBearer):
    """JWT Bearer token authentication."""

    def authenticate(self, request: HttpRequest, token: str) -> User | None:
        payload = verify_token(token)
        if not payload:
            return None

        user_id = payload.get("userId")
        if not user_id:
            return None

        user = User.objects.filter(id=user_id, is_active=True).first()
        if user:
            request.auth_user = user
        return user


def get_current_user(request: HttpRequest) -> User:
    """Get authenticated user from request."""
    return getattr(request, "auth_user", request.auth)


def require_admin(request: HttpRequest) -> User:
    """Require admin role."""
    user = get_current_user(request)
    if user.role != UserRole.ADMIN:
        raise HttpError(403, "Admin access required")
    return user


def create_token(user: User) -> str:
    """Create JWT token for user."""
    now = datetime.now(timezone.utc)
    payload = {
        "userId": str(user.id),
        "email": user.email,
        "role": user.role,
        "exp": now + timedelta(hours=settings.JWT_EXPIRE_HOURS),
        "iat": now,
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def verify_token(token: str) -> dict[str, Any] | None:
    """Verify JWT token and return payload."""
    try:
        return jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM],
        )
    except jwt.InvalidTokenError:
        return None
