"""
Route guard for member-only endpoints.
"""

from django.http import HttpRequest
from ninja.errors import HttpError

from utils.auth import get_current_user
from .entitlement import Entitlement, is_active_member


def require_membership(request: HttpRequest, plan_id=None) -> Entitlement:
    """Require an active membership, optionally under a specific plan."""
    user = get_current_user(request)
    entitlement = is_active_member(user.id)
    if not entitlement.is_member:
        raise HttpError(403, "Membership required")
    if plan_id is not None and not entitlement.covers(plan_id):
        raise HttpError(403, "This content requires a different membership plan")
    return entitlement
