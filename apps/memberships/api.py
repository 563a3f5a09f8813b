"""
Membership API endpoints - converted from the membership routes.
"""

from uuid import UUID

from django.http import HttpRequest
from ninja import Router

from utils.auth import AuthBearer, get_current_user
from apps.billing.ledger import PaymentLedger
from apps.billing.schemas import PaymentOut
from .entitlement import is_active_member
from .guards import require_membership
from .models import MembershipPlan
from .schemas import AccessOut, MyMembershipOut, PlanOut, UserMembershipOut

router = Router()


@router.get("/plans", response=list[PlanOut])
def list_plans(request: HttpRequest):
    """Get active membership plans."""
    plans = MembershipPlan.objects.filter(active=True).order_by("order", "price")
    return [PlanOut.from_orm(p) for p in plans]


@router.get("/me", response=MyMembershipOut, auth=AuthBearer())
def my_membership(request: HttpRequest):
    """Get the current user's active memberships and recent payments."""
    user = get_current_user(request)
    entitlement = is_active_member(user.id)
    payments = PaymentLedger().history(user, limit=10)

    return MyMembershipOut(
        hasMembership=entitlement.is_member,
        memberships=[UserMembershipOut.from_orm(m) for m in entitlement.memberships],
        payments=[PaymentOut.from_orm(p) for p in payments],
    )


@router.get("/access", response=AccessOut, auth=AuthBearer())
def check_access(request: HttpRequest, planId: UUID | None = None):
    """Gate for member-only content. 403 when the user is not entitled."""
    entitlement = require_membership(request, plan_id=planId)
    return AccessOut(isMember=entitlement.is_member, planIds=entitlement.plan_ids)
