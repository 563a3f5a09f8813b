"""
Admin API endpoints - payments and memberships.
"""

import logging
from uuid import UUID

from django.db.models import Count, Sum
from django.http import HttpRequest
from ninja import Router
from ninja.errors import HttpError

from utils.auth import AuthBearer, require_admin
from apps.users.models import User
from apps.billing.ledger import PaymentLedger, normalize_status
from apps.billing.models import Payment, PaymentStatus
from apps.billing.schemas import PaymentOut
from apps.memberships.catalog import DatabasePlanCatalog
from apps.memberships.models import MembershipPlan, UserMembership
from apps.memberships.schemas import PlanOut, UserMembershipOut
from apps.memberships.seed import seed_membership_plans
from apps.memberships.store import MembershipStore
from .schemas import (
    AdminPaymentOut,
    AdminPlanOut,
    AdminUserMembershipOut,
    CancelMembershipIn,
    ExtendMembershipIn,
    GrantMembershipIn,
    MembershipActionOut,
    PaginationOut,
    PaymentsListOut,
    PlanCreateIn,
    RevenueStatsOut,
    SeedOut,
)

logger = logging.getLogger(__name__)

router = Router(auth=AuthBearer())


@router.get("/payments", response=PaymentsListOut)
def list_payments(
    request: HttpRequest,
    status: str | None = None,
    userId: UUID | None = None,
    limit: int = 10,
    offset: int = 0,
):
    """Payment history with revenue stats (admin only)."""
    require_admin(request)

    queryset = Payment.objects.select_related("user")
    if userId:
        queryset = queryset.filter(user_id=userId)

    stats = queryset.filter(status=PaymentStatus.COMPLETED).aggregate(
        total=Sum("amount"),
        count=Count("id"),
    )

    if status and status.upper() != "ALL":
        queryset = queryset.filter(status=normalize_status(status))

    total = queryset.count()
    payments = list(queryset.order_by("-created_at")[offset : offset + limit])

    return PaymentsListOut(
        payments=[AdminPaymentOut.from_orm(p) for p in payments],
        pagination=PaginationOut(
            total=total,
            limit=limit,
            offset=offset,
            hasMore=offset + limit < total,
        ),
        stats=RevenueStatsOut(
            totalRevenue=float(stats["total"] or 0),
            completedPayments=stats["count"] or 0,
        ),
    )


@router.post("/payments/{transaction_id}/refund", response=PaymentOut)
def refund_payment(request: HttpRequest, transaction_id: str):
    """Mark a completed payment as refunded (admin only)."""
    admin = require_admin(request)
    payment = PaymentLedger().refund(transaction_id, payload={"refundedBy": str(admin.id)})
    logger.info(f"[Admin] {admin.email} refunded {transaction_id}")
    return PaymentOut.from_orm(payment)


@router.get("/memberships", response=list[AdminPlanOut])
def list_plans(request: HttpRequest):
    """All plans, active or not, with usage counts (admin only)."""
    require_admin(request)

    plans = MembershipPlan.objects.annotate(
        user_membership_count=Count("user_memberships", distinct=True),
        payment_count=Count("payments", distinct=True),
    ).order_by("order", "-created_at")

    return [
        AdminPlanOut(
            **PlanOut.from_orm(p).model_dump(),
            userMembershipCount=p.user_membership_count,
            paymentCount=p.payment_count,
            createdAt=p.created_at,
        )
        for p in plans
    ]


@router.post("/memberships", response={201: PlanOut})
def create_plan(request: HttpRequest, data: PlanCreateIn):
    """Create a membership plan (admin only)."""
    require_admin(request)

    plan = MembershipPlan.objects.create(
        name=data.name,
        description=data.description,
        price=data.price,
        duration_days=data.duration,
        features=data.features,
        active=data.active,
        order=data.order,
    )
    return 201, PlanOut.from_orm(plan)


@router.post("/memberships/seed", response=SeedOut)
def seed_plans(request: HttpRequest):
    """Insert the default plans when none exist (admin only)."""
    require_admin(request)
    plans, created = seed_membership_plans()
    return SeedOut(created=created, plans=[PlanOut.from_orm(p) for p in plans])


@router.get("/user-memberships", response=list[AdminUserMembershipOut])
def list_user_memberships(
    request: HttpRequest,
    status: str | None = None,
    limit: int = 50,
    offset: int = 0,
):
    """List membership grants (admin only)."""
    require_admin(request)

    queryset = UserMembership.objects.select_related("user", "membership_plan")
    if status and status.upper() != "ALL":
        queryset = queryset.filter(status=status.upper())

    memberships = queryset.order_by("-created_at")[offset : offset + limit]
    return [AdminUserMembershipOut.from_orm(m) for m in memberships]


@router.post("/grant-membership", response=MembershipActionOut)
def grant_membership(request: HttpRequest, data: GrantMembershipIn):
    """Grant a plan to a user without a payment (admin only)."""
    require_admin(request)

    user = User.objects.filter(id=data.userId).first()
    if not user:
        raise HttpError(404, "User not found")

    plan = DatabasePlanCatalog().get(data.membershipId)
    if plan is None:
        raise HttpError(404, "Membership not found")

    membership = MembershipStore().grant(user.id, plan)
    return MembershipActionOut(
        success=True,
        message=f"Successfully granted {plan.name} to {user.email}",
        userMembership=UserMembershipOut.from_orm(membership),
    )


@router.post("/extend-membership", response=MembershipActionOut)
def extend_membership(request: HttpRequest, data: ExtendMembershipIn):
    """Extend a membership by a number of days (admin only)."""
    require_admin(request)

    store = MembershipStore()
    membership = store.extend(data.userMembershipId, data.days)
    membership = store.get(membership.id)
    return MembershipActionOut(
        success=True,
        message=(
            f"Successfully extended {membership.membership_plan.name} for {membership.user.email} "
            f"by {data.days} days. New expiry: {membership.end_date:%Y-%m-%d}"
        ),
        userMembership=UserMembershipOut.from_orm(membership),
    )


@router.post("/cancel-membership", response=MembershipActionOut)
def cancel_membership(request: HttpRequest, data: CancelMembershipIn):
    """Cancel a membership (admin only)."""
    require_admin(request)

    store = MembershipStore()
    store.cancel(data.userMembershipId)
    membership = store.get(data.userMembershipId)
    return MembershipActionOut(
        success=True,
        message=f"Successfully cancelled {membership.membership_plan.name} for {membership.user.email}",
        userMembership=UserMembershipOut.from_orm(membership),
    )
