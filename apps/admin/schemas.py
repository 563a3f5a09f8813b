"""
Admin schemas for API.
"""

from datetime import datetime
from uuid import UUID
from ninja import Schema
from pydantic import Field, ConfigDict

from apps.billing.schemas import PaymentOut
from apps.memberships.schemas import PlanOut, UserMembershipOut


class UserBriefOut(Schema):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    email: str
    name: str | None = None


class AdminPaymentOut(PaymentOut):
    user: UserBriefOut


class PaginationOut(Schema):
    """Pagination info for list responses."""

    total: int
    limit: int
    offset: int
    hasMore: bool


class RevenueStatsOut(Schema):
    totalRevenue: float
    completedPayments: int


class PaymentsListOut(Schema):
    payments: list[AdminPaymentOut]
    pagination: PaginationOut
    stats: RevenueStatsOut


class AdminPlanOut(PlanOut):
    userMembershipCount: int = 0
    paymentCount: int = 0
    createdAt: datetime = Field(validation_alias="created_at")


class PlanCreateIn(Schema):
    name: str
    description: str | None = None
    price: float = Field(gt=0)
    duration: int = Field(gt=0)
    features: list[str] = []
    active: bool = True
    order: int = 0


class SeedOut(Schema):
    created: bool
    plans: list[PlanOut]


class AdminUserMembershipOut(UserMembershipOut):
    user: UserBriefOut


class GrantMembershipIn(Schema):
    userId: UUID
    membershipId: UUID


class ExtendMembershipIn(Schema):
    userMembershipId: UUID
    days: int


class CancelMembershipIn(Schema):
    userMembershipId: UUID


class MembershipActionOut(Schema):
    success: bool
    message: str
    userMembership: UserMembershipOut
