"""
Membership schemas for API.
"""

from datetime import datetime
from uuid import UUID
from ninja import Schema
from pydantic import Field, ConfigDict

from apps.billing.schemas import PaymentOut


class PlanOut(Schema):
    """Membership plan output - camelCase for frontend."""

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: UUID
    name: str
    description: str | None = None
    price: float
    duration: int = Field(validation_alias="duration_days")
    features: list[str] = []
    active: bool
    order: int = 0


class UserMembershipOut(Schema):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: UUID
    userId: UUID = Field(validation_alias="user_id")
    membershipId: UUID = Field(validation_alias="membership_plan_id")
    startDate: datetime = Field(validation_alias="start_date")
    endDate: datetime = Field(validation_alias="end_date")
    status: str
    membership: PlanOut | None = Field(validation_alias="membership_plan", default=None)


class MyMembershipOut(Schema):
    hasMembership: bool
    memberships: list[UserMembershipOut]
    payments: list[PaymentOut]


class AccessOut(Schema):
    isMember: bool
    planIds: list[str]
