"""
Billing schemas for API.
"""

from datetime import datetime
from uuid import UUID
from typing import Any
from ninja import Schema
from pydantic import Field, ConfigDict


class PaymentOut(Schema):
    """Payment output - camelCase for frontend."""

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: UUID
    transactionId: str = Field(validation_alias="transaction_id")
    userId: UUID = Field(validation_alias="user_id")
    membershipId: UUID | None = Field(validation_alias="membership_plan_id", default=None)
    amount: float
    currency: str
    method: str
    status: str
    paymentData: Any = Field(validation_alias="payment_data", default=None)
    createdAt: datetime = Field(validation_alias="created_at")
    updatedAt: datetime = Field(validation_alias="updated_at")


class CreatePaymentIn(Schema):
    membershipId: UUID | None = None
    paymentMethod: str
    amount: float | None = None
    currency: str | None = None


class CreatePaymentOut(Schema):
    paymentId: UUID
    transactionId: str
    amount: float
    currency: str
    method: str
    paymentUrl: str


class CallbackIn(Schema):
    """Gateway notification. Fields are optional so missing ones surface as 400."""

    transactionId: str | None = None
    status: str | None = None
    paymentData: Any = None


class CallbackOut(Schema):
    success: bool
    payment: PaymentOut
    message: str | None = None
    anomaly: bool = False


class PaymentResultOut(Schema):
    """What the human-facing result page should show."""

    outcome: str
    retryable: bool
    message: str
    payment: PaymentOut | None = None
