"""
Payment model - converted from the Prisma Payment entity.
"""

import uuid
from django.conf import settings
from django.db import models
from apps.users.models import User
from apps.memberships.models import MembershipPlan


class PaymentStatus(models.TextChoices):
    PENDING = "PENDING", "Pending"
    COMPLETED = "COMPLETED", "Completed"
    FAILED = "FAILED", "Failed"
    CANCELLED = "CANCELLED", "Cancelled"
    REFUNDED = "REFUNDED", "Refunded"


class PaymentMethod(models.TextChoices):
    ALIPAY = "ALIPAY", "Alipay"
    WECHAT = "WECHAT", "WeChat Pay"
    VISA = "VISA", "Visa"
    MASTERCARD = "MASTERCARD", "Mastercard"
    PAYPAL = "PAYPAL", "PayPal"


def default_currency() -> str:
    return settings.PAYMENT_DEFAULT_CURRENCY


class Payment(models.Model):
    """One purchase attempt, keyed by the transaction id echoed back by the gateway."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    transaction_id = models.CharField(max_length=64, unique=True, db_column="transactionId")
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name="payments", db_column="userId")
    membership_plan = models.ForeignKey(
        MembershipPlan,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="payments",
        db_column="membershipId",
    )
    amount = models.DecimalField(max_digits=10, decimal_places=2)
    currency = models.CharField(max_length=3, default=default_currency)
    method = models.CharField(max_length=20, choices=PaymentMethod.choices)
    status = models.CharField(
        max_length=20, choices=PaymentStatus.choices, default=PaymentStatus.PENDING
    )
    # Raw gateway payload, kept for audit only
    payment_data = models.JSONField(null=True, blank=True, db_column="paymentData")
    created_at = models.DateTimeField(auto_now_add=True, db_column="createdAt")
    updated_at = models.DateTimeField(auto_now=True, db_column="updatedAt")

    class Meta:
        db_table = "payments"
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return f"{self.transaction_id} - {self.amount} {self.currency} - {self.status}"
