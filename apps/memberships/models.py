"""
Membership models - converted from the Prisma Membership and UserMembership entities.
"""

import uuid
from django.core.validators import MinValueValidator
from django.db import models
from apps.users.models import User


class MembershipStatus(models.TextChoices):
    ACTIVE = "ACTIVE", "Active"
    CANCELLED = "CANCELLED", "Cancelled"
    EXPIRED = "EXPIRED", "Expired"


class MembershipPlan(models.Model):
    """Purchasable membership plan. Reference data for the reconciler."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=100)
    description = models.TextField(null=True, blank=True)
    price = models.DecimalField(max_digits=10, decimal_places=2)
    duration_days = models.PositiveIntegerField(validators=[MinValueValidator(1)], db_column="duration")
    features = models.JSONField(default=list)
    active = models.BooleanField(default=True)
    order = models.IntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True, db_column="createdAt")
    updated_at = models.DateTimeField(auto_now=True, db_column="updatedAt")

    class Meta:
        db_table = "memberships"
        ordering = ["order", "price"]

    def __str__(self) -> str:
        return f"{self.name} ({self.duration_days} days)"


class UserMembership(models.Model):
    """A membership grant. Entitlement is status ACTIVE and end_date in the future."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name="memberships", db_column="userId")
    membership_plan = models.ForeignKey(
        MembershipPlan,
        on_delete=models.PROTECT,
        related_name="user_memberships",
        db_column="membershipId",
    )
    start_date = models.DateTimeField(db_column="startDate")
    end_date = models.DateTimeField(db_column="endDate")
    status = models.CharField(
        max_length=20, choices=MembershipStatus.choices, default=MembershipStatus.ACTIVE
    )
    created_at = models.DateTimeField(auto_now_add=True, db_column="createdAt")
    updated_at = models.DateTimeField(auto_now=True, db_column="updatedAt")

    class Meta:
        db_table = "user_memberships"
        ordering = ["-end_date"]
        indexes = [
            models.Index(fields=["user", "membership_plan", "status"], name="user_membership_lookup"),
        ]

    def __str__(self) -> str:
        return f"{self.user_id} - {self.membership_plan_id} - {self.status} until {self.end_date:%Y-%m-%d}"
