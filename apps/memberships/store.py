"""
Membership store - the only writer of UserMembership rows.
"""

import logging
from datetime import datetime, timedelta, timezone

from django.db import transaction

from apps.users.models import User
from utils.errors import MembershipNotFound, ValidationError
from .catalog import PlanSnapshot
from .models import MembershipStatus, UserMembership

logger = logging.getLogger(__name__)

MAX_EXTENSION_DAYS = 365


class MembershipStore:
    def active_for_plan(self, user_id, plan_id, now: datetime, for_update: bool = False):
        """Latest ACTIVE, unexpired membership of the user under the plan."""
        queryset = UserMembership.objects.filter(
            user_id=user_id,
            membership_plan_id=plan_id,
            status=MembershipStatus.ACTIVE,
            end_date__gt=now,
        ).order_by("-end_date")
        if for_update:
            queryset = queryset.select_for_update()
        return queryset.first()

    def grant_or_extend(
        self, user_id, plan: PlanSnapshot, now: datetime
    ) -> tuple[UserMembership, bool]:
        """
        Grant the plan to the user, or extend the grant they already hold.

        An active grant is extended from its current end date so remaining
        time is kept. Must run inside the caller's transaction; the user row
        lock serializes concurrent grants for the same user.
        """
        _lock_user(user_id)

        existing = self.active_for_plan(user_id, plan.id, now, for_update=True)
        if existing is None:
            membership = UserMembership.objects.create(
                user_id=user_id,
                membership_plan_id=plan.id,
                start_date=now,
                end_date=now + timedelta(days=plan.duration_days),
                status=MembershipStatus.ACTIVE,
            )
            logger.info(
                f"[Membership] Granted {plan.name} to user {user_id} until {membership.end_date.isoformat()}"
            )
            return membership, True

        existing.end_date = existing.end_date + timedelta(days=plan.duration_days)
        existing.save(update_fields=["end_date", "updated_at"])
        logger.info(
            f"[Membership] Extended {existing.id} for user {user_id} to {existing.end_date.isoformat()}"
        )
        return existing, False

    def get(self, membership_id) -> UserMembership:
        try:
            return UserMembership.objects.select_related("membership_plan", "user").get(id=membership_id)
        except UserMembership.DoesNotExist:
            raise MembershipNotFound(membership_id)

    def grant(self, user_id, plan: PlanSnapshot, now: datetime | None = None) -> UserMembership:
        """Administrative grant. Refuses to stack a second active grant for the same plan."""
        now = now or datetime.now(timezone.utc)
        with transaction.atomic():
            _lock_user(user_id)
            if self.active_for_plan(user_id, plan.id, now, for_update=True):
                raise ValidationError("User already has an active membership for this plan")
            membership = UserMembership.objects.create(
                user_id=user_id,
                membership_plan_id=plan.id,
                start_date=now,
                end_date=now + timedelta(days=plan.duration_days),
                status=MembershipStatus.ACTIVE,
            )
        logger.info(f"[Membership] Admin granted {plan.name} to user {user_id}")
        return membership

    def extend(self, membership_id, days: int) -> UserMembership:
        if days <= 0 or days > MAX_EXTENSION_DAYS:
            raise ValidationError(f"Days must be between 1 and {MAX_EXTENSION_DAYS}")

        with transaction.atomic():
            membership = self._get_for_update(membership_id)
            membership.end_date = membership.end_date + timedelta(days=days)
            membership.status = MembershipStatus.ACTIVE
            membership.save(update_fields=["end_date", "status", "updated_at"])
        logger.info(f"[Membership] Admin extended {membership_id} by {days} days")
        return membership

    def cancel(self, membership_id) -> UserMembership:
        with transaction.atomic():
            membership = self._get_for_update(membership_id)
            membership.status = MembershipStatus.CANCELLED
            membership.save(update_fields=["status", "updated_at"])
        logger.info(f"[Membership] Admin cancelled {membership_id}")
        return membership

    def _get_for_update(self, membership_id) -> UserMembership:
        try:
            return UserMembership.objects.select_for_update().get(id=membership_id)
        except UserMembership.DoesNotExist:
            raise MembershipNotFound(membership_id)


def _lock_user(user_id) -> None:
    locked = list(User.objects.select_for_update().filter(id=user_id).values_list("id", flat=True))
    if not locked:
        raise ValidationError("User not found")
