"""
Entitlement query - "is this user a member right now, and of which plans".

Expiry is derived from end_date at read time; nothing here writes.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone

from .models import MembershipStatus, UserMembership


@dataclass
class Entitlement:
    is_member: bool
    memberships: list[UserMembership] = field(default_factory=list)

    @property
    def plan_ids(self) -> list[str]:
        return sorted({str(m.membership_plan_id) for m in self.memberships})

    def covers(self, plan_id) -> bool:
        return str(plan_id) in self.plan_ids


def active_memberships(user_id, now: datetime | None = None):
    now = now or datetime.now(timezone.utc)
    return (
        UserMembership.objects.filter(
            user_id=user_id,
            status=MembershipStatus.ACTIVE,
            end_date__gt=now,
        )
        .select_related("membership_plan")
        .order_by("-end_date")
    )


def is_active_member(user_id, now: datetime | None = None) -> Entitlement:
    memberships = list(active_memberships(user_id, now))
    return Entitlement(is_member=bool(memberships), memberships=memberships)
