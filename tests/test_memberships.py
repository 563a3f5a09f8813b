"""
Tests for entitlement reads, the membership store and plan seeding.
"""

import uuid
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import pytest
from ninja.errors import HttpError

from apps.memberships.catalog import DatabasePlanCatalog, PlanSnapshot
from apps.memberships.entitlement import is_active_member
from apps.memberships.guards import require_membership
from apps.memberships.models import MembershipPlan, MembershipStatus, UserMembership
from apps.memberships.seed import DEFAULT_PLANS, seed_membership_plans
from apps.memberships.store import MembershipStore
from utils.errors import MembershipNotFound, ValidationError


@pytest.mark.django_db
class TestEntitlement:
    """is_active_member read path."""

    def test_no_memberships(self, regular_user):
        entitlement = is_active_member(regular_user.id)
        assert entitlement.is_member is False
        assert entitlement.memberships == []

    def test_active_membership(self, regular_user, plan, make_membership):
        membership = make_membership(regular_user, plan, days_left=5)

        entitlement = is_active_member(regular_user.id)

        assert entitlement.is_member is True
        assert [m.id for m in entitlement.memberships] == [membership.id]
        assert entitlement.covers(plan.id)
        assert not entitlement.covers(uuid.uuid4())

    def test_expired_row_is_not_entitled_and_not_mutated(self, regular_user, plan, make_membership):
        membership = make_membership(regular_user, plan, days_left=-1)

        entitlement = is_active_member(regular_user.id)

        assert entitlement.is_member is False
        membership.refresh_from_db()
        assert membership.status == MembershipStatus.ACTIVE

    def test_cancelled_row_is_not_entitled(self, regular_user, plan, make_membership):
        make_membership(regular_user, plan, days_left=30, status=MembershipStatus.CANCELLED)
        assert is_active_member(regular_user.id).is_member is False

    def test_evaluated_at_given_instant(self, regular_user, plan, make_membership):
        make_membership(regular_user, plan, days_left=5)
        later = datetime.now(timezone.utc) + timedelta(days=6)
        assert is_active_member(regular_user.id, now=later).is_member is False

    def test_other_users_memberships_ignored(self, regular_user, admin_user, plan, make_membership):
        make_membership(admin_user, plan, days_left=5)
        assert is_active_member(regular_user.id).is_member is False


@pytest.mark.django_db
class TestGuard:
    def _request(self, user):
        return SimpleNamespace(auth_user=user, auth=user)

    def test_blocks_non_members(self, regular_user):
        with pytest.raises(HttpError) as exc:
            require_membership(self._request(regular_user))
        assert exc.value.status_code == 403

    def test_allows_members(self, regular_user, plan, make_membership):
        make_membership(regular_user, plan, days_left=5)
        assert require_membership(self._request(regular_user)).is_member is True

    def test_blocks_members_of_other_plans(self, regular_user, plan, inactive_plan, make_membership):
        make_membership(regular_user, plan, days_left=5)
        with pytest.raises(HttpError):
            require_membership(self._request(regular_user), plan_id=inactive_plan.id)


@pytest.mark.django_db
class TestMembershipStore:
    """Administrative grant, extend and cancel."""

    def test_grant(self, regular_user, plan):
        snapshot = DatabasePlanCatalog().get(plan.id)
        membership = MembershipStore().grant(regular_user.id, snapshot)
        assert membership.status == MembershipStatus.ACTIVE
        assert membership.end_date - membership.start_date == timedelta(days=30)

    def test_grant_refuses_duplicate_active(self, regular_user, plan, make_membership):
        make_membership(regular_user, plan, days_left=5)
        with pytest.raises(ValidationError, match="already has an active membership"):
            MembershipStore().grant(regular_user.id, PlanSnapshot.from_model(plan))

    def test_grant_unknown_user(self, plan):
        with pytest.raises(ValidationError, match="User not found"):
            MembershipStore().grant(uuid.uuid4(), PlanSnapshot.from_model(plan))

    def test_extend_reactivates(self, regular_user, plan, make_membership):
        membership = make_membership(regular_user, plan, days_left=2, status=MembershipStatus.CANCELLED)
        original_end = membership.end_date

        extended = MembershipStore().extend(membership.id, 14)

        assert extended.status == MembershipStatus.ACTIVE
        assert extended.end_date == original_end + timedelta(days=14)

    @pytest.mark.parametrize("days", [0, -5, 366])
    def test_extend_rejects_out_of_range_days(self, regular_user, plan, make_membership, days):
        membership = make_membership(regular_user, plan, days_left=2)
        with pytest.raises(ValidationError):
            MembershipStore().extend(membership.id, days)

    def test_cancel(self, regular_user, plan, make_membership):
        membership = make_membership(regular_user, plan, days_left=2)
        MembershipStore().cancel(membership.id)
        membership.refresh_from_db()
        assert membership.status == MembershipStatus.CANCELLED
        assert UserMembership.objects.count() == 1

    def test_missing_membership(self):
        with pytest.raises(MembershipNotFound):
            MembershipStore().cancel(uuid.uuid4())


@pytest.mark.django_db
class TestSeed:
    def test_seeds_defaults_once(self):
        plans, created = seed_membership_plans()
        assert created is True
        assert len(plans) == len(DEFAULT_PLANS)
        assert [p.duration_days for p in plans] == [30, 90, 180]

        _, created_again = seed_membership_plans()
        assert created_again is False
        assert MembershipPlan.objects.count() == len(DEFAULT_PLANS)

    def test_skips_when_plans_exist(self, plan):
        plans, created = seed_membership_plans()
        assert created is False
        assert [p.id for p in plans] == [plan.id]


@pytest.mark.django_db
class TestPlanCatalog:
    def test_get_returns_inactive_plans(self, inactive_plan):
        snapshot = DatabasePlanCatalog().get(inactive_plan.id)
        assert snapshot.active is False
        assert snapshot.duration_days == 7

    @pytest.mark.parametrize("plan_id", ["not-a-uuid", uuid.uuid4()])
    def test_get_unknown(self, plan_id):
        assert DatabasePlanCatalog().get(plan_id) is None

    def test_list_active(self, plan, inactive_plan):
        assert [p.id for p in DatabasePlanCatalog().list_active()] == [plan.id]
