"""
Tests for Membership API endpoints.
"""

import pytest


@pytest.mark.django_db
class TestPlansAPI:
    def test_lists_only_active_plans(self, api_client, plan, inactive_plan):
        response = api_client.get("/memberships/plans")
        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert [p["id"] for p in data["data"]] == [str(plan.id)]
        assert data["data"][0]["duration"] == 30
        assert data["data"][0]["price"] == 50.0


@pytest.mark.django_db
class TestMyMembershipAPI:
    def test_requires_auth(self, api_client):
        response = api_client.get("/memberships/me")
        assert response.status_code == 401

    def test_without_membership(self, api_client, user_auth_headers):
        response = api_client.get("/memberships/me", headers=user_auth_headers)
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["hasMembership"] is False
        assert data["memberships"] == []
        assert data["payments"] == []

    def test_with_membership_and_payments(
        self, api_client, user_auth_headers, regular_user, plan, make_membership, make_payment
    ):
        make_membership(regular_user, plan, days_left=10)
        make_payment(regular_user, plan)

        response = api_client.get("/memberships/me", headers=user_auth_headers)

        data = response.json()["data"]
        assert data["hasMembership"] is True
        assert data["memberships"][0]["membership"]["name"] == "Monthly Plan"
        assert len(data["payments"]) == 1

    def test_expired_membership_not_listed(self, api_client, user_auth_headers, regular_user, plan, make_membership):
        make_membership(regular_user, plan, days_left=-2)

        response = api_client.get("/memberships/me", headers=user_auth_headers)

        assert response.json()["data"]["hasMembership"] is False


@pytest.mark.django_db
class TestAccessAPI:
    def test_non_member_forbidden(self, api_client, user_auth_headers):
        response = api_client.get("/memberships/access", headers=user_auth_headers)
        assert response.status_code == 403
        assert response.json()["success"] is False

    def test_member_allowed(self, api_client, user_auth_headers, regular_user, plan, make_membership):
        make_membership(regular_user, plan, days_left=3)

        response = api_client.get("/memberships/access", headers=user_auth_headers)

        assert response.status_code == 200
        assert response.json()["data"] == {"isMember": True, "planIds": [str(plan.id)]}

    def test_member_of_other_plan_forbidden(
        self, api_client, user_auth_headers, regular_user, plan, inactive_plan, make_membership
    ):
        make_membership(regular_user, plan, days_left=3)

        response = api_client.get(f"/memberships/access?planId={inactive_plan.id}", headers=user_auth_headers)

        assert response.status_code == 403
