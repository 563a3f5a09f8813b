"""
Pytest configuration and fixtures.
"""

import json
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest
from django.test import Client

from apps.billing.models import Payment, PaymentMethod, PaymentStatus
from apps.memberships.models import MembershipPlan, MembershipStatus, UserMembership
from apps.users.models import User, UserRole
from utils.auth import create_token


class APIClient:
    """Wrapper around Django test client for API testing."""

    def __init__(self):
        self.client = Client()

    def _make_request(self, method, path, data=None, headers=None):
        """Make HTTP request."""
        kwargs = {"content_type": "application/json"}

        if headers:
            kwargs.update(headers)

        if data is not None:
            kwargs["data"] = json.dumps(data)

        # Prepend /api if not present
        if not path.startswith("/api"):
            path = f"/api{path}"

        response = getattr(self.client, method.lower())(path, **kwargs)
        return APIResponse(response)

    def get(self, path, headers=None, **kwargs):
        return self._make_request("GET", path, headers=headers)

    def post(self, path, json=None, headers=None, **kwargs):
        return self._make_request("POST", path, data=json, headers=headers)


class APIResponse:
    """Wrapper around Django response for easier testing."""

    def __init__(self, response):
        self._response = response
        self.status_code = response.status_code

    def json(self):
        return json.loads(self._response.content)

    @property
    def location(self):
        return self._response["Location"]


@pytest.fixture
def api_client():
    """API test client."""
    return APIClient()


@pytest.fixture
def admin_user(db):
    """Create admin user for testing."""
    user = User.objects.create(
        email="admin@test.com",
        name="Admin User",
        role=UserRole.ADMIN,
    )
    user.set_password("Admin@123456")
    user.save()
    return user


@pytest.fixture
def regular_user(db):
    """Create regular user for testing."""
    user = User.objects.create(
        email="user@test.com",
        name="Regular User",
        role=UserRole.USER,
    )
    user.set_password("User@123456")
    user.save()
    return user


@pytest.fixture
def auth_headers(admin_user):
    """Get auth headers for admin user."""
    return {"HTTP_AUTHORIZATION": f"Bearer {create_token(admin_user)}"}


@pytest.fixture
def user_auth_headers(regular_user):
    """Get auth headers for regular user."""
    return {"HTTP_AUTHORIZATION": f"Bearer {create_token(regular_user)}"}


@pytest.fixture
def plan(db):
    """30-day plan priced at 50."""
    return MembershipPlan.objects.create(
        name="Monthly Plan",
        price=Decimal("50.00"),
        duration_days=30,
        features=["Visa guides", "Email support"],
        order=1,
    )


@pytest.fixture
def inactive_plan(db):
    return MembershipPlan.objects.create(
        name="Legacy Plan",
        price=Decimal("10.00"),
        duration_days=7,
        active=False,
        order=9,
    )


@pytest.fixture
def make_payment(db):
    """Factory for payments in any status."""

    def _make(user, plan=None, status=PaymentStatus.PENDING, transaction_id=None, amount=None):
        return Payment.objects.create(
            transaction_id=transaction_id or f"TXN{Payment.objects.count() + 1:016d}",
            user=user,
            membership_plan=plan,
            amount=amount if amount is not None else (plan.price if plan else Decimal("15.00")),
            currency="USD",
            method=PaymentMethod.VISA,
            status=status,
        )

    return _make


@pytest.fixture
def make_membership(db):
    """Factory for memberships ending a given number of days from now."""

    def _make(user, plan, days_left, status=MembershipStatus.ACTIVE):
        now = datetime.now(timezone.utc)
        return UserMembership.objects.create(
            user=user,
            membership_plan=plan,
            start_date=now - timedelta(days=1),
            end_date=now + timedelta(days=days_left),
            status=status,
        )

    return _make
