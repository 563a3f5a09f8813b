"""
Default membership plans.
"""

import logging
from decimal import Decimal

from django.db import transaction

from .models import MembershipPlan

logger = logging.getLogger(__name__)

DEFAULT_PLANS = [
    {
        "name": "Basic Plan",
        "description": "Perfect for individuals who need basic visa guidance and support.",
        "price": Decimal("20.00"),
        "duration_days": 30,
        "features": [
            "Access to basic visa information",
            "Email support",
            "Standard processing guides",
            "Community forum access",
        ],
        "order": 1,
    },
    {
        "name": "Premium Plan",
        "description": "Ideal for professionals and frequent travelers with comprehensive needs.",
        "price": Decimal("50.00"),
        "duration_days": 90,
        "features": [
            "All Basic Plan features",
            "Advanced visa processing guides",
            "One-on-one consultation (1 hour)",
            "Document review service",
            "Video tutorials access",
        ],
        "order": 2,
    },
    {
        "name": "Enterprise Plan",
        "description": "Complete visa solution for businesses and immigration professionals.",
        "price": Decimal("80.00"),
        "duration_days": 180,
        "features": [
            "All Premium Plan features",
            "Priority support",
            "Unlimited consultations",
            "Custom document templates",
            "Bulk application processing",
            "Dedicated account manager",
        ],
        "order": 3,
    },
]


def seed_membership_plans() -> tuple[list[MembershipPlan], bool]:
    """Insert the default plans unless any plan exists. Returns (plans, created)."""
    with transaction.atomic():
        existing = list(MembershipPlan.objects.all())
        if existing:
            logger.info("[Membership] Plans already exist, skipping seed")
            return existing, False

        plans = [MembershipPlan.objects.create(active=True, **data) for data in DEFAULT_PLANS]

    logger.info(f"[Membership] Seeded {len(plans)} membership plans")
    return plans, True
