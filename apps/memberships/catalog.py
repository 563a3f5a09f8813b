"""
Plan catalog - read-only access to membership plans.

The ledger and the reconciler take a catalog instead of querying plans
themselves, so plan data can be swapped for a fixed list in tests.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Iterable, Protocol
from uuid import UUID

from django.core.exceptions import ValidationError as DjangoValidationError

from .models import MembershipPlan


@dataclass(frozen=True)
class PlanSnapshot:
    id: UUID
    name: str
    price: Decimal
    duration_days: int
    features: tuple[str, ...] = field(default_factory=tuple)
    active: bool = True

    @classmethod
    def from_model(cls, plan: MembershipPlan) -> "PlanSnapshot":
        return cls(
            id=plan.id,
            name=plan.name,
            price=Decimal(plan.price),
            duration_days=plan.duration_days,
            features=tuple(plan.features or ()),
            active=plan.active,
        )


class PlanCatalog(Protocol):
    def get(self, plan_id) -> PlanSnapshot | None:
        """Return the plan, active or not, or None when unknown."""
        ...

    def list_active(self) -> list[PlanSnapshot]:
        ...


class DatabasePlanCatalog:
    """Catalog backed by the memberships table."""

    def get(self, plan_id) -> PlanSnapshot | None:
        try:
            plan = MembershipPlan.objects.get(id=plan_id)
        except (MembershipPlan.DoesNotExist, DjangoValidationError, ValueError):
            return None
        return PlanSnapshot.from_model(plan)

    def list_active(self) -> list[PlanSnapshot]:
        return [PlanSnapshot.from_model(p) for p in MembershipPlan.objects.filter(active=True)]


class StaticPlanCatalog:
    """Fixed in-memory catalog."""

    def __init__(self, plans: Iterable[PlanSnapshot]):
        self._plans = {str(p.id): p for p in plans}

    def get(self, plan_id) -> PlanSnapshot | None:
        return self._plans.get(str(plan_id))

    def list_active(self) -> list[PlanSnapshot]:
        return [p for p in self._plans.values() if p.active]
