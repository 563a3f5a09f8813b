"""
Payment ledger - durable record of every purchase attempt.

PaymentLedger.transition_status is the only code path that changes a
payment's status; it enforces the transition table below.
"""

import logging
import re
import uuid
from decimal import Decimal, InvalidOperation
from typing import Any

from django.db import transaction

from apps.memberships.catalog import DatabasePlanCatalog, PlanCatalog
from apps.users.models import User
from utils.errors import UnknownTransaction, ValidationError
from .models import Payment, PaymentMethod, PaymentStatus

logger = logging.getLogger(__name__)

ALLOWED_TRANSITIONS: dict[str, frozenset[str]] = {
    PaymentStatus.PENDING: frozenset(
        {PaymentStatus.PENDING, PaymentStatus.COMPLETED, PaymentStatus.FAILED, PaymentStatus.CANCELLED}
    ),
    # Late gateway reports over a failed/cancelled attempt: last write wins
    PaymentStatus.FAILED: frozenset(
        {PaymentStatus.FAILED, PaymentStatus.CANCELLED, PaymentStatus.COMPLETED}
    ),
    PaymentStatus.CANCELLED: frozenset(
        {PaymentStatus.CANCELLED, PaymentStatus.FAILED, PaymentStatus.COMPLETED}
    ),
    PaymentStatus.COMPLETED: frozenset({PaymentStatus.REFUNDED}),
    PaymentStatus.REFUNDED: frozenset(),
}

CURRENCY_RE = re.compile(r"^[A-Z]{3}$")

CENT = Decimal("0.01")
MAX_AMOUNT = Decimal("99999999.99")


def normalize_status(raw: str | None) -> PaymentStatus:
    value = (raw or "").strip().upper()
    if value not in PaymentStatus.values:
        raise ValidationError(f"Unsupported payment status: {raw!r}")
    return PaymentStatus(value)


def normalize_method(raw: str | None) -> PaymentMethod:
    value = (raw or "").strip().upper()
    if value not in PaymentMethod.values:
        raise ValidationError(f"Unsupported payment method: {raw!r}")
    return PaymentMethod(value)


def quantize_amount(amount: Decimal) -> Decimal:
    """Fit the amount to the payments.amount column, numeric(10, 2)."""
    if abs(amount) > MAX_AMOUNT:
        raise ValidationError(f"Amount {amount} exceeds the maximum of {MAX_AMOUNT}")
    quantized = amount.quantize(CENT)
    if quantized != amount:
        raise ValidationError(f"Amount {amount} has more than two decimal places")
    return quantized


def generate_transaction_id() -> str:
    return f"TXN{uuid.uuid4().hex[:16].upper()}"


class PaymentLedger:
    def __init__(self, catalog: PlanCatalog | None = None):
        self.catalog = catalog or DatabasePlanCatalog()

    def create_pending(
        self,
        user: User,
        plan_id,
        amount,
        currency: str,
        method: str,
    ) -> Payment:
        """Record a new purchase attempt in PENDING. The gateway echoes back its transaction_id."""
        method = normalize_method(method)
        currency = (currency or "").strip().upper()
        if not CURRENCY_RE.match(currency):
            raise ValidationError(f"Invalid currency: {currency!r}")

        try:
            amount = Decimal(str(amount))
        except (InvalidOperation, ValueError):
            raise ValidationError(f"Invalid amount: {amount!r}")
        if not amount.is_finite():
            raise ValidationError(f"Invalid amount: {amount}")
        amount = quantize_amount(amount)

        if plan_id is not None:
            plan = self.catalog.get(plan_id)
            if plan is None or not plan.active:
                raise ValidationError("Membership plan not found or inactive")
            if amount != plan.price:
                raise ValidationError(f"Amount {amount} does not match plan price {plan.price}")
            plan_id = plan.id
        elif amount <= 0:
            raise ValidationError("Amount must be positive")

        payment = Payment.objects.create(
            transaction_id=generate_transaction_id(),
            user=user,
            membership_plan_id=plan_id,
            amount=amount,
            currency=currency,
            method=method,
            status=PaymentStatus.PENDING,
        )
        logger.info(
            f"[Payment] Created {payment.transaction_id} for user {user.id}: {amount} {currency} via {method}"
        )
        return payment

    def find_by_transaction_id(self, transaction_id: str, for_update: bool = False) -> Payment:
        queryset = Payment.objects.all()
        if for_update:
            queryset = queryset.select_for_update()
        try:
            return queryset.get(transaction_id=transaction_id)
        except Payment.DoesNotExist:
            raise UnknownTransaction(transaction_id)

    def transition_status(
        self, payment: Payment, new_status: PaymentStatus, payload: Any = None
    ) -> Payment:
        """Move the payment to new_status. Must run inside the caller's transaction."""
        if not transaction.get_connection().in_atomic_block:
            raise RuntimeError("transition_status must be called inside transaction.atomic()")

        allowed = ALLOWED_TRANSITIONS[payment.status]
        if new_status not in allowed:
            raise ValidationError(
                f"Payment {payment.transaction_id} cannot move from {payment.status} to {new_status}"
            )

        previous = payment.status
        payment.status = new_status
        update_fields = ["status", "updated_at"]
        if payload is not None:
            payment.payment_data = payload
            update_fields.append("payment_data")
        payment.save(update_fields=update_fields)

        logger.info(f"[Payment] {payment.transaction_id}: {previous} -> {new_status}")
        return payment

    def refund(self, transaction_id: str, payload: Any = None) -> Payment:
        """Administrative refund. Membership grants are left as they are."""
        with transaction.atomic():
            payment = self.find_by_transaction_id(transaction_id, for_update=True)
            return self.transition_status(payment, PaymentStatus.REFUNDED, payload)

    def history(self, user: User, limit: int = 10) -> list[Payment]:
        return list(
            Payment.objects.filter(user=user)
            .select_related("membership_plan")
            .order_by("-created_at")[:limit]
        )
