"""
Callback reconciler - turns gateway status notifications into payment and
membership state, exactly once per transaction.

Gateways deliver notifications at least once, and the browser redirect and
the server-to-server webhook can report the same event concurrently. The
stored payment status is the idempotency key: once COMPLETED, further
callbacks return the record untouched. The status change and the membership
grant commit together under row locks, and lock conflicts are retried from a
fresh read.
"""

import logging
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from django.conf import settings
from django.db import OperationalError, transaction

from apps.memberships.catalog import DatabasePlanCatalog, PlanCatalog
from apps.memberships.models import UserMembership
from apps.memberships.store import MembershipStore
from utils.errors import ReconciliationFailed, UnknownTransaction, ValidationError
from .ledger import PaymentLedger, normalize_status
from .models import Payment, PaymentStatus

logger = logging.getLogger(__name__)

TERMINAL_FAILURE_STATUSES = frozenset({PaymentStatus.FAILED, PaymentStatus.CANCELLED})


@dataclass
class ReconcileResult:
    payment: Payment
    already_processed: bool = False
    anomaly: bool = False
    membership: UserMembership | None = None
    membership_created: bool = False


class CallbackReconciler:
    def __init__(
        self,
        catalog: PlanCatalog | None = None,
        ledger: PaymentLedger | None = None,
        store: MembershipStore | None = None,
        max_attempts: int | None = None,
        retry_delay: float | None = None,
    ):
        self.catalog = catalog or DatabasePlanCatalog()
        self.ledger = ledger or PaymentLedger(self.catalog)
        self.store = store or MembershipStore()
        self.max_attempts = settings.PAYMENT_RECONCILE_MAX_ATTEMPTS if max_attempts is None else max_attempts
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1, got {self.max_attempts}")
        self.retry_delay = settings.PAYMENT_RECONCILE_RETRY_DELAY if retry_delay is None else retry_delay

    def reconcile(
        self,
        transaction_id: str | None,
        status: str | None,
        payload: Any = None,
        now: datetime | None = None,
    ) -> ReconcileResult:
        if not transaction_id or not status:
            raise ValidationError("Transaction ID and status are required")
        reported = normalize_status(status)

        logger.info(f"[Reconcile] Callback for {transaction_id}: {reported}")

        for attempt in range(1, self.max_attempts + 1):
            try:
                return self._reconcile_once(transaction_id, reported, payload, now)
            except OperationalError as e:
                logger.warning(
                    f"[Reconcile] Attempt {attempt}/{self.max_attempts} for {transaction_id} aborted: {e}"
                )
                if attempt < self.max_attempts:
                    time.sleep(self.retry_delay * attempt)

        logger.error(f"[Reconcile] Giving up on {transaction_id} after {self.max_attempts} attempts")
        raise ReconciliationFailed(
            f"Could not reconcile payment {transaction_id}, please retry the callback"
        )

    def _reconcile_once(
        self,
        transaction_id: str,
        reported: PaymentStatus,
        payload: Any,
        now: datetime | None,
    ) -> ReconcileResult:
        try:
            payment = self.ledger.find_by_transaction_id(transaction_id)
        except UnknownTransaction:
            logger.error(f"[Reconcile] Payment not found: {transaction_id}")
            raise
        if payment.status == PaymentStatus.COMPLETED:
            return self._already_processed(payment)

        with transaction.atomic():
            # Re-read under lock: a concurrent callback may have completed it meanwhile
            payment = self.ledger.find_by_transaction_id(transaction_id, for_update=True)
            if payment.status == PaymentStatus.COMPLETED:
                return self._already_processed(payment)

            anomaly = payment.status in TERMINAL_FAILURE_STATUSES and payment.status != reported
            if anomaly:
                logger.warning(
                    f"[Reconcile] Anomaly on {transaction_id}: stored {payment.status}, reported {reported}"
                )

            payment = self.ledger.transition_status(payment, reported, payload)
            result = ReconcileResult(payment=payment, anomaly=anomaly)

            if reported == PaymentStatus.COMPLETED and payment.membership_plan_id:
                plan = self.catalog.get(payment.membership_plan_id)
                if plan is None:
                    raise ValidationError(
                        f"Membership plan {payment.membership_plan_id} of payment {transaction_id} not found"
                    )
                current = now or datetime.now(timezone.utc)
                result.membership, result.membership_created = self.store.grant_or_extend(
                    payment.user_id, plan, current
                )
            elif reported == PaymentStatus.FAILED:
                logger.info(f"[Reconcile] Payment failed: {transaction_id}")

        return result

    def _already_processed(self, payment: Payment) -> ReconcileResult:
        logger.info(f"[Reconcile] Payment already completed: {payment.transaction_id}")
        return ReconcileResult(payment=payment, already_processed=True)
