"""
Payment API endpoints - converted from the payment routes.
"""

import logging
from datetime import datetime, timezone
from urllib.parse import urlencode
from uuid import UUID

from django.conf import settings
from django.http import HttpRequest, HttpResponseRedirect
from ninja import Router
from ninja.errors import HttpError

from utils.auth import AuthBearer, get_current_user
from utils.errors import ServiceError, ValidationError
from apps.memberships.catalog import DatabasePlanCatalog
from .ledger import PaymentLedger
from .models import Payment, PaymentStatus
from .reconciler import CallbackReconciler
from .schemas import (
    CallbackIn,
    CallbackOut,
    CreatePaymentIn,
    CreatePaymentOut,
    PaymentOut,
    PaymentResultOut,
)

logger = logging.getLogger(__name__)

router = Router()

# stored status -> (outcome, retryable, message) for the result page
RESULT_OUTCOMES = {
    PaymentStatus.PENDING: ("pending", False, "Payment is still being processed."),
    PaymentStatus.COMPLETED: ("success", False, "Payment completed. Your membership is now active."),
    PaymentStatus.FAILED: ("failed", True, "Payment failed. You can try again."),
    PaymentStatus.CANCELLED: ("cancelled", False, "Payment was cancelled. You can return to the membership plans."),
}
SUPPORT_OUTCOME = ("error", False, "We could not confirm this payment. Please contact support.")


def build_checkout_url(payment: Payment) -> str:
    """Gateway checkout URL; the gateway redirects back to the GET callback."""
    return_url = f"{settings.APP_URL}/api/payment/callback?" + urlencode(
        {"transaction_id": payment.transaction_id, "payment_id": str(payment.id)}
    )
    query = urlencode(
        {
            "out_trade_no": payment.transaction_id,
            "total_amount": str(payment.amount),
            "currency": payment.currency,
            "method": payment.method,
            "notify_url": f"{settings.APP_URL}/api/payment/callback",
            "return_url": return_url,
        }
    )
    return f"{settings.PAYMENT_GATEWAY_URL}?{query}"


def result_page_url(params: dict) -> str:
    return f"{settings.APP_URL}/membership/payment/result?{urlencode(params)}"


@router.post("/create", response=CreatePaymentOut, auth=AuthBearer())
def create_payment(request: HttpRequest, data: CreatePaymentIn):
    """Start a purchase: record a PENDING payment and hand out the checkout URL."""
    user = get_current_user(request)
    catalog = DatabasePlanCatalog()

    amount = data.amount
    if amount is None and data.membershipId:
        plan = catalog.get(data.membershipId)
        amount = plan.price if plan else 0
    if amount is None:
        raise ValidationError("Amount is required for payments without a membership plan")

    payment = PaymentLedger(catalog).create_pending(
        user,
        data.membershipId,
        amount,
        data.currency or settings.PAYMENT_DEFAULT_CURRENCY,
        data.paymentMethod,
    )

    return CreatePaymentOut(
        paymentId=payment.id,
        transactionId=payment.transaction_id,
        amount=float(payment.amount),
        currency=payment.currency,
        method=payment.method,
        paymentUrl=build_checkout_url(payment),
    )


@router.get("/payments", response=list[PaymentOut], auth=AuthBearer())
def get_payments(request: HttpRequest, limit: int = 50):
    """Get user's payment history."""
    user = get_current_user(request)
    return [PaymentOut.from_orm(p) for p in PaymentLedger().history(user, limit=limit)]


@router.get("/payments/{payment_id}", response=PaymentOut, auth=AuthBearer())
def get_payment(request: HttpRequest, payment_id: UUID):
    """Get payment details."""
    user = get_current_user(request)

    try:
        payment = Payment.objects.get(id=payment_id, user=user)
    except Payment.DoesNotExist:
        raise HttpError(404, "Payment not found")

    return PaymentOut.from_orm(payment)


@router.post("/callback", response=CallbackOut)
def payment_callback(request: HttpRequest, data: CallbackIn):
    """Gateway webhook: apply a payment status notification."""
    result = CallbackReconciler().reconcile(data.transactionId, data.status, data.paymentData)

    return CallbackOut(
        success=True,
        payment=PaymentOut.from_orm(result.payment),
        message="Payment already processed" if result.already_processed else None,
        anomaly=result.anomaly,
    )


@router.get("/callback")
def payment_redirect(
    request: HttpRequest,
    transaction_id: str | None = None,
    status: str | None = None,
    payment_id: str | None = None,
):
    """Browser return from the gateway: reconcile, then send the user to the result page."""
    logger.info(f"[Payment] Redirect received: {transaction_id} {status} {payment_id}")
    params = {
        "transaction_id": transaction_id or "",
        "status": status or "",
        "payment_id": payment_id or "",
    }
    payload = {
        "paymentId": payment_id,
        "redirectSource": "GET",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }

    try:
        result = CallbackReconciler().reconcile(transaction_id, status, payload)
    except ServiceError as e:
        logger.error(f"[Payment] Redirect for {transaction_id} failed: {e.message}")
        params.update(status="failed", error=e.code)
        return HttpResponseRedirect(result_page_url(params))

    if result.anomaly and result.payment.status != PaymentStatus.COMPLETED:
        params.update(status="failed", error="anomaly")
    else:
        # Stored status wins over the reported one, e.g. a late failure after completion
        params["status"] = result.payment.status.lower()
    return HttpResponseRedirect(result_page_url(params))


@router.get("/result", response=PaymentResultOut, auth=AuthBearer())
def payment_result(request: HttpRequest, transaction_id: str, error: str | None = None):
    """Outcome of a payment for the result page. Any redirect error code asks for support."""
    user = get_current_user(request)
    payment = Payment.objects.filter(transaction_id=transaction_id, user=user).first()
    if payment is None:
        outcome, retryable, message = SUPPORT_OUTCOME
        return PaymentResultOut(outcome=outcome, retryable=retryable, message=message)

    if error:
        logger.warning(f"[Payment] Result for {transaction_id} carries error {error}")
        outcome, retryable, message = SUPPORT_OUTCOME
    else:
        outcome, retryable, message = RESULT_OUTCOMES.get(payment.status, SUPPORT_OUTCOME)
    return PaymentResultOut(
        outcome=outcome,
        retryable=retryable,
        message=message,
        payment=PaymentOut.from_orm(payment),
    )
