"""
Domain errors shared by the billing and membership apps.

Each error carries the HTTP status the API reports it with and a short code
used in redirect URLs.
"""


class ServiceError(Exception):
    status_code = 500
    code = "internal_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(ServiceError):
    """Bad input shape or values. Not retried."""

    status_code = 400
    code = "invalid_request"


class UnknownTransaction(ServiceError):
    """No payment record carries the given transaction id. Not retried."""

    status_code = 404
    code = "unknown_transaction"

    def __init__(self, transaction_id: str):
        super().__init__("Payment not found")
        self.transaction_id = transaction_id


class MembershipNotFound(ServiceError):
    status_code = 404
    code = "membership_not_found"

    def __init__(self, membership_id):
        super().__init__("User membership not found")
        self.membership_id = membership_id


class ReconciliationFailed(ServiceError):
    """Store contention outlasted the retry budget. Safe to resend the same callback."""

    status_code = 500
    code = "processing_error"
