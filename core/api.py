"""
Django Ninja API configuration.
"""

import logging
from typing import Any
from ninja import NinjaAPI
from ninja.renderers import JSONRenderer
from ninja.errors import ValidationError, HttpError
from django.http import HttpRequest, HttpResponse
from pydantic import ValidationError as PydanticValidationError

from utils.errors import ServiceError

logger = logging.getLogger(__name__)


class SuccessWrapperRenderer(JSONRenderer):
    """Wrap all responses in {success: true, data: ...} format for frontend compatibility."""

    def render(self, request: HttpRequest, data: Any, *, response_status: int) -> Any:
        # Payloads that carry their own success flag pass through
        if isinstance(data, dict) and "success" in data:
            return super().render(request, data, response_status=response_status)

        if 200 <= response_status < 300:
            wrapped = {"success": True, "data": data}
        else:
            wrapped = {"success": False, "message": data}

        return super().render(request, wrapped, response_status=response_status)


api = NinjaAPI(
    title="Visa Guide API",
    version="1.0.0",
    description="Membership plans, payments and entitlement",
    renderer=SuccessWrapperRenderer(),
)


@api.exception_handler(ServiceError)
def service_errors(request: HttpRequest, exc: ServiceError) -> HttpResponse:
    return api.create_response(
        request,
        {"success": False, "message": exc.message},
        status=exc.status_code,
    )


@api.exception_handler(ValidationError)
def validation_errors(request: HttpRequest, exc: ValidationError) -> HttpResponse:
    return api.create_response(
        request,
        {"success": False, "message": "Invalid request", "errors": exc.errors},
        status=400,
    )


@api.exception_handler(PydanticValidationError)
def pydantic_validation_errors(request: HttpRequest, exc: PydanticValidationError) -> HttpResponse:
    return api.create_response(
        request,
        {"success": False, "message": "Invalid request", "errors": exc.errors()},
        status=400,
    )


@api.exception_handler(HttpError)
def http_error_handler(request: HttpRequest, exc: HttpError) -> HttpResponse:
    return api.create_response(
        request,
        {"success": False, "message": str(exc)},
        status=exc.status_code,
    )


@api.exception_handler(Exception)
def generic_error_handler(request: HttpRequest, exc: Exception) -> HttpResponse:
    logger.exception(f"[API] Unhandled error on {request.method} {request.path}")
    return api.create_response(
        request,
        {"success": False, "message": "An internal error occurred"},
        status=500,
    )


# Health check
@api.get("/health")
def health_check(request: HttpRequest) -> dict:
    return {"status": "ok", "version": "1.0.0"}


# Import and register routers
from apps.memberships.api import router as memberships_router
from apps.billing.api import router as billing_router
from apps.admin.api import router as admin_router

api.add_router("/memberships", memberships_router, tags=["Memberships"])
api.add_router("/payment", billing_router, tags=["Payment"])
api.add_router("/admin", admin_router, tags=["Admin"])
