"""
URL configuration for config project.
"""
import logging

from django.contrib import admin
from django.urls import path
from ninja import NinjaAPI
from ninja.errors import ValidationError as RequestValidationError

from authentication.api import router as users_router
from buyers.api import router as buyers_router
from services.exceptions import BuyerServiceError

logger = logging.getLogger(__name__)

# Create NinjaAPI instance
api = NinjaAPI(
    title="Buyer Leads API",
    description="Lead management API for real-estate buyer inquiries",
    version="1.0.0"
)

# Register API routers
api.add_router("/buyer", buyers_router, tags=["Buyers"])
api.add_router("/user", users_router, tags=["Users"])

REQUEST_SECTIONS = ("query", "path", "header", "cookie", "form", "file")


def _field_name(loc) -> str:
    parts = [str(part) for part in loc]
    if parts and parts[0] == "body":
        # ["body", <param name>, <field>, ...]
        parts = parts[2:] if len(parts) > 2 else parts[1:]
    elif parts and parts[0] in REQUEST_SECTIONS:
        parts = parts[1:]
    return ".".join(parts) or "__root__"


@api.exception_handler(BuyerServiceError)
def buyer_service_error(request, exc: BuyerServiceError):
    return api.create_response(request, exc.payload(), status=exc.status_code)


@api.exception_handler(RequestValidationError)
def request_validation_error(request, exc: RequestValidationError):
    errors = [
        {"field": _field_name(error.get("loc", ())), "message": error.get("msg", "Invalid value")}
        for error in exc.errors
    ]
    return api.create_response(
        request,
        {
            "error": "; ".join(f"{error['field']}: {error['message']}" for error in errors),
            "kind": "ValidationError",
            "errors": errors,
        },
        status=400,
    )


@api.exception_handler(Exception)
def unexpected_error(request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.path}")
    return api.create_response(
        request,
        {"error": "Internal Server Error", "kind": "InternalError"},
        status=500,
    )


urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/', api.urls),
]
