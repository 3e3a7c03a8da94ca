"""
Pydantic models for request/response validation
"""
from .payments import (
    CheckoutRequest, CheckoutSessionResponse,
    SubscriptionInfo, SubscriptionStatusResponse, ChangePlanRequest
)
from .plans import PlanCatalogEntry, PlanListResponse

__all__ = [
    # Payments
    "CheckoutRequest", "CheckoutSessionResponse",
    "SubscriptionInfo", "SubscriptionStatusResponse", "ChangePlanRequest",
    # Plans
    "PlanCatalogEntry", "PlanListResponse",
]
