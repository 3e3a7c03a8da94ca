"""
Business logic services
"""
from .subscription_service import (
    BillingProviderError, SubscriptionService, SubscriptionNotFoundError, InvalidPlanError
)
from .checkout_service import CheckoutService

__all__ = [
    "SubscriptionService", "SubscriptionNotFoundError", "InvalidPlanError",
    "BillingProviderError", "CheckoutService",
]
