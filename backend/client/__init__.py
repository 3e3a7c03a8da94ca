"""
Profile page subscription client
"""
from .api import ApiError, BillingApiClient
from .auth import AuthState, UserProfile
from .controller import (
    ConfirmationError, MutationState, MutationStatus,
    PendingConfirmation, StatusState, SubscriptionController
)
from .notifications import Navigator, Notification, Notifier
from .query_cache import CacheEntry, QueryCache
from .view import ProfileView, render_profile

__all__ = [
    "ApiError", "BillingApiClient",
    "AuthState", "UserProfile",
    "ConfirmationError", "MutationState", "MutationStatus",
    "PendingConfirmation", "StatusState", "SubscriptionController",
    "Navigator", "Notification", "Notifier",
    "CacheEntry", "QueryCache",
    "ProfileView", "render_profile",
]
