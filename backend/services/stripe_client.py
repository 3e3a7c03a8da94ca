"""
Stripe SDK access
"""
import stripe

from utils.config import STRIPE_API_KEY


def get_stripe():
    """Return the configured stripe module, or None when payments are disabled"""
    if not STRIPE_API_KEY:
        return None
    stripe.api_key = STRIPE_API_KEY
    return stripe
