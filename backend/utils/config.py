"""
PlanDesk Configuration Constants
"""
import os
from dotenv import load_dotenv
from pathlib import Path

# Load environment variables
ROOT_DIR = Path(__file__).parent.parent
load_dotenv(ROOT_DIR / '.env')

# ============== DATABASE CONFIGURATION ==============
MONGO_URL = os.environ.get('MONGO_URL', 'mongodb://localhost:27017')
DB_NAME = os.environ.get('DB_NAME', 'plandesk')

# ============== JWT CONFIGURATION ==============
JWT_SECRET = os.environ.get('JWT_SECRET')
if not JWT_SECRET:
    import secrets
    JWT_SECRET = secrets.token_hex(32)
    import logging
    logging.warning("SECURITY WARNING: JWT_SECRET not set. Using generated secret.")

JWT_ALGORITHM = "HS256"

# ============== REDIS CONFIGURATION (Optional) ==============
# Set REDIS_URL to share rate limit windows across multiple servers
# Example: redis://localhost:6379/0
REDIS_URL = os.environ.get('REDIS_URL')

# ============== STRIPE CONFIGURATION ==============
STRIPE_API_KEY = os.environ.get('STRIPE_API_KEY')
STRIPE_WEBHOOK_SECRET = os.environ.get('STRIPE_WEBHOOK_SECRET')
STRIPE_PRICE_ID_MONTHLY = os.environ.get('STRIPE_PRICE_ID_MONTHLY', '')
STRIPE_PRICE_ID_YEARLY = os.environ.get('STRIPE_PRICE_ID_YEARLY', '')
APP_BASE_URL = os.environ.get('APP_BASE_URL', 'http://localhost:3000').rstrip('/')

# ============== CORS CONFIGURATION ==============
CORS_ORIGINS = os.environ.get('CORS_ORIGINS', '').split(',')
if CORS_ORIGINS == ['']:
    CORS_ORIGINS = ["http://localhost:3000", "http://127.0.0.1:3000"]

# ============== RATE LIMITING ==============
RATE_LIMIT_WINDOW = 60
RATE_LIMIT_MAX_MUTATIONS = 20
RATE_LIMIT_MAX_CHECKOUT = 10

# ============== PROFILE PAGE CLIENT ==============
API_BASE_URL = os.environ.get('API_BASE_URL', 'http://localhost:8000').rstrip('/')
CLIENT_TIMEOUT_SECONDS = float(os.environ.get('CLIENT_TIMEOUT_SECONDS', '10'))

# Single cache slot shared by the status fetch and both mutations
SUBSCRIPTION_CACHE_KEY = "subscription"
SUBSCRIPTION_STALE_SECONDS = 5 * 60

# Where the user lands after cancelling
SUBSCRIBE_PATH = "/subscribe"

# ============== MESSAGES ==============
CHECKOUT_MISSING_FIELDS_ERROR = "Plan type, user id, and email are required."
UNSUBSCRIBE_CONFIRM_MESSAGE = (
    "Are you sure you want to unsubscribe? You will lose access to premium features."
)

# ============== PLAN CATALOG ==============
# Keyed by billing interval; the interval is what a stored subscription
# records as its tier.
AVAILABLE_PLANS = [
    {
        "name": "Monthly Plan",
        "amount": 9.99,
        "currency": "USD",
        "interval": "monthly",
        "price_id": STRIPE_PRICE_ID_MONTHLY,
    },
    {
        "name": "Yearly Plan",
        "amount": 99.99,
        "currency": "USD",
        "interval": "yearly",
        "price_id": STRIPE_PRICE_ID_YEARLY,
    },
]
