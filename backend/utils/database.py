"""
Database configuration and connection
"""
from motor.motor_asyncio import AsyncIOMotorClient
from .config import MONGO_URL, DB_NAME

# MongoDB client and database instance
client = AsyncIOMotorClient(MONGO_URL)
db = client[DB_NAME]


async def setup_database_indexes():
    """Setup required indexes on startup"""
    # At most one active subscription per user
    await db.subscriptions.create_index(
        [("user_id", 1)],
        unique=True,
        partialFilterExpression={"status": "active"}
    )

    await db.subscriptions.create_index(
        [("subscription_id", 1)],
        unique=True
    )

    # TTL index for user_sessions - auto-delete expired sessions
    await db.user_sessions.create_index(
        [("expires_at", 1)],
        expireAfterSeconds=0
    )

    await db.user_sessions.create_index(
        [("session_token", 1)],
        unique=True
    )

    await db.users.create_index(
        [("user_id", 1)],
        unique=True
    )
