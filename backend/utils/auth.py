"""
Authentication utilities and JWT handling.

Tokens are issued by the identity provider; this module only verifies them
and resolves the caller to a user record.
"""
import jwt
from datetime import datetime, timezone
from fastapi import HTTPException, Depends, Request
from fastapi.security import HTTPBearer
from typing import Dict, Optional
from .database import db
from .config import JWT_SECRET, JWT_ALGORITHM

security = HTTPBearer(auto_error=False)


def decode_token(token: str) -> Optional[Dict]:
    """Decode and validate a JWT token"""
    try:
        return jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALGORITHM])
    except jwt.InvalidTokenError:
        return None


async def _user_from_session(session_token: str) -> Optional[Dict]:
    session = await db.user_sessions.find_one({"session_token": session_token}, {"_id": 0})
    if not session:
        return None
    expires_at = session.get("expires_at")
    if isinstance(expires_at, str):
        try:
            expires_at = datetime.fromisoformat(expires_at)
        except ValueError:
            return None
    # A session without a readable expiry is not trusted
    if not isinstance(expires_at, datetime):
        return None
    if expires_at.tzinfo is None:
        expires_at = expires_at.replace(tzinfo=timezone.utc)
    if expires_at <= datetime.now(timezone.utc):
        return None
    return await db.users.find_one({"user_id": session["user_id"]}, {"_id": 0})


async def get_current_user(request: Request, credentials=Depends(security)) -> Dict:
    """
    Extract and validate user from session cookie or JWT token.
    Used as a FastAPI dependency.
    """
    # Check cookie first
    session_token = request.cookies.get("session_token")
    if session_token:
        user = await _user_from_session(session_token)
        if user:
            return user

    # Check Authorization header
    if credentials:
        payload = decode_token(credentials.credentials)
        if payload and payload.get("user_id"):
            user = await db.users.find_one({"user_id": payload["user_id"]}, {"_id": 0})
            if user:
                return user
            # Provider-issued identity without a local profile yet
            return {"user_id": payload["user_id"], "email": payload.get("email")}

    raise HTTPException(status_code=401, detail="Authentication required")
