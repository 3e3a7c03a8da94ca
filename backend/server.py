"""
PlanDesk API - Main Application Entry Point
Subscription checkout and profile billing endpoints.
"""
import os
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from starlette.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware

from routes import create_api_router
from utils.config import CORS_ORIGINS

logger = logging.getLogger(__name__)


# ============== SECURITY MIDDLEWARE ==============

class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add security headers to all responses"""

    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        response.headers["Permissions-Policy"] = "geolocation=(), microphone=(), camera=()"
        if "server" in response.headers:
            del response.headers["server"]
        return response


# ============== LIFECYCLE ==============

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create indexes on startup, close the Mongo client on shutdown"""
    from utils.database import client, setup_database_indexes

    await setup_database_indexes()
    logger.info("Database indexes initialized")
    yield
    client.close()


# ============== APPLICATION SETUP ==============

def create_app() -> FastAPI:
    """Create and configure the FastAPI application"""

    enable_docs = os.environ.get("ENABLE_DOCS", "false").lower() == "true"

    app = FastAPI(
        title="PlanDesk API",
        version="1.0.0",
        docs_url="/api/docs" if enable_docs else None,
        redoc_url=None,
        openapi_url="/api/openapi.json" if enable_docs else None,
        lifespan=lifespan,
    )

    app.add_middleware(SecurityHeadersMiddleware)

    app.add_middleware(
        CORSMiddleware,
        allow_credentials=True,
        allow_origins=CORS_ORIGINS,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", "Stripe-Signature"],
    )

    app.include_router(create_api_router())

    return app


# ============== LOGGING SETUP ==============

def setup_logging():
    """Configure application logging"""
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s'
    )
    # Don't log sensitive data
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


# ============== CREATE APP INSTANCE ==============

setup_logging()
app = create_app()
