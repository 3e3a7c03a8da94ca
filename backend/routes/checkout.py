"""
Checkout routes - request validation and Stripe handoff
"""
import json
import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse

from models import CheckoutSessionResponse
from services.checkout_service import (
    CheckoutError,
    CheckoutService,
    PaymentServiceUnavailable,
    WebhookVerificationError,
    parse_checkout_request,
    validate_checkout_request,
)
from services.subscription_service import InvalidPlanError
from utils.config import RATE_LIMIT_MAX_CHECKOUT
from utils.rate_limiter import rate_limit

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/checkout", tags=["Checkout"])


@router.post(
    "",
    response_model=CheckoutSessionResponse,
    dependencies=[Depends(rate_limit("checkout", RATE_LIMIT_MAX_CHECKOUT))],
)
async def create_checkout(request: Request):
    """Validate a plan purchase request, then create a checkout session"""
    try:
        body = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        body = None

    data = parse_checkout_request(body)
    error = validate_checkout_request(data)
    if error:
        return JSONResponse(error, status_code=400)

    try:
        return await CheckoutService.create_checkout_session(data)
    except PaymentServiceUnavailable:
        return JSONResponse({"error": "Payment service not configured"}, status_code=503)
    except InvalidPlanError:
        return JSONResponse({"error": "Invalid plan"}, status_code=400)
    except CheckoutError:
        return JSONResponse({"error": "Failed to create checkout session"}, status_code=500)


@router.post("/webhook")
async def stripe_webhook(request: Request):
    """Handle Stripe webhooks"""
    payload = await request.body()
    sig_header = request.headers.get("Stripe-Signature")

    try:
        event_type = await CheckoutService.handle_webhook(payload, sig_header)
    except PaymentServiceUnavailable:
        raise HTTPException(status_code=503, detail="Webhook not configured")
    except WebhookVerificationError as exc:
        raise HTTPException(status_code=400, detail=str(exc))

    logger.info("Processed Stripe event %s", event_type)
    return {"status": "success"}
