"""
Checkout service: request validation and Stripe session creation
"""
import logging
from typing import Any, Optional

from fastapi.concurrency import run_in_threadpool
from stripe import SignatureVerificationError, StripeError

from models.payments import CheckoutRequest, CheckoutSessionResponse
from services.plan_catalog import find_current_plan
from services.stripe_client import get_stripe
from services.subscription_service import InvalidPlanError, SubscriptionService
from utils.config import APP_BASE_URL, CHECKOUT_MISSING_FIELDS_ERROR, STRIPE_WEBHOOK_SECRET

logger = logging.getLogger(__name__)


class PaymentServiceUnavailable(RuntimeError):
    """Stripe is not configured"""


class CheckoutError(RuntimeError):
    """Stripe refused to create the session"""


class WebhookVerificationError(ValueError):
    """Webhook payload or signature could not be verified"""


def parse_checkout_request(body: Any) -> CheckoutRequest:
    """Build a checkout request from a decoded JSON body; non-objects carry no fields"""
    if not isinstance(body, dict):
        return CheckoutRequest()
    return CheckoutRequest(
        plan_type=_as_text(body.get("planType")),
        user_id=_as_text(body.get("userId")),
        email=_as_text(body.get("email")),
    )


def _as_text(value: Any) -> Optional[str]:
    if not value:
        return None
    return str(value)


def validate_checkout_request(data: CheckoutRequest) -> Optional[dict]:
    """
    Presence check only. Returns the error payload when a field is missing,
    None when the request may be handed to the checkout collaborator.
    """
    if not data.has_required_fields():
        return {"error": CHECKOUT_MISSING_FIELDS_ERROR}
    return None


class CheckoutService:
    """Hands validated checkout requests to Stripe"""

    @staticmethod
    async def create_checkout_session(data: CheckoutRequest) -> CheckoutSessionResponse:
        stripe = get_stripe()
        if not stripe:
            raise PaymentServiceUnavailable()

        plan = find_current_plan(data.plan_type)
        if plan is None or not plan.price_id:
            raise InvalidPlanError(data.plan_type)

        try:
            session = await run_in_threadpool(
                stripe.checkout.Session.create,
                mode="subscription",
                line_items=[{"price": plan.price_id, "quantity": 1}],
                customer_email=data.email,
                client_reference_id=data.user_id,
                metadata={"user_id": data.user_id, "plan_type": plan.interval},
                success_url=f"{APP_BASE_URL}/profile?session_id={{CHECKOUT_SESSION_ID}}",
                cancel_url=f"{APP_BASE_URL}/subscribe",
            )
        except StripeError as exc:
            logger.exception("Stripe checkout session failed")
            raise CheckoutError(str(exc)) from exc

        logger.info("Stripe checkout session created for user %s", data.user_id)
        return CheckoutSessionResponse(url=session.url, session_id=session.id)

    @staticmethod
    async def handle_webhook(payload: bytes, sig_header: Optional[str]) -> str:
        """Apply a Stripe event to stored subscriptions; returns the event type"""
        stripe = get_stripe()
        if not stripe or not STRIPE_WEBHOOK_SECRET:
            raise PaymentServiceUnavailable()

        try:
            event = stripe.Webhook.construct_event(payload, sig_header, STRIPE_WEBHOOK_SECRET)
        except ValueError as exc:
            raise WebhookVerificationError("Invalid payload") from exc
        except SignatureVerificationError as exc:
            raise WebhookVerificationError("Invalid signature") from exc

        event_type = event["type"]
        obj = event["data"]["object"]
        if event_type == "checkout.session.completed":
            metadata = obj.get("metadata") or {}
            user_id = metadata.get("user_id") or obj.get("client_reference_id")
            if user_id and metadata.get("plan_type"):
                await SubscriptionService.activate_subscription(
                    user_id, metadata["plan_type"], obj.get("subscription")
                )
        elif event_type == "customer.subscription.deleted":
            await SubscriptionService.cancel_by_stripe_id(obj["id"])
        else:
            logger.debug("Ignoring Stripe event %s", event_type)
        return event_type
