"""
Subscription service: status, plan changes and cancellation
"""
import logging
from typing import Optional

from fastapi.concurrency import run_in_threadpool
from stripe import StripeError

from models.payments import SubscriptionInfo
from services.plan_catalog import find_current_plan
from services.stripe_client import get_stripe
from utils import generate_id, utc_now_iso
from utils.database import db

logger = logging.getLogger(__name__)


class SubscriptionNotFoundError(LookupError):
    """The user has no active subscription"""


class InvalidPlanError(ValueError):
    """The requested plan is not in the catalog"""


class BillingProviderError(RuntimeError):
    """Stripe rejected or could not apply a subscription update"""


class SubscriptionService:
    """Service for subscription operations"""

    @staticmethod
    async def get_active_subscription(user_id: str) -> Optional[dict]:
        return await db.subscriptions.find_one(
            {"user_id": user_id, "status": "active"},
            {"_id": 0}
        )

    @staticmethod
    def to_response(subscription: Optional[dict]) -> Optional[dict]:
        """Serialize a stored subscription the way the profile page reads it"""
        if not subscription:
            return None
        info = SubscriptionInfo(**subscription)
        return info.model_dump(by_alias=True, exclude_none=True)

    @staticmethod
    async def get_subscription_status(user_id: str) -> dict:
        subscription = await SubscriptionService.get_active_subscription(user_id)
        return {"subscription": SubscriptionService.to_response(subscription)}

    @staticmethod
    async def activate_subscription(
        user_id: str,
        subscription_tier: str,
        stripe_subscription_id: Optional[str] = None,
    ) -> dict:
        """Record a paid subscription, replacing any active one"""
        plan = find_current_plan(subscription_tier)
        if plan is None:
            raise InvalidPlanError(subscription_tier)

        now = utc_now_iso()
        await db.subscriptions.update_many(
            {"user_id": user_id, "status": "active"},
            {"$set": {"status": "replaced", "updated_at": now}}
        )
        subscription = {
            "subscription_id": generate_id("sub_"),
            "user_id": user_id,
            "subscription_tier": plan.interval,
            "plan_name": plan.name,
            "status": "active",
            "stripe_subscription_id": stripe_subscription_id,
            "created_at": now,
            "updated_at": now,
        }
        await db.subscriptions.insert_one(dict(subscription))
        logger.info("Activated %s subscription for user %s", plan.interval, user_id)
        return subscription

    @staticmethod
    async def change_plan(user_id: str, new_plan: str) -> dict:
        plan = find_current_plan(new_plan)
        if plan is None:
            raise InvalidPlanError(new_plan)

        subscription = await SubscriptionService.get_active_subscription(user_id)
        if not subscription:
            raise SubscriptionNotFoundError(user_id)

        stripe = get_stripe()
        stripe_subscription_id = subscription.get("stripe_subscription_id")
        if stripe and stripe_subscription_id and plan.price_id:
            await SubscriptionService._change_stripe_price(stripe, stripe_subscription_id, plan.price_id)

        updates = {
            "subscription_tier": plan.interval,
            "plan_name": plan.name,
            "updated_at": utc_now_iso(),
        }
        await db.subscriptions.update_one(
            {"subscription_id": subscription["subscription_id"]},
            {"$set": updates}
        )
        logger.info("User %s changed plan to %s", user_id, plan.interval)
        return {**subscription, **updates}

    @staticmethod
    async def _change_stripe_price(stripe, stripe_subscription_id: str, price_id: str) -> None:
        try:
            remote = await run_in_threadpool(stripe.Subscription.retrieve, stripe_subscription_id)
            items = remote["items"]["data"]
            if not items:
                logger.error("Stripe subscription %s has no items", stripe_subscription_id)
                raise BillingProviderError(f"Stripe subscription {stripe_subscription_id} has no items")
            await run_in_threadpool(
                stripe.Subscription.modify,
                stripe_subscription_id,
                items=[{"id": items[0]["id"], "price": price_id}],
                proration_behavior="create_prorations",
            )
        except StripeError as exc:
            logger.exception("Stripe plan change failed for %s", stripe_subscription_id)
            raise BillingProviderError(str(exc)) from exc

    @staticmethod
    async def unsubscribe(user_id: str) -> dict:
        subscription = await SubscriptionService.get_active_subscription(user_id)
        if not subscription:
            raise SubscriptionNotFoundError(user_id)

        stripe = get_stripe()
        stripe_subscription_id = subscription.get("stripe_subscription_id")
        if stripe and stripe_subscription_id:
            try:
                await run_in_threadpool(stripe.Subscription.cancel, stripe_subscription_id)
            except StripeError as exc:
                logger.exception("Stripe cancellation failed for %s", stripe_subscription_id)
                raise BillingProviderError(str(exc)) from exc

        now = utc_now_iso()
        updates = {"status": "canceled", "canceled_at": now, "updated_at": now}
        await db.subscriptions.update_one(
            {"subscription_id": subscription["subscription_id"]},
            {"$set": updates}
        )
        logger.info("User %s unsubscribed", user_id)
        return {**subscription, **updates}

    @staticmethod
    async def cancel_by_stripe_id(stripe_subscription_id: str) -> bool:
        """Mark a subscription canceled after Stripe ended it"""
        now = utc_now_iso()
        result = await db.subscriptions.update_one(
            {"stripe_subscription_id": stripe_subscription_id, "status": "active"},
            {"$set": {"status": "canceled", "canceled_at": now, "updated_at": now}}
        )
        return result.modified_count > 0
