"""
Profile routes - subscription status, plan changes and cancellation
"""
from typing import Dict

from fastapi import APIRouter, Depends, HTTPException

from models import ChangePlanRequest, SubscriptionStatusResponse
from services.subscription_service import (
    BillingProviderError,
    InvalidPlanError,
    SubscriptionNotFoundError,
    SubscriptionService,
)
from utils.auth import get_current_user
from utils.config import RATE_LIMIT_MAX_MUTATIONS
from utils.rate_limiter import rate_limit

router = APIRouter(prefix="/profile", tags=["Profile"])


@router.get("/subscription-status", response_model=SubscriptionStatusResponse)
async def get_subscription_status(user: Dict = Depends(get_current_user)):
    """Get the user's current subscription, or null when there is none"""
    return await SubscriptionService.get_subscription_status(user["user_id"])


@router.post("/change-plan", dependencies=[Depends(rate_limit("change-plan", RATE_LIMIT_MAX_MUTATIONS))])
async def change_plan(data: ChangePlanRequest, user: Dict = Depends(get_current_user)):
    """Move the active subscription to another catalog plan"""
    try:
        subscription = await SubscriptionService.change_plan(user["user_id"], data.new_plan)
    except InvalidPlanError:
        raise HTTPException(status_code=400, detail="Invalid plan")
    except SubscriptionNotFoundError:
        raise HTTPException(status_code=404, detail="No active subscription")
    except BillingProviderError:
        raise HTTPException(status_code=502, detail="Failed to update subscription with payment provider")

    return {"subscription": SubscriptionService.to_response(subscription)}


@router.post("/unsubscribe", dependencies=[Depends(rate_limit("unsubscribe", RATE_LIMIT_MAX_MUTATIONS))])
async def unsubscribe(user: Dict = Depends(get_current_user)):
    """Cancel the active subscription"""
    try:
        subscription = await SubscriptionService.unsubscribe(user["user_id"])
    except SubscriptionNotFoundError:
        raise HTTPException(status_code=404, detail="No active subscription")
    except BillingProviderError:
        raise HTTPException(status_code=502, detail="Failed to cancel subscription with payment provider")

    return {"subscription": SubscriptionService.to_response(subscription)}
