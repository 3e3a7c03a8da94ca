"""
Pydantic models for checkout and subscription status
"""
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Serialized with camelCase keys, accepts either spelling on input"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


class CheckoutRequest(CamelModel):
    # Presence is checked by the route, not by pydantic, so that a missing
    # field answers with the fixed 400 payload instead of a 422
    plan_type: Optional[str] = None
    user_id: Optional[str] = None
    email: Optional[str] = None

    def has_required_fields(self) -> bool:
        return bool(self.plan_type and self.user_id and self.email)


class CheckoutSessionResponse(CamelModel):
    url: Optional[str] = None
    session_id: str


class SubscriptionInfo(CamelModel):
    subscription_id: Optional[str] = None
    subscription_tier: Optional[str] = None
    plan_name: Optional[str] = None
    status: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    canceled_at: Optional[str] = None


class SubscriptionStatusResponse(CamelModel):
    subscription: Optional[SubscriptionInfo] = None


class ChangePlanRequest(CamelModel):
    new_plan: str = Field(min_length=1)
