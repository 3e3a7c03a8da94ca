"""
Plan catalog routes
"""
from fastapi import APIRouter

from models import PlanListResponse
from services.plan_catalog import get_plan_catalog

router = APIRouter(prefix="/plans", tags=["Plans"])


@router.get("", response_model=PlanListResponse)
async def list_plans():
    """Get available subscription plans"""
    return {"plans": list(get_plan_catalog())}
