"""
Static plan catalog and current-plan lookup
"""
from typing import Iterable, Optional, Tuple

from models.plans import PlanCatalogEntry
from utils.config import AVAILABLE_PLANS

PLAN_CATALOG: Tuple[PlanCatalogEntry, ...] = tuple(
    PlanCatalogEntry(**plan) for plan in AVAILABLE_PLANS
)


def get_plan_catalog() -> Tuple[PlanCatalogEntry, ...]:
    """Return the plans a user can subscribe to"""
    return PLAN_CATALOG


def find_current_plan(
    subscription_tier: Optional[str],
    catalog: Iterable[PlanCatalogEntry] = PLAN_CATALOG,
) -> Optional[PlanCatalogEntry]:
    """First catalog entry whose interval equals the subscription tier, or None"""
    if not subscription_tier:
        return None
    for plan in catalog:
        if plan.interval == subscription_tier:
            return plan
    return None
