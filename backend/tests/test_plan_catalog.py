import pytest
from pydantic import ValidationError

from models.plans import PlanCatalogEntry
from services.plan_catalog import find_current_plan, get_plan_catalog

MONTHLY = PlanCatalogEntry(name="Monthly", amount=10, currency="USD", interval="monthly")
YEARLY = PlanCatalogEntry(name="Yearly", amount=99.99, currency="USD", interval="yearly")
CATALOG = (MONTHLY, YEARLY)


def test_matches_interval():
    assert find_current_plan("monthly", CATALOG) is MONTHLY
    assert find_current_plan("yearly", CATALOG) is YEARLY


@pytest.mark.parametrize("tier", ["weekly", "", None, "Monthly"])
def test_no_match_is_none(tier):
    assert find_current_plan(tier, CATALOG) is None


def test_first_match_wins():
    duplicate = PlanCatalogEntry(name="Monthly (legacy)", amount=8, currency="USD", interval="monthly")
    assert find_current_plan("monthly", (MONTHLY, duplicate)) is MONTHLY


def test_repeated_lookup_is_stable():
    results = {find_current_plan("yearly", CATALOG) for _ in range(3)}
    assert results == {YEARLY}


def test_display_formats():
    assert MONTHLY.display_amount == "10USD"
    assert YEARLY.display_amount == "99.99USD"
    assert YEARLY.option_label == "Yearly - $99.99 / yearly"


def test_entries_are_immutable():
    with pytest.raises(ValidationError):
        MONTHLY.amount = 1


def test_default_catalog():
    intervals = [plan.interval for plan in get_plan_catalog()]
    assert intervals == ["monthly", "yearly"]
    assert find_current_plan("weekly") is None


def test_price_id_not_serialized():
    plan = PlanCatalogEntry(name="Monthly", amount=10, currency="USD", interval="monthly", price_id="price_m")
    assert "price_id" not in plan.model_dump()
