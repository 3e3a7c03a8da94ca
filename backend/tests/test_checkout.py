"""
Checkout endpoint: required-field validation and Stripe handoff
"""
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest
from stripe import StripeError

from models.plans import PlanCatalogEntry
from services.checkout_service import CheckoutService, parse_checkout_request, validate_checkout_request

MISSING_FIELDS = {"error": "Plan type, user id, and email are required."}


@pytest.fixture
def downstream(monkeypatch):
    mock = AsyncMock(return_value={"url": "https://checkout.stripe.test/c/pay", "sessionId": "cs_test_1"})
    monkeypatch.setattr(CheckoutService, "create_checkout_session", mock)
    return mock


@pytest.mark.asyncio
@pytest.mark.parametrize("body", [
    {"planType": "pro"},
    {},
    {"planType": "monthly", "userId": "user_1"},
    {"userId": "user_1", "email": "a@example.com"},
    {"planType": "", "userId": "user_1", "email": "a@example.com"},
    {"planType": "monthly", "userId": None, "email": "a@example.com"},
    ["monthly", "user_1", "a@example.com"],
])
async def test_missing_fields_rejected_without_downstream_call(api_client, downstream, body):
    response = await api_client.post("/api/checkout", json=body)

    assert response.status_code == 400
    assert response.json() == MISSING_FIELDS
    downstream.assert_not_called()


@pytest.mark.asyncio
async def test_empty_body_rejected(api_client, downstream):
    response = await api_client.post("/api/checkout", content=b"")

    assert response.status_code == 400
    assert response.json() == MISSING_FIELDS
    downstream.assert_not_called()


@pytest.mark.asyncio
@pytest.mark.parametrize("body", [
    {"planType": "monthly", "userId": "user_1", "email": "a@example.com"},
    # values are not checked beyond presence
    {"planType": "no-such-plan", "userId": "x", "email": "not-an-email"},
])
async def test_all_fields_present_hands_off(api_client, downstream, body):
    response = await api_client.post("/api/checkout", json=body)

    assert response.status_code == 200
    assert response.json()["sessionId"] == "cs_test_1"
    downstream.assert_awaited_once()
    request = downstream.await_args.args[0]
    assert request.plan_type == body["planType"]
    assert request.user_id == body["userId"]
    assert request.email == body["email"]


@pytest.mark.asyncio
async def test_payment_service_not_configured(api_client, no_stripe):
    response = await api_client.post(
        "/api/checkout", json={"planType": "monthly", "userId": "user_1", "email": "a@example.com"}
    )

    assert response.status_code == 503
    assert response.json() == {"error": "Payment service not configured"}


def _fake_stripe():
    stripe = MagicMock()
    stripe.checkout.Session.create.return_value = SimpleNamespace(
        id="cs_live_9", url="https://checkout.stripe.test/c/pay/cs_live_9"
    )
    return stripe


@pytest.mark.asyncio
async def test_unknown_plan_rejected_by_collaborator(api_client, monkeypatch):
    monkeypatch.setattr("services.checkout_service.get_stripe", _fake_stripe)

    response = await api_client.post(
        "/api/checkout", json={"planType": "weekly", "userId": "user_1", "email": "a@example.com"}
    )

    assert response.status_code == 400
    assert response.json() == {"error": "Invalid plan"}


@pytest.mark.asyncio
async def test_creates_stripe_subscription_session(api_client, monkeypatch):
    stripe = _fake_stripe()
    plan = PlanCatalogEntry(name="Monthly Plan", amount=9.99, currency="USD", interval="monthly", price_id="price_m")
    monkeypatch.setattr("services.checkout_service.get_stripe", lambda: stripe)
    monkeypatch.setattr("services.checkout_service.find_current_plan", lambda interval: plan)

    response = await api_client.post(
        "/api/checkout", json={"planType": "monthly", "userId": "user_1", "email": "a@example.com"}
    )

    assert response.status_code == 200
    assert response.json() == {"url": "https://checkout.stripe.test/c/pay/cs_live_9", "sessionId": "cs_live_9"}
    kwargs = stripe.checkout.Session.create.call_args.kwargs
    assert kwargs["mode"] == "subscription"
    assert kwargs["line_items"] == [{"price": "price_m", "quantity": 1}]
    assert kwargs["customer_email"] == "a@example.com"
    assert kwargs["metadata"] == {"user_id": "user_1", "plan_type": "monthly"}


@pytest.mark.asyncio
async def test_stripe_failure_maps_to_500(api_client, monkeypatch):
    stripe = _fake_stripe()
    stripe.checkout.Session.create.side_effect = StripeError("card network down")
    plan = PlanCatalogEntry(name="Yearly Plan", amount=99.99, currency="USD", interval="yearly", price_id="price_y")
    monkeypatch.setattr("services.checkout_service.get_stripe", lambda: stripe)
    monkeypatch.setattr("services.checkout_service.find_current_plan", lambda interval: plan)

    response = await api_client.post(
        "/api/checkout", json={"planType": "yearly", "userId": "user_1", "email": "a@example.com"}
    )

    assert response.status_code == 500
    assert response.json() == {"error": "Failed to create checkout session"}


def test_validator_is_presence_only():
    assert validate_checkout_request(parse_checkout_request(
        {"planType": "?", "userId": "?", "email": "?"}
    )) is None
    assert validate_checkout_request(parse_checkout_request({"planType": "pro"})) == MISSING_FIELDS
    assert validate_checkout_request(parse_checkout_request("not an object")) == MISSING_FIELDS


@pytest.mark.asyncio
async def test_webhook_activates_subscription(api_client, fake_db, monkeypatch):
    stripe = MagicMock()
    stripe.Webhook.construct_event.return_value = {
        "type": "checkout.session.completed",
        "data": {"object": {
            "metadata": {"user_id": "user_42", "plan_type": "yearly"},
            "subscription": "sub_stripe_1",
        }},
    }
    monkeypatch.setattr("services.checkout_service.get_stripe", lambda: stripe)
    monkeypatch.setattr("services.checkout_service.STRIPE_WEBHOOK_SECRET", "whsec_test")

    response = await api_client.post(
        "/api/checkout/webhook", content=b"{}", headers={"Stripe-Signature": "t=1,v1=abc"}
    )

    assert response.status_code == 200
    stored = await fake_db.subscriptions.find_one({"user_id": "user_42", "status": "active"})
    assert stored["subscription_tier"] == "yearly"
    assert stored["stripe_subscription_id"] == "sub_stripe_1"


@pytest.mark.asyncio
async def test_webhook_rejects_bad_payload(api_client, monkeypatch):
    stripe = MagicMock()
    stripe.Webhook.construct_event.side_effect = ValueError("bad json")
    monkeypatch.setattr("services.checkout_service.get_stripe", lambda: stripe)
    monkeypatch.setattr("services.checkout_service.STRIPE_WEBHOOK_SECRET", "whsec_test")

    response = await api_client.post("/api/checkout/webhook", content=b"nope")

    assert response.status_code == 400
    assert response.json() == {"detail": "Invalid payload"}
