"""
In-process stand-in for the profile billing endpoints, served through httpx.MockTransport
"""
import asyncio
import json
from typing import List, Optional, Set, Tuple

import httpx

from client import AuthState, BillingApiClient, QueryCache, SubscriptionController, UserProfile
from models.plans import PlanCatalogEntry

STATUS = "/api/profile/subscription-status"
CHANGE = "/api/profile/change-plan"
UNSUBSCRIBE = "/api/profile/unsubscribe"

CATALOG = (
    PlanCatalogEntry(name="Monthly", amount=10, currency="USD", interval="monthly"),
    PlanCatalogEntry(name="Yearly", amount=100, currency="USD", interval="yearly"),
)

ADA = UserProfile(user_id="user_test01", first_name="Ada", last_name="Lovelace", email="ada@example.com")
SIGNED_IN = AuthState.signed_in(ADA)


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


class FakeBilling:
    def __init__(self, tier: Optional[str] = "monthly"):
        self.tier = tier
        self.requests: List[Tuple[str, str]] = []
        self.failing: Set[str] = set()
        self.gate: Optional[asyncio.Event] = None
        # Holds the next status response, already computed, until set
        self.hold_status: Optional[asyncio.Event] = None

    def count(self, method: str, path: str) -> int:
        return self.requests.count((method, path))

    def _subscription(self, status: str = "active") -> Optional[dict]:
        if self.tier is None:
            return None
        return {"subscriptionTier": self.tier, "status": status}

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        self.requests.append((request.method, path))
        if self.gate is not None:
            await self.gate.wait()
        if path in self.failing:
            return httpx.Response(500, json={"error": "Billing backend unavailable"})
        if path == STATUS:
            response = httpx.Response(200, json={"subscription": self._subscription()})
            hold, self.hold_status = self.hold_status, None
            if hold is not None:
                await hold.wait()
            return response
        if path == CHANGE:
            self.tier = json.loads(request.content)["newPlan"]
            return httpx.Response(200, json={"subscription": self._subscription()})
        if path == UNSUBSCRIBE:
            canceled = self._subscription("canceled")
            self.tier = None
            return httpx.Response(200, json={"subscription": canceled})
        return httpx.Response(404, json={"detail": "Not Found"})


def make_controller(backend: FakeBilling, auth: AuthState = SIGNED_IN, cache: QueryCache = None,
                    clock: FakeClock = None) -> SubscriptionController:
    api = BillingApiClient(client=httpx.AsyncClient(
        transport=httpx.MockTransport(backend), base_url="http://test"
    ))
    if cache is None:
        cache = QueryCache(clock or FakeClock())
    return SubscriptionController(auth, api, cache=cache, catalog=CATALOG)
