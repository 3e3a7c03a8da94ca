"""
HTTP client for the profile billing endpoints
"""
import logging
from typing import Any, Optional

import httpx

from utils.config import API_BASE_URL, CLIENT_TIMEOUT_SECONDS

logger = logging.getLogger(__name__)

SUBSCRIPTION_STATUS_PATH = "/api/profile/subscription-status"
CHANGE_PLAN_PATH = "/api/profile/change-plan"
UNSUBSCRIBE_PATH = "/api/profile/unsubscribe"


class ApiError(Exception):
    """A billing API call failed, either in transport or with an error status"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        for key in ("error", "detail"):
            if isinstance(body.get(key), str):
                return body[key]
    return f"Request failed with status code {response.status_code}"


class BillingApiClient:
    """
    Thin async wrapper over the three profile endpoints.

    Authentication travels with the underlying ``httpx.AsyncClient`` (bearer
    header or session cookie); pass a preconfigured client to control it.
    """

    def __init__(
        self,
        base_url: str = API_BASE_URL,
        token: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = CLIENT_TIMEOUT_SECONDS,
    ):
        if client is None:
            headers = {"Authorization": f"Bearer {token}"} if token else {}
            client = httpx.AsyncClient(base_url=base_url, headers=headers, timeout=timeout)
        self._client = client

    async def __aenter__(self) -> "BillingApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, path: str, **kwargs) -> Any:
        try:
            response = await self._client.request(method, path, **kwargs)
        except httpx.HTTPError as exc:
            logger.warning("%s %s failed: %s", method, path, exc)
            raise ApiError(str(exc) or exc.__class__.__name__) from exc

        if response.is_error:
            raise ApiError(_error_message(response), response.status_code)

        try:
            return response.json()
        except ValueError as exc:
            raise ApiError("Invalid JSON response", response.status_code) from exc

    async def fetch_subscription_status(self) -> dict:
        return await self._request("GET", SUBSCRIPTION_STATUS_PATH)

    async def update_plan(self, new_plan: str) -> Any:
        return await self._request("POST", CHANGE_PLAN_PATH, json={"newPlan": new_plan})

    async def unsubscribe(self) -> Any:
        return await self._request(
            "POST", UNSUBSCRIBE_PATH, headers={"Content-Type": "application/json"}
        )
