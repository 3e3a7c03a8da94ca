"""
View-model controller for the subscription section of the profile page.

Owns the status query, the plan selection and the two mutations (change
plan, unsubscribe). Rendering is left to ``client.view``.
"""
import asyncio
import logging
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable, Optional, Set

from models.plans import PlanCatalogEntry
from services.plan_catalog import PLAN_CATALOG, find_current_plan
from utils.config import (
    SUBSCRIBE_PATH,
    SUBSCRIPTION_CACHE_KEY,
    SUBSCRIPTION_STALE_SECONDS,
    UNSUBSCRIBE_CONFIRM_MESSAGE,
)

from .api import ApiError, BillingApiClient
from .auth import AuthState
from .notifications import Navigator, Notifier
from .query_cache import QueryCache

logger = logging.getLogger(__name__)

PLAN_UPDATED_MESSAGE = "Subscription plan updated successfully!"
PLAN_UPDATE_FAILED_MESSAGE = "Error updating plan."
UNSUBSCRIBE_FAILED_MESSAGE = "Error unsubscribing."


class StatusState(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    LOADED = "loaded"
    ERROR = "error"


class MutationStatus(str, Enum):
    IDLE = "idle"
    PENDING = "pending"
    SUCCESS = "success"
    ERROR = "error"


@dataclass
class MutationState:
    status: MutationStatus = MutationStatus.IDLE
    last_result: Any = None
    last_error: Optional[Exception] = None

    @property
    def pending(self) -> bool:
        return self.status is MutationStatus.PENDING

    def start(self) -> None:
        self.status = MutationStatus.PENDING
        self.last_result = None
        self.last_error = None

    def succeed(self, result: Any) -> None:
        self.status = MutationStatus.SUCCESS
        self.last_result = result

    def fail(self, error: Exception) -> None:
        self.status = MutationStatus.ERROR
        self.last_error = error


@dataclass(frozen=True)
class PendingConfirmation:
    """Asks the user to confirm cancelling; confirm or drop it"""
    message: str
    token: str = field(default_factory=lambda: uuid.uuid4().hex)


class ConfirmationError(ValueError):
    """The confirmation token is unknown, declined or already used"""


class SubscriptionController:

    def __init__(
        self,
        auth: AuthState,
        api: BillingApiClient,
        cache: Optional[QueryCache] = None,
        notifier: Optional[Notifier] = None,
        navigator: Optional[Navigator] = None,
        catalog: Iterable[PlanCatalogEntry] = PLAN_CATALOG,
        stale_time: float = SUBSCRIPTION_STALE_SECONDS,
        cache_key: str = SUBSCRIPTION_CACHE_KEY,
    ):
        self.auth = auth
        self.api = api
        self.cache = cache if cache is not None else QueryCache()
        self.notifier = notifier if notifier is not None else Notifier()
        self.navigator = navigator if navigator is not None else Navigator()
        self.catalog = tuple(catalog)
        self.stale_time = stale_time
        self.cache_key = cache_key

        self.status_state = StatusState.IDLE
        self.data: Optional[dict] = None
        self.error: Optional[Exception] = None
        self.selected_plan = ""
        self.change_plan_state = MutationState()
        self.unsubscribe_state = MutationState()

        self._confirmations: Set[str] = set()
        self._tasks: Set[asyncio.Task] = set()
        self._unsubscribe_listener = None
        self._unmounted = False

    # ---- lifecycle ----

    @property
    def enabled(self) -> bool:
        """The status query only runs for a loaded, signed-in user"""
        return self.auth.is_loaded and self.auth.is_signed_in

    async def mount(self) -> None:
        self._unmounted = False
        if self._unsubscribe_listener is None:
            self._unsubscribe_listener = self.cache.subscribe(self.cache_key, self._on_cache_update)
        if self.enabled:
            await self.fetch_subscription_status()

    def unmount(self) -> None:
        """Stop applying results; requests already in flight are left to finish"""
        self._unmounted = True
        if self._unsubscribe_listener is not None:
            self._unsubscribe_listener()
            self._unsubscribe_listener = None

    async def set_auth(self, auth: AuthState) -> None:
        was_enabled = self.enabled
        self.auth = auth
        if self.enabled and not was_enabled:
            await self.fetch_subscription_status()

    def _on_cache_update(self, value: Any) -> None:
        if not self._unmounted:
            self._apply(value)

    def _apply(self, value: Any) -> None:
        self.data = value
        self.error = None
        self.status_state = StatusState.LOADED

    # ---- status query ----

    async def fetch_subscription_status(self) -> Optional[dict]:
        if not self.enabled:
            return None
        if self.data is None:
            self.status_state = StatusState.LOADING
        return await self._load(
            self.cache.get_or_fetch(self.cache_key, self.api.fetch_subscription_status, self.stale_time)
        )

    async def refetch(self) -> Optional[dict]:
        """Fetch regardless of staleness"""
        if not self.enabled:
            return None
        return await self._load(self.cache.fetch(self.cache_key, self.api.fetch_subscription_status))

    async def _load(self, pending) -> Optional[dict]:
        try:
            value = await pending
        except ApiError as exc:
            logger.warning("Subscription status fetch failed: %s", exc)
            if not self._unmounted:
                self.error = exc
                self.status_state = StatusState.ERROR
            return None
        if not self._unmounted:
            self._apply(value)
        return value

    @property
    def is_loading(self) -> bool:
        return self.enabled and self.status_state in (StatusState.IDLE, StatusState.LOADING)

    @property
    def subscription(self) -> Optional[dict]:
        if not isinstance(self.data, dict):
            return None
        return self.data.get("subscription")

    @property
    def current_plan(self) -> Optional[PlanCatalogEntry]:
        subscription = self.subscription or {}
        return find_current_plan(subscription.get("subscriptionTier"), self.catalog)

    # ---- change plan ----

    def select_plan(self, interval: str) -> None:
        # The selector is disabled while a change is pending
        if not self.change_plan_state.pending:
            self.selected_plan = interval

    async def change_plan(self, new_plan: str) -> Any:
        if not new_plan:
            return None

        self.change_plan_state.start()
        try:
            result = await self.api.update_plan(new_plan)
        except ApiError as exc:
            self.change_plan_state.fail(exc)
            self.notifier.error(PLAN_UPDATE_FAILED_MESSAGE)
            return None

        self.change_plan_state.succeed(result)
        self.cache.invalidate(self.cache_key)
        self.notifier.success(PLAN_UPDATED_MESSAGE)
        await self.refetch()
        return result

    def submit_plan_change(self) -> Optional[asyncio.Task]:
        """
        Start changing to the selected plan and clear the selection at once,
        before the change resolves. Returns the running task, or None when
        nothing was selected.
        """
        selected = self.selected_plan
        task = None
        if selected:
            task = self._spawn(self.change_plan(selected))
        self.selected_plan = ""
        return task

    # ---- unsubscribe ----

    def request_unsubscribe(self) -> Optional[PendingConfirmation]:
        """First phase: returns the prompt to show, or None while a cancel is pending"""
        if self.unsubscribe_state.pending:
            return None
        confirmation = PendingConfirmation(UNSUBSCRIBE_CONFIRM_MESSAGE)
        self._confirmations.add(confirmation.token)
        return confirmation

    def decline_unsubscribe(self, confirmation: PendingConfirmation) -> None:
        self._confirmations.discard(confirmation.token)

    async def confirm_unsubscribe(self, confirmation: PendingConfirmation) -> Any:
        if confirmation.token not in self._confirmations:
            raise ConfirmationError("Unsubscribe confirmation is not pending")
        self._confirmations.discard(confirmation.token)

        self.unsubscribe_state.start()
        try:
            result = await self.api.unsubscribe()
        except ApiError as exc:
            self.unsubscribe_state.fail(exc)
            self.notifier.error(UNSUBSCRIBE_FAILED_MESSAGE)
            return None

        self.unsubscribe_state.succeed(result)
        self.cache.invalidate(self.cache_key)
        self.navigator.push(SUBSCRIBE_PATH)
        return result

    def _spawn(self, coro) -> asyncio.Task:
        task = asyncio.ensure_future(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task
