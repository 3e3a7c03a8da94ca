"""
Maps controller state to what the profile page displays
"""
from dataclasses import dataclass, field
from typing import List, Optional

from .controller import SubscriptionController

LOADING_LABEL = "Loading..."
SIGN_IN_PROMPT = "Please sign in to view your profile."
LOADING_DETAILS_LABEL = "Loading subscription details..."
PLAN_NOT_FOUND = "Current Plan not Found."
NOT_SUBSCRIBED = "You are not subscribed to any plan."
ACTIVE_STATUS = "ACTIVE"
PLAN_PLACEHOLDER = "Select a New Plan"
UPDATING_PLAN_LABEL = "Updating Plan..."


@dataclass
class ProfileView:
    kind: str
    spinner: bool = False
    message: Optional[str] = None
    header: List[str] = field(default_factory=list)
    plan_details: List[str] = field(default_factory=list)
    plan_options: List[str] = field(default_factory=list)
    selector_disabled: bool = False
    updating_plan: bool = False
    unsubscribe_label: Optional[str] = None
    unsubscribe_disabled: bool = False

    def lines(self) -> List[str]:
        """Flattened text, top to bottom"""
        out = list(self.header)
        if self.message:
            out.append(self.message)
        out.extend(self.plan_details)
        if self.plan_options:
            out.append(PLAN_PLACEHOLDER)
            out.extend(self.plan_options)
        if self.updating_plan:
            out.append(UPDATING_PLAN_LABEL)
        if self.unsubscribe_label:
            out.append(self.unsubscribe_label)
        return out


def _header(controller: SubscriptionController) -> List[str]:
    user = controller.auth.user
    if user is None:
        return []
    lines = [user.full_name] if user.full_name else []
    if user.email:
        lines.append(user.email)
    return lines


def render_profile(controller: SubscriptionController) -> ProfileView:
    auth = controller.auth
    if not auth.is_loaded:
        return ProfileView("auth_loading", spinner=True, message=LOADING_LABEL)
    if not auth.is_signed_in:
        return ProfileView("signed_out", message=SIGN_IN_PROMPT)

    header = _header(controller)
    if controller.is_loading:
        return ProfileView("status_loading", spinner=True, message=LOADING_DETAILS_LABEL, header=header)
    if controller.error is not None:
        return ProfileView("error", message=str(controller.error), header=header)
    if not controller.subscription:
        return ProfileView("not_subscribed", message=NOT_SUBSCRIBED, header=header)

    unsubscribing = controller.unsubscribe_state.pending
    view = ProfileView(
        "plan",
        header=header,
        plan_options=[plan.option_label for plan in controller.catalog],
        selector_disabled=controller.change_plan_state.pending,
        updating_plan=controller.change_plan_state.pending,
        unsubscribe_label="Unsubscribing..." if unsubscribing else "Unsubscribe",
        unsubscribe_disabled=unsubscribing,
    )

    plan = controller.current_plan
    if plan is None:
        view.kind = "plan_not_found"
        view.message = PLAN_NOT_FOUND
    else:
        view.plan_details = [
            f"Plan: {plan.name}",
            f"Amount: {plan.display_amount}",
            f"Status: {ACTIVE_STATUS}",
        ]
    return view
