"""
Plan gate helpers.

The account's plan is a flat status string on its profile. Instead of
each screen polling it, routers declare the statuses they accept and the
dependency below resolves the caller's profile explicitly per request.
"""

from __future__ import annotations

from typing import Callable, Iterable, Optional, Set, Union

from fastapi import Depends, HTTPException, status
from sqlalchemy.orm import Session

from showdb.apps.accounts import models as account_models
from showdb.apps.accounts import services as account_services

from .database import get_db
from .security import get_current_active_user

ADVANCED_PLAN_STATUSES = (
    account_models.SubscriptionStatus.ADVANCED,
    account_models.SubscriptionStatus.TRIAL,
)


def _normalise(statuses: Iterable[Union[account_models.SubscriptionStatus, str]]) -> Set[str]:
    normalised: Set[str] = set()
    for value in statuses:
        if isinstance(value, account_models.SubscriptionStatus):
            normalised.add(value.value)
        else:
            try:
                normalised.add(account_models.SubscriptionStatus(value).value)
            except ValueError:
                raise ValueError(f"Unknown subscription status {value!r} passed to require_plan()")
    return normalised


def plan_allows(status_value: Optional[str], allowed: Set[str]) -> bool:
    if not status_value:
        return False
    return status_value.strip().lower() in allowed


def require_plan(
    *allowed_statuses: Union[account_models.SubscriptionStatus, str],
) -> Callable[[account_models.User, Session], account_models.User]:
    """
    FastAPI dependency that blocks access when the caller's plan status
    is not one of `allowed_statuses`.

    Usage:
        router = APIRouter(
            prefix="/calendar",
            dependencies=[Depends(require_plan(*ADVANCED_PLAN_STATUSES))],
        )
    """
    allowed = _normalise(allowed_statuses)

    def dependency(
        current_user: account_models.User = Depends(get_current_active_user),
        db: Session = Depends(get_db),
    ) -> account_models.User:
        # Admins can always reach gated features for support.
        if getattr(current_user, "is_admin", False):
            return current_user

        status_value = account_services.subscription_status(db, current_user.id)
        if not plan_allows(status_value, allowed):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="This feature is not included in your current plan.",
            )
        return current_user

    return dependency
