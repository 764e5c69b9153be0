"""User status normalization and lifecycle transitions."""
from __future__ import annotations
import logging
import time

from .errors import StatusTransitionTimeout
from .schema import (
    STATUS_ACTIVE,
    STATUS_DEPROVISIONED,
    STATUS_PASSWORD_EXPIRED,
    STATUS_RECOVERY,
    STATUS_SUSPENDED,
)

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL = 1.0
DEFAULT_POLL_TIMEOUT = 60.0


def map_status(current_status: str) -> str:
    """PASSWORD_EXPIRED and RECOVERY are effectively ACTIVE for comparison."""
    if current_status in (STATUS_PASSWORD_EXPIRED, STATUS_RECOVERY):
        return STATUS_ACTIVE
    return current_status


def update_user_status(
    adapter,
    user_id: str,
    desired_status: str,
    *,
    poll_interval: float = DEFAULT_POLL_INTERVAL,
    poll_timeout: float = DEFAULT_POLL_TIMEOUT,
) -> None:
    """Move a user to ``desired_status`` through the lifecycle endpoints.

    Args:
        adapter: Remote client adapter
        user_id: User ID
        desired_status: ACTIVE, SUSPENDED or DEPROVISIONED
        poll_interval: Seconds between transition checks
        poll_timeout: Give up waiting after this many seconds

    Raises:
        OktaAPIError: If a lifecycle call fails
        StatusTransitionTimeout: If the user never settles
    """
    user = adapter.get_user(user_id)
    current = user.get("status", "")

    if desired_status == STATUS_SUSPENDED:
        adapter.suspend_user(user_id)
    elif desired_status == STATUS_DEPROVISIONED:
        adapter.deactivate_user(user_id)
    elif desired_status == STATUS_ACTIVE:
        if current == STATUS_SUSPENDED:
            adapter.unsuspend_user(user_id)
        elif current == STATUS_PASSWORD_EXPIRED:
            # Already active for our purposes; activating would reset the password
            pass
        else:
            adapter.activate_user(user_id)
    logger.debug("User %s status %s -> %s requested", user_id, current, desired_status)

    wait_for_status_transition(adapter, user_id, poll_interval=poll_interval, poll_timeout=poll_timeout)


def wait_for_status_transition(
    adapter,
    user_id: str,
    *,
    poll_interval: float = DEFAULT_POLL_INTERVAL,
    poll_timeout: float = DEFAULT_POLL_TIMEOUT,
) -> dict:
    """Poll until the user's ``transitioningToStatus`` clears.

    Time spent in ``get_user`` counts against ``poll_timeout``.

    Returns:
        The settled user representation

    Raises:
        StatusTransitionTimeout: If the transition is still pending at the deadline
    """
    started = time.monotonic()
    deadline = started + poll_timeout
    while True:
        user = adapter.get_user(user_id)
        target = user.get("transitioningToStatus") or ""
        if not target:
            return user
        now = time.monotonic()
        if now >= deadline:
            raise StatusTransitionTimeout(user_id, target, now - started)
        time.sleep(min(poll_interval, deadline - now))
