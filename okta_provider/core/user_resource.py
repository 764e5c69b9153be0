"""Okta user resource: create, read, update, delete and import.

Every operation takes the remote client adapter as its first argument and
issues its calls strictly one after another; later steps depend on the side
effects of earlier ones (roles are diffed after the status has settled).

Nothing is rolled back. When a remote step fails the operation raises
``ReconcileError`` whose ``state`` holds the identifier and every change
committed so far, so the next reconciliation starts from that baseline.

Usage:
    adapter = OktaAdapter(OktaClient(org_url, api_token=token))
    state = create_user(adapter, UserData.from_dict(document))
    state = update_user(adapter, state, UserData.from_dict(new_document))
    delete_user(adapter, state)
"""
from __future__ import annotations
import logging
from contextlib import contextmanager
from typing import Iterable, Iterator, Optional

from .delta import ChangeSet, compute_changes, set_delta
from .errors import ProviderError, ReconcileError, StatusTransitionTimeout, ValidationError
from .lifecycle import DEFAULT_POLL_INTERVAL, DEFAULT_POLL_TIMEOUT, map_status, update_user_status
from .okta.exceptions import OktaError, OktaNotFoundError
from .schema import (
    STATUS_ACTIVE,
    STATUS_DEPROVISIONED,
    STATUS_PROVISIONED,
    STATUS_STAGED,
    STATUS_SUSPENDED,
    UserData,
    build_credentials,
    build_profile,
    flatten_profile,
    validate_user_data,
)

logger = logging.getLogger(__name__)

GROUP_TYPE_BUILT_IN = "BUILT_IN"


@contextmanager
def _step(name: str, state: UserData) -> Iterator[None]:
    """Wrap remote failures of one step into ReconcileError."""
    try:
        yield
    except (OktaError, StatusTransitionTimeout) as exc:
        logger.error("Failed to %s for user %s: %s", name, state.id or state.login, exc)
        raise ReconcileError(name, str(exc), state) from exc


# ─────────────────────────────────────────────────────────────────────────────
# Relation helpers
# ─────────────────────────────────────────────────────────────────────────────

def assign_admin_roles(adapter, user_id: str, roles: Iterable[str], disable_notifications: bool = False) -> None:
    for role in sorted(roles):
        logger.debug("Assigning role %s to user %s", role, user_id)
        adapter.assign_role(user_id, role, disable_notifications)


def add_user_to_groups(adapter, user_id: str, group_ids: Iterable[str]) -> None:
    for group_id in sorted(group_ids):
        logger.debug("Adding user %s to group %s", user_id, group_id)
        adapter.add_user_to_group(group_id, user_id)


def remove_user_from_groups(adapter, user_id: str, group_ids: Iterable[str]) -> None:
    for group_id in sorted(group_ids):
        logger.debug("Removing user %s from group %s", user_id, group_id)
        adapter.remove_user_from_group(group_id, user_id)


# ─────────────────────────────────────────────────────────────────────────────
# Create
# ─────────────────────────────────────────────────────────────────────────────

def create_user(
    adapter,
    desired: UserData,
    *,
    poll_interval: float = DEFAULT_POLL_INTERVAL,
    poll_timeout: float = DEFAULT_POLL_TIMEOUT,
    refresh: bool = True,
) -> UserData:
    """Create the user, then apply roles, groups, status and password expiry.

    Args:
        adapter: Remote client adapter
        desired: Desired configuration
        poll_interval: Seconds between status transition checks
        poll_timeout: Status transition deadline in seconds
        refresh: Re-read the user once every step succeeded

    Returns:
        Recorded state of the new user

    Raises:
        ValidationError: Before any remote call, on invalid configuration
        ReconcileError: When a remote step fails; ``state.id`` is set as soon
            as the create call itself succeeded
    """
    validate_user_data(desired)
    if desired.id:
        raise ValidationError(f"user already has an id ({desired.id}); update it instead")
    logger.info("creating user %s", desired.login)

    body = {"profile": build_profile(desired)}
    credentials = build_credentials(desired)
    if credentials:
        body["credentials"] = credentials
    # activate=false leaves the user STAGED
    activate = desired.status != STATUS_STAGED

    state = desired.copy()
    if desired.admin_roles is not None:
        state.admin_roles = set()
    if desired.group_memberships is not None:
        state.group_memberships = set()

    with _step("create user", state):
        user = adapter.create_user(body, activate=activate)
    # Record the id before any follow-up step so a failure cannot orphan the user
    state.id = user["id"]
    state.raw_status = user.get("status") or (STATUS_ACTIVE if activate else STATUS_STAGED)
    state.status = map_status(state.raw_status)

    # Role assignment needs an existing user, so order matters here
    if desired.admin_roles:
        with _step("assign admin roles", state):
            assign_admin_roles(adapter, state.id, desired.admin_roles)
        state.admin_roles = set(desired.admin_roles)

    if desired.group_memberships:
        with _step("add user to groups", state):
            add_user_to_groups(adapter, state.id, desired.group_memberships)
        state.group_memberships = set(desired.group_memberships)

    if desired.status in (STATUS_SUSPENDED, STATUS_DEPROVISIONED):
        with _step("update user status", state):
            update_user_status(adapter, state.id, desired.status, poll_interval=poll_interval, poll_timeout=poll_timeout)
        state.status = desired.status

    if desired.expire_password_on_create:
        with _step("expire user's password", state):
            adapter.expire_password(state.id)

    if not refresh:
        return state
    return _refresh_or_fail(adapter, state)


# ─────────────────────────────────────────────────────────────────────────────
# Read / Import
# ─────────────────────────────────────────────────────────────────────────────

def read_user(adapter, state: UserData) -> Optional[UserData]:
    """Refresh recorded state from Okta.

    Args:
        adapter: Remote client adapter
        state: Recorded state (must carry an id)

    Returns:
        Refreshed state, or None when the user no longer exists
    """
    logger.info("reading user %s", state.id)
    try:
        user = adapter.get_user(state.id)
    except OktaNotFoundError:
        logger.warning("User %s not found; removing it from state", state.id)
        return None
    except OktaError as exc:
        raise ReconcileError("get user", str(exc), state) from exc

    refreshed = state.copy()
    refreshed.id = user["id"]
    refreshed.raw_status = user.get("status", "")
    refreshed.status = map_status(refreshed.raw_status)
    refreshed.profile, refreshed.custom_profile_attributes = flatten_profile(user.get("profile") or {})

    if not state.skip_roles:
        with _step("set user's admin roles", refreshed):
            roles = adapter.list_user_roles(refreshed.id)
        refreshed.admin_roles = {role["type"] for role in roles}

    # Only sync when managed; an empty set still means "managed"
    if state.group_memberships is not None:
        with _step("set user's groups", refreshed):
            groups = adapter.list_user_groups(refreshed.id)
        refreshed.group_memberships = {
            group["id"] for group in groups if group.get("type") != GROUP_TYPE_BUILT_IN
        }
    return refreshed


def import_user(adapter, id_or_login: str) -> UserData:
    """Adopt an existing Okta user, looked up by id or login.

    Raises:
        ProviderError: If no such user exists
    """
    logger.info("importing user %s", id_or_login)
    try:
        user = adapter.get_user(id_or_login)
    except OktaNotFoundError as exc:
        raise ProviderError(f"user '{id_or_login}' not found") from exc
    except OktaError as exc:
        raise ReconcileError("get user", str(exc)) from exc
    return _refresh_or_fail(adapter, UserData(id=user["id"]))


def _refresh_or_fail(adapter, state: UserData) -> UserData:
    refreshed = read_user(adapter, state)
    if refreshed is None:
        raise ReconcileError("read user", f"user {state.id} disappeared", state)
    return refreshed


# ─────────────────────────────────────────────────────────────────────────────
# Update
# ─────────────────────────────────────────────────────────────────────────────

def update_user(
    adapter,
    prior: UserData,
    desired: UserData,
    changes: Optional[ChangeSet] = None,
    *,
    poll_interval: float = DEFAULT_POLL_INTERVAL,
    poll_timeout: float = DEFAULT_POLL_TIMEOUT,
    refresh: bool = True,
) -> UserData:
    """Apply the changes between recorded state and desired configuration.

    Steps run in a fixed order: status first so later checks see the settled
    status, then profile and credential payloads, roles, groups, password and
    finally the recovery question.

    Args:
        adapter: Remote client adapter
        prior: Recorded state (must carry an id)
        desired: Desired configuration
        changes: Precomputed change flags; computed from prior/desired if omitted
        poll_interval: Seconds between status transition checks
        poll_timeout: Status transition deadline in seconds
        refresh: Re-read the user once every step succeeded

    Returns:
        New recorded state

    Raises:
        ValidationError: On invalid configuration or a forbidden transition
        ReconcileError: When a remote step fails; earlier steps stay applied
    """
    if not prior.id:
        raise ValidationError("cannot update a user that has not been created")
    if desired.id and desired.id != prior.id:
        raise ValidationError(f"id is immutable ({prior.id} -> {desired.id})")
    validate_user_data(desired)
    if changes is None:
        changes = compute_changes(prior, desired)
    logger.info("updating user %s (%s)", prior.id, ", ".join(changes.changed_fields()) or "no changes")

    if changes.status and desired.status == STATUS_STAGED:
        raise ValidationError("Okta will not allow a user to be updated to STAGED. Can set to STAGED on user creation only")

    state = prior.copy()
    state.skip_roles = desired.skip_roles
    state.expire_password_on_create = desired.expire_password_on_create

    if changes.password:
        with _step("get user", state):
            user = adapter.get_user(state.id)
        if user.get("status") == STATUS_PROVISIONED:
            raise ValidationError(
                "can not change password for provisioned user, the activation workflow should be "
                "finished first. See https://developer.okta.com/docs/reference/api/users/#user-status",
                state,
            )

    # Status goes first so a previously deprovisioned user can be updated further
    if changes.status:
        with _step("update user status", state):
            update_user_status(adapter, state.id, desired.status, poll_interval=poll_interval, poll_timeout=poll_timeout)
        state.status = desired.status

    if desired.status == STATUS_DEPROVISIONED and changes.user_changed:
        raise ValidationError("Only the status of a DEPROVISIONED user can be updated, we detected other change", state)

    if changes.profile or changes.password_hash or changes.password_inline_hook:
        body = {"profile": build_profile(desired)}
        if changes.password_hash and desired.password_hash is not None:
            body["credentials"] = {"password": {"hash": desired.password_hash.to_payload()}}
        elif changes.password_inline_hook and desired.password_inline_hook:
            body["credentials"] = {"password": {"hook": {"type": desired.password_inline_hook}}}
        with _step("update user", state):
            adapter.update_user(state.id, body)
        state.profile = dict(desired.profile)
        if desired.custom_profile_attributes:
            state.custom_profile_attributes = desired.custom_profile_attributes
        if changes.password_hash:
            state.password_hash = desired.password_hash
        if changes.password_inline_hook:
            state.password_inline_hook = desired.password_inline_hook

    if changes.admin_roles:
        _apply_role_changes(adapter, state, prior.admin_roles, desired.admin_roles)

    if changes.group_memberships:
        to_add, to_remove = set_delta(prior.group_memberships, desired.group_memberships)
        with _step("add user to groups", state):
            add_user_to_groups(adapter, state.id, to_add)
        state.group_memberships = set(prior.group_memberships or ()) | to_add
        with _step("remove user from groups", state):
            remove_user_from_groups(adapter, state.id, to_remove)
        state.group_memberships = set(desired.group_memberships or ())

    if changes.password:
        if desired.old_password:
            with _step("update user's password", state):
                adapter.change_password(state.id, desired.old_password, desired.password)
        else:
            with _step("set user's password", state):
                adapter.set_password(state.id, desired.password)
        state.password = desired.password
        state.old_password = desired.old_password

    if changes.recovery:
        # Okta needs question and answer together even when only one changed
        with _step("change user's password recovery question", state):
            adapter.change_recovery_question(
                state.id,
                desired.password or "",
                desired.recovery_question or "",
                desired.recovery_answer or "",
            )
        state.recovery_question = desired.recovery_question
        state.recovery_answer = desired.recovery_answer

    if not refresh:
        return state
    return _refresh_or_fail(adapter, state)


def _apply_role_changes(adapter, state: UserData, prior_roles, desired_roles) -> None:
    to_add, to_remove = set_delta(prior_roles, desired_roles)
    # Act on the remote role list; cached assignment ids may be stale
    with _step("list user's roles", state):
        remote_roles = adapter.list_user_roles(state.id)
    for role in remote_roles:
        if role.get("type") not in to_remove:
            continue
        with _step("remove user's role", state):
            try:
                adapter.remove_role(state.id, role["id"])
            except OktaNotFoundError:
                logger.debug("Role %s already removed from user %s", role.get("type"), state.id)
    state.admin_roles = set(prior_roles or ()) - to_remove

    assigned = {role.get("type") for role in remote_roles} - to_remove
    with _step("assign admin roles", state):
        assign_admin_roles(adapter, state.id, to_add - assigned)
    state.admin_roles = set(desired_roles or ())


# ─────────────────────────────────────────────────────────────────────────────
# Delete
# ─────────────────────────────────────────────────────────────────────────────

def delete_user(adapter, state: UserData) -> None:
    """Deprovision (if needed) and delete the user.

    Okta deletes only deprovisioned users, so anything else takes two passes
    of the same call: the first deprovisions, the second deletes.

    Raises:
        ReconcileError: If either call fails
    """
    if not state.id:
        raise ValidationError("cannot delete a user that has not been created")
    logger.info("deleting user %s", state.id)
    passes = 1 if state.status == STATUS_DEPROVISIONED else 2
    for _ in range(passes):
        with _step("deprovision or delete user", state):
            adapter.deactivate_or_delete_user(state.id)
