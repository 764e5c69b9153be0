"""Change detection between recorded state and desired configuration.

The reconciler never diffs on the fly: ``compute_changes`` runs once before
any remote call and the resulting ``ChangeSet`` drives every step.
"""
from __future__ import annotations
from dataclasses import dataclass, fields
from typing import Iterable, List, Optional, Set, Tuple

from .schema import (
    STATUS_ACTIVE,
    STATUS_PASSWORD_EXPIRED,
    STATUS_PROVISIONED,
    UserData,
    normalize_json,
)

# Recorded statuses that already satisfy a desired ACTIVE
_ACTIVE_EQUIVALENTS = (STATUS_PROVISIONED, STATUS_PASSWORD_EXPIRED)


@dataclass(frozen=True)
class ChangeSet:
    """Per-field change flags for one update."""
    status: bool = False
    profile: bool = False
    admin_roles: bool = False
    group_memberships: bool = False
    password: bool = False
    password_hash: bool = False
    password_inline_hook: bool = False
    recovery_question: bool = False
    recovery_answer: bool = False

    @property
    def user_changed(self) -> bool:
        """Anything besides status that a DEPROVISIONED user cannot accept."""
        return self.profile or self.password or self.recovery_question or self.recovery_answer

    @property
    def recovery(self) -> bool:
        return self.recovery_question or self.recovery_answer

    def changed_fields(self) -> List[str]:
        return [f.name for f in fields(self) if getattr(self, f.name)]

    def __bool__(self) -> bool:
        return bool(self.changed_fields())


def set_delta(prior: Optional[Iterable[str]], desired: Optional[Iterable[str]]) -> Tuple[Set[str], Set[str]]:
    """Compute (additions, removals) that turn ``prior`` into ``desired``.

    Order is irrelevant; None is treated as empty.
    """
    prior_set = set(prior or ())
    desired_set = set(desired or ())
    return desired_set - prior_set, prior_set - desired_set


def status_changed(prior_status: str, desired_status: str) -> bool:
    if prior_status == desired_status:
        return False
    if desired_status == STATUS_ACTIVE and prior_status in _ACTIVE_EQUIVALENTS:
        return False
    return True


def profile_changed(prior: UserData, desired: UserData) -> bool:
    if _non_empty(prior.profile) != _non_empty(desired.profile):
        return True
    # An unset custom attribute document leaves the remote ones alone
    if not desired.custom_profile_attributes:
        return False
    return normalize_json(prior.custom_profile_attributes) != normalize_json(desired.custom_profile_attributes)


def relation_changed(prior: Optional[Set[str]], desired: Optional[Set[str]]) -> bool:
    if desired is None:
        return False
    return set(prior or ()) != desired


def compute_changes(prior: UserData, desired: UserData) -> ChangeSet:
    """Compute the change flags for moving ``prior`` to ``desired``.

    Args:
        prior: Recorded state
        desired: Desired configuration

    Returns:
        ChangeSet with one flag per reconciled field
    """
    return ChangeSet(
        status=status_changed(prior.status, desired.status),
        profile=profile_changed(prior, desired),
        admin_roles=relation_changed(prior.admin_roles, desired.admin_roles),
        group_memberships=relation_changed(prior.group_memberships, desired.group_memberships),
        password=bool(desired.password) and prior.password != desired.password,
        password_hash=desired.password_hash is not None and prior.password_hash != desired.password_hash,
        password_inline_hook=(prior.password_inline_hook or None) != (desired.password_inline_hook or None),
        recovery_question=(prior.recovery_question or None) != (desired.recovery_question or None),
        recovery_answer=(prior.recovery_answer or None) != (desired.recovery_answer or None),
    )


def _non_empty(profile: dict) -> dict:
    return {k: v for k, v in profile.items() if v not in (None, "")}
