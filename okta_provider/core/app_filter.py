"""Application search filters and lookup."""
from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import List, Optional

from .errors import ProviderError, ReconcileError, ValidationError
from .okta.exceptions import OktaError, OktaNotFoundError
from .schema import STATUS_ACTIVE

logger = logging.getLogger(__name__)

DEFAULT_PAGE_LIMIT = 200


@dataclass
class AppFilters:
    """Search criteria for an application."""
    id: str = ""
    label: str = ""
    label_prefix: str = ""
    status: str = ""

    def get_q(self) -> str:
        """Value of the ``q`` query parameter; an exact label beats a prefix."""
        if self.label:
            return self.label
        return self.label_prefix

    def __str__(self) -> str:
        return f'id: "{self.id}", label: "{self.label}", label_prefix: "{self.label_prefix}"'


def build_app_filters(
    id: str = "",
    label: str = "",
    label_prefix: str = "",
    active_only: bool = False,
) -> AppFilters:
    """Build filters from optional search criteria.

    Raises:
        ValidationError: If none of id, label or label_prefix is given
    """
    if not id and not label and not label_prefix:
        raise ValidationError("you must provide either a 'label_prefix', 'id', or 'label' for application search")
    filters = AppFilters(id=id or "", label=label or "", label_prefix=label_prefix or "")
    if active_only:
        filters.status = f'status eq "{STATUS_ACTIVE}"'
    return filters


def list_apps(adapter, filters: Optional[AppFilters], limit: int = DEFAULT_PAGE_LIMIT) -> List[dict]:
    """List applications matching ``filters`` across every page."""
    q = filters.get_q() if filters else None
    status = filters.status if filters else None
    logger.debug("Listing applications q=%r filter=%r", q, status)
    return adapter.list_applications(q=q or None, filter=status or None, limit=limit)


def find_app(adapter, filters: AppFilters, limit: int = DEFAULT_PAGE_LIMIT) -> dict:
    """Resolve exactly one application.

    An id is looked up directly. Otherwise the search results are scanned
    for an exact label match when a label was given, else the first result
    wins.

    Raises:
        ProviderError: If nothing matches
        ReconcileError: If the remote lookup fails
    """
    try:
        if filters.id:
            try:
                return adapter.get_application(filters.id)
            except OktaNotFoundError:
                raise ProviderError(f"no application found with provided filter: {filters}")
        apps = list_apps(adapter, filters, limit)
    except OktaError as exc:
        raise ReconcileError("list applications", str(exc)) from exc

    if filters.label:
        apps = [app for app in apps if app.get("label") == filters.label]
    if not apps:
        raise ProviderError(f"no application found with provided filter: {filters}")
    if len(apps) > 1:
        logger.info("Found %d applications for filter (%s); using the first", len(apps), filters)
    return apps[0]
