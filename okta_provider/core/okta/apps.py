"""Okta application lookup operations."""
from __future__ import annotations
from typing import List, Optional

from .client import OktaClient


class ApplicationService:
    """Service for reading Okta applications."""
    
    def __init__(self, client: OktaClient):
        self.client = client
    
    def get_application(self, app_id: str) -> dict:
        """Fetch an application by id.
        
        Raises:
            OktaNotFoundError: If no application has this id
        """
        return self.client.get(f"/api/v1/apps/{app_id}").json()
    
    def list_applications(
        self,
        q: Optional[str] = None,
        filter: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> List[dict]:
        """List applications, following pagination until exhausted.
        
        Args:
            q: Search on name/label (prefix match)
            filter: Filter expression (e.g., 'status eq "ACTIVE"')
            limit: Page size
            
        Returns:
            Applications from all pages, in the order Okta returned them
        """
        params = {}
        if q:
            params["q"] = q
        if filter:
            params["filter"] = filter
        if limit:
            params["limit"] = limit
        return self.client.get_paginated("/api/v1/apps", params=params or None)
