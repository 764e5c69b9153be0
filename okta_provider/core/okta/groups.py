"""Okta group membership operations."""
from __future__ import annotations
from typing import List

from .client import OktaClient


class GroupService:
    """Service for managing a user's group memberships."""
    
    def __init__(self, client: OktaClient):
        self.client = client
    
    def list_user_groups(self, user_id: str) -> List[dict]:
        """Retrieve every group the user belongs to (all pages).
        
        Args:
            user_id: User ID
            
        Returns:
            List of group representations, including BUILT_IN ones
        """
        return self.client.get_paginated(f"/api/v1/users/{user_id}/groups")
    
    def add_user_to_group(self, group_id: str, user_id: str) -> None:
        """Add a user to a group (idempotent on the Okta side)."""
        self.client.put(f"/api/v1/groups/{group_id}/users/{user_id}")
    
    def remove_user_from_group(self, group_id: str, user_id: str) -> None:
        """Remove a user from a group."""
        self.client.delete(f"/api/v1/groups/{group_id}/users/{user_id}")
