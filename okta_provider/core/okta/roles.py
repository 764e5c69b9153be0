"""Okta admin role assignment operations."""
from __future__ import annotations
from typing import List

from .client import OktaClient


class RoleService:
    """Service for managing admin roles assigned to users."""
    
    def __init__(self, client: OktaClient):
        """Initialize role service.
        
        Args:
            client: Authenticated Okta client
        """
        self.client = client
    
    def list_user_roles(self, user_id: str) -> List[dict]:
        """List every role assigned to the user, directly or through a group."""
        resp = self.client.get(f"/api/v1/users/{user_id}/roles")
        return resp.json() or []
    
    def list_user_only_roles(self, user_id: str) -> List[dict]:
        """List roles assigned directly to the user.
        
        Group-inherited assignments are filtered out; they cannot be removed
        from the user and must not be reported as user-managed roles.
        """
        return [
            role for role in self.list_user_roles(user_id)
            if role.get("assignmentType") == "USER"
        ]
    
    def assign_role(self, user_id: str, role_type: str, disable_notifications: bool = False) -> dict:
        """Assign an admin role (e.g., APP_ADMIN) to the user.
        
        Args:
            user_id: User ID
            role_type: Role type
            disable_notifications: Suppress the admin notification email
            
        Returns:
            Role assignment representation
        """
        params = {"disableNotifications": "true" if disable_notifications else "false"}
        resp = self.client.post(f"/api/v1/users/{user_id}/roles", json={"type": role_type}, params=params)
        return resp.json()
    
    def remove_role(self, user_id: str, role_id: str) -> None:
        """Unassign a role by assignment id.
        
        Raises:
            OktaNotFoundError: If the assignment no longer exists
        """
        self.client.delete(f"/api/v1/users/{user_id}/roles/{role_id}")
