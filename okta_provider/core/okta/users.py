"""Okta user lifecycle operations."""
from __future__ import annotations

from .client import OktaClient


class UserService:
    """Service for managing Okta users."""
    
    def __init__(self, client: OktaClient):
        """Initialize user service.
        
        Args:
            client: Authenticated Okta client
        """
        self.client = client
    
    def create_user(self, body: dict, activate: bool = True) -> dict:
        """Create a user.
        
        Args:
            body: CreateUserRequest with ``profile`` and optional ``credentials``
            activate: When False the user is left in STAGED status
            
        Returns:
            Created user representation (carries the assigned ``id``)
        """
        params = {"activate": "true" if activate else "false"}
        resp = self.client.post("/api/v1/users", json=body, params=params)
        return resp.json()
    
    def get_user(self, user_id: str) -> dict:
        """Fetch a user by id or login.
        
        Raises:
            OktaNotFoundError: If the user does not exist
        """
        return self.client.get(f"/api/v1/users/{user_id}").json()
    
    def update_user(self, user_id: str, body: dict) -> dict:
        """Replace the user's profile and/or credentials."""
        return self.client.put(f"/api/v1/users/{user_id}", json=body).json()
    
    def set_password(self, user_id: str, password: str) -> dict:
        """Overwrite the password without verifying the old one (admin reset).
        
        Uses a partial update so the profile is left untouched.
        """
        body = {"credentials": {"password": {"value": password}}}
        return self.client.post(f"/api/v1/users/{user_id}", json=body).json()
    
    def deactivate_or_delete_user(self, user_id: str) -> None:
        """Deactivate an active user, or delete one that is already deprovisioned."""
        self.client.delete(f"/api/v1/users/{user_id}")
    
    def change_password(self, user_id: str, old_password: str, new_password: str) -> dict:
        """Change a password, verifying the old value server-side."""
        payload = {
            "oldPassword": {"value": old_password},
            "newPassword": {"value": new_password},
        }
        resp = self.client.post(f"/api/v1/users/{user_id}/credentials/change_password", json=payload)
        return resp.json()
    
    def change_recovery_question(self, user_id: str, password: str, question: str, answer: str) -> dict:
        """Replace the recovery question; Okta requires question and answer together."""
        payload = {
            "password": {"value": password},
            "recovery_question": {"question": question, "answer": answer},
        }
        resp = self.client.post(f"/api/v1/users/{user_id}/credentials/change_recovery_question", json=payload)
        return resp.json()
    
    def expire_password(self, user_id: str) -> dict:
        """Force a password change at next sign-in."""
        return self.client.post(f"/api/v1/users/{user_id}/lifecycle/expire_password").json()
    
    def activate_user(self, user_id: str, send_email: bool = False) -> None:
        self.client.post(
            f"/api/v1/users/{user_id}/lifecycle/activate",
            params={"sendEmail": "true" if send_email else "false"},
        )
    
    def deactivate_user(self, user_id: str) -> None:
        self.client.post(f"/api/v1/users/{user_id}/lifecycle/deactivate")
    
    def suspend_user(self, user_id: str) -> None:
        self.client.post(f"/api/v1/users/{user_id}/lifecycle/suspend")
    
    def unsuspend_user(self, user_id: str) -> None:
        self.client.post(f"/api/v1/users/{user_id}/lifecycle/unsuspend")
