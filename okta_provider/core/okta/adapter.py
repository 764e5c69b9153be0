"""Single capability object handed to every reconciler operation.

The reconciler never builds clients on its own; callers construct an
``OktaAdapter`` once (or a test double with the same methods) and pass it in.
"""
from __future__ import annotations
from typing import List, Optional

from .apps import ApplicationService
from .authenticators import AuthenticatorService
from .client import OktaClient
from .groups import GroupService
from .roles import RoleService
from .users import UserService


class OktaAdapter:
    """Facade over the user, role, group, application and authenticator services."""
    
    def __init__(self, client: OktaClient):
        self.client = client
        self.users = UserService(client)
        self.roles = RoleService(client)
        self.groups = GroupService(client)
        self.apps = ApplicationService(client)
        self.authenticators = AuthenticatorService(client)
    
    @classmethod
    def from_settings(cls, config) -> "OktaAdapter":
        """Build an adapter from a ``ProviderConfig``."""
        client = OktaClient(config.org_url, config.api_token_resolved, timeout=config.request_timeout)
        return cls(client)
    
    # Users
    def create_user(self, body: dict, activate: bool = True) -> dict:
        return self.users.create_user(body, activate=activate)
    
    def get_user(self, user_id: str) -> dict:
        return self.users.get_user(user_id)
    
    def update_user(self, user_id: str, body: dict) -> dict:
        return self.users.update_user(user_id, body)
    
    def set_password(self, user_id: str, password: str) -> dict:
        return self.users.set_password(user_id, password)
    
    def deactivate_or_delete_user(self, user_id: str) -> None:
        self.users.deactivate_or_delete_user(user_id)
    
    def change_password(self, user_id: str, old_password: str, new_password: str) -> dict:
        return self.users.change_password(user_id, old_password, new_password)
    
    def change_recovery_question(self, user_id: str, password: str, question: str, answer: str) -> dict:
        return self.users.change_recovery_question(user_id, password, question, answer)
    
    def expire_password(self, user_id: str) -> dict:
        return self.users.expire_password(user_id)
    
    def activate_user(self, user_id: str) -> None:
        self.users.activate_user(user_id, send_email=False)
    
    def deactivate_user(self, user_id: str) -> None:
        self.users.deactivate_user(user_id)
    
    def suspend_user(self, user_id: str) -> None:
        self.users.suspend_user(user_id)
    
    def unsuspend_user(self, user_id: str) -> None:
        self.users.unsuspend_user(user_id)
    
    # Roles
    def list_user_roles(self, user_id: str) -> List[dict]:
        return self.roles.list_user_only_roles(user_id)
    
    def assign_role(self, user_id: str, role_type: str, disable_notifications: bool = False) -> dict:
        return self.roles.assign_role(user_id, role_type, disable_notifications)
    
    def remove_role(self, user_id: str, role_id: str) -> None:
        self.roles.remove_role(user_id, role_id)
    
    # Groups
    def list_user_groups(self, user_id: str) -> List[dict]:
        return self.groups.list_user_groups(user_id)
    
    def add_user_to_group(self, group_id: str, user_id: str) -> None:
        self.groups.add_user_to_group(group_id, user_id)
    
    def remove_user_from_group(self, group_id: str, user_id: str) -> None:
        self.groups.remove_user_from_group(group_id, user_id)
    
    # Applications
    def get_application(self, app_id: str) -> dict:
        return self.apps.get_application(app_id)
    
    def list_applications(
        self,
        q: Optional[str] = None,
        filter: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> List[dict]:
        return self.apps.list_applications(q=q, filter=filter, limit=limit)
    
    # Authenticators
    def list_authenticators(self) -> List[dict]:
        return self.authenticators.list_authenticators()
