"""Okta management API client library.

Architecture:
- client.py: HTTP client with token authentication and pagination
- users.py: User lifecycle operations (create, update, credentials, status)
- roles.py: Admin role assignment
- groups.py: Group membership
- apps.py: Application lookup
- authenticators.py: Authenticator listing
- adapter.py: Facade passed to the reconciler
- exceptions.py: Typed exceptions for error handling

Usage:
    from okta_provider.core.okta import OktaClient, OktaAdapter

    client = OktaClient("https://acme.okta.com", api_token="00abc...")
    adapter = OktaAdapter(client)
    user = adapter.get_user("alice@example.com")
"""
from .client import OktaClient, REQUEST_TIMEOUT
from .exceptions import OktaError, OktaAPIError, OktaNotFoundError
from .users import UserService
from .roles import RoleService
from .groups import GroupService
from .apps import ApplicationService
from .authenticators import AuthenticatorService
from .adapter import OktaAdapter

__all__ = [
    # Client
    "OktaClient",
    "REQUEST_TIMEOUT",
    
    # Exceptions
    "OktaError",
    "OktaAPIError",
    "OktaNotFoundError",
    
    # Services
    "UserService",
    "RoleService",
    "GroupService",
    "ApplicationService",
    "AuthenticatorService",
    "OktaAdapter",
]
