"""Okta authenticator (OIE) read operations."""
from __future__ import annotations
from typing import List

from .client import OktaClient


class AuthenticatorService:
    """Service for reading the org's authenticators."""
    
    def __init__(self, client: OktaClient):
        self.client = client
    
    def list_authenticators(self) -> List[dict]:
        resp = self.client.get("/api/v1/authenticators")
        return resp.json() or []
