"""Low-level HTTP client for the Okta management API.

Handles API token authentication, error mapping, and pagination.
"""
from __future__ import annotations
import os
from typing import Optional, Dict, Any, List

import requests

from .exceptions import OktaAPIError, OktaNotFoundError

REQUEST_TIMEOUT = 30
USER_AGENT = "okta-provider-python"


class OktaClient:
    """HTTP client for the Okta management API.

    Features:
    - SSWS API token authentication
    - Centralized error handling (Okta error bodies are decoded)
    - Transparent pagination over ``Link: rel="next"`` headers

    Usage:
        client = OktaClient("https://acme.okta.com", api_token="00abc...")
        response = client.get("/api/v1/users/00u1")
    """

    def __init__(
        self,
        org_url: Optional[str] = None,
        api_token: Optional[str] = None,
        timeout: float = REQUEST_TIMEOUT,
    ):
        """Initialize Okta client.

        Args:
            org_url: Okta org URL (defaults to OKTA_ORG_URL env var)
            api_token: API token (defaults to OKTA_API_TOKEN env var)
            timeout: Per-request timeout in seconds
        """
        self.org_url = (org_url or os.environ.get("OKTA_ORG_URL", "")).rstrip("/")
        self._token: Optional[str] = api_token or os.environ.get("OKTA_API_TOKEN")
        self.timeout = timeout

    def _headers(self, extra: Optional[Dict[str, str]] = None) -> Dict[str, str]:
        if not self._token:
            raise OktaAPIError(401, "Not authenticated - an API token is required", self.org_url)
        headers = {
            "Accept": "application/json",
            "Authorization": f"SSWS {self._token}",
            "User-Agent": USER_AGENT,
        }
        if extra:
            headers.update(extra)
        return headers

    def _url(self, path: str) -> str:
        # Pagination links are absolute
        if path.startswith("http://") or path.startswith("https://"):
            return path
        return f"{self.org_url}{path}"

    def get(self, path: str, params: Optional[Dict] = None, **kwargs) -> requests.Response:
        """Execute GET request.

        Args:
            path: API endpoint path (e.g., "/api/v1/users") or absolute next-page URL
            params: Query parameters
            **kwargs: Additional arguments for requests.get

        Returns:
            Response object

        Raises:
            OktaAPIError: On HTTP error
        """
        headers = self._headers(kwargs.pop("headers", None))
        resp = requests.get(self._url(path), params=params, headers=headers, timeout=self.timeout, **kwargs)
        self._handle_error(resp)
        return resp

    def post(self, path: str, json: Optional[Any] = None, params: Optional[Dict] = None, **kwargs) -> requests.Response:
        """Execute POST request.

        Args:
            path: API endpoint path
            json: JSON payload
            params: Query parameters
            **kwargs: Additional arguments for requests.post

        Returns:
            Response object

        Raises:
            OktaAPIError: On HTTP error
        """
        headers = self._headers(kwargs.pop("headers", None))
        resp = requests.post(
            self._url(path), json=json, params=params, headers=headers, timeout=self.timeout, **kwargs
        )
        self._handle_error(resp)
        return resp

    def put(self, path: str, json: Optional[Any] = None, **kwargs) -> requests.Response:
        """Execute PUT request.

        Raises:
            OktaAPIError: On HTTP error
        """
        headers = self._headers(kwargs.pop("headers", None))
        resp = requests.put(self._url(path), json=json, headers=headers, timeout=self.timeout, **kwargs)
        self._handle_error(resp)
        return resp

    def delete(self, path: str, params: Optional[Dict] = None, **kwargs) -> requests.Response:
        """Execute DELETE request.

        Raises:
            OktaAPIError: On HTTP error
        """
        headers = self._headers(kwargs.pop("headers", None))
        resp = requests.delete(self._url(path), params=params, headers=headers, timeout=self.timeout, **kwargs)
        self._handle_error(resp)
        return resp

    def get_paginated(self, path: str, params: Optional[Dict] = None) -> List[Any]:
        """Fetch every page of a list endpoint and return the items in order.

        Okta paginates with a ``Link`` header carrying ``rel="next"``; the
        next URL already embeds the cursor and the original query, so
        ``params`` only apply to the first request.

        Args:
            path: API endpoint path
            params: Query parameters for the first page

        Returns:
            All items from all pages
        """
        resp = self.get(path, params=params)
        items = list(resp.json() or [])
        next_url = _next_link(resp)
        while next_url:
            resp = self.get(next_url)
            items.extend(resp.json() or [])
            next_url = _next_link(resp)
        return items

    def _handle_error(self, resp: requests.Response) -> None:
        """Centralized error handling for HTTP responses.

        Args:
            resp: Response object to check

        Raises:
            OktaNotFoundError: If the resource does not exist
            OktaAPIError: If response status indicates any other error
        """
        if resp.status_code < 400:
            return
        message = resp.text
        error_code = ""
        try:
            body = resp.json()
        except ValueError:
            body = None
        if isinstance(body, dict):
            message = body.get("errorSummary") or message
            error_code = body.get("errorCode") or ""
            causes = [c.get("errorSummary") for c in body.get("errorCauses") or [] if c.get("errorSummary")]
            if causes:
                message = f"{message} ({'; '.join(causes)})"
        exc_class = OktaNotFoundError if resp.status_code == 404 else OktaAPIError
        raise exc_class(resp.status_code, message, resp.url, error_code)


def _next_link(resp: requests.Response) -> Optional[str]:
    links = getattr(resp, "links", None) or {}
    return (links.get("next") or {}).get("url")
