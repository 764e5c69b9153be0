"""Okta-specific exceptions for error handling."""


class OktaError(Exception):
    """Base exception for all Okta operations."""
    pass


class OktaAPIError(OktaError):
    """HTTP error from the Okta management API.
    
    Attributes:
        status_code: HTTP status code
        message: Error summary from response
        endpoint: API endpoint that failed
        error_code: Okta error code (e.g., E0000007), empty when absent
    """
    
    def __init__(self, status_code: int, message: str, endpoint: str, error_code: str = ""):
        self.status_code = status_code
        self.message = message
        self.endpoint = endpoint
        self.error_code = error_code
        prefix = f"[{status_code}]"
        if error_code:
            prefix = f"[{status_code} {error_code}]"
        super().__init__(f"{prefix} {endpoint}: {message}")


class OktaNotFoundError(OktaAPIError):
    """Resource does not exist (HTTP 404)."""
    pass
