"""Settings loader with environment variable and Docker secrets integration."""
from __future__ import annotations
import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

DEMO_API_TOKEN = "demo-api-token"


def _load_secret_from_file(secret_name: str, env_var: str | None = None) -> str | None:
    """
    Load secret from /run/secrets (Docker secrets pattern).

    Priority:
    1. /run/secrets/{secret_name} (Docker secrets mount)
    2. Environment variable (fallback)

    Args:
        secret_name: Name of the secret file in /run/secrets
        env_var: Optional environment variable name to check as fallback

    Returns:
        Secret value or None if not found
    """
    secret_file = Path("/run/secrets") / secret_name

    # Priority 1: Read from /run/secrets
    if secret_file.exists() and secret_file.is_file():
        try:
            secret_value = secret_file.read_text().strip()
            if secret_value:
                print(f"[settings] ✓ Loaded {secret_name} from /run/secrets", file=sys.stderr)
                return secret_value
        except OSError as e:
            print(f"[settings] ✗ Failed to read /run/secrets/{secret_name}: {e}", file=sys.stderr)

    # Priority 2: Fallback to environment variable
    if env_var:
        secret_value = os.getenv(env_var)
        if secret_value:
            return secret_value

    return None


@dataclass
class ProviderConfig:
    """Provider configuration container."""
    # Mode
    demo_mode: bool

    # Okta org
    org_name: str = ""
    base_url: str = "okta.com"
    org_url_override: str = ""
    api_token: str = ""

    # HTTP
    request_timeout: float = 30.0
    page_limit: int = 200

    # Lifecycle transitions
    status_poll_interval: float = 1.0
    status_poll_timeout: float = 60.0

    # Audit
    operator: str = "automation"

    @property
    def org_url(self) -> str:
        """Okta org URL, e.g. https://acme.okta.com"""
        if self.org_url_override:
            return self.org_url_override.rstrip("/")
        return f"https://{self.org_name}.{self.base_url}"

    @property
    def api_token_resolved(self) -> str:
        """Get the Okta API token with smart fallback.

        Priority:
        1. Demo mode: fixed demo token
        2. Configured value in api_token
        3. Docker secrets: /run/secrets/okta_api_token
        4. Environment variable: OKTA_API_TOKEN

        Returns:
            API token string

        Raises:
            ValueError: If token not found in production mode
        """
        if self.demo_mode:
            return DEMO_API_TOKEN

        if self.api_token:
            return self.api_token

        token = _load_secret_from_file("okta_api_token", "OKTA_API_TOKEN")
        if token:
            return token

        raise ValueError(
            "OKTA_API_TOKEN not found. "
            "Set DEMO_MODE=true or provide the token via Docker secrets or environment variable."
        )


def _get_or_generate(var_name: str, demo_default: Optional[str] = None, required: bool = True, demo_mode: bool = False) -> str:
    """Get environment variable or use demo default."""
    value = os.environ.get(var_name)
    if value:
        return value

    if demo_mode and demo_default is not None:
        print(f"[demo-mode] Using default for {var_name}", file=sys.stderr)
        return demo_default

    if not required:
        return ""

    raise RuntimeError(f"Environment variable {var_name} is required in production mode.")


def _number(var_name: str, default: float, cast=float):
    raw = os.environ.get(var_name)
    if raw is None or not raw.strip():
        return default
    try:
        value = cast(raw)
    except ValueError:
        raise ValueError(f"{var_name} must be a number, got '{raw}'")
    if value <= 0:
        raise ValueError(f"{var_name} must be positive, got '{raw}'")
    return value


def load_settings(org_url: Optional[str] = None, api_token: Optional[str] = None) -> ProviderConfig:
    """Load provider settings from environment and /run/secrets.

    Args:
        org_url: Org URL overriding OKTA_ORG_URL / OKTA_ORG_NAME (CLI flag)
        api_token: API token overriding secrets and OKTA_API_TOKEN (CLI flag)
    """
    demo_mode = os.environ.get("DEMO_MODE", "false").lower() == "true"

    # An explicit org URL makes the org name optional (preview orgs, custom domains)
    org_url_override = (org_url or os.environ.get("OKTA_ORG_URL", "")).strip()
    org_name = _get_or_generate(
        "OKTA_ORG_NAME",
        demo_default="demo",
        required=not org_url_override,
        demo_mode=demo_mode,
    )
    base_url = os.environ.get("OKTA_BASE_URL", "okta.com").strip() or "okta.com"

    api_token = api_token or ""

    request_timeout = _number("OKTA_REQUEST_TIMEOUT", 30.0)
    page_limit = _number("OKTA_PAGE_LIMIT", 200, cast=int)
    status_poll_interval = _number("OKTA_STATUS_POLL_INTERVAL", 1.0)
    status_poll_timeout = _number("OKTA_STATUS_POLL_TIMEOUT", 60.0)

    operator = os.environ.get("OKTA_OPERATOR", "automation").strip() or "automation"

    mode_label = "DEMO" if demo_mode else "PRODUCTION"
    config = ProviderConfig(
        demo_mode=demo_mode,
        org_name=org_name,
        base_url=base_url,
        org_url_override=org_url_override,
        api_token=api_token,
        request_timeout=request_timeout,
        page_limit=page_limit,
        status_poll_interval=status_poll_interval,
        status_poll_timeout=status_poll_timeout,
        operator=operator,
    )
    print(f"[settings] Mode={mode_label}; org={config.org_url}", file=sys.stderr)
    if demo_mode:
        print("[settings] WARNING: Demo credentials in use. Do not point this at a real org.", file=sys.stderr)
    return config
