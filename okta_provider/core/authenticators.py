"""Authenticator (factor) catalog for Okta Identity Engine orgs."""
from __future__ import annotations
from typing import List

from .errors import ValidationError

DUO_FACTOR = "duo"
EXTERNAL_IDP_FACTOR = "external_idp"
GOOGLE_OTP_FACTOR = "google_otp"
OKTA_EMAIL_FACTOR = "okta_email"
OKTA_PASSWORD_FACTOR = "okta_password"
OKTA_VERIFY_FACTOR = "okta_verify"
ONPREM_MFA_FACTOR = "onprem_mfa"
PHONE_NUMBER_FACTOR = "phone_number"
RSA_TOKEN_FACTOR = "rsa_token"
SECURITY_QUESTION_FACTOR = "security_question"
WEBAUTHN_FACTOR = "webauthn"
YUBIKEY_TOKEN_FACTOR = "yubikey_token"

# Some types are only available behind an org feature flag.
# Yubikey is left out until the public API supports it.
AUTHENTICATOR_PROVIDERS = (
    DUO_FACTOR,
    EXTERNAL_IDP_FACTOR,
    GOOGLE_OTP_FACTOR,
    OKTA_EMAIL_FACTOR,
    OKTA_PASSWORD_FACTOR,
    OKTA_VERIFY_FACTOR,
    ONPREM_MFA_FACTOR,
    PHONE_NUMBER_FACTOR,
    RSA_TOKEN_FACTOR,
    SECURITY_QUESTION_FACTOR,
    WEBAUTHN_FACTOR,
)

# Present in the catalog but not configurable in OIE policies
_NOT_POLICY_CONFIGURABLE = (OKTA_PASSWORD_FACTOR,)


def validate_authenticator_key(key: str) -> str:
    """Raise ValidationError unless ``key`` is a known authenticator."""
    if key not in AUTHENTICATOR_PROVIDERS:
        raise ValidationError(
            f"unknown authenticator '{key}'; expected one of {', '.join(AUTHENTICATOR_PROVIDERS)}"
        )
    return key


def is_policy_configurable(key: str) -> bool:
    return validate_authenticator_key(key) not in _NOT_POLICY_CONFIGURABLE


def known_authenticators(adapter) -> List[dict]:
    """The org's authenticators whose key is in the catalog."""
    return [
        authenticator for authenticator in adapter.list_authenticators()
        if authenticator.get("key") in AUTHENTICATOR_PROVIDERS
    ]
