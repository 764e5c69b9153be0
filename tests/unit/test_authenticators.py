import pytest

from okta_provider.core import authenticators
from okta_provider.core.errors import ValidationError


def test_catalog_excludes_yubikey():
    assert authenticators.YUBIKEY_TOKEN_FACTOR not in authenticators.AUTHENTICATOR_PROVIDERS
    assert len(authenticators.AUTHENTICATOR_PROVIDERS) == 11


def test_unknown_key_rejected():
    with pytest.raises(ValidationError, match="unknown authenticator 'sms'"):
        authenticators.validate_authenticator_key("sms")


@pytest.mark.parametrize(
    "key, configurable",
    [("okta_password", False), ("okta_verify", True), ("webauthn", True)],
)
def test_policy_configurable(key, configurable):
    assert authenticators.is_policy_configurable(key) is configurable


def test_known_authenticators_filters_org_list(adapter):
    adapter.list_authenticators.return_value = [
        {"id": "aut1", "key": "okta_email", "status": "ACTIVE"},
        {"id": "aut2", "key": "custom_app", "status": "ACTIVE"},
        {"id": "aut3", "key": "phone_number", "status": "INACTIVE"},
    ]

    keys = [a["key"] for a in authenticators.known_authenticators(adapter)]

    assert keys == ["okta_email", "phone_number"]
