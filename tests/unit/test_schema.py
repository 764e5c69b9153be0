import json

import pytest

from okta_provider.core.errors import ValidationError
from okta_provider.core.schema import (
    PasswordHash,
    UserData,
    build_credentials,
    build_profile,
    flatten_profile,
    to_camel,
    validate_user_data,
)

from conftest import make_user


class TestUserDataFromDict:
    def test_flat_document(self):
        user = make_user(admin_roles=["APP_ADMIN"], group_memberships=[])

        assert user.login == "alice@example.com"
        assert user.profile["first_name"] == "Alice"
        assert user.status == "ACTIVE"
        assert user.admin_roles == {"APP_ADMIN"}
        assert user.group_memberships == set()

    def test_unmanaged_relations_are_none(self):
        user = make_user()
        assert user.admin_roles is None
        assert user.group_memberships is None

    def test_nested_profile(self):
        user = UserData.from_dict({"profile": {"login": "bob@example.com", "city": "Lyon"}})
        assert user.profile == {"login": "bob@example.com", "city": "Lyon"}

    def test_unknown_attribute_rejected(self):
        with pytest.raises(ValidationError, match="unknown attributes: favourite_colour"):
            make_user(favourite_colour="blue")

    def test_unknown_profile_attribute_points_to_custom(self):
        with pytest.raises(ValidationError, match="custom_profile_attributes"):
            UserData.from_dict({"profile": {"shoeSize": "42"}})

    def test_custom_mapping_is_serialized(self):
        user = make_user(custom_profile_attributes={"b": 1, "a": "x"})
        assert user.custom_profile_attributes == '{"a": "x", "b": 1}'

    def test_password_hash_list_of_one(self):
        user = make_user(password_hash=[{"algorithm": "BCRYPT", "value": "h", "salt": "s", "work_factor": 10}])
        assert user.password_hash == PasswordHash("BCRYPT", "h", salt="s", work_factor=10)

    def test_state_document_survives_to_dict(self):
        user = make_user(id="00u1", admin_roles=["USER_ADMIN", "APP_ADMIN"], raw_status="PASSWORD_EXPIRED")
        data = user.to_dict()

        assert data["admin_roles"] == ["APP_ADMIN", "USER_ADMIN"]
        assert "group_memberships" not in data
        assert UserData.from_dict(data) == user


class TestValidateUserData:
    def test_valid_document(self):
        user = make_user()
        assert validate_user_data(user) is user

    @pytest.mark.parametrize("missing", ["login", "email", "first_name", "last_name"])
    def test_required_profile_attributes(self, missing):
        with pytest.raises(ValidationError, match=f"{missing} is required"):
            validate_user_data(make_user(**{missing: ""}))

    def test_invalid_email(self):
        with pytest.raises(ValidationError, match="email is not a valid email address"):
            validate_user_data(make_user(email="alice"))

    def test_invalid_profile_url(self):
        with pytest.raises(ValidationError, match="profile_url"):
            validate_user_data(make_user(profile_url="example.com/alice"))

    def test_custom_attributes_must_be_an_object(self):
        with pytest.raises(ValidationError, match="JSON object"):
            validate_user_data(make_user(custom_profile_attributes="[1]"))

    @pytest.mark.parametrize("status", ["PROVISIONED", "RECOVERY", "active"])
    def test_status_outside_configurable_set(self, status):
        with pytest.raises(ValidationError, match="status must be one of"):
            validate_user_data(make_user(status=status))

    def test_unknown_admin_role(self):
        with pytest.raises(ValidationError, match="admin_roles"):
            validate_user_data(make_user(admin_roles=["ROOT"]))

    def test_credential_sources_are_exclusive(self):
        user = make_user(password="Secret-123", password_inline_hook="default")
        with pytest.raises(ValidationError, match="only one of password, password_inline_hook"):
            validate_user_data(user)

    def test_expire_password_requires_password(self):
        with pytest.raises(ValidationError, match="expire_password_on_create requires password"):
            validate_user_data(make_user(expire_password_on_create=True))

    @pytest.mark.parametrize("answer", ["abc", "x" * 1001])
    def test_recovery_answer_length(self, answer):
        with pytest.raises(ValidationError, match="recovery_answer"):
            validate_user_data(make_user(recovery_question="Pet?", recovery_answer=answer))

    @pytest.mark.parametrize(
        "block, message",
        [
            ({"algorithm": "ROT13", "value": "h"}, "algorithm"),
            ({"algorithm": "BCRYPT", "value": ""}, "value is required"),
            ({"algorithm": "BCRYPT", "value": "h", "work_factor": 21}, "work_factor"),
            ({"algorithm": "SHA-256", "value": "h", "salt_order": "MIDDLE"}, "salt_order"),
        ],
    )
    def test_password_hash_rules(self, block, message):
        with pytest.raises(ValidationError, match=message):
            validate_user_data(make_user(password_hash=block))

    def test_password_inline_hook_value(self):
        with pytest.raises(ValidationError, match="password_inline_hook"):
            validate_user_data(make_user(password_inline_hook="custom"))


class TestOktaRepresentation:
    def test_to_camel(self):
        assert to_camel("cost_center") == "costCenter"
        assert to_camel("login") == "login"

    def test_catalog_attribute_beats_custom_attribute(self):
        user = make_user(
            custom_profile_attributes=json.dumps({"firstName": "Mallory", "badge": 7}),
        )

        profile = build_profile(user)

        assert profile["firstName"] == "Alice"
        assert profile["badge"] == 7
        assert profile["lastName"] == "Smith"

    def test_credentials_password_value(self):
        creds = build_credentials(make_user(password="Secret-123", recovery_question="Pet?", recovery_answer="Rex!"))
        assert creds == {
            "password": {"value": "Secret-123"},
            "recovery_question": {"question": "Pet?", "answer": "Rex!"},
        }

    def test_credentials_hash_payload(self):
        user = make_user(password_hash={"algorithm": "SHA-512", "value": "h", "salt": "s", "salt_order": "PREFIX"})
        assert build_credentials(user) == {
            "password": {"hash": {"algorithm": "SHA-512", "value": "h", "salt": "s", "saltOrder": "PREFIX"}},
        }

    def test_credentials_hook(self):
        assert build_credentials(make_user(password_inline_hook="default")) == {
            "password": {"hook": {"type": "default"}},
        }

    def test_no_credentials(self):
        assert build_credentials(make_user()) is None

    def test_flatten_profile_splits_custom_attributes(self):
        profile, custom = flatten_profile({
            "login": "alice@example.com",
            "costCenter": "42",
            "badge": 7,
            "nickname": None,
        })

        assert profile == {"login": "alice@example.com", "cost_center": "42"}
        assert json.loads(custom) == {"badge": 7}

    def test_flatten_profile_without_custom(self):
        assert flatten_profile({"login": "a@example.com"})[1] is None
