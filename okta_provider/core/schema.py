"""Declarative schema for the Okta user resource.

Defines the attribute catalog, the ``UserData`` record used both as desired
configuration and as recorded state, validation of that record, and the
conversions between it and Okta's user representation.
"""
from __future__ import annotations
import copy
import json
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Mapping, Optional, Set, Tuple

from .errors import ValidationError
from .validators import (
    validate_choice,
    validate_email,
    validate_json_object,
    validate_length,
    validate_range,
    validate_url,
)

# ─────────────────────────────────────────────────────────────────────────────
# Status catalog
# ─────────────────────────────────────────────────────────────────────────────
STATUS_ACTIVE = "ACTIVE"
STATUS_STAGED = "STAGED"
STATUS_SUSPENDED = "SUSPENDED"
STATUS_DEPROVISIONED = "DEPROVISIONED"
STATUS_PROVISIONED = "PROVISIONED"
STATUS_PASSWORD_EXPIRED = "PASSWORD_EXPIRED"
STATUS_RECOVERY = "RECOVERY"

CONFIGURABLE_STATUSES = (STATUS_ACTIVE, STATUS_STAGED, STATUS_DEPROVISIONED, STATUS_SUSPENDED)

# ─────────────────────────────────────────────────────────────────────────────
# Attribute catalog
# ─────────────────────────────────────────────────────────────────────────────
PROFILE_KEYS = (
    "city",
    "cost_center",
    "country_code",
    "department",
    "display_name",
    "division",
    "email",
    "employee_number",
    "first_name",
    "honorific_prefix",
    "honorific_suffix",
    "last_name",
    "locale",
    "login",
    "manager",
    "manager_id",
    "middle_name",
    "mobile_phone",
    "nick_name",
    "organization",
    "postal_address",
    "preferred_language",
    "primary_phone",
    "profile_url",
    "second_email",
    "state",
    "street_address",
    "timezone",
    "title",
    "user_type",
    "zip_code",
)
REQUIRED_PROFILE_KEYS = ("email", "first_name", "last_name", "login")

VALID_ADMIN_ROLES = (
    "API_ACCESS_MANAGEMENT_ADMIN",
    "APP_ADMIN",
    "GROUP_MEMBERSHIP_ADMIN",
    "HELP_DESK_ADMIN",
    "MOBILE_ADMIN",
    "ORG_ADMIN",
    "READ_ONLY_ADMIN",
    "REPORT_ADMIN",
    "SUPER_ADMIN",
    "USER_ADMIN",
)

HASH_ALGORITHMS = ("BCRYPT", "SHA-512", "SHA-256", "SHA-1", "MD5")
SALT_ORDERS = ("PREFIX", "POSTFIX")
PASSWORD_INLINE_HOOKS = ("default",)
RECOVERY_ANSWER_MIN = 4
RECOVERY_ANSWER_MAX = 1000
WORK_FACTOR_MIN = 1
WORK_FACTOR_MAX = 20


def to_camel(key: str) -> str:
    """cost_center -> costCenter"""
    head, *rest = key.split("_")
    return head + "".join(part.capitalize() for part in rest)


CAMEL_PROFILE_KEYS: Dict[str, str] = {to_camel(k): k for k in PROFILE_KEYS}


# ─────────────────────────────────────────────────────────────────────────────
# Records
# ─────────────────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class PasswordHash:
    """Precomputed password hash to import into Okta."""
    algorithm: str
    value: str
    salt: Optional[str] = None
    salt_order: Optional[str] = None
    work_factor: Optional[int] = None

    @classmethod
    def from_value(cls, raw: Any) -> Optional["PasswordHash"]:
        """Parse a hash block.

        Accepts a mapping, a ``PasswordHash``, or a list holding at most one
        of those (the block is recorded as a set of one). Empty input yields
        None.

        Raises:
            ValidationError: On a malformed block
        """
        if raw is None or isinstance(raw, PasswordHash):
            return raw
        if isinstance(raw, (list, tuple)):
            if not raw:
                return None
            if len(raw) > 1:
                raise ValidationError("password_hash accepts at most one block")
            return cls.from_value(raw[0])
        if not isinstance(raw, Mapping):
            raise ValidationError("password_hash must be a mapping")
        if not raw:
            return None
        unknown = set(raw) - {"algorithm", "value", "salt", "salt_order", "work_factor"}
        if unknown:
            raise ValidationError(f"password_hash has unknown attributes: {', '.join(sorted(unknown))}")
        return cls(
            algorithm=raw.get("algorithm") or "",
            value=raw.get("value") or "",
            salt=raw.get("salt") or None,
            salt_order=raw.get("salt_order") or None,
            work_factor=raw.get("work_factor") or None,
        )

    def to_payload(self) -> dict:
        """Okta ``PasswordCredentialHash`` body."""
        payload: Dict[str, Any] = {"algorithm": self.algorithm, "value": self.value}
        if self.salt:
            payload["salt"] = self.salt
        if self.salt_order:
            payload["saltOrder"] = self.salt_order
        if self.work_factor:
            payload["workFactor"] = self.work_factor
        return payload

    def to_dict(self) -> dict:
        data: Dict[str, Any] = {"algorithm": self.algorithm, "value": self.value}
        for name in ("salt", "salt_order", "work_factor"):
            if getattr(self, name) is not None:
                data[name] = getattr(self, name)
        return data


@dataclass
class UserData:
    """Desired configuration or recorded state of one Okta user.

    ``admin_roles`` and ``group_memberships`` are None when the relation is
    not managed; an empty set means "manage it, and keep it empty".
    ``id`` stays empty until the user exists remotely.
    """
    profile: Dict[str, str] = field(default_factory=dict)
    custom_profile_attributes: Optional[str] = None
    status: str = STATUS_ACTIVE
    raw_status: str = ""
    admin_roles: Optional[Set[str]] = None
    group_memberships: Optional[Set[str]] = None
    skip_roles: bool = False
    password: Optional[str] = None
    old_password: Optional[str] = None
    password_hash: Optional[PasswordHash] = None
    password_inline_hook: Optional[str] = None
    recovery_question: Optional[str] = None
    recovery_answer: Optional[str] = None
    expire_password_on_create: bool = False
    id: str = ""

    @property
    def login(self) -> str:
        return self.profile.get("login", "")

    def copy(self) -> "UserData":
        return copy.deepcopy(self)

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "UserData":
        """Build from a flat attribute document (YAML config or JSON state).

        Profile attributes may be given at top level or under ``profile``.

        Raises:
            ValidationError: On unknown attributes
        """
        raw = dict(raw or {})
        profile: Dict[str, str] = {}
        for key, value in dict(raw.pop("profile", None) or {}).items():
            profile[key] = value
        for key in PROFILE_KEYS:
            if key in raw:
                profile[key] = raw.pop(key)
        profile = {k: str(v) for k, v in profile.items() if v not in (None, "")}
        unknown_profile = set(profile) - set(PROFILE_KEYS)
        if unknown_profile:
            raise ValidationError(
                f"unknown profile attributes: {', '.join(sorted(unknown_profile))} "
                "(use custom_profile_attributes)"
            )

        custom = raw.pop("custom_profile_attributes", None)
        if isinstance(custom, Mapping):
            custom = json.dumps(custom, sort_keys=True)

        data = cls(
            profile=profile,
            custom_profile_attributes=custom or None,
            status=raw.pop("status", None) or STATUS_ACTIVE,
            raw_status=raw.pop("raw_status", None) or "",
            admin_roles=_optional_set(raw.pop("admin_roles", None)),
            group_memberships=_optional_set(raw.pop("group_memberships", None)),
            skip_roles=bool(raw.pop("skip_roles", False)),
            password=raw.pop("password", None) or None,
            old_password=raw.pop("old_password", None) or None,
            password_hash=PasswordHash.from_value(raw.pop("password_hash", None)),
            password_inline_hook=raw.pop("password_inline_hook", None) or None,
            recovery_question=raw.pop("recovery_question", None) or None,
            recovery_answer=raw.pop("recovery_answer", None) or None,
            expire_password_on_create=bool(raw.pop("expire_password_on_create", False)),
            id=raw.pop("id", None) or "",
        )
        if raw:
            raise ValidationError(f"unknown attributes: {', '.join(sorted(raw))}")
        return data

    def to_dict(self) -> dict:
        """Flat attribute document; sets are emitted sorted."""
        data: Dict[str, Any] = {"id": self.id}
        data.update(sorted(self.profile.items()))
        data["status"] = self.status
        data["raw_status"] = self.raw_status
        data["skip_roles"] = self.skip_roles
        data["expire_password_on_create"] = self.expire_password_on_create
        optional = {
            "custom_profile_attributes": self.custom_profile_attributes,
            "admin_roles": sorted(self.admin_roles) if self.admin_roles is not None else None,
            "group_memberships": sorted(self.group_memberships) if self.group_memberships is not None else None,
            "password": self.password,
            "old_password": self.old_password,
            "password_hash": [self.password_hash.to_dict()] if self.password_hash else None,
            "password_inline_hook": self.password_inline_hook,
            "recovery_question": self.recovery_question,
            "recovery_answer": self.recovery_answer,
        }
        data.update({k: v for k, v in optional.items() if v is not None})
        return data


def _optional_set(raw: Optional[Iterable[str]]) -> Optional[Set[str]]:
    if raw is None:
        return None
    if isinstance(raw, str):
        raise ValidationError("role and group lists must be sequences, not strings")
    return {str(item) for item in raw}


# ─────────────────────────────────────────────────────────────────────────────
# Validation
# ─────────────────────────────────────────────────────────────────────────────

def validate_password_hash(password_hash: PasswordHash) -> None:
    validate_choice(password_hash.algorithm, "password_hash.algorithm", HASH_ALGORITHMS)
    if not password_hash.value:
        raise ValidationError("password_hash.value is required")
    validate_range(password_hash.work_factor, "password_hash.work_factor", WORK_FACTOR_MIN, WORK_FACTOR_MAX)
    if password_hash.salt_order is not None:
        validate_choice(password_hash.salt_order, "password_hash.salt_order", SALT_ORDERS)


def credential_sources(data: UserData) -> Tuple[str, ...]:
    """Names of the credential sources configured on ``data``."""
    present = (
        ("password", bool(data.password)),
        ("password_hash", data.password_hash is not None),
        ("password_inline_hook", bool(data.password_inline_hook)),
    )
    return tuple(name for name, is_set in present if is_set)


def validate_user_data(data: UserData) -> UserData:
    """Validate a desired configuration.

    Args:
        data: Desired user configuration

    Returns:
        The same record, for chaining

    Raises:
        ValidationError: On the first rule violated
    """
    for key in REQUIRED_PROFILE_KEYS:
        if not data.profile.get(key):
            raise ValidationError(f"{key} is required")

    validate_email(data.profile["email"], "email")
    if data.profile.get("second_email"):
        validate_email(data.profile["second_email"], "second_email")
    if data.profile.get("profile_url"):
        validate_url(data.profile["profile_url"], "profile_url")
    if data.custom_profile_attributes:
        validate_json_object(data.custom_profile_attributes, "custom_profile_attributes")

    validate_choice(data.status, "status", CONFIGURABLE_STATUSES)

    for role in sorted(data.admin_roles or ()):
        validate_choice(role, "admin_roles", VALID_ADMIN_ROLES)

    sources = credential_sources(data)
    if len(sources) > 1:
        raise ValidationError(f"only one of {', '.join(sources)} may be set")
    if data.password_hash is not None:
        validate_password_hash(data.password_hash)
    if data.password_inline_hook:
        validate_choice(data.password_inline_hook, "password_inline_hook", PASSWORD_INLINE_HOOKS)
    if data.expire_password_on_create and not data.password:
        raise ValidationError("expire_password_on_create requires password to be set")

    if data.recovery_answer is not None:
        validate_length(data.recovery_answer, "recovery_answer", RECOVERY_ANSWER_MIN, RECOVERY_ANSWER_MAX)
    return data


# ─────────────────────────────────────────────────────────────────────────────
# Okta representation
# ─────────────────────────────────────────────────────────────────────────────

def build_profile(data: UserData) -> dict:
    """Build the Okta profile object.

    Custom attributes go in first so a catalog attribute of the same name
    always wins.
    """
    profile: Dict[str, Any] = {}
    if data.custom_profile_attributes:
        profile.update(json.loads(data.custom_profile_attributes))
    for key in PROFILE_KEYS:
        value = data.profile.get(key)
        if value:
            profile[to_camel(key)] = value
    return profile


def build_credentials(data: UserData) -> Optional[dict]:
    """Credentials for user creation, from whichever single source is set."""
    password: Dict[str, Any] = {}
    if data.password_inline_hook:
        password["hook"] = {"type": data.password_inline_hook}
    elif data.password_hash is not None:
        password["hash"] = data.password_hash.to_payload()
    elif data.password:
        password["value"] = data.password

    credentials: Dict[str, Any] = {}
    if password:
        credentials["password"] = password
    if data.recovery_question:
        credentials["recovery_question"] = {
            "question": data.recovery_question,
            "answer": data.recovery_answer or "",
        }
    return credentials or None


def flatten_profile(okta_profile: Mapping[str, Any]) -> Tuple[Dict[str, str], Optional[str]]:
    """Split an Okta profile into catalog attributes and custom-attribute JSON.

    Returns:
        (profile keyed by snake_case name, custom attributes JSON or None)
    """
    profile: Dict[str, str] = {}
    custom: Dict[str, Any] = {}
    for key, value in (okta_profile or {}).items():
        if value is None:
            continue
        if key in CAMEL_PROFILE_KEYS:
            profile[CAMEL_PROFILE_KEYS[key]] = str(value)
        else:
            custom[key] = value
    custom_json = json.dumps(custom, sort_keys=True) if custom else None
    return profile, custom_json


def normalize_json(raw: Optional[str]) -> Optional[str]:
    """Canonical form of a JSON document (sorted keys) for comparison."""
    if not raw:
        return None
    try:
        return json.dumps(json.loads(raw), sort_keys=True)
    except ValueError:
        return raw
