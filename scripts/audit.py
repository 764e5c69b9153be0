"""Signed audit trail of user reconciliations.

One JSON line per reconciliation: the user, the action, the fields that
changed, the status before and after and, on failure, the step that failed.
Lines carry an HMAC-SHA256 signature when a signing key is configured, so
``python -m scripts.audit`` can detect edited entries.
"""
from __future__ import annotations
import datetime
import hashlib
import hmac
import json
import os
import sys
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import List, Optional, Tuple

from okta_provider.core.delta import ChangeSet
from okta_provider.core.errors import ProviderError
from okta_provider.core.schema import UserData

DEFAULT_TRAIL = ".runtime/audit/user-events.jsonl"
STATUS_DELETED = "DELETED"


# ─────────────────────────────────────────────────────────────────────────────
# Records
# ─────────────────────────────────────────────────────────────────────────────

@dataclass
class AuditRecord:
    """Outcome of one create, update, delete or import."""
    action: str
    login: str
    user_id: str = ""
    org: str = ""
    operator: str = "automation"
    changes: List[str] = field(default_factory=list)
    status_before: str = ""
    status_after: str = ""
    failed_step: str = ""
    error: str = ""

    @property
    def success(self) -> bool:
        return not self.error

    def to_dict(self) -> dict:
        data = asdict(self)
        data["success"] = self.success
        return data


def describe(
    action: str,
    *,
    prior: Optional[UserData] = None,
    desired: Optional[UserData] = None,
    result: Optional[UserData] = None,
    changes: Optional[ChangeSet] = None,
    error: Optional[ProviderError] = None,
    org: str = "",
    operator: str = "automation",
) -> AuditRecord:
    """Build the audit record of a reconciliation from its inputs and outcome.

    Args:
        action: create, update, delete or import
        prior: Recorded state before the operation (None for create/import)
        desired: Desired configuration (create/update)
        result: State returned by the operation on success
        changes: Change flags the update was driven by
        error: Failure raised by the operation; its partial ``state`` stands
            in for ``result``
        org: Okta org URL
        operator: Who ran the operation

    Returns:
        AuditRecord ready to append to the trail
    """
    partial = error.state if error is not None and isinstance(error.state, UserData) else None
    after = result if result is not None else partial
    known = [user for user in (after, prior, desired) if user is not None]

    if action == "delete" and error is None:
        status_after = STATUS_DELETED
    else:
        status_after = after.status if after is not None else ""

    return AuditRecord(
        action=action,
        login=next((user.login for user in known if user.login), ""),
        user_id=next((user.id for user in known if user.id), ""),
        org=org,
        operator=operator,
        changes=changes.changed_fields() if changes is not None else [],
        status_before=prior.status if prior is not None and prior.id else "",
        status_after=status_after,
        failed_step=getattr(error, "step", "") if error is not None else "",
        error=str(error) if error is not None else "",
    )


# ─────────────────────────────────────────────────────────────────────────────
# Trail
# ─────────────────────────────────────────────────────────────────────────────

def signing_key() -> bytes:
    """AUDIT_LOG_SIGNING_KEY, else the file named by AUDIT_LOG_SIGNING_KEY_FILE.

    An empty key leaves entries unsigned.
    """
    key = os.environ.get("AUDIT_LOG_SIGNING_KEY")
    if key is None:
        key_file = os.environ.get("AUDIT_LOG_SIGNING_KEY_FILE")
        key = Path(key_file).read_text(encoding="utf-8") if key_file else ""
    return key.strip().encode("utf-8")


class AuditTrail:
    """Append-only JSONL file of audit records."""

    def __init__(self, path: Path, key: bytes = b""):
        self.path = Path(path)
        self.key = key

    @classmethod
    def from_env(cls) -> "AuditTrail":
        return cls(Path(os.environ.get("AUDIT_LOG_FILE", DEFAULT_TRAIL)), signing_key())

    def _signature(self, entry: dict) -> str:
        canonical = json.dumps(entry, sort_keys=True, separators=(",", ":"))
        return hmac.new(self.key, canonical.encode("utf-8"), hashlib.sha256).hexdigest()

    def append(self, record: AuditRecord) -> dict:
        """Write ``record`` as one line; the trail is created owner-only."""
        entry = {"timestamp": datetime.datetime.now(datetime.timezone.utc).isoformat()}
        entry.update(record.to_dict())
        if self.key:
            entry["signature"] = self._signature(entry)

        self.path.parent.mkdir(mode=0o700, parents=True, exist_ok=True)
        with self.path.open("a", encoding="utf-8") as handle:
            handle.write(json.dumps(entry, ensure_ascii=False) + "\n")
        self.path.chmod(0o600)
        return entry

    def entries(self) -> List[dict]:
        if not self.path.exists():
            return []
        with self.path.open(encoding="utf-8") as handle:
            return [json.loads(line) for line in handle if line.strip()]

    def verify(self) -> Tuple[int, int]:
        """Count (entries, entries whose signature matches)."""
        entries = self.entries()
        valid = 0
        for entry in entries:
            signature = entry.pop("signature", "")
            if signature and self.key and hmac.compare_digest(signature, self._signature(entry)):
                valid += 1
        return len(entries), valid


def record(entry: AuditRecord, trail: Optional[AuditTrail] = None) -> bool:
    """Append ``entry``; a broken trail is reported on stderr, never raised.

    Returns:
        True if the entry was written
    """
    try:
        (trail or AuditTrail.from_env()).append(entry)
    except (OSError, TypeError, ValueError) as e:
        print(f"[audit] Warning: could not record {entry.action} of {entry.login}: {e}", file=sys.stderr)
        return False
    return True


if __name__ == "__main__":
    total, valid = AuditTrail.from_env().verify()
    print(f"Audit trail: {valid}/{total} entries with valid signatures")
    sys.exit(0 if total == valid else 1)
