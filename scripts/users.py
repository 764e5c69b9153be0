"""Reconcile an Okta user from a declarative YAML document.

This module serves as a CLI wrapper around okta_provider.core. Desired state
comes from a YAML file; recorded state lives in a local JSON state file.
"""
from __future__ import annotations
import argparse
import json
import logging
import os
import sys
from pathlib import Path

import yaml

SCRIPT_DIR = Path(__file__).parent
PROJECT_ROOT = SCRIPT_DIR.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from okta_provider.config import load_settings
from okta_provider.core.app_filter import build_app_filters, find_app, list_apps
from okta_provider.core.authenticators import known_authenticators
from okta_provider.core.delta import compute_changes
from okta_provider.core.errors import ProviderError
from okta_provider.core.okta import OktaAdapter
from okta_provider.core.schema import UserData, validate_user_data
from okta_provider.core.user_resource import (
    create_user,
    delete_user,
    import_user,
    read_user,
    update_user,
)
from scripts import audit

DEFAULT_STATE_FILE = "okta-user.state.json"


# ─────────────────────────────────────────────────────────────────────────────
# State and document files
# ─────────────────────────────────────────────────────────────────────────────

def load_document(path: str) -> UserData:
    """Parse a YAML user document (optionally nested under a ``user`` key)."""
    with open(path, encoding="utf-8") as handle:
        raw = yaml.safe_load(handle) or {}
    if not isinstance(raw, dict):
        raise ProviderError(f"{path}: expected a mapping of user attributes")
    if isinstance(raw.get("user"), dict):
        raw = raw["user"]
    return UserData.from_dict(raw)


def load_state(path: str) -> UserData | None:
    state_file = Path(path)
    if not state_file.exists():
        return None
    with state_file.open(encoding="utf-8") as handle:
        return UserData.from_dict(json.load(handle))


def save_state(path: str, state: UserData) -> None:
    """Write recorded state; the file holds credentials, so it is owner-only."""
    state_file = Path(path)
    with state_file.open("w", encoding="utf-8") as handle:
        json.dump(state.to_dict(), handle, indent=2, sort_keys=True)
        handle.write("\n")
    state_file.chmod(0o600)


def remove_state(path: str) -> None:
    state_file = Path(path)
    if state_file.exists():
        state_file.unlink()


# ─────────────────────────────────────────────────────────────────────────────
# Commands
# ─────────────────────────────────────────────────────────────────────────────

def cmd_plan(args, config) -> int:
    desired = validate_user_data(load_document(args.config))
    prior = load_state(args.state_file)
    if prior is None or not prior.id:
        print(f"[plan] user '{desired.login}' will be created")
        return 0
    changes = compute_changes(prior, desired)
    if not changes:
        print(f"[plan] user '{prior.id}' is up to date")
        return 0
    print(f"[plan] user '{prior.id}' will be updated: {', '.join(changes.changed_fields())}")
    return 0


def _audit(args, config, action: str, **outcome) -> None:
    audit.record(audit.describe(action, org=config.org_url, operator=args.operator, **outcome))


def cmd_apply(args, config) -> int:
    desired = load_document(args.config)
    prior = load_state(args.state_file)
    adapter = OktaAdapter.from_settings(config)
    poll = {"poll_interval": config.status_poll_interval, "poll_timeout": config.status_poll_timeout}

    if prior is None or not prior.id:
        action, prior, changes = "create", None, None
    else:
        action, changes = "update", compute_changes(prior, desired)

    try:
        if changes is None:
            state = create_user(adapter, desired, **poll)
        else:
            state = update_user(adapter, prior, desired, changes, **poll)
    except ProviderError as e:
        print(f"[{action}] Error: {e}", file=sys.stderr)
        if e.state is not None and e.state.id:
            save_state(args.state_file, e.state)
        _audit(args, config, action, prior=prior, desired=desired, changes=changes, error=e)
        return 1

    save_state(args.state_file, state)
    _audit(args, config, action, prior=prior, desired=desired, changes=changes, result=state)
    print(f"[{action}] user '{state.login}' ({state.id}) is {state.status}", file=sys.stderr)
    return 0


def cmd_refresh(args, config) -> int:
    prior = load_state(args.state_file)
    if prior is None or not prior.id:
        print("[refresh] Error: no recorded user in state file", file=sys.stderr)
        return 1
    state = read_user(OktaAdapter.from_settings(config), prior)
    if state is None:
        remove_state(args.state_file)
        print(f"[refresh] user '{prior.id}' no longer exists; state removed", file=sys.stderr)
        return 0
    save_state(args.state_file, state)
    print(f"[refresh] user '{state.login}' ({state.id}) is {state.status} (raw {state.raw_status})", file=sys.stderr)
    return 0


def cmd_destroy(args, config) -> int:
    prior = load_state(args.state_file)
    if prior is None or not prior.id:
        print("[destroy] nothing to destroy", file=sys.stderr)
        return 0
    try:
        delete_user(OktaAdapter.from_settings(config), prior)
    except ProviderError as e:
        print(f"[destroy] Error: {e}", file=sys.stderr)
        _audit(args, config, "delete", prior=prior, error=e)
        return 1
    remove_state(args.state_file)
    _audit(args, config, "delete", prior=prior)
    print(f"[destroy] user '{prior.id}' deleted", file=sys.stderr)
    return 0


def cmd_import(args, config) -> int:
    if load_state(args.state_file) is not None:
        print(f"[import] Error: {args.state_file} already records a user", file=sys.stderr)
        return 1
    state = import_user(OktaAdapter.from_settings(config), args.id)
    save_state(args.state_file, state)
    _audit(args, config, "import", result=state)
    print(f"[import] user '{state.login}' ({state.id}) imported", file=sys.stderr)
    return 0


def cmd_apps(args, config) -> int:
    filters = build_app_filters(args.id, args.label, args.label_prefix, args.active_only)
    adapter = OktaAdapter.from_settings(config)
    if args.first:
        apps = [find_app(adapter, filters, config.page_limit)]
    else:
        apps = list_apps(adapter, filters, config.page_limit)
    for app in apps:
        print(json.dumps({k: app.get(k) for k in ("id", "name", "label", "status")}))
    return 0


def cmd_authenticators(args, config) -> int:
    for authenticator in known_authenticators(OktaAdapter.from_settings(config)):
        print(f"{authenticator.get('key')}\t{authenticator.get('status', '')}\t{authenticator.get('id', '')}")
    return 0


COMMANDS = {
    "plan": cmd_plan,
    "apply": cmd_apply,
    "refresh": cmd_refresh,
    "destroy": cmd_destroy,
    "import": cmd_import,
    "apps": cmd_apps,
    "authenticators": cmd_authenticators,
}


def main(argv: list[str] | None = None) -> None:
    """Command-line entry point."""
    parser = argparse.ArgumentParser(description="Okta user reconciler")
    parser.add_argument("--org-url", default=os.environ.get("OKTA_ORG_URL"))
    parser.add_argument("--api-token", default=None, help="Defaults to /run/secrets/okta_api_token or OKTA_API_TOKEN")
    parser.add_argument("--state-file", default=os.environ.get("OKTA_STATE_FILE", DEFAULT_STATE_FILE))
    parser.add_argument("--operator", default=os.environ.get("OKTA_OPERATOR", "automation"),
                        help="Operator identifier for audit logs (default: automation)")
    parser.add_argument("-v", "--verbose", action="store_true")

    sub = parser.add_subparsers(dest="cmd")

    sp = sub.add_parser("plan")
    sp.add_argument("--config", required=True)

    sa = sub.add_parser("apply")
    sa.add_argument("--config", required=True)

    sub.add_parser("refresh")
    sub.add_parser("destroy")

    si = sub.add_parser("import")
    si.add_argument("--id", required=True, help="User id or login")

    sl = sub.add_parser("apps")
    sl.add_argument("--id", default="")
    sl.add_argument("--label", default="")
    sl.add_argument("--label-prefix", default="")
    sl.add_argument("--active-only", action="store_true")
    sl.add_argument("--first", action="store_true", help="Resolve a single application")

    sub.add_parser("authenticators")

    args = parser.parse_args(argv)

    if not args.cmd:
        parser.print_help()
        return

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    # plan never talks to Okta
    config = None
    if args.cmd != "plan":
        try:
            config = load_settings(org_url=args.org_url, api_token=args.api_token)
        except (RuntimeError, ValueError) as e:
            parser.error(str(e))

    try:
        code = COMMANDS[args.cmd](args, config)
    except (ProviderError, ValueError, OSError) as e:
        print(f"[{args.cmd}] Error: {e}", file=sys.stderr)
        sys.exit(1)
    if code:
        sys.exit(code)


if __name__ == "__main__":
    main()
