"""Command-line access to the Keycloak Admin API.

This module serves as a CLI wrapper around kcadmin.core.keycloak services.
"""
from __future__ import annotations
import argparse
import json
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import Any, Dict, Optional, Sequence

import yaml

SCRIPT_DIR = Path(__file__).parent
PROJECT_ROOT = SCRIPT_DIR.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from kcadmin.config.settings import AdminConfig, load_secret, load_settings
from kcadmin.core.keycloak import (
    AdminAPIClient,
    KeycloakError,
    Realm,
    Representation,
    User,
)

logger = logging.getLogger("kcadmin.cli")


def _to_plain(value: Any) -> Any:
    if isinstance(value, Representation):
        return value.to_dict()
    if isinstance(value, list):
        return [_to_plain(item) for item in value]
    return value


def _emit(value: Any, fmt: str) -> None:
    plain = _to_plain(value)
    if fmt == "yaml":
        sys.stdout.write(yaml.safe_dump(plain, sort_keys=False, default_flow_style=False))
    else:
        print(json.dumps(plain, indent=2))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Keycloak Admin API helper")
    parser.add_argument("--kc-url", help="Defaults to KEYCLOAK_URL")
    parser.add_argument("--context-path",
                        help="Server context path ('/auth' on legacy servers, '' on current ones)")
    parser.add_argument("--admin-user", help="Defaults to KEYCLOAK_ADMIN")
    parser.add_argument("--admin-pass", default=None,
                        help="Defaults to /run/secrets/keycloak_admin_password or KEYCLOAK_ADMIN_PASSWORD")
    parser.add_argument("--admin-client-id", help="Defaults to KEYCLOAK_ADMIN_CLIENT_ID")
    parser.add_argument("--timeout", type=float, help="Defaults to KEYCLOAK_REQUEST_TIMEOUT")
    parser.add_argument("--insecure", action="store_true", help="Skip TLS certificate verification")
    parser.add_argument("--ca-bundle", help="Defaults to KEYCLOAK_CA_BUNDLE")
    parser.add_argument("--format", choices=["json", "yaml"], default="json")
    parser.add_argument("--log-level", help="Defaults to KCADMIN_LOG_LEVEL")

    sub = parser.add_subparsers(dest="cmd")

    sub.add_parser("list-realms")

    gr = sub.add_parser("get-realm")
    gr.add_argument("--realm", required=True)

    cr = sub.add_parser("create-realm")
    cr.add_argument("--realm", required=True)
    cr.add_argument("--display-name")
    cr.add_argument("--disabled", action="store_true")

    dr = sub.add_parser("delete-realm")
    dr.add_argument("--realm", required=True)

    cu = sub.add_parser("create-user")
    cu.add_argument("--realm", default="demo")
    cu.add_argument("--username", required=True)
    cu.add_argument("--email")
    cu.add_argument("--first")
    cu.add_argument("--last")

    du = sub.add_parser("delete-user")
    du.add_argument("--realm", default="demo")
    du.add_argument("--user-id", required=True)

    fg = sub.add_parser("find-group")
    fg.add_argument("--realm", default="demo")
    fg.add_argument("--name", required=True)

    cg = sub.add_parser("create-group")
    cg.add_argument("--realm", default="demo")
    cg.add_argument("--name", required=True)
    cg.add_argument("--default", action="store_true", help="Also make the group a default group")

    gcr = sub.add_parser("list-group-client-roles")
    gcr.add_argument("--realm", default="demo")
    gcr.add_argument("--group-id", required=True)
    gcr.add_argument("--client-id", required=True, help="Client UUID")
    gcr.add_argument("--available", action="store_true", help="List roles that can still be mapped")

    return parser


def _run(client: AdminAPIClient, args: argparse.Namespace) -> int:
    if args.cmd == "list-realms":
        _emit(client.realms.list_realms(), args.format)
    elif args.cmd == "get-realm":
        _emit(client.realms.get_realm(args.realm), args.format)
    elif args.cmd == "create-realm":
        realm = Realm(realm=args.realm, enabled=not args.disabled, display_name=args.display_name)
        client.realms.create_realm(realm)
        print(f"[realm] Realm '{args.realm}' created", file=sys.stderr)
    elif args.cmd == "delete-realm":
        client.realms.delete_realm(args.realm)
        print(f"[realm] Realm '{args.realm}' deleted", file=sys.stderr)
    elif args.cmd == "create-user":
        user = User(
            username=args.username,
            email=args.email,
            first_name=args.first,
            last_name=args.last,
            enabled=True,
        )
        user_id = client.users.create_user(args.realm, user)
        print(f"[user] User '{args.username}' created (id={user_id})", file=sys.stderr)
    elif args.cmd == "delete-user":
        client.users.delete_user(args.realm, args.user_id)
        print(f"[user] User '{args.user_id}' deleted", file=sys.stderr)
    elif args.cmd == "find-group":
        group = client.groups.find_group_by_name(args.realm, args.name)
        if group is None:
            print(f"[group] Group '{args.name}' not found in realm '{args.realm}'", file=sys.stderr)
            return 1
        _emit(group, args.format)
    elif args.cmd == "create-group":
        group_id = client.groups.create_group(args.realm, args.name)
        if group_id is None:
            print(f"[group] Group '{args.name}' created but its id could not be resolved", file=sys.stderr)
            return 1
        if args.default:
            client.groups.make_group_default(args.realm, group_id)
        print(group_id)
    elif args.cmd == "list-group-client-roles":
        if args.available:
            roles = client.groups.list_available_group_client_roles(args.realm, args.client_id, args.group_id)
        else:
            roles = client.groups.list_group_client_roles(args.realm, args.client_id, args.group_id)
        _emit(roles, args.format)
    return 0


def _settings_from_args(args: argparse.Namespace, admin_pass: str) -> AdminConfig:
    """Environment and /run/secrets settings, overridden by explicit flags."""
    cfg = load_settings(admin_password=admin_pass)
    overrides: Dict[str, Any] = {}
    if args.kc_url:
        overrides["keycloak_url"] = args.kc_url.rstrip("/")
    if args.context_path is not None:
        overrides["context_path"] = args.context_path
    if args.admin_user:
        overrides["admin_username"] = args.admin_user
    if args.admin_client_id:
        overrides["admin_client_id"] = args.admin_client_id
    if args.timeout is not None:
        if args.timeout <= 0:
            raise RuntimeError(f"--timeout must be positive, got {args.timeout}")
        overrides["request_timeout"] = args.timeout
    if args.insecure:
        overrides["verify_tls"] = False
    if args.ca_bundle:
        overrides["ca_bundle"] = args.ca_bundle
    if args.log_level:
        overrides["log_level"] = args.log_level.upper()
    return replace(cfg, **overrides)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Command-line entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.cmd:
        parser.print_help()
        return 0

    admin_pass = args.admin_pass or load_secret("keycloak_admin_password", "KEYCLOAK_ADMIN_PASSWORD")
    if not admin_pass:
        parser.error("Missing admin password (--admin-pass or KEYCLOAK_ADMIN_PASSWORD)")

    try:
        cfg = _settings_from_args(args, admin_pass)
    except RuntimeError as exc:
        parser.error(str(exc))

    logging.basicConfig(
        level=getattr(logging, cfg.log_level, logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    with AdminAPIClient.from_settings(cfg) as client:
        try:
            return _run(client, args)
        except KeycloakError as exc:
            logger.debug("Command '%s' failed", args.cmd, exc_info=True)
            print(f"[error] {exc}", file=sys.stderr)
            return 1


if __name__ == "__main__":
    sys.exit(main())
