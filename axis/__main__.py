"""
Command-line host for the credential vault and page browser.

Usage:
    python -m axis credentials show
    python -m axis credentials set --jira-base-url https://acme.atlassian.net --jira-email qa@acme.io
    python -m axis credentials check jira
    python -m axis pages folders ~/Documents/Axis-Workspace/web-tests
    python -m axis pages scan ~/Documents/Axis-Workspace/web-tests/pages
"""

import sys
import json
import argparse
import logging
from pathlib import Path

from .config import get_settings, load_env, SETTINGS_FILENAME
from .vault import CredentialResolver, CredentialStore, CredentialSet, Service
from .pages import PageObjectIntrospector

logger = logging.getLogger(__name__)


def _print_json(data) -> None:
    print(json.dumps(data, indent=2))


# ── Credentials ──────────────────────────────────────────────────────

def _cmd_credentials(args, resolver: CredentialResolver) -> int:
    if args.action == "show":
        masked = resolver.get_masked()
        if args.json:
            _print_json({name: m.to_dict() for name, m in masked.items()})
            return 0
        width = max(len(name) for name in masked)
        for name, m in masked.items():
            shown = m.masked if m.exists else "(not set)"
            print(f"{name:<{width}}  {shown}")
        return 0

    if args.action == "check":
        ok = resolver.has_credentials(args.service)
        print(f"{args.service}: {'configured' if ok else 'missing'}")
        return 0 if ok else 1

    if args.action == "set":
        partial = {
            name: getattr(args, name)
            for name in CredentialSet.field_names()
            if getattr(args, name) is not None
        }
        if not partial:
            logger.error("Nothing to save - pass at least one --<field> option")
            return 2
        return 0 if resolver.save(partial) else 1

    if args.action == "clear":
        return 0 if resolver.clear() else 1

    return 2


# ── Pages ────────────────────────────────────────────────────────────

def _cmd_pages(args, introspector: PageObjectIntrospector, workspace_root: str) -> int:
    if args.action == "root":
        root = introspector.resolve_default_root(args.path)
        _print_json(str(root) if root else None)
        return 0 if root else 1

    if args.action == "folders":
        entries = introspector.list_subfolders(args.path)
    elif args.action == "files":
        entries = introspector.list_files(args.path)
    elif args.action == "scan":
        entries = introspector.scan(args.path)
    elif args.action == "repos":
        repos = introspector.list_workspace_repos(args.path or workspace_root)
        _print_json([r.to_dict() for r in repos])
        return 0
    else:
        return 2

    _print_json([e.to_dict() for e in entries])
    return 0


# ── Main ─────────────────────────────────────────────────────────────

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="axis",
        description="Axis support tools - credential vault and page object browser"
    )
    parser.add_argument("--data-dir", default=None,
                        help="Directory holding settings.yaml and credentials.db (default: ~/.axis)")
    parser.add_argument("--env-file", default=None, help="Path to .env file (default: ./.env)")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")

    sub = parser.add_subparsers(dest="command", required=True)

    creds = sub.add_parser("credentials", help="Manage stored service credentials")
    creds_sub = creds.add_subparsers(dest="action", required=True)

    show = creds_sub.add_parser("show", help="Show resolved credentials (masked)")
    show.add_argument("--json", action="store_true", help="Output JSON")

    check = creds_sub.add_parser("check", help="Exit 0 if a service is fully configured")
    check.add_argument("service", help=f"One of: {', '.join(s.value for s in Service)}")

    set_cmd = creds_sub.add_parser("set", help="Save one or more credential fields")
    for name in CredentialSet.field_names():
        set_cmd.add_argument(f"--{name.replace('_', '-')}", dest=name, default=None)

    creds_sub.add_parser("clear", help="Remove every stored credential")

    pages = sub.add_parser("pages", help="Browse page object folders")
    pages_sub = pages.add_subparsers(dest="action", required=True)
    for action, help_text in (
        ("root", "Resolve the page root of a repository"),
        ("folders", "List page subfolders of a repository"),
        ("files", "List files directly under a folder"),
        ("scan", "List everything under a folder, depth-first"),
    ):
        p = pages_sub.add_parser(action, help=help_text)
        p.add_argument("path")
    repos = pages_sub.add_parser("repos", help="List workspace repositories with a page folder")
    repos.add_argument("path", nargs="?", default=None)

    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    settings_path = Path(args.data_dir) / SETTINGS_FILENAME if args.data_dir else None
    settings = get_settings(settings_path)
    if args.data_dir:
        settings.data_dir = args.data_dir

    level = logging.DEBUG if args.verbose else getattr(logging, settings.log_level.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    # Before the vault is built so AXIS_* fallbacks are visible
    load_env(Path(args.env_file or settings.env_file))

    if args.command == "credentials":
        resolver = CredentialResolver(CredentialStore(settings.credentials_path))
        return _cmd_credentials(args, resolver)

    introspector = PageObjectIntrospector(pages_dirname=settings.pages_dirname)
    return _cmd_pages(args, introspector, settings.workspace_root)


if __name__ == "__main__":
    sys.exit(main())
