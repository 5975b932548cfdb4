"""Command-line access to the portal facade and the proxy server.

Usage:
    python -m portal.cli serve                          # Run the /api proxy
    python -m portal.cli programs
    python -m portal.cli resources --type Protocols --sort-by name
    python -m portal.cli login you@pharmacy.com
    python -m portal.cli bookmark rec123                # Toggle
    python -m portal.cli dashboard
    python -m portal.cli logout
    python -m portal.cli hash-password                  # For the members table

Session, bookmarks and the login attempt counter persist in STORE_PATH.
"""

import argparse
import asyncio
import getpass
import json
import sys
from pathlib import Path

from portal.config import settings
from portal.errors import PortalError
from portal.schemas.members import LoginPayload
from portal.schemas.resources import ResourceFilters, ResourceType, SortKey
from portal.services.local_store import JsonFileStore
from portal.services.member_auth import hash_password
from portal.services.portal import PortalFacade, build_portal


def dump_json(value) -> str:
    """Render models (or lists of models) the way the API serialises them."""
    if isinstance(value, list):
        return json.dumps([v.model_dump(mode="json", by_alias=True) for v in value], indent=2)
    if hasattr(value, "model_dump"):
        return value.model_dump_json(by_alias=True, indent=2)
    return json.dumps(value, indent=2)


async def run_command(portal: PortalFacade, args: argparse.Namespace) -> str:
    """Execute one facade command and return its JSON output."""
    try:
        if args.command == "programs":
            return dump_json(await portal.get_programs())

        if args.command == "resources":
            filters = ResourceFilters(
                program=args.program or None,
                type=args.type or None,
                search=args.search,
                bookmarked=True if args.bookmarked else None,
                limit=args.limit,
                offset=args.offset,
                sort_by=args.sort_by,
                sort_order=args.sort_order,
            )
            return dump_json(await portal.get_resources(filters))

        if args.command == "resource":
            return dump_json(await portal.get_resource_by_id(args.resource_id))

        if args.command == "program-resources":
            return dump_json(await portal.get_program_resources(args.slug))

        if args.command == "login":
            password = args.password or getpass.getpass("Password: ")
            auth = await portal.login(LoginPayload(email=args.email, password=password))
            return dump_json(auth.member)

        if args.command == "logout":
            await portal.logout()
            return dump_json({"ok": True})

        if args.command == "whoami":
            stored = portal.get_stored_auth()
            return dump_json(stored.member if stored else {"member": None})

        if args.command == "bookmark":
            value = {"on": True, "off": False}.get(args.state)
            state = portal.toggle_bookmark(args.resource_id, value)
            return dump_json({"resourceId": args.resource_id, "bookmarked": state})

        if args.command == "dashboard":
            return dump_json(await portal.get_dashboard())

        if args.command == "check":
            return dump_json(await portal.test_connection())
    finally:
        await portal.close()

    raise ValueError(f"Unknown command: {args.command}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="ClinicalRxQ member portal")
    parser.add_argument(
        "--store",
        type=Path,
        default=settings.store_path,
        help=f"Local state file (default: {settings.store_path})",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="Run the HTTP proxy")
    serve.add_argument("--host", default=settings.host)
    serve.add_argument("--port", type=int, default=settings.port)

    sub.add_parser("programs", help="List clinical programs")

    resources = sub.add_parser("resources", help="List library resources")
    resources.add_argument("--program", action="append", help="Program slug (repeatable)")
    resources.add_argument(
        "--type",
        action="append",
        choices=[t.value for t in ResourceType],
        help="Resource type (repeatable)",
    )
    resources.add_argument("--search")
    resources.add_argument("--bookmarked", action="store_true")
    resources.add_argument("--limit", type=int)
    resources.add_argument("--offset", type=int)
    resources.add_argument("--sort-by", choices=[k.value for k in SortKey])
    resources.add_argument("--sort-order", choices=["asc", "desc"])

    resource = sub.add_parser("resource", help="Show one resource")
    resource.add_argument("resource_id")

    program_resources = sub.add_parser("program-resources", help="Documentation forms for a program")
    program_resources.add_argument("slug")

    login = sub.add_parser("login", help="Sign in as a member")
    login.add_argument("email")
    login.add_argument("--password", help="Prompted for when omitted")

    sub.add_parser("logout", help="Clear the stored session")
    sub.add_parser("whoami", help="Show the stored member profile")

    bookmark = sub.add_parser("bookmark", help="Toggle or set a bookmark")
    bookmark.add_argument("resource_id")
    bookmark.add_argument("--state", choices=["on", "off", "toggle"], default="toggle")

    sub.add_parser("dashboard", help="Programs, quick access, bookmarks, activity, announcements")
    sub.add_parser("check", help="Test the data source connection")

    hash_cmd = sub.add_parser("hash-password", help="Print a password hash for the members table")
    hash_cmd.add_argument("--password", help="Prompted for when omitted")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    if args.command == "serve":
        import uvicorn

        uvicorn.run("portal.main:app", host=args.host, port=args.port)
        return 0

    if args.command == "hash-password":
        print(hash_password(args.password or getpass.getpass("Password: ")))
        return 0

    portal = build_portal(settings, store=JsonFileStore(args.store))
    try:
        output = asyncio.run(run_command(portal, args))
    except PortalError as e:
        print(f"Error [{e.code}]: {e.message}", file=sys.stderr)
        return 1
    print(output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
