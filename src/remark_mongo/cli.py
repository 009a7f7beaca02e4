# src/remark_mongo/cli.py
"""Command line tools: run the server and administer sites and posts."""
from __future__ import annotations

import argparse
import secrets
import sys
from collections.abc import Sequence
from typing import Any

from pymongo.database import Database
from pymongo.errors import PyMongoError

from remark_mongo.core.errors import StoreError
from remark_mongo.core.logging import configure_logging
from remark_mongo.core.settings import get_settings
from remark_mongo.db.client import create_client, get_database
from remark_mongo.repositories import ImageRepository, SiteRepository, StoreRepository
from remark_mongo.schemas.store import Locator

# Length in bytes of generated site keys.
SITE_KEY_BYTES = 32


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="remark-mongo", description="Remark42 MongoDB backend")
    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("serve", help="Run the JSON-RPC server")

    sites = commands.add_parser("sites", help="Manage sites").add_subparsers(dest="action", required=True)
    create_site = sites.add_parser("create", help="Create a site")
    create_site.add_argument("name", help="Site id, as configured in Remark42 (SITE)")
    create_site.add_argument("--key", default=None, help="Site secret key (generated when omitted)")
    create_site.add_argument("--admin-email", default="", help="Administrator email")
    sites.add_parser("list", help="List sites")

    posts = commands.add_parser("posts", help="Manage posts").add_subparsers(dest="action", required=True)
    create_post = posts.add_parser("create", help="Create a post on a site")
    create_post.add_argument("site", help="Site id")
    create_post.add_argument("url", help="Post URL")
    create_post.add_argument("--read-only", action="store_true", help="Reject new comments on the post")
    list_posts = posts.add_parser("list", help="List the posts of a site")
    list_posts.add_argument("site", help="Site id")

    return parser


def create_site(db: Database[dict[str, Any]], name: str, key: str | None, admin_email: str) -> str:
    """Create a site and return its key."""
    site_key = key or secrets.token_urlsafe(SITE_KEY_BYTES)
    SiteRepository(db).create_site(name, site_key, admin_email)
    return site_key


def create_post(db: Database[dict[str, Any]], site: str, url: str, read_only: bool) -> None:
    """Create a post on an existing site.

    Raises:
        StoreError: If the site is missing or the post already exists.
    """
    store = StoreRepository(db, ImageRepository(db))
    locator = Locator(site=site, url=url)
    if not store.site_exists(site):
        raise StoreError(f"Site {site} does not exist!")
    if store.post_exists(locator):
        raise StoreError(f"Post {url} already exists on site {site}!")
    store.create_post(locator, read_only=read_only)


def run_command(args: argparse.Namespace, db: Database[dict[str, Any]]) -> None:
    """Execute a parsed administration command against ``db``."""
    if args.command == "sites" and args.action == "create":
        key = create_site(db, args.name, args.key, args.admin_email)
        print(f"Created site {args.name}")
        print(f"Key: {key}")
    elif args.command == "sites" and args.action == "list":
        for site in SiteRepository(db).list_sites():
            state = "enabled" if site.get("enabled") else "disabled"
            print(f"{site['_id']}\t{state}\t{site.get('admin_email', '')}")
    elif args.command == "posts" and args.action == "create":
        create_post(db, args.site, args.url, args.read_only)
        print(f"Created post {args.url} on site {args.site}")
    elif args.command == "posts" and args.action == "list":
        for post in SiteRepository(db).list_posts(args.site):
            flag = "read-only" if post.get("read_only") else "writable"
            print(f"{post['url']}\t{flag}")


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    settings = get_settings()
    configure_logging(settings.log_level)

    if args.command == "serve":
        from remark_mongo.main import run

        run()
        return 0

    client = create_client(settings)
    try:
        run_command(args, get_database(client))
    except (StoreError, PyMongoError) as exc:
        print(f"[remark-mongo] ERROR: {exc}", file=sys.stderr)
        return 1
    finally:
        client.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
