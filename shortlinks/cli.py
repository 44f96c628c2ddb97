"""
Command-line interface for the URL shortener.

Works directly against a mapping store, without the HTTP server.

Usage:
    shortlinks shorten <url>
    shortlinks resolve <code>
    shortlinks info <code>
    shortlinks list [--limit N]
    shortlinks size
"""

import argparse
import asyncio
import json
import sys
from typing import List, Optional

from config import load_config

from .common.logging_config import setup_logging
from .exceptions import NotFoundError, ShortenerError
from .resolver import Resolver
from .service import ShorteningService
from .shortcode import ShortCodeGenerator
from .store import create_store


class ShortLinksCLI:
    """Run one command against a store and print the result as JSON."""

    def __init__(self, store_url: str, verbose: bool = False):
        self.config = load_config()
        self.store_url = store_url
        # stdout carries the JSON result, so logs go to stderr
        self.logger = setup_logging(level="DEBUG" if verbose else "WARNING", stream=sys.stderr)
        self.store = None
        self.service = None
        self.resolver = None

    async def initialize(self):
        """Open the store and build the service and resolver."""
        self.store = create_store(self.store_url, create_tables=self.config.create_tables, logger=self.logger)
        generator = ShortCodeGenerator(
            length=self.config.short_code_length,
            strategy=self.config.code_strategy,
            start=await self.store.size(),
            salt=self.config.code_salt,
        )
        self.service = ShorteningService(
            store=self.store,
            short_code_generator=generator,
            base_url=self.config.base_url,
            path_prefix=self.config.path_prefix,
            max_collision_retries=self.config.max_collision_retries,
            max_url_length=self.config.max_url_length,
            blocked_hosts=self.config.blocked_hosts,
            logger=self.logger.getChild("service"),
        )
        self.resolver = Resolver(store=self.store, logger=self.logger.getChild("resolver"))

    async def cleanup(self):
        if self.store:
            await self.store.close()

    async def shorten(self, url: str) -> dict:
        result = await self.service.shorten(url)
        result["created_at"] = result["created_at"].isoformat()
        return result

    async def resolve(self, code: str) -> dict:
        original_url = await self.resolver.resolve(code)
        return {"code": code, "original_url": original_url}

    async def info(self, code: str) -> dict:
        link = await self.resolver.info(code)
        if link is None:
            raise NotFoundError(code)
        return link.to_dict()

    async def list_links(self, limit: int) -> dict:
        links = await self.store.list_recent(limit)
        return {"count": len(links), "links": [link.to_dict() for link in links]}

    async def size(self) -> dict:
        return {"size": await self.store.size()}


def positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {value}")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="shortlinks",
        description="URL Shortener CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s --store-url sqlite:///links.db shorten https://example.com/long/url
  %(prog)s --store-url sqlite:///links.db resolve a1B2c3
  %(prog)s --store-url sqlite:///links.db list --limit 10
        """,
    )
    parser.add_argument(
        "--store-url",
        default=None,
        help="Mapping store URL (default: from STORE_URL env or memory://)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose output")

    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("shorten", help="Shorten a URL")
    p.add_argument("url", help="URL to shorten")

    p = sub.add_parser("resolve", help="Resolve a short code, counting a hit")
    p.add_argument("code", help="Short code to resolve")

    p = sub.add_parser("info", help="Show a short link record without counting a hit")
    p.add_argument("code", help="Short code to look up")

    p = sub.add_parser("list", help="List recently created links")
    p.add_argument("--limit", type=positive_int, default=20, help="Maximum number to return")

    sub.add_parser("size", help="Number of stored links")

    return parser


async def run(args: argparse.Namespace) -> int:
    cli = ShortLinksCLI(
        store_url=args.store_url or load_config().store_url,
        verbose=args.verbose,
    )

    try:
        await cli.initialize()

        if args.command == "shorten":
            result = await cli.shorten(args.url)
        elif args.command == "resolve":
            result = await cli.resolve(args.code)
        elif args.command == "info":
            result = await cli.info(args.code)
        elif args.command == "list":
            result = await cli.list_links(args.limit)
        else:
            result = await cli.size()

    except (ShortenerError, ValueError) as e:
        print(json.dumps({"error": str(e)}, indent=2), file=sys.stderr)
        return 1
    finally:
        await cli.cleanup()

    print(json.dumps(result, indent=2))
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Console script entry point."""
    args = build_parser().parse_args(argv)
    return asyncio.run(run(args))


if __name__ == "__main__":
    sys.exit(main())
