from __future__ import annotations

import argparse
import asyncio
from typing import Optional, Sequence

from property_listing.config import settings
from property_listing.context import ServiceContext, build_context
from property_listing.core.logging import setup_logging
from property_listing.services.filters import ListingQuery
from property_listing.services.listings import ListingService


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="property-listing-admin",
        description="Bulk maintenance for property listings. Filters use the listing query-string syntax.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    purge = sub.add_parser("purge", help="Delete every property matching a filter")
    purge.add_argument("where", help='e.g. "status=archived&city=Pune"')

    status = sub.add_parser("set-status", help="Set status on every property matching a filter")
    status.add_argument("status")
    status.add_argument("--where", default="", help="Filter; empty matches all properties")

    verified = sub.add_parser("set-verified", help="Set the verification flag on matching properties")
    verified.add_argument("value", choices=["true", "false"])
    verified.add_argument("--where", default="")

    sub.add_parser("flush-cache", help="Drop every cached listing and property")
    return parser


async def run(args: argparse.Namespace, context: ServiceContext) -> str:
    service = ListingService(context.properties, context.cache, ttl_seconds=context.settings.CACHE_TTL_SECONDS)
    if args.command == "purge":
        n = await service.bulk_delete(ListingQuery.from_query_string(args.where))
        return f"Deleted {n} properties"
    if args.command == "set-status":
        n = await service.bulk_update(ListingQuery.from_query_string(args.where), {"status": args.status})
        return f"Updated {n} properties"
    if args.command == "set-verified":
        n = await service.bulk_update(ListingQuery.from_query_string(args.where), {"is_verified": args.value == "true"})
        return f"Updated {n} properties"
    n = await service.flush_cache()
    return f"Removed {n} cache entries"


async def _main(args: argparse.Namespace) -> str:
    context = await build_context(settings)
    try:
        return await run(args, context)
    finally:
        await context.close()


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = build_parser().parse_args(argv)
    setup_logging()
    print(asyncio.run(_main(args)))


if __name__ == "__main__":
    main()
