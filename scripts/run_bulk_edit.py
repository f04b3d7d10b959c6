#!/usr/bin/env python3
"""
Apply a bulk price edit to the configured store from the command line.

Examples:
    python scripts/run_bulk_edit.py --mode percent --direction increase --magnitude 10 \
        gid://shopify/Product/1 gid://shopify/Product/2
    python scripts/run_bulk_edit.py --mode amount --direction decrease --magnitude 5 \
        --all --vendor Acme --dry-run

Exits with status 1 if any update failed.
"""

import argparse
import asyncio
import logging
import os
import sys
from decimal import Decimal, InvalidOperation

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from price_editor.config import settings
from price_editor.catalog import ProductFilter, ProductStatus, filter_products
from price_editor.pricing import (
    MAX_MAGNITUDE, EditDirection, EditMode, EditRule, preview_bulk_update, run_bulk_update
)
from price_editor.shopify import (
    ShopifyClient, ShopifyPriceMutator, fetch_all_products, fetch_products_by_ids
)

logging.basicConfig(
    level=getattr(logging, settings.log_level),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)

logger = logging.getLogger(__name__)


def magnitude_arg(value):
    """Parse a non-negative rule magnitude."""
    try:
        magnitude = Decimal(value)
    except InvalidOperation:
        raise argparse.ArgumentTypeError(f"not a number: {value!r}")
    if not magnitude.is_finite() or magnitude < 0 or magnitude > MAX_MAGNITUDE:
        raise argparse.ArgumentTypeError(
            f"must be between 0 and {MAX_MAGNITUDE}, got {value}"
        )
    return magnitude


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Bulk-edit Shopify product prices")
    parser.add_argument("product_ids", nargs="*", help="Product GIDs to edit")
    parser.add_argument("--mode", choices=[m.value for m in EditMode], required=True)
    parser.add_argument("--direction", choices=[d.value for d in EditDirection], required=True)
    parser.add_argument("--magnitude", type=magnitude_arg, required=True)
    parser.add_argument("--all", action="store_true", help="Edit every product matching the filters")
    parser.add_argument("--query", default="", help="Title contains")
    parser.add_argument("--tag", default="")
    parser.add_argument("--product-type", default="")
    parser.add_argument("--vendor", default="")
    parser.add_argument(
        "--status", action="append", default=[],
        choices=[s.value for s in ProductStatus]
    )
    parser.add_argument("--dry-run", action="store_true", help="Print the preview only")
    parser.add_argument("--max-concurrent", type=int, default=settings.max_concurrent_updates)

    args = parser.parse_args(argv)
    if not args.all and not args.product_ids:
        parser.error("give product ids or --all")
    if args.max_concurrent < 1:
        parser.error("--max-concurrent must be at least 1")
    return args


async def main(argv=None) -> int:
    args = parse_args(argv)
    rule = EditRule(
        mode=EditMode(args.mode),
        direction=EditDirection(args.direction),
        magnitude=args.magnitude,
    )

    async with ShopifyClient(
        settings.shop_domain,
        settings.access_token,
        api_version=settings.api_version,
        max_retries=settings.max_retries,
    ) as client:
        if args.all:
            products = await fetch_all_products(client, page_size=settings.catalog_page_size)
        else:
            products = await fetch_products_by_ids(client, args.product_ids)

        products = filter_products(products, ProductFilter(
            query=args.query,
            tag=args.tag,
            product_type=args.product_type,
            vendor=args.vendor,
            statuses={ProductStatus(s) for s in args.status},
        ))
        logger.info(f"{len(products)} products selected")

        if args.dry_run:
            for preview in preview_bulk_update(products, rule):
                marker = "" if preview.eligible else "  (skipped)"
                print(f"{preview.title}: {preview.current_price} -> {preview.new_price}{marker}")
            return 0

        report = await run_bulk_update(
            products,
            rule,
            ShopifyPriceMutator(client),
            max_concurrent=args.max_concurrent,
            timeout=settings.mutation_timeout_seconds,
        )

    logger.info(f"Bulk edit finished: {report.outcome.value}")

    if report.error_count > 0:
        for result in report.sorted_results():
            if not result.success:
                logger.error(f"  {result.product_id}: {result.error_detail}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
