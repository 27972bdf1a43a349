#!/usr/bin/env python
"""
Sync the Strapi media library with Cloudinary.

Usage:
    python scripts/sync_assets.py                      # run stages 1-10
    python scripts/sync_assets.py --dry-run            # report without writing
    python scripts/sync_assets.py --step reconcile     # re-run one stage
    python scripts/sync_assets.py --step 8 --dry-run
    python scripts/sync_assets.py --purge              # delete all rows first
    python scripts/sync_assets.py --step refresh-formats --image-name facade

Credentials come from the environment (or .env, cloudinary.env,
strapi-cloud.env): CLOUDINARY_NAME, CLOUDINARY_KEY, CLOUDINARY_SECRET,
STRAPI_CLOUD_BASE_URL, STRAPI_CLOUD_API_TOKEN.

Exit codes: 0 success, 1 stage or configuration failure, 2 unknown stage.
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Optional

import httpx
from pydantic import ValidationError

from asset_sync.clients import CloudinaryClient, StrapiClient, UnknownStageError, UrlProbe
from asset_sync.clients.errors import SyncError
from asset_sync.formats import FormatBuilder
from asset_sync.models import CloudinarySettings, StageReport, StrapiSettings, SyncSettings
from asset_sync.pipeline import run_pipeline
from asset_sync.stages import Stage, StageContext, no_confirm, select_stages
from asset_sync.state_store import StateStore

logger = logging.getLogger("asset_sync")


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Sync the Strapi media library with Cloudinary")
    parser.add_argument("--step", help="Run a single stage, by number (0-11) or name")
    parser.add_argument("--dry-run", action="store_true", help="Report intended changes without writing")
    parser.add_argument("--purge", action="store_true", help="Delete every Strapi media row before syncing")
    parser.add_argument("--image-name", help="Restrict refresh-formats to the row with this name")
    parser.add_argument("--state-file", help="Pipeline state file (default: SYNC_STATE_FILE)")
    parser.add_argument("--interactive", action="store_true", help="Pause for Enter after review points")
    parser.add_argument("--skip-unchanged", action="store_true", help="Skip updates whose content hash is unchanged")
    parser.add_argument("--verify-formats", action="store_true", help="Also check format URLs when verifying")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)


def prompt_confirm(message: str) -> None:
    input(f"\n{message}. Press Enter to continue...")


async def run_sync(
    stages: list[Stage],
    args: argparse.Namespace,
    cloudinary_settings: CloudinarySettings,
    strapi_settings: StrapiSettings,
    settings: SyncSettings,
    *,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> list[StageReport]:
    """Open the clients, run the stages and close the clients again."""
    store = StateStore(Path(args.state_file or settings.state_file))

    async with CloudinaryClient(
        cloudinary_settings, timeout=settings.request_timeout, transport=transport
    ) as source, StrapiClient(
        strapi_settings, timeout=settings.request_timeout, transport=transport
    ) as catalog, UrlProbe(timeout=settings.verify_timeout, transport=transport) as probe:
        ctx = StageContext(
            source=source,
            catalog=catalog,
            settings=settings,
            store=store,
            probe=probe,
            dry_run=args.dry_run,
            confirm=prompt_confirm if args.interactive else no_confirm,
            image_name=args.image_name,
            formats=FormatBuilder(
                cloud_name=cloudinary_settings.cloud_name,
                delivery_base_url=cloudinary_settings.delivery_base_url,
            ),
        )
        _, reports = await run_pipeline(stages, store, ctx)
    return reports


def main(argv: Optional[list[str]] = None) -> int:
    """
    CLI entry point.

    Returns:
        Exit code (0 success, 1 failure, 2 unknown stage)
    """
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    if not args.verbose:
        logging.getLogger("httpx").setLevel(logging.WARNING)

    try:
        stages = select_stages(args.step, purge=args.purge)
    except UnknownStageError as e:
        print(str(e), file=sys.stderr)
        return 2

    try:
        cloudinary_settings = CloudinarySettings()
        strapi_settings = StrapiSettings()
        settings = SyncSettings()
    except ValidationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1

    updates = {}
    if args.skip_unchanged:
        updates["skip_unchanged"] = True
    if args.verify_formats:
        updates["verify_format_urls"] = True
    if updates:
        settings = settings.model_copy(update=updates)

    try:
        reports = asyncio.run(run_sync(stages, args, cloudinary_settings, strapi_settings, settings))
    except SyncError as e:
        print(f"Sync failed: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("Interrupted; state saved up to the last completed stage", file=sys.stderr)
        return 1

    print("\nSummary:")
    for report in reports:
        print(f"  {report.summary_line()}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
