# =============================================================================
# Deduplication Stage
# =============================================================================
# Name-based safety net: rows whose names differ only by a provider-added
# random suffix (e.g. "facade_bqzhmj") are collapsed onto the oldest row.
# =============================================================================

import logging
import re
from typing import Iterable, Sequence

from asset_sync.models import CatalogAsset, PipelineState, StageReport
from asset_sync.stages.base import StageContext, StageOutcome, delete_rows
from asset_sync.stages.reconcile import creation_order

__all__ = [
    "SUFFIX_PATTERN",
    "base_name",
    "group_by_base_name",
    "plan_deduplication",
    "run_deduplicate",
]

logger = logging.getLogger(__name__)

SUFFIX_PATTERN = re.compile(r"_[a-z0-9]{6}$")


def base_name(name: str) -> str:
    """
    Strip a trailing provider suffix.

    Examples:
        >>> base_name("facade_bqzhmj")
        'facade'
        >>> base_name("facade")
        'facade'
    """
    return SUFFIX_PATTERN.sub("", name)


def group_by_base_name(rows: Iterable[CatalogAsset]) -> dict[str, list[CatalogAsset]]:
    groups: dict[str, list[CatalogAsset]] = {}
    for row in rows:
        groups.setdefault(base_name(row.name), []).append(row)
    return groups


def plan_deduplication(rows: Sequence[CatalogAsset]) -> list[tuple[CatalogAsset, list[CatalogAsset]]]:
    """
    Pick a keeper for every base-name group with more than one row.

    Returns:
        List of (keeper, rows to delete), keeper being the oldest row
    """
    plan = []
    for group in group_by_base_name(rows).values():
        if len(group) < 2:
            continue
        ordered = sorted(group, key=creation_order)
        plan.append((ordered[0], ordered[1:]))
    return plan


async def run_deduplicate(state: PipelineState, ctx: StageContext) -> StageOutcome:
    rows = await ctx.catalog.list_files(page_size=ctx.settings.catalog_page_size)
    plan = plan_deduplication(rows)
    logger.info(f"Found {len(plan)} duplicate groups among {len(rows)} rows")

    doomed: list[CatalogAsset] = []
    warnings: list[str] = []
    for keeper, extras in plan:
        public_ids = sorted({row.public_id for row in [keeper, *extras] if row.public_id})
        if len(public_ids) > 1:
            warnings.append(
                f"Rows named '{base_name(keeper.name)}' belong to {len(public_ids)} different "
                f"Cloudinary assets {public_ids}; all but the oldest are deleted"
            )
        logger.info(f"  Keeping {keeper.name} (ID: {keeper.id}, {keeper.width}x{keeper.height})")
        for row in extras:
            prefix = "[dry-run] Would delete" if ctx.dry_run else "Deleting"
            logger.info(f"    {prefix} {row.name} (ID: {row.id}, {row.width}x{row.height})")
        doomed.extend(extras)

    deleted = failed = 0
    if doomed and not ctx.dry_run:
        deleted, failed = await delete_rows(ctx.catalog, doomed)

    counts = {"groups": len(plan), "to_delete": len(doomed)}
    if not ctx.dry_run:
        counts.update(deleted=deleted, failed=failed)
    report = StageReport(stage="deduplicate", counts=counts, warnings=warnings, dry_run=ctx.dry_run)
    return StageOutcome(state=state, report=report)
