# =============================================================================
# Reconciliation Stage
# =============================================================================
# Converges the Strapi media rows onto the Cloudinary assets:
# - Collapses duplicate rows sharing a public id (earliest created kept)
# - Matches each asset to one row; matched rows are updated, misses created
# - Deletes rows no asset claimed
# Planning is pure; applying it is the only part that talks to Strapi.
# =============================================================================

"""
Reconciliation of Cloudinary assets against Strapi media rows.

Every run re-reads the Strapi rows and recomputes the decision set from
scratch, so the stage is idempotent and resumable but not incremental:
matched rows are updated on every run unless the opt-in unchanged-content
check is enabled.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Iterable, Optional, Sequence

from asset_sync.batching import process_in_batches
from asset_sync.clients.base import Catalog
from asset_sync.formats import content_hash, extension_for, has_complete_formats, mime_type_for
from asset_sync.models import (
    CatalogAsset,
    CatalogAssetPayload,
    FolderMapping,
    FormatVariant,
    PipelineState,
    ProviderMetadata,
    SourceAsset,
    StageReport,
    SyncSummary,
    resolve_folder_id,
)
from asset_sync.stages.assets import fetch_catalog_assets
from asset_sync.stages.base import StageContext, StageOutcome, delete_rows

__all__ = [
    "PlannedWrite",
    "ReconciliationPlan",
    "build_payload",
    "creation_order",
    "find_duplicate_groups",
    "plan_reconciliation",
    "apply_plan",
    "run_reconcile",
]

logger = logging.getLogger(__name__)

FormatDeriver = Callable[[SourceAsset], dict[str, FormatVariant]]


# =============================================================================
# Plan
# =============================================================================


@dataclass(frozen=True)
class PlannedWrite:
    """A create (``row`` is None) or update of one asset's catalog row."""

    asset: SourceAsset
    payload: CatalogAssetPayload
    row: Optional[CatalogAsset] = None


@dataclass
class ReconciliationPlan:
    """
    Decision set of one reconciliation run.

    Attributes:
        creates: Assets with no matching row
        updates: Matched rows to overwrite
        keeps: Matched rows left untouched (unchanged-content check only)
        deletes: Duplicate and orphaned rows
        skipped: Assets whose folder is not resolved yet
        duplicate_groups: public_id -> ids of every row in a duplicate set
        warnings: Operator-facing notes
    """

    creates: list[PlannedWrite] = field(default_factory=list)
    updates: list[PlannedWrite] = field(default_factory=list)
    keeps: list[tuple[SourceAsset, CatalogAsset]] = field(default_factory=list)
    deletes: list[CatalogAsset] = field(default_factory=list)
    skipped: list[SourceAsset] = field(default_factory=list)
    duplicate_groups: dict[str, list[int]] = field(default_factory=dict)
    warnings: list[str] = field(default_factory=list)

    def counts(self) -> dict[str, int]:
        return {
            "to_create": len(self.creates),
            "to_update": len(self.updates),
            "to_keep": len(self.keeps),
            "to_delete": len(self.deletes),
            "skipped": len(self.skipped),
            "duplicate_groups": len(self.duplicate_groups),
        }


def build_payload(
    asset: SourceAsset,
    folder_id: int,
    formats: dict[str, FormatVariant],
) -> CatalogAssetPayload:
    """Create/update body for one asset; display name doubles as alt text and caption."""
    return CatalogAssetPayload(
        name=asset.display_name,
        alternative_text=asset.display_name,
        caption=asset.display_name,
        url=asset.url,
        provider_metadata=ProviderMetadata(
            public_id=asset.public_id,
            content_hash=content_hash(asset),
        ),
        formats=formats,
        width=asset.width,
        height=asset.height,
        size=round(asset.bytes / 1024, 2),
        mime=mime_type_for(asset.format),
        folder_id=folder_id,
        hash=asset.public_id,
        ext=extension_for(asset.format),
    )


def creation_order(row: CatalogAsset) -> tuple[bool, float, int]:
    # Rows without a timestamp sort after every dated row
    created = row.created_at
    return (created is None, created.timestamp() if created else 0.0, row.id)


def find_duplicate_groups(rows: Iterable[CatalogAsset]) -> dict[str, list[CatalogAsset]]:
    """
    Group rows by public id, keeping only groups with more than one row.

    Each group is ordered keeper first: earliest ``created_at``, then lowest id.
    """
    groups: dict[str, list[CatalogAsset]] = {}
    for row in rows:
        if row.public_id:
            groups.setdefault(row.public_id, []).append(row)
    return {
        public_id: sorted(group, key=creation_order)
        for public_id, group in groups.items()
        if len(group) > 1
    }


def _is_unchanged(asset: SourceAsset, row: CatalogAsset) -> bool:
    stored = row.provider_metadata.content_hash if row.provider_metadata else None
    return stored == content_hash(asset) and has_complete_formats(row.formats)


def plan_reconciliation(
    source_assets: Sequence[SourceAsset],
    catalog_assets: Sequence[CatalogAsset],
    mapping: FolderMapping,
    *,
    build_formats: FormatDeriver,
    skip_unchanged: bool = False,
) -> ReconciliationPlan:
    """
    Classify every asset and row into create/update/keep/delete/skip.

    Each row is claimed by at most one asset. Public-id matches are claimed
    first for all assets; assets left without one then claim rows by URL or
    display name. Among several matches the first in list order is kept and
    the rest are deleted.

    Args:
        source_assets: Cloudinary assets under the asset root
        catalog_assets: Strapi rows with the Cloudinary provider
        mapping: Folder mapping used to resolve each asset's folder id
        build_formats: Derives the four format variants of an asset
        skip_unchanged: Keep matched rows whose stored content hash is current

    Returns:
        The ReconciliationPlan; nothing is sent to Strapi
    """
    plan = ReconciliationPlan()
    deleted_ids: set[int] = set()

    for public_id, group in find_duplicate_groups(catalog_assets).items():
        plan.duplicate_groups[public_id] = [row.id for row in group]
        for row in group[1:]:
            plan.deletes.append(row)
            deleted_ids.add(row.id)

    candidates = [row for row in catalog_assets if row.id not in deleted_ids]
    claimed: set[int] = set()
    matches: dict[int, list[CatalogAsset]] = {}

    for index, asset in enumerate(source_assets):
        found = [row for row in candidates if row.id not in claimed and row.public_id == asset.public_id]
        if found:
            matches[index] = found
            claimed.update(row.id for row in found)

    for index, asset in enumerate(source_assets):
        if index in matches:
            continue
        found = [
            row
            for row in candidates
            if row.id not in claimed and (row.url == asset.url or row.name == asset.display_name)
        ]
        if found:
            matches[index] = found
            claimed.update(row.id for row in found)

    for index, asset in enumerate(source_assets):
        found = matches.get(index, [])
        row = found[0] if found else None
        plan.deletes.extend(found[1:])

        folder_id = resolve_folder_id(mapping, asset.folder)
        if folder_id is None:
            plan.skipped.append(asset)
            plan.warnings.append(
                f"No Strapi folder for '{asset.folder}' yet; skipping {asset.public_id}"
            )
            continue

        if row is not None and skip_unchanged and _is_unchanged(asset, row):
            plan.keeps.append((asset, row))
            continue

        write = PlannedWrite(asset=asset, payload=build_payload(asset, folder_id, build_formats(asset)), row=row)
        (plan.updates if row is not None else plan.creates).append(write)

    plan.deletes.extend(row for row in candidates if row.id not in claimed)
    return plan


# =============================================================================
# Apply
# =============================================================================


async def _write(catalog: Catalog, write: PlannedWrite) -> str:
    if write.row is None:
        await catalog.create_file(write.payload)
        logger.info(f"Created {write.asset.display_name} ({write.asset.public_id})")
        return "created"
    await catalog.update_file(write.row.id, write.payload)
    logger.info(f"Updated {write.asset.display_name} (ID: {write.row.id})")
    return "updated"


async def apply_plan(
    plan: ReconciliationPlan,
    catalog: Catalog,
    *,
    batch_size: int,
    dry_run: bool = False,
) -> SyncSummary:
    """
    Execute a plan: creates and updates in concurrent batches, then deletes
    one at a time.

    Per-item failures are logged and counted, never raised.
    """
    summary = SyncSummary(kept=len(plan.keeps), skipped=len(plan.skipped))

    if dry_run:
        for write in plan.creates:
            logger.info(f"[dry-run] Would create {write.asset.display_name} -> {write.asset.folder}")
        for write in plan.updates:
            logger.info(f"[dry-run] Would update {write.asset.display_name} (ID: {write.row.id})")
        for row in plan.deletes:
            logger.info(f"[dry-run] Would delete {row.name} (ID: {row.id})")
        return summary

    writes = plan.creates + plan.updates
    if writes:
        logger.info(f"Processing {len(writes)} create/update operations")
        outcomes = await process_in_batches(
            writes,
            batch_size,
            lambda write: _write(catalog, write),
            label="writes",
        )
        for outcome in outcomes:
            if outcome.ok:
                if outcome.value == "created":
                    summary.created += 1
                else:
                    summary.updated += 1
            else:
                summary.failed += 1
                logger.error(f"Failed to write {outcome.item.asset.public_id}: {outcome.error}")

    if plan.deletes:
        logger.info(f"Processing {len(plan.deletes)} delete operations")
        deleted, failed = await delete_rows(catalog, plan.deletes)
        summary.deleted += deleted
        summary.failed += failed

    return summary


async def run_reconcile(state: PipelineState, ctx: StageContext) -> StageOutcome:
    if not state.source_assets:
        report = StageReport(
            stage="reconcile",
            warnings=["No Cloudinary assets in state; run discover-source-assets first"],
            dry_run=ctx.dry_run,
        )
        return StageOutcome(state=state, report=report)

    rows, _, fetch_warnings = await fetch_catalog_assets(ctx.catalog, ctx.settings.catalog_page_size)
    plan = plan_reconciliation(
        state.source_assets,
        rows,
        state.folder_mapping,
        build_formats=ctx.format_builder(),
        skip_unchanged=ctx.settings.skip_unchanged,
    )
    for public_id, ids in plan.duplicate_groups.items():
        logger.info(f"  {len(ids)} rows share {public_id}: keeping {ids[0]}")
    logger.info(
        f"Plan: {len(plan.creates)} to create, {len(plan.updates)} to update, "
        f"{len(plan.keeps)} to keep, {len(plan.deletes)} to delete, {len(plan.skipped)} skipped"
    )

    summary = await apply_plan(
        plan,
        ctx.catalog,
        batch_size=ctx.settings.mutation_batch_size,
        dry_run=ctx.dry_run,
    )

    if not ctx.dry_run:
        rows, _, _ = await fetch_catalog_assets(ctx.catalog, ctx.settings.catalog_page_size)

    counts = plan.counts() if ctx.dry_run else summary.as_counts()
    report = StageReport(
        stage="reconcile",
        counts=counts,
        warnings=fetch_warnings + plan.warnings,
        dry_run=ctx.dry_run,
    )
    return StageOutcome(state=state.model_copy(update={"existing_catalog_assets": rows}), report=report)
