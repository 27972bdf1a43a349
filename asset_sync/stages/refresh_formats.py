# =============================================================================
# Format Refresh Stage
# =============================================================================
# Re-derives the four format variants of every Cloudinary-backed Strapi row
# (or a single row by name) and overwrites them, correcting display names
# from fresh Cloudinary data on the way. Only runs when selected.
# =============================================================================

import logging
from typing import Optional

from asset_sync.batching import process_in_batches
from asset_sync.formats import FormatBuilder, extension_for, mime_type_for
from asset_sync.models import (
    CatalogAsset,
    CatalogAssetPayload,
    PipelineState,
    ProviderMetadata,
    SourceAsset,
    StageReport,
)
from asset_sync.stages.assets import discover_source_assets, fetch_catalog_assets
from asset_sync.stages.base import StageContext, StageOutcome

__all__ = ["asset_from_row", "refresh_payload", "run_refresh_formats"]

logger = logging.getLogger(__name__)


def asset_from_row(row: CatalogAsset, display_name: Optional[str] = None) -> Optional[SourceAsset]:
    """
    Rebuild the source view of a row from its stored fields.

    Returns None when the row lacks the public id, URL or dimensions
    needed to derive formats.
    """
    if not row.public_id or not row.url or not row.width or not row.height:
        return None
    file_format = (row.ext or "").lstrip(".") or "jpg"
    return SourceAsset(
        public_id=row.public_id,
        url=row.url,
        width=row.width,
        height=row.height,
        bytes=int(round((row.size or 0) * 1024)),
        format=file_format,
        folder="",
        display_name=display_name or row.name,
    )


def _carried_metadata(row: CatalogAsset, asset: SourceAsset) -> ProviderMetadata:
    # Keeps the stored content hash so the unchanged-content check still applies
    if row.provider_metadata is None:
        return ProviderMetadata(public_id=asset.public_id)
    return row.provider_metadata.model_copy(update={"public_id": asset.public_id})


def refresh_payload(row: CatalogAsset, asset: SourceAsset, build_formats: FormatBuilder) -> CatalogAssetPayload:
    """Update body that rewrites formats and name but keeps the row's folder."""
    return CatalogAssetPayload(
        name=asset.display_name,
        alternative_text=asset.display_name,
        caption=asset.display_name,
        url=asset.url,
        provider_metadata=_carried_metadata(row, asset),
        formats=build_formats(asset),
        width=asset.width,
        height=asset.height,
        size=row.size if row.size is not None else round(asset.bytes / 1024, 2),
        mime=row.mime or mime_type_for(asset.format),
        hash=asset.public_id,
        ext=row.ext or extension_for(asset.format),
    )


def _log_comparison(row: CatalogAsset, asset: SourceAsset, build_formats: FormatBuilder) -> None:
    logger.info("Current:")
    logger.info(f"  Name: {row.name}")
    logger.info(f"  Public ID: {row.public_id}")
    logger.info(f"  Dimensions: {row.width}x{row.height}")
    logger.info(f"  URL: {row.url}")
    for name, variant in (row.formats or {}).items():
        if isinstance(variant, dict):
            logger.info(f"    {name}: {variant.get('width')}x{variant.get('height')} ({variant.get('url')})")

    logger.info("Proposed:")
    logger.info(f"  Name: {asset.display_name}")
    logger.info(f"  Original: {asset.width}x{asset.height} (aspect ratio: {asset.width / asset.height:.3f})")
    for name, variant in build_formats(asset).items():
        logger.info(
            f"    {name}: {variant.width}x{variant.height} "
            f"(aspect ratio: {variant.width / variant.height:.3f})"
        )


async def run_refresh_formats(state: PipelineState, ctx: StageContext) -> StageOutcome:
    build_formats = ctx.format_builder()

    rows, _, warnings = await fetch_catalog_assets(ctx.catalog, ctx.settings.catalog_page_size)
    rows = [row for row in rows if row.public_id]
    if ctx.image_name:
        rows = [row for row in rows if row.name == ctx.image_name]
        if not rows:
            warnings.append(f"No Cloudinary row named '{ctx.image_name}'")
            return StageOutcome(state=state, report=StageReport(stage="refresh-formats", warnings=warnings))

    fresh = await discover_source_assets(ctx.source, ctx.settings.asset_root, ctx.settings.source_page_size)
    names = {asset.public_id: asset.display_name for asset in fresh}

    targets: list[tuple[CatalogAsset, SourceAsset]] = []
    for row in rows:
        asset = asset_from_row(row, names.get(row.public_id))
        if asset is None:
            warnings.append(f"{row.name} (ID: {row.id}) lacks dimensions or URL; not refreshed")
            continue
        targets.append((row, asset))

    if ctx.dry_run:
        if ctx.image_name and len(targets) == 1:
            _log_comparison(*targets[0], build_formats)
        else:
            for row, asset in targets:
                rename = f" -> {asset.display_name}" if asset.display_name != row.name else ""
                logger.info(f"[dry-run] Would refresh {row.name}{rename} ({row.public_id})")
        report = StageReport(
            stage="refresh-formats",
            counts={"to_update": len(targets)},
            warnings=warnings,
            dry_run=True,
        )
        return StageOutcome(state=state, report=report)

    async def update(target: tuple[CatalogAsset, SourceAsset]) -> None:
        row, asset = target
        await ctx.catalog.update_file(row.id, refresh_payload(row, asset, build_formats))
        logger.info(f"Refreshed {asset.display_name} (ID: {row.id})")

    outcomes = await process_in_batches(targets, ctx.settings.refresh_batch_size, update, label="updates")
    failed = 0
    for outcome in outcomes:
        if not outcome.ok:
            failed += 1
            logger.error(f"Failed to refresh {outcome.item[0].name}: {outcome.error}")

    report = StageReport(
        stage="refresh-formats",
        counts={"updated": len(outcomes) - failed, "failed": failed},
        warnings=warnings,
    )
    if outcomes and not failed:
        logger.info("Formats refreshed; CDN caches may need clearing to show the change")
    return StageOutcome(state=state, report=report)
