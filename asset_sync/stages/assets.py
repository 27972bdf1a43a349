# =============================================================================
# Asset Discovery Stages
# =============================================================================
# - discover-source-assets: Every Cloudinary image under the asset root
# - discover-catalog-assets: Strapi rows that reference Cloudinary
# =============================================================================

import logging
from typing import Iterable, Optional

from asset_sync.clients.base import Catalog, SourceStore
from asset_sync.clients.errors import SyncError
from asset_sync.models import CatalogAsset, CloudinaryResource, PipelineState, SourceAsset, StageReport
from asset_sync.stages.base import StageContext, StageOutcome

__all__ = [
    "display_name_for",
    "to_source_asset",
    "discover_source_assets",
    "partition_by_provider",
    "fetch_catalog_assets",
    "run_discover_source_assets",
    "run_discover_catalog_assets",
]

logger = logging.getLogger(__name__)


def display_name_for(resource: CloudinaryResource) -> str:
    """Explicit display name, else the public id's basename without extension."""
    if resource.display_name:
        return resource.display_name
    basename = resource.public_id.rsplit("/", 1)[-1]
    stem = basename.rsplit(".", 1)[0] if "." in basename else basename
    return stem or basename


def to_source_asset(resource: CloudinaryResource, root: str) -> Optional[SourceAsset]:
    """
    Convert a resource into a SourceAsset when it lives in a folder under root.

    Resources outside the root, or directly in the root itself, yield None.
    """
    prefix = root.rstrip("/") + "/"
    folder_path = resource.asset_folder or ""
    if not folder_path.startswith(prefix):
        return None
    folder = folder_path[len(prefix):]
    if not folder:
        return None

    return SourceAsset(
        public_id=resource.public_id,
        url=resource.secure_url,
        width=resource.width,
        height=resource.height,
        bytes=resource.bytes,
        format=resource.format,
        folder=folder,
        display_name=display_name_for(resource),
        created_at=resource.created_at,
        updated_at=resource.updated_at,
    )


async def discover_source_assets(
    source: SourceStore,
    root: str,
    page_size: int = 500,
) -> list[SourceAsset]:
    """
    Page through all uploaded images and keep those under the asset root.

    Raises:
        SyncError: If Cloudinary returns a cursor it already returned
    """
    assets: list[SourceAsset] = []
    seen_cursors: set[str] = set()
    cursor: Optional[str] = None
    scanned = 0
    page_number = 0

    while True:
        page = await source.list_assets(next_cursor=cursor, max_results=page_size)
        page_number += 1
        scanned += len(page.resources)
        for resource in page.resources:
            asset = to_source_asset(resource, root)
            if asset is not None:
                assets.append(asset)
        logger.info(f"Page {page_number}: {len(page.resources)} resources, {len(assets)} under '{root}' so far")

        cursor = page.next_cursor
        if not cursor:
            break
        if cursor in seen_cursors:
            raise SyncError(f"Cloudinary returned cursor '{cursor}' twice; aborting pagination")
        seen_cursors.add(cursor)

    logger.info(f"Scanned {scanned} resources, {len(assets)} are under '{root}'")
    return assets


def partition_by_provider(rows: Iterable[CatalogAsset]) -> tuple[list[CatalogAsset], list[CatalogAsset]]:
    """Split rows into (Cloudinary-provider rows, everything else)."""
    cloudinary: list[CatalogAsset] = []
    other: list[CatalogAsset] = []
    for row in rows:
        (cloudinary if row.is_cloudinary else other).append(row)
    return cloudinary, other


async def run_discover_source_assets(state: PipelineState, ctx: StageContext) -> StageOutcome:
    assets = await discover_source_assets(
        ctx.source,
        ctx.settings.asset_root,
        ctx.settings.source_page_size,
    )

    per_folder: dict[str, int] = {}
    for asset in assets:
        per_folder[asset.folder] = per_folder.get(asset.folder, 0) + 1
    for folder, count in sorted(per_folder.items()):
        logger.info(f"  {folder}: {count} images")

    unknown = sorted(set(per_folder) - set(state.folder_mapping))
    warnings = []
    if state.folder_mapping and unknown:
        warnings.append(f"Assets found in folders missing from the mapping: {unknown}")

    report = StageReport(
        stage="discover-source-assets",
        counts={"assets": len(assets), "folders": len(per_folder)},
        warnings=warnings,
    )
    return StageOutcome(state=state.model_copy(update={"source_assets": assets}), report=report)


async def fetch_catalog_assets(
    catalog: Catalog,
    page_size: int,
) -> tuple[list[CatalogAsset], list[CatalogAsset], list[str]]:
    """
    Read the live Strapi rows in one bulk page.

    Returns:
        Tuple of (Cloudinary rows, other rows, warnings); a full page
        produces a truncation warning
    """
    rows = await catalog.list_files(page_size=page_size)
    warnings = []
    if len(rows) >= page_size:
        warnings.append(f"Catalog page size {page_size} reached; the row set may be truncated")
    cloudinary_rows, other_rows = partition_by_provider(rows)
    return cloudinary_rows, other_rows, warnings


async def run_discover_catalog_assets(state: PipelineState, ctx: StageContext) -> StageOutcome:
    cloudinary_rows, other_rows, warnings = await fetch_catalog_assets(ctx.catalog, ctx.settings.catalog_page_size)

    report = StageReport(
        stage="discover-catalog-assets",
        counts={"cloudinary_rows": len(cloudinary_rows), "other_rows": len(other_rows)},
        warnings=warnings,
    )
    new_state = state.model_copy(update={"existing_catalog_assets": cloudinary_rows})
    return StageOutcome(state=new_state, report=report)
