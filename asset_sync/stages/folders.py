# =============================================================================
# Folder Discovery Stages
# =============================================================================
# Reads the folder namespaces of both systems:
# - discover-source-folders: Cloudinary folders under the asset root, with counts
# - discover-catalog-folders: Strapi folder tree, flattened
# =============================================================================

import logging
from typing import Iterable, Optional

from asset_sync.batching import process_in_batches
from asset_sync.clients.base import Catalog, SourceStore
from asset_sync.models import CatalogFolder, PipelineState, SourceFolder, StageReport, StrapiFolderNode
from asset_sync.stages.base import StageContext, StageOutcome

__all__ = [
    "discover_source_folders",
    "flatten_folder_tree",
    "discover_catalog_folders",
    "run_discover_source_folders",
    "run_discover_catalog_folders",
]

logger = logging.getLogger(__name__)


async def discover_source_folders(
    source: SourceStore,
    root: str,
    batch_size: int,
) -> tuple[list[SourceFolder], list[str]]:
    """
    List the folders under the asset root and count the assets in each.

    Listing failures propagate. A failed count leaves the folder with
    ``asset_count=0`` and adds a warning.

    Args:
        source: Cloudinary client
        root: Asset root folder path
        batch_size: Concurrent count requests per batch

    Returns:
        Tuple of (folders, warnings)
    """
    folders = await source.list_folders(root)
    logger.info(f"Found {len(folders)} folders under '{root}'")

    outcomes = await process_in_batches(
        folders,
        batch_size,
        lambda folder: source.count_assets(folder.path),
        label="folder counts",
    )

    counted: list[SourceFolder] = []
    warnings: list[str] = []
    for outcome in outcomes:
        folder = outcome.item
        if outcome.ok:
            counted.append(folder.model_copy(update={"asset_count": outcome.value or 0}))
            logger.info(f"  {folder.name}: {outcome.value or 0} assets")
        else:
            warnings.append(f"Could not count assets in '{folder.path}': {outcome.error}")
            counted.append(folder.model_copy(update={"asset_count": 0}))

    return counted, warnings


def flatten_folder_tree(
    nodes: Iterable[StrapiFolderNode],
    parent: Optional[StrapiFolderNode] = None,
) -> list[CatalogFolder]:
    """
    Flatten the Strapi folder tree depth-first.

    Each folder keeps the name and id of its parent; top-level folders have
    neither.
    """
    flat: list[CatalogFolder] = []
    for node in nodes:
        flat.append(
            CatalogFolder(
                id=node.id,
                name=node.name,
                parent_id=parent.id if parent else None,
                parent=parent.name if parent else None,
                path=node.path,
            )
        )
        flat.extend(flatten_folder_tree(node.children, node))
    return flat


async def discover_catalog_folders(catalog: Catalog) -> list[CatalogFolder]:
    tree = await catalog.folder_tree()
    folders = flatten_folder_tree(tree)
    logger.info(f"Found {len(folders)} Strapi folders")
    return folders


async def run_discover_source_folders(state: PipelineState, ctx: StageContext) -> StageOutcome:
    folders, warnings = await discover_source_folders(
        ctx.source,
        ctx.settings.asset_root,
        ctx.settings.read_batch_size,
    )
    report = StageReport(
        stage="discover-source-folders",
        counts={
            "folders": len(folders),
            "assets": sum(folder.asset_count for folder in folders),
        },
        warnings=warnings,
    )
    return StageOutcome(state=state.model_copy(update={"source_folders": folders}), report=report)


async def run_discover_catalog_folders(state: PipelineState, ctx: StageContext) -> StageOutcome:
    folders = await discover_catalog_folders(ctx.catalog)
    for folder in folders:
        location = f"under {folder.parent}" if folder.parent else "root"
        logger.info(f"  {folder.name} (ID: {folder.id}, {location})")

    report = StageReport(stage="discover-catalog-folders", counts={"folders": len(folders)})
    return StageOutcome(state=state.model_copy(update={"catalog_folders": folders}), report=report)
