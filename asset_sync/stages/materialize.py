# =============================================================================
# Folder Materialization Stage
# =============================================================================
# Creates the Strapi folders the mapping marked NEEDS_CREATION, under the
# asset root folder.
# =============================================================================

import logging

from asset_sync.clients.base import Catalog
from asset_sync.models import CatalogFolder, FolderMapping, FolderStatus, PipelineState, StageReport
from asset_sync.stages.base import StageContext, StageOutcome

__all__ = ["materialize_folders", "run_create_folders"]

logger = logging.getLogger(__name__)


async def materialize_folders(
    catalog: Catalog,
    mapping: FolderMapping,
    *,
    root_folder_id: int,
    dry_run: bool = False,
) -> list[CatalogFolder]:
    """
    Create missing folders one at a time and update the mapping in place.

    A failed creation is logged and the entry stays NEEDS_CREATION, so
    assets in that folder are skipped until a later run succeeds.

    Args:
        catalog: Strapi client
        mapping: Folder mapping, mutated in place
        root_folder_id: Strapi id of the parent folder for new folders
        dry_run: Only log the folders that would be created

    Returns:
        Folders actually created
    """
    pending = [entry for entry in mapping.values() if entry.status == FolderStatus.NEEDS_CREATION]
    if not pending:
        logger.info("All folders already exist in Strapi")
        return []

    if dry_run:
        for entry in pending:
            logger.info(f"[dry-run] Would create folder '{entry.cloudinary_name}' under {root_folder_id}")
        return []

    created: list[CatalogFolder] = []
    for entry in pending:
        try:
            folder = await catalog.create_folder(entry.cloudinary_name, root_folder_id)
        except Exception as exc:
            logger.error(f"Failed to create folder '{entry.cloudinary_name}': {exc}")
            continue
        entry.mark_created(folder.id)
        created.append(folder)
        logger.info(f"Created folder '{folder.name}' (ID: {folder.id})")

    return created


async def run_create_folders(state: PipelineState, ctx: StageContext) -> StageOutcome:
    mapping = {name: entry.model_copy(deep=True) for name, entry in state.folder_mapping.items()}
    pending = sum(1 for entry in mapping.values() if entry.status == FolderStatus.NEEDS_CREATION)

    created = await materialize_folders(
        ctx.catalog,
        mapping,
        root_folder_id=ctx.settings.catalog_root_folder_id,
        dry_run=ctx.dry_run,
    )

    failed = 0 if ctx.dry_run else pending - len(created)
    warnings = []
    if failed:
        warnings.append(f"{failed} folders could not be created; their assets will be skipped")

    report = StageReport(
        stage="create-folders",
        counts={"created": len(created), "failed": failed, "pending": pending},
        warnings=warnings,
        dry_run=ctx.dry_run,
    )
    new_state = state.model_copy(update={"folder_mapping": mapping, "created_folders": created})
    return StageOutcome(state=new_state, report=report)
