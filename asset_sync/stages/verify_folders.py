# =============================================================================
# Folder Verification Stage
# =============================================================================
# Re-reads the Strapi folder tree after materialization. Read-only.
# =============================================================================

import logging

from asset_sync.models import PipelineState, StageReport
from asset_sync.stages.base import StageContext, StageOutcome
from asset_sync.stages.folders import discover_catalog_folders

__all__ = ["run_verify_folders"]

logger = logging.getLogger(__name__)


async def run_verify_folders(state: PipelineState, ctx: StageContext) -> StageOutcome:
    """Refresh the catalog folders and list the asset root's children."""
    folders = await discover_catalog_folders(ctx.catalog)
    created_ids = {folder.id for folder in state.created_folders}
    root_id = ctx.settings.catalog_root_folder_id

    warnings: list[str] = []
    children = [folder for folder in folders if folder.parent_id == root_id]
    if not any(folder.id == root_id for folder in folders):
        warnings.append(f"Asset root folder {root_id} not found in Strapi")
    else:
        logger.info(f"Children of asset root folder {root_id}:")
        for child in children:
            marker = " (new)" if child.id in created_ids else ""
            logger.info(f"  {child.name} (ID: {child.id}){marker}")

    missing = sorted(created_ids - {folder.id for folder in folders})
    if missing:
        warnings.append(f"Created folders missing from the tree: {missing}")

    report = StageReport(
        stage="verify-folders",
        counts={
            "folders": len(folders),
            "root_children": len(children),
            "new": len(created_ids & {child.id for child in children}),
        },
        warnings=warnings,
    )
    return StageOutcome(state=state.model_copy(update={"catalog_folders": folders}), report=report)
