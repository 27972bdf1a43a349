# =============================================================================
# Stage Registry
# =============================================================================
# Ordered list of every stage and the selection rules of the CLI.
# =============================================================================

from typing import Optional, Union

from asset_sync.clients.errors import UnknownStageError
from asset_sync.stages.assets import run_discover_catalog_assets, run_discover_source_assets
from asset_sync.stages.base import Stage
from asset_sync.stages.dedupe import run_deduplicate
from asset_sync.stages.folders import run_discover_catalog_folders, run_discover_source_folders
from asset_sync.stages.mapping import run_map_folders
from asset_sync.stages.materialize import run_create_folders
from asset_sync.stages.purge import run_purge
from asset_sync.stages.reconcile import run_reconcile
from asset_sync.stages.refresh_formats import run_refresh_formats
from asset_sync.stages.verify import run_verify_references
from asset_sync.stages.verify_folders import run_verify_folders

__all__ = ["STAGES", "get_stage", "select_stages"]


STAGES: tuple[Stage, ...] = (
    Stage(0, "purge", "Delete existing Strapi media", run_purge, default=False,
          review_prompt="Review the media rows listed above"),
    Stage(1, "discover-source-folders", "Discover Cloudinary folders", run_discover_source_folders),
    Stage(2, "discover-catalog-folders", "Discover Strapi folders", run_discover_catalog_folders),
    Stage(3, "map-folders", "Map Cloudinary folders to Strapi folders", run_map_folders,
          review_prompt="Review the folder mapping"),
    Stage(4, "create-folders", "Create missing Strapi folders", run_create_folders),
    Stage(5, "verify-folders", "Verify Strapi folder structure", run_verify_folders),
    Stage(6, "discover-source-assets", "Discover Cloudinary images", run_discover_source_assets),
    Stage(7, "discover-catalog-assets", "Discover Strapi media rows", run_discover_catalog_assets),
    Stage(8, "reconcile", "Sync Cloudinary with Strapi", run_reconcile,
          review_prompt="Review the sync results"),
    Stage(9, "verify-references", "Verify media references", run_verify_references),
    Stage(10, "deduplicate", "Clean up duplicate media rows", run_deduplicate),
    Stage(11, "refresh-formats", "Force refresh media formats", run_refresh_formats, default=False),
)


def get_stage(selector: Union[int, str]) -> Stage:
    """
    Find a stage by number or name.

    Raises:
        UnknownStageError: If no stage matches
    """
    text = str(selector).strip().lower()
    for stage in STAGES:
        if text == stage.name or (text.isdigit() and int(text) == stage.number):
            return stage
    raise UnknownStageError(f"Unknown stage '{selector}'; choose one of: " + ", ".join(
        f"{stage.number}/{stage.name}" for stage in STAGES
    ))


def select_stages(step: Optional[Union[int, str]] = None, purge: bool = False) -> list[Stage]:
    """
    Stages to run, in order.

    A single selected step runs alone. Otherwise every default stage runs,
    preceded by purge when requested.
    """
    if step is not None:
        return [get_stage(step)]
    return [stage for stage in STAGES if stage.default or (purge and stage.name == "purge")]
