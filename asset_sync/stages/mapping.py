# =============================================================================
# Folder Mapping Stage
# =============================================================================
# Pairs each Cloudinary folder with a Strapi folder by case-insensitive name.
# =============================================================================

import logging
from typing import Iterable

from asset_sync.models import (
    CatalogFolder,
    FolderMapping,
    FolderMappingEntry,
    FolderStatus,
    PipelineState,
    SourceFolder,
    StageReport,
)
from asset_sync.stages.base import StageContext, StageOutcome

__all__ = ["map_folders", "find_duplicate_folder_names", "run_map_folders"]

logger = logging.getLogger(__name__)


def map_folders(
    source_folders: Iterable[SourceFolder],
    catalog_folders: Iterable[CatalogFolder],
) -> FolderMapping:
    """
    Build the folder mapping keyed by Cloudinary folder name.

    Matching is case-insensitive. When several Strapi folders share a
    lower-cased name, the first one in discovery order is used.

    Examples:
        Cloudinary "agricola" with Strapi "Agricola" (id 158) maps to
        EXISTS/158 with needs_update=True; a Cloudinary folder with no
        Strapi counterpart maps to NEEDS_CREATION.
    """
    by_name: dict[str, CatalogFolder] = {}
    for folder in catalog_folders:
        by_name.setdefault(folder.name.lower(), folder)

    mapping: FolderMapping = {}
    for source in source_folders:
        match = by_name.get(source.name.lower())
        if match is not None:
            mapping[source.name] = FolderMappingEntry(
                cloudinary_name=source.name,
                strapi_id=match.id,
                strapi_name=match.name,
                status=FolderStatus.EXISTS,
                needs_update=match.name != source.name,
            )
        else:
            mapping[source.name] = FolderMappingEntry(
                cloudinary_name=source.name,
                strapi_name=source.name,
                status=FolderStatus.NEEDS_CREATION,
            )
    return mapping


def find_duplicate_folder_names(catalog_folders: Iterable[CatalogFolder]) -> dict[str, list[int]]:
    """Lower-cased folder names that occur more than once, with their ids."""
    ids_by_name: dict[str, list[int]] = {}
    for folder in catalog_folders:
        ids_by_name.setdefault(folder.name.lower(), []).append(folder.id)
    return {name: ids for name, ids in ids_by_name.items() if len(ids) > 1}


async def run_map_folders(state: PipelineState, ctx: StageContext) -> StageOutcome:
    mapping = map_folders(state.source_folders, state.catalog_folders)

    warnings = [
        f"Strapi has {len(ids)} folders named '{name}' (ids {ids}); using id {ids[0]}"
        for name, ids in find_duplicate_folder_names(state.catalog_folders).items()
    ]

    for name, entry in mapping.items():
        if entry.status == FolderStatus.EXISTS:
            suffix = f" (rename suggested: '{entry.strapi_name}' -> '{name}')" if entry.needs_update else ""
            logger.info(f"  {name} -> {entry.strapi_name} (ID: {entry.strapi_id}){suffix}")
        else:
            logger.info(f"  {name} -> needs creation")

    statuses = [entry.status for entry in mapping.values()]
    report = StageReport(
        stage="map-folders",
        counts={
            "existing": statuses.count(FolderStatus.EXISTS),
            "needs_creation": statuses.count(FolderStatus.NEEDS_CREATION),
            "needs_update": sum(1 for entry in mapping.values() if entry.needs_update),
        },
        warnings=warnings,
    )
    return StageOutcome(state=state.model_copy(update={"folder_mapping": mapping}), report=report)
