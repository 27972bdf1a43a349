# =============================================================================
# Pipeline State Model
# =============================================================================
# Accumulated output of every stage, persisted as one snapshot between stages.
# =============================================================================

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from .catalog import CatalogAsset, CatalogFolder
from .mapping import FolderMappingEntry
from .report import BrokenReference
from .source import SourceAsset, SourceFolder

__all__ = ["PipelineState"]


class PipelineState(BaseModel):
    """
    Snapshot of the pipeline as of the last successfully completed stage.

    Stages never mutate a state they receive; they return an updated copy
    (``state.model_copy(update=...)``). An empty instance means no prior
    progress.

    Attributes:
        source_folders: Cloudinary folders under the asset root
        catalog_folders: Flattened Strapi folder tree
        folder_mapping: Cloudinary folder name -> mapping entry
        created_folders: Strapi folders created by the last materialization
        source_assets: Cloudinary images under the asset root
        existing_catalog_assets: Strapi rows with the Cloudinary provider
        broken_references: Rows whose URL failed verification
        last_stage: Name of the last stage that completed
        last_updated: When the snapshot was written
    """

    source_folders: list[SourceFolder] = Field(default_factory=list)
    catalog_folders: list[CatalogFolder] = Field(default_factory=list)
    folder_mapping: dict[str, FolderMappingEntry] = Field(default_factory=dict)
    created_folders: list[CatalogFolder] = Field(default_factory=list)
    source_assets: list[SourceAsset] = Field(default_factory=list)
    existing_catalog_assets: list[CatalogAsset] = Field(default_factory=list)
    broken_references: list[BrokenReference] = Field(default_factory=list)
    last_stage: Optional[str] = None
    last_updated: Optional[datetime] = None
