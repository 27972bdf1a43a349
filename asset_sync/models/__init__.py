# =============================================================================
# Data Models Library
# =============================================================================
# Pydantic models and settings for the media asset sync.
# =============================================================================

"""
Data models for the media asset sync.

This library provides:
- Source records: SourceFolder, SourceAsset and Cloudinary API responses
- Catalog records: CatalogFolder, CatalogAsset, FormatVariant, payloads
- Folder mapping: FolderStatus, FolderMappingEntry
- PipelineState: Persisted snapshot between stages
- Reports and configuration models
"""

# Source store records
from .source import (
    SourceFolder,
    SourceAsset,
    CloudinaryFolderRecord,
    CloudinaryFolderListing,
    CloudinaryResource,
    CloudinaryResourcePage,
)

# Catalog records
from .catalog import (
    CLOUDINARY_PROVIDER,
    FORMAT_NAMES,
    CatalogFolder,
    StrapiFolderNode,
    ProviderMetadata,
    FormatVariant,
    CatalogAsset,
    CatalogAssetPayload,
)

# Folder mapping
from .mapping import (
    FolderStatus,
    FolderMappingEntry,
    FolderMapping,
    resolve_folder_id,
)

# Reports and state
from .report import SyncSummary, BrokenReference, StageReport
from .state import PipelineState

# Configuration models
from .config import (
    CloudinarySettings,
    StrapiSettings,
    SyncSettings,
)

__all__ = [
    # Source
    "SourceFolder",
    "SourceAsset",
    "CloudinaryFolderRecord",
    "CloudinaryFolderListing",
    "CloudinaryResource",
    "CloudinaryResourcePage",
    # Catalog
    "CLOUDINARY_PROVIDER",
    "FORMAT_NAMES",
    "CatalogFolder",
    "StrapiFolderNode",
    "ProviderMetadata",
    "FormatVariant",
    "CatalogAsset",
    "CatalogAssetPayload",
    # Mapping
    "FolderStatus",
    "FolderMappingEntry",
    "FolderMapping",
    "resolve_folder_id",
    # Reports / state
    "SyncSummary",
    "BrokenReference",
    "StageReport",
    "PipelineState",
    # Config
    "CloudinarySettings",
    "StrapiSettings",
    "SyncSettings",
]
