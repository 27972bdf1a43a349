# =============================================================================
# Source Store Models
# =============================================================================
# Defines records describing the Cloudinary side of the sync:
# - SourceFolder: Folder under the asset root
# - SourceAsset: Immutable snapshot of one image at discovery time
# - Cloudinary* records: Admin API responses, validated at the client boundary
# =============================================================================

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

__all__ = [
    "SourceFolder",
    "SourceAsset",
    "CloudinaryFolderRecord",
    "CloudinaryFolderListing",
    "CloudinaryResource",
    "CloudinaryResourcePage",
]


# =============================================================================
# Domain Records
# =============================================================================


class SourceFolder(BaseModel):
    """
    A folder in the Cloudinary folder namespace.

    Attributes:
        name: Final path segment (e.g. "agricola")
        path: Full folder path (e.g. "Project Photos/agricola")
        asset_count: Number of assets reported by Cloudinary (0 when unknown)
    """

    name: str = Field(..., min_length=1, description="Folder name (last path segment)")
    path: str = Field(..., min_length=1, description="Full folder path")
    asset_count: int = Field(0, ge=0, description="Asset count at discovery time")

    @model_validator(mode="after")
    def validate_path_ends_with_name(self) -> "SourceFolder":
        """Ensure the folder name is the final segment of its path."""
        if self.path.rstrip("/").split("/")[-1] != self.name:
            raise ValueError(
                f"Folder path '{self.path}' does not end with folder name '{self.name}'"
            )
        return self


class SourceAsset(BaseModel):
    """
    One image as it exists in Cloudinary at discovery time.

    ``public_id`` is the durable join key between Cloudinary and Strapi.
    """

    model_config = ConfigDict(frozen=True)

    public_id: str = Field(..., min_length=1)
    url: str = Field(..., min_length=1, description="Secure delivery URL")
    width: int = Field(..., gt=0)
    height: int = Field(..., gt=0)
    bytes: int = Field(0, ge=0, description="Original file size in bytes")
    format: str = Field(..., min_length=1, description="File format (jpg, png, ...)")
    folder: str = Field(..., description="Folder name relative to the asset root")
    display_name: str = Field(..., min_length=1)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# =============================================================================
# Cloudinary Admin API Responses
# =============================================================================


class CloudinaryFolderRecord(BaseModel):
    """Single entry of a ``GET /folders/{path}`` response."""

    model_config = ConfigDict(extra="ignore")

    name: str
    path: str


class CloudinaryFolderListing(BaseModel):
    """``GET /folders/{path}`` response body."""

    model_config = ConfigDict(extra="ignore")

    folders: list[CloudinaryFolderRecord] = Field(default_factory=list)


class CloudinaryResource(BaseModel):
    """Single image resource as returned by the Admin API."""

    model_config = ConfigDict(extra="ignore")

    public_id: str
    secure_url: str
    width: int
    height: int
    bytes: int = 0
    format: str
    asset_folder: Optional[str] = None
    display_name: Optional[str] = None
    original_filename: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class CloudinaryResourcePage(BaseModel):
    """One page of resources plus the cursor for the next page."""

    model_config = ConfigDict(extra="ignore")

    resources: list[CloudinaryResource] = Field(default_factory=list)
    next_cursor: Optional[str] = None
    total_count: Optional[int] = None
