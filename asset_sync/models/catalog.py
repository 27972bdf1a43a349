# =============================================================================
# Catalog Models
# =============================================================================
# Defines records describing the Strapi media library side of the sync:
# - CatalogFolder: Flattened folder node
# - StrapiFolderNode: Recursive folder tree node from folders-structure
# - FormatVariant: Computed rendition descriptor (thumbnail/small/medium/large)
# - CatalogAsset: Existing media library row
# - CatalogAssetPayload: Create/update request body
# =============================================================================

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

__all__ = [
    "CLOUDINARY_PROVIDER",
    "FORMAT_NAMES",
    "CatalogFolder",
    "StrapiFolderNode",
    "ProviderMetadata",
    "FormatVariant",
    "CatalogAsset",
    "CatalogAssetPayload",
]


CLOUDINARY_PROVIDER = "cloudinary"
"""Provider tag Strapi stores on rows that reference Cloudinary assets."""

FORMAT_NAMES = ("thumbnail", "small", "medium", "large")
"""Fixed rendition names Strapi expects in ``formats``."""


# =============================================================================
# Folders
# =============================================================================


class CatalogFolder(BaseModel):
    """
    A folder in the Strapi media library, flattened out of the tree.

    ``parent_id`` is kept for traceability only; folder mapping is by name.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: int
    name: str
    parent_id: Optional[int] = Field(None, alias="parentId")
    parent: Optional[str] = None
    path: Optional[str] = None


class StrapiFolderNode(BaseModel):
    """Node of the ``/api/media/folders-structure`` response."""

    model_config = ConfigDict(extra="ignore")

    id: int
    name: str
    path: Optional[str] = None
    children: list["StrapiFolderNode"] = Field(default_factory=list)


# =============================================================================
# Formats
# =============================================================================


class ProviderMetadata(BaseModel):
    """Provider metadata stored on a Strapi row (snake_case on the wire)."""

    model_config = ConfigDict(extra="allow")

    public_id: Optional[str] = None
    resource_type: str = "image"
    content_hash: Optional[str] = None


class FormatVariant(BaseModel):
    """
    One computed rendition of an asset.

    Variants are URL transformations of the original, never separate
    binaries. ``size`` is kilobytes with two decimals, ``size_in_bytes``
    the estimated byte size scaled by area.
    """

    model_config = ConfigDict(populate_by_name=True)

    ext: str
    url: str
    hash: str
    mime: str
    name: str
    path: Optional[str] = None
    size: float
    width: int = Field(..., gt=0)
    height: int = Field(..., gt=0)
    size_in_bytes: int = Field(..., alias="sizeInBytes", ge=0)


# =============================================================================
# Media Rows
# =============================================================================


class CatalogAsset(BaseModel):
    """
    An existing row of the Strapi media library.

    Only the fields the sync reads are declared; everything else is ignored.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: int
    name: str
    url: Optional[str] = None
    provider: Optional[str] = None
    provider_metadata: Optional[ProviderMetadata] = None
    formats: Optional[dict[str, Any]] = None
    width: Optional[int] = None
    height: Optional[int] = None
    size: Optional[float] = None
    mime: Optional[str] = None
    ext: Optional[str] = None
    created_at: Optional[datetime] = Field(None, alias="createdAt")
    updated_at: Optional[datetime] = Field(None, alias="updatedAt")

    @property
    def public_id(self) -> Optional[str]:
        """Cloudinary public id stored in provider metadata, if any."""
        if self.provider_metadata is None:
            return None
        return self.provider_metadata.public_id

    @property
    def is_cloudinary(self) -> bool:
        return self.provider == CLOUDINARY_PROVIDER


class CatalogAssetPayload(BaseModel):
    """
    Request body for ``POST /api/media-files`` and ``PUT /api/media-files/{id}``.

    Serialize with :meth:`to_request` so the Strapi field names are used.
    """

    model_config = ConfigDict(populate_by_name=True)

    name: str
    alternative_text: str = Field(..., alias="alternativeText")
    caption: str
    url: str
    provider: str = CLOUDINARY_PROVIDER
    provider_metadata: ProviderMetadata
    formats: dict[str, FormatVariant]
    width: int
    height: int
    size: float
    mime: str
    folder_id: Optional[int] = Field(None, alias="folderId")
    hash: str
    ext: str

    def to_request(self) -> dict[str, Any]:
        """Return the JSON body Strapi expects."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
