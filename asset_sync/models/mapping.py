# =============================================================================
# Folder Mapping Models
# =============================================================================
# Name-keyed correspondence between Cloudinary folders and Strapi folders.
# =============================================================================

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, model_validator

__all__ = [
    "FolderStatus",
    "FolderMappingEntry",
    "FolderMapping",
    "resolve_folder_id",
]


class FolderStatus(str, Enum):
    """Lifecycle of a mapping entry within a run."""

    EXISTS = "EXISTS"
    NEEDS_CREATION = "NEEDS_CREATION"
    CREATED = "CREATED"


class FolderMappingEntry(BaseModel):
    """
    Mapping of one Cloudinary folder onto a Strapi folder.

    ``strapi_id`` is None exactly when the entry still needs creation.
    ``needs_update`` flags a display-name divergence between the two
    systems; it is reported, never applied.

    Attributes:
        cloudinary_name: Source folder name (mapping key)
        strapi_id: Strapi folder id, once known
        strapi_name: Strapi folder display name (source name for new folders)
        status: EXISTS, NEEDS_CREATION or CREATED
        needs_update: Whether the Strapi name differs from the source name
    """

    cloudinary_name: str = Field(..., min_length=1)
    strapi_id: Optional[int] = None
    strapi_name: str
    status: FolderStatus
    needs_update: bool = False

    @model_validator(mode="after")
    def validate_id_matches_status(self) -> "FolderMappingEntry":
        """strapi_id must be null iff the folder still needs creation."""
        pending = self.status == FolderStatus.NEEDS_CREATION
        if pending != (self.strapi_id is None):
            raise ValueError(
                f"Folder '{self.cloudinary_name}': strapi_id must be null "
                f"iff status is NEEDS_CREATION (status={self.status.value}, "
                f"strapi_id={self.strapi_id})"
            )
        return self

    @property
    def is_resolved(self) -> bool:
        return self.strapi_id is not None

    def mark_created(self, folder_id: int) -> None:
        """Transition NEEDS_CREATION -> CREATED in place."""
        if self.status != FolderStatus.NEEDS_CREATION:
            raise ValueError(
                f"Folder '{self.cloudinary_name}' is {self.status.value}, "
                "only NEEDS_CREATION entries can be marked created"
            )
        self.strapi_id = folder_id
        self.status = FolderStatus.CREATED


FolderMapping = dict[str, FolderMappingEntry]
"""Folder mapping keyed by Cloudinary folder name."""


def resolve_folder_id(mapping: FolderMapping, folder_name: str) -> Optional[int]:
    """
    Look up the Strapi folder id for a Cloudinary folder name.

    Returns None when the folder is unknown or still awaiting creation.
    """
    entry = mapping.get(folder_name)
    if entry is None:
        return None
    return entry.strapi_id
