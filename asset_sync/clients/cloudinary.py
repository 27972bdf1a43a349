# =============================================================================
# Cloudinary Client - Source Store Operations
# =============================================================================
# Async wrapper for the Cloudinary Admin API endpoints the sync reads.
# Authenticated with the API key/secret pair (HTTP basic auth).
# =============================================================================

import logging
from typing import Optional
from urllib.parse import quote

import httpx

from asset_sync.clients.base import ApiClient
from asset_sync.models import (
    CloudinaryFolderListing,
    CloudinaryResourcePage,
    CloudinarySettings,
    SourceFolder,
)

__all__ = ["CloudinaryClient"]

logger = logging.getLogger(__name__)


class CloudinaryClient(ApiClient):
    """Read-only client for Cloudinary folders and image resources."""

    def __init__(
        self,
        settings: CloudinarySettings,
        *,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        super().__init__(
            httpx.AsyncClient(
                base_url=settings.admin_url,
                auth=(settings.api_key, settings.api_secret),
                timeout=timeout,
                transport=transport,
            )
        )
        self._cloud_name = settings.cloud_name

    @property
    def cloud_name(self) -> str:
        return self._cloud_name

    async def list_folders(self, path: str) -> list[SourceFolder]:
        """
        List the immediate sub-folders of a folder.

        Args:
            path: Folder path (e.g. "Project Photos")

        Returns:
            List of SourceFolder with asset_count left at 0
        """
        data = await self._request("GET", f"/folders/{quote(path, safe='/')}")
        listing = self._validate(CloudinaryFolderListing, data or {}, "folder listing")
        return [SourceFolder(name=folder.name, path=folder.path) for folder in listing.folders]

    async def count_assets(self, asset_folder: str) -> int:
        """Number of assets in an asset folder, as reported by ``total_count``."""
        page = await self.list_folder_assets(asset_folder, max_results=1)
        return page.total_count or 0

    async def list_folder_assets(
        self,
        asset_folder: str,
        next_cursor: Optional[str] = None,
        max_results: int = 500,
    ) -> CloudinaryResourcePage:
        """One page of the resources stored in a single asset folder."""
        params: dict[str, object] = {"asset_folder": asset_folder, "max_results": max_results}
        if next_cursor:
            params["next_cursor"] = next_cursor
        data = await self._request("GET", "/resources/by_asset_folder", params=params)
        return self._validate(CloudinaryResourcePage, data or {}, "asset folder page")

    async def list_assets(
        self,
        next_cursor: Optional[str] = None,
        max_results: int = 500,
    ) -> CloudinaryResourcePage:
        """
        One page of all uploaded image resources.

        Args:
            next_cursor: Cursor returned by the previous page, if any
            max_results: Page size (Cloudinary caps this at 500)

        Returns:
            CloudinaryResourcePage; ``next_cursor`` is None on the last page
        """
        params: dict[str, object] = {"type": "upload", "max_results": max_results}
        if next_cursor:
            params["next_cursor"] = next_cursor
        logger.debug(f"Fetching Cloudinary resources page (cursor={next_cursor})")
        data = await self._request("GET", "/resources/image", params=params)
        return self._validate(CloudinaryResourcePage, data or {}, "resource page")
