# =============================================================================
# Strapi Client - Media Catalog Operations
# =============================================================================
# Async wrapper for the Strapi media library endpoints the sync reads and
# writes, including the custom /api/media-files routes that accept formats.
# Authenticated with a bearer token.
# =============================================================================

import logging
from typing import Any, Optional

import httpx

from asset_sync.clients.base import ApiClient
from asset_sync.models import (
    CatalogAsset,
    CatalogAssetPayload,
    CatalogFolder,
    StrapiFolderNode,
    StrapiSettings,
)

__all__ = ["StrapiClient"]

logger = logging.getLogger(__name__)


def _unwrap(body: Any) -> Any:
    """Strip Strapi's ``{"data": ...}`` envelope and v4 ``attributes`` nesting."""
    if isinstance(body, dict) and "data" in body:
        body = body["data"]
    if isinstance(body, dict) and isinstance(body.get("attributes"), dict):
        return {"id": body.get("id"), **body["attributes"]}
    return body


class StrapiClient(ApiClient):
    """Client for Strapi media folders and media rows."""

    def __init__(
        self,
        settings: StrapiSettings,
        *,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        super().__init__(
            httpx.AsyncClient(
                base_url=settings.base_url,
                headers={
                    "Authorization": f"Bearer {settings.api_token}",
                    "Content-Type": "application/json",
                },
                timeout=timeout,
                transport=transport,
            )
        )

    # -------------------------------------------------------------------------
    # Folders
    # -------------------------------------------------------------------------

    async def folder_tree(self) -> list[StrapiFolderNode]:
        """Fetch the full media folder tree."""
        data = _unwrap(await self._request("GET", "/api/media/folders-structure"))
        if data is None:
            return []
        if not isinstance(data, list):
            data = [data]
        return [self._validate(StrapiFolderNode, node, "folder tree") for node in data]

    async def create_folder(self, name: str, parent_id: int) -> CatalogFolder:
        """
        Create a media folder.

        Args:
            name: Folder name, used verbatim
            parent_id: Id of the parent folder

        Returns:
            The created CatalogFolder
        """
        body = await self._request(
            "POST",
            "/api/media/folders",
            json={"data": {"name": name, "parent": parent_id}},
        )
        node = self._validate(StrapiFolderNode, _unwrap(body), "folder creation")
        return CatalogFolder(id=node.id, name=node.name, parent_id=parent_id, path=node.path)

    # -------------------------------------------------------------------------
    # Media rows
    # -------------------------------------------------------------------------

    async def list_files(self, page_size: int = 1000) -> list[CatalogAsset]:
        """
        Fetch media rows in a single bulk page.

        The page size bounds the working set this sync supports.
        """
        body = await self._request(
            "GET",
            "/api/media/files",
            params={"pagination[pageSize]": page_size},
        )
        rows = _unwrap(body)
        if rows is None:
            return []
        if not isinstance(rows, list):
            rows = [rows]
        return [self._validate(CatalogAsset, _unwrap(row), "media file") for row in rows]

    async def create_file(self, payload: CatalogAssetPayload) -> Optional[CatalogAsset]:
        body = await self._request("POST", "/api/media-files", json=payload.to_request())
        return self._row_or_none(body)

    async def update_file(self, file_id: int, payload: CatalogAssetPayload) -> Optional[CatalogAsset]:
        body = await self._request("PUT", f"/api/media-files/{file_id}", json=payload.to_request())
        return self._row_or_none(body)

    async def delete_file(self, file_id: int) -> None:
        await self._request("DELETE", f"/api/media/files/{file_id}")

    def _row_or_none(self, body: Any) -> Optional[CatalogAsset]:
        row = _unwrap(body)
        if not isinstance(row, dict) or "id" not in row:
            return None
        return self._validate(CatalogAsset, row, "media file")
