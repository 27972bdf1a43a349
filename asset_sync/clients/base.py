# =============================================================================
# Client Base
# =============================================================================
# Shared request handling for the Cloudinary and Strapi clients, plus the
# collaborator protocols the pipeline stages depend on.
# =============================================================================

from typing import Any, Optional, Protocol, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from asset_sync.clients.errors import ResponseValidationError, TransportError
from asset_sync.models import (
    CatalogAsset,
    CatalogAssetPayload,
    CatalogFolder,
    CloudinaryResourcePage,
    SourceFolder,
    StrapiFolderNode,
)

__all__ = ["ApiClient", "SourceStore", "Catalog"]

ModelT = TypeVar("ModelT", bound=BaseModel)


class ApiClient:
    """
    Thin wrapper around ``httpx.AsyncClient``.

    Turns network failures and error statuses into TransportError and
    malformed bodies into ResponseValidationError. Use as an async
    context manager so the connection pool is closed.
    """

    def __init__(self, client: httpx.AsyncClient) -> None:
        self._client = client

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[dict[str, Any]] = None,
        json: Optional[Any] = None,
    ) -> Any:
        """Send a request and return the decoded JSON body (None when empty)."""
        try:
            response = await self._client.request(method, path, params=params, json=json)
        except httpx.HTTPError as exc:
            raise TransportError(f"{method} {path} failed: {exc}", url=path) from exc

        if response.is_error:
            raise TransportError(
                f"{method} {path} returned HTTP {response.status_code}",
                url=str(response.url),
                status_code=response.status_code,
            )

        if not response.content:
            return None

        try:
            return response.json()
        except ValueError as exc:
            raise ResponseValidationError(f"{method} {path} returned a non-JSON body") from exc

    @staticmethod
    def _validate(model: type[ModelT], data: Any, context: str) -> ModelT:
        try:
            return model.model_validate(data)
        except ValidationError as exc:
            raise ResponseValidationError(f"Unexpected {context} response: {exc}") from exc


class SourceStore(Protocol):
    """Read-only surface of the Cloudinary Admin API used by the stages."""

    @property
    def cloud_name(self) -> str:
        ...

    async def list_folders(self, path: str) -> list[SourceFolder]:
        ...

    async def count_assets(self, asset_folder: str) -> int:
        ...

    async def list_assets(
        self, next_cursor: Optional[str] = None, max_results: int = 500
    ) -> CloudinaryResourcePage:
        ...


class Catalog(Protocol):
    """Read/write surface of the Strapi media library used by the stages."""

    async def folder_tree(self) -> list[StrapiFolderNode]:
        ...

    async def create_folder(self, name: str, parent_id: int) -> CatalogFolder:
        ...

    async def list_files(self, page_size: int = 1000) -> list[CatalogAsset]:
        ...

    async def create_file(self, payload: CatalogAssetPayload) -> Optional[CatalogAsset]:
        ...

    async def update_file(self, file_id: int, payload: CatalogAssetPayload) -> Optional[CatalogAsset]:
        ...

    async def delete_file(self, file_id: int) -> None:
        ...
