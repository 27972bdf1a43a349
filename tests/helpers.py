"""
In-memory stand-ins for the Cloudinary and Strapi clients.

Both implement the SourceStore / Catalog protocols the stages depend on,
record every call, and can be told to fail for selected items.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

from asset_sync.clients.errors import TransportError
from asset_sync.models import (
    CatalogAsset,
    CatalogAssetPayload,
    CatalogFolder,
    CloudinaryResource,
    CloudinaryResourcePage,
    SourceFolder,
    StrapiFolderNode,
)

EPOCH = datetime(2025, 1, 1, tzinfo=timezone.utc)


def make_resource(
    public_id: str,
    folder: Optional[str] = "Project Photos/agricola",
    *,
    width: int = 1000,
    height: int = 667,
    file_format: str = "jpg",
    version: Optional[int] = 1758995559,
    display_name: Optional[str] = None,
    bytes: int = 204800,
) -> CloudinaryResource:
    version_segment = f"v{version}/" if version else ""
    return CloudinaryResource(
        public_id=public_id,
        secure_url=f"https://res.cloudinary.com/demo/image/upload/{version_segment}{public_id}.{file_format}",
        width=width,
        height=height,
        bytes=bytes,
        format=file_format,
        asset_folder=folder,
        display_name=display_name,
    )


class FakeSourceStore:
    """Cloudinary double: folders, per-folder counts and cursor-keyed pages."""

    def __init__(
        self,
        folders: Optional[list[SourceFolder]] = None,
        counts: Optional[dict[str, int]] = None,
        pages: Optional[dict[Optional[str], CloudinaryResourcePage]] = None,
        *,
        cloud_name: str = "demo",
    ) -> None:
        self.folders = folders or []
        self.counts = counts or {}
        self.pages = pages or {None: CloudinaryResourcePage()}
        self.fail_counts: set[str] = set()
        self.fail_listing = False
        self.calls: list[tuple] = []
        self._cloud_name = cloud_name

    @classmethod
    def with_resources(cls, resources: list[CloudinaryResource], **kwargs) -> "FakeSourceStore":
        return cls(pages={None: CloudinaryResourcePage(resources=resources)}, **kwargs)

    @property
    def cloud_name(self) -> str:
        return self._cloud_name

    async def list_folders(self, path: str) -> list[SourceFolder]:
        self.calls.append(("list_folders", path))
        if self.fail_listing:
            raise TransportError("listing failed", url=f"/folders/{path}", status_code=500)
        return list(self.folders)

    async def count_assets(self, asset_folder: str) -> int:
        self.calls.append(("count_assets", asset_folder))
        if asset_folder in self.fail_counts:
            raise TransportError("count failed", url="/resources/by_asset_folder", status_code=503)
        return self.counts.get(asset_folder, 0)

    async def list_assets(self, next_cursor: Optional[str] = None, max_results: int = 500) -> CloudinaryResourcePage:
        self.calls.append(("list_assets", next_cursor, max_results))
        return self.pages[next_cursor]


class FakeCatalog:
    """Strapi double holding a folder tree under the asset root and media rows."""

    def __init__(self, root_id: int = 147, root_name: str = "Project Photos") -> None:
        self.root = StrapiFolderNode(id=root_id, name=root_name, path="/1")
        self.rows: dict[int, CatalogAsset] = {}
        self.row_folders: dict[int, Optional[int]] = {}
        self.fail_folder_names: set[str] = set()
        self.fail_create_ids: set[str] = set()
        self.fail_update_ids: set[int] = set()
        self.fail_delete_ids: set[int] = set()
        self.calls: list[tuple] = []
        self._next_id = 1000

    # Folders

    def add_folder(self, name: str, folder_id: Optional[int] = None) -> StrapiFolderNode:
        node = StrapiFolderNode(id=folder_id or self._new_id(), name=name, path=f"/1/{name}")
        self.root.children.append(node)
        return node

    async def folder_tree(self) -> list[StrapiFolderNode]:
        self.calls.append(("folder_tree",))
        return [self.root.model_copy(deep=True)]

    async def create_folder(self, name: str, parent_id: int) -> CatalogFolder:
        self.calls.append(("create_folder", name, parent_id))
        if name in self.fail_folder_names:
            raise TransportError("folder creation failed", url="/api/media/folders", status_code=500)
        node = self.add_folder(name)
        return CatalogFolder(id=node.id, name=name, parent_id=parent_id, path=node.path)

    # Rows

    def add_row(
        self,
        name: str,
        public_id: Optional[str] = None,
        *,
        row_id: Optional[int] = None,
        url: Optional[str] = None,
        created_at: Optional[datetime] = None,
        provider: str = "cloudinary",
        width: Optional[int] = 1000,
        height: Optional[int] = 667,
        formats: Optional[dict] = None,
        content_hash: Optional[str] = None,
    ) -> CatalogAsset:
        row_id = row_id or self._new_id()
        metadata = {"public_id": public_id, "content_hash": content_hash} if public_id else None
        row = CatalogAsset(
            id=row_id,
            name=name,
            url=url or (f"https://res.cloudinary.com/demo/image/upload/{public_id}.jpg" if public_id else None),
            provider=provider,
            provider_metadata=metadata,
            formats=formats,
            width=width,
            height=height,
            size=200.0,
            mime="image/jpeg",
            ext=".jpeg",
            created_at=created_at or EPOCH + timedelta(seconds=row_id),
        )
        self.rows[row_id] = row
        return row

    async def list_files(self, page_size: int = 1000) -> list[CatalogAsset]:
        self.calls.append(("list_files", page_size))
        return list(self.rows.values())[:page_size]

    async def create_file(self, payload: CatalogAssetPayload) -> Optional[CatalogAsset]:
        public_id = payload.provider_metadata.public_id
        self.calls.append(("create_file", public_id))
        if public_id in self.fail_create_ids:
            raise TransportError("create failed", url="/api/media-files", status_code=500)
        row_id = self._new_id()
        row = self._row_from_payload(row_id, payload, EPOCH + timedelta(seconds=row_id))
        self.rows[row_id] = row
        self.row_folders[row_id] = payload.folder_id
        return row

    async def update_file(self, file_id: int, payload: CatalogAssetPayload) -> Optional[CatalogAsset]:
        self.calls.append(("update_file", file_id))
        if file_id in self.fail_update_ids or file_id not in self.rows:
            raise TransportError("update failed", url=f"/api/media-files/{file_id}", status_code=500)
        row = self._row_from_payload(file_id, payload, self.rows[file_id].created_at)
        self.rows[file_id] = row
        if payload.folder_id is not None:
            self.row_folders[file_id] = payload.folder_id
        return row

    async def delete_file(self, file_id: int) -> None:
        self.calls.append(("delete_file", file_id))
        if file_id in self.fail_delete_ids or file_id not in self.rows:
            raise TransportError("delete failed", url=f"/api/media/files/{file_id}", status_code=404)
        del self.rows[file_id]
        self.row_folders.pop(file_id, None)

    # Inspection

    def rows_for(self, public_id: str) -> list[CatalogAsset]:
        return [row for row in self.rows.values() if row.public_id == public_id]

    def mutations(self) -> list[tuple]:
        return [call for call in self.calls if call[0] in ("create_file", "update_file", "delete_file", "create_folder")]

    def _new_id(self) -> int:
        self._next_id += 1
        return self._next_id

    @staticmethod
    def _row_from_payload(row_id: int, payload: CatalogAssetPayload, created_at: Optional[datetime]) -> CatalogAsset:
        body = payload.to_request()
        return CatalogAsset(
            id=row_id,
            name=body["name"],
            url=body["url"],
            provider=body["provider"],
            provider_metadata=body["provider_metadata"],
            formats=body["formats"],
            width=body["width"],
            height=body["height"],
            size=body["size"],
            mime=body["mime"],
            ext=body["ext"],
            created_at=created_at,
        )
