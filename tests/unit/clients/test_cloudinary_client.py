# =============================================================================
# Cloudinary Client Unit Tests
# =============================================================================

import asyncio

import httpx
import pytest

from asset_sync.clients import CloudinaryClient, ResponseValidationError, TransportError


def run_with(settings, handler, call):
    """Run ``call(client)`` against a client backed by a MockTransport handler."""

    async def _run():
        async with CloudinaryClient(settings, transport=httpx.MockTransport(handler)) as client:
            return await call(client)

    return asyncio.run(_run())


class TestListFolders:
    def test_lists_subfolders_with_basic_auth(self, cloudinary_settings):
        seen = {}

        def handler(request):
            seen["path"] = request.url.path
            seen["auth"] = request.headers.get("authorization", "")
            return httpx.Response(
                200,
                json={
                    "folders": [
                        {"name": "agricola", "path": "Project Photos/agricola", "external_id": "x"},
                        {"name": "buhn", "path": "Project Photos/buhn"},
                    ],
                    "total_count": 2,
                },
            )

        folders = run_with(cloudinary_settings, handler, lambda c: c.list_folders("Project Photos"))

        assert [f.name for f in folders] == ["agricola", "buhn"]
        assert all(f.asset_count == 0 for f in folders)
        assert seen["path"] == "/v1_1/demo/folders/Project Photos"
        assert seen["auth"].startswith("Basic ")

    def test_error_status_raises_transport_error(self, cloudinary_settings):
        handler = lambda request: httpx.Response(401, json={"error": {"message": "Invalid key"}})

        with pytest.raises(TransportError) as exc_info:
            run_with(cloudinary_settings, handler, lambda c: c.list_folders("Project Photos"))

        assert exc_info.value.status_code == 401

    def test_network_error_raises_transport_error(self, cloudinary_settings):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(TransportError, match="failed"):
            run_with(cloudinary_settings, handler, lambda c: c.list_folders("Project Photos"))


class TestCountAssets:
    def test_uses_total_count(self, cloudinary_settings):
        seen = {}

        def handler(request):
            seen.update(request.url.params)
            return httpx.Response(200, json={"resources": [], "total_count": 42})

        count = run_with(cloudinary_settings, handler, lambda c: c.count_assets("Project Photos/agricola"))

        assert count == 42
        assert seen["asset_folder"] == "Project Photos/agricola"
        assert seen["max_results"] == "1"

    def test_missing_total_count_is_zero(self, cloudinary_settings):
        handler = lambda request: httpx.Response(200, json={"resources": []})
        assert run_with(cloudinary_settings, handler, lambda c: c.count_assets("x")) == 0


class TestListAssets:
    def test_page_with_cursor(self, cloudinary_settings):
        seen = {}

        def handler(request):
            seen.update(request.url.params)
            return httpx.Response(
                200,
                json={
                    "resources": [
                        {
                            "public_id": "p/img1",
                            "secure_url": "https://res.cloudinary.com/demo/image/upload/v1/p/img1.jpg",
                            "width": 1000,
                            "height": 667,
                            "bytes": 1234,
                            "format": "jpg",
                            "asset_folder": "Project Photos/agricola",
                            "display_name": "img1",
                            "created_at": "2025-01-02T03:04:05Z",
                        }
                    ],
                    "next_cursor": "abc",
                },
            )

        page = run_with(cloudinary_settings, handler, lambda c: c.list_assets(next_cursor="prev", max_results=500))

        assert page.next_cursor == "abc"
        assert page.resources[0].asset_folder == "Project Photos/agricola"
        assert seen == {"type": "upload", "max_results": "500", "next_cursor": "prev"}

    def test_malformed_resource_raises_validation_error(self, cloudinary_settings):
        handler = lambda request: httpx.Response(200, json={"resources": [{"public_id": "p/x"}]})

        with pytest.raises(ResponseValidationError, match="resource page"):
            run_with(cloudinary_settings, handler, lambda c: c.list_assets())

    def test_non_json_body_raises_validation_error(self, cloudinary_settings):
        handler = lambda request: httpx.Response(200, content=b"<html>maintenance</html>")

        with pytest.raises(ResponseValidationError, match="non-JSON"):
            run_with(cloudinary_settings, handler, lambda c: c.list_assets())
