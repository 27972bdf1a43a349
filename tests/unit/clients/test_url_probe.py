# =============================================================================
# URL Probe Unit Tests
# =============================================================================

import asyncio

import httpx

from asset_sync.clients import UrlProbe


def probe_with(handler, url):
    async def _run():
        async with UrlProbe(transport=httpx.MockTransport(handler)) as probe:
            return await probe.head(url)

    return asyncio.run(_run())


class TestUrlProbe:
    def test_ok_status(self):
        result = probe_with(lambda request: httpx.Response(200), "https://res.cloudinary.com/demo/a.jpg")
        assert result.ok
        assert result.status_code == 200

    def test_uses_head(self):
        methods = []

        def handler(request):
            methods.append(request.method)
            return httpx.Response(200)

        probe_with(handler, "https://res.cloudinary.com/demo/a.jpg")
        assert methods == ["HEAD"]

    def test_not_found_is_broken(self):
        result = probe_with(lambda request: httpx.Response(404), "https://res.cloudinary.com/demo/gone.jpg")
        assert not result.ok
        assert result.status_code == 404
        assert result.error == "HTTP 404"

    def test_network_error_is_broken_not_raised(self):
        def handler(request):
            raise httpx.ConnectTimeout("timed out", request=request)

        result = probe_with(handler, "https://res.cloudinary.com/demo/slow.jpg")
        assert not result.ok
        assert result.status_code is None
        assert "timed out" in result.error
