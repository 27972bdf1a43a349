# =============================================================================
# Reference Verification Stage Tests
# =============================================================================

import asyncio
import json

import httpx
import pytest

from asset_sync.clients import UrlProbe
from asset_sync.clients.errors import SyncError
from asset_sync.models import PipelineState
from asset_sync.stages.verify import run_verify_references, urls_to_check

GONE = "https://res.cloudinary.com/demo/image/upload/p/gone.jpg"


def cdn_handler(request):
    if request.url.path.endswith("gone.jpg"):
        return httpx.Response(404)
    if "slow" in request.url.path:
        raise httpx.ReadTimeout("timed out", request=request)
    return httpx.Response(200)


def run_verify(state, make_context, **overrides):
    async def _run():
        async with UrlProbe(transport=httpx.MockTransport(cdn_handler)) as probe:
            return await run_verify_references(state, make_context(probe=probe, **overrides))

    return asyncio.run(_run())


class TestUrlsToCheck:
    def test_format_urls_only_when_requested(self, fake_catalog):
        row = fake_catalog.add_row(
            "img1",
            "p/img1",
            formats={"thumbnail": {"url": "https://res.cloudinary.com/demo/t.jpg"}, "small": "garbage"},
        )
        assert urls_to_check(row) == [row.url]
        assert urls_to_check(row, include_formats=True) == [row.url, "https://res.cloudinary.com/demo/t.jpg"]


class TestRunVerifyReferences:
    def test_classifies_and_writes_report(self, fake_catalog, make_context, state_store):
        fake_catalog.add_row("ok", "p/ok")
        broken = fake_catalog.add_row("gone", "p/gone", url=GONE)
        fake_catalog.add_row("slow", "p/slow")
        fake_catalog.add_row("logo", provider="local")

        outcome = run_verify(PipelineState(), make_context)

        assert outcome.report.counts == {"checked": 3, "valid": 1, "broken": 2, "errors": 0}
        refs = {ref.name: ref for ref in outcome.state.broken_references}
        assert refs["gone"].status_code == 404
        assert refs["gone"].id == broken.id
        assert refs["slow"].status_code is None
        assert "timed out" in refs["slow"].error

        report = json.loads((state_store.path.parent / "broken-strapi-urls.json").read_text())
        assert {item["name"] for item in report} == {"gone", "slow"}
        assert fake_catalog.mutations() == []

    def test_format_urls_checked_when_enabled(self, fake_catalog, make_context, sync_settings):
        fake_catalog.add_row("img1", "p/img1", formats={"large": {"url": GONE}})
        settings = sync_settings.model_copy(update={"verify_format_urls": True})

        outcome = run_verify(PipelineState(), make_context, settings=settings)

        assert outcome.state.broken_references[0].url == GONE

    def test_all_valid_writes_no_report(self, fake_catalog, make_context, state_store):
        fake_catalog.add_row("ok", "p/ok")

        outcome = run_verify(PipelineState(), make_context)

        assert outcome.state.broken_references == []
        assert not (state_store.path.parent / "broken-strapi-urls.json").exists()

    def test_requires_probe(self, make_context):
        with pytest.raises(SyncError, match="URL probe"):
            asyncio.run(run_verify_references(PipelineState(), make_context()))
