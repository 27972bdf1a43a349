"""
Unit tests for the pipeline runner.

Covers sequential execution, per-stage snapshots, failure handling that
preserves the last good snapshot, and resuming from saved state.
"""

import asyncio
import logging

import httpx
import pytest

from asset_sync.clients import UrlProbe
from asset_sync.clients.errors import StageFailedError
from asset_sync.models import CloudinaryResourcePage, PipelineState, SourceFolder, StageReport
from asset_sync.pipeline import run_pipeline
from asset_sync.stages.base import Stage, StageOutcome
from asset_sync.stages.registry import get_stage, select_stages

from helpers import make_resource


async def _noop(state, ctx):
    return StageOutcome(state=state, report=StageReport(stage="noop"))


async def _boom(state, ctx):
    raise RuntimeError("Strapi unreachable")


class TestRunPipeline:
    def test_saves_after_each_stage(self, fake_source, state_store, make_context):
        fake_source.folders = [SourceFolder(name="agricola", path="Project Photos/agricola")]
        stages = [get_stage("discover-source-folders"), get_stage("discover-catalog-folders")]

        state, reports = asyncio.run(run_pipeline(stages, state_store, make_context()))

        saved = state_store.load()
        assert saved.last_stage == "discover-catalog-folders"
        assert saved.last_updated is not None
        assert len(saved.source_folders) == 1
        assert [r.stage for r in reports] == ["discover-source-folders", "discover-catalog-folders"]
        assert state == saved

    def test_failure_keeps_last_snapshot(self, state_store, make_context):
        state_store.save(PipelineState(last_stage="map-folders"))
        stages = [Stage(98, "ok", "OK", _noop), Stage(99, "boom", "Boom", _boom)]

        with pytest.raises(StageFailedError) as exc_info:
            asyncio.run(run_pipeline(stages, state_store, make_context()))

        assert exc_info.value.stage == "boom"
        assert isinstance(exc_info.value.__cause__, RuntimeError)
        assert state_store.load().last_stage == "ok"

    def test_confirm_called_at_review_points(self, state_store, make_context):
        prompts = []
        stages = [Stage(1, "a", "A", _noop, review_prompt="Review A"), Stage(2, "b", "B", _noop)]

        asyncio.run(run_pipeline(stages, state_store, make_context(confirm=prompts.append)))

        assert prompts == ["Review A"]

    def test_resume_single_stage_from_saved_state(self, fake_source, fake_catalog, state_store, make_context):
        fake_source.folders = [SourceFolder(name="agricola", path="Project Photos/agricola")]
        fake_source.pages = {None: CloudinaryResourcePage(resources=[make_resource("p/img1")])}
        fake_catalog.add_folder("Agricola", 158)
        asyncio.run(run_pipeline(select_stages()[:7], state_store, make_context()))

        asyncio.run(run_pipeline([get_stage("reconcile")], state_store, make_context()))

        (row,) = fake_catalog.rows.values()
        assert row.public_id == "p/img1"
        assert fake_catalog.row_folders[row.id] == 158
        assert state_store.load().last_stage == "reconcile"

    def test_full_default_run_converges(self, fake_source, fake_catalog, state_store, make_context):
        fake_source.folders = [
            SourceFolder(name="agricola", path="Project Photos/agricola"),
            SourceFolder(name="buhn", path="Project Photos/buhn"),
        ]
        fake_source.pages = {
            None: CloudinaryResourcePage(
                resources=[make_resource("p/a"), make_resource("p/b", folder="Project Photos/buhn")]
            )
        }
        fake_catalog.add_row("stale", "p/stale")

        async def _run():
            async with UrlProbe(transport=httpx.MockTransport(lambda r: httpx.Response(200))) as probe:
                return await run_pipeline(select_stages(), state_store, make_context(probe=probe))

        state, reports = asyncio.run(_run())

        assert sorted(row.public_id for row in fake_catalog.rows.values()) == ["p/a", "p/b"]
        assert state.last_stage == "deduplicate"
        assert len(reports) == 10
        assert state.broken_references == []

    def test_rerunning_reconcile_keeps_one_row_per_asset(self, fake_source, fake_catalog, state_store, make_context):
        fake_source.folders = [SourceFolder(name="agricola", path="Project Photos/agricola")]
        fake_source.pages = {None: CloudinaryResourcePage(resources=[make_resource("p/img1")])}
        asyncio.run(run_pipeline(select_stages()[:7], state_store, make_context()))

        asyncio.run(run_pipeline([get_stage("reconcile")], state_store, make_context()))
        asyncio.run(run_pipeline([get_stage("reconcile")], state_store, make_context()))

        assert len(fake_catalog.rows_for("p/img1")) == 1
        assert [row.public_id for row in state_store.load().existing_catalog_assets] == ["p/img1"]

    def test_stage_warnings_logged_once(self, fake_catalog, state_store, make_context, caplog):
        fake_catalog.add_folder("Agricola", 158)
        fake_catalog.add_folder("agricola", 160)
        stages = [get_stage("discover-catalog-folders"), get_stage("map-folders")]

        with caplog.at_level(logging.WARNING):
            asyncio.run(run_pipeline(stages, state_store, make_context()))

        warnings = [record.getMessage() for record in caplog.records if record.levelno == logging.WARNING]
        assert warnings == ["Strapi has 2 folders named 'agricola' (ids [158, 160]); using id 158"]
