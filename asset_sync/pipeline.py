# =============================================================================
# Pipeline Runner
# =============================================================================
# Runs the selected stages in order, saving a state snapshot after each one.
# A failed stage leaves the last good snapshot untouched.
# =============================================================================

import logging
from datetime import datetime, timezone
from typing import Sequence

from asset_sync.clients.errors import StageFailedError
from asset_sync.models import PipelineState, StageReport
from asset_sync.stages.base import Stage, StageContext
from asset_sync.state_store import StateStore

__all__ = ["run_pipeline"]

logger = logging.getLogger(__name__)


def _log_header(stage: Stage, dry_run: bool) -> None:
    mode = " [DRY RUN]" if dry_run else ""
    logger.info("=" * 60)
    logger.info(f"STEP {stage.number}: {stage.title.upper()}{mode}")
    logger.info("=" * 60)


async def run_pipeline(
    stages: Sequence[Stage],
    store: StateStore,
    ctx: StageContext,
) -> tuple[PipelineState, list[StageReport]]:
    """
    Run stages sequentially against the persisted state.

    Args:
        stages: Stages to run, in order
        store: Where the state is loaded from and saved to
        ctx: Shared collaborators and switches

    Returns:
        Tuple of (final state, one report per stage)

    Raises:
        StageFailedError: If a stage raises; earlier stages' snapshots are kept
    """
    state = store.load()
    reports: list[StageReport] = []

    for stage in stages:
        _log_header(stage, ctx.dry_run)
        try:
            outcome = await stage.run(state, ctx)
        except Exception as exc:
            logger.error(f"Stage {stage.name} failed: {exc}")
            raise StageFailedError(stage.name, exc) from exc

        state = outcome.state.model_copy(
            update={"last_stage": stage.name, "last_updated": datetime.now(timezone.utc)}
        )
        store.save(state)
        reports.append(outcome.report)

        for warning in outcome.report.warnings:
            logger.warning(warning)
        logger.info(outcome.report.summary_line())

        if stage.review_prompt:
            ctx.confirm(stage.review_prompt)

    return state, reports
