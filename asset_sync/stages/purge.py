# =============================================================================
# Purge Stage
# =============================================================================
# Deletes every Strapi media row so a sync can start from scratch.
# Only runs when explicitly requested.
# =============================================================================

import logging

from asset_sync.models import PipelineState, StageReport
from asset_sync.stages.base import StageContext, StageOutcome, delete_rows

__all__ = ["run_purge"]

logger = logging.getLogger(__name__)


async def run_purge(state: PipelineState, ctx: StageContext) -> StageOutcome:
    rows = await ctx.catalog.list_files(page_size=ctx.settings.catalog_page_size)
    logger.info(f"Found {len(rows)} existing media rows")
    for row in rows:
        logger.info(f"  {row.name} (ID: {row.id}) - {row.provider or 'local'}")

    if not rows or ctx.dry_run:
        report = StageReport(stage="purge", counts={"to_delete": len(rows)}, dry_run=ctx.dry_run)
        return StageOutcome(state=state, report=report)

    ctx.confirm(f"About to delete {len(rows)} media rows from Strapi")
    deleted, failed = await delete_rows(ctx.catalog, rows)

    report = StageReport(stage="purge", counts={"deleted": deleted, "failed": failed})
    new_state = state.model_copy(update={"existing_catalog_assets": []})
    return StageOutcome(state=new_state, report=report)
