# =============================================================================
# Reference Verification Stage
# =============================================================================
# Checks that every Cloudinary-backed Strapi row points at a reachable URL.
# Read-only: broken rows are reported, never changed.
# =============================================================================

import logging
from typing import Optional, Sequence

from asset_sync.batching import process_in_batches
from asset_sync.clients.errors import SyncError
from asset_sync.clients.probe import ProbeResult, UrlProbe
from asset_sync.models import BrokenReference, CatalogAsset, PipelineState, StageReport
from asset_sync.stages.assets import fetch_catalog_assets
from asset_sync.stages.base import StageContext, StageOutcome

__all__ = ["urls_to_check", "verify_references", "run_verify_references"]

logger = logging.getLogger(__name__)


def urls_to_check(row: CatalogAsset, include_formats: bool = False) -> list[str]:
    """Stored URL of the row, plus each format URL when requested."""
    urls = [row.url] if row.url else []
    if include_formats and row.formats:
        for variant in row.formats.values():
            url = variant.get("url") if isinstance(variant, dict) else None
            if url and url not in urls:
                urls.append(url)
    return urls


async def _check_row(probe: UrlProbe, row: CatalogAsset, include_formats: bool) -> Optional[BrokenReference]:
    urls = urls_to_check(row, include_formats)
    if not urls:
        return BrokenReference(id=row.id, name=row.name, url="", error="No URL stored")

    for url in urls:
        result: ProbeResult = await probe.head(url)
        if not result.ok:
            return BrokenReference(
                id=row.id,
                name=row.name,
                url=url,
                error=result.error or "unreachable",
                status_code=result.status_code,
            )
    return None


async def verify_references(
    probe: UrlProbe,
    rows: Sequence[CatalogAsset],
    *,
    batch_size: int,
    include_formats: bool = False,
) -> tuple[list[BrokenReference], int]:
    """
    Probe every row's URL in bounded batches.

    Returns:
        Tuple of (broken references, number of rows that could not be checked)
    """
    outcomes = await process_in_batches(
        rows,
        batch_size,
        lambda row: _check_row(probe, row, include_formats),
        label="URL checks",
    )

    broken: list[BrokenReference] = []
    errored = 0
    for outcome in outcomes:
        row = outcome.item
        if not outcome.ok:
            errored += 1
            logger.error(f"Could not check {row.name} (ID: {row.id}): {outcome.error}")
        elif outcome.value is None:
            logger.debug(f"  OK {row.name}")
        else:
            broken.append(outcome.value)
            logger.warning(f"  Broken {row.name} - {outcome.value.url} ({outcome.value.error})")
    return broken, errored


async def run_verify_references(state: PipelineState, ctx: StageContext) -> StageOutcome:
    if ctx.probe is None:
        raise SyncError("verify-references needs a URL probe")

    cloudinary_rows, other_rows, warnings = await fetch_catalog_assets(ctx.catalog, ctx.settings.catalog_page_size)
    logger.info(f"Checking {len(cloudinary_rows)} Cloudinary rows ({len(other_rows)} other rows ignored)")

    broken, errored = await verify_references(
        ctx.probe,
        cloudinary_rows,
        batch_size=ctx.settings.verify_batch_size,
        include_formats=ctx.settings.verify_format_urls,
    )

    if broken:
        target = ctx.store.write_report(
            ctx.store.path.parent / ctx.settings.broken_report_file,
            [reference.model_dump(mode="json") for reference in broken],
        )
        warnings.append(f"{len(broken)} broken references written to {target}")

    report = StageReport(
        stage="verify-references",
        counts={
            "checked": len(cloudinary_rows),
            "valid": len(cloudinary_rows) - len(broken) - errored,
            "broken": len(broken),
            "errors": errored,
        },
        warnings=warnings,
    )
    return StageOutcome(state=state.model_copy(update={"broken_references": broken}), report=report)
