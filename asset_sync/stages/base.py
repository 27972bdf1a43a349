# =============================================================================
# Stage Base Types
# =============================================================================
# Every stage is an async transform (state, context) -> (state', report).
# =============================================================================

import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Optional, Protocol, Sequence

from asset_sync.clients.base import Catalog, SourceStore
from asset_sync.clients.probe import UrlProbe
from asset_sync.formats import FormatBuilder
from asset_sync.models import CatalogAsset, PipelineState, StageReport, SyncSettings
from asset_sync.state_store import StateStore

__all__ = ["StageContext", "StageOutcome", "StageRunner", "Stage", "no_confirm", "delete_rows"]

logger = logging.getLogger(__name__)


def no_confirm(message: str) -> None:
    """Default confirmation callback: never pauses."""


@dataclass
class StageContext:
    """
    Collaborators and switches shared by all stages of one run.

    Attributes:
        source: Cloudinary client (read-only)
        catalog: Strapi client
        settings: Sync settings (roots, batch sizes, policy switches)
        store: State store, used for report files
        probe: URL probe for verification
        dry_run: Suppress every mutating catalog call
        confirm: Called with a review prompt after a stage's output
        image_name: Restrict the format refresh to one row by name
        formats: Format builder; defaults to one for the source cloud
    """

    source: SourceStore
    catalog: Catalog
    settings: SyncSettings
    store: StateStore
    probe: Optional[UrlProbe] = None
    dry_run: bool = False
    confirm: Callable[[str], None] = no_confirm
    image_name: Optional[str] = None
    formats: Optional[FormatBuilder] = None

    def format_builder(self) -> FormatBuilder:
        if self.formats is None:
            self.formats = FormatBuilder(cloud_name=self.source.cloud_name)
        return self.formats


@dataclass(frozen=True)
class StageOutcome:
    """New state plus the report printed after the stage."""

    state: PipelineState
    report: StageReport


class StageRunner(Protocol):
    def __call__(self, state: PipelineState, ctx: StageContext) -> Awaitable[StageOutcome]:
        ...


@dataclass(frozen=True)
class Stage:
    """
    A named, numbered pipeline stage.

    Attributes:
        number: Position in the pipeline (selectable with --step N)
        name: Kebab-case name (selectable with --step NAME)
        title: Header printed before the stage runs
        run: The stage coroutine function
        default: Whether the stage is part of a full run
        review_prompt: Confirmation prompt shown after the stage
    """

    number: int
    name: str
    title: str
    run: StageRunner
    default: bool = True
    review_prompt: Optional[str] = field(default=None)


async def delete_rows(catalog: Catalog, rows: Sequence[CatalogAsset]) -> tuple[int, int]:
    """
    Delete catalog rows one at a time.

    Failures are logged and counted, never raised.

    Returns:
        Tuple of (deleted, failed)
    """
    deleted = failed = 0
    for row in rows:
        try:
            await catalog.delete_file(row.id)
        except Exception as exc:
            failed += 1
            logger.error(f"Failed to delete {row.name} (ID: {row.id}): {exc}")
            continue
        deleted += 1
        logger.info(f"Deleted {row.name} (ID: {row.id})")
    return deleted, failed
