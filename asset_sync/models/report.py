# =============================================================================
# Report Models
# =============================================================================
# Per-stage summaries surfaced to the operator:
# - SyncSummary: created/updated/deleted/failed counts of a mutating stage
# - BrokenReference: A catalog row whose URL failed the existence check
# - StageReport: Counts and warnings printed after each stage
# =============================================================================

from typing import Optional

from pydantic import BaseModel, Field

__all__ = ["SyncSummary", "BrokenReference", "StageReport"]


class SyncSummary(BaseModel):
    """Outcome counts of applying a set of catalog mutations."""

    created: int = 0
    updated: int = 0
    deleted: int = 0
    kept: int = 0
    skipped: int = 0
    failed: int = 0

    def as_counts(self) -> dict[str, int]:
        return self.model_dump()


class BrokenReference(BaseModel):
    """A Strapi row whose stored URL is not reachable."""

    id: int
    name: str
    url: str
    error: str
    status_code: Optional[int] = None


class StageReport(BaseModel):
    """
    Summary of one stage execution.

    Attributes:
        stage: Stage name
        counts: Named counters (e.g. created, failed, folders)
        warnings: Non-fatal conditions worth an operator's attention
        dry_run: Whether mutating calls were suppressed
    """

    stage: str
    counts: dict[str, int] = Field(default_factory=dict)
    warnings: list[str] = Field(default_factory=list)
    dry_run: bool = False

    def summary_line(self) -> str:
        """Single-line rendering used in logs and the CLI."""
        parts = [f"{key}={value}" for key, value in self.counts.items()]
        if self.warnings:
            parts.append(f"warnings={len(self.warnings)}")
        if self.dry_run:
            parts.append("dry_run")
        return f"{self.stage}: " + (", ".join(parts) if parts else "no changes")
