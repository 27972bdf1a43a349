# =============================================================================
# Pipeline State Store
# =============================================================================
# Loads and saves the PipelineState snapshot. Each save writes the whole
# aggregate atomically (temp file + rename), so a crash mid-write leaves the
# previous snapshot intact.
# =============================================================================

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from asset_sync.clients.errors import StateFileError
from asset_sync.models import PipelineState

__all__ = ["StateStore"]

logger = logging.getLogger(__name__)


def _write_atomic(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(path.suffix + ".tmp")
    tmp.write_text(text, encoding="utf-8")
    tmp.replace(path)


@dataclass
class StateStore:
    """
    File-backed store for the pipeline state.

    Attributes:
        path: Location of the state file (e.g. ./migration-data.json)
    """

    path: Path

    def load(self) -> PipelineState:
        """
        Load the last saved snapshot.

        Returns:
            The saved PipelineState, or an empty one when no file exists

        Raises:
            StateFileError: If the file exists but is not a valid snapshot
        """
        if not self.path.exists():
            logger.info(f"No existing state at {self.path}, starting fresh")
            return PipelineState()

        try:
            state = PipelineState.model_validate_json(self.path.read_text(encoding="utf-8"))
        except (OSError, ValidationError) as exc:
            raise StateFileError(f"Cannot read pipeline state from {self.path}: {exc}") from exc

        logger.info(f"Loaded pipeline state from {self.path} (last stage: {state.last_stage or 'none'})")
        return state

    def save(self, state: PipelineState) -> None:
        """Write a full snapshot of the state."""
        _write_atomic(self.path, state.model_dump_json(indent=2))
        logger.debug(f"Saved pipeline state to {self.path}")

    def write_report(self, path: Path, data: Any) -> Path:
        """Write an operator-facing JSON report next to the state file."""
        target = path if path.is_absolute() else self.path.parent / path
        _write_atomic(target, json.dumps(data, indent=2, default=str))
        logger.info(f"Report saved to {target}")
        return target
