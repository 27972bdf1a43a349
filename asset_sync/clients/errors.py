# =============================================================================
# Sync Errors
# =============================================================================
# Exception taxonomy shared by clients, stages and the pipeline runner.
# =============================================================================

from typing import Optional

__all__ = [
    "SyncError",
    "TransportError",
    "ResponseValidationError",
    "StateFileError",
    "UnknownStageError",
    "StageFailedError",
]


class SyncError(Exception):
    """Base class for all sync errors."""


class TransportError(SyncError):
    """A request failed on the network or returned a non-2xx status."""

    def __init__(self, message: str, *, url: str = "", status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class ResponseValidationError(SyncError):
    """An upstream response did not match the expected record shape."""


class StateFileError(SyncError):
    """The persisted pipeline state exists but cannot be read."""


class UnknownStageError(SyncError):
    """A stage selector matched no registered stage."""


class StageFailedError(SyncError):
    """A stage raised; carries the stage name. The original error is chained."""

    def __init__(self, stage: str, cause: BaseException) -> None:
        super().__init__(f"Stage '{stage}' failed: {cause}")
        self.stage = stage
