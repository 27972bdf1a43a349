# =============================================================================
# API Clients
# =============================================================================
# Async HTTP clients for the source store (Cloudinary) and the catalog
# (Strapi), plus the unauthenticated URL probe used by verification.
# =============================================================================

from .errors import (
    SyncError,
    TransportError,
    ResponseValidationError,
    StateFileError,
    UnknownStageError,
    StageFailedError,
)
from .base import ApiClient, SourceStore, Catalog
from .cloudinary import CloudinaryClient
from .strapi import StrapiClient
from .probe import ProbeResult, UrlProbe

__all__ = [
    "SyncError",
    "TransportError",
    "ResponseValidationError",
    "StateFileError",
    "UnknownStageError",
    "StageFailedError",
    "ApiClient",
    "SourceStore",
    "Catalog",
    "CloudinaryClient",
    "StrapiClient",
    "ProbeResult",
    "UrlProbe",
]
