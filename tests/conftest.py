"""
Shared pytest fixtures for the asset sync tests.

Provides settings, in-memory clients, a temporary state store and a stage
context factory so individual tests only describe their scenario.
"""

import pytest

from asset_sync.formats import FormatBuilder
from asset_sync.models import (
    CloudinarySettings,
    FolderMappingEntry,
    FolderStatus,
    SourceAsset,
    StrapiSettings,
    SyncSettings,
)
from asset_sync.stages.base import StageContext
from asset_sync.state_store import StateStore

from helpers import FakeCatalog, FakeSourceStore


# =============================================================================
# Settings Fixtures
# =============================================================================


@pytest.fixture
def sync_settings():
    """Sync settings with defaults, ignoring any local .env file."""
    return SyncSettings(_env_file=None)


@pytest.fixture
def cloudinary_settings():
    return CloudinarySettings(
        _env_file=None,
        cloud_name="demo",
        api_key="key",
        api_secret="secret",
    )


@pytest.fixture
def strapi_settings():
    return StrapiSettings(
        _env_file=None,
        base_url="https://cms.example.com",
        api_token="token",
    )


# =============================================================================
# Collaborator Fixtures
# =============================================================================


@pytest.fixture
def fake_source():
    return FakeSourceStore()


@pytest.fixture
def fake_catalog():
    return FakeCatalog()


@pytest.fixture
def state_store(tmp_path):
    return StateStore(tmp_path / "migration-data.json")


@pytest.fixture
def format_builder():
    return FormatBuilder(cloud_name="demo")


@pytest.fixture
def make_context(fake_source, fake_catalog, sync_settings, state_store, format_builder):
    """Factory for a StageContext over the fakes; keyword overrides win."""

    def _make(**overrides):
        values = {
            "source": fake_source,
            "catalog": fake_catalog,
            "settings": sync_settings,
            "store": state_store,
            "formats": format_builder,
        }
        values.update(overrides)
        return StageContext(**values)

    return _make


# =============================================================================
# Domain Fixtures
# =============================================================================


@pytest.fixture
def sample_asset():
    """The 1000x667 JPEG used across format and reconcile tests."""
    return SourceAsset(
        public_id="p/img1",
        url="https://res.cloudinary.com/demo/image/upload/v1758995559/p/img1.jpg",
        width=1000,
        height=667,
        bytes=204800,
        format="jpg",
        folder="agricola",
        display_name="img1",
    )


@pytest.fixture
def resolved_mapping():
    """Mapping with one existing folder, agricola -> 158."""
    return {
        "agricola": FolderMappingEntry(
            cloudinary_name="agricola",
            strapi_id=158,
            strapi_name="Agricola",
            status=FolderStatus.EXISTS,
            needs_update=True,
        )
    }
