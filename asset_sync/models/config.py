# =============================================================================
# Configuration Models Module
# =============================================================================
# Provides Pydantic Settings models for the sync:
# - CloudinarySettings: Source store credentials and endpoints
# - StrapiSettings: Catalog endpoint and bearer token
# - SyncSettings: Asset root, state file, batch sizes and policy switches
# =============================================================================

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

__all__ = [
    "CloudinarySettings",
    "StrapiSettings",
    "SyncSettings",
]


# =============================================================================
# Cloudinary Settings (Source Store)
# =============================================================================

class CloudinarySettings(BaseSettings):
    """
    Configuration for the Cloudinary Admin API.

    Maps environment variables:
    - CLOUDINARY_NAME → cloud_name
    - CLOUDINARY_KEY → api_key
    - CLOUDINARY_SECRET → api_secret
    - CLOUDINARY_API_BASE_URL → api_base_url
    - CLOUDINARY_DELIVERY_BASE_URL → delivery_base_url

    Attributes:
        cloud_name: Cloudinary cloud name
        api_key: Admin API key (basic auth username)
        api_secret: Admin API secret (basic auth password)
        api_base_url: Admin API base URL, without the cloud name
        delivery_base_url: Delivery host used to build format URLs
    """

    cloud_name: str = Field(..., validation_alias="CLOUDINARY_NAME", description="Cloudinary cloud name")
    api_key: str = Field(..., validation_alias="CLOUDINARY_KEY", description="Admin API key")
    api_secret: str = Field(..., validation_alias="CLOUDINARY_SECRET", description="Admin API secret")
    api_base_url: str = Field("https://api.cloudinary.com/v1_1", validation_alias="CLOUDINARY_API_BASE_URL", description="Admin API base URL")
    delivery_base_url: str = Field("https://res.cloudinary.com", validation_alias="CLOUDINARY_DELIVERY_BASE_URL", description="Delivery base URL")

    model_config = SettingsConfigDict(
        env_file=(".env", "cloudinary.env"),
        case_sensitive=False,
        extra="ignore",  # Ignore unrelated env vars from shared .env files
        populate_by_name=True,
    )

    @property
    def admin_url(self) -> str:
        """Admin API root for this cloud."""
        return f"{self.api_base_url.rstrip('/')}/{self.cloud_name}"


# =============================================================================
# Strapi Settings (Catalog)
# =============================================================================

class StrapiSettings(BaseSettings):
    """
    Configuration for the Strapi media library API.

    Maps environment variables:
    - STRAPI_CLOUD_BASE_URL → base_url
    - STRAPI_CLOUD_API_TOKEN → api_token
    """

    base_url: str = Field(..., validation_alias="STRAPI_CLOUD_BASE_URL", description="Strapi base URL")
    api_token: str = Field(..., validation_alias="STRAPI_CLOUD_API_TOKEN", description="Strapi API token")

    model_config = SettingsConfigDict(
        env_file=(".env", "strapi-cloud.env"),
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )


# =============================================================================
# Sync Settings (Pipeline Behaviour)
# =============================================================================

class SyncSettings(BaseSettings):
    """
    Pipeline behaviour: where assets live, where state goes, how wide batches are.

    Mutating batches are deliberately narrower than read-only ones.

    Attributes:
        asset_root: Folder in both systems beneath which synced assets live
        catalog_root_folder_id: Strapi id of the asset root folder
        state_file: Persisted PipelineState file name
        broken_report_file: File name for the broken-reference report
        mutation_batch_size: Concurrent create/update calls per batch
        refresh_batch_size: Concurrent updates per batch when refreshing formats
        read_batch_size: Concurrent read-only calls per batch
        verify_batch_size: Concurrent URL checks per batch
        source_page_size: Cloudinary page size for asset discovery
        catalog_page_size: Strapi page size for the single bulk row fetch
        request_timeout: Per-request timeout for API clients (seconds)
        verify_timeout: Per-request timeout for URL checks (seconds)
        skip_unchanged: Skip updates whose content hash is unchanged (opt-in)
        verify_format_urls: Also check every format URL during verification
    """

    asset_root: str = Field("Project Photos", validation_alias="SYNC_ASSET_ROOT")
    catalog_root_folder_id: int = Field(147, validation_alias="SYNC_CATALOG_ROOT_FOLDER_ID")
    state_file: str = Field("migration-data.json", validation_alias="SYNC_STATE_FILE")
    broken_report_file: str = Field("broken-strapi-urls.json", validation_alias="SYNC_BROKEN_REPORT_FILE")
    mutation_batch_size: int = Field(10, ge=1, validation_alias="SYNC_MUTATION_BATCH_SIZE")
    refresh_batch_size: int = Field(5, ge=1, validation_alias="SYNC_REFRESH_BATCH_SIZE")
    read_batch_size: int = Field(20, ge=1, validation_alias="SYNC_READ_BATCH_SIZE")
    verify_batch_size: int = Field(10, ge=1, validation_alias="SYNC_VERIFY_BATCH_SIZE")
    source_page_size: int = Field(500, ge=1, le=500, validation_alias="SYNC_SOURCE_PAGE_SIZE")
    catalog_page_size: int = Field(1000, ge=1, validation_alias="SYNC_CATALOG_PAGE_SIZE")
    request_timeout: float = Field(30.0, gt=0, validation_alias="SYNC_REQUEST_TIMEOUT")
    verify_timeout: float = Field(5.0, gt=0, validation_alias="SYNC_VERIFY_TIMEOUT")
    skip_unchanged: bool = Field(False, validation_alias="SYNC_SKIP_UNCHANGED")
    verify_format_urls: bool = Field(False, validation_alias="SYNC_VERIFY_FORMAT_URLS")

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )
