# =============================================================================
# Media Asset Sync
# =============================================================================
# Reconciles the Strapi media catalog with the Cloudinary source of truth.
# =============================================================================

"""
Media asset sync library.

Sub-packages:
- models: Pydantic records, pipeline state and settings
- clients: Async HTTP clients for Cloudinary and Strapi
- stages: Pipeline stages and the stage registry
"""

__version__ = "0.1.0"
