# =============================================================================
# Format Variant Derivation
# =============================================================================
# Computes the four Strapi renditions (thumbnail/small/medium/large) of a
# Cloudinary asset as URL transformations plus aspect-preserving dimensions.
# No binary is ever produced or copied.
# =============================================================================

"""
Format variant utilities.

This module provides functions for:
- Fitting dimensions inside a bounding box without upscaling (c_limit)
- Extracting the version token from a Cloudinary delivery URL
- Building the transformation URL of each rendition
- Hashing the inputs that determine a rendition set
"""

import hashlib
import json
import math
import re
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from asset_sync.models import FORMAT_NAMES, FormatVariant, SourceAsset

__all__ = [
    "FORMAT_BOXES",
    "FormatBuilder",
    "fit_within",
    "extract_version",
    "mime_type_for",
    "extension_for",
    "content_hash",
    "has_complete_formats",
]


FORMAT_BOXES: dict[str, tuple[int, int]] = {
    "thumbnail": (156, 156),
    "small": (500, 500),
    "medium": (750, 750),
    "large": (1000, 1000),
}
"""Maximum bounding box (width, height) per rendition name."""

CROP_MODE = "limit"

_VERSION_PATTERN = re.compile(r"/v(\d+)/")


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def fit_within(width: int, height: int, max_width: int, max_height: int) -> tuple[int, int]:
    """
    Scale (width, height) to fit inside a bounding box, preserving aspect ratio.

    Mirrors Cloudinary's ``c_limit``: images already inside the box are
    returned unchanged, larger ones shrink on the limiting dimension.

    Args:
        width: Original width in pixels
        height: Original height in pixels
        max_width: Bounding box width
        max_height: Bounding box height

    Returns:
        Tuple of (width, height), each at least 1

    Raises:
        ValueError: If any dimension is not positive

    Examples:
        >>> fit_within(1000, 667, 156, 156)
        (156, 104)
        >>> fit_within(400, 600, 1000, 1000)
        (400, 600)
    """
    if width <= 0 or height <= 0 or max_width <= 0 or max_height <= 0:
        raise ValueError(
            f"Dimensions must be positive, got {width}x{height} in {max_width}x{max_height}"
        )

    if width <= max_width and height <= max_height:
        return width, height

    scale = min(max_width / width, max_height / height)
    return (
        max(1, _round_half_up(width * scale)),
        max(1, _round_half_up(height * scale)),
    )


def extract_version(url: str) -> Optional[str]:
    """
    Extract the ``v<digits>`` version token from a Cloudinary URL.

    Examples:
        >>> extract_version("https://res.cloudinary.com/demo/image/upload/v1758995559/a.jpg")
        '1758995559'
        >>> extract_version("https://res.cloudinary.com/demo/image/upload/a.jpg") is None
        True
    """
    match = _VERSION_PATTERN.search(url or "")
    return match.group(1) if match else None


def mime_type_for(file_format: str) -> str:
    fmt = file_format.lower()
    return "image/jpeg" if fmt in ("jpg", "jpeg") else f"image/{fmt}"


def extension_for(file_format: str) -> str:
    fmt = file_format.lower()
    return ".jpeg" if fmt in ("jpg", "jpeg") else f".{fmt}"


def content_hash(asset: SourceAsset) -> str:
    """
    Hash the inputs that fully determine an asset's rendition set.

    Used by the opt-in unchanged-asset short circuit of the reconciler.
    """
    payload = {
        "width": asset.width,
        "height": asset.height,
        "bytes": asset.bytes,
        "version": extract_version(asset.url),
    }
    canonical = json.dumps(payload, sort_keys=True, separators=(",", ":"))
    return "sha256:" + hashlib.sha256(canonical.encode("utf-8")).hexdigest()


def has_complete_formats(formats: Optional[Mapping[str, Any]]) -> bool:
    """True when all four renditions exist and point at Cloudinary."""
    if not formats:
        return False
    for name in FORMAT_NAMES:
        variant = formats.get(name)
        if not isinstance(variant, Mapping):
            return False
        url = variant.get("url")
        if not isinstance(url, str) or "cloudinary.com" not in url:
            return False
    return True


@dataclass(frozen=True)
class FormatBuilder:
    """
    Builds the rendition set of an asset for one Cloudinary cloud.

    Attributes:
        cloud_name: Cloudinary cloud name used in delivery URLs
        delivery_base_url: Delivery host (default: https://res.cloudinary.com)
    """

    cloud_name: str
    delivery_base_url: str = "https://res.cloudinary.com"

    def variant_url(
        self,
        public_id: str,
        file_format: str,
        box: tuple[int, int],
        version: Optional[str],
    ) -> str:
        version_segment = f"v{version}/" if version else ""
        transformation = f"c_{CROP_MODE},w_{box[0]},h_{box[1]}"
        return (
            f"{self.delivery_base_url.rstrip('/')}/{self.cloud_name}/image/upload/"
            f"{transformation}/{version_segment}{public_id}.{file_format}"
        )

    def __call__(self, asset: SourceAsset) -> dict[str, FormatVariant]:
        """
        Derive thumbnail/small/medium/large variants for an asset.

        Dimensions keep the original aspect ratio and never exceed the
        original size. Byte sizes are estimated from the area ratio.
        """
        version = extract_version(asset.url)
        mime = mime_type_for(asset.format)
        ext = extension_for(asset.format)
        original_area = asset.width * asset.height

        formats: dict[str, FormatVariant] = {}
        for name in FORMAT_NAMES:
            box = FORMAT_BOXES[name]
            width, height = fit_within(asset.width, asset.height, *box)
            size_in_bytes = _round_half_up(asset.bytes * (width * height) / original_area)
            formats[name] = FormatVariant(
                ext=ext,
                url=self.variant_url(asset.public_id, asset.format, box, version),
                hash=f"{asset.public_id}_{name}",
                mime=mime,
                name=f"{asset.display_name}_{name}",
                size=round(size_in_bytes / 1024, 2),
                width=width,
                height=height,
                size_in_bytes=size_in_bytes,
            )
        return formats
