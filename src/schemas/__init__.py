"""Schema definitions for cms-alt-text."""

from .asset import Asset, AssetDimension, ImageAsset, Locale, normalize_tag
from .base import CamelModel
from .manifest import (
    FilteredManifest,
    KeyGroup,
    KeyGroupImage,
    RunSummary,
    UsageManifest,
)
from .update import AltTextItem, UpdateReport, UpdateResult
from .usage import (
    ComponentRef,
    ReferenceRecord,
    ResolvedComponent,
    TypeInfo,
    UsagePath,
    UsageSummary,
)

__all__ = [
    "AltTextItem",
    "Asset",
    "AssetDimension",
    "CamelModel",
    "ComponentRef",
    "FilteredManifest",
    "ImageAsset",
    "KeyGroup",
    "KeyGroupImage",
    "Locale",
    "ReferenceRecord",
    "ResolvedComponent",
    "RunSummary",
    "TypeInfo",
    "UpdateReport",
    "UpdateResult",
    "UsageManifest",
    "UsagePath",
    "UsageSummary",
    "normalize_tag",
]
