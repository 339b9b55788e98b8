"""Discovery of where assets are used inside CMS entries."""

from .filters import drop_unused, filter_images_by_keys
from .keys import KEY_SEPARATOR, build_key_groups, build_usage_key
from .metadata import TitleCache
from .resolver import ReferenceResolver, ResolvedUsages, normalize_references, unique_references
from .throttle import DEFAULT_REQUEST_DELAY, FixedDelayThrottle, NoThrottle, Throttle
from .walker import METADATA_KEYS, component_uid, find_asset_paths, references_asset

__all__ = [
    "DEFAULT_REQUEST_DELAY",
    "FixedDelayThrottle",
    "KEY_SEPARATOR",
    "METADATA_KEYS",
    "NoThrottle",
    "ReferenceResolver",
    "ResolvedUsages",
    "Throttle",
    "TitleCache",
    "build_key_groups",
    "build_usage_key",
    "component_uid",
    "drop_unused",
    "filter_images_by_keys",
    "find_asset_paths",
    "normalize_references",
    "references_asset",
    "unique_references",
]
