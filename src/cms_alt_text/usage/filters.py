"""Select images by usage key."""

import logging
from collections.abc import Iterable

from schemas.asset import ImageAsset

logger = logging.getLogger(__name__)


def filter_images_by_keys(
    images: Iterable[ImageAsset], keys: Iterable[str]
) -> list[ImageAsset]:
    """Keep images with at least one usage under a selected key.

    Unused and unanalyzed images are always excluded. An empty key
    selection selects nothing.
    """
    selected = set(keys)
    if not selected:
        return []

    kept: list[ImageAsset] = []
    for image in images:
        if not image.usages:
            logger.debug(f"Filtering out image {image.uid} ({image.filename}): no usages")
            continue

        if any(key in selected for key in image.usage_keys):
            kept.append(image)
        else:
            logger.debug(
                f"Filtering out image {image.uid} ({image.filename}): "
                f"no matching keys in [{', '.join(image.usage_keys)}]"
            )

    return kept


def drop_unused(images: Iterable[ImageAsset]) -> list[ImageAsset]:
    """Remove images that analysis found to be unused."""
    return [image for image in images if not image.is_unused]
