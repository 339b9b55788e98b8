"""Image collector for finding assets that still need ALT text."""

import logging
from collections.abc import Iterable

from cms_alt_text.clients import AuthenticationError, ClientError, ContentstackClient
from schemas.asset import Asset, ImageAsset, Locale

logger = logging.getLogger(__name__)

IMAGE_CONTENT_TYPE_PREFIX = "image/"


def default_content_types(content_types: Iterable[str]) -> list[str]:
    """The image MIME types among ``content_types``, preselected by default."""
    return [t for t in content_types if t.startswith(IMAGE_CONTENT_TYPE_PREFIX)]


class ImageCollector:
    """Collects images without a description from the CMS.

    Pages through the assets of each locale, keeping those whose MIME type
    is allowed and whose description is blank.

    Example:
        async with ContentstackClient(config) as client:
            collector = ImageCollector(client)
            images = await collector.collect(locales, ["image/jpeg", "image/png"])
    """

    def __init__(
        self,
        client: ContentstackClient,
        page_size: int = ContentstackClient.DEFAULT_PAGE_SIZE,
        max_assets: int = 5000,
    ):
        """Initialize the image collector.

        Args:
            client: Client for the CMS
            page_size: Assets requested per page
            max_assets: Upper bound on assets scanned per locale
        """
        self.client = client
        self.page_size = page_size
        self.max_assets = max_assets

    async def discover_content_types(self, locales: Iterable[Locale]) -> list[str]:
        """Sorted MIME types found on the first page of assets per locale."""
        content_types: set[str] = set()

        for locale in locales:
            try:
                assets = await self.client.list_assets(locale.code, skip=0, limit=self.page_size)
            except AuthenticationError:
                raise
            except ClientError as e:
                logger.error(f"Error discovering content types for {locale.code}: {e}")
                continue
            content_types.update(asset.content_type for asset in assets if asset.content_type)

        return sorted(content_types)

    async def collect(
        self, locales: Iterable[Locale], content_types: Iterable[str]
    ) -> list[ImageAsset]:
        """Collect undescribed images of the allowed types for every locale."""
        allowed = set(content_types)
        images: list[ImageAsset] = []

        for locale in locales:
            images.extend(await self.collect_for_locale(locale, allowed))

        return images

    async def collect_for_locale(
        self, locale: Locale, allowed: set[str]
    ) -> list[ImageAsset]:
        """Collect undescribed images for one locale.

        A failing locale is logged and contributes no images.
        """
        logger.info(f"Fetching images for {locale.name or locale.code} ({locale.code})")

        images: list[ImageAsset] = []
        skip = 0

        try:
            while skip < self.max_assets:
                page = await self.client.list_assets(locale.code, skip=skip, limit=self.page_size)
                images.extend(
                    ImageAsset.from_asset(asset, locale)
                    for asset in page
                    if self._needs_description(asset, allowed)
                )
                if len(page) < self.page_size:
                    break
                skip += self.page_size
        except AuthenticationError:
            raise
        except ClientError as e:
            logger.error(f"Error fetching images for {locale.code}: {e}")
            return []

        logger.info(f"Found {len(images)} images without description for {locale.code}")
        return images

    def _needs_description(self, asset: Asset, allowed: set[str]) -> bool:
        return (asset.content_type or "") in allowed and not asset.has_description
