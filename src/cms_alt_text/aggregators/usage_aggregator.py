"""Usage Aggregator for annotating images with their usages."""

import asyncio
import logging
from collections.abc import Sequence

from cms_alt_text.clients import AuthenticationError, ClientError, ContentstackClient
from cms_alt_text.config import AggregatorConfig
from cms_alt_text.usage.keys import build_key_groups, build_usage_key
from cms_alt_text.usage.metadata import TitleCache
from cms_alt_text.usage.resolver import ReferenceResolver
from cms_alt_text.usage.throttle import FixedDelayThrottle, Throttle
from schemas.asset import ImageAsset
from schemas.manifest import KeyGroup, RunSummary
from schemas.usage import ResolvedComponent, UsagePath, UsageSummary

logger = logging.getLogger(__name__)

DEFAULT_FIELD_NAME = "Image"


class UsageAggregator:
    """Annotates images with keyed usage summaries.

    One aggregator is one batch run: its content type and component title
    caches are shared by every image it analyzes and are never invalidated,
    so a uid resolves to the same title, and a usage to the same key, for
    the whole run.

    Images are analyzed in chunks of ``config.chunk_size`` running
    concurrently; entry fetches within a single image are spaced by the
    throttle. A failing image is marked unused and counted as failed
    without stopping the batch.

    Example:
        async with ContentstackClient(config) as client:
            aggregator = UsageAggregator(client)
            images = await aggregator.analyze(images)
            logger.info(aggregator.summary())
    """

    def __init__(
        self,
        client: ContentstackClient,
        config: AggregatorConfig | None = None,
        content_types: TitleCache | None = None,
        components: TitleCache | None = None,
        throttle: Throttle | None = None,
    ):
        """Initialize the usage aggregator.

        Args:
            client: Client for the CMS
            config: Batch settings (chunk size, request delay)
            content_types: Optional pre-seeded content type title cache
            components: Optional pre-seeded component title cache
            throttle: Optional throttle; defaults to the configured fixed delay
        """
        self.client = client
        self.config = config or AggregatorConfig()
        self.content_types = content_types or TitleCache(
            client.fetch_content_type_info, kind="content type"
        )
        self.components = components or TitleCache(
            client.fetch_component_info, kind="component"
        )
        self.throttle = throttle or FixedDelayThrottle(self.config.request_delay)
        self.resolver = ReferenceResolver(client, self.throttle)
        self._images: list[ImageAsset] = []
        self._failed = 0

    async def summarize_usages(self, asset_uid: str, locale: str) -> list[UsageSummary]:
        """Resolve and key every usage of one asset.

        Args:
            asset_uid: Asset to analyze
            locale: Locale of the image, used for references without one

        Returns:
            Usage summaries in reference order, then traversal order
        """
        resolved = await self.resolver.resolve(asset_uid, locale)

        summaries = [await self._summarize(path) for path in resolved.paths]

        if resolved.references and not summaries:
            logger.warning(
                f"Asset {asset_uid} has {resolved.references} references but 0 usages "
                f"(skipped: {resolved.skipped} references, "
                f"{resolved.failed_entries} failed entries)"
            )

        return summaries

    async def analyze_image(self, image: ImageAsset) -> ImageAsset:
        """Set ``image.usages``; an empty list marks the image unused."""
        locale = image.locale or self.config.default_locale
        image.usages = await self.summarize_usages(image.uid, locale)

        name = image.filename or image.uid
        if image.usages:
            logger.info(f"  {name} ({image.uid}): {len(image.usages)} usages")
        else:
            logger.info(f"  {name} ({image.uid}): no usages found")

        return image

    async def analyze(self, images: Sequence[ImageAsset]) -> list[ImageAsset]:
        """Analyze a batch of images.

        Returns the images in the order given; completion order within a
        chunk is not guaranteed, so callers should index results by uid.

        Raises:
            AuthenticationError: If the CMS rejects the client's credentials
        """
        self._images = list(images)
        self._failed = 0
        total = len(self._images)
        chunk_size = self.config.chunk_size

        logger.info(f"Analyzing usages for {total} images")

        for start in range(0, total, chunk_size):
            chunk = self._images[start:start + chunk_size]
            logger.info(f"Processing images {start + 1}-{start + len(chunk)} of {total}")
            await self._run_chunk(chunk)

        return self._images

    async def _run_chunk(self, chunk: Sequence[ImageAsset]) -> None:
        # An aborting image must not leave its siblings running on a client
        # the caller is about to close.
        tasks = [asyncio.create_task(self._analyze_isolated(image)) for image in chunk]
        try:
            await asyncio.gather(*tasks)
        except BaseException:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

    def summary(self) -> RunSummary:
        """Counts over the last ``analyze`` run."""
        analyzed = [image for image in self._images if image.is_analyzed]
        return RunSummary(
            images_analyzed=len(analyzed),
            images_with_usages=sum(1 for image in analyzed if image.usages),
            images_without_usages=sum(1 for image in analyzed if image.is_unused),
            images_failed=self._failed,
            usages_found=sum(len(image.usages) for image in analyzed),
            unique_keys=len(self.key_groups()),
        )

    def key_groups(self) -> dict[str, KeyGroup]:
        """Reverse index of the last ``analyze`` run, sorted by key."""
        return build_key_groups(self._images)

    async def _analyze_isolated(self, image: ImageAsset) -> None:
        try:
            await self.analyze_image(image)
        except AuthenticationError:
            raise
        except ClientError as e:
            logger.warning(f"Usage analysis failed for image {image.uid}: {e}")
            image.usages = []
            self._failed += 1

    async def _summarize(self, path: UsagePath) -> UsageSummary:
        content_type = await self.content_types.get(path.content_type_uid)
        for component in path.component_hierarchy:
            await self.components.get(component.uid)

        field_name = path.field_name or DEFAULT_FIELD_NAME
        key = build_usage_key(
            path.component_hierarchy,
            content_type.title,
            field_name,
            self.components.cached_title,
        )

        return UsageSummary(
            content_type_uid=path.content_type_uid,
            content_type_title=content_type.title,
            entry_uid=path.entry_uid,
            locale=path.locale,
            field_name=field_name,
            key=key,
            component_hierarchy=[
                ResolvedComponent(
                    uid=component.uid,
                    title=self.components.cached_title(component.uid),
                    field_name=component.field_name,
                )
                for component in path.component_hierarchy
            ],
        )


async def analyze_image_usage(
    client: ContentstackClient,
    asset_uid: str,
    locale: str,
    throttle: Throttle | None = None,
) -> list[UsageSummary]:
    """Analyze one image with fresh caches.

    Used for interactive review of a single image; nothing is cached
    between calls.
    """
    aggregator = UsageAggregator(client, throttle=throttle)
    return await aggregator.summarize_usages(asset_uid, locale)


async def analyze_image_usages(
    client: ContentstackClient,
    images: Sequence[ImageAsset],
    config: AggregatorConfig | None = None,
    throttle: Throttle | None = None,
) -> list[ImageAsset]:
    """Analyze a batch of images with caches shared across the batch."""
    aggregator = UsageAggregator(client, config=config, throttle=throttle)
    return await aggregator.analyze(images)
