"""Write reviewed ALT text back to asset descriptions."""

import logging
from collections.abc import Iterable

from cms_alt_text.clients import AuthenticationError, ClientError, ContentstackClient
from cms_alt_text.usage.throttle import FixedDelayThrottle, Throttle
from schemas.update import AltTextItem, UpdateReport, UpdateResult

logger = logging.getLogger(__name__)

AI_DESCRIPTION_TAG = "ai description"
DEFAULT_UPDATE_DELAY = 0.5


class DescriptionUpdater:
    """Updates asset descriptions and marks them as AI generated.

    Each update sets the description for the item's locale and adds the
    ``ai description`` tag once. A dry run reports what would change
    without calling the CMS.
    """

    def __init__(
        self,
        client: ContentstackClient,
        dry_run: bool = False,
        throttle: Throttle | None = None,
    ):
        self.client = client
        self.dry_run = dry_run
        self.throttle = throttle or FixedDelayThrottle(DEFAULT_UPDATE_DELAY)

    async def update(self, items: Iterable[AltTextItem]) -> UpdateReport:
        """Apply every item with non-blank ALT text.

        Raises:
            AuthenticationError: If the CMS rejects the client's credentials
        """
        pending = [item for item in items if item.has_alt_text]
        logger.info(f"Found {len(pending)} images with ALT text to update")

        results: list[UpdateResult] = []
        for index, item in enumerate(pending):
            if index > 0 and not self.dry_run:
                await self.throttle.pause()

            action = "Would update" if self.dry_run else "Updating"
            logger.info(
                f"[{index + 1}/{len(pending)}] {action}: {item.filename or item.uid} ({item.locale})"
            )
            results.append(await self.update_item(item))

        successful = sum(1 for result in results if result.success)
        return UpdateReport(
            dry_run=self.dry_run,
            total=len(pending),
            successful=successful,
            failed=len(results) - successful,
            results=results,
        )

    async def update_item(self, item: AltTextItem) -> UpdateResult:
        """Update one asset, recording failure instead of raising."""
        result = UpdateResult(
            uid=item.uid,
            filename=item.filename,
            locale=item.locale,
            alt_text=item.alt_text,
            success=True,
            dry_run=self.dry_run,
        )
        if self.dry_run:
            return result

        try:
            asset = await self.client.fetch_asset(item.uid, item.locale)
            tags = list(asset.tags)
            if AI_DESCRIPTION_TAG not in tags:
                tags.append(AI_DESCRIPTION_TAG)
            await self.client.update_asset(item.uid, item.locale, item.alt_text, tags)
        except AuthenticationError:
            raise
        except ClientError as e:
            logger.error(f"  Update failed for {item.uid}: {e}")
            result.success = False
            result.error = str(e)

        return result
