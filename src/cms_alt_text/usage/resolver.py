"""Resolve which entries reference an asset and where."""

import logging
from dataclasses import dataclass, field
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from cms_alt_text.clients import AuthenticationError, ClientError, ContentstackClient
from schemas.usage import ReferenceRecord, UsagePath

from .throttle import FixedDelayThrottle, Throttle
from .walker import find_asset_paths

logger = logging.getLogger(__name__)


@dataclass
class ResolvedUsages:
    """Usage paths for one asset plus the bookkeeping behind them.

    Attributes:
        asset_uid: The asset that was resolved
        references: Reference records returned by the CMS
        skipped: Records dropped for missing a content type or entry
        unique: Distinct (content type, entry, locale) triples fetched
        failed_entries: Entries whose fetch failed
        paths: Usage paths tagged with their originating entry
    """

    asset_uid: str
    references: int = 0
    skipped: int = 0
    unique: int = 0
    failed_entries: int = 0
    paths: list[UsagePath] = field(default_factory=list)


def normalize_references(payload: Any) -> list[Any]:
    """Return the reference list from any of the CMS response shapes.

    The references endpoint has answered with a bare list, with
    ``{"references": [...]}`` and with ``{"items": [...]}``.
    """
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict):
        for key in ("references", "items"):
            if isinstance(payload.get(key), list):
                return payload[key]
    return []


def unique_references(
    records: list[ReferenceRecord], default_locale: str
) -> list[ReferenceRecord]:
    """Collapse duplicate records, keeping first-seen order.

    Records without a locale take ``default_locale`` before comparison, so a
    record that omits the locale matches one that names the image's locale.
    """
    seen: set[str] = set()
    unique: list[ReferenceRecord] = []

    for record in records:
        key = record.dedup_key(default_locale)
        if key in seen:
            continue
        seen.add(key)
        unique.append(
            record.model_copy(update={"locale": record.resolved_locale(default_locale)})
        )

    return unique


class ReferenceResolver:
    """Finds the exact fields that reference an asset.

    For each asset the resolver asks the CMS which entries reference it,
    drops unusable and duplicate records, fetches each referencing entry
    and walks it for the asset uid. Remote failures degrade to fewer usages
    instead of raising; only authentication failures propagate, since they
    mean the client itself is misconfigured.

    Example:
        resolver = ReferenceResolver(client, FixedDelayThrottle(0.2))
        paths = await resolver.find_usages("blt123", "en-us")
    """

    def __init__(self, client: ContentstackClient, throttle: Throttle | None = None):
        self.client = client
        self.throttle = throttle or FixedDelayThrottle()

    async def get_references(self, asset_uid: str) -> list[ReferenceRecord]:
        """Fetch and parse the reference records for an asset.

        Returns an empty list when the CMS call fails.
        """
        try:
            payload = await self.client.get_asset_references(asset_uid)
        except AuthenticationError:
            raise
        except ClientError as e:
            logger.warning(f"Error fetching references for asset {asset_uid}: {e}")
            return []

        records: list[ReferenceRecord] = []
        for raw in normalize_references(payload):
            if not isinstance(raw, dict):
                logger.debug(f"Ignoring non-object reference for asset {asset_uid}: {raw!r}")
                continue
            try:
                records.append(ReferenceRecord.model_validate(raw))
            except PydanticValidationError as e:
                logger.debug(f"Ignoring malformed reference for asset {asset_uid}: {e}")
        return records

    async def resolve(self, asset_uid: str, locale: str) -> ResolvedUsages:
        """Resolve every usage path of an asset.

        Args:
            asset_uid: Asset to look for
            locale: The image's locale, used for records that omit one
        """
        records = await self.get_references(asset_uid)
        result = ResolvedUsages(asset_uid=asset_uid, references=len(records))

        complete: list[ReferenceRecord] = []
        for record in records:
            if record.is_complete:
                complete.append(record)
            else:
                logger.debug(
                    f"Skipping reference for asset {asset_uid}: "
                    f"missing content type or entry uid ({record.model_dump()})"
                )
        result.skipped = len(records) - len(complete)

        unique = unique_references(complete, locale)
        result.unique = len(unique)

        for index, record in enumerate(unique):
            if index > 0:
                await self.throttle.pause()
            result.paths.extend(await self._find_in_entry(asset_uid, record, result))

        return result

    async def find_usages(self, asset_uid: str, locale: str) -> list[UsagePath]:
        """Resolve the usage paths of an asset, without bookkeeping."""
        return (await self.resolve(asset_uid, locale)).paths

    async def _find_in_entry(
        self,
        asset_uid: str,
        record: ReferenceRecord,
        result: ResolvedUsages,
    ) -> list[UsagePath]:
        content_type_uid = record.content_type_uid
        entry_uid = record.entry_uid
        locale = record.locale

        try:
            entry = await self.client.fetch_entry(content_type_uid, entry_uid, locale)
        except AuthenticationError:
            raise
        except ClientError as e:
            logger.warning(
                f"Error fetching entry {entry_uid} ({content_type_uid}, {locale}): {e}"
            )
            result.failed_entries += 1
            return []

        paths = find_asset_paths(asset_uid, entry)
        if not paths:
            logger.warning(
                f"Asset {asset_uid} not found in fields of entry {entry_uid} "
                f"({content_type_uid}, {locale})"
            )

        for path in paths:
            path.content_type_uid = content_type_uid
            path.entry_uid = entry_uid
            path.locale = locale
            logger.debug(f"Asset {asset_uid} found at {entry_uid}:{path.path}")

        return paths
