"""Run-scoped caches for content type and component titles."""

import asyncio
import logging
from collections.abc import Awaitable, Callable

from cms_alt_text.clients import ClientError
from schemas.usage import TypeInfo

logger = logging.getLogger(__name__)

TypeInfoFetcher = Callable[[str], Awaitable[TypeInfo]]


class TitleCache:
    """Memoizes ``{uid, title}`` lookups for one batch run.

    Each uid is fetched at most once, including when the fetch fails: a
    failed lookup is cached as ``{uid, title: uid}`` and never retried, so
    remote calls stay bounded by the number of distinct uids. Concurrent
    callers asking for the same uncached uid share one in-flight fetch.
    Entries are never evicted, which keeps usage keys stable for the run.

    Example:
        cache = TitleCache(client.fetch_content_type_info, kind="content type")
        title = await cache.get_title("blog_post")
    """

    def __init__(self, fetch: TypeInfoFetcher, kind: str = "content type"):
        self._fetch = fetch
        self.kind = kind
        self._entries: dict[str, TypeInfo] = {}
        self._pending: dict[str, asyncio.Task] = {}

    def __contains__(self, uid: str) -> bool:
        return uid in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def seed(self, uid: str, title: str) -> None:
        """Pre-populate a title without a remote call."""
        self._entries.setdefault(uid, TypeInfo(uid=uid, title=title or uid))

    async def get(self, uid: str) -> TypeInfo:
        """Return the cached info for ``uid``, fetching it on first use."""
        if uid in self._entries:
            return self._entries[uid]

        task = self._pending.get(uid)
        if task is None:
            task = asyncio.create_task(self._load(uid))
            self._pending[uid] = task
        return await task

    async def get_title(self, uid: str) -> str:
        return (await self.get(uid)).title

    def cached_title(self, uid: str) -> str:
        """Synchronous lookup; falls back to the uid for unseen entries."""
        info = self._entries.get(uid)
        return info.title if info is not None else uid

    async def _load(self, uid: str) -> TypeInfo:
        try:
            fetched = await self._fetch(uid)
            info = TypeInfo(uid=uid, title=fetched.title or uid)
        except ClientError as e:
            logger.warning(f"Could not fetch {self.kind} {uid}, using uid as title: {e}")
            info = TypeInfo(uid=uid, title=uid)
        finally:
            self._pending.pop(uid, None)

        self._entries[uid] = info
        logger.debug(f"Cached {self.kind} {uid}: {info.title}")
        return info
