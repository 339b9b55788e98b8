"""Tests for the reference resolver."""

import logging
from unittest.mock import AsyncMock, MagicMock, call

import pytest

from cms_alt_text.clients import AuthenticationError, ConnectionError
from cms_alt_text.usage.resolver import (
    ReferenceResolver,
    normalize_references,
    unique_references,
)
from cms_alt_text.usage.throttle import NoThrottle
from schemas.usage import ReferenceRecord


@pytest.fixture
def throttle():
    """A throttle double that records pauses."""
    mock = MagicMock()
    mock.pause = AsyncMock()
    return mock


class TestNormalizeReferences:
    """Tests for normalize_references."""

    def test_bare_list(self):
        """A bare list is returned as is."""
        refs = [{"entry_uid": "e1"}]

        assert normalize_references(refs) == refs

    def test_references_key(self):
        """{"references": [...]} is unwrapped."""
        assert normalize_references({"references": [{"entry_uid": "e1"}]}) == [
            {"entry_uid": "e1"}
        ]

    def test_items_key(self):
        """{"items": [...]} is unwrapped."""
        assert normalize_references({"items": [{"entry_uid": "e1"}]}) == [{"entry_uid": "e1"}]

    def test_unknown_shapes(self):
        """Anything else yields no references."""
        assert normalize_references(None) == []
        assert normalize_references({"count": 0}) == []
        assert normalize_references("references") == []


class TestUniqueReferences:
    """Tests for unique_references."""

    def test_collapses_duplicates_with_default_locale(self):
        """A record without a locale matches one naming the default locale."""
        records = [
            ReferenceRecord(content_type_uid="a", entry_uid="1", locale="en"),
            ReferenceRecord(content_type_uid="a", entry_uid="1", locale="en"),
            ReferenceRecord(content_type_uid="a", entry_uid="1"),
        ]

        unique = unique_references(records, "en")

        assert len(unique) == 1
        assert unique[0].locale == "en"

    def test_distinct_locales_are_kept(self):
        """The same entry in two locales is two references."""
        records = [
            ReferenceRecord(content_type_uid="a", entry_uid="1", locale="en"),
            ReferenceRecord(content_type_uid="a", entry_uid="1", locale="fr"),
        ]

        assert [r.locale for r in unique_references(records, "en")] == ["en", "fr"]

    def test_first_seen_order(self):
        """Order of first appearance is preserved."""
        records = [
            ReferenceRecord(content_type_uid="b", entry_uid="2"),
            ReferenceRecord(content_type_uid="a", entry_uid="1"),
            ReferenceRecord(content_type_uid="b", entry_uid="2"),
        ]

        assert [r.entry_uid for r in unique_references(records, "en")] == ["2", "1"]


class TestReferenceResolverReferences:
    """Tests for ReferenceResolver.get_references."""

    @pytest.mark.asyncio
    async def test_parses_cms_shapes(self, fake_cms):
        """References are parsed from the {"references": [...]} shape."""
        client = fake_cms(
            references={
                "img_1": {
                    "references": [
                        {"content_type_uid": "blog_post", "entry_uid": "post_1", "locale": "en-us"},
                        {"_content_type_uid": "page", "uid": "page_1"},
                    ]
                }
            }
        )
        resolver = ReferenceResolver(client, NoThrottle())

        records = await resolver.get_references("img_1")

        assert [(r.content_type_uid, r.entry_uid, r.locale) for r in records] == [
            ("blog_post", "post_1", "en-us"),
            ("page", "page_1", None),
        ]

    @pytest.mark.asyncio
    async def test_transport_error_returns_empty(self, fake_cms):
        """A failing references call yields no records."""
        client = fake_cms()
        client.get_asset_references.side_effect = ConnectionError("Network unreachable")
        resolver = ReferenceResolver(client, NoThrottle())

        assert await resolver.get_references("img_7") == []

    @pytest.mark.asyncio
    async def test_authentication_error_propagates(self, fake_cms):
        """Bad credentials are not treated as "no references"."""
        client = fake_cms()
        client.get_asset_references.side_effect = AuthenticationError()
        resolver = ReferenceResolver(client, NoThrottle())

        with pytest.raises(AuthenticationError):
            await resolver.get_references("img_1")

    @pytest.mark.asyncio
    async def test_non_object_records_are_ignored(self, fake_cms):
        """Strings and malformed records in the payload are dropped."""
        client = fake_cms(
            references={
                "img_1": [
                    "post_1",
                    {"content_type_uid": ["not", "a", "string"], "entry_uid": "post_1"},
                    {"content_type_uid": "blog_post", "entry_uid": "post_2"},
                ]
            }
        )
        resolver = ReferenceResolver(client, NoThrottle())

        records = await resolver.get_references("img_1")

        assert [r.entry_uid for r in records] == ["post_2"]


class TestReferenceResolverResolve:
    """Tests for ReferenceResolver.resolve and find_usages."""

    @pytest.mark.asyncio
    async def test_duplicate_references_fetch_once(self, fake_cms, throttle):
        """Duplicate records collapse into a single entry fetch."""
        client = fake_cms(
            references={
                "img_1": [
                    {"content_type_uid": "a", "entry_uid": "1", "locale": "en"},
                    {"content_type_uid": "a", "entry_uid": "1", "locale": "en"},
                    {"content_type_uid": "a", "entry_uid": "1"},
                ]
            },
            entries={("a", "1", "en"): {"image": "img_1"}},
        )
        resolver = ReferenceResolver(client, throttle)

        result = await resolver.resolve("img_1", "en")

        client.fetch_entry.assert_awaited_once_with("a", "1", "en")
        assert result.references == 3
        assert result.unique == 1
        assert len(result.paths) == 1
        throttle.pause.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_incomplete_references_are_skipped(self, fake_cms):
        """Records missing a content type or entry are dropped before fetching."""
        client = fake_cms(
            references={
                "img_1": [
                    {"content_type_uid": "blog_post"},
                    {"entry_uid": "post_1"},
                ]
            }
        )
        resolver = ReferenceResolver(client, NoThrottle())

        result = await resolver.resolve("img_1", "en-us")

        assert result.skipped == 2
        assert result.paths == []
        client.fetch_entry.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_paths_are_tagged_with_origin(self, fake_cms, blog_post_entry):
        """Each path carries its content type, entry and locale."""
        client = fake_cms(
            references={"img_42": [{"content_type_uid": "blog_post", "entry_uid": "post_9"}]},
            entries={("blog_post", "post_9", "en-us"): blog_post_entry},
        )
        resolver = ReferenceResolver(client, NoThrottle())

        paths = await resolver.find_usages("img_42", "en-us")

        assert len(paths) == 1
        assert paths[0].content_type_uid == "blog_post"
        assert paths[0].entry_uid == "post_9"
        assert paths[0].locale == "en-us"
        assert paths[0].field_name == "coverImage"

    @pytest.mark.asyncio
    async def test_entry_failure_degrades_single_reference(self, fake_cms, caplog):
        """A failed entry fetch loses only that reference's usages."""
        client = fake_cms(
            references={
                "img_1": [
                    {"content_type_uid": "page", "entry_uid": "missing"},
                    {"content_type_uid": "page", "entry_uid": "page_2"},
                ]
            },
            entries={("page", "page_2", "en-us"): {"banner": "img_1"}},
        )
        resolver = ReferenceResolver(client, NoThrottle())

        with caplog.at_level(logging.WARNING):
            result = await resolver.resolve("img_1", "en-us")

        assert result.failed_entries == 1
        assert [p.entry_uid for p in result.paths] == ["page_2"]
        assert "Error fetching entry missing" in caplog.text

    @pytest.mark.asyncio
    async def test_entry_authentication_error_propagates(self, fake_cms):
        """Authentication failures while fetching entries abort the resolve."""
        client = fake_cms(
            references={"img_1": [{"content_type_uid": "page", "entry_uid": "page_1"}]}
        )
        client.fetch_entry.side_effect = AuthenticationError(status_code=403)
        resolver = ReferenceResolver(client, NoThrottle())

        with pytest.raises(AuthenticationError):
            await resolver.resolve("img_1", "en-us")

    @pytest.mark.asyncio
    async def test_throttle_between_entry_fetches(self, fake_cms, throttle):
        """The throttle pauses between consecutive entry fetches."""
        client = fake_cms(
            references={
                "img_1": [
                    {"content_type_uid": "page", "entry_uid": f"page_{i}"} for i in range(3)
                ]
            },
            entries={("page", f"page_{i}", "en-us"): {"image": "img_1"} for i in range(3)},
        )
        resolver = ReferenceResolver(client, throttle)

        await resolver.resolve("img_1", "en-us")

        assert throttle.pause.await_count == 2
        assert client.fetch_entry.await_args_list == [
            call("page", f"page_{i}", "en-us") for i in range(3)
        ]

    @pytest.mark.asyncio
    async def test_missing_asset_in_entry_is_logged(self, fake_cms, caplog):
        """An entry that references the asset but has no matching field is logged."""
        client = fake_cms(
            references={"img_1": [{"content_type_uid": "page", "entry_uid": "page_1"}]},
            entries={("page", "page_1", "en-us"): {"title": "Moved"}},
        )
        resolver = ReferenceResolver(client, NoThrottle())

        with caplog.at_level(logging.WARNING):
            paths = await resolver.find_usages("img_1", "en-us")

        assert paths == []
        assert "not found in fields of entry page_1" in caplog.text
