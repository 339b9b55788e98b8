"""Pytest fixtures for cms-alt-text tests."""

import json
from unittest.mock import AsyncMock, MagicMock

import pytest

from cms_alt_text.clients import NotFoundError
from schemas.asset import ImageAsset
from schemas.usage import TypeInfo


@pytest.fixture
def fake_cms():
    """Factory for a CMS client double backed by in-memory data.

    Args (of the returned factory):
        references: asset uid -> raw references payload
        entries: (content type uid, entry uid, locale) -> entry document
        content_types: content type uid -> title
        components: component uid -> title

    Unknown entries, content types and components raise NotFoundError,
    like the real client does for a 404.
    """

    def make(references=None, entries=None, content_types=None, components=None):
        references = references or {}
        entries = entries or {}
        content_types = content_types or {}
        components = components or {}

        def get_references(asset_uid):
            return references.get(asset_uid, [])

        def fetch_entry(content_type_uid, entry_uid, locale):
            key = (content_type_uid, entry_uid, locale)
            if key not in entries:
                raise NotFoundError(f"Entry not found: {key}")
            return entries[key]

        def type_info(titles):
            def fetch(uid):
                if uid not in titles:
                    raise NotFoundError(f"Content type not found: {uid}")
                return TypeInfo(uid=uid, title=titles[uid])
            return fetch

        client = MagicMock()
        client.__aenter__.return_value = client
        client.__aexit__.return_value = False
        client.get_asset_references = AsyncMock(side_effect=get_references)
        client.fetch_entry = AsyncMock(side_effect=fetch_entry)
        client.fetch_content_type_info = AsyncMock(side_effect=type_info(content_types))
        client.fetch_component_info = AsyncMock(side_effect=type_info(components))
        return client

    return make


@pytest.fixture
def make_image():
    """Factory for workflow images."""

    def make(uid, locale="en-us", filename=None, **kwargs):
        return ImageAsset(
            uid=uid,
            url=f"https://images.contentstack.io/v3/assets/stack/{uid}/{filename or uid}.jpg",
            filename=filename or f"{uid}.jpg",
            locale=locale,
            **kwargs,
        )

    return make


@pytest.fixture
def blog_post_entry():
    """A blog post entry referencing img_42 from its cover image field."""
    return {
        "uid": "post_9",
        "title": "Spring launch",
        "_version": 3,
        "created_at": "2026-03-01T10:00:00.000Z",
        "updated_at": "2026-03-02T10:00:00.000Z",
        "ACL": {},
        "_owner": {"uid": "owner_1"},
        "locale": "en-us",
        "summary": "New colours for spring",
        "coverImage": "img_42",
    }


@pytest.fixture
def landing_page_entry():
    """A landing page with an asset nested two components deep."""
    return {
        "uid": "page_1",
        "title": "Home",
        "modules": [
            {
                "_content_type_uid": "cpt_banner",
                "heading": "Welcome",
                "slides": [
                    {
                        "content_type_uid": "cpt_slide",
                        "caption": "First slide",
                        "image": {
                            "uid": "img_5",
                            "url": "https://images.contentstack.io/img_5.jpg",
                        },
                    },
                ],
            },
            {
                "_content_type_uid": "cpt_text",
                "body": "<p>No images here</p>",
            },
        ],
    }


@pytest.fixture
def sample_usage():
    """A serialized usage summary as stored in usage manifests."""
    return {
        "contentTypeUid": "blog_post",
        "contentTypeTitle": "Blog Post",
        "entryUid": "post_9",
        "locale": "en-us",
        "fieldName": "coverImage",
        "key": "Blog Post.coverImage",
        "componentHierarchy": [],
    }


@pytest.fixture
def usages_file(tmp_path, sample_usage):
    """Usage manifest with one used and one unused image."""
    manifest = {
        "images": [
            {
                "uid": "img_42",
                "url": "https://images.contentstack.io/img_42.jpg",
                "filename": "cover.jpg",
                "title": "Cover",
                "locale": "en-us",
                "localeName": "English - United States",
                "usages": [sample_usage],
            },
            {
                "uid": "img_99",
                "url": "https://images.contentstack.io/img_99.jpg",
                "filename": "unused.jpg",
                "title": "",
                "locale": "en-us",
                "localeName": "English - United States",
                "usages": [],
            },
        ],
    }
    path = tmp_path / "usages.json"
    path.write_text(json.dumps(manifest, indent=2))
    return path
